"""Snapshot verification straight from the file.

1. Duplicate orders: no two rows share an order value
2. Sequence density: every sector prefix holds exactly 1..n
3. Sector range: every prefix falls inside the catalog

Runs in DuckDB so large exports are checked without loading them into
Product objects first.
"""

from __future__ import annotations

import logging
from pathlib import Path

import duckdb

from sector_order.ordering.codec import SECTOR_MULTIPLIER
from sector_order.product.core import SectorCatalog

logger = logging.getLogger(__name__)


def _reader(path: Path) -> str:
    suffix = path.suffix.lower()
    if suffix == ".csv":
        return f"read_csv_auto('{path.as_posix()}', header=true)"
    if suffix in (".parquet", ".pq"):
        return f"read_parquet('{path.as_posix()}')"
    raise ValueError(f"Unsupported snapshot format: {path.name} (use .csv or .parquet)")


def verify_snapshot(path: str | Path, catalog: SectorCatalog) -> list[str]:
    """Run all checks and return the violations found (empty when clean)."""
    path = Path(path)
    violations: list[str] = []

    db = duckdb.connect()
    try:
        db.execute(
            f"""
            CREATE TABLE products AS
            SELECT CAST(id AS VARCHAR) AS id,
                   CAST("order" AS BIGINT) AS ord,
                   CAST("order" AS BIGINT) // {SECTOR_MULTIPLIER} AS sector_index,
                   CAST("order" AS BIGINT) % {SECTOR_MULTIPLIER} AS seq
            FROM {_reader(path)}
            """
        )

        # ── 1. Duplicate orders ───────────────────────────────────
        for ord_value, n in db.execute(
            "SELECT ord, COUNT(*) FROM products GROUP BY ord HAVING COUNT(*) > 1 ORDER BY ord"
        ).fetchall():
            violations.append(f"order {ord_value} used by {n} products")

        # ── 2. Sequence density per sector prefix ─────────────────
        for sector_index, n, distinct_seqs, lo, hi in db.execute(
            """
            SELECT sector_index, COUNT(*), COUNT(DISTINCT seq), MIN(seq), MAX(seq)
            FROM products
            GROUP BY sector_index
            ORDER BY sector_index
            """
        ).fetchall():
            if distinct_seqs != n or lo != 1 or hi != n:
                label = catalog.code_at(sector_index) or f"#{sector_index}"
                violations.append(
                    f"sector {label}: {n} products span sequences {lo}..{hi} "
                    f"({distinct_seqs} distinct)"
                )

        # ── 3. Sector prefix inside catalog ───────────────────────
        for product_id, ord_value in db.execute(
            "SELECT id, ord FROM products WHERE sector_index < 1 OR sector_index > ? ORDER BY id",
            [len(catalog)],
        ).fetchall():
            violations.append(f"product {product_id}: order {ord_value} outside sector catalog")
    finally:
        db.close()

    logger.info("Snapshot %s verified: %d violations", path.name, len(violations))
    return violations
