"""
Product snapshot files for offline audits and repairs.

CSV goes through the csv module, Parquet through pyarrow. The format is
picked from the file suffix.
"""

from __future__ import annotations

import csv
from dataclasses import asdict, fields
from pathlib import Path
from typing import Any

import pyarrow as pa
import pyarrow.parquet as pq

from sector_order.product.core import Product

SNAPSHOT_FIELDS = [f.name for f in fields(Product)]

PRODUCT_SCHEMA = pa.schema(
    [
        ("id", pa.string()),
        ("name", pa.string()),
        ("order", pa.int64()),
        ("sku", pa.string()),
        ("provider_id", pa.string()),
        ("enabled", pa.bool_()),
    ]
)

_TRUE_VALUES = {"1", "true", "yes", "y", "t"}


def _format_of(path: Path) -> str:
    suffix = path.suffix.lower()
    if suffix == ".csv":
        return "csv"
    if suffix in (".parquet", ".pq"):
        return "parquet"
    raise ValueError(f"Unsupported snapshot format: {path.name} (use .csv or .parquet)")


def _product_from_row(row: dict[str, Any]) -> Product:
    enabled = row.get("enabled", True)
    if isinstance(enabled, str):
        enabled = enabled.strip().lower() in _TRUE_VALUES
    return Product(
        id=str(row["id"]),
        name=str(row.get("name") or ""),
        order=int(row["order"]),
        sku=str(row.get("sku") or ""),
        provider_id=str(row.get("provider_id") or ""),
        enabled=bool(enabled),
    )


def write_snapshot(products: list[Product], path: str | Path) -> Path:
    """Write products to a .csv or .parquet snapshot; returns the path written."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    rows = [asdict(p) for p in products]

    if _format_of(path) == "csv":
        with open(path, "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=SNAPSHOT_FIELDS)
            writer.writeheader()
            writer.writerows(rows)
    else:
        table = pa.Table.from_pylist(rows, schema=PRODUCT_SCHEMA)
        pq.write_table(table, path)
    return path


def read_snapshot(path: str | Path) -> list[Product]:
    path = Path(path)
    if _format_of(path) == "csv":
        with open(path, newline="", encoding="utf-8") as f:
            return [_product_from_row(row) for row in csv.DictReader(f)]

    table = pq.read_table(path)
    return [_product_from_row(row) for row in table.to_pylist()]
