"""
Product Ordering Audit Runner.

Usage:
    python run_audit.py --snapshot data/products.csv              # Audit a snapshot
    python run_audit.py --snapshot data/products.parquet --repair # Compact every sector
    python run_audit.py --demo 60                                 # Audit a generated catalog
"""

import argparse
import logging
import sys
from pathlib import Path

from sector_order.audit.report import OrderAuditor
from sector_order.audit.verify import verify_snapshot
from sector_order.config.loader import load_ordering_config, load_sector_catalog
from sector_order.generators.catalog import BakeryProductGenerator
from sector_order.ordering.engine import ReorderEngine
from sector_order.store.snapshot import read_snapshot, write_snapshot

logger = logging.getLogger("audit")


def main(argv: list[str] | None = None) -> int:
    """Audit (and optionally repair) the ordering of a product snapshot."""
    parser = argparse.ArgumentParser(
        description="Product Ordering Audit Runner",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run_audit.py --demo 40 --corrupt 3            # Broken demo catalog
  python run_audit.py --snapshot products.csv --repair --output fixed.parquet
        """,
    )

    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--snapshot",
        type=Path,
        help="Product snapshot to audit (.csv or .parquet)",
    )
    source.add_argument(
        "--demo",
        type=int,
        metavar="N",
        help="Generate N demo products instead of reading a snapshot",
    )

    parser.add_argument(
        "--catalog",
        type=Path,
        default=None,
        help="Sector catalog JSON (default: bundled sector_catalog.json)",
    )
    parser.add_argument(
        "--corrupt",
        type=int,
        default=0,
        help="Inject N ordering faults into the demo catalog (default: 0)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=42,
        help="Random seed for --demo (default: 42)",
    )
    parser.add_argument(
        "--repair",
        action="store_true",
        help="Compact every sector and report the renumbered products",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write the (repaired) products to this snapshot file",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Debug logging",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    catalog = load_sector_catalog(args.catalog)
    engine = ReorderEngine(catalog, load_ordering_config(args.catalog))
    auditor = OrderAuditor(engine.index)

    if args.snapshot is not None:
        logger.info("Reading snapshot %s", args.snapshot)
        products = read_snapshot(args.snapshot)
        for violation in verify_snapshot(args.snapshot, catalog):
            logger.warning("  %s", violation)
    else:
        generator = BakeryProductGenerator(catalog, seed=args.seed)
        products = generator.generate_products(args.demo)
        if args.corrupt:
            products = generator.corrupt(products, args.corrupt)
        logger.info("Generated %d demo products (%d faults)", len(products), args.corrupt)

    print("\n" + auditor.sector_frame(products).to_string(index=False) + "\n")
    report = auditor.get_report(products)
    print(f"Status: {report['status']}")
    if report["invalid_values"]:
        print(f"Invalid order values: {', '.join(report['invalid_values'])}")

    if args.repair:
        batch = engine.repair(products)
        for p in batch.changed:
            print(f"  {p.id:<12} -> {engine.codec.format_label(p.order)}")
        products = batch.apply(products)
        print(f"Repair renumbered {len(batch)} products")
        report = auditor.get_report(products)
        print(f"Status after repair: {report['status']}")

    if args.output is not None:
        path = write_snapshot(products, args.output)
        logger.info("Snapshot written to %s", path)

    return 0 if report["status"] == "OK" else 1


if __name__ == "__main__":
    sys.exit(main())
