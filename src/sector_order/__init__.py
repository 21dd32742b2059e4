"""sector_order: sector-packed product ordering for the bakery catalog."""

from sector_order.config.loader import load_ordering_config, load_sector_catalog
from sector_order.ordering import OrderBatch, OrderCodec, ReorderEngine
from sector_order.product.core import Product, Sector, SectorCatalog

__all__ = [
    "OrderBatch",
    "OrderCodec",
    "Product",
    "ReorderEngine",
    "Sector",
    "SectorCatalog",
    "load_ordering_config",
    "load_sector_catalog",
]
