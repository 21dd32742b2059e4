"""Generators module for demo product catalogs."""

from sector_order.generators.catalog import BAKERY_ITEMS, BakeryProductGenerator

__all__ = ["BAKERY_ITEMS", "BakeryProductGenerator"]
