"""Store module: product persistence collaborators and snapshot files."""

from sector_order.store.base import ProductStore
from sector_order.store.memory import InMemoryProductStore
from sector_order.store.snapshot import read_snapshot, write_snapshot

__all__ = ["InMemoryProductStore", "ProductStore", "read_snapshot", "write_snapshot"]
