"""Ordering module: packed order codec, sector views, compaction and reordering."""

from sector_order.ordering.codec import OrderCodec
from sector_order.ordering.compactor import SequenceCompactor
from sector_order.ordering.engine import OrderBatch, ReorderEngine
from sector_order.ordering.index import Direction, SectorIndex
from sector_order.ordering.validator import OrderValidator

__all__ = [
    "Direction",
    "OrderBatch",
    "OrderCodec",
    "OrderValidator",
    "ReorderEngine",
    "SectorIndex",
    "SequenceCompactor",
]
