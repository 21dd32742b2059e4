"""Sequence compaction: renumber a sector to 1..n without changing relative order."""

from __future__ import annotations

import logging
from dataclasses import replace

import numpy as np

from sector_order.ordering.index import SectorIndex
from sector_order.product.core import Product

logger = logging.getLogger(__name__)


class SequenceCompactor:
    """Restores dense, 1-based sequences after structural changes."""

    def __init__(self, index: SectorIndex) -> None:
        self.index = index
        self.codec = index.codec

    def dense_sequences(self, sequences: np.ndarray) -> np.ndarray:
        """
        Rank-based renumbering.

        Position i receives its 1-based rank among `sequences`; ties keep
        their input order (stable argsort).
        """
        ranks = np.empty(len(sequences), dtype=np.int64)
        ranks[np.argsort(sequences, kind="stable")] = np.arange(1, len(sequences) + 1)
        return ranks

    def compact(self, products: list[Product], sector_code: str) -> list[Product]:
        """
        Full collection with `sector_code` renumbered 1..n.

        Products outside the sector are returned as-is, in input order.
        Already-dense sectors come back unchanged.
        """
        # Validates the code even when the sector is empty
        self.index.catalog.index_of(sector_code)

        positions = [
            i for i, p in enumerate(products)
            if self.codec.member_sector(p.order) == sector_code
        ]
        if not positions:
            return list(products)

        sequences = np.array(
            [self.codec.decode_sequence(products[i].order) for i in positions],
            dtype=np.int64,
        )
        dense = self.dense_sequences(sequences)

        result = list(products)
        renumbered = 0
        for i, seq in zip(positions, dense):
            new_order = self.codec.encode(sector_code, int(seq))
            if new_order != result[i].order:
                result[i] = replace(result[i], order=new_order)
                renumbered += 1

        if renumbered:
            logger.debug("Compacted %s: %d of %d products renumbered", sector_code, renumbered, len(positions))
        return result

    def compact_all(self, products: list[Product]) -> list[Product]:
        """Compacts every catalog sector."""
        result = list(products)
        for code in self.index.catalog.codes:
            result = self.compact(result, code)
        return result
