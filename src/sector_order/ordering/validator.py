from __future__ import annotations

from collections.abc import Iterable, Sequence

import numpy as np

from sector_order.errors import InconsistentStateError, ValidationError
from sector_order.ordering.codec import MIN_SEQUENCE
from sector_order.ordering.index import SectorIndex
from sector_order.product.core import Product


class OrderValidator:
    """Structural checks on single order values and on whole sectors."""

    def __init__(self, index: SectorIndex) -> None:
        self.index = index
        self.codec = index.codec
        self.catalog = index.catalog

    def validate_value(
        self,
        order: int,
        products: Iterable[Product] | None = None,
        current_product_id: str | None = None,
    ) -> ValidationError | None:
        """
        Returns the first problem with a proposed order value, or None.

        The sector is checked on the raw prefix so that values the codec
        would silently map to the first sector are still reported.
        """
        if order < 0:
            return ValidationError(f"Order {order} is negative", code="OUT_OF_RANGE")

        sector_index = self.codec.decode_sector_index(order)
        if self.catalog.code_at(sector_index) is None:
            return ValidationError(
                f"Sector index {sector_index} is not in the catalog",
                field="sector",
                code="INVALID_SECTOR",
            )

        sequence = self.codec.decode_sequence(order)
        if not MIN_SEQUENCE <= sequence <= self.codec.max_sequence:
            return ValidationError(
                f"Sequence {sequence} outside [{MIN_SEQUENCE}, {self.codec.max_sequence}]",
                field="sequence",
                code="INVALID_SEQUENCE",
            )

        if products is not None:
            for p in products:
                if p.order == order and p.id != current_product_id:
                    return ValidationError(
                        f"Order {order} already held by {p.id}",
                        code="DUPLICATE_ORDER",
                    )
        return None

    def _sector_sequences(self, products: Iterable[Product], sector_code: str) -> np.ndarray:
        members = self.index.products_in_sector(products, sector_code)
        return np.array([self.codec.decode_sequence(p.order) for p in members], dtype=np.int64)

    def sector_issues(self, products: Iterable[Product], sector_code: str) -> list[str]:
        """Human-readable list of duplicates and gaps in a sector."""
        sequences = self._sector_sequences(products, sector_code)
        if len(sequences) == 0:
            return []

        issues: list[str] = []
        values, counts = np.unique(sequences, return_counts=True)
        for value in values[counts > 1]:
            issues.append(f"duplicate sequence {int(value)}")

        expected = np.arange(1, len(sequences) + 1)
        missing = np.setdiff1d(expected, values)
        if len(missing):
            issues.append(f"missing sequences {[int(m) for m in missing]}")
        extra = np.setdiff1d(values, expected)
        if len(extra):
            issues.append(f"sequences beyond {len(sequences)}: {[int(e) for e in extra]}")
        return issues

    def validate_sector_consistency(self, products: Iterable[Product], sector_code: str) -> bool:
        """True when the sector's sequences are exactly {1..n}."""
        sequences = self._sector_sequences(products, sector_code)
        return bool(np.array_equal(sequences, np.arange(1, len(sequences) + 1)))

    def validate_uniqueness(self, products: Iterable[Product]) -> bool:
        orders = np.array([p.order for p in products], dtype=np.int64)
        return len(np.unique(orders)) == len(orders)

    def duplicate_orders(self, products: Iterable[Product]) -> list[int]:
        orders = np.array([p.order for p in products], dtype=np.int64)
        values, counts = np.unique(orders, return_counts=True)
        return [int(v) for v in values[counts > 1]]

    def ensure_consistent(self, products: Sequence[Product], sector_codes: Iterable[str]) -> None:
        """
        Raises InconsistentStateError on the first broken sector, or when two
        products of the checked sectors share an order value.
        """
        sector_codes = list(sector_codes)
        for code in sector_codes:
            issues = self.sector_issues(products, code)
            if issues:
                raise InconsistentStateError(code, issues)

        checked = set(sector_codes)
        members = [p for p in products if self.codec.member_sector(p.order) in checked]
        duplicates = self.duplicate_orders(members)
        if duplicates:
            raise InconsistentStateError(None, [f"order {d} assigned to several products" for d in duplicates])
