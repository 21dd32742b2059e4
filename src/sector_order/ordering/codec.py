"""Packed product order encoding.

Formula: order = sector_index * 1_000 + sequence

sector_index is the 1-based position of the sector in the catalog (two
digits), sequence is the 1-based position within the sector (three digits).
Canonical text form is five zero-padded digits, e.g. sector 2 sequence 7
-> "02007" -> 2007.
"""

from __future__ import annotations

import logging

from sector_order.config.loader import OrderingConfig
from sector_order.errors import InvalidSectorError, OutOfRangeError
from sector_order.product.core import SectorCatalog

logger = logging.getLogger(__name__)

SECTOR_MULTIPLIER = 1_000
MIN_SEQUENCE = 1
MAX_SEQUENCE = 999
SECTOR_DIGITS = 2
SEQUENCE_DIGITS = 3


class OrderCodec:
    """Encodes and decodes packed order integers against a sector catalog."""

    def __init__(
        self,
        catalog: SectorCatalog,
        strict: bool = False,
        max_sequence: int = MAX_SEQUENCE,
    ) -> None:
        if not MIN_SEQUENCE <= max_sequence <= MAX_SEQUENCE:
            raise ValueError(
                f"max_sequence must be within [{MIN_SEQUENCE}, {MAX_SEQUENCE}], "
                f"got {max_sequence}"
            )
        self.catalog = catalog
        self.strict = strict
        self.max_sequence = max_sequence

    @classmethod
    def from_config(cls, catalog: SectorCatalog, config: OrderingConfig) -> OrderCodec:
        return cls(
            catalog,
            strict=config.strict_sector_decode,
            max_sequence=config.max_sequence,
        )

    def decode_sector_index(self, order: int) -> int:
        """Raw sector prefix, without catalog fallback."""
        if order < 0:
            raise OutOfRangeError(order, 0, SECTOR_MULTIPLIER * 100 - 1, what="order")
        return order // SECTOR_MULTIPLIER

    def decode_sector(self, order: int) -> str:
        """
        Sector code for a packed order.

        An index outside the catalog falls back to the first sector. The
        fallback hides corrupted data, so it is logged; strict codecs raise
        InvalidSectorError instead.
        """
        index = self.decode_sector_index(order)
        code = self.catalog.code_at(index)
        if code is not None:
            return code

        if self.strict:
            raise InvalidSectorError(index)
        fallback = self.catalog.first.code
        logger.warning(
            "Order %s decodes to sector index %d outside catalog; using %s",
            order,
            index,
            fallback,
        )
        return fallback

    def member_sector(self, order: int) -> str | None:
        """
        Sector an order is grouped under when scanning a collection.

        Matches decode_sector, except that strict codecs return None for
        prefixes outside the catalog instead of raising.
        """
        if self.strict:
            return self.catalog.code_at(self.decode_sector_index(order))
        return self.decode_sector(order)

    def decode_sequence(self, order: int) -> int:
        if order < 0:
            raise OutOfRangeError(order, 0, SECTOR_MULTIPLIER * 100 - 1, what="order")
        return order % SECTOR_MULTIPLIER

    def decode(self, order: int) -> tuple[str, int]:
        return self.decode_sector(order), self.decode_sequence(order)

    def encode(self, sector_code: str, sequence: int) -> int:
        """Packs a sector code and sequence; rejects sequences the width cannot hold."""
        sector_index = self.catalog.index_of(sector_code)
        if not MIN_SEQUENCE <= sequence <= self.max_sequence:
            raise OutOfRangeError(sequence, MIN_SEQUENCE, self.max_sequence)
        return sector_index * SECTOR_MULTIPLIER + sequence

    def to_text(self, order: int) -> str:
        """Canonical five-digit form, e.g. 2007 -> "02007"."""
        index = self.decode_sector_index(order)
        sequence = self.decode_sequence(order)
        return f"{index:0{SECTOR_DIGITS}d}{sequence:0{SEQUENCE_DIGITS}d}"

    def from_text(self, text: str) -> int:
        text = text.strip()
        if not text.isdigit() or len(text) != SECTOR_DIGITS + SEQUENCE_DIGITS:
            raise ValueError(f"Expected {SECTOR_DIGITS + SEQUENCE_DIGITS} digits, got {text!r}")
        return int(text)

    def format_label(self, order: int) -> str:
        """Display label, e.g. 2007 -> "GFR-007"."""
        sector_code, sequence = self.decode(order)
        return f"{sector_code}-{sequence:0{SEQUENCE_DIGITS}d}"
