from __future__ import annotations

import enum
from collections.abc import Iterable, Sequence

from sector_order.errors import ProductNotFoundError
from sector_order.ordering.codec import OrderCodec
from sector_order.product.core import Product


class Direction(enum.Enum):
    PREV = "prev"
    NEXT = "next"


class SectorIndex:
    """
    Per-sector ordered views over a product collection.

    Every positioning operation reads the current state through here.
    """

    def __init__(self, codec: OrderCodec) -> None:
        self.codec = codec
        self.catalog = codec.catalog

    def products_in_sector(self, products: Iterable[Product], sector_code: str) -> list[Product]:
        """Products of one sector sorted by sequence (stable on ties)."""
        # Raises InvalidSectorError for unknown codes
        self.catalog.index_of(sector_code)
        members = [p for p in products if self.codec.member_sector(p.order) == sector_code]
        return sorted(members, key=lambda p: self.codec.decode_sequence(p.order))

    def group_by_sector(self, products: Iterable[Product]) -> dict[str, list[Product]]:
        """
        Every catalog sector (in catalog order) mapped to its sorted products.

        Products a strict codec cannot place are left out.
        """
        groups: dict[str, list[Product]] = {code: [] for code in self.catalog.codes}
        for p in products:
            code = self.codec.member_sector(p.order)
            if code is not None:
                groups[code].append(p)
        for members in groups.values():
            members.sort(key=lambda p: self.codec.decode_sequence(p.order))
        return groups

    def find(self, products: Iterable[Product], product_id: str) -> Product:
        for p in products:
            if p.id == product_id:
                return p
        raise ProductNotFoundError(product_id)

    def adjacent_products(
        self, products: Sequence[Product], product: Product
    ) -> tuple[Product | None, Product | None]:
        """Immediate (prev, next) neighbours of a product inside its sector."""
        sector_code = self.codec.decode_sector(product.order)
        members = self.products_in_sector(products, sector_code)
        ids = [p.id for p in members]
        if product.id not in ids:
            return None, None

        pos = ids.index(product.id)
        prev_product = members[pos - 1] if pos > 0 else None
        next_product = members[pos + 1] if pos < len(members) - 1 else None
        return prev_product, next_product

    def neighbour(
        self, products: Sequence[Product], product: Product, direction: Direction
    ) -> Product | None:
        prev_product, next_product = self.adjacent_products(products, product)
        return prev_product if direction is Direction.PREV else next_product

    def can_move(
        self, products: Sequence[Product], product_id: str, direction: Direction | str
    ) -> bool:
        product = self.find(products, product_id)
        return self.neighbour(products, product, Direction(direction)) is not None

    def sector_count(self, products: Iterable[Product], sector_code: str) -> int:
        return len(self.products_in_sector(products, sector_code))

    def next_available_order(self, products: Iterable[Product], sector_code: str) -> int:
        """Order value of the append slot at the end of a sector."""
        return self.codec.encode(sector_code, self.sector_count(products, sector_code) + 1)
