"""ReorderEngine: positional mutations over an immutable product snapshot.

Each operation reads the current sector state through SectorIndex, computes
new sequences, funnels the touched sectors through SequenceCompactor and
checks them with OrderValidator before returning an OrderBatch. Nothing is
returned when a check fails: the caller gets a complete batch or an error.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace

from sector_order.config.loader import OrderingConfig
from sector_order.errors import CrossSectorSwapError, OutOfRangeError
from sector_order.ordering.codec import SECTOR_MULTIPLIER, OrderCodec
from sector_order.ordering.compactor import SequenceCompactor
from sector_order.ordering.index import Direction, SectorIndex
from sector_order.ordering.validator import OrderValidator
from sector_order.product.core import Product, SectorCatalog

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrderBatch:
    """
    Everything one mutation changes; must be persisted atomically.

    Attributes:
        changed: Existing products whose order value changed (new values)
        removed: IDs of products deleted by the mutation
        added: New products, carrying their assigned order
    """

    changed: tuple[Product, ...] = ()
    removed: tuple[str, ...] = ()
    added: tuple[Product, ...] = ()

    @property
    def updates(self) -> dict[str, int]:
        """product_id -> new order for existing products."""
        return {p.id: p.order for p in self.changed}

    @property
    def is_empty(self) -> bool:
        return not (self.changed or self.removed or self.added)

    def __len__(self) -> int:
        return len(self.changed) + len(self.removed) + len(self.added)

    def __bool__(self) -> bool:
        return not self.is_empty

    def apply(self, products: Iterable[Product]) -> list[Product]:
        """Resulting full collection once the batch is committed."""
        updates = self.updates
        removed = set(self.removed)
        result = [
            replace(p, order=updates[p.id]) if p.id in updates else p
            for p in products
            if p.id not in removed
        ]
        result.extend(self.added)
        return result


class ReorderEngine:
    """Computes order batches for insert, move, swap, sector change and delete."""

    def __init__(self, catalog: SectorCatalog, config: OrderingConfig | None = None) -> None:
        self.catalog = catalog
        self.config = config or OrderingConfig()
        self.codec = OrderCodec.from_config(catalog, self.config)
        self.index = SectorIndex(self.codec)
        self.compactor = SequenceCompactor(self.index)
        self.validator = OrderValidator(self.index)

    # -- helpers -----------------------------------------------------------

    def _sector_of(self, product: Product) -> str:
        return self.codec.decode_sector(product.order)

    def _sequence_of(self, product: Product) -> int:
        return self.codec.decode_sequence(product.order)

    def _diff(
        self,
        before: Sequence[Product],
        after: Sequence[Product],
        removed: tuple[str, ...] = (),
        added_ids: tuple[str, ...] = (),
    ) -> OrderBatch:
        previous = {p.id: p.order for p in before}
        changed = tuple(
            p for p in after
            if p.id in previous and p.id not in added_ids and previous[p.id] != p.order
        )
        added = tuple(p for p in after if p.id in added_ids)
        return OrderBatch(changed=changed, removed=removed, added=added)

    def _finish(
        self,
        op: str,
        before: Sequence[Product],
        after: list[Product],
        sectors: Iterable[str],
        removed: tuple[str, ...] = (),
        added_ids: tuple[str, ...] = (),
    ) -> OrderBatch:
        """Compact, validate and diff the touched sectors."""
        sectors = list(dict.fromkeys(sectors))
        for code in sectors:
            after = self.compactor.compact(after, code)
        self.validator.ensure_consistent(after, sectors)

        batch = self._diff(before, after, removed=removed, added_ids=added_ids)
        logger.debug("%s on %s: %d updates in batch", op, ",".join(sectors), len(batch))
        return batch

    def _adopt_orphans(self, products: list[Product], sector_code: str) -> list[Product]:
        """Re-prefix out-of-catalog products into `sector_code`, keeping their raw sequence."""
        base = self.catalog.index_of(sector_code) * SECTOR_MULTIPLIER
        result: list[Product] = []
        orphans: list[str] = []
        for p in products:
            if self.codec.member_sector(p.order) is None:
                orphans.append(p.id)
                p = replace(p, order=base + self.codec.decode_sequence(p.order))
            result.append(p)

        if orphans:
            logger.warning(
                "Repair moving %d products outside catalog into %s: %s",
                len(orphans),
                sector_code,
                ", ".join(orphans),
            )
        return result

    def _check_position(self, target_sequence: int, high: int) -> None:
        if not 1 <= target_sequence <= high:
            raise OutOfRangeError(target_sequence, 1, high, what="position")

    # -- operations --------------------------------------------------------

    def move_adjacent(
        self, products: Sequence[Product], product_id: str, direction: Direction | str
    ) -> OrderBatch:
        """Swap a product with its neighbour; empty batch at the sector boundary."""
        direction = Direction(direction)
        product = self.index.find(products, product_id)
        sector = self._sector_of(product)
        self.validator.ensure_consistent(products, [sector])

        neighbour = self.index.neighbour(products, product, direction)
        if neighbour is None:
            logger.debug("%s already at %s boundary of %s", product_id, direction.value, sector)
            return OrderBatch()

        swapped = {product.id: neighbour.order, neighbour.id: product.order}
        after = [replace(p, order=swapped[p.id]) if p.id in swapped else p for p in products]
        return self._finish("move_adjacent", products, after, [sector])

    def move_to_position(
        self, products: Sequence[Product], product_id: str, target_sequence: int
    ) -> OrderBatch:
        """Move within the current sector, shifting the products in between by one."""
        product = self.index.find(products, product_id)
        sector = self._sector_of(product)
        self.validator.ensure_consistent(products, [sector])

        members = self.index.products_in_sector(products, sector)
        self._check_position(target_sequence, len(members))

        current = self._sequence_of(product)
        if target_sequence == current:
            return OrderBatch()

        new_orders: dict[str, int] = {product.id: self.codec.encode(sector, target_sequence)}
        for p in members:
            if p.id == product.id:
                continue
            seq = self._sequence_of(p)
            if target_sequence < current and target_sequence <= seq < current:
                new_orders[p.id] = self.codec.encode(sector, seq + 1)
            elif target_sequence > current and current < seq <= target_sequence:
                new_orders[p.id] = self.codec.encode(sector, seq - 1)

        after = [replace(p, order=new_orders[p.id]) if p.id in new_orders else p for p in products]
        return self._finish("move_to_position", products, after, [sector])

    def change_sector(
        self,
        products: Sequence[Product],
        product_id: str,
        new_sector_code: str,
        target_sequence: int | None = None,
    ) -> OrderBatch:
        """
        Move a product into another sector.

        The old sector closes the vacated slot; the new sector makes room at
        `target_sequence` (default: append). Targeting the current sector is
        a plain move_to_position, defaulting to the last slot.
        """
        self.catalog.index_of(new_sector_code)
        product = self.index.find(products, product_id)
        old_sector = self._sector_of(product)

        if old_sector == new_sector_code:
            if target_sequence is None:
                target_sequence = self.index.sector_count(products, old_sector)
            return self.move_to_position(products, product_id, target_sequence)

        self.validator.ensure_consistent(products, [old_sector, new_sector_code])
        dest_count = self.index.sector_count(products, new_sector_code)
        if target_sequence is None:
            target_sequence = dest_count + 1
        self._check_position(target_sequence, dest_count + 1)

        old_seq = self._sequence_of(product)
        after: list[Product] = []
        for p in products:
            if p.id == product.id:
                after.append(replace(p, order=self.codec.encode(new_sector_code, target_sequence)))
                continue
            sector = self.codec.member_sector(p.order)
            seq = self.codec.decode_sequence(p.order)
            if sector == old_sector and seq > old_seq:
                after.append(replace(p, order=self.codec.encode(old_sector, seq - 1)))
            elif sector == new_sector_code and seq >= target_sequence:
                after.append(replace(p, order=self.codec.encode(new_sector_code, seq + 1)))
            else:
                after.append(p)

        return self._finish("change_sector", products, after, [old_sector, new_sector_code])

    def swap(self, products: Sequence[Product], product_id1: str, product_id2: str) -> OrderBatch:
        """Exchange the order values of two products of the same sector."""
        first = self.index.find(products, product_id1)
        second = self.index.find(products, product_id2)
        sector1 = self._sector_of(first)
        sector2 = self._sector_of(second)
        if sector1 != sector2:
            raise CrossSectorSwapError(product_id1, sector1, product_id2, sector2)
        if product_id1 == product_id2:
            return OrderBatch()

        self.validator.ensure_consistent(products, [sector1])
        swapped = {first.id: second.order, second.id: first.order}
        after = [replace(p, order=swapped[p.id]) if p.id in swapped else p for p in products]
        return self._finish("swap", products, after, [sector1])

    def remove(self, products: Sequence[Product], product_id: str) -> OrderBatch:
        """Delete a product's slot and close the gap in its sector."""
        product = self.index.find(products, product_id)
        sector = self._sector_of(product)
        self.validator.ensure_consistent(products, [sector])

        after = [p for p in products if p.id != product_id]
        return self._finish("remove", products, after, [sector], removed=(product_id,))

    def insert(
        self,
        products: Sequence[Product],
        new_product: Product,
        sector_code: str,
        target_sequence: int | None = None,
    ) -> OrderBatch:
        """Place a new product at `target_sequence` (default: append)."""
        self.catalog.index_of(sector_code)
        if any(p.id == new_product.id for p in products):
            raise ValueError(f"Product {new_product.id} already exists")
        self.validator.ensure_consistent(products, [sector_code])

        count = self.index.sector_count(products, sector_code)
        if target_sequence is None:
            target_sequence = count + 1
        self._check_position(target_sequence, count + 1)

        after: list[Product] = []
        for p in products:
            sector = self.codec.member_sector(p.order)
            seq = self.codec.decode_sequence(p.order)
            if sector == sector_code and seq >= target_sequence:
                after.append(replace(p, order=self.codec.encode(sector_code, seq + 1)))
            else:
                after.append(p)
        after.append(replace(new_product, order=self.codec.encode(sector_code, target_sequence)))

        return self._finish("insert", products, after, [sector_code], added_ids=(new_product.id,))

    def repair(self, products: Sequence[Product], sector_code: str | None = None) -> OrderBatch:
        """
        Compact one sector (or all of them) regardless of its current state.

        The recovery path for data that fails the consistency pre-checks.
        On strict codecs, products whose prefix is outside the catalog are
        renumbered into the first sector, as the lenient decode would place
        them, whenever that sector is repaired.
        """
        sectors = [sector_code] if sector_code is not None else list(self.catalog.codes)
        after = list(products)
        first = self.catalog.first.code
        if self.codec.strict and first in sectors:
            after = self._adopt_orphans(after, first)
        batch = self._finish("repair", products, after, sectors)
        if batch:
            logger.info("Repair renumbered %d products", len(batch))
        return batch
