"""ReorderService: read-compute-commit cycles against a product store.

The engine is pure; this layer owns the caller obligations around it:
serialize mutations per sector, commit each batch atomically against the
revision it was computed from, and surface ordering errors to logs.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from sector_order.config.loader import DEFAULT_LOCALE, load_messages, localized_message
from sector_order.errors import InconsistentStateError, OrderingError
from sector_order.ordering.engine import OrderBatch, ReorderEngine
from sector_order.ordering.index import Direction
from sector_order.product.core import Product
from sector_order.store.base import ProductStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReorderOutcome:
    batch: OrderBatch
    revision: int

    @property
    def committed(self) -> bool:
        return bool(self.batch)


class ReorderService:
    """Runs ReorderEngine operations against a ProductStore."""

    def __init__(
        self,
        store: ProductStore,
        engine: ReorderEngine,
        locale: str = DEFAULT_LOCALE,
        messages: dict[str, dict[str, str]] | None = None,
    ) -> None:
        self.store = store
        self.engine = engine
        self.locale = locale
        self.messages = messages if messages is not None else load_messages()
        self._sector_locks: dict[str, threading.Lock] = {
            code: threading.Lock() for code in engine.catalog.codes
        }

    @contextmanager
    def _locked(self, sectors: Iterable[str]) -> Iterator[None]:
        """Hold the locks of several sectors, always taken in catalog order."""
        wanted = set(sectors)
        locks = [self._sector_locks[code] for code in self.engine.catalog.codes if code in wanted]
        for lock in locks:
            lock.acquire()
        try:
            yield
        finally:
            for lock in reversed(locks):
                lock.release()

    def _sector_of(self, products: list[Product], product_id: str) -> str:
        product = self.engine.index.find(products, product_id)
        return self.engine.codec.decode_sector(product.order)

    def _run(
        self,
        op: str,
        sectors: Callable[[list[Product]], Iterable[str]],
        compute: Callable[[list[Product]], OrderBatch],
    ) -> ReorderOutcome:
        try:
            with self._locked(sectors(self.store.fetch_all())):
                products, revision = self.store.fetch_with_revision()
                batch = compute(products)
                if not batch:
                    return ReorderOutcome(batch, revision)
                new_revision = self.store.commit_batch(
                    batch.updates,
                    removed=batch.removed,
                    added=batch.added,
                    expected_revision=revision,
                )
        except InconsistentStateError as e:
            logger.error(
                "%s aborted: corrupted ordering in %s: %s",
                op,
                e.sector_code or "collection",
                "; ".join(e.issues),
            )
            raise
        except OrderingError as e:
            logger.info("%s rejected (%s): %s", op, e.code, e)
            raise

        logger.info("%s committed %d changes at revision %d", op, len(batch), new_revision)
        return ReorderOutcome(batch, new_revision)

    def describe(self, error: OrderingError) -> str:
        """User-facing message for an error raised by this service."""
        return localized_message(error, self.locale, self.messages)

    # -- operations --------------------------------------------------------

    def move_adjacent(self, product_id: str, direction: Direction | str) -> ReorderOutcome:
        return self._run(
            "move_adjacent",
            lambda ps: [self._sector_of(ps, product_id)],
            lambda ps: self.engine.move_adjacent(ps, product_id, direction),
        )

    def move_to_position(self, product_id: str, target_sequence: int) -> ReorderOutcome:
        return self._run(
            "move_to_position",
            lambda ps: [self._sector_of(ps, product_id)],
            lambda ps: self.engine.move_to_position(ps, product_id, target_sequence),
        )

    def change_sector(
        self, product_id: str, new_sector_code: str, target_sequence: int | None = None
    ) -> ReorderOutcome:
        return self._run(
            "change_sector",
            lambda ps: [self._sector_of(ps, product_id), new_sector_code],
            lambda ps: self.engine.change_sector(ps, product_id, new_sector_code, target_sequence),
        )

    def swap(self, product_id1: str, product_id2: str) -> ReorderOutcome:
        return self._run(
            "swap",
            lambda ps: [self._sector_of(ps, product_id1), self._sector_of(ps, product_id2)],
            lambda ps: self.engine.swap(ps, product_id1, product_id2),
        )

    def remove(self, product_id: str) -> ReorderOutcome:
        return self._run(
            "remove",
            lambda ps: [self._sector_of(ps, product_id)],
            lambda ps: self.engine.remove(ps, product_id),
        )

    def insert(
        self, new_product: Product, sector_code: str, target_sequence: int | None = None
    ) -> ReorderOutcome:
        return self._run(
            "insert",
            lambda ps: [sector_code],
            lambda ps: self.engine.insert(ps, new_product, sector_code, target_sequence),
        )

    def repair(self, sector_code: str | None = None) -> ReorderOutcome:
        return self._run(
            "repair",
            lambda ps: [sector_code] if sector_code is not None else self.engine.catalog.codes,
            lambda ps: self.engine.repair(ps, sector_code),
        )
