from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Mapping
from dataclasses import replace

from sector_order.errors import ProductNotFoundError, StaleRevisionError
from sector_order.product.core import Product
from sector_order.store.base import ChangeListener, ProductStore, Unsubscribe

logger = logging.getLogger(__name__)


class InMemoryProductStore(ProductStore):
    """
    Thread-safe in-process store.

    Stands in for the realtime database: commits are all-or-nothing and
    listeners are notified outside the lock once the commit has landed.
    """

    def __init__(self, products: Iterable[Product] = ()) -> None:
        self._lock = threading.Lock()
        self._products: dict[str, Product] = {}
        for p in products:
            if p.id in self._products:
                raise ValueError(f"Product {p.id} already exists")
            self._products[p.id] = p
        self._revision = 0
        self._listeners: list[ChangeListener] = []

    @property
    def revision(self) -> int:
        return self._revision

    def fetch_all(self) -> list[Product]:
        with self._lock:
            return list(self._products.values())

    def fetch_with_revision(self) -> tuple[list[Product], int]:
        """Snapshot and the revision it was taken at, read under one lock."""
        with self._lock:
            return list(self._products.values()), self._revision

    def commit_batch(
        self,
        updates: Mapping[str, int],
        *,
        removed: Iterable[str] = (),
        added: Iterable[Product] = (),
        expected_revision: int | None = None,
    ) -> int:
        removed = list(removed)
        added = list(added)

        with self._lock:
            if expected_revision is not None and expected_revision != self._revision:
                raise StaleRevisionError(expected_revision, self._revision)

            # Validate everything before touching state
            for product_id in list(updates) + removed:
                if product_id not in self._products:
                    raise ProductNotFoundError(product_id)
            for p in added:
                if p.id in self._products:
                    raise ValueError(f"Product {p.id} already exists")

            staged = dict(self._products)
            for product_id in removed:
                del staged[product_id]
            for product_id, order in updates.items():
                if product_id in staged:
                    staged[product_id] = replace(staged[product_id], order=order)
            for p in added:
                staged[p.id] = p

            self._products = staged
            self._revision += 1
            revision = self._revision
            snapshot = list(staged.values())
            listeners = list(self._listeners)

        logger.debug(
            "Committed revision %d: %d updates, %d removed, %d added",
            revision,
            len(updates),
            len(removed),
            len(added),
        )
        for listener in listeners:
            listener(snapshot)
        return revision

    def subscribe(self, on_change: ChangeListener) -> Unsubscribe:
        with self._lock:
            self._listeners.append(on_change)

        def unsubscribe() -> None:
            with self._lock:
                if on_change in self._listeners:
                    self._listeners.remove(on_change)

        return unsubscribe
