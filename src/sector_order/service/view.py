from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from types import TracebackType

from sector_order.ordering.index import SectorIndex
from sector_order.product.core import Product
from sector_order.store.base import ProductStore

logger = logging.getLogger(__name__)


class SectorView:
    """
    Live per-sector ordering kept in sync with a store.

    Owns the store subscription; every change notification re-derives the
    sorted sector lists from the pushed snapshot.
    """

    def __init__(
        self,
        store: ProductStore,
        index: SectorIndex,
        on_refresh: Callable[[dict[str, list[Product]]], None] | None = None,
    ) -> None:
        self.store = store
        self.index = index
        self.on_refresh = on_refresh
        self._lock = threading.Lock()
        self._sectors: dict[str, list[Product]] = {}

        self.refresh(store.fetch_all())
        self._unsubscribe: Callable[[], None] | None = store.subscribe(self.refresh)

    def refresh(self, products: list[Product]) -> None:
        grouped = self.index.group_by_sector(products)
        with self._lock:
            self._sectors = grouped
        logger.debug("Sector view refreshed with %d products", len(products))
        if self.on_refresh is not None:
            self.on_refresh(grouped)

    def sector(self, sector_code: str) -> list[Product]:
        self.index.catalog.index_of(sector_code)
        with self._lock:
            return list(self._sectors.get(sector_code, []))

    def labels(self, sector_code: str) -> list[str]:
        """Display labels (e.g. "GRL-001") in sector order."""
        return [self.index.codec.format_label(p.order) for p in self.sector(sector_code)]

    @property
    def is_open(self) -> bool:
        return self._unsubscribe is not None

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def __enter__(self) -> SectorView:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
