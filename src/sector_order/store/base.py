"""Base classes for product stores."""

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Mapping

from sector_order.product.core import Product

ChangeListener = Callable[[list[Product]], None]
Unsubscribe = Callable[[], None]


class ProductStore(ABC):
    """
    Abstract key-value product store with change notification.

    Implementations must apply a commit atomically: either every update,
    removal and addition lands, or none does.
    """

    @property
    @abstractmethod
    def revision(self) -> int:
        """Monotonic counter bumped by every successful commit."""

    @abstractmethod
    def fetch_all(self) -> list[Product]:
        """Snapshot of every stored product."""

    def fetch_with_revision(self) -> tuple[list[Product], int]:
        """
        Snapshot plus the revision it belongs to.

        Re-reads until no commit lands between the two revision reads;
        stores with a native consistent read should override this.
        """
        while True:
            before = self.revision
            products = self.fetch_all()
            if self.revision == before:
                return products, before

    @abstractmethod
    def commit_batch(
        self,
        updates: Mapping[str, int],
        *,
        removed: Iterable[str] = (),
        added: Iterable[Product] = (),
        expected_revision: int | None = None,
    ) -> int:
        """Apply order updates, removals and additions as one unit; returns the new revision."""

    @abstractmethod
    def subscribe(self, on_change: ChangeListener) -> Unsubscribe:
        """Register a listener called with the fresh snapshot after each commit."""
