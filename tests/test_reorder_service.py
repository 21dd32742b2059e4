import logging
import threading

import pytest

from sector_order.config.loader import load_sector_catalog
from sector_order.errors import (
    CrossSectorSwapError,
    InconsistentStateError,
    ProductNotFoundError,
    StaleRevisionError,
)
from sector_order.ordering.engine import ReorderEngine
from sector_order.product.core import Product
from sector_order.service.reorder import ReorderService
from sector_order.service.view import SectorView
from sector_order.store.memory import InMemoryProductStore


@pytest.fixture
def engine() -> ReorderEngine:
    return ReorderEngine(load_sector_catalog())


@pytest.fixture
def store() -> InMemoryProductStore:
    grl = [Product(f"A{i}", f"Pan {i}", 1000 + i) for i in range(1, 6)]
    gfr = [Product(f"B{i}", f"Huevos {i}", 2000 + i) for i in range(1, 3)]
    return InMemoryProductStore(grl + gfr)


@pytest.fixture
def service(store, engine) -> ReorderService:
    return ReorderService(store, engine)


def orders(store: InMemoryProductStore) -> dict[str, int]:
    return {p.id: p.order for p in store.fetch_all()}


def test_change_sector_commits_whole_batch(service, store):
    outcome = service.change_sector("A3", "GFR")
    assert outcome.committed
    assert outcome.revision == 1
    assert orders(store) == {
        "A1": 1001,
        "A2": 1002,
        "A3": 2003,
        "A4": 1003,
        "A5": 1004,
        "B1": 2001,
        "B2": 2002,
    }


def test_noop_does_not_commit(service, store):
    outcome = service.move_adjacent("A1", "prev")
    assert not outcome.committed
    assert outcome.revision == 0
    assert store.revision == 0


def test_insert_remove_and_move(service, store):
    service.insert(Product("N", "Nuevo", 0), "GRL", target_sequence=1)
    assert orders(store)["N"] == 1001
    assert orders(store)["A5"] == 1006

    service.move_to_position("N", 6)
    assert orders(store)["N"] == 1006

    service.remove("A1")
    assert "A1" not in orders(store)
    assert orders(store)["A2"] == 1001
    assert store.revision == 3


def test_swap_and_repair(service, store):
    service.swap("B1", "B2")
    assert orders(store)["B1"] == 2002
    assert service.repair().revision == 1  # clean data: nothing committed


def test_errors_propagate_without_writes(service, store, caplog):
    with caplog.at_level(logging.INFO, logger="sector_order.service.reorder"):
        with pytest.raises(CrossSectorSwapError):
            service.swap("A1", "B1")
        with pytest.raises(ProductNotFoundError):
            service.remove("ghost")
    assert store.revision == 0
    assert "CROSS_SECTOR_SWAP" in caplog.text


def test_inconsistent_state_logged_as_error(engine, caplog):
    store = InMemoryProductStore([Product("A", "a", 1001), Product("B", "b", 1003)])
    service = ReorderService(store, engine)

    with caplog.at_level(logging.ERROR, logger="sector_order.service.reorder"):
        with pytest.raises(InconsistentStateError):
            service.move_adjacent("A", "next")
    assert any(r.levelno == logging.ERROR for r in caplog.records)

    service.repair("GRL")
    assert orders(store) == {"A": 1001, "B": 1002}


def test_describe_uses_locale(store, engine):
    service = ReorderService(store, engine, locale="en")
    err = CrossSectorSwapError("A1", "GRL", "B1", "GFR")
    assert service.describe(err) == "Products from different sectors cannot be swapped"


def test_external_write_between_fetch_and_commit_is_rejected(engine):
    class RacingStore(InMemoryProductStore):
        """Lets another writer sneak in right after the service's consistent read."""

        def fetch_with_revision(self):
            snapshot = super().fetch_with_revision()
            if self.revision == 0:
                self.commit_batch({"A": 1002, "B": 1001})
            return snapshot

    store = RacingStore([Product("A", "a", 1001), Product("B", "b", 1002)])
    service = ReorderService(store, engine)
    with pytest.raises(StaleRevisionError):
        service.move_adjacent("A", "next")
    assert orders(store) == {"A": 1002, "B": 1001}


def test_concurrent_moves_keep_sector_dense(service, store, engine):
    errors: list[Exception] = []

    def worker(product_id: str) -> None:
        try:
            for k in (1, 5, 3, 2, 4):
                service.move_to_position(product_id, k)
        except Exception as e:  # surfaced through the assertion below
            errors.append(e)

    threads = [threading.Thread(target=worker, args=(f"A{i}",)) for i in range(1, 6)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    products = store.fetch_all()
    assert engine.validator.validate_sector_consistency(products, "GRL")
    assert engine.validator.validate_uniqueness(products)


def test_sector_view_follows_commits(service, store, engine):
    refreshed: list[dict[str, list[Product]]] = []
    with SectorView(store, engine.index, on_refresh=refreshed.append) as view:
        assert [p.id for p in view.sector("GFR")] == ["B1", "B2"]

        service.change_sector("A1", "GFR", target_sequence=1)
        assert [p.id for p in view.sector("GFR")] == ["A1", "B1", "B2"]
        assert view.labels("GFR") == ["GFR-001", "GFR-002", "GFR-003"]
        assert len(refreshed) == 2

    assert not view.is_open
    service.swap("B1", "B2")
    # Closed views no longer follow the store
    assert [p.id for p in view.sector("GFR")] == ["A1", "B1", "B2"]
