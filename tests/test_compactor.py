import numpy as np
import pytest

from sector_order.config.loader import load_sector_catalog
from sector_order.errors import InvalidSectorError
from sector_order.generators.catalog import BakeryProductGenerator
from sector_order.ordering.codec import OrderCodec
from sector_order.ordering.compactor import SequenceCompactor
from sector_order.ordering.index import SectorIndex
from sector_order.ordering.validator import OrderValidator
from sector_order.product.core import Product


@pytest.fixture
def index() -> SectorIndex:
    return SectorIndex(OrderCodec(load_sector_catalog()))


@pytest.fixture
def compactor(index) -> SequenceCompactor:
    return SequenceCompactor(index)


def test_dense_sequences_ranks():
    compactor = SequenceCompactor(SectorIndex(OrderCodec(load_sector_catalog())))
    ranks = compactor.dense_sequences(np.array([7, 3, 3, 12]))
    assert ranks.tolist() == [3, 1, 2, 4]


def test_compact_after_delete_preserves_relative_order(compactor, index):
    # GRL had 1,2,3; the product at 2 was deleted
    remaining = [Product("A", "a", 1001), Product("C", "c", 1003)]
    result = compactor.compact(remaining, "GRL")
    by_id = {p.id: p.order for p in result}
    assert by_id == {"A": 1001, "C": 1002}


def test_compact_leaves_other_sectors_alone(compactor):
    products = [
        Product("A", "a", 1004),
        Product("X", "x", 2005),
        Product("B", "b", 1009),
    ]
    result = compactor.compact(products, "GRL")
    assert [p.id for p in result] == ["A", "X", "B"]
    assert [p.order for p in result] == [1001, 2005, 1002]


def test_compact_resolves_duplicates_stably(compactor):
    products = [Product("A", "a", 1002), Product("B", "b", 1002), Product("C", "c", 1001)]
    result = {p.id: p.order for p in compactor.compact(products, "GRL")}
    assert result == {"C": 1001, "A": 1002, "B": 1003}


def test_compact_is_identity_on_dense_sector(compactor):
    products = [Product("A", "a", 1002), Product("B", "b", 1001)]
    assert compactor.compact(products, "GRL") == products


def test_compact_empty_and_unknown_sector(compactor):
    products = [Product("A", "a", 1001)]
    assert compactor.compact(products, "HEL") == products
    with pytest.raises(InvalidSectorError):
        compactor.compact(products, "NOPE")


def test_compact_is_idempotent_and_dense_on_random_collections(compactor, index):
    validator = OrderValidator(index)
    catalog = index.catalog
    for seed in range(5):
        generator = BakeryProductGenerator(catalog, seed=seed)
        products = generator.corrupt(generator.generate_products(30), n_faults=4)
        for code in catalog.codes:
            once = compactor.compact(products, code)
            assert compactor.compact(once, code) == once
            assert validator.validate_sector_consistency(once, code)


def test_compact_all(compactor, index):
    products = [Product("A", "a", 1005), Product("B", "b", 3007), Product("C", "c", 3002)]
    result = {p.id: p.order for p in compactor.compact_all(products)}
    assert result == {"A": 1001, "B": 3002, "C": 3001}
