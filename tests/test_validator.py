import pytest

from sector_order.config.loader import load_sector_catalog
from sector_order.errors import InconsistentStateError
from sector_order.ordering.codec import OrderCodec
from sector_order.ordering.index import SectorIndex
from sector_order.ordering.validator import OrderValidator
from sector_order.product.core import Product


@pytest.fixture
def validator() -> OrderValidator:
    return OrderValidator(SectorIndex(OrderCodec(load_sector_catalog())))


def test_validate_value_accepts_valid_order(validator):
    assert validator.validate_value(2007) is None
    assert validator.validate_value(10999) is None


def test_validate_value_rejects_unknown_sector(validator):
    err = validator.validate_value(99001)
    assert err is not None
    assert err.field == "sector"
    assert err.code == "INVALID_SECTOR"
    # Sector index 0 would silently decode to GRL
    assert validator.validate_value(7).code == "INVALID_SECTOR"


def test_validate_value_rejects_bad_sequence(validator):
    err = validator.validate_value(2000)
    assert err.field == "sequence"
    assert err.code == "INVALID_SEQUENCE"


def test_validate_value_duplicate_check(validator):
    products = [Product("A", "a", 1001), Product("B", "b", 1002)]
    assert validator.validate_value(1001, products).code == "DUPLICATE_ORDER"
    assert validator.validate_value(1001, products, current_product_id="A") is None
    assert validator.validate_value(1003, products) is None


def test_sector_consistency(validator):
    dense = [Product("A", "a", 1002), Product("B", "b", 1001), Product("C", "c", 2001)]
    assert validator.validate_sector_consistency(dense, "GRL")
    assert validator.validate_sector_consistency(dense, "HEL")

    gapped = [Product("A", "a", 1001), Product("B", "b", 1003)]
    assert not validator.validate_sector_consistency(gapped, "GRL")
    assert validator.sector_issues(gapped, "GRL") == [
        "missing sequences [2]",
        "sequences beyond 2: [3]",
    ]

    duplicated = [Product("A", "a", 1001), Product("B", "b", 1001)]
    assert not validator.validate_sector_consistency(duplicated, "GRL")
    assert "duplicate sequence 1" in validator.sector_issues(duplicated, "GRL")


def test_uniqueness(validator):
    assert validator.validate_uniqueness([Product("A", "a", 1001), Product("B", "b", 2001)])
    assert not validator.validate_uniqueness([Product("A", "a", 1001), Product("B", "b", 1001)])
    assert validator.validate_uniqueness([])


def test_ensure_consistent(validator):
    good = [Product("A", "a", 1001), Product("B", "b", 1002)]
    validator.ensure_consistent(good, ["GRL", "GFR"])

    bad = [Product("A", "a", 1001), Product("B", "b", 1003), Product("C", "c", 2002)]
    with pytest.raises(InconsistentStateError) as exc_info:
        validator.ensure_consistent(bad, ["GRL"])
    assert exc_info.value.sector_code == "GRL"
    assert exc_info.value.issues

    # Untouched sectors are not inspected
    validator.ensure_consistent(bad, ["HEL"])
