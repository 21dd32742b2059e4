import logging

import pytest

from sector_order.config.loader import OrderingConfig, load_sector_catalog
from sector_order.errors import InvalidSectorError, OutOfRangeError
from sector_order.ordering.codec import OrderCodec


@pytest.fixture
def codec() -> OrderCodec:
    return OrderCodec(load_sector_catalog())


def test_encode_gfr_seven(codec):
    # GFR is the second catalog entry
    assert codec.encode("GFR", 7) == 2007
    assert codec.decode_sector(2007) == "GFR"
    assert codec.decode_sequence(2007) == 7
    assert codec.decode(2007) == ("GFR", 7)


def test_round_trip_all_sectors(codec):
    for code in codec.catalog.codes:
        for sequence in (1, 2, 10, 99, 100, 500, 998, 999):
            order = codec.encode(code, sequence)
            assert codec.decode_sector(order) == code
            assert codec.decode_sequence(order) == sequence


def test_encode_rejects_unknown_sector(codec):
    with pytest.raises(InvalidSectorError):
        codec.encode("XXX", 1)


def test_encode_rejects_instead_of_truncating(codec):
    with pytest.raises(OutOfRangeError):
        codec.encode("GRL", 1000)
    with pytest.raises(OutOfRangeError):
        codec.encode("GRL", 0)
    with pytest.raises(OutOfRangeError):
        codec.encode("GRL", -3)


def test_out_of_range_sector_falls_back_to_first(codec, caplog):
    with caplog.at_level(logging.WARNING, logger="sector_order.ordering.codec"):
        assert codec.decode_sector(99005) == "GRL"
        assert codec.decode_sector(5) == "GRL"  # sector index 0
    assert "outside catalog" in caplog.text
    assert codec.decode_sector_index(99005) == 99


def test_strict_codec_raises_on_unknown_index():
    catalog = load_sector_catalog()
    strict = OrderCodec.from_config(catalog, OrderingConfig(strict_sector_decode=True))
    with pytest.raises(InvalidSectorError):
        strict.decode_sector(99005)
    assert strict.decode_sector(10001) == "FRU"


def test_negative_order_rejected(codec):
    with pytest.raises(OutOfRangeError):
        codec.decode_sector(-1)
    with pytest.raises(OutOfRangeError):
        codec.decode_sequence(-1)


def test_text_forms(codec):
    assert codec.to_text(2007) == "02007"
    assert codec.to_text(10999) == "10999"
    assert codec.from_text("02007") == 2007
    assert codec.format_label(2007) == "GFR-007"
    assert codec.format_label(1012) == "GRL-012"
    with pytest.raises(ValueError):
        codec.from_text("2007")
    with pytest.raises(ValueError):
        codec.from_text("02a07")


def test_reduced_max_sequence():
    codec = OrderCodec(load_sector_catalog(), max_sequence=50)
    assert codec.encode("GRL", 50) == 1050
    with pytest.raises(OutOfRangeError):
        codec.encode("GRL", 51)
    with pytest.raises(ValueError):
        OrderCodec(load_sector_catalog(), max_sequence=1000)


def test_member_sector_strict_and_lenient():
    catalog = load_sector_catalog()
    assert OrderCodec(catalog, strict=True).member_sector(99005) is None
    assert OrderCodec(catalog, strict=True).member_sector(2007) == "GFR"
    assert OrderCodec(catalog).member_sector(99005) == "GRL"
