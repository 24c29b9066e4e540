"""
Tests for NDJSON order files.
"""

from pathlib import Path

import pytest

from transportation_orders.loader import (
    OrderFileError, iter_order_lines, parse_order_line, read_orders, write_orders
)


ORDERS_FILE = Path(__file__).parent / "data" / "orders.json"


def test_reads_fixture():
    orders = read_orders(ORDERS_FILE)

    assert len(orders) == 20
    first = orders[0]
    assert first.toid == "28"
    assert first.truck == "8962ZKR"
    assert first.pickup_time == 1591682400000
    assert first.pickup_lat == 40.4562191
    assert first.pickup_lon == -3.8707211
    assert first.delivery_time == 1591692196000
    assert first.delivery_lat == 42.0206372
    assert first.delivery_lon == -4.5330132


def test_fixture_keys_are_unique():
    orders = read_orders(ORDERS_FILE)

    assert len({o.truck for o in orders}) == len(orders)
    assert len({o.toid for o in orders}) == len(orders)


def test_trailing_fields_are_optional():
    order = parse_order_line(
        '{"toid":"5","truck":"AB12","pickupTime":1,"pickupLat":1.5,"pickupLon":2.5,'
        '"deliveryTime":2,"deliveryLat":3.5,"deliveryLon":4.5,"unknown":"ignored"}'
    )

    assert order.truck == "AB12"
    assert order.status == 0
    assert order.last_time == 0


def test_blank_lines_are_skipped(tmp_path):
    path = tmp_path / "orders.json"
    lines = ORDERS_FILE.read_text(encoding="utf-8").splitlines()[:2]
    path.write_text(lines[0] + "\n\n   \n" + lines[1] + "\n", encoding="utf-8")

    assert [o.truck for o in read_orders(path)] == ["8962ZKR", "0001BCD"]


def test_bad_line_raises_with_line_number(tmp_path):
    path = tmp_path / "orders.json"
    good = ORDERS_FILE.read_text(encoding="utf-8").splitlines()[0]
    path.write_text(good + "\n" + '{"toid":"9","truck":"X"}\n', encoding="utf-8")

    with pytest.raises(OrderFileError) as exc_info:
        read_orders(path)

    assert exc_info.value.line_number == 2
    assert "pickupTime" in exc_info.value.reason


def test_iter_order_lines_reports_invalid_json(tmp_path):
    path = tmp_path / "orders.json"
    good = ORDERS_FILE.read_text(encoding="utf-8").splitlines()[0]
    path.write_text("not json\n" + good + "\n", encoding="utf-8")

    results = list(iter_order_lines(path))

    assert results[0][0] == 1
    assert isinstance(results[0][1], OrderFileError)
    assert results[1][0] == 2
    assert results[1][1].truck == "8962ZKR"


def test_write_then_read_preserves_orders(tmp_path):
    orders = read_orders(ORDERS_FILE)
    path = tmp_path / "copy.json"

    assert write_orders(path, orders) == 20

    assert path.read_text(encoding="utf-8").splitlines()[0].startswith('{"toid":"28","truck":"8962ZKR"')
    reread = read_orders(path)
    assert [o.model_dump() for o in reread] == [o.model_dump() for o in orders]


def test_invalid_utf8_is_reported_against_its_line(tmp_path):
    path = tmp_path / "orders.json"
    good = ORDERS_FILE.read_text(encoding="utf-8").splitlines()[0].encode("utf-8")
    path.write_bytes(good + b"\n" + b'{"toid":"\xff\xfe"}\n' + good.replace(b"8962ZKR", b"1111AAA").replace(b'"28"', b'"29"') + b"\n")

    results = list(iter_order_lines(path))

    assert [n for n, _ in results] == [1, 2, 3]
    assert isinstance(results[1][1], OrderFileError)
    assert "UTF-8" in results[1][1].reason
    assert results[2][1].truck == "1111AAA"

    with pytest.raises(OrderFileError) as exc_info:
        read_orders(path)
    assert exc_info.value.line_number == 2
