"""Tests for the document-style storage layer."""

import pytest

from auto_services_api.app.core import storage
from auto_services_api.app.core.errors import UnexpectedError, ValidationError


def _order(client_id=1, total=10.0, **extra):
    data = {"client_id": client_id, "items": [{"product_name": "Filter", "quantity": 1, "unit_price": total}], "total_price": total, "status": "PENDING"}
    data.update(extra)
    return storage.create("orders", data)


def test_create_fills_id_and_creation_time():
    order = _order()
    assert order["id"] == 1
    assert order["order_date"]
    assert order["items"] == [{"product_name": "Filter", "quantity": 1, "unit_price": 10.0}]


def test_booleans_are_restored():
    service = storage.create(
        "services",
        {"category": "X", "title": "t", "description": "d", "location": "l", "price": 1, "owner_id": 1, "available": False},
    )
    assert service["available"] is False
    assert storage.find("services", {"available": "false"})[0]["id"] == service["id"]


def test_find_one_missing_and_malformed_ids():
    assert storage.find_one("orders", 404) is None
    assert storage.find_one("orders", "not-a-number") is None


def test_comparison_and_in_filters():
    for total in (5.0, 15.0, 25.0):
        _order(total=total)
    assert [o["total_price"] for o in storage.find("orders", {"total_price": {"gt": 5}}, sort=[("total_price", 1)])] == [15.0, 25.0]
    assert storage.count("orders", {"total_price": {"lte": "15"}}) == 2
    assert storage.count("orders", {"id": {"in": "1,3"}}) == 2
    assert storage.count("orders", {"id": {"in": []}}) == 0


def test_unknown_field_matches_nothing():
    _order()
    assert storage.find("orders", {"colour": "red"}) == []


def test_unsupported_operator():
    with pytest.raises(ValueError):
        storage.find("orders", {"total_price": {"near": 1}})


def test_uncoercible_filter_value():
    with pytest.raises(ValidationError, match="total_price"):
        storage.find("orders", {"total_price": {"gt": "cheap"}})


def test_skip_and_limit():
    for total in range(1, 6):
        _order(total=float(total))
    rows = storage.find("orders", sort=[("total_price", 1)], skip=2, limit=2)
    assert [row["total_price"] for row in rows] == [3.0, 4.0]


def test_update_and_delete():
    order = _order()
    updated = storage.update("orders", order["id"], {"status": "COMPLETED", "id": 77})
    assert updated["status"] == "COMPLETED"
    assert updated["id"] == order["id"]
    assert storage.update("orders", 999, {"status": "COMPLETED"}) is None
    assert storage.delete("orders", order["id"]) is True
    assert storage.delete("orders", order["id"]) is False


def test_update_stamps_updated_at_where_present():
    user = storage.create("users", {"email": "a@example.com", "password": "x", "role": "CLIENT"})
    updated = storage.update("users", user["id"], {"name": "Amina"})
    assert updated["name"] == "Amina"
    assert updated["updated_at"] != user["updated_at"]


def test_driver_errors_become_unexpected_errors():
    # Missing NOT NULL columns.
    with pytest.raises(UnexpectedError):
        storage.create("services", {})


def test_unknown_table():
    with pytest.raises(ValueError):
        storage.find_one("invoices", 1)


HUGE = 99999999999999999999


def test_ids_beyond_sqlite_integers_do_not_exist():
    _order()
    assert storage.find_one("orders", HUGE) is None
    assert storage.find_one("orders", -HUGE) is None
    assert storage.delete("orders", HUGE) is False
    assert storage.update("orders", HUGE, {"status": "CANCELLED"}) is None


def test_integer_filters_beyond_sqlite_range_are_invalid():
    with pytest.raises(ValidationError):
        storage.find("orders", {"id": HUGE})
    with pytest.raises(ValidationError):
        storage.count("orders", {"client_id": {"in": [1, HUGE]}})


def test_huge_skip_and_limit_are_clamped():
    _order()
    assert storage.find("orders", skip=HUGE, limit=10) == []
    assert len(storage.find("orders", limit=HUGE)) == 1
