"""Tests for the order endpoints."""

import asyncio

import pytest

from auto_services_api.app.schemas.order import OrderCreate
from auto_services_api.app.services.order_service import OrderService, compute_total

API = "/api/v1"

ITEMS = [
    {"product_name": "Brake pads", "quantity": 2, "unit_price": 45.5},
    {"product_name": "Oil filter", "quantity": 1, "unit_price": 9.99},
]


def test_compute_total():
    assert compute_total(ITEMS) == 100.99
    assert compute_total([]) == 0


def test_total_is_recomputed_on_create(client, register):
    user = register()
    response = client.post(f"{API}/orders", json={"items": ITEMS, "total_price": 1}, headers=user.headers)
    assert response.status_code == 201
    order = response.json()["data"]
    assert order["total_price"] == 100.99
    assert order["status"] == "PENDING"
    assert order["client_id"] == user.id
    assert order["order_date"]


def test_service_layer_ignores_client_total(register):
    user = register()
    order = asyncio.run(OrderService.create_order(user.identity, OrderCreate(items=ITEMS, total_price=5000)))
    assert order["total_price"] == 100.99


@pytest.mark.parametrize(
    "items",
    [
        [],
        [{"product_name": "Bolt", "quantity": 0, "unit_price": 1}],
        [{"product_name": "Bolt", "quantity": 1, "unit_price": -1}],
        [{"product_name": "", "quantity": 1, "unit_price": 1}],
    ],
)
def test_invalid_items(client, register, items):
    user = register()
    response = client.post(f"{API}/orders", json={"items": items}, headers=user.headers)
    assert response.status_code == 400


def test_only_clients_order(client, register):
    provider = register("SERVICE_USER")
    assert client.post(f"{API}/orders", json={"items": ITEMS}, headers=provider.headers).status_code == 403


def test_update_recomputes_total(client, register):
    user = register()
    order = client.post(f"{API}/orders", json={"items": ITEMS}, headers=user.headers).json()["data"]
    url = f"{API}/orders/{order['id']}"

    response = client.put(
        url,
        json={"items": [{"product_name": "Tyre", "quantity": 4, "unit_price": 60}], "total_price": 3},
        headers=user.headers,
    )
    assert response.json()["data"]["total_price"] == 240

    status_only = client.put(url, json={"status": "COMPLETED", "total_price": 1}, headers=user.headers)
    assert status_only.json()["data"]["status"] == "COMPLETED"
    assert status_only.json()["data"]["total_price"] == 240


def test_ownership(client, register):
    owner, other, provider, admin = register(), register(), register("SERVICE_USER"), register("ADMIN")
    order = client.post(f"{API}/orders", json={"items": ITEMS}, headers=owner.headers).json()["data"]
    url = f"{API}/orders/{order['id']}"

    assert client.get(url, headers=owner.headers).status_code == 200
    assert client.get(url, headers=admin.headers).status_code == 200
    denied = client.get(url, headers=other.headers)
    assert denied.status_code == 403
    assert denied.json()["message"] == f"User {other.id} is not authorized to access this order"
    assert client.get(url, headers=provider.headers).status_code == 403
    assert client.put(url, json={"status": "CANCELLED"}, headers=other.headers).status_code == 403
    assert client.delete(url, headers=other.headers).status_code == 403
    assert client.get(f"{API}/orders/4040", headers=owner.headers).status_code == 404


def test_scoped_list(client, register):
    first, second, provider, admin = register(), register(), register("SERVICE_USER"), register("ADMIN")
    client.post(f"{API}/orders", json={"items": ITEMS}, headers=first.headers)
    client.post(f"{API}/orders", json={"items": ITEMS}, headers=first.headers)
    client.post(f"{API}/orders", json={"items": ITEMS}, headers=second.headers)

    assert client.get(f"{API}/orders", headers=first.headers).json()["count"] == 2
    assert client.get(f"{API}/orders", headers=second.headers).json()["count"] == 1
    assert client.get(f"{API}/orders", headers=provider.headers).json()["count"] == 0
    assert client.get(f"{API}/orders", headers=admin.headers).json()["count"] == 3


def test_orders_by_user_is_admin_only(client, register):
    user, admin = register(), register("ADMIN")
    client.post(f"{API}/orders", json={"items": ITEMS}, headers=user.headers)
    url = f"{API}/orders/user/{user.id}"
    assert client.get(url, headers=user.headers).status_code == 403
    assert client.get(url, headers=admin.headers).json()["count"] == 1


def test_delete(client, register):
    user = register()
    order = client.post(f"{API}/orders", json={"items": ITEMS}, headers=user.headers).json()["data"]
    url = f"{API}/orders/{order['id']}"
    assert client.delete(url, headers=user.headers).json() == {"success": True, "data": {}}
    assert client.get(url, headers=user.headers).status_code == 404


def test_camel_case_items(client, register):
    user = register()
    items = [{"productName": "Spark plug", "quantity": 4, "unitPrice": 2.5}]
    response = client.post(f"{API}/orders", json={"items": items, "totalPrice": 99}, headers=user.headers)
    assert response.status_code == 201
    order = response.json()["data"]
    assert order["total_price"] == 10
    assert order["items"] == [{"product_name": "Spark plug", "quantity": 4, "unit_price": 2.5}]
