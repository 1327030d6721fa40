"""Tests for the ownership resolver."""

from auto_services_api.app.core import storage
from auto_services_api.app.core.roles import Identity, ResourceType, Role
from auto_services_api.app.services.ownership import resolve_ownership


def test_service_is_owned_by_its_provider():
    ownership = resolve_ownership(ResourceType.SERVICE, {"id": 1, "owner_id": 4})
    assert ownership.providers == {4}
    assert ownership.clients == frozenset()
    assert ownership.resolved


def test_order_is_owned_by_its_client():
    ownership = resolve_ownership(ResourceType.ORDER, {"id": 1, "client_id": "7"})
    assert ownership.clients == {7}
    assert ownership.is_client(Identity(id=7, role=Role.CLIENT))


def test_booking_owners_through_the_service():
    booking = {"id": 1, "client_id": 2, "service_id": 3}
    ownership = resolve_ownership(ResourceType.BOOKING, booking, find_service=lambda _id: {"id": 3, "owner_id": 9})
    assert ownership.clients == {2}
    assert ownership.providers == {9}
    assert ownership.resolved


def test_booking_with_missing_service_is_unresolved():
    booking = {"id": 1, "client_id": 2, "service_id": 3}
    ownership = resolve_ownership(ResourceType.BOOKING, booking, find_service=lambda _id: None)
    assert not ownership.resolved
    assert ownership.missing == "service"
    # The direct client relation survives.
    assert ownership.clients == {2}
    assert ownership.providers == frozenset()


def test_skipping_the_lookup_leaves_the_hop_unresolved():
    booking = {"id": 1, "client_id": 2, "service_id": 3}
    assert not resolve_ownership(ResourceType.BOOKING, booking, find_service=None).resolved


def test_missing_resource():
    ownership = resolve_ownership(ResourceType.ORDER, None)
    assert not ownership.resolved
    assert not ownership.is_client(Identity(id=1, role=Role.CLIENT))


def test_default_lookup_reads_storage():
    service = storage.create(
        "services",
        {
            "category": "MECANIQUE",
            "title": "Brake repair",
            "description": "Pads and discs",
            "location": "Alger",
            "price": 80,
            "owner_id": 12,
            "repair_type": "brakes",
        },
    )
    booking = {"id": 1, "client_id": 2, "service_id": service["id"]}
    assert resolve_ownership(ResourceType.BOOKING, booking).providers == {12}
