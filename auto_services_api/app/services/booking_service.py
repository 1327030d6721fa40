"""
Business logic for service bookings.

The ``BookingService`` encapsulates operations for creating bookings,
listing them for clients, providers and admins, reading and updating
single bookings and moving them through the status lifecycle.  A
booking belongs to two people at once: the client who made it and the
provider who owns the booked service.  Every operation resolves that
ownership and asks the policy engine before touching storage.

Updates are last-write-wins; two providers or a provider and an admin
changing the same booking concurrently simply overwrite each other.
"""

import dataclasses
import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Tuple

from ..core import storage
from ..core.errors import AuthorizationError, NotFoundError
from ..core.roles import Action, Identity, ResourceType
from ..schemas.booking import BookingCreate, BookingRead, BookingUpdate
from ..schemas.common import Pagination
from .booking_lifecycle import INITIAL_STATUS, editable_patch, transition
from .ownership import resolve_ownership
from .policy import enforce
from .query_scope import ListQuery, scoped_list

logger = logging.getLogger(__name__)

ListResult = Tuple[List[Dict[str, Any]], Pagination, int]


def _related(table: str, ids: Iterable[Any]) -> Dict[int, Dict[str, Any]]:
    """Load the rows of ``table`` with the given ids in one query."""
    wanted = sorted({int(value) for value in ids if value is not None})
    if not wanted:
        return {}
    return {row["id"]: row for row in storage.find(table, {"id": {"in": wanted}})}


def present_bookings(rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Public form of a page of bookings, client and service embedded.

    One lookup per related table for the whole page.  A service that no
    longer exists is embedded as ``None``.
    """
    clients = _related("users", (row.get("client_id") for row in rows))
    services = _related("services", (row.get("service_id") for row in rows))
    return [
        BookingRead.from_row(
            row,
            client=clients.get(row.get("client_id")),
            service=services.get(row.get("service_id")),
        ).model_dump(mode="json")
        for row in rows
    ]


def present_booking(row: Dict[str, Any]) -> Dict[str, Any]:
    return present_bookings([row])[0]


class BookingService:
    """Service for managing bookings."""

    @staticmethod
    def _load(booking_id: Any) -> Dict[str, Any]:
        row = storage.find_one("bookings", booking_id)
        if row is None:
            raise NotFoundError("Booking not found")
        return row

    @classmethod
    def _authorize(cls, identity: Identity, action: Action, row: Dict[str, Any]) -> None:
        ownership = resolve_ownership(ResourceType.BOOKING, row)
        enforce(identity, action, ResourceType.BOOKING, row, ownership=ownership)

    @classmethod
    async def create_booking(cls, identity: Identity, data: BookingCreate) -> Dict[str, Any]:
        """Book a service for the caller.

        The service must exist (``NotFoundError``) and be available
        (``ValidationError``).  New bookings start ``PENDING``.
        """
        service = storage.find_one("services", data.service_id)
        enforce(identity, Action.CREATE, ResourceType.BOOKING, target_service=service)
        row = storage.create(
            "bookings",
            {
                "client_id": identity.id,
                "service_id": service["id"],
                "booking_date": data.booking_date.isoformat(),
                "notes": data.notes,
                "status": INITIAL_STATUS.value,
            },
        )
        logger.info("User %s booked service %s (booking %s)", identity.id, service["id"], row["id"])
        return present_booking(row)

    @classmethod
    async def list_bookings(cls, identity: Identity, query: ListQuery) -> ListResult:
        """Bookings visible to the caller: own, of owned services, or all for ADMIN."""
        return scoped_list(identity, ResourceType.BOOKING, query, present_page=present_bookings)

    @classmethod
    async def list_for_participant(cls, identity: Identity, query: ListQuery) -> ListResult:
        """Client or provider view, most recent booking date first by default."""
        if not query.sort:
            query = dataclasses.replace(query, sort=[("booking_date", -1)])
        return await cls.list_bookings(identity, query)

    @classmethod
    async def list_by_user(cls, identity: Identity, user_id: int, query: ListQuery) -> ListResult:
        """Bookings made by ``user_id``."""
        filters = {**query.filters, "client_id": {"eq": user_id}}
        return await cls.list_bookings(identity, dataclasses.replace(query, filters=filters))

    @classmethod
    async def list_by_service(cls, identity: Identity, service_id: Any, query: ListQuery) -> ListResult:
        """Bookings of one service; only its owner and admins may ask."""
        service = storage.find_one("services", service_id)
        if service is None:
            raise NotFoundError(f"Service not found with id of {service_id}")
        ownership = resolve_ownership(ResourceType.SERVICE, service)
        if not identity.is_admin and not ownership.is_provider(identity):
            raise AuthorizationError(f"User {identity.id} is not authorized to access bookings of this service")
        filters = {**query.filters, "service_id": {"eq": service["id"]}}
        if not query.sort:
            query = dataclasses.replace(query, sort=[("booking_date", -1)])
        return await cls.list_bookings(identity, dataclasses.replace(query, filters=filters))

    @classmethod
    async def get_booking(cls, identity: Identity, booking_id: Any) -> Dict[str, Any]:
        row = cls._load(booking_id)
        cls._authorize(identity, Action.READ_ONE, row)
        return present_booking(row)

    @classmethod
    async def update_status(cls, identity: Identity, booking_id: Any, status: Any) -> Dict[str, Any]:
        """Set the status of a booking.

        Only the provider owning the booked service (or an admin) may do
        this; any status of the enum may be set from any other.
        """
        row = cls._load(booking_id)
        cls._authorize(identity, Action.UPDATE_STATUS, row)
        patch = transition(row, status)
        updated = storage.update("bookings", row["id"], patch)
        if updated is None:
            raise NotFoundError("Booking not found")
        logger.info(
            "User %s changed booking %s status %s -> %s",
            identity.id,
            row["id"],
            row.get("status"),
            patch["status"],
        )
        return present_booking(updated)

    @classmethod
    async def update_booking(cls, identity: Identity, booking_id: Any, changes: BookingUpdate) -> Dict[str, Any]:
        """Apply the changes the caller's role is allowed to make.

        Clients may edit ``notes``; providers ``status`` and ``notes``;
        admins also ``booking_date``.  Anything else is ignored.
        """
        row = cls._load(booking_id)
        cls._authorize(identity, Action.UPDATE, row)
        patch = editable_patch(identity, changes.model_dump())
        if isinstance(patch.get("booking_date"), datetime):
            patch["booking_date"] = patch["booking_date"].isoformat()
        if not patch:
            return present_booking(row)
        updated = storage.update("bookings", row["id"], patch)
        if updated is None:
            raise NotFoundError("Booking not found")
        logger.info("User %s updated booking %s fields %s", identity.id, row["id"], sorted(patch))
        return present_booking(updated)

    @classmethod
    async def delete_booking(cls, identity: Identity, booking_id: Any) -> None:
        row = cls._load(booking_id)
        cls._authorize(identity, Action.DELETE, row)
        storage.delete("bookings", row["id"])
        logger.info("User %s deleted booking %s", identity.id, row["id"])

