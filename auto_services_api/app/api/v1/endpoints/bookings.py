"""
Booking-related endpoints for API v1.

These routes handle creating bookings, the client, provider and admin
views of them, and the status changes made by providers.  They rely on
the ``BookingService`` for authorization and storage.  Fixed-path
routes are declared before ``/{booking_id}`` so they are matched first.
"""

from fastapi import APIRouter, Depends, Path, status

from ....core.roles import Identity, Role
from ....core.security import get_current_user, require_roles
from ....schemas.booking import BookingCreate, BookingStatusUpdate, BookingUpdate
from ....schemas.common import success
from ....services.booking_service import BookingService
from ....services.query_scope import ListQuery
from ...deps import list_query

router = APIRouter()


def _listing(result) -> dict:
    items, pagination, _total = result
    return success(items, count=len(items), pagination=pagination)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_booking(booking: BookingCreate, current_user: Identity = Depends(get_current_user)) -> dict:
    """Book a service.

    The service must exist and be available.  The booking is created
    with status ``PENDING``.
    """
    return success(await BookingService.create_booking(current_user, booking))


@router.get("")
async def list_bookings(
    query: ListQuery = Depends(list_query),
    current_user: Identity = Depends(get_current_user),
) -> dict:
    """List the bookings visible to the caller.

    Clients see their own bookings, providers the bookings of their
    services and admins every booking.
    """
    return _listing(await BookingService.list_bookings(current_user, query))


@router.get("/client")
async def list_client_bookings(
    query: ListQuery = Depends(list_query),
    current_user: Identity = Depends(require_roles(Role.CLIENT)),
) -> dict:
    return _listing(await BookingService.list_for_participant(current_user, query))


@router.get("/provider")
async def list_provider_bookings(
    query: ListQuery = Depends(list_query),
    current_user: Identity = Depends(require_roles(Role.SERVICE_USER)),
) -> dict:
    return _listing(await BookingService.list_for_participant(current_user, query))


@router.get("/user/{user_id}")
async def list_bookings_by_user(
    user_id: int = Path(..., description="ID of the client"),
    query: ListQuery = Depends(list_query),
    current_user: Identity = Depends(require_roles(Role.ADMIN)),
) -> dict:
    return _listing(await BookingService.list_by_user(current_user, user_id, query))


@router.get("/service/{service_id}")
async def list_bookings_by_service(
    service_id: int = Path(..., description="ID of the service"),
    query: ListQuery = Depends(list_query),
    current_user: Identity = Depends(require_roles(Role.SERVICE_USER, Role.ADMIN)),
) -> dict:
    """List the bookings of one service.  Owner or admin only."""
    return _listing(await BookingService.list_by_service(current_user, service_id, query))


@router.get("/{booking_id}")
async def read_booking(
    booking_id: int = Path(..., description="ID of the booking"),
    current_user: Identity = Depends(get_current_user),
) -> dict:
    return success(await BookingService.get_booking(current_user, booking_id))


@router.patch("/{booking_id}/status")
async def update_booking_status(
    payload: BookingStatusUpdate,
    booking_id: int = Path(..., description="ID of the booking"),
    current_user: Identity = Depends(get_current_user),
) -> dict:
    """Accept or reject a booking.

    Only the provider owning the booked service or an admin may change
    the status.
    """
    return success(await BookingService.update_status(current_user, booking_id, payload.status))


@router.put("/{booking_id}")
async def update_booking(
    changes: BookingUpdate,
    booking_id: int = Path(..., description="ID of the booking"),
    current_user: Identity = Depends(get_current_user),
) -> dict:
    """Update a booking.

    Clients may change ``notes``; providers ``status`` and ``notes``;
    admins also ``booking_date``.  Other fields are ignored.
    """
    return success(await BookingService.update_booking(current_user, booking_id, changes))


@router.delete("/{booking_id}")
async def delete_booking(
    booking_id: int = Path(..., description="ID of the booking"),
    current_user: Identity = Depends(get_current_user),
) -> dict:
    await BookingService.delete_booking(current_user, booking_id)
    return success()
