"""
Pydantic models for service bookings.

A client books a service for a date and may attach notes.  The status
is managed by the provider through the status endpoint; see
``services.booking_lifecycle`` for the allowed values.
"""

from datetime import datetime
from typing import Any, Mapping, Optional

from pydantic import BaseModel, Field

from ..services.booking_lifecycle import BookingStatus
from .common import RequestModel


class BookingCreate(RequestModel):
    """Schema for creating a booking."""

    service_id: int = Field(..., examples=[1])
    booking_date: datetime = Field(..., examples=["2025-09-01T10:00:00Z"])
    notes: Optional[str] = Field(None, examples=["Car won't start, parked in the basement"])


class BookingUpdate(RequestModel):
    """Schema for a full booking update.

    All fields are optional.  Which of them are applied depends on the
    caller: clients may only change ``notes``, providers ``status`` and
    ``notes``, admins also ``booking_date``.
    """

    status: Optional[BookingStatus] = None
    notes: Optional[str] = None
    booking_date: Optional[datetime] = None


class BookingStatusUpdate(RequestModel):
    status: BookingStatus = Field(..., examples=["ACCEPTED"])


class BookingClient(BaseModel):
    """Contact details of the client who made a booking."""

    id: int
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


class BookingServiceSummary(BaseModel):
    id: int
    title: str
    price: float


class BookingRead(BaseModel):
    """A booking with its client and service embedded.

    ``service`` is ``None`` once the booked service has been deleted.
    """

    id: int
    client_id: int
    service_id: int
    booking_date: str
    status: BookingStatus
    notes: Optional[str] = None
    created_at: Optional[str] = None
    client: Optional[BookingClient] = None
    service: Optional[BookingServiceSummary] = None

    model_config = {
        "from_attributes": True,
    }

    @classmethod
    def from_row(cls, row: Mapping[str, Any], **related: Any) -> "BookingRead":
        data = {key: row.get(key) for key in cls.model_fields}
        data.update(related)
        return cls.model_validate(data)
