"""
Booking status lifecycle.

A booking starts ``PENDING`` and is moved to ``ACCEPTED`` or
``REJECTED`` by the provider who owns the booked service (or by an
admin).  The machine is permissive: the new status is not checked
against the old one, so an authorized actor may set any status at any
time, including re-opening a rejected booking.  ``strict_transition_allowed``
describes the stricter rule but nothing enforces it yet.

Which booking fields a caller may change through a general update also
lives here, since status is one of them.
"""

from enum import Enum
from typing import Any, Dict, FrozenSet, Mapping

from ..core.errors import ValidationError
from ..core.roles import Identity, Role


class BookingStatus(str, Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


INITIAL_STATUS = BookingStatus.PENDING
TERMINAL_STATUSES = frozenset({BookingStatus.ACCEPTED, BookingStatus.REJECTED})

# Fields each role may change through a full booking update.
EDITABLE_FIELDS: Dict[Role, FrozenSet[str]] = {
    Role.CLIENT: frozenset({"notes"}),
    Role.SERVICE_USER: frozenset({"status", "notes"}),
    Role.ADMIN: frozenset({"status", "notes", "booking_date"}),
}


def parse_status(value: Any) -> BookingStatus:
    try:
        return value if isinstance(value, BookingStatus) else BookingStatus(str(value))
    except ValueError:
        allowed = ", ".join(s.value for s in BookingStatus)
        raise ValidationError(f"Invalid booking status {value!r}; expected one of {allowed}") from None


def is_terminal(status: Any) -> bool:
    return parse_status(status) in TERMINAL_STATUSES


def strict_transition_allowed(current: Any, new: Any) -> bool:
    """Whether ``current -> new`` is a forward move out of ``PENDING``."""
    return parse_status(current) is BookingStatus.PENDING and parse_status(new) in TERMINAL_STATUSES


def transition(booking: Mapping[str, Any], new_status: Any) -> Dict[str, Any]:
    """Return the patch that moves ``booking`` to ``new_status``.

    Any enum value is accepted regardless of the current status.
    """
    status = parse_status(new_status)
    return {"status": status.value}


def editable_patch(identity: Identity, changes: Mapping[str, Any]) -> Dict[str, Any]:
    """Keep only the changes ``identity`` may apply through a full update.

    Fields outside the caller's set are dropped silently; ``None`` values
    mean "not supplied" and are dropped as well.
    """
    allowed = EDITABLE_FIELDS.get(identity.role, frozenset())
    patch = {key: value for key, value in changes.items() if key in allowed and value is not None}
    if "status" in patch:
        patch["status"] = parse_status(patch["status"]).value
    return patch
