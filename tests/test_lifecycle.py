"""Tests for the booking status lifecycle."""

import pytest

from auto_services_api.app.core.errors import ValidationError
from auto_services_api.app.core.roles import Identity, Role
from auto_services_api.app.services.booking_lifecycle import (
    INITIAL_STATUS,
    BookingStatus,
    editable_patch,
    is_terminal,
    parse_status,
    strict_transition_allowed,
    transition,
)


def test_initial_status_is_pending():
    assert INITIAL_STATUS is BookingStatus.PENDING


def test_parse_status_rejects_unknown_values():
    with pytest.raises(ValidationError, match="Invalid booking status"):
        parse_status("confirmed")


def test_lowercase_status_is_not_accepted():
    with pytest.raises(ValidationError):
        parse_status("accepted")


@pytest.mark.parametrize(
    "current, new",
    [
        ("PENDING", "ACCEPTED"),
        ("ACCEPTED", "REJECTED"),
        ("REJECTED", "ACCEPTED"),
        ("REJECTED", "PENDING"),
        ("ACCEPTED", "ACCEPTED"),
    ],
)
def test_any_transition_is_permitted(current, new):
    assert transition({"status": current}, new) == {"status": new}


def test_terminal_statuses():
    assert is_terminal("ACCEPTED")
    assert is_terminal(BookingStatus.REJECTED)
    assert not is_terminal("PENDING")


def test_strict_rule_is_only_descriptive():
    assert strict_transition_allowed("PENDING", "ACCEPTED")
    assert not strict_transition_allowed("ACCEPTED", "REJECTED")
    # ...while the enforced machine allows it.
    assert transition({"status": "ACCEPTED"}, "REJECTED") == {"status": "REJECTED"}


CHANGES = {"status": "ACCEPTED", "notes": "see you then", "booking_date": "2025-10-01T09:00:00", "service_id": 42}


def test_client_may_only_edit_notes():
    patch = editable_patch(Identity(id=1, role=Role.CLIENT), CHANGES)
    assert patch == {"notes": "see you then"}


def test_provider_may_edit_status_and_notes():
    patch = editable_patch(Identity(id=1, role=Role.SERVICE_USER), CHANGES)
    assert patch == {"status": "ACCEPTED", "notes": "see you then"}


def test_admin_may_also_move_the_date():
    patch = editable_patch(Identity(id=1, role=Role.ADMIN), CHANGES)
    assert patch == {"status": "ACCEPTED", "notes": "see you then", "booking_date": "2025-10-01T09:00:00"}


def test_unset_fields_are_dropped():
    patch = editable_patch(Identity(id=1, role=Role.SERVICE_USER), {"status": None, "notes": "late"})
    assert patch == {"notes": "late"}


def test_invalid_status_in_patch():
    with pytest.raises(ValidationError):
        editable_patch(Identity(id=1, role=Role.ADMIN), {"status": "DONE"})
