"""
Identity and role model.

Every authenticated request is represented by an ``Identity``: the
user's id, role and a few profile fields re-read from the users table.
The identity is handed explicitly to every service-layer call; nothing
in the application keeps it in ambient request state.

Roles are transmitted and compared case-sensitively as ``CLIENT``,
``SERVICE_USER`` and ``ADMIN``.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, FrozenSet, Mapping, Optional


class Role(str, Enum):
    CLIENT = "CLIENT"
    SERVICE_USER = "SERVICE_USER"
    ADMIN = "ADMIN"


class ResourceType(str, Enum):
    SERVICE = "service"
    BOOKING = "booking"
    ORDER = "order"


class Action(str, Enum):
    CREATE = "create"
    READ_ONE = "readOne"
    READ_MANY = "readMany"
    UPDATE = "update"
    UPDATE_STATUS = "updateStatus"
    DELETE = "delete"


# Roles allowed to attempt an action before ownership is considered.
# ADMIN is implicit everywhere and therefore not listed.  ``None`` means
# the action is public and needs no identity at all.
ROLE_CAPABILITIES: Dict[ResourceType, Dict[Action, Optional[FrozenSet[Role]]]] = {
    ResourceType.SERVICE: {
        Action.CREATE: frozenset({Role.SERVICE_USER}),
        Action.READ_ONE: None,
        Action.READ_MANY: None,
        Action.UPDATE: frozenset({Role.SERVICE_USER}),
        Action.DELETE: frozenset({Role.SERVICE_USER}),
    },
    ResourceType.BOOKING: {
        Action.CREATE: frozenset({Role.CLIENT}),
        Action.READ_ONE: frozenset({Role.CLIENT, Role.SERVICE_USER}),
        Action.READ_MANY: frozenset({Role.CLIENT, Role.SERVICE_USER}),
        Action.UPDATE: frozenset({Role.CLIENT, Role.SERVICE_USER}),
        Action.UPDATE_STATUS: frozenset({Role.SERVICE_USER}),
        Action.DELETE: frozenset({Role.CLIENT}),
    },
    ResourceType.ORDER: {
        Action.CREATE: frozenset({Role.CLIENT}),
        Action.READ_ONE: frozenset({Role.CLIENT}),
        Action.READ_MANY: frozenset({Role.CLIENT, Role.SERVICE_USER}),
        Action.UPDATE: frozenset({Role.CLIENT}),
        Action.DELETE: frozenset({Role.CLIENT}),
    },
}


def parse_role(value: Any) -> Role:
    """Return the ``Role`` for ``value``; raises ``ValueError`` when unknown."""
    if isinstance(value, Role):
        return value
    return Role(str(value))


@dataclass(frozen=True)
class Identity:
    """An authenticated actor."""

    id: int
    role: Role
    email: str = ""
    name: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    def has_role(self, *roles: Role) -> bool:
        return self.role in roles

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Identity":
        return cls(
            id=int(row["id"]),
            role=parse_role(row["role"]),
            email=row.get("email") or "",
            name=row.get("name"),
        )


def role_may_attempt(identity: Optional[Identity], resource_type: ResourceType, action: Action) -> bool:
    """Check the role-level capability table, ignoring ownership."""
    allowed = ROLE_CAPABILITIES.get(resource_type, {}).get(action, frozenset())
    if allowed is None:
        return True
    if identity is None:
        return False
    return identity.is_admin or identity.role in allowed
