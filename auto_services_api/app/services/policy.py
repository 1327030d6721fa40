"""
Authorization policy engine.

``authorize`` is the single decision point consulted by every resource
operation.  It is a pure function over state the caller has already
loaded (identity, ownership, the referenced service) and returns a
``Decision`` instead of raising.  Rules, resource type by resource
type:

* ADMIN may do anything.  Booking creation still needs an existing,
  available service, which is a data rule rather than a rights rule.
* Services: reads are public, ``create`` needs SERVICE_USER,
  ``update``/``delete`` need the owner.
* Bookings: ``create`` needs CLIENT and an existing (else NOT_FOUND),
  available (else INVALID) service; ``readOne`` needs the client or the
  provider; ``updateStatus`` needs the provider and is never open to a
  CLIENT; ``update`` needs the client or the provider (the fields each
  may change are limited by ``booking_lifecycle``); ``delete`` needs the
  client.
* Orders: ``create`` needs CLIENT; ``readOne``/``update``/``delete``
  need the client.
* ``readMany`` is open to every authenticated role; ``query_scope``
  narrows the results.

A denial caused by a missing referenced entity reports ``NOT_FOUND``;
a role or ownership mismatch reports ``FORBIDDEN``.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Type

from ..core.errors import (
    ApiError,
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    ValidationError,
)
from ..core.roles import ROLE_CAPABILITIES, Action, Identity, ResourceType, Role, role_may_attempt
from .ownership import Ownership, resolve_ownership

logger = logging.getLogger(__name__)


class DenyReason(str, Enum):
    UNAUTHENTICATED = "Unauthenticated"
    FORBIDDEN = "Forbidden"
    NOT_FOUND = "NotFound"
    INVALID = "Invalid"


_ERRORS: Dict[DenyReason, Type[ApiError]] = {
    DenyReason.UNAUTHENTICATED: AuthenticationError,
    DenyReason.FORBIDDEN: AuthorizationError,
    DenyReason.NOT_FOUND: NotFoundError,
    DenyReason.INVALID: ValidationError,
}


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: Optional[DenyReason] = None
    message: str = ""

    def __bool__(self) -> bool:
        return self.allowed

    def raise_for_deny(self) -> None:
        """Raise the taxonomy error matching a denial; no-op when allowed."""
        if self.allowed:
            return
        raise _ERRORS[self.reason](self.message or None)


ALLOW = Decision(True)


def deny(reason: DenyReason, message: str) -> Decision:
    return Decision(False, reason, message)


def _forbidden(identity: Identity, verb: str, resource_type: ResourceType) -> Decision:
    return deny(
        DenyReason.FORBIDDEN,
        f"User {identity.id} is not authorized to {verb} this {resource_type.value}",
    )


_VERBS = {
    Action.READ_ONE: "access",
    Action.UPDATE: "update",
    Action.UPDATE_STATUS: "change the status of",
    Action.DELETE: "delete",
}


def _booking_create(identity: Identity, target_service: Optional[Mapping[str, Any]]) -> Decision:
    if not identity.has_role(Role.CLIENT, Role.ADMIN):
        return deny(
            DenyReason.FORBIDDEN,
            f"User role {identity.role.value} is not authorized to book services",
        )
    if target_service is None:
        return deny(DenyReason.NOT_FOUND, "Service not found")
    if not target_service.get("available"):
        return deny(DenyReason.INVALID, "Service is not available")
    return ALLOW


def _booking_rule(identity: Identity, action: Action, ownership: Ownership) -> Decision:
    forbidden = _forbidden(identity, _VERBS[action], ResourceType.BOOKING)
    # The client relationship never needs the service hop.
    if action in (Action.READ_ONE, Action.DELETE) or identity.role is Role.CLIENT:
        if ownership.is_client(identity):
            return ALLOW
        if action is Action.DELETE or identity.role is Role.CLIENT:
            return forbidden
    if not ownership.resolved:
        return deny(DenyReason.NOT_FOUND, "Service not found")
    if ownership.is_provider(identity):
        return ALLOW
    return forbidden


def authorize(
    identity: Optional[Identity],
    action: Action,
    resource_type: ResourceType,
    resource: Optional[Mapping[str, Any]] = None,
    *,
    ownership: Optional[Ownership] = None,
    target_service: Optional[Mapping[str, Any]] = None,
) -> Decision:
    """Decide whether ``identity`` may perform ``action`` on a resource.

    ``ownership`` should be supplied for booking resources (it needs a
    storage lookup); for services and orders it is derived from
    ``resource`` when omitted.  ``target_service`` is the service a new
    booking refers to, ``None`` if it does not exist.
    """
    if ROLE_CAPABILITIES[resource_type].get(action, frozenset()) is None:
        return ALLOW
    if identity is None:
        return deny(DenyReason.UNAUTHENTICATED, "Not authorized to access this route")

    if resource_type is ResourceType.BOOKING and action is Action.CREATE:
        return _booking_create(identity, target_service)

    if identity.is_admin:
        return ALLOW

    if not role_may_attempt(identity, resource_type, action):
        return deny(
            DenyReason.FORBIDDEN,
            f"User role {identity.role.value} is not authorized to {action.value} {resource_type.value}s",
        )

    if action in (Action.CREATE, Action.READ_MANY):
        return ALLOW

    if ownership is None:
        ownership = resolve_ownership(resource_type, resource, find_service=None)

    if resource_type is ResourceType.BOOKING:
        return _booking_rule(identity, action, ownership)
    if resource_type is ResourceType.SERVICE and ownership.is_provider(identity):
        return ALLOW
    if resource_type is ResourceType.ORDER and ownership.is_client(identity):
        return ALLOW
    return _forbidden(identity, _VERBS.get(action, action.value), resource_type)


def enforce(
    identity: Optional[Identity],
    action: Action,
    resource_type: ResourceType,
    resource: Optional[Mapping[str, Any]] = None,
    **kwargs: Any,
) -> None:
    """``authorize`` and raise the matching error on denial."""
    decision = authorize(identity, action, resource_type, resource, **kwargs)
    if not decision.allowed:
        logger.warning(
            "Denied %s on %s %s for user %s: %s",
            action.value,
            resource_type.value,
            resource.get("id") if resource else "-",
            identity.id if identity else "anonymous",
            decision.reason.value,
        )
    decision.raise_for_deny()
