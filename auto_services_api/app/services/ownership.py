"""
Resource ownership resolver.

Works out which users have an ownership relationship with a resource:

* a service is owned by ``service.owner_id``;
* an order is owned by its client, ``order.client_id``;
* a booking is owned by its client and, one hop away, by the owner of
  the booked service.

The resolver never raises.  When the booking's service no longer
exists the result is returned with ``missing`` set, and the policy
engine decides whether that matters for the action at hand.
"""

from dataclasses import dataclass
from typing import Any, Callable, FrozenSet, Mapping, Optional

from ..core import storage
from ..core.roles import Identity, ResourceType

ServiceLookup = Callable[[Any], Optional[Mapping[str, Any]]]


def _find_service(service_id: Any) -> Optional[Mapping[str, Any]]:
    return storage.find_one("services", service_id)


@dataclass(frozen=True)
class Ownership:
    clients: FrozenSet[int] = frozenset()
    providers: FrozenSet[int] = frozenset()
    # Name of the reference that did not resolve, if any.
    missing: Optional[str] = None

    @property
    def resolved(self) -> bool:
        return self.missing is None

    def is_client(self, identity: Optional[Identity]) -> bool:
        return identity is not None and identity.id in self.clients

    def is_provider(self, identity: Optional[Identity]) -> bool:
        return identity is not None and identity.id in self.providers


def _ids(*values: Any) -> FrozenSet[int]:
    result = set()
    for value in values:
        try:
            result.add(int(value))
        except (TypeError, ValueError):
            continue
    return frozenset(result)


def resolve_ownership(
    resource_type: ResourceType,
    resource: Optional[Mapping[str, Any]],
    find_service: Optional[ServiceLookup] = _find_service,
) -> Ownership:
    """Return the owners of ``resource``.

    ``find_service`` loads the booked service for the booking hop; pass
    ``None`` to skip the lookup, in which case the hop is reported as
    unresolved.
    """
    if resource is None:
        return Ownership(missing=resource_type.value)

    if resource_type is ResourceType.SERVICE:
        return Ownership(providers=_ids(resource.get("owner_id")))

    if resource_type is ResourceType.ORDER:
        return Ownership(clients=_ids(resource.get("client_id")))

    clients = _ids(resource.get("client_id"))
    service = find_service(resource.get("service_id")) if find_service else None
    if service is None:
        return Ownership(clients=clients, missing="service")
    return Ownership(clients=clients, providers=_ids(service.get("owner_id")))
