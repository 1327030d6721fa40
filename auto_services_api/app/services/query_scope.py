"""
Role-scoped list queries with filtering, sorting, projection and pagination.

List endpoints hand their raw query parameters to ``parse_query_params``
and the result to ``scoped_list``.  The role scope is merged into the
caller's filters so a client can narrow its own results but never widen
them:

* services are public and unscoped;
* bookings are limited to the caller's own (CLIENT) or to those of
  services the caller owns (SERVICE_USER);
* orders are limited to the caller's own for every role but ADMIN.

Query string grammar::

    ?price[gte]=100&price[lte]=500&category=MECANIQUE
    &select=title,price&sort=price,-created_at&page=2&limit=20
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, FrozenSet, List, Mapping, Optional, Sequence, Set, Tuple

from ..core import storage
from ..core.config import settings
from ..core.roles import Action, Identity, ResourceType, Role
from ..schemas.common import PageLink, Pagination
from .policy import enforce

logger = logging.getLogger(__name__)

PagePresenter = Callable[[List[Dict[str, Any]]], List[Dict[str, Any]]]

TABLE_FOR: Dict[ResourceType, str] = {
    ResourceType.SERVICE: "services",
    ResourceType.BOOKING: "bookings",
    ResourceType.ORDER: "orders",
}

RESERVED_PARAMS = frozenset({"select", "sort", "page", "limit"})
FILTER_OPERATORS = frozenset({"gt", "gte", "lt", "lte", "in"})
DEFAULT_PAGE = 1

_OPERATOR_KEY = re.compile(r"^(?P<field>[^\[\]]+)\[(?P<op>[^\[\]]*)\]$")


@dataclass
class ListQuery:
    filters: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    sort: List[Tuple[str, int]] = field(default_factory=list)
    page: int = DEFAULT_PAGE
    limit: int = 0
    select: Optional[List[str]] = None

    def __post_init__(self) -> None:
        if self.limit <= 0:
            self.limit = settings.default_page_limit


def _positive_int(value: Any, default: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


def _split(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [item.strip() for item in str(value).split(",") if item.strip()]


def parse_sort(value: Optional[str]) -> List[Tuple[str, int]]:
    """``"price,-created_at"`` -> ``[("price", 1), ("created_at", -1)]``."""
    keys = []
    for item in _split(value):
        if item.startswith("-"):
            keys.append((item[1:], -1))
        else:
            keys.append((item.lstrip("+"), 1))
    return [(name, direction) for name, direction in keys if name]


def parse_query_params(params: Mapping[str, Any]) -> ListQuery:
    """Split raw query parameters into filters, sort, page, limit and select."""
    filters: Dict[str, Dict[str, Any]] = {}
    for key, value in params.items():
        if key in RESERVED_PARAMS:
            continue
        match = _OPERATOR_KEY.match(key)
        if match:
            name, op = match.group("field"), match.group("op")
            if op not in FILTER_OPERATORS:
                op = "eq"
        else:
            name, op = key, "eq"
        filters.setdefault(name, {})[op] = value
    select = _split(params.get("select"))
    return ListQuery(
        filters=filters,
        sort=parse_sort(params.get("sort")),
        page=_positive_int(params.get("page"), DEFAULT_PAGE),
        limit=_positive_int(params.get("limit"), settings.default_page_limit),
        select=select or None,
    )


def paginate(page: int, limit: int, total: int) -> Pagination:
    """Neighbouring page links for ``page`` of a ``total``-item result."""
    pagination = Pagination()
    if page * limit < total:
        pagination.next = PageLink(page=page + 1, limit=limit)
    if page > 1:
        pagination.prev = PageLink(page=page - 1, limit=limit)
    return pagination


def scope_for(identity: Optional[Identity], resource_type: ResourceType) -> Optional[Tuple[str, FrozenSet[int]]]:
    """Return ``(field, allowed ids)`` restricting ``identity``'s reads.

    ``None`` means unscoped.  An empty id set means nothing is visible.
    """
    if resource_type is ResourceType.SERVICE or identity is None or identity.is_admin:
        return None
    if resource_type is ResourceType.BOOKING and identity.role is Role.SERVICE_USER:
        owned = storage.find("services", {"owner_id": identity.id})
        return "service_id", frozenset(int(service["id"]) for service in owned)
    return "client_id", frozenset({identity.id})


def _as_ids(values: Any) -> Set[int]:
    items = values.split(",") if isinstance(values, str) else values
    if not isinstance(items, (list, tuple, set, frozenset)):
        items = [items]
    ids = set()
    for item in items:
        try:
            ids.add(int(item))
        except (TypeError, ValueError):
            continue
    return ids


def _apply_scope(filters: Dict[str, Dict[str, Any]], name: str, allowed: FrozenSet[int]) -> bool:
    """Intersect the caller's condition on ``name`` with ``allowed``.

    Returns ``False`` when the intersection is empty.
    """
    conditions = filters.setdefault(name, {})
    visible = set(allowed)
    if "eq" in conditions:
        visible &= _as_ids(conditions.pop("eq"))
    if "in" in conditions:
        visible &= _as_ids(conditions["in"])
    if not visible:
        return False
    conditions["in"] = sorted(visible)
    return True


def project(item: Mapping[str, Any], select: Optional[Sequence[str]]) -> Dict[str, Any]:
    """Keep the ``select``ed fields of ``item``; ``id`` is always kept."""
    known = [name for name in select or () if name in item]
    if not known:
        return dict(item)
    return {name: item[name] for name in ["id", *known] if name in item}


def scoped_list(
    identity: Optional[Identity],
    resource_type: ResourceType,
    query: ListQuery,
    present: Callable[[Mapping[str, Any]], Mapping[str, Any]] = dict,
    present_page: Optional[PagePresenter] = None,
) -> Tuple[List[Dict[str, Any]], Pagination, int]:
    """Run a list read for ``identity``.

    Parameters
    ----------
    identity : Identity or None
        The caller; ``None`` is only accepted for public resources.
    resource_type : ResourceType
        The collection to read.
    query : ListQuery
        Parsed filters, sort, page, limit and projection.
    present : callable
        Turns a stored row into its public form before projection.
    present_page : callable, optional
        Presents a whole page of rows at once, for presenters that load
        related records in bulk.  Takes precedence over ``present``.

    Returns
    -------
    tuple
        ``(items, pagination, total)`` where ``total`` counts the whole
        scoped and filtered set.
    """
    enforce(identity, Action.READ_MANY, resource_type)
    table = TABLE_FOR[resource_type]
    filters = {name: dict(conditions) for name, conditions in query.filters.items()}

    scope = scope_for(identity, resource_type)
    if scope is not None and not _apply_scope(filters, *scope):
        return [], paginate(query.page, query.limit, 0), 0

    columns = storage.TABLES[table]
    sort = [(name, direction) for name, direction in query.sort if name in columns]
    if not sort:
        sort = [(storage.CREATED_AT[table], -1)]

    total = storage.count(table, filters)
    rows = storage.find(table, filters, sort, skip=(query.page - 1) * query.limit, limit=query.limit)
    presented = present_page(rows) if present_page else [present(row) for row in rows]
    items = [project(item, query.select) for item in presented]
    logger.debug("Listed %d of %d %ss for %s", len(items), total, resource_type.value, identity.id if identity else "anonymous")
    return items, paginate(query.page, query.limit, total), total
