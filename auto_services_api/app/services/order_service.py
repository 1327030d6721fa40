"""
Business logic for auto-parts orders.

Orders belong to the client who placed them.  The order total is never
taken from the request: it is recomputed from the items on every create
and on every update that replaces the items.
"""

import dataclasses
import logging
from typing import Any, Dict, Iterable, List, Mapping, Tuple

from ..core import storage
from ..core.errors import NotFoundError
from ..core.roles import Action, Identity, ResourceType
from ..schemas.common import Pagination
from ..schemas.order import OrderCreate, OrderItem, OrderRead, OrderStatus, OrderUpdate
from .policy import enforce
from .query_scope import ListQuery, scoped_list

logger = logging.getLogger(__name__)

ListResult = Tuple[List[Dict[str, Any]], Pagination, int]


def compute_total(items: Iterable[Any]) -> float:
    """Sum of ``quantity * unit_price`` over ``items``, rounded to cents."""
    total = 0.0
    for item in items:
        if isinstance(item, Mapping):
            item = OrderItem.model_validate(item)
        total += item.quantity * item.unit_price
    return round(total, 2)


def present_order(row: Mapping[str, Any]) -> Dict[str, Any]:
    return OrderRead.from_row(row).model_dump(mode="json")


class OrderService:
    """Service for placing and maintaining orders."""

    @staticmethod
    def _load(order_id: Any) -> Dict[str, Any]:
        row = storage.find_one("orders", order_id)
        if row is None:
            raise NotFoundError(f"Order not found with id of {order_id}")
        return row

    @classmethod
    async def create_order(cls, identity: Identity, data: OrderCreate) -> Dict[str, Any]:
        enforce(identity, Action.CREATE, ResourceType.ORDER)
        total = compute_total(data.items)
        if data.total_price is not None and round(data.total_price, 2) != total:
            logger.info("Ignoring client total %s for order of user %s; computed %s", data.total_price, identity.id, total)
        row = storage.create(
            "orders",
            {
                "client_id": identity.id,
                "items": [item.model_dump() for item in data.items],
                "total_price": total,
                "status": OrderStatus.PENDING.value,
            },
        )
        logger.info("User %s placed order %s totalling %s", identity.id, row["id"], total)
        return present_order(row)

    @classmethod
    async def list_orders(cls, identity: Identity, query: ListQuery) -> ListResult:
        """Orders visible to the caller: their own, or all for ADMIN."""
        return scoped_list(identity, ResourceType.ORDER, query, present=present_order)

    @classmethod
    async def list_by_user(cls, identity: Identity, user_id: int, query: ListQuery) -> ListResult:
        filters = {**query.filters, "client_id": {"eq": user_id}}
        return await cls.list_orders(identity, dataclasses.replace(query, filters=filters))

    @classmethod
    async def get_order(cls, identity: Identity, order_id: Any) -> Dict[str, Any]:
        row = cls._load(order_id)
        enforce(identity, Action.READ_ONE, ResourceType.ORDER, row)
        return present_order(row)

    @classmethod
    async def update_order(cls, identity: Identity, order_id: Any, changes: OrderUpdate) -> Dict[str, Any]:
        """Replace the items and/or status of an order.

        A submitted ``total_price`` is ignored; when items are replaced
        the total is recomputed from them.
        """
        row = cls._load(order_id)
        enforce(identity, Action.UPDATE, ResourceType.ORDER, row)
        patch: Dict[str, Any] = {}
        if changes.items is not None:
            patch["items"] = [item.model_dump() for item in changes.items]
            patch["total_price"] = compute_total(changes.items)
        if changes.status is not None:
            patch["status"] = changes.status.value
        if not patch:
            return present_order(row)
        updated = storage.update("orders", row["id"], patch)
        if updated is None:
            raise NotFoundError(f"Order not found with id of {order_id}")
        logger.info("User %s updated order %s fields %s", identity.id, row["id"], sorted(patch))
        return present_order(updated)

    @classmethod
    async def delete_order(cls, identity: Identity, order_id: Any) -> None:
        row = cls._load(order_id)
        enforce(identity, Action.DELETE, ResourceType.ORDER, row)
        storage.delete("orders", row["id"])
        logger.info("User %s deleted order %s", identity.id, row["id"])
