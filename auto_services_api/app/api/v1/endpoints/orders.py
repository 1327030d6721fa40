"""
Order endpoints for API v1.

Clients order auto parts; each order is visible only to the client who
placed it and to admins.
"""

from fastapi import APIRouter, Depends, Path, status

from ....core.roles import Identity, Role
from ....core.security import get_current_user, require_roles
from ....schemas.common import success
from ....schemas.order import OrderCreate, OrderUpdate
from ....services.order_service import OrderService
from ....services.query_scope import ListQuery
from ...deps import list_query

router = APIRouter()


@router.get("")
async def list_orders(
    query: ListQuery = Depends(list_query),
    current_user: Identity = Depends(get_current_user),
) -> dict:
    items, pagination, _total = await OrderService.list_orders(current_user, query)
    return success(items, count=len(items), pagination=pagination)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_order(order: OrderCreate, current_user: Identity = Depends(get_current_user)) -> dict:
    """Place an order.  ``total_price`` is computed from the items."""
    return success(await OrderService.create_order(current_user, order))


@router.get("/user/{user_id}")
async def list_orders_by_user(
    user_id: int = Path(..., description="ID of the client"),
    query: ListQuery = Depends(list_query),
    current_user: Identity = Depends(require_roles(Role.ADMIN)),
) -> dict:
    items, pagination, _total = await OrderService.list_by_user(current_user, user_id, query)
    return success(items, count=len(items), pagination=pagination)


@router.get("/{order_id}")
async def read_order(
    order_id: int = Path(..., description="ID of the order"),
    current_user: Identity = Depends(get_current_user),
) -> dict:
    return success(await OrderService.get_order(current_user, order_id))


@router.put("/{order_id}")
async def update_order(
    changes: OrderUpdate,
    order_id: int = Path(..., description="ID of the order"),
    current_user: Identity = Depends(get_current_user),
) -> dict:
    return success(await OrderService.update_order(current_user, order_id, changes))


@router.delete("/{order_id}")
async def delete_order(
    order_id: int = Path(..., description="ID of the order"),
    current_user: Identity = Depends(get_current_user),
) -> dict:
    await OrderService.delete_order(current_user, order_id)
    return success()
