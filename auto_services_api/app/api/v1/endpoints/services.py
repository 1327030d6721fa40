"""
Marketplace service endpoints for API v1.

Browsing is public.  Publishing requires a provider (``SERVICE_USER``)
or admin account; changing or removing a service requires its owner or
an admin.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Path, status

from ....core.roles import Identity
from ....core.security import get_current_user, get_optional_user
from ....schemas.common import success
from ....schemas.service import ServiceCreate, ServiceUpdate
from ....services.query_scope import ListQuery
from ....services.service_catalog_service import ServiceCatalogService
from ...deps import list_query

router = APIRouter()


@router.get("")
async def list_services(
    query: ListQuery = Depends(list_query),
    current_user: Optional[Identity] = Depends(get_optional_user),
) -> dict:
    """List services.

    Supports ``field=value`` and ``field[gt|gte|lt|lte|in]=value``
    filters, ``sort=price,-created_at``, ``select=title,price`` and
    ``page``/``limit`` pagination.
    """
    items, pagination, _total = await ServiceCatalogService.list_services(current_user, query)
    return success(items, count=len(items), pagination=pagination)


@router.get("/user/{user_id}")
async def list_services_by_user(user_id: int = Path(..., description="ID of the provider")) -> dict:
    items = await ServiceCatalogService.list_by_owner(user_id)
    return success(items, count=len(items))


@router.get("/{service_id}")
async def read_service(
    service_id: int = Path(..., description="ID of the service"),
    current_user: Optional[Identity] = Depends(get_optional_user),
) -> dict:
    return success(await ServiceCatalogService.get_service(current_user, service_id))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_service(data: ServiceCreate, current_user: Identity = Depends(get_current_user)) -> dict:
    """Publish a service.

    The fields required besides the base ones depend on ``category``:
    ``vehicle_type`` for REMORQUAGE, ``brand`` and ``model`` for
    PIECE_AUTO, ``repair_type`` for MECANIQUE, ``car_brand`` and
    ``car_model`` for LOCATION_VOITURE.
    """
    return success(await ServiceCatalogService.create_service(current_user, data))


@router.put("/{service_id}")
async def update_service(
    changes: ServiceUpdate,
    service_id: int = Path(..., description="ID of the service"),
    current_user: Identity = Depends(get_current_user),
) -> dict:
    return success(await ServiceCatalogService.update_service(current_user, service_id, changes))


@router.delete("/{service_id}")
async def delete_service(
    service_id: int = Path(..., description="ID of the service"),
    current_user: Identity = Depends(get_current_user),
) -> dict:
    await ServiceCatalogService.delete_service(current_user, service_id)
    return success()
