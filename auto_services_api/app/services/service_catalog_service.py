"""
Business logic for marketplace services.

Providers publish services in one of the catalog categories; anyone may
browse them.  Category handling (required fields per category, which
fields are stored) lives in ``services.catalog``; this module adds the
authorization checks and storage calls around it.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from ..core import storage
from ..core.errors import NotFoundError
from ..core.roles import Action, Identity, ResourceType
from ..schemas.common import Pagination
from ..schemas.service import ServiceCreate, ServiceUpdate
from .catalog import build_service_document, build_update_patch, present_service
from .policy import enforce
from .query_scope import ListQuery, scoped_list

logger = logging.getLogger(__name__)


class ServiceCatalogService:
    """Service for creating, browsing and maintaining services."""

    @staticmethod
    def _load(service_id: Any) -> Dict[str, Any]:
        row = storage.find_one("services", service_id)
        if row is None:
            raise NotFoundError(f"Service not found with id of {service_id}")
        return row

    @classmethod
    async def list_services(
        cls, identity: Optional[Identity], query: ListQuery
    ) -> Tuple[List[Dict[str, Any]], Pagination, int]:
        """Filtered, sorted and paginated list of all services."""
        return scoped_list(identity, ResourceType.SERVICE, query, present=present_service)

    @classmethod
    async def list_by_owner(cls, owner_id: int) -> List[Dict[str, Any]]:
        rows = storage.find("services", {"owner_id": owner_id}, sort=[("created_at", -1)])
        return [present_service(row) for row in rows]

    @classmethod
    async def get_service(cls, identity: Optional[Identity], service_id: Any) -> Dict[str, Any]:
        row = cls._load(service_id)
        enforce(identity, Action.READ_ONE, ResourceType.SERVICE, row)
        return present_service(row)

    @classmethod
    async def create_service(cls, identity: Identity, data: ServiceCreate) -> Dict[str, Any]:
        """Publish a service owned by the caller.

        Raises ``ValidationError`` when a field required by the chosen
        category is missing.
        """
        enforce(identity, Action.CREATE, ResourceType.SERVICE)
        document = build_service_document(data.model_dump(), owner_id=identity.id)
        row = storage.create("services", document)
        logger.info("User %s created %s service %s", identity.id, row["category"], row["id"])
        return present_service(row)

    @classmethod
    async def update_service(cls, identity: Identity, service_id: Any, changes: ServiceUpdate) -> Dict[str, Any]:
        """Apply ``changes`` to a service owned by the caller (or any, for ADMIN)."""
        row = cls._load(service_id)
        enforce(identity, Action.UPDATE, ResourceType.SERVICE, row)
        patch = build_update_patch(row, changes.model_dump())
        updated = storage.update("services", row["id"], patch)
        if updated is None:
            raise NotFoundError(f"Service not found with id of {service_id}")
        logger.info("User %s updated service %s", identity.id, row["id"])
        return present_service(updated)

    @classmethod
    async def delete_service(cls, identity: Identity, service_id: Any) -> None:
        """Delete a service.

        Bookings of the service are kept; their provider-side checks
        report the service as not found afterwards.
        """
        row = cls._load(service_id)
        enforce(identity, Action.DELETE, ResourceType.SERVICE, row)
        storage.delete("services", row["id"])
        logger.info("User %s deleted service %s", identity.id, row["id"])
