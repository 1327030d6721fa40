"""
Response envelope shared by every endpoint.

Request bodies derive from ``RequestModel``, which accepts both the
snake_case field names and their camelCase spelling (``serviceId``,
``bookingDate``) used by existing front ends.  Responses are always
snake_case.

All responses have the shape ``{success, data?, message?, count?,
pagination?}``.  Failures are produced by the handlers in
``core.errors``; this module builds the successful ones.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class RequestModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PageLink(BaseModel):
    page: int
    limit: int


class Pagination(BaseModel):
    """Links to the neighbouring pages; a link is present only if that page has data."""

    next: Optional[PageLink] = None
    prev: Optional[PageLink] = None


def success(
    data: Any = None,
    *,
    message: Optional[str] = None,
    count: Optional[int] = None,
    pagination: Optional[Pagination] = None,
) -> dict:
    """Build a success envelope, omitting empty keys."""
    body: dict = {"success": True}
    if message is not None:
        body["message"] = message
    if count is not None:
        body["count"] = count
    if pagination is not None:
        body["pagination"] = pagination.model_dump(exclude_none=True)
    body["data"] = data if data is not None else {}
    return body
