"""
Dependencies shared by the v1 endpoints.
"""

from fastapi import Request

from ..services.query_scope import ListQuery, parse_query_params


def list_query(request: Request) -> ListQuery:
    """Parse filtering, sorting, projection and paging from the query string."""
    return parse_query_params(request.query_params)
