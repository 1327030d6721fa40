"""
Top‑level router for version 1 of the API.

This router aggregates the domain‑specific routers (users, services,
bookings, orders) under a unified prefix.  When new domains are
introduced, update this file to include their routers.
"""

from fastapi import APIRouter

from .endpoints import bookings, orders, services, users

# Create a router for version 1 and include sub‑routers for each domain.
router = APIRouter()

router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(services.router, prefix="/services", tags=["services"])
router.include_router(bookings.router, prefix="/bookings", tags=["bookings"])
router.include_router(orders.router, prefix="/orders", tags=["orders"])
