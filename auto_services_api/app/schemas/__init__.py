"""
Pydantic schema definitions for API payloads.

Each domain (users, services, bookings, orders) defines its own
Pydantic models for request and response bodies.  Schemas are separated
from storage rows to decouple the API representation from persistence.
"""
