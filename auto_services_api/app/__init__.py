"""
Application package initializer.

The project is organised into logical pieces to avoid a single
monolithic codebase.  Each domain (services, bookings, orders, users)
has its schemas under ``schemas``, its business logic under
``services`` and a router defined in ``api/v1/endpoints``.  The
authorization core (roles, ownership, policy, query scoping and the
booking lifecycle) lives in ``core`` and ``services`` and is shared by
all domains.
"""

from .main import app  # noqa: F401
