"""
Service layer abstraction.

Each service encapsulates business logic for a domain.  Services take
the caller's ``Identity`` as an explicit argument, consult the policy
engine before acting and talk to storage only through
``core.storage``.
"""
