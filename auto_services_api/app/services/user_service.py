"""
Business logic for users.

Registration, login and profile maintenance.  Passwords are hashed with
``core.security.hash_password`` before they reach storage and the hash
is never returned; callers receive ``UserRead`` models.
"""

import logging
from typing import List, Optional

from ..core import storage
from ..core.errors import AuthenticationError, NotFoundError, ValidationError
from ..core.roles import Identity
from ..core.security import hash_password, issue_token_for, verify_password
from ..schemas.user import PasswordChange, UserLogin, UserRead, UserRegister, UserUpdate

logger = logging.getLogger(__name__)

CLEARABLE_PROFILE_FIELDS = ("phone", "address")


class UserService:
    """Service for registering and maintaining users."""

    @classmethod
    async def register(cls, data: UserRegister) -> dict:
        """Create a user and return it together with an access token.

        Emails are compared case-insensitively.  Raises ``ValidationError``
        if the email is already registered.
        """
        email = data.email.strip().lower()
        if storage.find_one_by("users", {"email": email}):
            raise ValidationError("User already exists")
        row = storage.create(
            "users",
            {
                "name": data.name,
                "email": email,
                "password": hash_password(data.password),
                "role": data.role.value,
                "phone": data.phone,
                "address": data.address,
            },
        )
        logger.info("Registered user %s with role %s", email, data.role.value)
        return {"user": UserRead.from_row(row), "token": issue_token_for(row["id"])}

    @classmethod
    async def authenticate(cls, credentials: UserLogin) -> dict:
        """Check an email/password pair and issue a token.

        The same message is used for an unknown email and a wrong
        password.
        """
        row = storage.find_one_by("users", {"email": credentials.email.strip().lower()})
        if not row or not verify_password(credentials.password, row.get("password") or ""):
            logger.info("Failed login for %s", credentials.email)
            raise AuthenticationError("Invalid credentials")
        logger.info("User %s logged in", row["email"])
        return {"user": UserRead.from_row(row), "token": issue_token_for(row["id"])}

    @classmethod
    async def get_user(cls, user_id: int) -> UserRead:
        row = storage.find_one("users", user_id)
        if not row:
            raise NotFoundError("User not found")
        return UserRead.from_row(row)

    @classmethod
    async def get_me(cls, identity: Identity) -> UserRead:
        return await cls.get_user(identity.id)

    @classmethod
    async def update_profile(cls, identity: Identity, changes: UserUpdate) -> UserRead:
        """Update the caller's own name, phone or address.

        Omitted fields keep the stored value.  Sending an empty string or
        ``null`` clears ``phone`` or ``address``; the name cannot be
        cleared.  Email and role cannot be changed here.
        """
        patch = {}
        for key, value in changes.model_dump(exclude_unset=True).items():
            if value:
                patch[key] = value
            elif key in CLEARABLE_PROFILE_FIELDS:
                patch[key] = None
        row = storage.update("users", identity.id, patch)
        if row is None:
            raise NotFoundError("User not found")
        logger.info("User %s updated profile fields %s", identity.id, sorted(patch))
        return UserRead.from_row(row)

    @classmethod
    async def change_password(cls, identity: Identity, payload: PasswordChange) -> None:
        row = storage.find_one("users", identity.id)
        if row is None:
            raise NotFoundError("User not found")
        if not verify_password(payload.current_password, row.get("password") or ""):
            raise AuthenticationError("Current password is incorrect")
        storage.update("users", identity.id, {"password": hash_password(payload.new_password)})
        logger.info("User %s changed password", identity.id)

    @classmethod
    async def list_users(cls, role: Optional[str] = None) -> List[UserRead]:
        """Return every user, optionally only those with ``role``."""
        filters = {"role": role} if role else None
        rows = storage.find("users", filters, sort=[("created_at", -1)])
        return [UserRead.from_row(row) for row in rows]
