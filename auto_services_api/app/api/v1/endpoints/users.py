"""
User endpoints for API v1.

Provide registration, login, the caller's own profile and an admin
listing of all users.  Registration and login return an access token
that clients send back as ``Authorization: Bearer <token>``.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from ....core.roles import Identity, Role
from ....core.security import get_current_user, require_roles
from ....schemas.common import success
from ....schemas.user import PasswordChange, UserLogin, UserRegister, UserUpdate
from ....services.user_service import UserService

router = APIRouter()


def _auth_payload(result: dict) -> dict:
    return {"user": result["user"].model_dump(mode="json"), "token": result["token"]}


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register_user(user: UserRegister) -> dict:
    """Register a new user and return it with an access token.

    The role defaults to ``CLIENT``; providers register as
    ``SERVICE_USER``.
    """
    result = await UserService.register(user)
    return success(_auth_payload(result))


@router.post("/login")
async def login_user(credentials: UserLogin) -> dict:
    result = await UserService.authenticate(credentials)
    return success(_auth_payload(result))


@router.get("/me")
async def read_me(current_user: Identity = Depends(get_current_user)) -> dict:
    user = await UserService.get_me(current_user)
    return success(user.model_dump(mode="json"))


@router.put("/update")
async def update_me(changes: UserUpdate, current_user: Identity = Depends(get_current_user)) -> dict:
    """Update the caller's name, phone or address."""
    user = await UserService.update_profile(current_user, changes)
    return success(user.model_dump(mode="json"))


@router.put("/password")
async def change_password(payload: PasswordChange, current_user: Identity = Depends(get_current_user)) -> dict:
    await UserService.change_password(current_user, payload)
    return success(message="Password updated")


@router.get("")
async def list_users(
    role: Optional[Role] = Query(None, description="Only users with this role"),
    current_user: Identity = Depends(require_roles(Role.ADMIN)),
) -> dict:
    """List all users.  Admin only."""
    users = await UserService.list_users(role.value if role else None)
    return success([user.model_dump(mode="json") for user in users], count=len(users))
