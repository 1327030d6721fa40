"""
Pydantic models for user data.

Defines schemas for registering users, authenticating and reading user
information.  Password hashes never leave the service layer; ``UserRead``
has no password field.
"""

from typing import Any, Mapping, Optional

from pydantic import BaseModel, Field

from ..core.roles import Role
from .common import RequestModel


class UserBase(RequestModel):
    name: str = Field(..., min_length=1, examples=["Karim Benali"])
    email: str = Field(..., pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$", examples=["user@example.com"])
    phone: Optional[str] = Field(None, examples=["+213555000000"])
    address: Optional[str] = Field(None, examples=["12 rue Didouche Mourad, Alger"])


class UserRegister(UserBase):
    """Schema for registering a user.

    ``role`` defaults to ``CLIENT``.  Providers register with
    ``SERVICE_USER``.  The role cannot be changed afterwards.
    """

    password: str = Field(..., min_length=6, examples=["strongpassword"])
    role: Role = Field(Role.CLIENT, examples=["CLIENT"])


class UserLogin(RequestModel):
    email: str = Field(..., examples=["user@example.com"])
    password: str = Field(..., examples=["strongpassword"])


class UserUpdate(RequestModel):
    """Profile fields a user may change; omitted fields keep their value."""

    name: Optional[str] = Field(None, min_length=1)
    phone: Optional[str] = None
    address: Optional[str] = None


class PasswordChange(RequestModel):
    current_password: str
    new_password: str = Field(..., min_length=6)


class UserRead(BaseModel):
    """Schema for reading a user from the API."""

    id: int
    name: Optional[str] = None
    email: str
    role: Role
    phone: Optional[str] = None
    address: Optional[str] = None
    created_at: Optional[str] = None

    model_config = {
        "from_attributes": True,
    }

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "UserRead":
        return cls.model_validate({key: row.get(key) for key in cls.model_fields})
