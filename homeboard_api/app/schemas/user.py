"""
Pydantic models for user data.

Defines schemas for registering users, logging in, reading the
current user and the per-user settings.  Passwords are accepted on
input only and never returned.
"""

from typing import Optional

from pydantic import BaseModel, Field

from .board import BOARD_NAME_PATTERN


class UserBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=64, example="admin")
    email: Optional[str] = Field(None, example="admin@example.com")


class UserCreate(UserBase):
    """Schema for registering a user."""

    password: str = Field(..., min_length=1, example="strongpassword")


class UserRead(UserBase):
    """Schema for reading a user from the API."""

    id: str
    role_id: int

    model_config = {
        "from_attributes": True,
    }


class LoginRequest(BaseModel):
    name: str = Field(..., example="admin")
    password: str = Field(..., example="strongpassword")


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserSettingsRead(BaseModel):
    default_board: str = Field(..., example="default")


class UserSettingsUpdate(BaseModel):
    default_board: str = Field(..., pattern=BOARD_NAME_PATTERN, example="homelab")
