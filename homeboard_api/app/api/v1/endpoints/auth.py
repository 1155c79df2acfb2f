"""
Authentication endpoints for API v1.

``/auth/register`` creates an account (the first one becomes the
owner) and ``/auth/token`` exchanges a name and password for a bearer
token used by the protected board routes.
"""

import sqlite3

from fastapi import APIRouter, HTTPException, status

from homeboard_api.app.core.security import create_access_token
from homeboard_api.app.schemas.user import LoginRequest, Token, UserCreate, UserRead
from homeboard_api.app.services.user_service import UserService


router = APIRouter()


@router.post("/register", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def register(user: UserCreate) -> UserRead:
    try:
        return await UserService.create_user(user)
    except sqlite3.IntegrityError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"User {user.name} already exists",
        ) from e


@router.post("/token", response_model=Token)
async def login(credentials: LoginRequest) -> Token:
    """Return a bearer token for valid credentials, 401 otherwise."""
    user = await UserService.authenticate(credentials.name, credentials.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect name or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return Token(access_token=create_access_token({"sub": user.name}))
