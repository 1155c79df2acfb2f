"""
Top‑level router for version 1 of the API.

This router aggregates domain‑specific routers (boards, users, auth)
under a unified prefix.  When new domains are introduced, update this
file to include their routers.
"""

from fastapi import APIRouter

from .endpoints import auth, boards, users

router = APIRouter()

router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(boards.router, prefix="/boards", tags=["boards"])
