"""
Business logic for users.

Users own boards and pick a default board, which the board list
reports through ``is_default_for_user``.  The first registered user
becomes the owner of the instance; everybody else starts with the
plain user role.
"""

import logging
from typing import Optional
from uuid import uuid4

from homeboard_api.app.core.config import settings
from homeboard_api.app.core.db import get_connection
from homeboard_api.app.core.security import OWNER_ROLE, USER_ROLE, hash_password, verify_password

from ..schemas.user import UserCreate, UserRead, UserSettingsRead

logger = logging.getLogger(__name__)


class UserService:
    """Service for registering users and managing their settings."""

    @classmethod
    async def create_user(cls, data: UserCreate) -> UserRead:
        """Create a new user and its settings row.

        Raises ``sqlite3.IntegrityError`` if the name is already taken.
        """
        conn = get_connection()
        try:
            cursor = conn.cursor()
            row = cursor.execute("SELECT COUNT(*) AS count FROM users").fetchone()
            role_id = OWNER_ROLE if row["count"] == 0 else USER_ROLE
            user_id = str(uuid4())
            cursor.execute(
                "INSERT INTO users (id, name, email, password, role_id) VALUES (?, ?, ?, ?, ?)",
                (user_id, data.name, data.email, hash_password(data.password), role_id),
            )
            cursor.execute(
                "INSERT INTO user_settings (user_id, default_board) VALUES (?, ?)",
                (user_id, settings.default_board_name),
            )
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()
        logger.info("Registered user %s with role %s", data.name, role_id)
        return UserRead(id=user_id, name=data.name, email=data.email, role_id=role_id)

    @classmethod
    async def authenticate(cls, name: str, password: str) -> Optional[UserRead]:
        """Return the user if ``password`` matches, otherwise ``None``."""
        conn = get_connection()
        try:
            row = conn.execute(
                "SELECT id, name, email, password, role_id FROM users WHERE name = ?",
                (name,),
            ).fetchone()
        finally:
            conn.close()
        if not row or not verify_password(password, row["password"]):
            logger.warning("Failed login for %s", name)
            return None
        return UserRead(id=row["id"], name=row["name"], email=row["email"], role_id=row["role_id"])

    @classmethod
    async def get_user(cls, user_id: str) -> UserRead:
        conn = get_connection()
        try:
            row = conn.execute(
                "SELECT id, name, email, role_id FROM users WHERE id = ?",
                (user_id,),
            ).fetchone()
        finally:
            conn.close()
        if not row:
            raise ValueError("User not found")
        return UserRead(id=row["id"], name=row["name"], email=row["email"], role_id=row["role_id"])

    @classmethod
    async def get_default_board(cls, user_id: Optional[str]) -> str:
        """Name of the user's default board, or the configured fallback."""
        if user_id is None:
            return settings.default_board_name
        conn = get_connection()
        try:
            row = conn.execute(
                "SELECT default_board FROM user_settings WHERE user_id = ?",
                (user_id,),
            ).fetchone()
        finally:
            conn.close()
        return row["default_board"] if row else settings.default_board_name

    @classmethod
    async def get_settings(cls, user_id: str) -> UserSettingsRead:
        return UserSettingsRead(default_board=await cls.get_default_board(user_id))

    @classmethod
    async def update_settings(cls, user_id: str, default_board: str) -> UserSettingsRead:
        """Store the default board of a user (upsert)."""
        conn = get_connection()
        try:
            conn.execute(
                "INSERT INTO user_settings (user_id, default_board) VALUES (?, ?)"
                " ON CONFLICT(user_id) DO UPDATE SET default_board = excluded.default_board",
                (user_id, default_board),
            )
            conn.commit()
        finally:
            conn.close()
        logger.info("User %s set default board to %s", user_id, default_board)
        return UserSettingsRead(default_board=default_board)
