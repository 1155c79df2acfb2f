"""
User endpoints for API v1.

The current user can read their account and choose the board that is
flagged as default in the board list.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from homeboard_api.app.core.security import get_current_user
from homeboard_api.app.schemas.user import UserRead, UserSettingsRead, UserSettingsUpdate
from homeboard_api.app.services.user_service import UserService


router = APIRouter()


@router.get("/me", response_model=UserRead)
async def read_me(current_user: dict = Depends(get_current_user)) -> UserRead:
    try:
        return await UserService.get_user(current_user["user_id"])
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


@router.get("/me/settings", response_model=UserSettingsRead)
async def read_my_settings(current_user: dict = Depends(get_current_user)) -> UserSettingsRead:
    return await UserService.get_settings(current_user["user_id"])


@router.put("/me/settings", response_model=UserSettingsRead)
async def update_my_settings(
    body: UserSettingsUpdate,
    current_user: dict = Depends(get_current_user),
) -> UserSettingsRead:
    """Set the default board of the current user.

    The board does not need to exist yet; the name only has to be a
    valid board name.
    """
    return await UserService.update_settings(current_user["user_id"], body.default_board)
