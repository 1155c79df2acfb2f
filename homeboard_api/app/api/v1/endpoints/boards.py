"""
Board endpoints for API v1.

Reading a board by name is public so that guests can open shared
boards.  Listing boards, changing customization and creating the
example board require an authenticated user; importing container apps
into a board config is reserved for owners and administrators.
"""

import sqlite3
from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status

from homeboard_api.app.core.security import ADMIN_ROLE, OWNER_ROLE, get_current_user, require_roles
from homeboard_api.app.schemas.board import (
    BOARD_NAME_PATTERN,
    AddContainerApps,
    BoardCustomization,
    BoardDetail,
    BoardRead,
    BoardSummary,
)
from homeboard_api.app.services.board_service import BoardService


router = APIRouter()

BoardName = Annotated[str, Path(pattern=BOARD_NAME_PATTERN)]


@router.get("/", response_model=List[BoardSummary])
async def list_boards(current_user: dict = Depends(get_current_user)) -> List[BoardSummary]:
    """List all boards that have a config file.

    Each entry reports how many apps, widgets and categories the board
    holds and whether it is the caller's default board.
    """
    return await BoardService.list_boards(current_user.get("user_id"))


@router.post("/{board_name}/apps", status_code=status.HTTP_204_NO_CONTENT)
async def add_apps_for_containers(
    board_name: BoardName,
    body: AddContainerApps,
    current_user: dict = Depends(require_roles(OWNER_ROLE, ADMIN_ROLE)),
) -> None:
    """Add one app per container to a board config (admin only)."""
    try:
        await BoardService.add_apps_for_containers(board_name, body.apps)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    return None


@router.get("/{board_name}", response_model=BoardDetail)
async def get_board(
    board_name: BoardName,
    layout: Optional[str] = Query(None, description="Layout name, defaults to 'default'"),
) -> BoardDetail:
    """Retrieve a board with its sections, apps and widgets."""
    try:
        return await BoardService.get_board(board_name, layout or "default")
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


@router.get("/{board_name}/simple", response_model=BoardRead)
async def get_board_simple(board_name: BoardName) -> BoardRead:
    try:
        return await BoardService.get_board_simple(board_name)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


@router.put("/{board_name}/customization", response_model=BoardRead)
async def update_customization(
    board_name: BoardName,
    customization: BoardCustomization,
    current_user: dict = Depends(get_current_user),
) -> BoardRead:
    """Update access, layout, appearance and page metadata of a board."""
    try:
        return await BoardService.update_customization(board_name, customization)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


@router.post("/{board_name}/example", response_model=BoardRead, status_code=status.HTTP_201_CREATED)
async def create_example_board(
    board_name: BoardName,
    current_user: dict = Depends(get_current_user),
) -> BoardRead:
    """Create a board filled with sample apps and widgets.

    The caller becomes the owner of the new board.  Returns 409 if a
    board with this name already exists.
    """
    try:
        return await BoardService.create_example_board(board_name, current_user.get("user_id"))
    except sqlite3.IntegrityError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Board {board_name} already exists",
        ) from e
