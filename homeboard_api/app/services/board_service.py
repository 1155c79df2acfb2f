"""
Business logic for boards.

A board has named layouts; a layout is split into sections ordered by
``position``; apps and widgets are items of the board placed into
sections through ``layout_items`` rows that carry their grid
coordinates.  ``get_board`` loads these rows and assembles the nested
payload with the helpers from ``board_mapping``.

The board list and the container import work on the JSON board
configuration files handled by ``ConfigService``.
"""

import logging
import sqlite3
from typing import Any, Dict, List, Optional, Sequence
from uuid import uuid4

from homeboard_api.app.core.db import get_connection

from ..schemas.board import (
    BoardCustomization,
    BoardDetail,
    BoardOwner,
    BoardRead,
    BoardSummary,
    ContainerApp,
)
from .board_mapping import map_app, map_section, map_widget
from .config_service import ConfigService, generate_default_app
from .user_service import UserService

logger = logging.getLogger(__name__)

_BOOL_BOARD_COLUMNS = (
    "allow_guests",
    "is_left_sidebar_visible",
    "is_right_sidebar_visible",
    "is_ping_enabled",
)
_BOOL_APP_ITEM_COLUMNS = ("open_in_new_tab", "is_ping_enabled")

_DASHBOARD_ICONS = "https://cdn.jsdelivr.net/gh/walkxcode/dashboard-icons@master/png"

EXAMPLE_APPS: List[Dict[str, Any]] = [
    {
        "name": "Contribute",
        "internal_url": "https://github.com/ajnart/homarr",
        "icon_url": f"{_DASHBOARD_ICONS}/github.png",
        "width": 2, "height": 1, "x": 2, "y": 0,
    },
    {
        "name": "Discord",
        "internal_url": "https://discord.com/invite/aCsmEV5RgA",
        "icon_url": f"{_DASHBOARD_ICONS}/discord.png",
        "width": 2, "height": 1, "x": 4, "y": 0,
    },
    {
        "name": "Donate",
        "internal_url": "https://ko-fi.com/ajnart",
        "icon_url": f"{_DASHBOARD_ICONS}/ko-fi.png",
        "width": 2, "height": 1, "x": 6, "y": 0,
    },
    {
        "name": "Documentation",
        "internal_url": "https://homarr.dev",
        "icon_url": "/imgs/logo/logo.png",
        "width": 2, "height": 2, "x": 6, "y": 1,
    },
]

EXAMPLE_WIDGETS: List[Dict[str, Any]] = [
    {"type": "weather", "width": 2, "height": 1, "x": 0, "y": 0},
    {"type": "date", "width": 2, "height": 1, "x": 8, "y": 0},
    {"type": "date", "width": 2, "height": 1, "x": 8, "y": 1},
    {"type": "notebook", "width": 6, "height": 3, "x": 0, "y": 1},
]


def _placeholders(values: Sequence[Any]) -> str:
    return ", ".join("?" for _ in values)


def _board_dict(row: sqlite3.Row) -> Dict[str, Any]:
    board = dict(row)
    for column in _BOOL_BOARD_COLUMNS:
        board[column] = bool(board[column])
    return board


def _wrapper_position(wrapper: Dict[str, Any]) -> float:
    position = wrapper.get("position")
    if isinstance(position, bool) or not isinstance(position, (int, float)):
        return 0
    return position


def _layout_item(row: sqlite3.Row) -> Dict[str, Any]:
    return {
        "id": row["layout_item_id"],
        "item_id": row["item_id"],
        "section_id": row["section_id"],
        "x": row["x"],
        "y": row["y"],
        "width": row["width"],
        "height": row["height"],
    }


class BoardService:
    """Service for reading and changing boards."""

    # ------------------------------------------------------------------
    # Board list and container import (config files)
    # ------------------------------------------------------------------

    @classmethod
    async def list_boards(cls, user_id: Optional[str]) -> List[BoardSummary]:
        """Summarise every board config file.

        Files that cannot be parsed are skipped with a warning so one
        broken config does not hide the other boards.
        """
        default_board = await UserService.get_default_board(user_id)
        boards: List[BoardSummary] = []
        for name in ConfigService.list_config_names():
            try:
                config = await ConfigService.get_frontend_config(name)
            except ValueError as e:
                logger.warning("Skipping board config %s: %s", name, e)
                continue
            boards.append(
                BoardSummary(
                    name=name,
                    count_apps=len(config["apps"]),
                    count_widgets=len(config["widgets"]),
                    count_categories=len(config["categories"]),
                    is_default_for_user=name == default_board,
                )
            )
        return boards

    @classmethod
    async def add_apps_for_containers(cls, board_name: str, apps: List[ContainerApp]) -> int:
        """Append one app per container to the board config.

        New apps go into the wrapper with the lowest position.  Raises
        ``ValueError`` if the config does not exist or has no wrapper.
        Returns the number of apps added.
        """
        if not await ConfigService.config_exists(board_name):
            raise ValueError("Board not found")
        config = await ConfigService.get_config(board_name)
        wrappers = config["wrappers"]
        if not wrappers:
            raise ValueError("Board has no wrapper to place apps in")
        lowest_wrapper = min(wrappers, key=_wrapper_position)

        new_apps = []
        for container in apps:
            default_app = generate_default_app(lowest_wrapper.get("id"))
            address = f"http://localhost:{container.port}" if container.port else "http://localhost"
            new_apps.append(
                {
                    **default_app,
                    "name": container.name,
                    "url": address,
                    "behaviour": {**default_app["behaviour"], "external_url": address},
                }
            )

        await ConfigService.save_config(board_name, {**config, "apps": [*config["apps"], *new_apps]})
        logger.info("Added %d container apps to board %s", len(new_apps), board_name)
        return len(new_apps)

    # ------------------------------------------------------------------
    # Relational board model
    # ------------------------------------------------------------------

    @classmethod
    async def get_board_simple(cls, board_name: str) -> BoardRead:
        """Return the board row.  Raises ``ValueError`` if it does not exist."""
        conn = get_connection()
        try:
            row = conn.execute("SELECT * FROM boards WHERE name = ?", (board_name,)).fetchone()
        finally:
            conn.close()
        if not row:
            raise ValueError("Board not found")
        return BoardRead(**_board_dict(row))

    @classmethod
    async def get_board(cls, board_name: str, layout_name: str = "default") -> BoardDetail:
        """Return a board with the sections, apps and widgets of a layout.

        Raises ``ValueError`` if the board or the layout does not exist.
        """
        conn = get_connection()
        try:
            board_row = conn.execute("SELECT * FROM boards WHERE name = ?", (board_name,)).fetchone()
            if not board_row:
                raise ValueError("Board not found")
            board = _board_dict(board_row)

            owner = None
            owner_id = board.pop("owner_id")
            if owner_id is not None:
                owner_row = conn.execute(
                    "SELECT id, name FROM users WHERE id = ?", (owner_id,)
                ).fetchone()
                if owner_row:
                    owner = BoardOwner(id=owner_row["id"], name=owner_row["name"])

            layout_row = conn.execute(
                "SELECT id, name FROM layouts WHERE board_id = ? AND name = ?",
                (board["id"], layout_name),
            ).fetchone()
            if not layout_row:
                raise ValueError("Layout not found")

            sections = [
                dict(row)
                for row in conn.execute(
                    "SELECT id, layout_id, type, name, position FROM sections"
                    " WHERE layout_id = ? ORDER BY position",
                    (layout_row["id"],),
                ).fetchall()
            ]
            section_ids = [section["id"] for section in sections]
            apps = cls._fetch_apps(conn, section_ids) if section_ids else []
            widgets = cls._fetch_widgets(conn, section_ids) if section_ids else []
        finally:
            conn.close()

        prepared_sections = []
        for section in sections:
            items = [map_app(app_item, layout) for app_item, layout in apps if layout["section_id"] == section["id"]]
            items += [map_widget(widget, layout) for widget, layout in widgets if layout["section_id"] == section["id"]]
            prepared_sections.append(map_section(section, items))

        return BoardDetail(**board, owner=owner, sections=prepared_sections)

    @staticmethod
    def _fetch_apps(conn: sqlite3.Connection, section_ids: List[str]) -> List[tuple]:
        """Load app placements in the given sections.

        Returns ``(app_item, layout_item)`` pairs, one per placement.
        """
        rows = conn.execute(
            f"""
            SELECT li.id AS layout_item_id, li.item_id, li.section_id,
                   li.x, li.y, li.width, li.height,
                   ai.app_id, ai.open_in_new_tab, ai.is_ping_enabled, ai.font_size,
                   ai.name_position, ai.name_style, ai.name_line_clamp,
                   a.name, a.description, a.internal_url, a.external_url,
                   a.icon_url, a.integration_id
            FROM layout_items li
            JOIN app_items ai ON ai.item_id = li.item_id
            JOIN apps a ON a.id = ai.app_id
            WHERE li.section_id IN ({_placeholders(section_ids)})
            ORDER BY li.rowid
            """,
            tuple(section_ids),
        ).fetchall()
        if not rows:
            return []

        app_ids = sorted({row["app_id"] for row in rows})
        status_codes: Dict[str, List[Dict[str, int]]] = {app_id: [] for app_id in app_ids}
        for row in conn.execute(
            f"SELECT app_id, code FROM app_status_codes WHERE app_id IN ({_placeholders(app_ids)})"
            " ORDER BY code",
            tuple(app_ids),
        ).fetchall():
            status_codes[row["app_id"]].append({"code": row["code"]})

        integration_ids = sorted({row["integration_id"] for row in rows if row["integration_id"]})
        integrations: Dict[str, Dict[str, Any]] = {}
        if integration_ids:
            for row in conn.execute(
                f"SELECT id, type, name, url FROM integrations WHERE id IN ({_placeholders(integration_ids)})",
                tuple(integration_ids),
            ).fetchall():
                integrations[row["id"]] = {**dict(row), "secrets": []}
            for row in conn.execute(
                "SELECT integration_id, kind, value, visibility, updated_at FROM integration_secrets"
                f" WHERE integration_id IN ({_placeholders(integration_ids)}) ORDER BY kind",
                tuple(integration_ids),
            ).fetchall():
                integrations[row["integration_id"]]["secrets"].append(dict(row))

        result = []
        for row in rows:
            app_item = {
                "app_id": row["app_id"],
                "item_id": row["item_id"],
                "open_in_new_tab": row["open_in_new_tab"],
                "is_ping_enabled": row["is_ping_enabled"],
                "font_size": row["font_size"],
                "name_position": row["name_position"],
                "name_style": row["name_style"],
                "name_line_clamp": row["name_line_clamp"],
                "app": {
                    "id": row["app_id"],
                    "name": row["name"],
                    "description": row["description"],
                    "internal_url": row["internal_url"],
                    "external_url": row["external_url"],
                    "icon_url": row["icon_url"],
                    "integration_id": row["integration_id"],
                    "integration": integrations.get(row["integration_id"]),
                    "status_codes": status_codes[row["app_id"]],
                },
            }
            for column in _BOOL_APP_ITEM_COLUMNS:
                app_item[column] = bool(app_item[column])
            result.append((app_item, _layout_item(row)))
        return result

    @staticmethod
    def _fetch_widgets(conn: sqlite3.Connection, section_ids: List[str]) -> List[tuple]:
        """Load widget placements in the given sections with their options."""
        rows = conn.execute(
            f"""
            SELECT li.id AS layout_item_id, li.item_id, li.section_id,
                   li.x, li.y, li.width, li.height,
                   w.id AS widget_id, w.type AS widget_type
            FROM layout_items li
            JOIN widgets w ON w.item_id = li.item_id
            WHERE li.section_id IN ({_placeholders(section_ids)})
            ORDER BY li.rowid
            """,
            tuple(section_ids),
        ).fetchall()
        if not rows:
            return []

        widget_ids = sorted({row["widget_id"] for row in rows})
        options: Dict[str, List[Dict[str, Any]]] = {widget_id: [] for widget_id in widget_ids}
        for row in conn.execute(
            f"SELECT widget_id, path, value, type FROM widget_options WHERE widget_id IN ({_placeholders(widget_ids)})",
            tuple(widget_ids),
        ).fetchall():
            options[row["widget_id"]].append({"path": row["path"], "value": row["value"], "type": row["type"]})

        result = []
        for row in rows:
            widget = {
                "id": row["widget_id"],
                "type": row["widget_type"],
                "item_id": row["item_id"],
                # Copied so that each placement rebuilds its own options.
                "options": list(options[row["widget_id"]]),
            }
            result.append((widget, _layout_item(row)))
        return result

    @classmethod
    async def update_customization(cls, board_name: str, customization: BoardCustomization) -> BoardRead:
        """Apply appearance, layout, access and page settings to a board.

        Raises ``ValueError`` if the board does not exist.  Returns the
        updated board row.
        """
        conn = get_connection()
        try:
            row = conn.execute("SELECT id FROM boards WHERE name = ?", (board_name,)).fetchone()
            if not row:
                raise ValueError("Board not found")
            appearance = customization.appearance
            page = customization.page_metadata
            conn.execute(
                """
                UPDATE boards SET
                    allow_guests = ?,
                    is_left_sidebar_visible = ?,
                    is_right_sidebar_visible = ?,
                    is_ping_enabled = ?,
                    app_opacity = ?,
                    background_image_url = ?,
                    primary_color = ?,
                    secondary_color = ?,
                    custom_css = ?,
                    page_title = ?,
                    meta_title = ?,
                    logo_image_url = ?,
                    favicon_image_url = ?,
                    primary_shade = ?
                WHERE id = ?
                """,
                (
                    int(customization.access.allow_guests),
                    int(customization.layout.left_sidebar_enabled),
                    int(customization.layout.right_sidebar_enabled),
                    int(customization.layout.pings_enabled),
                    appearance.opacity,
                    appearance.background_src,
                    appearance.primary_color,
                    appearance.secondary_color,
                    appearance.custom_css,
                    page.page_title,
                    page.meta_title,
                    page.logo_src,
                    page.favicon_src,
                    appearance.shade,
                    row["id"],
                ),
            )
            conn.commit()
            updated = conn.execute("SELECT * FROM boards WHERE id = ?", (row["id"],)).fetchone()
        finally:
            conn.close()
        logger.info("Updated customization of board %s", board_name)
        return BoardRead(**_board_dict(updated))

    @classmethod
    async def create_example_board(cls, board_name: str, owner_id: Optional[str]) -> BoardRead:
        """Create a board with a default layout filled with sample items.

        All rows are written in one transaction.  Raises
        ``sqlite3.IntegrityError`` if a board with this name exists.
        """
        board_id = str(uuid4())
        layout_id = str(uuid4())
        section_id = str(uuid4())
        conn = get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "INSERT INTO boards (id, name, owner_id) VALUES (?, ?, ?)",
                (board_id, board_name, owner_id),
            )
            cursor.execute(
                "INSERT INTO layouts (id, name, board_id) VALUES (?, 'default', ?)",
                (layout_id, board_id),
            )
            cursor.execute(
                "INSERT INTO sections (id, layout_id, type, position) VALUES (?, ?, 'empty', 0)",
                (section_id, layout_id),
            )
            for app in EXAMPLE_APPS:
                cls._add_app(cursor, board_id, section_id, **app)
            for widget in EXAMPLE_WIDGETS:
                cls._add_widget(cursor, board_id, section_id, **widget)
            conn.commit()
            row = cursor.execute("SELECT * FROM boards WHERE id = ?", (board_id,)).fetchone()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()
        logger.info("Created example board %s", board_name)
        return BoardRead(**_board_dict(row))

    @staticmethod
    def _add_layout_item(
        cursor: sqlite3.Cursor, item_id: str, section_id: str, width: int, height: int, x: int, y: int
    ) -> None:
        cursor.execute(
            "INSERT INTO layout_items (id, item_id, section_id, x, y, width, height)"
            " VALUES (?, ?, ?, ?, ?, ?, ?)",
            (str(uuid4()), item_id, section_id, x, y, width, height),
        )

    @classmethod
    def _add_app(
        cls,
        cursor: sqlite3.Cursor,
        board_id: str,
        section_id: str,
        name: str,
        internal_url: str,
        icon_url: str,
        **position: int,
    ) -> None:
        item_id = str(uuid4())
        cursor.execute(
            "INSERT INTO items (id, type, board_id) VALUES (?, 'app', ?)",
            (item_id, board_id),
        )
        app_id = str(uuid4())
        cursor.execute(
            "INSERT INTO apps (id, name, internal_url, icon_url) VALUES (?, ?, ?, ?)",
            (app_id, name, internal_url, icon_url),
        )
        cursor.execute(
            "INSERT INTO app_items (app_id, item_id) VALUES (?, ?)",
            (app_id, item_id),
        )
        cls._add_layout_item(cursor, item_id, section_id, **position)

    @classmethod
    def _add_widget(
        cls,
        cursor: sqlite3.Cursor,
        board_id: str,
        section_id: str,
        type: str,
        **position: int,
    ) -> None:
        item_id = str(uuid4())
        cursor.execute(
            "INSERT INTO items (id, type, board_id) VALUES (?, 'widget', ?)",
            (item_id, board_id),
        )
        cursor.execute(
            "INSERT INTO widgets (id, type, item_id) VALUES (?, ?, ?)",
            (str(uuid4()), type, item_id),
        )
        cls._add_layout_item(cursor, item_id, section_id, **position)
