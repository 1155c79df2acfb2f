"""
SQLite database integration and simple migration system.

This module provides functions for obtaining a database connection
(``get_connection``), applying migrations on application start
(``init_db``) and a cursor context manager for short write
operations.  SQLite is used as a lightweight embedded database; every
relational invariant of the board model (unique board names, one
layout per name per board, cascading deletes) is expressed in the
schema below rather than in service code.

The migration mechanism stores applied migration versions in the
``migrations`` table and executes new migrations in order.
"""

import sqlite3
from contextlib import contextmanager
from typing import Iterator

from .config import resolve_path, settings


def get_database_path() -> str:
    """Compute the path to the SQLite database file.

    If ``settings.database_url`` is an absolute path, use it directly.
    Otherwise resolve it relative to the project root.
    """
    return str(resolve_path(settings.database_url))


def get_connection() -> sqlite3.Connection:
    """Create and return a new SQLite connection.

    Rows are returned as ``sqlite3.Row`` so columns can be accessed by
    name.  Foreign key enforcement is enabled for the lifetime of the
    connection; SQLite disables it by default.
    """
    conn = sqlite3.connect(get_database_path())
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


@contextmanager
def get_cursor() -> Iterator[sqlite3.Cursor]:
    """Context manager that yields a cursor and closes the connection on exit."""
    conn = get_connection()
    try:
        yield conn.cursor()
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


MIGRATIONS: list[tuple[int, str]] = [
    # Migration 1: users and roles
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS roles (
            id INTEGER PRIMARY KEY,
            name TEXT NOT NULL UNIQUE
        );

        CREATE TABLE IF NOT EXISTS users (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL UNIQUE,
            email TEXT,
            password TEXT,
            role_id INTEGER NOT NULL DEFAULT 3,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            FOREIGN KEY(role_id) REFERENCES roles(id)
        );

        CREATE TABLE IF NOT EXISTS user_settings (
            user_id TEXT PRIMARY KEY,
            default_board TEXT NOT NULL DEFAULT 'default',
            FOREIGN KEY(user_id) REFERENCES users(id) ON DELETE CASCADE
        );
        """,
    ),
    # Migration 2: boards, layouts and sections
    (
        2,
        """
        CREATE TABLE IF NOT EXISTS boards (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL UNIQUE,
            owner_id TEXT,
            allow_guests INTEGER NOT NULL DEFAULT 0,
            is_left_sidebar_visible INTEGER NOT NULL DEFAULT 0,
            is_right_sidebar_visible INTEGER NOT NULL DEFAULT 0,
            is_ping_enabled INTEGER NOT NULL DEFAULT 0,
            app_opacity INTEGER NOT NULL DEFAULT 100,
            background_image_url TEXT,
            primary_color TEXT NOT NULL DEFAULT 'red',
            secondary_color TEXT NOT NULL DEFAULT 'orange',
            primary_shade INTEGER NOT NULL DEFAULT 6,
            custom_css TEXT,
            page_title TEXT,
            meta_title TEXT,
            logo_image_url TEXT,
            favicon_image_url TEXT,
            FOREIGN KEY(owner_id) REFERENCES users(id) ON DELETE SET NULL
        );

        CREATE TABLE IF NOT EXISTS layouts (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            board_id TEXT NOT NULL,
            UNIQUE(board_id, name),
            FOREIGN KEY(board_id) REFERENCES boards(id) ON DELETE CASCADE
        );

        CREATE TABLE IF NOT EXISTS sections (
            id TEXT PRIMARY KEY,
            layout_id TEXT NOT NULL,
            type TEXT NOT NULL CHECK (type IN ('empty', 'hidden', 'category', 'sidebar')),
            name TEXT,
            position INTEGER,
            FOREIGN KEY(layout_id) REFERENCES layouts(id) ON DELETE CASCADE
        );
        CREATE INDEX IF NOT EXISTS idx_sections_layout_id ON sections(layout_id);
        """,
    ),
    # Migration 3: items placed on boards (apps and widgets)
    (
        3,
        """
        CREATE TABLE IF NOT EXISTS items (
            id TEXT PRIMARY KEY,
            type TEXT NOT NULL CHECK (type IN ('app', 'widget')),
            board_id TEXT NOT NULL,
            FOREIGN KEY(board_id) REFERENCES boards(id) ON DELETE CASCADE
        );

        CREATE TABLE IF NOT EXISTS layout_items (
            id TEXT PRIMARY KEY,
            item_id TEXT NOT NULL,
            section_id TEXT NOT NULL,
            x INTEGER NOT NULL,
            y INTEGER NOT NULL,
            width INTEGER NOT NULL,
            height INTEGER NOT NULL,
            FOREIGN KEY(item_id) REFERENCES items(id) ON DELETE CASCADE,
            FOREIGN KEY(section_id) REFERENCES sections(id) ON DELETE CASCADE
        );
        CREATE INDEX IF NOT EXISTS idx_layout_items_section_id ON layout_items(section_id);

        CREATE TABLE IF NOT EXISTS integrations (
            id TEXT PRIMARY KEY,
            type TEXT NOT NULL,
            name TEXT NOT NULL,
            url TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS integration_secrets (
            integration_id TEXT NOT NULL,
            kind TEXT NOT NULL,
            value TEXT,
            visibility TEXT NOT NULL DEFAULT 'private' CHECK (visibility IN ('private', 'public')),
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            PRIMARY KEY(integration_id, kind),
            FOREIGN KEY(integration_id) REFERENCES integrations(id) ON DELETE CASCADE
        );

        CREATE TABLE IF NOT EXISTS apps (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            description TEXT,
            internal_url TEXT NOT NULL,
            external_url TEXT,
            icon_url TEXT NOT NULL,
            integration_id TEXT,
            FOREIGN KEY(integration_id) REFERENCES integrations(id) ON DELETE SET NULL
        );

        CREATE TABLE IF NOT EXISTS app_status_codes (
            app_id TEXT NOT NULL,
            code INTEGER NOT NULL,
            PRIMARY KEY(app_id, code),
            FOREIGN KEY(app_id) REFERENCES apps(id) ON DELETE CASCADE
        );

        CREATE TABLE IF NOT EXISTS app_items (
            app_id TEXT NOT NULL,
            item_id TEXT NOT NULL,
            open_in_new_tab INTEGER NOT NULL DEFAULT 1,
            is_ping_enabled INTEGER NOT NULL DEFAULT 0,
            font_size INTEGER NOT NULL DEFAULT 16,
            name_position TEXT NOT NULL DEFAULT 'top',
            name_style TEXT NOT NULL DEFAULT 'normal',
            name_line_clamp INTEGER NOT NULL DEFAULT 1,
            PRIMARY KEY(app_id, item_id),
            FOREIGN KEY(app_id) REFERENCES apps(id) ON DELETE CASCADE,
            FOREIGN KEY(item_id) REFERENCES items(id) ON DELETE CASCADE
        );

        CREATE TABLE IF NOT EXISTS widgets (
            id TEXT PRIMARY KEY,
            type TEXT NOT NULL,
            item_id TEXT NOT NULL,
            FOREIGN KEY(item_id) REFERENCES items(id) ON DELETE CASCADE
        );

        -- Widget options are stored flat: one row per dotted path.  The
        -- nested object is rebuilt when a board is read.
        CREATE TABLE IF NOT EXISTS widget_options (
            widget_id TEXT NOT NULL,
            path TEXT NOT NULL,
            value TEXT,
            type TEXT NOT NULL CHECK (type IN ('string', 'number', 'boolean', 'object', 'array', 'null')),
            PRIMARY KEY(widget_id, path),
            FOREIGN KEY(widget_id) REFERENCES widgets(id) ON DELETE CASCADE
        );
        """,
    ),
]


def init_db() -> None:
    """Initialise the database and apply pending migrations.

    Creates the ``migrations`` table if it does not exist, checks the
    current schema version, and applies any new migrations defined in
    ``MIGRATIONS``.  New migrations are appended with an incremented
    version number.  The three default roles are seeded afterwards.
    """
    with get_cursor() as cursor:
        cursor.execute(
            "CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)"
        )
        cursor.execute("SELECT MAX(version) as version FROM migrations")
        row = cursor.fetchone()
        current_version = row["version"] if row and row["version"] is not None else 0

        for version, sql in MIGRATIONS:
            if version > current_version:
                cursor.executescript(sql)
                cursor.execute(
                    "INSERT INTO migrations (version) VALUES (?)", (version,)
                )
                current_version = version

        # owner (1) and admin (2) may import apps; user (3) is the default.
        cursor.execute("INSERT OR IGNORE INTO roles (id, name) VALUES (1, 'owner')")
        cursor.execute("INSERT OR IGNORE INTO roles (id, name) VALUES (2, 'admin')")
        cursor.execute("INSERT OR IGNORE INTO roles (id, name) VALUES (3, 'user')")
