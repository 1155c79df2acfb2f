"""Shared fixtures: an isolated database and configs directory per test."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Dict

import pytest
from fastapi.testclient import TestClient

from homeboard_api.app.core.config import settings
from homeboard_api.app.core.db import init_db
from homeboard_api.app.main import app


@pytest.fixture(autouse=True)
def isolated_storage(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the database and the board configs at a temporary directory."""
    configs_dir = tmp_path / "configs"
    configs_dir.mkdir()
    monkeypatch.setattr(settings, "database_url", str(tmp_path / "homeboard.db"))
    monkeypatch.setattr(settings, "configs_dir", str(configs_dir))
    monkeypatch.setattr(settings, "default_board_name", "default")
    init_db()
    return tmp_path


@pytest.fixture
def configs_dir(isolated_storage: Path) -> Path:
    return isolated_storage / "configs"


@pytest.fixture
def write_config(configs_dir: Path) -> Callable[[str, Dict[str, Any]], Path]:
    """Write a board config file and return its path."""

    def _write(name: str, config: Dict[str, Any]) -> Path:
        path = configs_dir / f"{name}.json"
        path.write_text(json.dumps(config), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def _register_and_login(client: TestClient, name: str) -> Dict[str, str]:
    response = client.post("/api/v1/auth/register", json={"name": name, "password": "secret"})
    assert response.status_code == 201, response.text
    response = client.post("/api/v1/auth/token", json={"name": name, "password": "secret"})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def owner_headers(client: TestClient) -> Dict[str, str]:
    """Auth headers of the first registered user (the owner)."""
    return _register_and_login(client, "owner")


@pytest.fixture
def user_headers(client: TestClient, owner_headers: Dict[str, str]) -> Dict[str, str]:
    """Auth headers of a regular user registered after the owner."""
    return _register_and_login(client, "guest")
