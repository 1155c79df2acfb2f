"""Tests for the board endpoints."""

from __future__ import annotations

import json
from typing import Dict

import pytest
from fastapi.testclient import TestClient

from homeboard_api.app.core.db import get_connection


@pytest.fixture
def homelab_config() -> dict:
    return {
        "schema_version": 2,
        "config_properties": {"name": "homelab"},
        "categories": [{"id": "c1"}, {"id": "c2"}],
        "wrappers": [{"id": "w-second", "position": 1}, {"id": "w-first", "position": 0}],
        "apps": [{"id": "a1", "name": "Sonarr"}],
        "widgets": [{"id": "weather"}, {"id": "date"}, {"id": "calendar"}],
        "settings": {},
    }


@pytest.fixture
def seeded_board() -> Dict[str, str]:
    """Insert a board with every section type, an integration and widget options."""
    conn = get_connection()
    try:
        conn.executescript(
            """
            INSERT INTO boards (id, name, primary_color) VALUES ('b1', 'homelab', 'blue');
            INSERT INTO layouts (id, name, board_id) VALUES ('l1', 'default', 'b1');
            INSERT INTO layouts (id, name, board_id) VALUES ('l2', 'mobile', 'b1');

            INSERT INTO sections (id, layout_id, type, name, position) VALUES ('s-empty', 'l1', 'empty', NULL, 0);
            INSERT INTO sections (id, layout_id, type, name, position) VALUES ('s-cat', 'l1', 'category', 'Media', 1);
            INSERT INTO sections (id, layout_id, type, name, position) VALUES ('s-side', 'l1', 'sidebar', NULL, 2);
            INSERT INTO sections (id, layout_id, type, name, position) VALUES ('s-hidden', 'l1', 'hidden', NULL, NULL);

            INSERT INTO integrations (id, type, name, url) VALUES ('int1', 'sonarr', 'Sonarr', 'http://sonarr:8989');
            INSERT INTO integration_secrets (integration_id, kind, value, visibility)
                VALUES ('int1', 'apiKey', 'topsecret', 'private');
            INSERT INTO integration_secrets (integration_id, kind, value, visibility)
                VALUES ('int1', 'username', 'admin', 'public');

            INSERT INTO items (id, type, board_id) VALUES ('item-app', 'app', 'b1');
            INSERT INTO apps (id, name, internal_url, icon_url, integration_id)
                VALUES ('app1', 'Sonarr', 'http://sonarr:8989', '/icons/sonarr.png', 'int1');
            INSERT INTO app_status_codes (app_id, code) VALUES ('app1', 301);
            INSERT INTO app_status_codes (app_id, code) VALUES ('app1', 200);
            INSERT INTO app_items (app_id, item_id, open_in_new_tab) VALUES ('app1', 'item-app', 0);
            INSERT INTO layout_items (id, item_id, section_id, x, y, width, height)
                VALUES ('li-app-cat', 'item-app', 's-cat', 1, 2, 3, 4);
            INSERT INTO layout_items (id, item_id, section_id, x, y, width, height)
                VALUES ('li-app-side', 'item-app', 's-side', 0, 0, 1, 1);

            INSERT INTO items (id, type, board_id) VALUES ('item-widget', 'widget', 'b1');
            INSERT INTO widgets (id, type, item_id) VALUES ('w1', 'weather', 'item-widget');
            INSERT INTO widget_options (widget_id, path, value, type) VALUES ('w1', 'location.name', 'Berlin', 'string');
            INSERT INTO widget_options (widget_id, path, value, type) VALUES ('w1', 'location', NULL, 'object');
            INSERT INTO widget_options (widget_id, path, value, type) VALUES ('w1', 'forecastDays', '5', 'number');
            INSERT INTO widget_options (widget_id, path, value, type) VALUES ('w1', 'isFahrenheit', 'false', 'boolean');
            INSERT INTO layout_items (id, item_id, section_id, x, y, width, height)
                VALUES ('li-widget', 'item-widget', 's-empty', 0, 0, 2, 1);
            """
        )
        conn.commit()
    finally:
        conn.close()
    return {"board_id": "b1", "name": "homelab"}


class TestGetBoard:
    """GET /boards/{name}"""

    def test_assembles_sections_and_items(self, client: TestClient, seeded_board: Dict[str, str]):
        response = client.get("/api/v1/boards/homelab")

        assert response.status_code == 200
        board = response.json()
        assert board["id"] == "b1"
        assert board["primary_color"] == "blue"
        assert board["owner"] is None
        assert "owner_id" not in board
        assert "layouts" not in board

        sections = board["sections"]
        assert [s["type"] for s in sections] == ["hidden", "empty", "category", "sidebar"]
        hidden, empty, category, sidebar = sections
        assert hidden == {"id": "s-hidden", "type": "hidden", "position": None, "items": []}
        assert empty["position"] == 0
        assert "name" not in empty
        assert category["name"] == "Media"
        assert category["position"] == 1
        assert sidebar["position"] == "right"

        (widget,) = empty["items"]
        assert widget["id"] == "item-widget"
        assert widget["type"] == "widget"
        assert widget["sort"] == "weather"
        assert widget["options"] == {
            "forecastDays": 5,
            "isFahrenheit": False,
            "location": {"name": "Berlin"},
        }

        (app,) = category["items"]
        assert app["id"] == "item-app"
        assert app["type"] == "app"
        assert (app["x"], app["y"], app["width"], app["height"]) == (1, 2, 3, 4)
        assert app["name"] == "Sonarr"
        assert app["open_in_new_tab"] is False
        assert app["status_codes"] == [200, 301]
        secrets = {s["kind"]: s for s in app["integration"]["secrets"]}
        assert secrets["apiKey"] == {
            "kind": "apiKey",
            "value": None,
            "visibility": "private",
            "is_defined": True,
            "updated_at": secrets["apiKey"]["updated_at"],
        }
        assert secrets["username"]["value"] == "admin"

        # The same app is also placed in the sidebar with its own coordinates.
        (side_app,) = sidebar["items"]
        assert side_app["id"] == "item-app"
        assert (side_app["x"], side_app["y"], side_app["width"], side_app["height"]) == (0, 0, 1, 1)

    def test_other_layout(self, client: TestClient, seeded_board: Dict[str, str]):
        response = client.get("/api/v1/boards/homelab", params={"layout": "mobile"})

        assert response.status_code == 200
        assert response.json()["sections"] == []

    def test_unknown_layout(self, client: TestClient, seeded_board: Dict[str, str]):
        response = client.get("/api/v1/boards/homelab", params={"layout": "tablet"})

        assert response.status_code == 404
        assert response.json()["detail"] == "Layout not found"

    def test_unknown_board(self, client: TestClient):
        response = client.get("/api/v1/boards/nothing")

        assert response.status_code == 404
        assert response.json()["detail"] == "Board not found"

    def test_invalid_name(self, client: TestClient):
        assert client.get("/api/v1/boards/bad name!").status_code == 422

    def test_simple(self, client: TestClient, seeded_board: Dict[str, str]):
        response = client.get("/api/v1/boards/homelab/simple")

        assert response.status_code == 200
        body = response.json()
        assert body["id"] == "b1"
        assert body["owner_id"] is None
        assert "sections" not in body

    def test_simple_unknown(self, client: TestClient):
        assert client.get("/api/v1/boards/nothing/simple").status_code == 404


class TestExampleBoard:
    """POST /boards/{name}/example"""

    def test_creates_board_with_items(self, client: TestClient, owner_headers: Dict[str, str]):
        response = client.post("/api/v1/boards/demo/example", headers=owner_headers)

        assert response.status_code == 201
        created = response.json()
        assert created["name"] == "demo"

        board = client.get("/api/v1/boards/demo").json()
        assert board["owner"]["name"] == "owner"
        (section,) = board["sections"]
        assert section["type"] == "empty"
        assert section["position"] == 0

        apps = [item for item in section["items"] if item["type"] == "app"]
        widgets = [item for item in section["items"] if item["type"] == "widget"]
        assert [app["name"] for app in apps] == ["Contribute", "Discord", "Donate", "Documentation"]
        assert [widget["sort"] for widget in widgets] == ["weather", "date", "date", "notebook"]
        # Apps come before widgets within a section.
        assert section["items"][:4] == apps

        documentation = apps[3]
        assert (documentation["x"], documentation["y"], documentation["width"], documentation["height"]) == (6, 1, 2, 2)
        notebook = widgets[3]
        assert (notebook["x"], notebook["y"], notebook["width"], notebook["height"]) == (0, 1, 6, 3)
        assert notebook["options"] == {}

    def test_duplicate_name(self, client: TestClient, owner_headers: Dict[str, str]):
        assert client.post("/api/v1/boards/demo/example", headers=owner_headers).status_code == 201

        response = client.post("/api/v1/boards/demo/example", headers=owner_headers)

        assert response.status_code == 409

    def test_requires_auth(self, client: TestClient):
        assert client.post("/api/v1/boards/demo/example").status_code == 401


class TestUpdateCustomization:
    """PUT /boards/{name}/customization"""

    @pytest.fixture
    def customization(self) -> dict:
        return {
            "access": {"allow_guests": True},
            "layout": {"left_sidebar_enabled": True, "right_sidebar_enabled": False, "pings_enabled": True},
            "appearance": {
                "background_src": "https://example.com/bg.png",
                "primary_color": "teal",
                "secondary_color": "grape",
                "shade": 4,
                "opacity": 80,
                "custom_css": "body { margin: 0; }",
            },
            "page_metadata": {
                "page_title": "Homelab",
                "meta_title": "Homelab | Dashboard",
                "logo_src": "/logo.png",
                "favicon_src": "/favicon.ico",
            },
        }

    def test_updates_board(
        self, client: TestClient, seeded_board: Dict[str, str], user_headers: Dict[str, str], customization: dict
    ):
        response = client.put(
            "/api/v1/boards/homelab/customization", json=customization, headers=user_headers
        )

        assert response.status_code == 200
        board = client.get("/api/v1/boards/homelab/simple").json()
        assert board["allow_guests"] is True
        assert board["is_left_sidebar_visible"] is True
        assert board["is_right_sidebar_visible"] is False
        assert board["is_ping_enabled"] is True
        assert board["app_opacity"] == 80
        assert board["background_image_url"] == "https://example.com/bg.png"
        assert board["primary_color"] == "teal"
        assert board["secondary_color"] == "grape"
        assert board["primary_shade"] == 4
        assert board["custom_css"] == "body { margin: 0; }"
        assert board["page_title"] == "Homelab"
        assert board["meta_title"] == "Homelab | Dashboard"
        assert board["logo_image_url"] == "/logo.png"
        assert board["favicon_image_url"] == "/favicon.ico"
        assert response.json() == board

    def test_unknown_board(self, client: TestClient, user_headers: Dict[str, str], customization: dict):
        response = client.put(
            "/api/v1/boards/nothing/customization", json=customization, headers=user_headers
        )

        assert response.status_code == 404

    @pytest.mark.parametrize(
        "field,value",
        [("opacity", 101), ("shade", 10), ("primary_color", "chartreuse")],
    )
    def test_rejects_invalid_appearance(
        self,
        client: TestClient,
        seeded_board: Dict[str, str],
        user_headers: Dict[str, str],
        customization: dict,
        field: str,
        value,
    ):
        customization["appearance"][field] = value

        response = client.put(
            "/api/v1/boards/homelab/customization", json=customization, headers=user_headers
        )

        assert response.status_code == 422

    def test_requires_auth(self, client: TestClient, seeded_board: Dict[str, str], customization: dict):
        response = client.put("/api/v1/boards/homelab/customization", json=customization)

        assert response.status_code == 401


class TestListBoards:
    """GET /boards/"""

    def test_counts_and_default(
        self, client: TestClient, write_config, homelab_config: dict, user_headers: Dict[str, str]
    ):
        write_config("homelab", homelab_config)
        write_config("default", {"apps": [], "widgets": [], "categories": []})

        response = client.get("/api/v1/boards/", headers=user_headers)

        assert response.status_code == 200
        assert response.json() == [
            {
                "name": "default",
                "count_apps": 0,
                "count_widgets": 0,
                "count_categories": 0,
                "is_default_for_user": True,
            },
            {
                "name": "homelab",
                "count_apps": 1,
                "count_widgets": 3,
                "count_categories": 2,
                "is_default_for_user": False,
            },
        ]

    def test_follows_user_default_board(
        self, client: TestClient, write_config, homelab_config: dict, user_headers: Dict[str, str]
    ):
        write_config("homelab", homelab_config)
        write_config("default", {})
        client.put("/api/v1/users/me/settings", json={"default_board": "homelab"}, headers=user_headers)

        boards = client.get("/api/v1/boards/", headers=user_headers).json()

        assert {b["name"]: b["is_default_for_user"] for b in boards} == {"default": False, "homelab": True}

    def test_skips_broken_config(
        self, client: TestClient, configs_dir, write_config, homelab_config: dict, user_headers: Dict[str, str]
    ):
        write_config("homelab", homelab_config)
        (configs_dir / "broken.json").write_text("{not json", encoding="utf-8")

        boards = client.get("/api/v1/boards/", headers=user_headers).json()

        assert [b["name"] for b in boards] == ["homelab"]

    def test_non_list_entries_count_as_empty(
        self, client: TestClient, write_config, homelab_config: dict, user_headers: Dict[str, str]
    ):
        write_config("homelab", homelab_config)
        write_config("nullapps", {"apps": None, "widgets": "weather", "categories": [{"id": "c1"}, "media"]})

        response = client.get("/api/v1/boards/", headers=user_headers)

        assert response.status_code == 200
        counts = {b["name"]: (b["count_apps"], b["count_widgets"], b["count_categories"]) for b in response.json()}
        assert counts == {"homelab": (1, 3, 2), "nullapps": (0, 0, 1)}

    def test_requires_auth(self, client: TestClient):
        assert client.get("/api/v1/boards/").status_code == 401


class TestAddAppsForContainers:
    """POST /boards/{name}/apps"""

    def test_appends_apps_to_lowest_wrapper(
        self, client: TestClient, write_config, homelab_config: dict, owner_headers: Dict[str, str]
    ):
        path = write_config("homelab", homelab_config)

        response = client.post(
            "/api/v1/boards/homelab/apps",
            json={"apps": [{"name": "jellyfin", "port": 8096}, {"name": "pihole"}]},
            headers=owner_headers,
        )

        assert response.status_code == 204
        config = json.loads(path.read_text(encoding="utf-8"))
        assert [app["name"] for app in config["apps"]] == ["Sonarr", "jellyfin", "pihole"]
        jellyfin, pihole = config["apps"][1:]
        assert jellyfin["url"] == "http://localhost:8096"
        assert jellyfin["behaviour"]["external_url"] == "http://localhost:8096"
        assert jellyfin["behaviour"]["is_opening_new_tab"] is True
        assert pihole["url"] == "http://localhost"
        assert jellyfin["area"]["properties"]["id"] == "w-first"
        assert pihole["area"]["properties"]["id"] == "w-first"
        assert config["categories"] == homelab_config["categories"]

    def test_unknown_board(self, client: TestClient, owner_headers: Dict[str, str]):
        response = client.post(
            "/api/v1/boards/nothing/apps", json={"apps": [{"name": "x"}]}, headers=owner_headers
        )

        assert response.status_code == 404
        assert response.json()["detail"] == "Board not found"

    def test_board_without_wrappers(self, client: TestClient, write_config, owner_headers: Dict[str, str]):
        write_config("bare", {"apps": []})

        response = client.post(
            "/api/v1/boards/bare/apps", json={"apps": [{"name": "x"}]}, headers=owner_headers
        )

        assert response.status_code == 404

    def test_null_apps_list(self, client: TestClient, write_config, owner_headers: Dict[str, str]):
        path = write_config("nullapps", {"wrappers": [{"id": "w0", "position": 0}], "apps": None})

        response = client.post(
            "/api/v1/boards/nullapps/apps", json={"apps": [{"name": "x"}]}, headers=owner_headers
        )

        assert response.status_code == 204
        config = json.loads(path.read_text(encoding="utf-8"))
        assert [app["name"] for app in config["apps"]] == ["x"]

    def test_wrapper_without_id(self, client: TestClient, write_config, owner_headers: Dict[str, str]):
        path = write_config("noid", {"wrappers": [{"position": 0}], "apps": []})

        response = client.post(
            "/api/v1/boards/noid/apps", json={"apps": [{"name": "x"}]}, headers=owner_headers
        )

        assert response.status_code == 204
        config = json.loads(path.read_text(encoding="utf-8"))
        assert config["apps"][0]["area"] == {"type": "wrapper", "properties": {"id": None}}

    def test_requires_admin(
        self, client: TestClient, write_config, homelab_config: dict, user_headers: Dict[str, str]
    ):
        write_config("homelab", homelab_config)

        response = client.post(
            "/api/v1/boards/homelab/apps", json={"apps": [{"name": "x"}]}, headers=user_headers
        )

        assert response.status_code == 403

    def test_rejects_invalid_port(
        self, client: TestClient, write_config, homelab_config: dict, owner_headers: Dict[str, str]
    ):
        write_config("homelab", homelab_config)

        response = client.post(
            "/api/v1/boards/homelab/apps", json={"apps": [{"name": "x", "port": 70000}]}, headers=owner_headers
        )

        assert response.status_code == 422
