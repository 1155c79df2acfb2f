"""
Service layer for board configuration files.

Besides the relational board model, every board may have a JSON
configuration file ``<configs_dir>/<board name>.json`` with the keys
``schema_version``, ``config_properties``, ``categories``,
``wrappers``, ``apps``, ``widgets`` and ``settings``.  The board list
is computed from these files and container imports append apps to
them.

``get_frontend_config`` returns a config that is safe to send to a
browser: values of private integration properties are removed.
"""

import copy
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional
from uuid import uuid4

from homeboard_api.app.core.config import resolve_path, settings

logger = logging.getLogger(__name__)

DEFAULT_APP_URL = "https://homarr.dev"
DEFAULT_APP_ICON = "/imgs/logo/logo.png"
DEFAULT_STATUS_CODES: List[int] = [
    *range(200, 209),
    226,
    *range(300, 309),
]


def generate_default_app(wrapper_id: Optional[str]) -> Dict[str, Any]:
    """Return a new app entry placed in the wrapper ``wrapper_id``."""
    return {
        "id": str(uuid4()),
        "name": "Your app",
        "url": DEFAULT_APP_URL,
        "appearance": {
            "icon_url": DEFAULT_APP_ICON,
            "app_name_status": "normal",
            "position_app_name": "column",
            "line_clamp_app_name": 1,
        },
        "network": {
            "enabled_status_checker": True,
            "status_codes": list(DEFAULT_STATUS_CODES),
        },
        "behaviour": {
            "is_opening_new_tab": True,
            "external_url": DEFAULT_APP_URL,
        },
        "area": {
            "type": "wrapper",
            "properties": {"id": wrapper_id},
        },
        "shape": {},
        "integration": {
            "type": None,
            "properties": [],
        },
    }


class ConfigService:
    """Read and write board configuration files."""

    @staticmethod
    def configs_dir() -> Path:
        return resolve_path(settings.configs_dir)

    @classmethod
    def config_path(cls, name: str) -> Path:
        return cls.configs_dir() / f"{name}.json"

    @classmethod
    def list_config_names(cls) -> List[str]:
        """Return the names of all config files, sorted."""
        directory = cls.configs_dir()
        if not directory.is_dir():
            return []
        return sorted(path.stem for path in directory.glob("*.json") if path.is_file())

    @classmethod
    async def config_exists(cls, name: str) -> bool:
        return cls.config_path(name).is_file()

    @classmethod
    async def get_config(cls, name: str) -> Dict[str, Any]:
        """Load a board config.

        Raises ``ValueError`` if the file does not exist or does not
        hold a JSON object (``json.JSONDecodeError`` is a subclass).
        The category, wrapper, app and widget lists are always lists of
        objects: a missing or non-list value becomes ``[]`` and entries
        that are not objects are dropped.
        """
        path = cls.config_path(name)
        if not path.is_file():
            raise ValueError(f"Board config {name} not found")
        with path.open("r", encoding="utf-8") as fh:
            config = json.load(fh)
        if not isinstance(config, dict):
            raise ValueError(f"Board config {name} is not a JSON object")
        for key in ("categories", "wrappers", "apps", "widgets"):
            entries = config.get(key)
            if entries is None:
                config[key] = []
                continue
            if not isinstance(entries, list):
                logger.warning("Board config %s: %s is not a list, ignoring it", name, key)
                config[key] = []
                continue
            kept = [entry for entry in entries if isinstance(entry, dict)]
            if len(kept) != len(entries):
                logger.warning(
                    "Board config %s: dropped %d malformed %s entries", name, len(entries) - len(kept), key
                )
            config[key] = kept
        return config

    @classmethod
    async def get_frontend_config(cls, name: str) -> Dict[str, Any]:
        """Load a board config with private integration values removed."""
        config = copy.deepcopy(await cls.get_config(name))
        for app in config["apps"]:
            integration = app.get("integration")
            if not isinstance(integration, dict):
                continue
            properties = integration.get("properties")
            if not isinstance(properties, list):
                continue
            for prop in properties:
                if not isinstance(prop, dict):
                    continue
                value = prop.get("value")
                prop["is_defined"] = value is not None and value != ""
                if prop.get("type") == "private":
                    prop["value"] = None
        return config

    @classmethod
    async def save_config(cls, name: str, config: Dict[str, Any]) -> None:
        path = cls.config_path(name)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as fh:
            json.dump(config, fh, indent=2)
        logger.info("Board config %s written", name)
