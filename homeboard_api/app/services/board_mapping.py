"""
Reshaping of relational board rows into the nested API payload.

The board service fetches flat rows (sections, layout items, apps,
widgets, secrets and widget options) and hands them to the helpers in
this module, which turn them into the dictionaries returned by
``GET /boards/{name}``.  None of these functions touch the database.

Widget options are persisted as one row per dotted path, for example::

    path="forecast"            type="object"
    path="forecast.days"       type="number"  value="3"
    path="locations"           type="array"
    path="locations.0"         type="string"  value="Berlin"

``map_options`` rebuilds ``{"forecast": {"days": 3}, "locations":
["Berlin"]}`` from such rows.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)

_MISSING = object()


def map_section(section: Dict[str, Any], items: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Map a section row and its already mapped items.

    ``layout_id`` is never exposed.  Only category sections keep their
    name; hidden sections have no position and sidebar sections report
    ``"left"`` or ``"right"`` instead of a number.
    """
    props = {k: v for k, v in section.items() if k not in ("layout_id", "name", "position", "type")}
    section_type = section["type"]
    position = section.get("position")

    if section_type == "empty":
        return {**props, "type": section_type, "position": position, "items": items}
    if section_type == "hidden":
        return {**props, "type": section_type, "position": None, "items": items}
    if section_type == "category":
        return {
            **props,
            "type": section_type,
            "name": section.get("name"),
            "position": position,
            "items": items,
        }
    return {
        **props,
        "type": section_type,
        "position": "left" if position == 0 else "right",
        "items": items,
    }


def _common_layout(layout_item: Dict[str, Any]) -> Dict[str, Any]:
    # The item id identifies an entry on the board; the layout item id
    # and section id are internal.
    common = {k: v for k, v in layout_item.items() if k not in ("id", "item_id", "section_id")}
    common["id"] = layout_item["item_id"]
    return common


def map_secret(secret: Dict[str, Any]) -> Dict[str, Any]:
    """Hide the value of private integration secrets.

    ``is_defined`` tells clients whether a value is stored without
    revealing it.
    """
    mapped = {k: v for k, v in secret.items() if k != "integration_id"}
    value = mapped.get("value")
    mapped["is_defined"] = value is not None and value != ""
    if mapped.get("visibility") == "private":
        mapped["visibility"] = "private"
        mapped["value"] = None
        return mapped
    mapped["visibility"] = "public"
    return mapped


def map_app(app_item: Dict[str, Any], layout_item: Dict[str, Any]) -> Dict[str, Any]:
    """Map an app placed on a board.

    ``app_item`` holds the per-placement settings of the ``app_items``
    row plus the joined app under ``"app"``; the app in turn carries
    its ``integration`` (or ``None``) and its ``status_codes`` rows.
    """
    other = {k: v for k, v in app_item.items() if k not in ("app", "app_id", "item_id")}
    app = {
        k: v
        for k, v in app_item["app"].items()
        if k not in ("id", "integration", "integration_id", "status_codes")
    }
    integration = app_item["app"].get("integration")
    mapped_integration = None
    if integration:
        mapped_integration = {
            **integration,
            "secrets": [map_secret(secret) for secret in integration.get("secrets", [])],
        }
    return {
        **_common_layout(layout_item),
        **other,
        **app,
        "type": "app",
        "integration": mapped_integration,
        "status_codes": [row["code"] for row in app_item["app"].get("status_codes", [])],
    }


def map_widget(widget: Dict[str, Any], layout_item: Dict[str, Any]) -> Dict[str, Any]:
    """Map a widget placed on a board.

    The widget kind (``weather``, ``date`` ...) is exposed as ``sort``
    because ``type`` distinguishes apps from widgets.
    """
    other = {k: v for k, v in widget.items() if k not in ("id", "item_id", "type", "options")}
    return {
        **_common_layout(layout_item),
        **other,
        "type": "widget",
        "sort": widget["type"],
        "options": map_options(widget.get("options", [])),
    }


def map_options(options: Iterable[Dict[str, Any]]) -> Dict[str, Any]:
    """Rebuild a nested options object from flat ``path`` rows.

    Rows are applied in path order so that a container is always
    created before anything is placed inside it.
    """
    result: Dict[str, Any] = {}
    for option in sorted(options, key=lambda o: o["path"]):
        add_at_path(result, option)
    return result


def _parse_value(option_type: str, value: Optional[str]) -> Any:
    """Convert a stored option value, or return ``_MISSING`` to skip it."""
    if option_type == "array":
        return []
    if option_type == "object":
        return {}
    if option_type == "number":
        if not value:
            return _MISSING
        return float(value) if "." in value else int(value)
    if option_type == "boolean":
        return value == "true"
    if option_type == "string":
        return value
    if option_type == "null":
        return None
    return _MISSING


def _child(container: Any, key: str) -> Any:
    if isinstance(container, list):
        try:
            index = int(key)
        except ValueError:
            return _MISSING
        if 0 <= index < len(container):
            return container[index]
        return _MISSING
    if isinstance(container, dict):
        return container.get(key, _MISSING)
    return _MISSING


def add_at_path(target: Dict[str, Any], option: Dict[str, Any]) -> None:
    """Assign one option row inside ``target`` following its dotted path.

    List segments are integer indices; assigning past the end of a
    list pads it with ``None``.  Rows whose parent does not exist or
    whose value cannot be parsed are skipped with a warning.
    """
    path = option["path"]
    *parents, last_key = path.split(".")

    current: Any = target
    for key in parents:
        current = _child(current, key)
        if current is _MISSING:
            logger.warning("Skipping widget option %s: parent path does not exist", path)
            return

    try:
        value = _parse_value(option.get("type"), option.get("value"))
    except ValueError:
        logger.warning("Skipping widget option %s: invalid number %r", path, option.get("value"))
        return
    if value is _MISSING:
        return

    if isinstance(current, list):
        try:
            index = int(last_key)
        except ValueError:
            logger.warning("Skipping widget option %s: %r is not a list index", path, last_key)
            return
        if index < 0:
            logger.warning("Skipping widget option %s: negative list index", path)
            return
        if index >= len(current):
            current.extend([None] * (index + 1 - len(current)))
        current[index] = value
    elif isinstance(current, dict):
        current[last_key] = value
    else:
        logger.warning("Skipping widget option %s: parent is not an object or array", path)
