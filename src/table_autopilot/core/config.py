from __future__ import annotations

import copy
from pathlib import Path
from typing import Any

from jsonschema import ValidationError, validate

from .errors import OptionsError
from .utils import normalize_keys, read_settings

OPTIONS_SCHEMA: dict[str, Any] = {
    "type": "object",
    "additionalProperties": True,
    "properties": {
        "verbose": {"type": "boolean", "default": False},
        "auto_label": {"type": "boolean", "default": True},
        "label_rotate": {"type": "number", "default": 45},
        "label_font_size": {"type": ["number", "null"], "default": None},
        "label_orientation": {"enum": ["auto", "x", "y"], "default": "auto"},
    },
}

# Keys consumed by the autopilot itself; everything else is forwarded to the operation.
AUTOPILOT_OPTION_KEYS = frozenset(OPTIONS_SCHEMA["properties"].keys())


def resolve_options(options: dict[str, Any] | None) -> dict[str, Any]:
    """Normalize keys to snake_case, apply schema defaults, then validate."""

    if options is not None and not isinstance(options, dict):
        raise OptionsError(f"Options must be a mapping, got {type(options).__name__}")
    resolved = normalize_keys(copy.deepcopy(options or {}))
    _apply_jsonschema_defaults(OPTIONS_SCHEMA, resolved)
    try:
        validate(instance=resolved, schema=OPTIONS_SCHEMA)
    except ValidationError as exc:
        path = ".".join(str(part) for part in exc.absolute_path) or "<root>"
        raise OptionsError(f"Invalid option {path}: {exc.message}") from exc
    return resolved


def split_options(options: dict[str, Any] | None) -> tuple[dict[str, Any], dict[str, Any]]:
    normalized = normalize_keys(options)
    own = {key: value for key, value in normalized.items() if key in AUTOPILOT_OPTION_KEYS}
    forwarded = {key: value for key, value in normalized.items() if key not in AUTOPILOT_OPTION_KEYS}
    return own, forwarded


def load_options(path: str | Path | None) -> dict[str, Any]:
    if not path:
        return resolve_options(None)
    data = read_settings(path)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise OptionsError(f"Options file {path} must contain a mapping")
    return resolve_options(data)


def _apply_jsonschema_defaults(schema: Any, instance: Any) -> Any:
    """Apply `default` values from the object's property schemas into `instance`."""

    if not isinstance(schema, dict):
        return instance
    if instance is None and "default" in schema:
        instance = copy.deepcopy(schema["default"])
    if schema.get("type") == "object" and isinstance(instance, dict):
        props = schema.get("properties") or {}
        for key in sorted(props.keys()):
            prop_schema = props.get(key)
            if key not in instance:
                if isinstance(prop_schema, dict) and "default" in prop_schema:
                    instance[key] = copy.deepcopy(prop_schema["default"])
            if key in instance:
                instance[key] = _apply_jsonschema_defaults(prop_schema, instance[key])
    return instance
