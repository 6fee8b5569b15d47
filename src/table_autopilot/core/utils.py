from __future__ import annotations

import json
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


_CAMEL_BOUNDARY_RE = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def snake_case(name: str) -> str:
    """`AutoLabel` -> `auto_label`, `NumPoints` -> `num_points`; snake_case passes through."""

    text = str(name).strip().replace("-", "_")
    return _CAMEL_BOUNDARY_RE.sub("_", text).lower()


def normalize_keys(values: dict[str, Any] | None) -> dict[str, Any]:
    if not values:
        return {}
    return {snake_case(key): value for key, value in values.items()}


def canonical_label(value: Any) -> str:
    if value is None:
        return "<missing>"
    if isinstance(value, float) and np.isnan(value):
        return "<missing>"
    if value is pd.NaT:
        return "<missing>"
    if isinstance(value, (pd.Timestamp, datetime)):
        return value.isoformat()
    if isinstance(value, (np.integer, np.floating, np.bool_)):
        return str(value.item())
    return str(value)


def read_settings(path: str | Path) -> Any:
    content = Path(path).read_text(encoding="utf-8")
    if str(path).endswith(".json"):
        return json.loads(content)
    import yaml

    return yaml.safe_load(content)
