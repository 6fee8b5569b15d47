from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

import pandas as pd
from jsonschema import ValidationError, validate

from .errors import ColumnNotFoundError, MappingError

_NAME = {"type": ["string", "integer"]}
_NAMES = {"anyOf": [_NAME, {"type": "array", "items": _NAME}]}

MAPPING_SCHEMA: dict[str, Any] = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "response": {"anyOf": [{"type": "string"}, {"type": "array", "items": {"type": "string"}, "maxItems": 1}]},
        "predictors": _NAMES,
        "group": {"type": "string"},
        "cols": _NAMES,
    },
}

_ALIASES = {
    "y": "response",
    "response": "response",
    "x": "predictors",
    "predictors": "predictors",
    "group": "group",
    "groupvar": "group",
    "cols": "cols",
    "varnames": "cols",
    "var_names": "cols",
}


def _as_list(value: Any) -> tuple[Any, ...]:
    if value is None:
        return ()
    if isinstance(value, (str, int)):
        return (value,)
    return tuple(value)


@dataclass(frozen=True)
class ColumnMapping:
    response: str | None = None
    predictors: tuple[str, ...] = ()
    group: str | None = None
    cols: tuple[str | int, ...] = ()

    def __post_init__(self) -> None:
        if self.response is not None and str(self.response) in map(str, self.predictors):
            raise MappingError(f"Response column {self.response!r} is also listed as a predictor")

    @classmethod
    def from_value(cls, value: "ColumnMapping | dict[str, Any] | None") -> "ColumnMapping":
        if value is None:
            return cls()
        if isinstance(value, ColumnMapping):
            return value
        if not isinstance(value, dict):
            raise MappingError(f"Mapping must be a dict, got {type(value).__name__}")
        canonical: dict[str, Any] = {}
        unknown: list[str] = []
        for key, item in value.items():
            target = _ALIASES.get(str(key).lower())
            if target is None:
                unknown.append(str(key))
                continue
            if item is None or (isinstance(item, (list, tuple, str)) and len(item) == 0):
                continue
            if target in canonical:
                # `Y` wins over `Response`, `X` over `Predictors`: first key seen is kept.
                continue
            canonical[target] = list(item) if isinstance(item, tuple) else item
        if unknown:
            raise MappingError(f"Unknown mapping key(s): {', '.join(unknown)}")
        try:
            validate(instance=canonical, schema=MAPPING_SCHEMA)
        except ValidationError as exc:
            field = ".".join(str(part) for part in exc.absolute_path) or "<root>"
            raise MappingError(f"Invalid mapping {field}: {exc.message}") from exc
        response = canonical.get("response")
        if isinstance(response, list):
            response = response[0]
        predictors = tuple(str(name) for name in _as_list(canonical.get("predictors")))
        return cls(
            response=response,
            predictors=predictors,
            group=canonical.get("group"),
            cols=_as_list(canonical.get("cols")),
        )

    def referenced_names(self) -> list[str]:
        names: list[str] = []
        if self.response:
            names.append(self.response)
        names.extend(self.predictors)
        if self.group:
            names.append(self.group)
        return names

    def check_columns(self, table: pd.DataFrame) -> None:
        missing = missing_columns(table, self.referenced_names())
        if missing:
            raise ColumnNotFoundError(missing, role="Mapped")


def missing_columns(table: pd.DataFrame, names: Iterable[Any]) -> list[str]:
    present = set(map(str, table.columns))
    missing: list[str] = []
    for name in names:
        if str(name) not in present and str(name) not in missing:
            missing.append(str(name))
    return missing
