from __future__ import annotations

from typing import Any, Callable, Sequence

import numpy as np
import pandas as pd

from ..diagnostics import Diagnostics
from ..errors import NotATableError, PreconditionError
from ..grouping import ALL_GROUP_LABEL, partition
from ..matrix import numeric_columns
from ..reconcile import filler_column, reconcile
from ..toolbox import grpstatsfs

STRATEGY = "safe_grpstatsfs"
DEFAULT_GROUP_COLUMN = "Group"
_MINIMAL_STATS = ("mean", "median", "std")


def _with_group_key(result: pd.DataFrame, column: Any, key: Any) -> pd.DataFrame:
    if column in result.columns:
        return result
    out = result.copy()
    out.insert(0, column, [key] * len(out))
    return out


def _fallback_row(
    template: pd.DataFrame | None, sub: pd.DataFrame, column: Any, key: Any
) -> pd.DataFrame:
    if template is not None:
        data = {col: filler_column(template[col], 1).array for col in template.columns}
        row = pd.DataFrame(data, columns=list(template.columns))
        row[column] = [key]
        return row
    data: dict[Any, list[Any]] = {column: [key]}
    for col in numeric_columns(sub, exclude=[column]):
        for stat in _MINIMAL_STATS:
            data[f"{col}_{stat}"] = [np.nan]
    return pd.DataFrame(data)


def safe_grpstatsfs(
    table: pd.DataFrame,
    group: Any | None = None,
    whichstats: Sequence[str] | str | None = None,
    *,
    diagnostics: Diagnostics | None = None,
    stats_fn: Callable[..., pd.DataFrame] | None = None,
) -> pd.DataFrame | list[pd.DataFrame]:
    """Grouped statistics that always return one row per group.

    Groups whose statistics cannot be computed get a filler row shaped after
    the first successful group; schemas are unioned before concatenation.
    """

    if not isinstance(table, pd.DataFrame):
        raise NotATableError(table, STRATEGY)
    if table.empty:
        raise PreconditionError(f"{STRATEGY}: table must not be empty")
    diagnostics = diagnostics or Diagnostics()
    stats_fn = stats_fn or grpstatsfs

    parts = partition(table, group)
    if parts.column is None:
        try:
            return stats_fn(table, whichstats)
        except Exception as exc:
            diagnostics.emit(
                "group_failed",
                STRATEGY,
                f"grpstatsfs failed on whole table; retrying as group {ALL_GROUP_LABEL!r}",
                cause=exc,
            )
    key_column = parts.column if parts.column is not None else DEFAULT_GROUP_COLUMN

    results: list[pd.DataFrame] = []
    template: pd.DataFrame | None = None
    for label, key, sub in parts.frames(table):
        values = sub.drop(columns=[parts.column]) if parts.column is not None else sub
        try:
            out = _with_group_key(stats_fn(values, whichstats), key_column, key)
            if template is None:
                template = out
        except Exception as exc:
            out = _fallback_row(template, sub, key_column, key)
            diagnostics.emit(
                "group_failed",
                STRATEGY,
                f"grpstatsfs failed for group {label}; filling missing statistics",
                cause=exc,
                group=label,
            )
        results.append(out)
    return reconcile(results, diagnostics, STRATEGY)
