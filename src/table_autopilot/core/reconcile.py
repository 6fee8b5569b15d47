from __future__ import annotations

from typing import Any, Sequence

import numpy as np
import pandas as pd

from .coercion import column_kind
from .diagnostics import Diagnostics
from .types import ColumnKind


def filler_column(template: pd.Series | None, n_rows: int, index: pd.Index | None = None) -> pd.Series:
    """Type-correct placeholder column shaped after `template`.

    numeric -> NaN, boolean -> False, categorical/text -> "", temporal -> NaT,
    anything else (or no template) -> None.
    """

    kind = column_kind(template) if template is not None else None
    if kind is ColumnKind.NUMERIC:
        return pd.Series(np.full(n_rows, np.nan), index=index, dtype=float)
    if kind is ColumnKind.BOOLEAN:
        return pd.Series(np.zeros(n_rows, dtype=bool), index=index)
    if kind is ColumnKind.CATEGORICAL:
        return pd.Series(pd.Categorical([""] * n_rows), index=index)
    if kind is ColumnKind.TEXT:
        return pd.Series([""] * n_rows, index=index, dtype=template.dtype)
    if kind is ColumnKind.TEMPORAL and template is not None:
        try:
            return pd.Series([pd.NaT] * n_rows, index=index, dtype=template.dtype)
        except (TypeError, ValueError):
            pass
    return pd.Series([None] * n_rows, index=index, dtype=object)


def align_columns(tables: Sequence[pd.DataFrame]) -> list[pd.DataFrame]:
    all_columns: list[Any] = []
    templates: dict[Any, pd.Series] = {}
    for table in tables:
        for col in table.columns:
            if col not in templates:
                all_columns.append(col)
                templates[col] = table[col]
    aligned: list[pd.DataFrame] = []
    for table in tables:
        data = {}
        for col in all_columns:
            if col in table.columns:
                data[col] = table[col].array
            else:
                data[col] = filler_column(templates[col], len(table)).array
        aligned.append(pd.DataFrame(data, index=table.index, columns=all_columns))
    return aligned


def reconcile(
    tables: Sequence[pd.DataFrame],
    diagnostics: Diagnostics | None = None,
    strategy: str = "reconcile",
) -> pd.DataFrame | list[pd.DataFrame]:
    """Union per-group result tables into one frame, group order preserved.

    Returns the aligned but unmerged list when concatenation is impossible.
    """

    tables = list(tables)
    if not tables:
        return pd.DataFrame()
    if len(tables) == 1:
        return tables[0].copy()
    aligned: list[pd.DataFrame] = tables
    try:
        aligned = align_columns(tables)
        return pd.concat(aligned, axis=0, ignore_index=True)
    except Exception as exc:
        if diagnostics is not None:
            diagnostics.emit(
                "reconcile_failed",
                strategy,
                "Could not concatenate per-group outputs; returning them unmerged",
                cause=exc,
                groups=len(aligned),
            )
        return aligned
