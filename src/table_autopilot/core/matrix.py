from __future__ import annotations

from typing import Any, Iterable, Sequence

import numpy as np
import pandas as pd

from .coercion import coerce_column, column_kind
from .errors import CannotConvertColumnError, ColumnNotFoundError, NoNumericColumnsError
from .types import ColumnKind


def numeric_columns(table: pd.DataFrame, exclude: Iterable[Any] = ()) -> list[Any]:
    skip = {str(name) for name in exclude}
    return [
        col
        for col in table.columns
        if str(col) not in skip and column_kind(table[col]) is ColumnKind.NUMERIC
    ]


def resolve_columns(
    table: pd.DataFrame, selection: Sequence[Any] | Any, role: str | None = None
) -> list[Any]:
    """Map names or 0-based positions onto column labels, reporting every miss at once."""

    if isinstance(selection, (str, int, np.integer)):
        selection = [selection]
    by_name = {str(col): col for col in table.columns}
    resolved: list[Any] = []
    missing: list[Any] = []
    for item in selection:
        if isinstance(item, (int, np.integer)) and not isinstance(item, bool):
            if item in table.columns:
                resolved.append(item)
            elif 0 <= int(item) < len(table.columns):
                resolved.append(table.columns[int(item)])
            else:
                missing.append(f"#{int(item)}")
            continue
        if item in table.columns:
            resolved.append(item)
        elif str(item) in by_name:
            resolved.append(by_name[str(item)])
        else:
            missing.append(item)
    if missing:
        raise ColumnNotFoundError(missing, role=role)
    return resolved


def table_to_matrix(
    table: pd.DataFrame, selection: Sequence[Any] | None = None, role: str | None = None
) -> tuple[np.ndarray, list[Any]]:
    if selection is None:
        cols = numeric_columns(table)
        if not cols:
            raise NoNumericColumnsError("Table has no numeric columns")
    else:
        cols = resolve_columns(table, selection, role=role)
        if not cols:
            raise NoNumericColumnsError("Empty column selection")
    matrix = np.empty((len(table), len(cols)), dtype=float)
    for idx, col in enumerate(cols):
        result = coerce_column(table[col], col)
        if not result.ok:
            raise CannotConvertColumnError(col, result.reason or "unsupported values")
        matrix[:, idx] = result.values
    return matrix, cols
