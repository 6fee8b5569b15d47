from __future__ import annotations

from typing import Any

import numpy as np
import pandas as pd

from ..errors import NotATableError
from ..matrix import numeric_columns


def numeric_input(data: Any, where: str) -> tuple[np.ndarray, list[Any]]:
    """Numeric columns of a table (or a numeric array as-is) as a float matrix."""

    if isinstance(data, pd.DataFrame):
        cols = numeric_columns(data)
        if not cols:
            return np.empty((len(data), 0)), []
        return data[cols].to_numpy(dtype=float, na_value=np.nan), cols
    if isinstance(data, np.ndarray) and np.issubdtype(data.dtype, np.number):
        matrix = data.astype(float)
        if matrix.ndim == 1:
            matrix = matrix.reshape(-1, 1)
        return matrix, list(range(matrix.shape[1]))
    raise NotATableError(data, where)


def complete_rows(matrix: np.ndarray) -> np.ndarray:
    if matrix.size == 0:
        return matrix
    return matrix[~np.isnan(matrix).any(axis=1)]
