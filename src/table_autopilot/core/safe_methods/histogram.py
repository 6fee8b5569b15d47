from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
import pandas as pd
from matplotlib.axes import Axes

from ..coercion import coerce_column
from ..diagnostics import Diagnostics
from ..errors import (
    CannotConvertColumnError,
    ColumnNotFoundError,
    NoNumericColumnsError,
    PreconditionError,
)
from ..render import draw_histogram
from .common import numeric_input

DEFAULT_NUM_BINS = 30


@dataclass(frozen=True)
class HistogramResult:
    counts: np.ndarray
    edges: np.ndarray
    handle: Axes | None = None


def _select(data: Any, matrix: np.ndarray, var: Any) -> np.ndarray:
    if var is None:
        return matrix[:, 0]
    if isinstance(var, str):
        if not isinstance(data, pd.DataFrame):
            raise PreconditionError("safe_histfs: var name given but input is not a table")
        if var not in data.columns:
            raise ColumnNotFoundError([var], role="Histogram")
        result = coerce_column(data[var], var)
        if not result.ok:
            raise CannotConvertColumnError(var, result.reason or "unsupported values")
        return result.values
    idx = int(var)
    if idx < 0 or idx >= matrix.shape[1]:
        raise PreconditionError(f"safe_histfs: var index {idx} out of range")
    return matrix[:, idx]


def safe_histfs(
    data: Any,
    var: Any = None,
    num_bins: int = DEFAULT_NUM_BINS,
    plot: bool = True,
    ax: Axes | None = None,
    *,
    diagnostics: Diagnostics | None = None,
) -> HistogramResult:
    matrix, _ = numeric_input(data, "safe_histfs")
    if matrix.shape[1] == 0 and not isinstance(var, str):
        raise NoNumericColumnsError("safe_histfs: no numeric columns found in input")
    values = _select(data, matrix, var)
    values = values[~np.isnan(values)]
    if values.size == 0:
        return HistogramResult(counts=np.empty(0), edges=np.empty(0), handle=None)
    counts, edges = np.histogram(values, bins=int(num_bins))
    handle = draw_histogram(values, counts, edges, ax=ax) if plot else None
    return HistogramResult(counts=counts, edges=edges, handle=handle)
