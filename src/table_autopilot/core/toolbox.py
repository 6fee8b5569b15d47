"""Reference target functions for the generic execution path.

These stand in for the external statistics/plotting toolbox: they expect
clean numeric input and raise on degenerate data instead of degrading.
"""

from __future__ import annotations

import importlib
from typing import Any, Callable, Sequence

import numpy as np
import pandas as pd
from scipy import stats as scipy_stats

from .coercion import column_kind
from .render import draw_dumbbell, row_labels
from .types import ColumnKind

GRPSTATS_DEFAULT = ("mean", "median", "std", "skewness")
_MIN_OBSERVATIONS = 3


def _stat(name: str, values: np.ndarray) -> float:
    if name == "mean":
        return float(np.mean(values))
    if name == "median":
        return float(np.median(values))
    if name == "std":
        return float(np.std(values, ddof=1))
    if name == "skewness":
        return float(scipy_stats.skew(values, bias=False))
    if name == "count":
        return float(values.size)
    if name == "min":
        return float(np.min(values))
    if name == "max":
        return float(np.max(values))
    raise ValueError(f"Unknown statistic {name!r}")


def grpstatsfs(table: pd.DataFrame, whichstats: Sequence[str] | str | None = None) -> pd.DataFrame:
    """One-row summary of every numeric column; raises on short columns."""

    if isinstance(whichstats, str):
        whichstats = [whichstats]
    names = [str(name).lower() for name in (whichstats or GRPSTATS_DEFAULT)]
    cols = [col for col in table.columns if column_kind(table[col]) is ColumnKind.NUMERIC]
    if not cols:
        raise ValueError("grpstatsfs: no numeric columns")
    row: dict[str, float] = {}
    for col in cols:
        values = table[col].to_numpy(dtype=float, na_value=np.nan)
        values = values[~np.isnan(values)]
        if values.size < _MIN_OBSERVATIONS:
            raise ValueError(
                f"grpstatsfs: column {col!r} has {values.size} observations, "
                f"at least {_MIN_OBSERVATIONS} required"
            )
        for name in names:
            row[f"{col}_{name}"] = _stat(name, values)
    return pd.DataFrame([row])


def dumbbellplot(
    table: pd.DataFrame,
    *,
    plot_type: str = "single",
    orientation: str = "horizontal",
    label_x1: str = "X1",
    label_x2: str = "X2",
    title: str | None = None,
    y_labels: Sequence[str] | None = None,
) -> Any:
    needed = 4 if str(plot_type).lower() == "double" else 2
    if len(table.columns) < needed:
        raise ValueError(f"dumbbellplot: {needed} columns required, got {len(table.columns)}")
    cols = list(table.columns[:needed])
    for col in cols:
        if column_kind(table[col]) is not ColumnKind.NUMERIC:
            raise TypeError(f"dumbbellplot: column {col!r} is not numeric")
    labels = list(y_labels) if y_labels is not None else row_labels(table)
    if len(labels) != len(table):
        raise ValueError("dumbbellplot: y_labels length must match row count")
    return draw_dumbbell(
        [table[col].to_numpy(dtype=float) for col in cols],
        labels,
        plot_type=plot_type,
        orientation=orientation,
        label_x1=label_x1,
        label_x2=label_x2,
        title=title,
    )


def regress(y: np.ndarray, X: np.ndarray, intercept: bool = True) -> tuple[np.ndarray, np.ndarray]:
    """Ordinary least squares; returns (coefficients, residuals)."""

    y = np.asarray(y, dtype=float).reshape(len(y), -1)[:, 0]
    X = np.asarray(X, dtype=float).reshape(len(y), -1)
    design = np.column_stack([np.ones(len(y)), X]) if intercept else X
    if design.shape[0] < design.shape[1]:
        raise ValueError(f"regress: {design.shape[0]} rows for {design.shape[1]} coefficients")
    coef, *_ = np.linalg.lstsq(design, y, rcond=None)
    return coef, y - design @ coef


TOOLBOX: dict[str, Callable[..., Any]] = {
    "grpstatsfs": grpstatsfs,
    "dumbbellplot": dumbbellplot,
    "regress": regress,
}


def resolve_target(operation: Any, base_name: str) -> Callable[..., Any]:
    """Find the callable behind an operation: a function, a toolbox name or `module:attr`."""

    if callable(operation):
        return operation
    if base_name in TOOLBOX:
        return TOOLBOX[base_name]
    text = str(operation).strip()
    module_path, sep, attr = text.partition(":")
    if not sep:
        module_path, _, attr = text.rpartition(".")
    if module_path and attr:
        try:
            module = importlib.import_module(module_path)
        except ImportError as exc:
            raise LookupError(f"Target module {module_path!r} cannot be imported: {exc}") from exc
        target = getattr(module, attr, None)
        if callable(target):
            return target
    raise LookupError(f"Unknown target function {text!r}")
