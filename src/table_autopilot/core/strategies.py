from __future__ import annotations

import functools
from pathlib import PurePath
from typing import Any, Sequence

import numpy as np
import pandas as pd

from .coercion import coerce_column
from .diagnostics import Diagnostics
from .grouping import partition
from .reconcile import reconcile
from .render import apply_table_labels, dumbbell_from_table, is_renderable
from .toolbox import resolve_target
from .types import OperationClass, StrategyOutcome

GROUP_COLUMN = "Group"

OPERATION_CLASSES: dict[str, OperationClass] = {
    "grpstats": OperationClass.GROUPED_STATS,
    "grpstatsfs": OperationClass.GROUPED_STATS,
    "dumbbell": OperationClass.PAIRED_PLOT,
    "dumbbellplot": OperationClass.PAIRED_PLOT,
}

_CLASS_MARKERS = (
    ("grpstats", OperationClass.GROUPED_STATS),
    ("dumbbell", OperationClass.PAIRED_PLOT),
)


def operation_base_name(operation: Any) -> str:
    """Lowercase base name of an operation: path, module and namespace qualifiers stripped."""

    if isinstance(operation, functools.partial):
        operation = operation.func
    if callable(operation) and not isinstance(operation, str):
        raw = getattr(operation, "__name__", None) or type(operation).__name__
    else:
        raw = str(operation).strip()
    if "/" in raw or "\\" in raw:
        raw = PurePath(raw.replace("\\", "/")).stem
    elif raw.endswith(".py"):
        raw = raw[: -len(".py")]
    raw = raw.rsplit(":", 1)[-1].rsplit(".", 1)[-1]
    return raw.lower()


def classify_operation(base_name: str) -> OperationClass:
    if base_name.startswith("safe_"):
        base_name = base_name[len("safe_"):]
    if base_name in OPERATION_CLASSES:
        return OPERATION_CLASSES[base_name]
    for marker, op_class in _CLASS_MARKERS:
        if marker in base_name:
            return op_class
    return OperationClass.GENERIC_NUMERIC


def grouped_summary(
    table: pd.DataFrame,
    group: Any | None = None,
    columns: Sequence[Any] | None = None,
    diagnostics: Diagnostics | None = None,
    strategy: str = OperationClass.GROUPED_STATS.value,
) -> pd.DataFrame | list[pd.DataFrame]:
    """Count/Mean/Median of every usable column per group, one row per group."""

    diagnostics = diagnostics or Diagnostics()
    parts = partition(table, group)
    if columns is None:
        columns = [col for col in table.columns if parts.column is None or col != parts.column]

    coerced: dict[Any, np.ndarray] = {}
    for col in columns:
        result = coerce_column(table[col], col)
        if not result.ok:
            diagnostics.emit("column_skipped", strategy, f"Skipping column {col!r}", cause=result.reason)
            continue
        coerced[col] = result.values

    rows: list[pd.DataFrame] = []
    for idx, label in enumerate(parts.labels):
        members = parts.indices(idx)
        row: dict[str, Any] = {GROUP_COLUMN: label}
        for col, values in coerced.items():
            present = values[members]
            present = present[~np.isnan(present)]
            row[f"{col}_Count"] = int(present.size)
            row[f"{col}_Mean"] = float(np.mean(present)) if present.size else np.nan
            row[f"{col}_Median"] = float(np.median(present)) if present.size else np.nan
        rows.append(pd.DataFrame([row]))
    return reconcile(rows, diagnostics, strategy)


def grouped_stats_strategy(
    table: pd.DataFrame,
    group: Any | None,
    columns: Sequence[Any] | None,
    diagnostics: Diagnostics,
) -> StrategyOutcome:
    strategy = OperationClass.GROUPED_STATS.value
    summary = grouped_summary(table, group, columns, diagnostics, strategy)
    return StrategyOutcome.success(strategy, summary, groups=len(summary) if isinstance(summary, pd.DataFrame) else None)


def _apply_labels(
    handle: Any,
    table: pd.DataFrame,
    cols: Sequence[Any] | None,
    options: dict[str, Any],
    diagnostics: Diagnostics,
    strategy: str,
) -> None:
    if not options.get("auto_label"):
        return
    try:
        apply_table_labels(
            handle,
            table,
            cols,
            orientation=options.get("label_orientation", "auto"),
            rotate=options.get("label_rotate", 45),
            font_size=options.get("label_font_size"),
        )
    except Exception as exc:
        diagnostics.emit("label_failed", strategy, "Could not apply labels", cause=exc)


def paired_plot_strategy(
    table: pd.DataFrame,
    cols: Sequence[Any] | None,
    options: dict[str, Any],
    forward: dict[str, Any],
    diagnostics: Diagnostics,
) -> StrategyOutcome:
    strategy = OperationClass.PAIRED_PLOT.value
    try:
        handle = dumbbell_from_table(table, cols or None, **forward)
    except Exception as exc:
        diagnostics.emit("call_failed", strategy, "Paired comparison plot failed", cause=exc)
        return StrategyOutcome.failure(strategy, exc)
    _apply_labels(handle, table, cols or None, options, diagnostics, strategy)
    return StrategyOutcome.success(strategy, handle)


def generic_numeric_strategy(
    operation: Any,
    base_name: str,
    table: pd.DataFrame,
    response: Any | None,
    predictors: Sequence[Any],
    args: tuple[Any, ...],
    kwargs: dict[str, Any],
    options: dict[str, Any],
    cols: Sequence[Any] | None,
    diagnostics: Diagnostics,
) -> StrategyOutcome:
    """Call a black-box target positionally with (Y, X) or X taken from the clean table."""

    strategy = OperationClass.GENERIC_NUMERIC.value
    X = table[list(predictors)].to_numpy(dtype=float)
    positional: tuple[Any, ...] = (X,)
    if response is not None:
        positional = (table[response].to_numpy(dtype=float), X)
    try:
        target = resolve_target(operation, base_name)
        value = target(*positional, *args, **kwargs)
    except Exception as exc:
        diagnostics.emit("call_failed", strategy, f"Error calling function {base_name}", cause=exc)
        return StrategyOutcome.failure(strategy, exc, rows=len(table))
    outputs = value if isinstance(value, tuple) else (value,)
    if outputs and is_renderable(outputs[0]):
        _apply_labels(outputs[0], table, cols or None, options, diagnostics, strategy)
    return StrategyOutcome.success(strategy, outputs, rows=len(table))
