from __future__ import annotations

from typing import Any, Sequence

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from matplotlib.axes import Axes
from matplotlib.figure import Figure

from .errors import InsufficientDataError
from .matrix import resolve_columns, table_to_matrix

LINE_COLOR = (0.6, 0.6, 0.6)
FIRST_COLOR = (0.2, 0.6, 0.9)
SECOND_COLOR = (0.9, 0.4, 0.3)


def is_renderable(value: Any) -> bool:
    if isinstance(value, (Axes, Figure)):
        return True
    if isinstance(value, (list, tuple, np.ndarray)) and len(value) > 0:
        return all(isinstance(item, (Axes, Figure)) for item in np.ravel(np.asarray(value, dtype=object)))
    return False


def _axes_of(handle: Any) -> list[Axes]:
    if isinstance(handle, Axes):
        return [handle]
    if isinstance(handle, Figure):
        return list(handle.axes)
    if isinstance(handle, (list, tuple, np.ndarray)):
        out: list[Axes] = []
        for item in np.ravel(np.asarray(handle, dtype=object)):
            out.extend(_axes_of(item))
        return out
    raise TypeError(f"Not a renderable handle: {type(handle).__name__}")


def row_labels(table: pd.DataFrame) -> list[str]:
    if isinstance(table.index, pd.RangeIndex):
        return [f"Row {idx + 1}" for idx in range(len(table))]
    return [str(label) for label in table.index]


def _draw_pair(
    ax: Axes,
    first: np.ndarray,
    second: np.ndarray,
    labels: Sequence[str],
    orientation: str,
    label_x1: str,
    label_x2: str,
    title: str | None,
) -> None:
    positions = np.arange(1, len(first) + 1)
    if orientation == "vertical":
        for pos, a, b in zip(positions, first, second):
            ax.plot([a, b], [pos, pos], "-", color=LINE_COLOR, linewidth=1.5)
        ax.scatter(first, positions, s=60, color=FIRST_COLOR, label=label_x1, zorder=3)
        ax.scatter(second, positions, s=60, color=SECOND_COLOR, label=label_x2, zorder=3)
        ax.set_yticks(positions)
        ax.set_yticklabels(labels)
        ax.invert_yaxis()
        ax.set_xlabel("Value")
    else:
        for pos, a, b in zip(positions, first, second):
            ax.plot([pos, pos], [a, b], "-", color=LINE_COLOR, linewidth=1.5)
        ax.scatter(positions, first, s=60, color=FIRST_COLOR, label=label_x1, zorder=3)
        ax.scatter(positions, second, s=60, color=SECOND_COLOR, label=label_x2, zorder=3)
        ax.set_xticks(positions)
        ax.set_xticklabels(labels)
        ax.set_ylabel("Value")
    ax.legend(loc="best")
    if title:
        ax.set_title(title)


def draw_dumbbell(
    series: Sequence[np.ndarray],
    labels: Sequence[str],
    *,
    plot_type: str = "single",
    orientation: str = "horizontal",
    label_x1: str = "X1",
    label_x2: str = "X2",
    title: str | None = None,
) -> Axes | list[Axes]:
    plot_type = str(plot_type).lower()
    orientation = str(orientation).lower()
    if plot_type == "single":
        if len(series) < 2:
            raise InsufficientDataError("Single dumbbell plot requires two series")
        _, ax = plt.subplots()
        _draw_pair(ax, series[0], series[1], labels, orientation, label_x1, label_x2, title)
        return ax
    if plot_type == "double":
        if len(series) < 4:
            raise InsufficientDataError("Double dumbbell plot requires four series")
        shape = (2, 1) if orientation == "vertical" else (1, 2)
        _, axes = plt.subplots(*shape)
        axes = list(np.ravel(axes))
        _draw_pair(axes[0], series[0], series[1], labels, orientation, label_x1, label_x2, title)
        _draw_pair(axes[1], series[2], series[3], labels, orientation, label_x1, label_x2, title)
        return axes
    raise ValueError(f"Unknown plot_type {plot_type!r}")


def dumbbell_from_table(
    table: pd.DataFrame,
    cols: Sequence[Any] | None = None,
    *,
    plot_type: str = "single",
    orientation: str = "horizontal",
    label_x1: str | None = None,
    label_x2: str | None = None,
    title: str | None = None,
    y_labels: Sequence[str] | None = None,
) -> Axes | list[Axes]:
    """Two-series comparison plot drawn from table columns (first two/four by default)."""

    needed = 4 if str(plot_type).lower() == "double" else 2
    if cols:
        selected = resolve_columns(table, cols, role="Plot")
    else:
        if len(table.columns) < needed:
            raise InsufficientDataError(f"Table must have at least {needed} columns")
        selected = list(table.columns[:needed])
    matrix, used = table_to_matrix(table, selected, role="Plot")
    labels = list(y_labels) if y_labels is not None else row_labels(table)
    if len(labels) != len(table):
        labels = [f"Row {idx + 1}" for idx in range(len(table))]
    names = [str(col) for col in used] + ["X1", "X2"]
    return draw_dumbbell(
        [matrix[:, idx] for idx in range(matrix.shape[1])],
        labels,
        plot_type=plot_type,
        orientation=orientation,
        label_x1=label_x1 or names[0],
        label_x2=label_x2 or names[1],
        title=title,
    )


def draw_histogram(values: np.ndarray, counts: np.ndarray, edges: np.ndarray, ax: Axes | None = None) -> Axes:
    if ax is None:
        _, ax = plt.subplots()
    centers = edges[:-1] + np.diff(edges) / 2.0
    ax.bar(centers, counts, width=np.diff(edges), align="center")
    ax.set_xlabel("Value")
    ax.set_ylabel("Count")
    ax.set_title(f"Histogram (n={len(values)})")
    return ax


def apply_table_labels(
    handle: Any,
    table: pd.DataFrame,
    cols: Sequence[Any] | None = None,
    *,
    orientation: str = "auto",
    rotate: float = 45,
    font_size: float | None = None,
) -> None:
    """Write source column names on the value axis and row labels on matching ticks."""

    names = [str(col) for col in (resolve_columns(table, cols) if cols else table.columns)]
    text = ", ".join(names)
    rows = row_labels(table)
    font = {"fontsize": font_size} if font_size else {}
    for ax in _axes_of(handle):
        axis = orientation
        if axis == "auto":
            axis = "y" if len(ax.get_yticks()) == len(rows) and len(ax.get_xticks()) != len(rows) else "x"
        if axis == "x":
            ax.set_ylabel(text, **font)
            if len(ax.get_xticks()) == len(rows):
                ax.set_xticklabels(rows, rotation=rotate, **font)
        elif axis == "y":
            ax.set_xlabel(text, **font)
            if len(ax.get_yticks()) == len(rows):
                ax.set_yticklabels(rows, **font)
        else:
            raise ValueError(f"Unknown label orientation {orientation!r}")
