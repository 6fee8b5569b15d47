from __future__ import annotations

from typing import Any, Sequence

import pandas as pd

from ..diagnostics import Diagnostics
from ..errors import InsufficientDataError, NotATableError
from ..matrix import resolve_columns, table_to_matrix
from ..render import draw_dumbbell, row_labels
from ..toolbox import dumbbellplot

STRATEGY = "safe_dumbbellplot"
_RENDER_KEYS = ("plot_type", "orientation", "label_x1", "label_x2", "title", "y_labels")


def safe_dumbbellplot(
    table: pd.DataFrame,
    var_names: Sequence[Any] | None = None,
    *,
    diagnostics: Diagnostics | None = None,
    **forward: Any,
) -> Any:
    """Dumbbell plot from table columns, drawing a simple renderer when the toolbox call fails."""

    if not isinstance(table, pd.DataFrame):
        raise NotATableError(table, STRATEGY)
    diagnostics = diagnostics or Diagnostics()
    if var_names:
        if isinstance(var_names, str):
            var_names = [var_names]
        selected = resolve_columns(table, var_names, role="Plot")
    else:
        if len(table.columns) < 2:
            raise InsufficientDataError(f"{STRATEGY}: table must have at least two columns")
        selected = list(table.columns[:2])
    matrix, used = table_to_matrix(table, selected, role="Plot")

    try:
        return dumbbellplot(table[used], **forward)
    except Exception as exc:
        diagnostics.emit(
            "fallback",
            STRATEGY,
            "dumbbellplot failed; using fallback renderer",
            cause=exc,
        )

    opts = {key: forward[key] for key in _RENDER_KEYS if key in forward}
    labels = opts.pop("y_labels", None)
    if labels is None or len(labels) != len(table):
        labels = row_labels(table)
    return draw_dumbbell(
        [matrix[:, idx] for idx in range(matrix.shape[1])],
        [str(label) for label in labels],
        plot_type=opts.get("plot_type", "single"),
        orientation=opts.get("orientation", "horizontal"),
        label_x1=opts.get("label_x1", "X1"),
        label_x2=opts.get("label_x2", "X2"),
        title=opts.get("title"),
    )
