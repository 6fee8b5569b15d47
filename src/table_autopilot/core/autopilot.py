from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
import pandas as pd

from .coercion import coerce_column
from .config import resolve_options
from .diagnostics import Diagnostics, Logger
from .errors import CannotConvertColumnError, ColumnNotFoundError, NoNumericColumnsError, NotATableError
from .mapping import ColumnMapping, missing_columns
from .matrix import numeric_columns, resolve_columns, table_to_matrix
from .strategies import (
    classify_operation,
    generic_numeric_strategy,
    grouped_stats_strategy,
    operation_base_name,
    paired_plot_strategy,
)
from .types import OperationClass, StrategyOutcome


@dataclass(frozen=True)
class CanonicalTable:
    """Numeric (Y, X) view of the source table with incomplete rows removed."""

    table: pd.DataFrame
    response: Any | None
    predictors: list[Any]
    rows_dropped: int


class Autopilot:
    """Session bound to one table, mapping and option set.

    State is fixed at construction; every `execute` returns its own outcome.
    Not safe for concurrent use with a shared Diagnostics collector: give each
    caller its own instance or its own collector.
    """

    def __init__(
        self,
        table: pd.DataFrame,
        mapping: ColumnMapping | dict[str, Any] | None = None,
        options: dict[str, Any] | None = None,
        logger: Logger | None = None,
    ) -> None:
        if not isinstance(table, pd.DataFrame):
            raise NotATableError(table, "Autopilot")
        self.data = table
        self.mapping = ColumnMapping.from_value(mapping)
        self.options = resolve_options(options)
        self.logger = logger

    def bind(self, table: pd.DataFrame) -> "Autopilot":
        if table is self.data:
            return self
        return Autopilot(table, self.mapping, self.options, self.logger)

    def new_diagnostics(self) -> Diagnostics:
        return Diagnostics(self.logger, verbose=bool(self.options.get("verbose")))

    def build_xy(self) -> CanonicalTable:
        table = self.data
        mapping = self.mapping
        wanted = ([mapping.response] if mapping.response else []) + list(mapping.predictors)
        missing = missing_columns(table, wanted)
        if missing:
            raise ColumnNotFoundError(missing, role="Mapped")

        names: list[Any] = []
        vectors: list[np.ndarray] = []
        response = None
        if mapping.response:
            response = resolve_columns(table, [mapping.response], role="Response")[0]
            result = coerce_column(table[response], response)
            if not result.ok:
                raise CannotConvertColumnError(response, result.reason or "unsupported values")
            names.append(response)
            vectors.append(result.values.reshape(-1, 1))

        if mapping.predictors:
            X, predictors = table_to_matrix(table, list(mapping.predictors), role="Predictor")
        else:
            predictors = numeric_columns(table, exclude=[response] if response is not None else [])
            if not predictors:
                raise NoNumericColumnsError(
                    "No numeric predictor columns found in table and no mapping provided"
                )
            X, predictors = table_to_matrix(table, predictors)
        names.extend(predictors)
        vectors.append(X)

        canonical = pd.DataFrame(np.hstack(vectors), index=table.index, columns=names)
        clean = canonical.dropna(how="any")
        return CanonicalTable(
            table=clean,
            response=response,
            predictors=list(predictors),
            rows_dropped=int(len(canonical) - len(clean)),
        )

    def execute(
        self,
        operation: Any,
        *args: Any,
        diagnostics: Diagnostics | None = None,
        **kwargs: Any,
    ) -> StrategyOutcome:
        diagnostics = diagnostics or self.new_diagnostics()
        base_name = operation_base_name(operation)
        op_class = classify_operation(base_name)
        diagnostics.progress("autopilot", f'Executing "{base_name}"')

        if op_class is OperationClass.GROUPED_STATS:
            self.mapping.check_columns(self.data)
            columns = None
            if self.mapping.predictors or self.mapping.response:
                wanted = ([self.mapping.response] if self.mapping.response else []) + list(
                    self.mapping.predictors
                )
                columns = resolve_columns(self.data, wanted, role="Mapped")
            group = kwargs.get("group", self.mapping.group)
            return grouped_stats_strategy(self.data, group, columns, diagnostics)

        canonical = self.build_xy()
        if canonical.rows_dropped:
            diagnostics.progress("autopilot", f"Dropped {canonical.rows_dropped} incomplete row(s)")
        cols = list(self.mapping.cols) or None
        if op_class is OperationClass.PAIRED_PLOT:
            outcome = paired_plot_strategy(canonical.table, cols, self.options, kwargs, diagnostics)
        else:
            outcome = generic_numeric_strategy(
                operation,
                base_name,
                canonical.table,
                canonical.response,
                canonical.predictors,
                args,
                kwargs,
                self.options,
                cols,
                diagnostics,
            )
        outcome.debug.setdefault("rows_dropped", canonical.rows_dropped)
        outcome.debug.setdefault("predictors", [str(col) for col in canonical.predictors])
        return outcome
