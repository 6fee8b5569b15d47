from __future__ import annotations

import traceback
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

from .diagnostics import DiagnosticEvent


class ColumnKind(str, Enum):
    NUMERIC = "numeric"
    BOOLEAN = "boolean"
    CATEGORICAL = "categorical"
    TEXT = "text"
    TEMPORAL = "temporal"
    OTHER = "other"


class OperationClass(str, Enum):
    GROUPED_STATS = "grouped_stats"
    PAIRED_PLOT = "paired_plot"
    GENERIC_NUMERIC = "generic_numeric"


@dataclass
class StrategyError:
    type: str
    message: str
    traceback: str

    @classmethod
    def from_exception(cls, exc: BaseException) -> "StrategyError":
        tb = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        return cls(type=type(exc).__name__, message=str(exc), traceback=tb)


@dataclass
class StrategyOutcome:
    """Result of one strategy attempt: either outputs or the error that stopped it."""

    ok: bool
    strategy: str
    outputs: tuple[Any, ...] = ()
    error: StrategyError | None = None
    debug: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def success(cls, strategy: str, outputs: Any, **debug: Any) -> "StrategyOutcome":
        if not isinstance(outputs, tuple):
            outputs = (outputs,)
        return cls(ok=True, strategy=strategy, outputs=outputs, debug=dict(debug))

    @classmethod
    def failure(cls, strategy: str, exc: BaseException, **debug: Any) -> "StrategyOutcome":
        return cls(
            ok=False,
            strategy=strategy,
            error=StrategyError.from_exception(exc),
            debug=dict(debug),
        )


@dataclass
class RouteResult:
    status: str
    operation: str
    strategy: str
    outputs: tuple[Any, ...]
    diagnostics: list[DiagnosticEvent] = field(default_factory=list)
    error: StrategyError | None = None
    debug: dict[str, Any] = field(default_factory=dict)

    @property
    def value(self) -> Any:
        return self.outputs[0] if self.outputs else None

    @property
    def warnings(self) -> list[str]:
        return [event.message for event in self.diagnostics if event.kind != "progress"]


@dataclass(frozen=True)
class DirectHandler:
    name: str
    fn: Callable[..., Any]
    # Built-in handlers accept a `diagnostics=` keyword; user-registered ones may not.
    accepts_diagnostics: bool = False
