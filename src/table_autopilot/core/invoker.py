from __future__ import annotations

from typing import Any, Callable

import pandas as pd

from . import safe_methods
from .autopilot import Autopilot
from .diagnostics import Diagnostics
from .safe_methods import SAFE_HANDLERS
from .strategies import operation_base_name
from .types import DirectHandler, RouteResult, StrategyOutcome

SAFE_PREFIX = "safe_"


def _handler_key(name: str) -> str:
    base = operation_base_name(name)
    return base if base.startswith(SAFE_PREFIX) else f"{SAFE_PREFIX}{base}"


class SafeInvoker:
    """Direct-handler registry with fallback to the autopilot's generic strategies."""

    def __init__(
        self,
        handlers: dict[str, Callable[..., Any]] | None = None,
        include_builtin: bool = True,
    ) -> None:
        self.handlers: dict[str, DirectHandler] = {}
        if include_builtin:
            for name, fn in SAFE_HANDLERS.items():
                self.register(name, fn, accepts_diagnostics=True)
        for name, fn in (handlers or {}).items():
            self.register(name, fn)

    def register(self, name: str, fn: Callable[..., Any], accepts_diagnostics: bool = False) -> None:
        key = _handler_key(name)
        self.handlers[key] = DirectHandler(name=key, fn=fn, accepts_diagnostics=accepts_diagnostics)

    def find_direct(self, base_name: str) -> DirectHandler | None:
        key = _handler_key(base_name)
        handler = self.handlers.get(key)
        if handler is not None:
            return handler
        # Naming convention: any `safe_<name>` exported by the safe_methods package.
        fn = getattr(safe_methods, key, None)
        if callable(fn):
            return DirectHandler(name=key, fn=fn, accepts_diagnostics=True)
        return None

    def attempt_direct(
        self,
        handler: DirectHandler,
        table: pd.DataFrame,
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
        diagnostics: Diagnostics,
    ) -> StrategyOutcome:
        call_kwargs = dict(kwargs)
        if handler.accepts_diagnostics:
            call_kwargs["diagnostics"] = diagnostics
        try:
            value = handler.fn(table, *args, **call_kwargs)
        except Exception as exc:
            diagnostics.emit(
                "direct_failed",
                handler.name,
                f"{handler.name} failed; falling back to autopilot",
                cause=exc,
            )
            return StrategyOutcome.failure(handler.name, exc)
        return StrategyOutcome.success(handler.name, value)

    def invoke(
        self,
        operation: Any,
        table: pd.DataFrame,
        *args: Any,
        autopilot: Autopilot | Callable[[], Autopilot] | None = None,
        diagnostics: Diagnostics | None = None,
        **kwargs: Any,
    ) -> RouteResult:
        base_name = operation_base_name(operation)
        diagnostics = diagnostics or Diagnostics()
        attempts: list[dict[str, Any]] = []

        handler = self.find_direct(base_name)
        if handler is not None:
            outcome = self.attempt_direct(handler, table, args, kwargs, diagnostics)
            attempts.append({"strategy": outcome.strategy, "ok": outcome.ok})
            if outcome.ok:
                return _route_result(base_name, outcome, diagnostics, attempts)
            diagnostics.progress("autopilot", f"Using autopilot for {base_name!r} after {handler.name} failed")

        if autopilot is None:
            pilot = Autopilot(table)
        elif isinstance(autopilot, Autopilot):
            pilot = autopilot.bind(table)
        else:
            pilot = autopilot()
        outcome = pilot.execute(operation, *args, diagnostics=diagnostics, **kwargs)
        attempts.append({"strategy": outcome.strategy, "ok": outcome.ok})
        return _route_result(base_name, outcome, diagnostics, attempts)


def _route_result(
    base_name: str,
    outcome: StrategyOutcome,
    diagnostics: Diagnostics,
    attempts: list[dict[str, Any]],
) -> RouteResult:
    if not outcome.ok:
        status = "error"
    elif diagnostics.warnings():
        status = "degraded"
    else:
        status = "ok"
    debug = dict(outcome.debug)
    debug["attempts"] = attempts
    debug["warnings"] = diagnostics.warnings()
    return RouteResult(
        status=status,
        operation=base_name,
        strategy=outcome.strategy,
        outputs=outcome.outputs,
        diagnostics=list(diagnostics.events),
        error=outcome.error,
        debug=debug,
    )
