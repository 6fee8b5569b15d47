from __future__ import annotations

from typing import Any, Callable

import pandas as pd

from .autopilot import Autopilot
from .config import resolve_options, split_options
from .diagnostics import Diagnostics, Logger
from .errors import NotATableError
from .invoker import SafeInvoker
from .mapping import ColumnMapping
from .strategies import classify_operation, operation_base_name
from .types import OperationClass, RouteResult

_DEFAULT_INVOKER: SafeInvoker | None = None


def default_invoker() -> SafeInvoker:
    global _DEFAULT_INVOKER
    if _DEFAULT_INVOKER is None:
        _DEFAULT_INVOKER = SafeInvoker()
    return _DEFAULT_INVOKER


def _resolve_invoker(context: Any) -> SafeInvoker:
    if context is None or isinstance(context, Autopilot):
        return default_invoker()
    if isinstance(context, SafeInvoker):
        return context
    if isinstance(context, dict):
        return SafeInvoker(handlers=context)
    raise TypeError(f"route: unsupported context type {type(context).__name__}")


def route(
    table: pd.DataFrame,
    operation: Any,
    context: Autopilot | SafeInvoker | dict[str, Callable[..., Any]] | None = None,
    *args: Any,
    mapping: ColumnMapping | dict[str, Any] | None = None,
    options: dict[str, Any] | None = None,
    logger: Logger | None = None,
    **kwargs: Any,
) -> RouteResult:
    """Run `operation` on `table`: the `safe_<name>` handler first, then the autopilot.

    `context` may be an existing Autopilot session, a SafeInvoker, or a dict of
    extra direct handlers keyed by operation name. Options recognized by the
    autopilot (verbose, auto_label, label_*) configure the session; any other
    option is forwarded to the operation as a snake_case keyword. A mapped
    Group is passed as `group=` to grouped-statistics operations.
    """

    if not isinstance(table, pd.DataFrame):
        raise NotATableError(table, "route")
    if operation is None or (isinstance(operation, str) and not operation.strip()):
        raise ValueError("route: operation name must be non-empty")

    invoker = _resolve_invoker(context)
    own, forwarded = split_options(options)
    call_kwargs = {**forwarded, **kwargs}

    if isinstance(context, Autopilot):
        session = context.bind(table)
        if mapping is not None or own or logger is not None:
            session = Autopilot(
                table,
                mapping if mapping is not None else session.mapping,
                {**session.options, **own},
                logger or session.logger,
            )
        column_mapping = session.mapping
        diagnostics = session.new_diagnostics()
        factory: Callable[[], Autopilot] = lambda: session
    else:
        # Bad mapping or options fail here, before any attempt runs.
        column_mapping = ColumnMapping.from_value(mapping)
        settings = resolve_options(own)
        diagnostics = Diagnostics(logger, verbose=bool(settings.get("verbose")))
        factory = lambda: Autopilot(table, column_mapping, settings, logger)

    column_mapping.check_columns(table)
    op_class = classify_operation(operation_base_name(operation))
    if column_mapping.group and op_class is OperationClass.GROUPED_STATS:
        call_kwargs.setdefault("group", column_mapping.group)

    return invoker.invoke(
        operation,
        table,
        *args,
        autopilot=factory,
        diagnostics=diagnostics,
        **call_kwargs,
    )
