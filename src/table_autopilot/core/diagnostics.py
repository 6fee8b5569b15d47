from __future__ import annotations

import sys
from dataclasses import asdict, dataclass, field
from typing import Any, Callable

from .utils import now_iso

Logger = Callable[[str], None]

_LEVELS = {
    "progress": "INFO",
    "fallback": "WARN",
    "direct_failed": "WARN",
    "group_failed": "WARN",
    "column_skipped": "WARN",
    "label_failed": "WARN",
    "reconcile_failed": "WARN",
    "call_failed": "ERROR",
}


@dataclass
class DiagnosticEvent:
    kind: str
    strategy: str
    message: str
    cause: str | None = None
    detail: dict[str, Any] = field(default_factory=dict)
    at: str = field(default_factory=now_iso)

    @property
    def level(self) -> str:
        return _LEVELS.get(self.kind, "WARN")

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _noop(msg: str) -> None:
    pass


def _stderr(msg: str) -> None:
    print(msg, file=sys.stderr)


class Diagnostics:
    """Per-call collector for fallback/failure events.

    Events never change control flow; they are returned with the result and
    mirrored to the injected logger as single lines.
    """

    def __init__(self, logger: Logger | None = None, verbose: bool = False) -> None:
        self.verbose = bool(verbose)
        if logger is None:
            logger = _stderr if self.verbose else _noop
        self.logger = logger
        self.events: list[DiagnosticEvent] = []

    def emit(
        self,
        kind: str,
        strategy: str,
        message: str,
        cause: BaseException | str | None = None,
        **detail: Any,
    ) -> DiagnosticEvent:
        if isinstance(cause, BaseException):
            cause = f"{type(cause).__name__}: {cause}"
        event = DiagnosticEvent(kind=kind, strategy=strategy, message=message, cause=cause, detail=detail)
        self.events.append(event)
        line = f"[{event.level}] {strategy}: {message}"
        if cause:
            line = f"{line} ({cause})"
        self.logger(line)
        return event

    def progress(self, strategy: str, message: str) -> None:
        if self.verbose:
            self.emit("progress", strategy, message)

    def of_kind(self, kind: str) -> list[DiagnosticEvent]:
        return [event for event in self.events if event.kind == kind]

    def warnings(self) -> list[str]:
        return [event.message for event in self.events if event.kind != "progress"]
