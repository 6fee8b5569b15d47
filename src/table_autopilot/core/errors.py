from __future__ import annotations

from typing import Iterable


class AutopilotError(Exception):
    """Base class for errors surfaced to callers of the router."""


class PreconditionError(AutopilotError, ValueError):
    pass


class NotATableError(PreconditionError, TypeError):
    def __init__(self, value: object, where: str = "input") -> None:
        super().__init__(
            f"{where}: first argument must be a table (pandas.DataFrame), got {type(value).__name__}"
        )


class ColumnNotFoundError(PreconditionError):
    def __init__(self, missing: Iterable[object], role: str | None = None) -> None:
        self.missing = [str(name) for name in missing]
        self.role = role
        label = f"{role} column(s)" if role else "Column(s)"
        super().__init__(f"{label} not found in table: {', '.join(self.missing)}")


class NoNumericColumnsError(PreconditionError):
    pass


class MappingError(PreconditionError):
    pass


class OptionsError(PreconditionError):
    pass


class InsufficientDataError(PreconditionError):
    pass


class ConversionError(AutopilotError, ValueError):
    pass


class CannotConvertColumnError(ConversionError):
    def __init__(self, column: object, reason: str) -> None:
        self.column = str(column)
        self.reason = reason
        super().__init__(f"Cannot convert column {self.column!r} to numeric: {reason}")
