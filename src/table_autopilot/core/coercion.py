from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Any

import numpy as np
import pandas as pd

from .types import ColumnKind

_EPOCH = pd.Timestamp("1970-01-01")
_ONE_DAY = pd.Timedelta(days=1)


@dataclass(frozen=True)
class CoercionResult:
    column: str
    kind: ColumnKind
    values: np.ndarray | None = None
    reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.values is not None


def column_kind(series: pd.Series) -> ColumnKind:
    dtype = series.dtype
    if pd.api.types.is_bool_dtype(dtype):
        return ColumnKind.BOOLEAN
    if isinstance(dtype, pd.CategoricalDtype):
        return ColumnKind.CATEGORICAL
    if (
        pd.api.types.is_datetime64_any_dtype(dtype)
        or pd.api.types.is_timedelta64_dtype(dtype)
        or isinstance(dtype, pd.PeriodDtype)
    ):
        return ColumnKind.TEMPORAL
    if pd.api.types.is_numeric_dtype(dtype):
        return ColumnKind.NUMERIC
    if pd.api.types.is_string_dtype(dtype) and not pd.api.types.is_object_dtype(dtype):
        return ColumnKind.TEXT
    sample = series.dropna()
    if sample.empty:
        # All-missing object column: nothing to code, treat as text.
        return ColumnKind.TEXT
    if all(isinstance(value, str) for value in sample):
        return ColumnKind.TEXT
    if all(isinstance(value, (bool, np.bool_)) for value in sample):
        return ColumnKind.BOOLEAN
    # One temporal family per column; a date/duration mix has no common encoding.
    if all(isinstance(value, dt.date) for value in sample):
        return ColumnKind.TEMPORAL
    if all(isinstance(value, dt.timedelta) for value in sample):
        return ColumnKind.TEMPORAL
    if all(isinstance(value, pd.Period) for value in sample) and len({value.freqstr for value in sample}) == 1:
        return ColumnKind.TEMPORAL
    return ColumnKind.OTHER


def first_seen_codes(series: pd.Series) -> np.ndarray:
    """1-based codes in order of first appearance; missing entries stay NaN."""

    codes, _ = pd.factorize(series, sort=False, use_na_sentinel=True)
    out = codes.astype(float) + 1.0
    out[codes < 0] = np.nan
    return out


def _temporal_values(series: pd.Series) -> np.ndarray:
    dtype = series.dtype
    if isinstance(dtype, pd.PeriodDtype):
        return np.array(
            [np.nan if pd.isna(value) else float(value.ordinal) for value in series], dtype=float
        )
    if pd.api.types.is_timedelta64_dtype(dtype):
        return (series / _ONE_DAY).to_numpy(dtype=float, na_value=np.nan)
    if pd.api.types.is_datetime64_any_dtype(dtype):
        if getattr(dtype, "tz", None) is not None:
            series = series.dt.tz_convert("UTC").dt.tz_localize(None)
        return ((series - _EPOCH) / _ONE_DAY).to_numpy(dtype=float, na_value=np.nan)
    sample = series.dropna()
    if len(sample) and all(isinstance(value, dt.timedelta) for value in sample):
        return _temporal_values(pd.to_timedelta(series))
    if len(sample) and all(isinstance(value, pd.Period) for value in sample):
        return np.array(
            [np.nan if pd.isna(value) else float(value.ordinal) for value in series], dtype=float
        )
    return _temporal_values(pd.to_datetime(series, utc=True).dt.tz_localize(None))


def coerce_column(series: pd.Series, name: Any = None) -> CoercionResult:
    """Convert one column into a float vector, or report why it cannot be converted."""

    label = str(series.name if name is None else name)
    kind = column_kind(series)
    if kind is ColumnKind.NUMERIC:
        return CoercionResult(label, kind, series.to_numpy(dtype=float, na_value=np.nan))
    if kind is ColumnKind.BOOLEAN:
        values = np.array([np.nan if pd.isna(v) else float(bool(v)) for v in series], dtype=float)
        return CoercionResult(label, kind, values)
    if kind in (ColumnKind.CATEGORICAL, ColumnKind.TEXT):
        if kind is ColumnKind.CATEGORICAL:
            # Observed order, not category order: categories may be declared sorted.
            series = series.astype(object)
        return CoercionResult(label, kind, first_seen_codes(series))
    if kind is ColumnKind.TEMPORAL:
        try:
            return CoercionResult(label, kind, _temporal_values(series))
        except (TypeError, ValueError, OverflowError) as exc:
            return CoercionResult(label, kind, reason=f"temporal encoding failed: {exc}")
    try:
        parsed = pd.to_numeric(series, errors="coerce").to_numpy(dtype=float, na_value=np.nan)
    except (TypeError, ValueError) as exc:
        return CoercionResult(label, kind, reason=f"numeric parse failed: {exc}")
    unparsed = series.notna().to_numpy() & np.isnan(parsed)
    if unparsed.any():
        bad = series[unparsed].iloc[0]
        return CoercionResult(label, kind, reason=f"value {bad!r} is not numeric")
    if np.isinf(parsed).any():
        return CoercionResult(label, kind, reason="non-finite values after parsing")
    return CoercionResult(label, kind, parsed)
