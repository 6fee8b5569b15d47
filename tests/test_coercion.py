import datetime as dt

import numpy as np
import pandas as pd

from table_autopilot.core.coercion import coerce_column, column_kind, first_seen_codes
from table_autopilot.core.types import ColumnKind


def test_text_codes_follow_first_seen_order():
    result = coerce_column(pd.Series(["b", "a", "b", "c"]))
    assert result.ok
    assert result.kind is ColumnKind.TEXT
    assert result.values.tolist() == [1.0, 2.0, 1.0, 3.0]


def test_categorical_codes_ignore_declared_category_order():
    series = pd.Series(pd.Categorical(["z", "y", "z"], categories=["y", "z"]))
    result = coerce_column(series)
    assert result.kind is ColumnKind.CATEGORICAL
    assert result.values.tolist() == [1.0, 2.0, 1.0]


def test_missing_text_stays_missing():
    values = first_seen_codes(pd.Series(["a", None, "b", "a"]))
    assert values[0] == 1.0
    assert np.isnan(values[1])
    assert values[2:].tolist() == [2.0, 1.0]


def test_single_distinct_value_still_codes():
    result = coerce_column(pd.Series(["only", "only"]))
    assert result.values.tolist() == [1.0, 1.0]


def test_boolean_and_numeric_pass_through():
    flags = coerce_column(pd.Series([True, False, True]))
    assert flags.kind is ColumnKind.BOOLEAN
    assert flags.values.tolist() == [1.0, 0.0, 1.0]

    numbers = coerce_column(pd.Series([1, 2, 3], dtype="int64"))
    assert numbers.kind is ColumnKind.NUMERIC
    assert numbers.values.dtype == np.float64


def test_datetimes_become_days_since_epoch():
    series = pd.Series([pd.Timestamp("1970-01-02"), pd.NaT, pd.Timestamp("1970-01-01 12:00")])
    result = coerce_column(series)
    assert result.kind is ColumnKind.TEMPORAL
    assert result.values[0] == 1.0
    assert np.isnan(result.values[1])
    assert result.values[2] == 0.5


def test_object_dates_detected_as_temporal():
    series = pd.Series([dt.date(1970, 1, 3), dt.date(1970, 1, 1)], dtype=object)
    assert column_kind(series) is ColumnKind.TEMPORAL
    assert coerce_column(series).values.tolist() == [2.0, 0.0]


def test_durations_and_periods():
    durations = coerce_column(pd.Series(pd.to_timedelta(["1D", "12h"])))
    assert durations.values.tolist() == [1.0, 0.5]

    periods = pd.Series(pd.period_range("2020-01", periods=2, freq="M"))
    result = coerce_column(periods)
    assert result.values[1] - result.values[0] == 1.0


def test_mixed_object_column_parses_or_reports():
    parsed = coerce_column(pd.Series([1, "2.5", None], dtype=object))
    assert parsed.kind is ColumnKind.OTHER
    assert parsed.values[:2].tolist() == [1.0, 2.5]

    failed = coerce_column(pd.Series([1, "two"], dtype=object), "mixed")
    assert not failed.ok
    assert failed.column == "mixed"
    assert "two" in failed.reason


def test_mixed_dates_and_durations_are_not_temporal():
    series = pd.Series([dt.date(2020, 1, 1), dt.timedelta(days=2)], dtype=object)
    assert column_kind(series) is ColumnKind.OTHER
    result = coerce_column(series, "mixed_time")
    assert not result.ok
    assert result.reason


def test_object_durations_alone_are_temporal():
    series = pd.Series([dt.timedelta(days=2), None, dt.timedelta(hours=12)], dtype=object)
    result = coerce_column(series)
    assert result.kind is ColumnKind.TEMPORAL
    assert result.values[0] == 2.0
    assert np.isnan(result.values[1])
    assert result.values[2] == 0.5
