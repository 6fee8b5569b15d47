import numpy as np
import pandas as pd
import pytest

from table_autopilot.core.errors import (
    CannotConvertColumnError,
    ColumnNotFoundError,
    NoNumericColumnsError,
    PreconditionError,
)
from table_autopilot.core.matrix import numeric_columns, resolve_columns, table_to_matrix


def test_default_selection_uses_numeric_columns(mixed_table):
    matrix, cols = table_to_matrix(mixed_table)
    assert cols == ["Sales", "Units"]
    assert matrix.shape == (6, 2)
    assert np.isnan(matrix[2, 0])


def test_explicit_selection_coerces_each_kind(mixed_table):
    matrix, cols = table_to_matrix(mixed_table, ["Region", "Promo", "Day"])
    assert cols == ["Region", "Promo", "Day"]
    assert matrix[:, 0].tolist() == [1.0, 2.0, 1.0, 3.0, 2.0, 1.0]
    assert matrix[:, 1].tolist() == [1.0, 0.0, 1.0, 0.0, 0.0, 1.0]
    assert np.all(np.diff(matrix[:, 2]) == 1.0)


def test_every_missing_name_is_reported():
    table = pd.DataFrame({"A": [1.0], "B": [2.0]})
    with pytest.raises(ColumnNotFoundError) as excinfo:
        table_to_matrix(table, ["A", "Z", "Q"], role="Predictor")
    assert excinfo.value.missing == ["Z", "Q"]
    assert "Z" in str(excinfo.value)
    assert isinstance(excinfo.value, PreconditionError)


def test_positions_resolve_and_out_of_range_is_named():
    table = pd.DataFrame({"A": [1.0], "B": [2.0]})
    assert resolve_columns(table, [1, 0]) == ["B", "A"]
    with pytest.raises(ColumnNotFoundError, match="#5"):
        resolve_columns(table, [0, 5])


def test_no_numeric_columns_is_a_precondition():
    table = pd.DataFrame({"name": ["a", "b"]})
    assert numeric_columns(table) == []
    with pytest.raises(NoNumericColumnsError):
        table_to_matrix(table)


def test_unconvertible_column_names_the_column():
    table = pd.DataFrame({"A": [1.0, 2.0], "bad": ["x", 3]})
    with pytest.raises(CannotConvertColumnError) as excinfo:
        table_to_matrix(table, ["A", "bad"])
    assert excinfo.value.column == "bad"
