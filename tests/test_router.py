import numpy as np
import pandas as pd
import pytest
from matplotlib.axes import Axes

from table_autopilot.core.autopilot import Autopilot
from table_autopilot.core.errors import ColumnNotFoundError, MappingError, NotATableError
from table_autopilot.core.invoker import SafeInvoker
from table_autopilot.core.router import route
from table_autopilot.core.safe_methods import DensityResult


def test_grouped_fallback_scenario():
    table = pd.DataFrame({"Group": ["X", "Y", "X"], "Val": [10.0, np.nan, 30.0]})

    result = route(table, "grpstats")

    assert result.status == "ok"
    assert result.strategy == "grouped_stats"
    summary = result.value
    assert summary["Group"].tolist() == ["X", "Y"]
    assert summary["Val_Count"].tolist() == [2, 0]
    assert summary["Val_Mean"].iloc[0] == 20.0
    assert summary["Val_Median"].iloc[0] == 20.0
    assert summary["Val_Mean"].isna().iloc[1]


def test_direct_grouped_handler_degrades_instead_of_raising():
    table = pd.DataFrame({"Region": ["n", "n", "n", "s"], "v": [1.0, 2.0, 3.0, 4.0]})

    result = route(table, "grpstatsfs")

    assert result.status == "degraded"
    assert result.strategy == "safe_grpstatsfs"
    assert result.value["Region"].tolist() == ["n", "s"]
    assert np.isnan(result.value.loc[1, "v_mean"])
    assert any(event.kind == "group_failed" for event in result.diagnostics)


def test_direct_handler_success_forwards_options():
    table = pd.DataFrame({"a": [1.0, 2.0, 3.0, 4.0], "b": [1.0, 3.0, 2.0, 5.0], "c": [4.0, 1.0, 2.0, 0.0]})

    result = route(table, "CorrPDF", options={"NumPoints": 11, "Verbose": False})

    assert result.status == "ok"
    assert result.strategy == "safe_corrpdf"
    assert isinstance(result.value, DensityResult)
    assert result.value.edges.shape == (11,)
    assert result.debug["attempts"] == [{"strategy": "safe_corrpdf", "ok": True}]


def test_failed_direct_handler_falls_back_to_autopilot(log_lines):
    table = pd.DataFrame({"y": [1.0, 2.0, 3.0, 4.0], "x": [0.0, 1.0, 2.0, 3.0]})

    def safe_fit(data, **kwargs):
        raise ValueError("handler cannot cope")

    def fit(Y, X):
        return float(np.sum(Y)), X.shape

    invoker = SafeInvoker(handlers={"fit": safe_fit})
    result = invoker.invoke(
        fit,
        table,
        autopilot=Autopilot(table, {"Y": "y", "X": ["x"]}, logger=log_lines),
    )

    assert result.status == "degraded"
    assert result.strategy == "generic_numeric"
    assert result.outputs == (10.0, (4, 1))
    kinds = [event.kind for event in result.diagnostics]
    assert kinds == ["direct_failed"]
    assert result.diagnostics[0].cause == "ValueError: handler cannot cope"
    assert [a["ok"] for a in result.debug["attempts"]] == [False, True]


def test_dict_context_registers_handlers():
    table = pd.DataFrame({"v": [1.0, 2.0]})
    result = route(table, "pkg.tools:Summarize", {"summarize": lambda data: data["v"].sum()})
    assert result.status == "ok"
    assert result.strategy == "safe_summarize"
    assert result.value == 3.0


def test_unknown_target_reports_error_status():
    table = pd.DataFrame({"v": [1.0, 2.0]})
    result = route(table, "no_such_function")

    assert result.status == "error"
    assert result.error.type == "LookupError"
    assert result.outputs == ()
    assert result.diagnostics[-1].kind == "call_failed"


def test_generic_numeric_with_mapping_through_router(xy_table):
    result = route(xy_table, "regress", mapping={"Y": "C", "X": ["A", "B"]})
    coef, residuals = result.outputs
    assert result.status == "ok"
    assert coef.shape == (3,)
    assert residuals.shape == (4,)
    assert result.debug["rows_dropped"] == 1


def test_paired_plot_through_router_falls_back_when_strict_plot_fails():
    table = pd.DataFrame({"before": ["lo", "hi"], "after": [2.0, 1.0]})
    result = route(table, "dumbbellplot", options={"AutoLabel": False})
    assert result.strategy == "safe_dumbbellplot"
    assert result.status == "degraded"
    assert isinstance(result.value, Axes)


def test_existing_session_is_rebound_to_the_routed_table(xy_table):
    session = Autopilot(xy_table.iloc[:2], {"Y": "C", "X": ["A"]})
    result = route(xy_table, "regress", session)
    assert result.debug["rows_dropped"] == 1
    assert result.outputs[1].shape == (4,)


def test_verbose_progress_goes_to_logger(log_lines):
    table = pd.DataFrame({"Group": ["a", "b"], "v": [1.0, 2.0]})
    result = route(table, "grpstats", options={"Verbose": True}, logger=log_lines)
    assert result.status == "ok"
    assert log_lines.lines == ['[INFO] autopilot: Executing "grpstats"']


def test_preconditions_propagate(xy_table):
    with pytest.raises(NotATableError):
        route([[1, 2]], "corrpdf")
    with pytest.raises(ColumnNotFoundError, match="Z"):
        route(xy_table, "regress", mapping={"X": ["A", "Z"]})
    with pytest.raises(MappingError):
        route(xy_table, "regress", mapping={"Bogus": "A"})
    with pytest.raises(TypeError):
        route(xy_table, "regress", "not a context")


def _store_table() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "Region": ["n", "n", "n", "s", "s", "s"],
            "Store": ["a", "b", "a", "b", "a", "b"],
            "v": [1.0, 2.0, 3.0, 4.0, 5.0, 6.0],
        }
    )


def test_mapped_group_is_passed_to_direct_grouped_handler():
    result = route(_store_table(), "grpstatsfs", mapping={"Group": "Store"})

    assert result.status == "ok"
    assert result.strategy == "safe_grpstatsfs"
    assert list(result.value.columns[:2]) == ["Store", "v_mean"]
    assert result.value["Store"].tolist() == ["a", "b"]
    assert result.value["v_mean"].tolist() == [3.0, 4.0]


def test_mapped_group_drives_autopilot_grouped_summary():
    result = route(_store_table(), "grpstats", mapping={"Group": "Store"})
    assert result.strategy == "grouped_stats"
    assert result.value["Group"].tolist() == ["a", "b"]
    assert result.value["v_Count"].tolist() == [3, 3]


def test_group_keyword_overrides_detection_on_autopilot_path():
    result = route(_store_table(), "grpstats", group="Store")
    assert result.value["Group"].tolist() == ["a", "b"]


def test_missing_mapped_group_is_fatal_before_any_attempt():
    table = _store_table()
    with pytest.raises(ColumnNotFoundError, match="Nope"):
        route(table, "grpstatsfs", mapping={"Group": "Nope"})
    with pytest.raises(ColumnNotFoundError, match="Nope"):
        route(table, "grpstatsfs", Autopilot(table, {"Group": "Nope"}))
