import numpy as np
import pandas as pd
import pytest

from table_autopilot.core.errors import ColumnNotFoundError
from table_autopilot.core.grouping import ALL_GROUP_LABEL, detect_group_column, partition


def test_conventional_name_wins(mixed_table):
    column, method = detect_group_column(mixed_table)
    assert column == "Region"
    assert method == "conventional_name"


def test_scan_picks_first_low_cardinality_text_column():
    table = pd.DataFrame(
        {
            "value": [1.0, 2.0, 3.0, 4.0],
            "constant": ["k", "k", "k", "k"],
            "team": ["red", "blue", "red", "blue"],
        }
    )
    assert detect_group_column(table) == ("team", "scan")


def test_no_candidate_means_single_all_group():
    table = pd.DataFrame({"value": [1.0, 2.0, 3.0]})
    parts = partition(table)
    assert parts.column is None
    assert parts.labels == (ALL_GROUP_LABEL,)
    assert parts.sizes() == [3]


def test_partition_is_complete_and_disjoint(mixed_table):
    parts = partition(mixed_table)
    assert parts.keys == ("north", "south", "east")
    assert sum(parts.sizes()) == len(mixed_table)
    seen = np.concatenate([parts.indices(g) for g in range(parts.n_groups)])
    assert sorted(seen.tolist()) == list(range(len(mixed_table)))


def test_missing_key_values_form_their_own_group():
    table = pd.DataFrame({"Group": ["a", None, "a"], "v": [1, 2, 3]})
    parts = partition(table)
    assert parts.n_groups == 2
    assert parts.labels[1] == "<missing>"
    assert sum(parts.sizes()) == 3


def test_typed_keys_are_kept_for_output():
    table = pd.DataFrame({"Class": [2, 1, 2], "v": [1.0, 2.0, 3.0]})
    parts = partition(table)
    assert parts.keys == (2, 1)
    assert parts.labels == ("2", "1")
    frames = list(parts.frames(table))
    assert [len(sub) for _, _, sub in frames] == [2, 1]


def test_explicit_missing_group_column_raises():
    with pytest.raises(ColumnNotFoundError, match="Nope"):
        partition(pd.DataFrame({"v": [1]}), group="Nope")
