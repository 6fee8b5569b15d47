from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterator

import numpy as np
import pandas as pd

from .coercion import column_kind
from .errors import ColumnNotFoundError
from .types import ColumnKind
from .utils import canonical_label

COMMON_GROUP_NAMES = ("Group", "group", "Region", "Class", "Category", "Label", "GroupVar")
ALL_GROUP_LABEL = "All"


@dataclass(frozen=True)
class GroupPartition:
    column: Any | None
    keys: tuple[Any, ...]
    labels: tuple[str, ...]
    assignment: np.ndarray  # per-row group index into keys
    method: str

    @property
    def n_groups(self) -> int:
        return len(self.keys)

    def sizes(self) -> list[int]:
        return np.bincount(self.assignment, minlength=self.n_groups).astype(int).tolist()

    def indices(self, group: int) -> np.ndarray:
        return np.flatnonzero(self.assignment == group)

    def frames(self, table: pd.DataFrame) -> Iterator[tuple[str, Any, pd.DataFrame]]:
        for group, (label, key) in enumerate(zip(self.labels, self.keys)):
            yield label, key, table.iloc[self.indices(group)]


def detect_group_column(table: pd.DataFrame) -> tuple[Any | None, str]:
    for name in COMMON_GROUP_NAMES:
        if name in table.columns:
            return name, "conventional_name"
    n_rows = len(table)
    limit = max(math.ceil(0.5 * n_rows), 50)
    for col in table.columns:
        if column_kind(table[col]) not in (ColumnKind.CATEGORICAL, ColumnKind.TEXT):
            continue
        distinct = int(table[col].nunique(dropna=True))
        if 1 < distinct <= limit:
            return col, "scan"
    return None, "none"


def partition(table: pd.DataFrame, group: Any | None = None) -> GroupPartition:
    """Split rows by a grouping column; keys keep first-seen order.

    Missing key values form their own group so every row is assigned.
    """

    if group is not None:
        if group not in table.columns:
            raise ColumnNotFoundError([group], role="Group")
        column, method = group, "explicit"
    else:
        column, method = detect_group_column(table)

    n_rows = len(table)
    if column is None:
        return GroupPartition(
            column=None,
            keys=(ALL_GROUP_LABEL,),
            labels=(ALL_GROUP_LABEL,),
            assignment=np.zeros(n_rows, dtype=int),
            method=method,
        )

    values = table[column]
    if isinstance(values.dtype, pd.CategoricalDtype):
        values = values.astype(object)
    codes, uniques = pd.factorize(values, sort=False, use_na_sentinel=False)
    keys = tuple(uniques.tolist() if hasattr(uniques, "tolist") else list(uniques))
    return GroupPartition(
        column=column,
        keys=keys,
        labels=tuple(canonical_label(key) for key in keys),
        assignment=np.asarray(codes, dtype=int),
        method=method,
    )
