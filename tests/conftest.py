from __future__ import annotations

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import pytest


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close("all")


@pytest.fixture()
def mixed_table() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "Region": ["north", "south", "north", "east", "south", "north"],
            "Sales": [10.0, 12.5, np.nan, 7.0, 9.0, 11.0],
            "Units": [1, 2, 3, 4, 5, 6],
            "Promo": [True, False, True, False, False, True],
            "Day": pd.to_datetime(
                ["2024-01-01", "2024-01-02", "2024-01-03", "2024-01-04", "2024-01-05", "2024-01-06"]
            ),
        }
    )


@pytest.fixture()
def xy_table() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "A": [1.0, 2.0, 3.0, 4.0, 5.0],
            "B": [2.0, 1.0, 4.0, 3.0, 6.0],
            "C": [1.5, 2.5, np.nan, 4.5, 5.5],
        }
    )


class RecordingLogger:
    def __init__(self) -> None:
        self.lines: list[str] = []

    def __call__(self, msg: str) -> None:
        self.lines.append(msg)


@pytest.fixture()
def log_lines() -> RecordingLogger:
    return RecordingLogger()
