"""Shared fixtures for the tablab test-suite."""

import pytest

from tablab.data.dataset import Dataset


@pytest.fixture
def stats_dataset() -> Dataset:
    """Single numeric column with a clear mode, plus a mixed text column."""
    return Dataset.from_rows(
        [
            ["value", "label"],
            ["1", "a"],
            ["2", "b"],
            ["2", "n/a"],
            ["3", "c"],
            ["4", "d"],
        ],
    )


@pytest.fixture
def xy_dataset() -> Dataset:
    """Perfectly linear data: y = 2x."""
    return Dataset.from_rows([["x", "y"], ["1", "2"], ["2", "4"], ["3", "6"], ["4", "8"]])


@pytest.fixture
def linear_dataset() -> Dataset:
    """Ten rows with y = 3a + 0.5b, enough for five cross-validation folds."""
    a = list(range(1, 11))
    b = [2, 1, 4, 3, 6, 5, 8, 7, 10, 9]
    rows = [["a", "b", "y"]]
    rows += [[str(ai), str(bi), str(3 * ai + 0.5 * bi)] for ai, bi in zip(a, b)]
    return Dataset.from_rows(rows)
