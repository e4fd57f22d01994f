"""Tests for IQR outlier detection."""

import pandas as pd
import pytest

from tablab.analysis.outlier_detector import IQROutlierDetector, OutlierDetectionResult, positional_quartiles
from tablab.data.dataset import Dataset


@pytest.fixture
def outlier_dataset() -> Dataset:
    """Two numeric columns with known outliers and one text column."""
    return Dataset.from_rows(
        [
            ["feature1", "feature2", "label"],
            ["1", "10", "a"],
            ["2", "11", "b"],
            ["3", "12", "c"],
            ["4", "", "d"],
            ["100", "-50", "e"],
        ],
    )


class TestIQROutlierDetector:
    """Positional quartiles and Tukey fences."""

    def test_default_threshold(self, outlier_dataset: Dataset) -> None:
        detector = outlier_dataset.make_iqr_outlier_detector()
        assert isinstance(detector, IQROutlierDetector)
        assert detector.threshold == 1.5

    def test_detects_known_outliers(self, outlier_dataset: Dataset) -> None:
        result = outlier_dataset.make_iqr_outlier_detector().fit().result()
        assert isinstance(result, OutlierDetectionResult)
        assert list(result.outlier_mask.columns) == ["feature1", "feature2"]
        assert result.outlier_mask.shape == (5, 2)
        assert result.outlier_mask["feature1"].tolist() == [False, False, False, False, True]
        assert result.outlier_mask["feature2"].tolist() == [False, False, False, False, True]
        assert result.total_outliers == 2
        assert result.n_outliers_per_row.tolist() == [0, 0, 0, 0, 2]

    def test_unparseable_cells_are_never_outliers(self, outlier_dataset: Dataset) -> None:
        result = outlier_dataset.make_iqr_outlier_detector().fit().result()
        assert not result.outlier_mask["feature2"].iloc[3]

    def test_fences(self, outlier_dataset: Dataset) -> None:
        result = outlier_dataset.make_iqr_outlier_detector(columns=["feature1"]).fit().result()
        fences = result.fences.loc["feature1"]
        # sorted [1, 2, 3, 4, 100]: q1 = index 1, q3 = index 3
        assert fences["q1"] == 2.0
        assert fences["q3"] == 4.0
        assert fences["lower"] == -1.0
        assert fences["upper"] == 7.0

    def test_higher_threshold_detects_fewer(self, outlier_dataset: Dataset) -> None:
        strict = outlier_dataset.make_iqr_outlier_detector(threshold=1.0).fit().result()
        loose = outlier_dataset.make_iqr_outlier_detector(threshold=100.0).fit().result()
        assert strict.total_outliers >= loose.total_outliers
        assert loose.total_outliers == 0

    def test_text_only_selection_is_empty(self, outlier_dataset: Dataset) -> None:
        result = outlier_dataset.make_iqr_outlier_detector(columns=["label"]).fit().result()
        assert result.outlier_mask.shape[1] == 0
        assert result.total_outliers == 0

    def test_result_before_fit_raises(self, outlier_dataset: Dataset) -> None:
        with pytest.raises(ValueError, match="fit"):
            outlier_dataset.make_iqr_outlier_detector().result()


@pytest.mark.parametrize(
    ("values", "expected"),
    [
        ([5.0], (5.0, 5.0)),
        ([4.0, 1.0, 3.0, 2.0], (2.0, 4.0)),
        ([1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 7.0, 8.0], (3.0, 7.0)),
    ],
)
def test_positional_quartiles(values: list[float], expected: tuple[float, float]) -> None:
    assert positional_quartiles(pd.Series(values).to_numpy()) == expected
