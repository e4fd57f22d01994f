"""Tests for chart series construction."""

import pytest

from tablab.analysis.chart_data import ChartSeries, ChartType, build_chart_series
from tablab.data.dataset import Dataset


@pytest.fixture
def chart_dataset() -> Dataset:
    return Dataset.from_rows(
        [
            ["fruit", "price", "qty"],
            ["apple", "1.5", "10"],
            ["pear", "n/a", "4"],
            ["apple", "2", "x"],
            ["plum", "3", "7"],
        ],
    )


class TestBuildChartSeries:
    """Bar, line, area and scatter series."""

    def test_bar_counts_in_first_seen_order(self, chart_dataset: Dataset) -> None:
        series = build_chart_series(chart_dataset, ChartType.BAR, column="fruit")
        assert isinstance(series, ChartSeries)
        assert series.points == [("apple", 2.0), ("pear", 1.0), ("plum", 1.0)]

    @pytest.mark.parametrize("chart_type", ["line", "area"])
    def test_line_and_area_skip_unparseable(self, chart_dataset: Dataset, chart_type: str) -> None:
        series = build_chart_series(chart_dataset, chart_type, column="price")
        assert series.chart_type == ChartType(chart_type)
        assert series.points == [(0, 1.5), (2, 2.0), (3, 3.0)]

    def test_scatter_keeps_rows_where_both_parse(self, chart_dataset: Dataset) -> None:
        series = build_chart_series(chart_dataset, "scatter", x_column="price", y_column="qty")
        assert series.points == [(1.5, 10.0), (3.0, 7.0)]

    def test_scatter_needs_both_axes(self, chart_dataset: Dataset) -> None:
        assert len(build_chart_series(chart_dataset, "scatter", x_column="price")) == 0

    def test_unknown_column_is_empty(self, chart_dataset: Dataset) -> None:
        assert build_chart_series(chart_dataset, "bar", column="ghost").points == []
        assert build_chart_series(chart_dataset, "scatter", x_column="ghost", y_column="qty").points == []

    def test_unknown_chart_type(self, chart_dataset: Dataset) -> None:
        with pytest.raises(ValueError):
            build_chart_series(chart_dataset, "pie", column="fruit")

    def test_only_scatter_needs_xy(self) -> None:
        assert ChartType.SCATTER.needs_xy
        assert not ChartType.BAR.needs_xy
