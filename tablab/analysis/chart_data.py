"""Chart-ready series derived from a dataset (the rendering itself lives in the UI layer)."""

from collections import Counter
from dataclasses import dataclass, field
from enum import StrEnum

from tablab.data.dataset import Dataset


class ChartType(StrEnum):
    BAR = "bar"
    LINE = "line"
    SCATTER = "scatter"
    AREA = "area"

    @property
    def needs_xy(self) -> bool:
        """Scatter plots need an x and a y column, every other chart a single column."""
        return self is ChartType.SCATTER


@dataclass(frozen=True)
class ChartSeries:
    """Points for one chart.

    ``points`` holds ``(label, count)`` pairs for bar charts, ``(row_index, value)``
    for line/area charts and ``(x, y)`` for scatter plots.
    """

    chart_type: ChartType
    points: list[tuple[object, float]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.points)


def build_chart_series(
    dataset: Dataset,
    chart_type: ChartType | str,
    column: str | None = None,
    x_column: str | None = None,
    y_column: str | None = None,
) -> ChartSeries:
    """Build the series a chart of ``chart_type`` would plot.

    - bar: frequency of each raw cell value, in first-seen order
    - line / area: ``(row index, value)`` for every numeric cell
    - scatter: ``(x, y)`` for rows where both cells are numeric

    Unknown or unset columns produce an empty series.
    """
    chart_type = ChartType(chart_type)

    if chart_type is ChartType.SCATTER:
        if not x_column or not y_column:
            return ChartSeries(chart_type)
        xs = dataset.column_index(x_column)
        ys = dataset.column_index(y_column)
        if xs is None or ys is None:
            return ChartSeries(chart_type)
        view = dataset.view(columns=[x_column, y_column])
        pairs = view.numeric.dropna(how="any")
        return ChartSeries(chart_type, list(zip(pairs.iloc[:, 0].tolist(), pairs.iloc[:, 1].tolist())))

    if not column or dataset.column_index(column) is None:
        return ChartSeries(chart_type)

    if chart_type is ChartType.BAR:
        counts = Counter(dataset.column(column))
        return ChartSeries(chart_type, [(value, float(count)) for value, count in counts.items()])

    values = dataset.view(columns=[column]).numeric_values(0)
    return ChartSeries(chart_type, list(zip(values.index.tolist(), values.tolist())))
