"""Descriptive statistics for a single column's numeric view."""

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Self

import numpy as np

from tablab.data.transforms import first_mode, lower_median
from tablab.data.views import DatasetView

from .base_analyser import BaseAnalyser


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DescriptiveStatsResult:
    r"""Summary statistics of the parseable cells of one column.

    Attributes:
        column: Name of the analyzed column.
        count: Number of parseable cells (:math:`n`).
        mean: Arithmetic mean :math:`\bar{x}`.
        median: Element at index :math:`\lfloor n/2 \rfloor` of the sorted values (no interpolation).
        mode: Most frequent value, first-seen on ties.
        variance: Population variance :math:`\frac{1}{n}\sum_i (x_i - \bar{x})^2`.
        std_dev: Square root of ``variance``.
        histogram: Mapping value -> number of occurrences.
    """

    column: str
    count: int
    mean: float
    median: float
    mode: float
    variance: float
    std_dev: float
    histogram: dict[float, int] = field(default_factory=dict)

    def to_csv(self) -> str:
        """Render the headline statistics as a two-column ``Statistic,Value`` table."""
        rows = [
            ("Mean", self.mean),
            ("Median", self.median),
            ("Mode", self.mode),
            ("Standard Deviation", self.std_dev),
        ]
        return "\n".join(["Statistic,Value", *(f"{name},{value:.2f}" for name, value in rows)])


class DescriptiveStatsAnalyzer(BaseAnalyser):
    """Mean, lower median, mode, population variance and histogram of one column.

    Cells that do not parse as numbers are excluded. When nothing parses (or the
    column does not exist) :meth:`result` returns ``None`` ("no data").

    Example:
        >>> ds = Dataset.from_rows([["v"], ["1"], ["2"], ["2"], ["3"], ["4"]])
        >>> res = ds.make_stats_analyzer("v").fit().result()
        >>> res.mean, res.median, res.mode
        (2.4, 2.0, 2.0)
    """

    def __init__(self, view: DatasetView, column: str | None = None) -> None:
        """Initialize the analyzer.

        Args:
            view: Dataset view containing the column.
            column: Column to analyze (defaults to the first column of the view).
        """
        self._view = view
        self.column = column if column is not None else (view.columns[0] if view.columns else "")
        self._fitted = False
        self._result: DescriptiveStatsResult | None = None

    def fit(self) -> Self:
        positions = self._view.positions_of([self.column])
        values = self._view.numeric_values(positions[0]).tolist() if positions else []
        self._result = self.describe(self.column, values)
        self._fitted = True
        if self._result is None:
            logger.info("No numeric data in column %r", self.column)
        return self

    @staticmethod
    def describe(column: str, values: list[float]) -> DescriptiveStatsResult | None:
        """Compute the statistics for an explicit list of values (``None`` when empty)."""
        if not values:
            return None
        arr = np.asarray(values, dtype=float)
        mean = float(arr.mean())
        variance = float(np.mean((arr - mean) ** 2))
        return DescriptiveStatsResult(
            column=column,
            count=len(values),
            mean=mean,
            median=float(lower_median(values)),
            mode=float(first_mode(values)),
            variance=variance,
            std_dev=float(np.sqrt(variance)),
            histogram=dict(Counter(values)),
        )

    def result(self) -> DescriptiveStatsResult | None:
        """Return the statistics, or ``None`` when the column has no numeric data.

        Raises:
            ValueError: If fit() has not been called yet.
        """
        if not self._fitted:
            raise ValueError("Must call fit() before result()")
        return self._result
