"""Pairwise Pearson correlation over a selected set of columns."""

import logging
from dataclasses import dataclass
from typing import Self

import numpy as np
import pandas as pd

from tablab.data.views import DatasetView

from .base_analyser import BaseAnalyser


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CorrelationEntry:
    """One cell of the correlation grid."""

    row_column: str
    col_column: str
    coefficient: float


@dataclass(frozen=True)
class CorrelationResult:
    """Correlation analysis outputs grouped for heat-map style consumers.

    Attributes:
        matrix: k x k DataFrame of coefficients (rows/cols = selected columns, diagonal 1).
        entries: Every grid cell as :class:`CorrelationEntry`; for each pair ``i < j`` both
            ``(i, j)`` and ``(j, i)`` are listed right after each other.
        feature_pairs: DataFrame with columns `feature_a`, `feature_b`, `correlation`,
            `abs_correlation`, `pair`; sorted by strongest absolute correlations.
    """

    matrix: pd.DataFrame
    entries: list[CorrelationEntry]
    feature_pairs: pd.DataFrame

    def coefficient(self, a: str, b: str) -> float:
        """Look up the coefficient between two selected columns."""
        for entry in self.entries:
            if entry.row_column == a and entry.col_column == b:
                return entry.coefficient
        raise KeyError(f"No correlation entry for ({a!r}, {b!r}).")


def pearson(values_a: pd.Series, values_b: pd.Series) -> float:
    r"""Pearson correlation of two numeric views.

    :math:`r = \frac{\sum_i (a_i - \bar{a})(b_i - \bar{b})}{\sqrt{\sum_i (a_i - \bar{a})^2 \sum_i (b_i - \bar{b})^2}}`

    Each input has its unparseable cells removed *independently* before the
    vectors are paired positionally. When the filtered vectors differ in length,
    either is empty, or the denominator is zero, the coefficient is 0.
    """
    a = values_a.dropna().to_numpy(dtype=float)
    b = values_b.dropna().to_numpy(dtype=float)
    if len(a) != len(b) or len(a) == 0:
        return 0.0

    dev_a = a - a.mean()
    dev_b = b - b.mean()
    denominator = np.sqrt(np.sum(dev_a**2) * np.sum(dev_b**2))
    if not np.isfinite(denominator) or denominator == 0:
        return 0.0
    coefficient = float(np.sum(dev_a * dev_b) / denominator)
    return 0.0 if np.isnan(coefficient) else coefficient


class CorrelationAnalyzer(BaseAnalyser):
    """Analyzer for computing pairwise column correlations.

    Works on every column of the view in order, including names that did not
    resolve (their coefficient with any other column is 0). Fewer than two
    columns produce an empty result.

    Example:
        >>> res = ds.make_correlation_analyzer(["height", "weight", "age"]).fit().result()
        >>> res.matrix.loc["height", "weight"]
        >>> res.feature_pairs.head()
    """

    def __init__(self, view: DatasetView):
        """Initialize the correlation analyzer with a dataset view."""
        self._view = view
        self._entries: list[CorrelationEntry] | None = None
        self._cache: dict[tuple[int, int], float] | None = None

    def get_correlation_matrix(self) -> pd.DataFrame:
        """Return the k x k coefficient grid (computes it on first use)."""
        entries = self._compute_entries()
        columns = self._view.columns
        k = len(columns) if len(columns) > 1 else 0
        grid = np.eye(k)
        for i in range(k):
            for j in range(k):
                if i != j:
                    grid[i, j] = self._pair_value(i, j)
        logger.debug("Correlation grid for %d columns built from %d entries", k, len(entries))
        return pd.DataFrame(grid, index=columns[:k], columns=columns[:k])

    def get_top_correlated_pairs(self, n: int = 20) -> pd.DataFrame:
        """Return the strongest absolute correlations between distinct column positions."""
        columns = self._view.columns
        rows = [
            {"feature_a": columns[i], "feature_b": columns[j], "correlation": self._pair_value(i, j)}
            for i in range(len(columns))
            for j in range(i + 1, len(columns))
        ]
        pairs = pd.DataFrame(rows, columns=["feature_a", "feature_b", "correlation"]).astype({"correlation": float})
        return (
            pairs.assign(
                abs_correlation=lambda d: d.correlation.abs(),
                pair=lambda d: d.feature_a + " vs " + d.feature_b,
            )
            .sort_values("abs_correlation", ascending=False, kind="stable")
            .head(n)
            .reset_index(drop=True)
        )

    def _pair_value(self, i: int, j: int) -> float:
        if i == j:
            return 1.0
        lo, hi = min(i, j), max(i, j)
        return self._coefficients()[(lo, hi)]

    def _coefficients(self) -> dict[tuple[int, int], float]:
        if self._cache is None:
            numeric = self._view.numeric
            k = len(self._view.columns)
            self._cache = {
                (i, j): pearson(numeric.iloc[:, i], numeric.iloc[:, j]) for i in range(k) for j in range(i + 1, k)
            }
        return self._cache

    def _compute_entries(self) -> list[CorrelationEntry]:
        if self._entries is not None:
            return self._entries
        columns = self._view.columns
        entries: list[CorrelationEntry] = []
        if len(columns) > 1:
            for i in range(len(columns)):
                for j in range(i, len(columns)):
                    value = self._pair_value(i, j)
                    entries.append(CorrelationEntry(columns[i], columns[j], value))
                    if i != j:
                        entries.append(CorrelationEntry(columns[j], columns[i], value))
        self._entries = entries
        return entries

    def fit(self) -> Self:
        """Compute all pairwise coefficients."""
        self._compute_entries()
        return self

    def result(self, *, top_n_pairs: int = 20) -> CorrelationResult:
        """Return the packaged correlation results.

        Raises:
            ValueError: If fit() has not been called yet.
        """
        if self._entries is None:
            raise ValueError("Must call fit() before result()")
        return CorrelationResult(
            matrix=self.get_correlation_matrix(),
            entries=self._entries,
            feature_pairs=self.get_top_correlated_pairs(n=top_n_pairs),
        )
