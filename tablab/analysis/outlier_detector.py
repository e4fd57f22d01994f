"""IQR outlier screening over the numeric columns of a view."""

from dataclasses import dataclass

import numpy as np
import pandas as pd

from tablab.data.views import DatasetView
from tablab.utils.config import DEFAULT_CONFIG

from .base_analyser import BaseAnalyser


@dataclass(frozen=True)
class OutlierDetectionResult:
    """Per-cell outlier flags and the fences that produced them.

    Attributes:
        outlier_mask: Boolean frame, one column per numeric column of the view.
            Cells that do not parse are never flagged.
        n_outliers_per_column: Flag count per column.
        n_outliers_per_row: Flag count per data row.
        fences: One row per column with ``q1``, ``q3``, ``iqr``, ``lower`` and ``upper``.
    """

    outlier_mask: pd.DataFrame
    n_outliers_per_column: pd.Series
    n_outliers_per_row: pd.Series
    fences: pd.DataFrame

    @property
    def total_outliers(self) -> int:
        return int(self.n_outliers_per_column.sum())


def positional_quartiles(values: np.ndarray) -> tuple[float, float]:
    r"""Return :math:`(Q_1, Q_3)` as the sorted values at indices :math:`\lfloor n/4 \rfloor` and :math:`\lfloor 3n/4 \rfloor`."""
    ordered = np.sort(values)
    n = len(ordered)
    return float(ordered[n // 4]), float(ordered[(3 * n) // 4])


class IQROutlierDetector(BaseAnalyser):
    r"""Flag values outside Tukey's fences :math:`[Q_1 - k\cdot IQR,\, Q_3 + k\cdot IQR]`.

    :math:`IQR = Q_3 - Q_1` uses positional quartiles of each column's numeric
    view (see :func:`positional_quartiles`), never interpolated quantiles, so
    results match the quality report exactly. Columns without any parseable
    cell are left out.

    Notes:
        - Distribution-free; works per column (univariate)
        - A column with :math:`IQR = 0` flags every value different from :math:`Q_1`

    Attributes:
        threshold: Fence multiplier ``k`` (1.5 unless configured otherwise).
    """

    def __init__(self, view: DatasetView, threshold: float = DEFAULT_CONFIG.iqr_threshold) -> None:
        """Set up the detector.

        Args:
            view: Columns to screen.
            threshold: Fence multiplier ``k``.
        """
        self._view = view
        self.threshold = threshold
        self._mask: pd.DataFrame | None = None
        self._fences: pd.DataFrame | None = None

    def fit(self) -> "IQROutlierDetector":
        """Compute fences and flags for every numeric column of the view."""
        positions = [i for i, col in enumerate(self._view.columns) if col in self._view.numeric_cols]
        selected = self._view.numeric.iloc[:, positions]

        flags: list[pd.Series] = []
        fences: list[dict[str, float]] = []
        for j in range(selected.shape[1]):
            column = selected.iloc[:, j]
            q1, q3 = positional_quartiles(column.dropna().to_numpy())
            iqr = q3 - q1
            lower, upper = q1 - self.threshold * iqr, q3 + self.threshold * iqr
            flags.append(column.lt(lower) | column.gt(upper))
            fences.append({"q1": q1, "q3": q3, "iqr": iqr, "lower": lower, "upper": upper})

        if flags:
            self._mask = pd.concat(flags, axis=1, ignore_index=True).set_axis(selected.columns, axis=1)
        else:
            self._mask = pd.DataFrame(index=selected.index)
        self._fences = pd.DataFrame(fences, index=selected.columns, columns=["q1", "q3", "iqr", "lower", "upper"])
        return self

    def result(self) -> OutlierDetectionResult:
        """Package the flags with per-column and per-row counts.

        Raises:
            ValueError: If fit() has not been called yet.
        """
        if self._mask is None or self._fences is None:
            raise ValueError("Must call fit() before result()")
        return OutlierDetectionResult(
            outlier_mask=self._mask,
            n_outliers_per_column=self._mask.sum().astype(int),
            n_outliers_per_row=self._mask.sum(axis=1).astype(int),
            fences=self._fences,
        )
