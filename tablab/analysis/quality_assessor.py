"""Data quality assessment: completeness, type consistency, outliers and duplicates."""

import logging
from dataclasses import dataclass, field

import pandas as pd

from tablab.data.dataset import Dataset
from tablab.utils.config import DEFAULT_CONFIG, KernelConfig

from .base_analyser import BaseAnalyser
from .outlier_detector import IQROutlierDetector


logger = logging.getLogger(__name__)

_SUGGESTIONS = {
    "missing": "Consider removing or imputing rows with missing data",
    "types": "Investigate and potentially transform columns with inconsistent data types",
    "outliers": "Review and possibly remove or adjust outliers in numeric columns",
    "duplicates": "Consider removing duplicate rows",
}


@dataclass(frozen=True)
class QualityReport:
    """Findings of one quality assessment.

    Attributes:
        completeness: Percentage of non-missing cells, in ``[0, 100]``.
        issues: Human-readable findings in the order they were detected.
        duplicate_row_count: Data rows minus distinct data rows.
        missing_by_column: Missing-cell count per column (columns without gaps included as 0).
        inconsistent_columns: Columns whose non-empty cells mix numbers and text.
        outliers_by_column: IQR outlier count per numeric column.
    """

    completeness: float
    issues: list[str] = field(default_factory=list)
    duplicate_row_count: int = 0
    missing_by_column: dict[str, int] = field(default_factory=dict)
    inconsistent_columns: list[str] = field(default_factory=list)
    outliers_by_column: dict[str, int] = field(default_factory=dict)

    @property
    def has_issues(self) -> bool:
        return bool(self.issues)

    @property
    def suggestions(self) -> list[str]:
        """Remediation hints matching the kinds of issues found."""
        hints = []
        if any(self.missing_by_column.values()):
            hints.append(_SUGGESTIONS["missing"])
        if self.inconsistent_columns:
            hints.append(_SUGGESTIONS["types"])
        if any(self.outliers_by_column.values()):
            hints.append(_SUGGESTIONS["outliers"])
        if self.duplicate_row_count:
            hints.append(_SUGGESTIONS["duplicates"])
        return hints


def is_missing(cell: str | None) -> bool:
    """A cell is missing when it is absent (ragged row) or the empty string."""
    return cell is None or cell == ""


class DataQualityAssessor(BaseAnalyser):
    r"""Assess completeness and consistency of a whole dataset.

    Checks, in order:

    1. Missing cells per column; completeness
       :math:`= (\text{total} - \text{missing}) / \text{total} \cdot 100`.
    2. Type consistency: non-empty cells of a column are classified as number or
       text; a column holding both kinds is flagged.
    3. IQR outliers per numeric column (positional quartiles, 1.5 fences by default).
    4. Duplicate data rows (exact, cell-by-cell equality).

    Example:
        >>> report = Dataset.from_rows([["a", "b"], ["1", ""], ["2", "x"], ["3", "y"]]).make_quality_assessor().fit().result()
        >>> round(report.completeness, 2)
        83.33
    """

    def __init__(self, dataset: Dataset, config: KernelConfig | None = None) -> None:
        self._dataset = dataset
        self._config = config or DEFAULT_CONFIG
        self._fitted = False
        self._report: QualityReport | None = None

    def fit(self) -> "DataQualityAssessor":
        dataset = self._dataset
        view = dataset.view()
        issues: list[str] = []
        missing_by_column: dict[str, int] = {}
        inconsistent: list[str] = []
        total_cells = 0
        empty_cells = 0

        for j, header in enumerate(view.columns):
            raw = view.df.iloc[:, j]
            numeric = view.numeric.iloc[:, j]
            missing_mask = raw.map(is_missing).astype(bool)
            missing_count = int(missing_mask.sum())
            column_size = len(raw)
            missing_by_column[header] = missing_count
            empty_cells += missing_count
            total_cells += column_size

            if missing_count > 0:
                pct = missing_count / column_size * 100
                issues.append(f'Column "{header}" has {missing_count} missing values ({pct:.2f}%)')

            present = ~missing_mask
            n_numbers = int((numeric.notna() & present).sum())
            n_text = int(present.sum()) - n_numbers
            if n_numbers > 0 and n_text > 0:
                inconsistent.append(header)
                issues.append(f'Column "{header}" has inconsistent data types')

        completeness = 100.0 if total_cells == 0 else (total_cells - empty_cells) / total_cells * 100

        outlier_result = IQROutlierDetector(view, threshold=self._config.iqr_threshold).fit().result()
        outliers_by_column: dict[str, int] = {}
        counts = outlier_result.outlier_mask.sum().astype(int).tolist()
        for header, count in zip(outlier_result.outlier_mask.columns, counts):
            outliers_by_column[header] = count
            if count > 0:
                issues.append(f'Column "{header}" has {count} potential outliers')

        duplicates = self.count_duplicate_rows(dataset)
        if duplicates > 0:
            issues.append(f"Dataset has {duplicates} duplicate rows")

        self._report = QualityReport(
            completeness=completeness,
            issues=issues,
            duplicate_row_count=duplicates,
            missing_by_column=missing_by_column,
            inconsistent_columns=inconsistent,
            outliers_by_column=outliers_by_column,
        )
        self._fitted = True
        logger.info("Quality assessment: %.2f%% complete, %d issue(s)", completeness, len(issues))
        return self

    @staticmethod
    def count_duplicate_rows(dataset: Dataset) -> int:
        """Number of data rows that repeat an earlier row exactly."""
        return int(pd.Series(list(dataset.rows), dtype=object).duplicated().sum())

    def result(self) -> QualityReport:
        """Return the quality report.

        Raises:
            ValueError: If fit() has not been called yet.
        """
        if not self._fitted or self._report is None:
            raise ValueError("Must call fit() before result()")
        return self._report
