"""Dataset value type: a header row plus rows of string cells."""

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

import pandas as pd

from .views import DatasetView


if TYPE_CHECKING:
    from tablab.analysis.correlation_analyzer import CorrelationAnalyzer
    from tablab.analysis.descriptive_stats import DescriptiveStatsAnalyzer
    from tablab.analysis.evaluation import ModelEvaluator
    from tablab.analysis.models import ModelParams, ModelStrategy
    from tablab.analysis.outlier_detector import IQROutlierDetector
    from tablab.analysis.quality_assessor import DataQualityAssessor
    from tablab.utils.config import KernelConfig


logger = logging.getLogger(__name__)

Cell = str | None
Row = tuple[Cell, ...]

_LEADING_NUMBER = r"^\s*([+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?)"


def to_numeric(values: pd.Series) -> pd.Series:
    """Coerce string cells to floats from their leading number; cells without one become NaN.

    Parsing is locale-invariant (``.`` decimal separator, no grouping) and skips
    leading whitespace. Trailing text is ignored, so ``"5 kg"`` reads as 5 and
    ``"1,5"`` as 1.
    """
    text = values.map(lambda v: v if isinstance(v, str) else "").astype(str)
    leading = text.str.extract(_LEADING_NUMBER, expand=False)
    return pd.to_numeric(leading, errors="coerce").astype(float)


@dataclass(frozen=True)
class Dataset:
    """Immutable tabular value: ``header`` plus data ``rows`` of string cells.

    Rows may be ragged. Cells past the end of a short row read as missing
    (``None``); cells past the header width are ignored by every consumer.
    Transform operations never mutate a dataset, they return a new one.

    Example:
        >>> ds = Dataset.from_rows([["x", "y"], ["1", "2"], ["2", "4"]])
        >>> ds.numeric_column("y").tolist()
        [2.0, 4.0]
        >>> stats = ds.make_stats_analyzer("y").fit().result()
    """

    header: tuple[str, ...]
    rows: tuple[Row, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "header", tuple(self.header))
        object.__setattr__(self, "rows", tuple(tuple(row) for row in self.rows))

    # ------------------------------------------------------------------ construction
    @classmethod
    def from_rows(cls, rows: Iterable[Sequence[Cell]]) -> "Dataset":
        """Build a dataset from an array-of-rows where row 0 is the header."""
        materialized = [tuple(row) for row in rows]
        if not materialized:
            return cls.empty()
        header, *data = materialized
        return cls(header=tuple("" if h is None else str(h) for h in header), rows=tuple(data))

    @classmethod
    def empty(cls) -> "Dataset":
        """Return a dataset with no header and no rows."""
        return cls(header=(), rows=())

    def with_rows(self, rows: Iterable[Sequence[Cell]]) -> "Dataset":
        """Return a new dataset with the same header and the given data rows."""
        return Dataset(header=self.header, rows=tuple(tuple(row) for row in rows))

    # ------------------------------------------------------------------ access
    @property
    def n_rows(self) -> int:
        return len(self.rows)

    @property
    def n_columns(self) -> int:
        return len(self.header)

    def __len__(self) -> int:
        return len(self.rows)

    def column_index(self, name: str) -> int | None:
        """Resolve a column name to its first position in the header (``None`` if absent)."""
        try:
            return self.header.index(name)
        except ValueError:
            return None

    @staticmethod
    def cell(row: Row, index: int) -> Cell:
        """Return ``row[index]`` or ``None`` when the row is too short."""
        return row[index] if 0 <= index < len(row) else None

    def column(self, name: str) -> list[Cell]:
        """Return the raw cells of a column (empty list when the name does not resolve)."""
        index = self.column_index(name)
        if index is None:
            return []
        return [self.cell(row, index) for row in self.rows]

    def numeric_column(self, name: str) -> pd.Series:
        """Return the numeric view of a column: parseable cells only, as floats."""
        return to_numeric(pd.Series(self.column(name), dtype=object)).dropna().reset_index(drop=True)

    def as_lists(self) -> list[list[Cell]]:
        """Return the array-of-rows form (header first) used by export and the UI layer."""
        return [list(self.header), *(list(row) for row in self.rows)]

    def to_frame(self) -> pd.DataFrame:
        """Return the data rows as an object DataFrame, padding ragged rows with ``None``."""
        width = self.n_columns
        data = [[self.cell(row, i) for i in range(width)] for row in self.rows]
        return pd.DataFrame(data, columns=list(self.header), dtype=object)

    def view(self, columns: Iterable[str] | None = None, target_col: str | None = None) -> DatasetView:
        """Build an immutable view for analyzers.

        Args:
            columns: Column names to include (defaults to the full header). Names that
                do not resolve become all-missing columns listed in ``missing_cols``.
            target_col: Optional target column reference.

        Returns:
            DatasetView over the requested columns.
        """
        names = list(self.header) if columns is None else list(columns)
        frame = self.to_frame()
        n = len(frame)

        raw_cols: list[pd.Series] = []
        missing: list[str] = []
        for name in names:
            index = self.column_index(name)
            if index is None:
                missing.append(name)
                raw_cols.append(pd.Series([None] * n, dtype=object))
            else:
                raw_cols.append(frame.iloc[:, index].reset_index(drop=True))
        if missing:
            logger.warning("Columns not found in header: %s", ", ".join(missing))

        if raw_cols:
            raw = pd.concat(raw_cols, axis=1, ignore_index=True).set_axis(names, axis=1)
            numeric = pd.concat([to_numeric(col) for col in raw_cols], axis=1, ignore_index=True).set_axis(
                names,
                axis=1,
            )
        else:
            raw = pd.DataFrame(index=range(n))
            numeric = pd.DataFrame(index=range(n))

        numeric_cols = [name for i, name in enumerate(names) if numeric.iloc[:, i].notna().any()]
        return DatasetView(
            df=raw,
            numeric=numeric,
            columns=names,
            numeric_cols=numeric_cols,
            missing_cols=missing,
            target_col=target_col,
        )

    # ------------------------------------------------------------------ analyzer factories
    def make_stats_analyzer(self, column: str) -> "DescriptiveStatsAnalyzer":
        """Instantiate a descriptive statistics analyzer for one column."""
        from tablab.analysis.descriptive_stats import DescriptiveStatsAnalyzer

        return DescriptiveStatsAnalyzer(self.view(columns=[column]))

    def make_quality_assessor(self, config: "KernelConfig | None" = None) -> "DataQualityAssessor":
        """Instantiate a data quality assessor over every header column."""
        from tablab.analysis.quality_assessor import DataQualityAssessor

        return DataQualityAssessor(self, config=config)

    def make_iqr_outlier_detector(
        self,
        columns: Iterable[str] | None = None,
        threshold: float | None = None,
    ) -> "IQROutlierDetector":
        """Instantiate an IQR outlier detector (defaults to all columns, 1.5 fences).

        Example:
            >>> result = ds.make_iqr_outlier_detector().fit().result()
            >>> result.n_outliers_per_column
        """
        from tablab.analysis.outlier_detector import IQROutlierDetector

        view = self.view(columns=columns)
        if threshold is None:
            return IQROutlierDetector(view)
        return IQROutlierDetector(view, threshold=threshold)

    def make_correlation_analyzer(self, columns: Iterable[str]) -> "CorrelationAnalyzer":
        """Instantiate a pairwise Pearson correlation analyzer for the given columns."""
        from tablab.analysis.correlation_analyzer import CorrelationAnalyzer

        return CorrelationAnalyzer(self.view(columns=columns))

    def make_evaluator(
        self,
        target: str,
        features: Sequence[str],
        strategy: "ModelStrategy | str",
        params: "ModelParams | None" = None,
        *,
        test_size: float | None = None,
        config: "KernelConfig | None" = None,
        on_phase: Callable[[str], None] | None = None,
    ) -> "ModelEvaluator":
        """Instantiate the train/evaluate harness for a model strategy on this dataset."""
        from tablab.analysis.evaluation import ModelEvaluator

        return ModelEvaluator(
            self,
            target=target,
            features=features,
            strategy=strategy,
            params=params,
            test_size=test_size,
            config=config,
            on_phase=on_phase,
        )
