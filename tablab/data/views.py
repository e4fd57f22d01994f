"""Task-specific views over dataset content."""

from collections.abc import Sequence
from dataclasses import dataclass, field

import pandas as pd


@dataclass(frozen=True)
class DatasetView:
    """Immutable snapshot of selected columns and related metadata.

    Columns are addressed positionally because header names are unique only by
    convention. A requested name that does not resolve against the header is
    still present as an all-missing column and listed in ``missing_cols``, so
    downstream analyzers yield their neutral result for it.

    Attributes:
        df: Raw string cells, one column per requested name (``None`` = missing cell).
        numeric: Same shape as ``df`` with each cell coerced to float (NaN where unparseable).
        columns: Requested column names in request order.
        numeric_cols: Requested columns holding at least one parseable number.
        missing_cols: Requested names that were not found in the header.
        target_col: Optional name of the target variable used for analysis.
    """

    df: pd.DataFrame
    """Raw string cells, one column per requested name."""
    numeric: pd.DataFrame
    """Float view of ``df``; unparseable cells are NaN."""
    columns: list[str]
    numeric_cols: list[str] = field(default_factory=list)
    missing_cols: list[str] = field(default_factory=list)
    target_col: str | None = None

    @property
    def features(self) -> pd.DataFrame:
        """Return the numeric frame restricted to numeric columns."""
        positions = [i for i, col in enumerate(self.columns) if col in self.numeric_cols]
        return self.numeric.iloc[:, positions]

    def numeric_values(self, position: int) -> pd.Series:
        """Return the numeric view (parseable cells only) of the column at ``position``."""
        return self.numeric.iloc[:, position].dropna()

    def positions_of(self, names: Sequence[str]) -> list[int]:
        """Map column names to their first position in this view (unknown names are skipped)."""
        return [self.columns.index(name) for name in names if name in self.columns]
