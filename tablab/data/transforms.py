"""Row filtering, sorting and column transforms over :class:`Dataset` values.

Every function is pure: it takes a dataset plus parameters and returns a new
dataset whose header is unchanged. Operations addressing a column that does not
resolve against the header return the input unchanged.
"""

from __future__ import annotations

import logging
import math
import re
from collections import Counter
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field, replace
from enum import StrEnum
from functools import reduce

import numpy as np
import pandas as pd

from tablab.utils.config import DEFAULT_CONFIG

from .dataset import Cell, Dataset, Row, to_numeric


logger = logging.getLogger(__name__)

_DIGIT_RUN = re.compile(r"([0-9]+)")


class PreprocessingMethod(StrEnum):
    """Preprocessing methods offered for a column."""

    REMOVE_MISSING = "remove_missing"
    FILL_MEAN = "fill_mean"
    FILL_MEDIAN = "fill_median"
    FILL_MODE = "fill_mode"
    FILL_CUSTOM = "fill_custom"
    NORMALIZE = "normalize"


class TransformType(StrEnum):
    """Column transforms offered for a column."""

    LOG = "log"
    NORMALIZE = "normalize"
    CUSTOM = "custom"


class SortOrder(StrEnum):
    ASC = "asc"
    DESC = "desc"


# ------------------------------------------------------------------ number helpers
def parse_number(cell: Cell) -> float | None:
    """Parse a single cell with the same rules as the numeric view (``None`` if it does not parse)."""
    value = to_numeric(pd.Series([cell], dtype=object)).iloc[0]
    return None if math.isnan(value) else float(value)


def _parsed_column(dataset: Dataset, index: int) -> list[float | None]:
    cells = pd.Series([Dataset.cell(row, index) for row in dataset.rows], dtype=object)
    return [None if math.isnan(value) else float(value) for value in to_numeric(cells)]


def format_number(value: float) -> str:
    """Shortest text form of a number (``3`` rather than ``3.0``)."""
    if math.isfinite(value) and float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def lower_median(values: Iterable[float]) -> float:
    """Element at index ``n // 2`` of the ascending-sorted values (no interpolation)."""
    ordered = sorted(values)
    return ordered[len(ordered) // 2]


def first_mode(values: list[float]) -> float:
    """Most frequent value; among equally frequent values the one seen first wins.

    Scans left to right keeping a best-so-far value that is only replaced by a
    value with a strictly higher count.
    """
    counts = Counter(values)
    best = values[0]
    for value in values[1:]:
        if counts[best] < counts[value]:
            best = value
    return best


def _replace_cell(row: Row, index: int, value: Cell) -> Row:
    if value == Dataset.cell(row, index):
        return row
    cells = list(row)
    if index >= len(cells):
        cells.extend([None] * (index + 1 - len(cells)))
    cells[index] = value
    return tuple(cells)


def _map_column(dataset: Dataset, index: int, fn: Callable[[Cell, float | None], Cell]) -> Dataset:
    """Rewrite one column; ``fn`` receives the raw cell and its parsed value (or ``None``)."""
    parsed = _parsed_column(dataset, index)
    return dataset.with_rows(
        _replace_cell(row, index, fn(Dataset.cell(row, index), value)) for row, value in zip(dataset.rows, parsed)
    )


def _resolve(dataset: Dataset, column: str, operation: str) -> int | None:
    index = dataset.column_index(column)
    if index is None:
        logger.warning("Skipping %s: column %r not found", operation, column)
    return index


# ------------------------------------------------------------------ row operations
def filter_rows(dataset: Dataset, column: str, value: str) -> Dataset:
    """Keep data rows whose cell in ``column`` contains ``value`` (case-sensitive substring)."""
    index = _resolve(dataset, column, "filter")
    if index is None or not value:
        return dataset
    kept = [row for row in dataset.rows if value in (Dataset.cell(row, index) or "")]
    logger.debug("Filter %r on %r kept %d of %d rows", value, column, len(kept), dataset.n_rows)
    return dataset.with_rows(kept)


def natural_sort_key(cell: Cell) -> tuple[tuple[tuple[int, int | str], ...], str]:
    """Sort key comparing ASCII digit runs numerically and text case-insensitively (``"a2" < "a10"``).

    Values that differ only in case order lowercase first (``"a" < "A"``).
    """
    text = cell or ""
    parts = tuple(
        (0, int(part)) if _DIGIT_RUN.fullmatch(part) else (1, part.casefold()) for part in _DIGIT_RUN.split(text) if part
    )
    return parts, text.swapcase()


def sort_rows(dataset: Dataset, column: str, order: SortOrder | str = SortOrder.ASC) -> Dataset:
    """Stable sort of the data rows by ``column`` with numeric-aware string comparison."""
    index = _resolve(dataset, column, "sort")
    if index is None:
        return dataset
    descending = SortOrder(order) is SortOrder.DESC
    ordered = sorted(dataset.rows, key=lambda row: natural_sort_key(Dataset.cell(row, index)), reverse=descending)
    return dataset.with_rows(ordered)


def remove_missing(dataset: Dataset, column: str) -> Dataset:
    """Drop data rows whose cell in ``column`` is the empty string."""
    index = _resolve(dataset, column, "remove_missing")
    if index is None:
        return dataset
    return dataset.with_rows(row for row in dataset.rows if Dataset.cell(row, index) != "")


# ------------------------------------------------------------------ column transforms
def log_transform(dataset: Dataset, column: str, decimals: int = DEFAULT_CONFIG.decimals) -> Dataset:
    """Replace each positive numeric cell by ``ln(value)``; other cells are left as they are."""
    index = _resolve(dataset, column, "log transform")
    if index is None:
        return dataset

    def transform(cell: Cell, value: float | None) -> Cell:
        if value is None or value <= 0:
            return cell
        return f"{math.log(value):.{decimals}f}"

    return _map_column(dataset, index, transform)


def min_max_normalize(
    dataset: Dataset,
    column: str,
    target_range: tuple[float, float] = DEFAULT_CONFIG.normalize_range,
    decimals: int = DEFAULT_CONFIG.decimals,
) -> Dataset:
    r"""Linearly rescale the numeric cells of ``column`` into ``target_range``.

    :math:`x' = (x - \min) / (\max - \min) \cdot (hi - lo) + lo`. Non-numeric cells
    pass through. A constant column maps every numeric cell to ``lo``.
    """
    index = _resolve(dataset, column, "normalize")
    if index is None:
        return dataset
    values = [v for v in _parsed_column(dataset, index) if v is not None]
    if not values:
        return dataset

    lo, hi = target_range
    col_min, col_max = float(np.min(values)), float(np.max(values))
    span = col_max - col_min

    def transform(cell: Cell, value: float | None) -> Cell:
        if value is None:
            return cell
        scaled = lo if span == 0 else (value - col_min) / span * (hi - lo) + lo
        return f"{scaled:.{decimals}f}"

    return _map_column(dataset, index, transform)


def fill_missing(dataset: Dataset, column: str, value: str) -> Dataset:
    """Write ``value`` into the empty cells of ``column``; non-empty cells are never touched."""
    index = _resolve(dataset, column, "fill")
    if index is None:
        return dataset
    return _map_column(dataset, index, lambda cell, _parsed: value if cell == "" else cell)


def impute(dataset: Dataset, column: str, method: PreprocessingMethod | str, custom_value: str = "") -> Dataset:
    """Fill empty cells with the column mean, lower median, mode or a custom constant."""
    method = PreprocessingMethod(method)
    if method is PreprocessingMethod.FILL_CUSTOM:
        return fill_missing(dataset, column, custom_value)

    index = _resolve(dataset, column, method.value)
    if index is None:
        return dataset
    values = [v for v in _parsed_column(dataset, index) if v is not None]
    if not values:
        logger.warning("Skipping %s: column %r has no numeric values", method.value, column)
        return dataset

    if method is PreprocessingMethod.FILL_MEAN:
        fill_value = float(np.mean(values))
    elif method is PreprocessingMethod.FILL_MEDIAN:
        fill_value = lower_median(values)
    elif method is PreprocessingMethod.FILL_MODE:
        fill_value = first_mode(values)
    else:
        raise ValueError(f"{method.value!r} is not an imputation method")
    return fill_missing(dataset, column, format_number(fill_value))


def set_constant(dataset: Dataset, column: str, value: str) -> Dataset:
    """Overwrite every data cell of ``column`` with ``value``."""
    index = _resolve(dataset, column, "custom transform")
    if index is None:
        return dataset
    return _map_column(dataset, index, lambda _cell, _parsed: value)


# ------------------------------------------------------------------ task pipeline
@dataclass(frozen=True)
class TransformTask:
    """One queued operation: a column, a method tag and the method's parameters.

    ``method`` is a :class:`PreprocessingMethod`, a :class:`TransformType` or one of
    ``"filter"`` / ``"sort"``. ``value`` carries the custom fill value, the constant
    for ``custom``, the substring for ``filter`` or the order for ``sort``.
    """

    column: str
    method: str
    value: str | None = None
    target_range: tuple[float, float] = DEFAULT_CONFIG.normalize_range
    decimals: int = DEFAULT_CONFIG.decimals

    def apply(self, dataset: Dataset) -> Dataset:
        """Run this task against ``dataset`` and return the result."""
        method = self.method
        if method == PreprocessingMethod.REMOVE_MISSING:
            return remove_missing(dataset, self.column)
        if method in (PreprocessingMethod.FILL_MEAN, PreprocessingMethod.FILL_MEDIAN, PreprocessingMethod.FILL_MODE):
            return impute(dataset, self.column, method)
        if method == PreprocessingMethod.FILL_CUSTOM:
            return impute(dataset, self.column, method, custom_value=self.value or "")
        if method == PreprocessingMethod.NORMALIZE:  # shared with TransformType.NORMALIZE
            return min_max_normalize(dataset, self.column, target_range=self.target_range, decimals=self.decimals)
        if method == TransformType.LOG:
            return log_transform(dataset, self.column, decimals=self.decimals)
        if method == TransformType.CUSTOM:
            return set_constant(dataset, self.column, self.value or "")
        if method == "filter":
            return filter_rows(dataset, self.column, self.value or "")
        if method == "sort":
            return sort_rows(dataset, self.column, self.value or SortOrder.ASC)
        raise ValueError(f"Unknown transform method {method!r}")


@dataclass(frozen=True)
class TransformPipeline:
    """Ordered, immutable queue of transform tasks.

    Tasks run in insertion order, each one on the output of the previous one.

    Example:
        >>> pipeline = TransformPipeline().add(TransformTask("age", "fill_mean")).add(TransformTask("age", "log"))
        >>> cleaned = pipeline.apply(ds)
    """

    tasks: tuple[TransformTask, ...] = field(default_factory=tuple)

    def add(self, task: TransformTask) -> "TransformPipeline":
        return replace(self, tasks=(*self.tasks, task))

    def __len__(self) -> int:
        return len(self.tasks)

    def apply(self, dataset: Dataset) -> Dataset:
        """Fold the tasks over ``dataset``."""
        result = reduce(lambda acc, task: task.apply(acc), self.tasks, dataset)
        logger.info("Applied %d transform task(s); %d rows remain", len(self.tasks), result.n_rows)
        return result


__all__ = [
    "PreprocessingMethod",
    "SortOrder",
    "TransformPipeline",
    "TransformTask",
    "TransformType",
    "filter_rows",
    "fill_missing",
    "first_mode",
    "format_number",
    "impute",
    "log_transform",
    "lower_median",
    "min_max_normalize",
    "natural_sort_key",
    "parse_number",
    "remove_missing",
    "set_constant",
    "sort_rows",
]
