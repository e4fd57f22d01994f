"""CSV parsing and CSV/JSON rendering of datasets."""

import io
import json
import logging
from pathlib import Path
from typing import IO

import pandas as pd

from .dataset import Dataset


logger = logging.getLogger(__name__)

_READ_OPTIONS: dict[str, object] = {
    "header": None,
    "dtype": str,
    "keep_default_na": False,
    "skip_blank_lines": True,
    "engine": "python",
}


def _header_width(source: str | Path | IO[str]) -> int:
    head = pd.read_csv(source, nrows=1, **_READ_OPTIONS)
    return head.shape[1]


def read_csv(source: str | Path | IO[str]) -> Dataset:
    """Parse comma-separated text into a :class:`Dataset`.

    Every cell is kept as a string and empty fields stay ``""``. Quoted fields are
    honoured, which is a superset of the plain comma-split format. Rows longer than
    the header are truncated to the header width; shorter rows keep their missing
    trailing cells as ``None``.

    Args:
        source: Path to a CSV file or an open text buffer.

    Returns:
        Dataset whose header is the first non-blank line. Empty input yields
        :meth:`Dataset.empty`.
    """
    if not isinstance(source, (str, Path)):
        # buffers are read twice (header width, then the full table)
        source = io.StringIO(source.read())

    try:
        width = _header_width(source)
    except pd.errors.EmptyDataError:
        logger.warning("CSV input is empty")
        return Dataset.empty()

    if isinstance(source, io.StringIO):
        source.seek(0)

    frame = pd.read_csv(source, on_bad_lines=lambda fields: fields[:width], **_READ_OPTIONS)
    rows = [tuple(None if pd.isna(cell) else cell for cell in row) for row in frame.itertuples(index=False, name=None)]
    dataset = Dataset.from_rows(rows)
    logger.info("Parsed CSV with %d columns and %d data rows", dataset.n_columns, dataset.n_rows)
    return dataset


def read_csv_text(text: str) -> Dataset:
    """Parse CSV content held in a string."""
    return read_csv(io.StringIO(text))


def to_csv_text(dataset: Dataset) -> str:
    """Render a dataset as comma-joined cells and newline-joined rows (no quoting)."""
    return "\n".join(",".join("" if cell is None else cell for cell in row) for row in dataset.as_lists())


def to_records(dataset: Dataset) -> list[dict[str, str]]:
    """Return one mapping per data row keyed by header name.

    Cells missing from a ragged row are left out of that row's mapping. With
    duplicate header names the right-most column wins.
    """
    records = []
    for row in dataset.rows:
        records.append(
            {
                name: row[i]
                for i, name in enumerate(dataset.header)
                if Dataset.cell(row, i) is not None
            },
        )
    return records


def to_json_text(dataset: Dataset, indent: int | None = 2) -> str:
    """Render a dataset as a JSON array of objects keyed by header name."""
    return json.dumps(to_records(dataset), indent=indent, ensure_ascii=False)


__all__ = ["read_csv", "read_csv_text", "to_csv_text", "to_json_text", "to_records"]
