"""Dataset model, CSV/JSON I/O and row/column transforms."""

from .dataset import Cell, Dataset, Row, to_numeric
from .io import read_csv, read_csv_text, to_csv_text, to_json_text, to_records
from .transforms import (
    PreprocessingMethod,
    SortOrder,
    TransformPipeline,
    TransformTask,
    TransformType,
    filter_rows,
    impute,
    log_transform,
    min_max_normalize,
    remove_missing,
    sort_rows,
)
from .views import DatasetView


__all__ = [
    "Cell",
    "Dataset",
    "DatasetView",
    "PreprocessingMethod",
    "Row",
    "SortOrder",
    "TransformPipeline",
    "TransformTask",
    "TransformType",
    "filter_rows",
    "impute",
    "log_transform",
    "min_max_normalize",
    "read_csv",
    "read_csv_text",
    "remove_missing",
    "sort_rows",
    "to_csv_text",
    "to_json_text",
    "to_numeric",
    "to_records",
]
