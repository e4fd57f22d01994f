"""tablab: a tabular analytics kernel (statistics, quality, correlation, transforms and model evaluation)."""

import logging

from .analysis import (
    ChartType,
    CorrelationAnalyzer,
    DataQualityAssessor,
    DescriptiveStatsAnalyzer,
    IQROutlierDetector,
    ModelEvaluator,
    ModelParams,
    ModelStrategy,
)
from .data import Dataset, TransformPipeline, TransformTask, read_csv, read_csv_text
from .exceptions import TablabError, ValidationError
from .utils import DEFAULT_CONFIG, KernelConfig
from .workflow import AnalysisGate, TrainingSession


logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "DEFAULT_CONFIG",
    "AnalysisGate",
    "ChartType",
    "CorrelationAnalyzer",
    "DataQualityAssessor",
    "Dataset",
    "DescriptiveStatsAnalyzer",
    "IQROutlierDetector",
    "KernelConfig",
    "ModelEvaluator",
    "ModelParams",
    "ModelStrategy",
    "TablabError",
    "TrainingSession",
    "TransformPipeline",
    "TransformTask",
    "ValidationError",
    "read_csv",
    "read_csv_text",
]
