"""Analyzers and the model evaluation harness."""

from .chart_data import ChartSeries, ChartType, build_chart_series
from .correlation_analyzer import CorrelationAnalyzer, CorrelationEntry, CorrelationResult
from .descriptive_stats import DescriptiveStatsAnalyzer, DescriptiveStatsResult
from .evaluation import EvaluationResult, FeatureImportance, ModelEvaluator
from .models import ModelParams, ModelStrategy, make_model
from .outlier_detector import IQROutlierDetector, OutlierDetectionResult
from .quality_assessor import DataQualityAssessor, QualityReport


__all__ = [
    "ChartSeries",
    "ChartType",
    "CorrelationAnalyzer",
    "CorrelationEntry",
    "CorrelationResult",
    "DataQualityAssessor",
    "DescriptiveStatsAnalyzer",
    "DescriptiveStatsResult",
    "EvaluationResult",
    "FeatureImportance",
    "IQROutlierDetector",
    "ModelEvaluator",
    "ModelParams",
    "ModelStrategy",
    "OutlierDetectionResult",
    "QualityReport",
    "build_chart_series",
    "make_model",
]
