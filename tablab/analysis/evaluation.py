"""Train/test evaluation harness around the model strategies.

The harness turns a column selection into a design matrix, fits the chosen
strategy on a deterministic, index-based training split, scores it on the
held-out rows and runs contiguous k-fold cross-validation.

Unlike the statistics components, cells that do not parse as numbers are
coerced to ``0`` here rather than excluded, so every data row contributes one
observation.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Self

import numpy as np
from sklearn.base import clone
from sklearn.metrics import mean_squared_error
from sklearn.model_selection import cross_val_score

from tablab.data.transforms import parse_number
from tablab.exceptions import ValidationError
from tablab.utils.config import DEFAULT_CONFIG, KernelConfig

from .base_analyser import BaseAnalyser
from .models import BaseModel, ModelParams, ModelStrategy, make_model


if TYPE_CHECKING:
    from tablab.data.dataset import Dataset


logger = logging.getLogger(__name__)

PHASE_PREPROCESSING = "Preprocessing data..."
PHASE_TRAINING = "Training model..."
PHASE_SCORING = "Calculating predictions and metrics..."
PHASE_DONE = "Training completed successfully!"


@dataclass(frozen=True)
class FeatureImportance:
    feature: str
    importance: float


@dataclass(frozen=True)
class EvaluationResult:
    r"""Metrics of one training run plus the fitted model.

    Key equations on the test split (:math:`n` rows):

    - :math:`\text{MSE} = \frac{1}{n}\sum_i (y_i - \hat{y}_i)^2`, :math:`\text{RMSE} = \sqrt{\text{MSE}}`
    - :math:`R^2 = 1 - \text{MSE} / \operatorname{Var}(y)` with the population variance of the test target

    Attributes:
        rmse: Root mean squared error on the test split.
        r2: Coefficient of determination on the test split (0 when the test target is constant).
        mse: Mean squared error on the test split.
        fold_scores: Held-out MSE of each cross-validation fold, in fold order.
        fold_mean: Mean of ``fold_scores`` (0 without folds).
        fold_std: Population standard deviation of ``fold_scores`` (0 without folds).
        feature_importance: Importance per feature, strongest first; empty for strategies without one.
        model: The fitted strategy, retained for single-point prediction.
        features: Feature columns in training order.
        target: Target column.
        n_train: Rows in the training split.
        n_test: Rows held out (0 when the metrics fell back to the training rows).
    """

    rmse: float
    r2: float
    mse: float
    fold_scores: list[float]
    fold_mean: float
    fold_std: float
    feature_importance: list[FeatureImportance]
    model: BaseModel
    features: list[str]
    target: str
    n_train: int
    n_test: int
    predictions: np.ndarray = field(repr=False, default_factory=lambda: np.empty(0))

    @property
    def strategy(self) -> ModelStrategy:
        return self.model.strategy

    def predict(self, values: Sequence[str | float | None]) -> float:
        """Predict a single point; ``values`` holds one entry per feature, in training order.

        Raises:
            ValidationError: On a wrong number of values or a value that is not a number.
        """
        if len(values) != len(self.features):
            raise ValidationError(f"Expected {len(self.features)} feature values, got {len(values)}.")
        row = []
        for feature, value in zip(self.features, values):
            number = parse_number(None if value is None else str(value))
            if number is None:
                raise ValidationError(f'Invalid input for feature "{feature}". Please enter a valid number.')
            row.append(number)
        prediction = self.model.predict(row)[0]
        logger.info("Prediction for %s: %s", row, prediction)
        return float(prediction)


def build_design_matrix(dataset: Dataset, target: str, features: Sequence[str]) -> tuple[np.ndarray, np.ndarray]:
    """Return ``(X, y)`` for the selection; unparseable or absent cells become ``0``.

    Raises:
        ValidationError: If the selection is empty or names an unknown column.
    """
    features = list(features)
    if not target or not features:
        raise ValidationError("Please select target and feature columns.")
    if any(dataset.column_index(name) is None for name in [target, *features]):
        raise ValidationError("Invalid column selection.")

    numeric = dataset.view(columns=[*features, target], target_col=target).numeric.fillna(0.0)
    X = numeric.iloc[:, : len(features)].to_numpy(dtype=float)
    y = numeric.iloc[:, len(features)].to_numpy(dtype=float)
    return X, y


def train_test_split_indexed(n: int, test_size: float) -> tuple[np.ndarray, np.ndarray]:
    r"""Split row indices ``0..n-1``: the first :math:`\lceil n(1 - t) \rceil` rows train, the rest test."""
    # rounding guards against 4 * 0.8 = 3.2000000000000006 style artefacts
    n_train = min(n, math.ceil(round(n * (1 - test_size), 10)))
    indices = np.arange(n)
    return indices[:n_train], indices[n_train:]


def contiguous_folds(n: int, k: int) -> Iterator[tuple[np.ndarray, np.ndarray]]:
    """Yield ``(train_idx, test_idx)`` for ``k`` contiguous, unshuffled folds of size ``n // k``.

    Rows past ``k * (n // k)`` are never held out. Nothing is yielded when ``n < k``.
    """
    size = n // k
    if size == 0:
        return
    indices = np.arange(n)
    for fold in range(k):
        start, stop = fold * size, (fold + 1) * size
        yield np.concatenate([indices[:start], indices[stop:]]), indices[start:stop]


def regression_scores(y_true: np.ndarray, y_pred: np.ndarray) -> tuple[float, float, float]:
    """Return ``(mse, rmse, r2)``; ``r2`` is 0 when ``y_true`` has no variance."""
    mse = float(mean_squared_error(y_true, y_pred))
    variance = float(np.var(y_true))
    r2 = 0.0 if variance == 0 else 1 - mse / variance
    return mse, math.sqrt(mse), r2


class ModelEvaluator(BaseAnalyser):
    """Fit a model strategy on a dataset selection and evaluate it.

    Example:
        >>> ds = Dataset.from_rows([["x", "y"], ["1", "2"], ["2", "4"], ["3", "6"], ["4", "8"]])
        >>> res = ds.make_evaluator("y", ["x"], "linear_regression").fit().result()
        >>> round(res.model.slope, 4), round(res.r2, 4)
        (2.0, 1.0)
    """

    def __init__(
        self,
        dataset: Dataset,
        target: str,
        features: Sequence[str],
        strategy: ModelStrategy | str,
        params: ModelParams | None = None,
        *,
        test_size: float | None = None,
        config: KernelConfig | None = None,
        on_phase: Callable[[str], None] | None = None,
    ) -> None:
        """Initialize the harness.

        Args:
            dataset: Source dataset (never modified).
            target: Column to predict.
            features: Predictor columns; their order is the prediction input order.
            strategy: Model strategy tag.
            params: Strategy hyperparameters (defaults seeded from ``config.random_state``).
            test_size: Fraction of trailing rows held out, within ``config.test_size_bounds``.
            config: Engine configuration (fold count, split bounds, parallelism).
            on_phase: Called with a short message at each training phase.
        """
        self._dataset = dataset
        self.target = target
        self.features = list(features)
        self.strategy = strategy
        self._config = config or DEFAULT_CONFIG
        self.params = params or ModelParams(random_state=self._config.random_state)
        self.test_size = self._config.test_size if test_size is None else test_size
        self._on_phase = on_phase
        self._result: EvaluationResult | None = None

    def _phase(self, message: str) -> None:
        logger.info(message)
        if self._on_phase is not None:
            self._on_phase(message)

    def validate(self) -> None:
        """Check the request without fitting anything.

        Raises:
            ValidationError: On an empty or unknown selection, an unknown strategy or an out-of-range test size.
        """
        lo, hi = self._config.test_size_bounds
        if not lo <= self.test_size <= hi:
            raise ValidationError(f"Test size must be between {lo} and {hi}.")
        if not self.target or not self.features:
            raise ValidationError("Please select target and feature columns.")
        if any(self._dataset.column_index(name) is None for name in [self.target, *self.features]):
            raise ValidationError("Invalid column selection.")
        if self._dataset.n_rows == 0:
            raise ValidationError("The dataset has no data rows to train on.")
        make_model(self.strategy, self.params)

    def cross_validate(self, model: BaseModel, X: np.ndarray, y: np.ndarray) -> list[float]:
        """Held-out MSE per contiguous fold, in fold order (empty when there are fewer rows than folds)."""
        splits = list(contiguous_folds(len(y), self._config.cv_folds))
        if not splits:
            return []
        try:
            scores = cross_val_score(
                clone(model.estimator),
                X,
                y,
                cv=splits,
                scoring="neg_mean_squared_error",
                n_jobs=self._config.n_jobs,
                error_score="raise",
            )
        except ValueError as err:
            raise ValidationError(f"Cross-validation failed: {err}") from err
        return [float(-score) for score in scores]

    def fit(self) -> Self:
        """Split, train, score and cross-validate.

        Raises:
            ValidationError: If the request is invalid or the estimator cannot be trained.
        """
        self.validate()

        self._phase(PHASE_PREPROCESSING)
        X, y = build_design_matrix(self._dataset, self.target, self.features)
        train_idx, test_idx = train_test_split_indexed(len(y), self.test_size)
        n_test = len(test_idx)
        if n_test == 0:
            logger.warning("Test split is empty for %d rows; scoring on the training rows", len(y))
            test_idx = train_idx

        self._phase(PHASE_TRAINING)
        model = make_model(self.strategy, self.params).train(X[train_idx], y[train_idx])

        self._phase(PHASE_SCORING)
        predictions = model.predict(X[test_idx])
        mse, rmse, r2 = regression_scores(y[test_idx], predictions)
        fold_scores = self.cross_validate(model, X, y)

        importance = model.feature_importance()
        ranked: list[FeatureImportance] = []
        if importance is not None:
            ranked = sorted(
                (FeatureImportance(feature, float(value)) for feature, value in zip(self.features, importance)),
                key=lambda item: item.importance,
                reverse=True,
            )

        self._result = EvaluationResult(
            rmse=rmse,
            r2=r2,
            mse=mse,
            fold_scores=fold_scores,
            fold_mean=float(np.mean(fold_scores)) if fold_scores else 0.0,
            fold_std=float(np.std(fold_scores)) if fold_scores else 0.0,
            feature_importance=ranked,
            model=model,
            features=self.features,
            target=self.target,
            n_train=len(train_idx),
            n_test=n_test,
            predictions=np.asarray(predictions),
        )
        self._phase(PHASE_DONE)
        logger.info("%s: rmse=%.4f r2=%.4f cv_mse=%.4f", model.strategy.value, rmse, r2, self._result.fold_mean)
        return self

    def result(self) -> EvaluationResult:
        """Return the evaluation result.

        Raises:
            ValueError: If fit() has not been called yet.
        """
        if self._result is None:
            raise ValueError("Must call fit() before result()")
        return self._result

    def predict(self, values: Sequence[str | float | None]) -> float:
        """Single-point prediction through the fitted model (see :meth:`EvaluationResult.predict`)."""
        if self._result is None:
            raise ValidationError("Please train the model before making predictions.")
        return self._result.predict(values)
