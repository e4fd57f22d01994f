"""Model strategies for the evaluation harness.

Every strategy wraps one scikit-learn estimator behind the same small
capability set: :meth:`BaseModel.train`, :meth:`BaseModel.predict` and the
optional :meth:`BaseModel.feature_importance`. The set of strategies is closed
and selected by :class:`ModelStrategy` through :func:`make_model`.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import ClassVar, Self

import numpy as np
from sklearn.base import BaseEstimator
from sklearn.cluster import KMeans
from sklearn.ensemble import RandomForestRegressor
from sklearn.linear_model import LinearRegression
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import PolynomialFeatures
from sklearn.tree import DecisionTreeRegressor

from tablab.exceptions import ValidationError


logger = logging.getLogger(__name__)


class ModelStrategy(StrEnum):
    LINEAR_REGRESSION = "linear_regression"
    POLYNOMIAL_REGRESSION = "polynomial_regression"
    DECISION_TREE = "decision_tree"
    RANDOM_FOREST = "random_forest"
    KMEANS = "kmeans"


@dataclass(frozen=True)
class ModelParams:
    """Hyperparameters understood by the strategies (each strategy reads only its own).

    Attributes:
        degree: Polynomial degree (polynomial regression).
        max_depth: Maximum tree depth (decision tree, random forest).
        min_leaf_samples: Minimum samples per leaf (decision tree).
        n_estimators: Number of trees (random forest).
        n_clusters: Number of clusters (k-means).
        random_state: Seed for the randomized estimators.
    """

    degree: int = 2
    max_depth: int = 5
    min_leaf_samples: int = 2
    n_estimators: int = 100
    n_clusters: int = 3
    random_state: int | None = 42

    def __post_init__(self) -> None:
        for name in ("degree", "max_depth", "min_leaf_samples", "n_estimators", "n_clusters"):
            if getattr(self, name) < 1:
                raise ValidationError(f"{name} must be a positive integer.")


class BaseModel(ABC):
    """Common capability set of all strategies.

    Subclasses build their estimator in :meth:`build_estimator`; the harness
    clones :attr:`estimator` for cross-validation so the retained instance is
    only ever fitted on the training split.
    """

    strategy: ClassVar[ModelStrategy]

    def __init__(self, params: ModelParams | None = None) -> None:
        self.params = params or ModelParams()
        self.estimator = self.build_estimator()
        self._fitted = False

    @abstractmethod
    def build_estimator(self) -> BaseEstimator:
        """Return a fresh, unfitted scikit-learn estimator."""

    @property
    def is_fitted(self) -> bool:
        return self._fitted

    def train(self, X: np.ndarray, y: np.ndarray) -> Self:
        """Fit the estimator on ``X`` (n x p) and ``y`` (n)."""
        try:
            self.estimator.fit(np.asarray(X, dtype=float), np.asarray(y, dtype=float))
        except ValueError as err:
            raise ValidationError(f"Could not train {self.strategy.value}: {err}") from err
        self._fitted = True
        logger.debug("Trained %s on %d rows", self.strategy.value, len(y))
        return self

    def predict(self, X: np.ndarray | Sequence[float]) -> np.ndarray:
        """Predict for a matrix or a single row (a flat sequence is treated as one row)."""
        if not self._fitted:
            raise ValidationError("Please train the model before making predictions.")
        return self.estimator.predict(np.atleast_2d(np.asarray(X, dtype=float)))

    def feature_importance(self) -> np.ndarray | None:
        """Importance per feature, or ``None`` when the strategy has no such notion."""
        return None


class LinearRegressionModel(BaseModel):
    r"""Ordinary least squares, :math:`\hat{y} = b_0 + \sum_j b_j x_j`."""

    strategy = ModelStrategy.LINEAR_REGRESSION

    def build_estimator(self) -> LinearRegression:
        return LinearRegression()

    @property
    def coefficients(self) -> np.ndarray:
        return np.asarray(self.estimator.coef_, dtype=float)

    @property
    def slope(self) -> float:
        """Coefficient of the first feature (the slope for single-feature fits)."""
        return float(self.coefficients[0])

    @property
    def intercept(self) -> float:
        return float(self.estimator.intercept_)

    def equation(self, features: Sequence[str] | None = None) -> str:
        """Render the fitted model, e.g. ``y = 2.0000x + 0.0000``."""
        if features:
            names = list(features)
        elif len(self.coefficients) == 1:
            names = ["x"]
        else:
            names = [f"x{i + 1}" for i in range(len(self.coefficients))]
        terms = " + ".join(f"{coef:.4f}{name}" for coef, name in zip(self.coefficients, names))
        return f"y = {terms} + {self.intercept:.4f}"

    def feature_importance(self) -> np.ndarray:
        return np.abs(self.coefficients)


class PolynomialRegressionModel(BaseModel):
    strategy = ModelStrategy.POLYNOMIAL_REGRESSION

    def build_estimator(self) -> Pipeline:
        return Pipeline(
            [
                ("poly", PolynomialFeatures(degree=self.params.degree, include_bias=False)),
                ("ols", LinearRegression()),
            ],
        )

    @property
    def coefficients(self) -> list[float]:
        """Intercept followed by the expanded-term coefficients, lowest power first."""
        ols = self.estimator.named_steps["ols"]
        return [float(ols.intercept_), *(float(c) for c in ols.coef_)]


class DecisionTreeModel(BaseModel):
    strategy = ModelStrategy.DECISION_TREE

    def build_estimator(self) -> DecisionTreeRegressor:
        return DecisionTreeRegressor(
            max_depth=self.params.max_depth,
            min_samples_leaf=self.params.min_leaf_samples,
            random_state=self.params.random_state,
        )


class RandomForestModel(BaseModel):
    strategy = ModelStrategy.RANDOM_FOREST

    def build_estimator(self) -> RandomForestRegressor:
        return RandomForestRegressor(
            n_estimators=self.params.n_estimators,
            max_depth=self.params.max_depth,
            random_state=self.params.random_state,
        )

    def feature_importance(self) -> np.ndarray:
        return np.asarray(self.estimator.feature_importances_, dtype=float)


class KMeansModel(BaseModel):
    """K-means treated as a predictor: ``predict`` returns cluster assignments and ``y`` is ignored."""

    strategy = ModelStrategy.KMEANS

    def build_estimator(self) -> KMeans:
        return KMeans(n_clusters=self.params.n_clusters, n_init=10, random_state=self.params.random_state)

    @property
    def centers(self) -> np.ndarray:
        return self.estimator.cluster_centers_


_MODELS: dict[ModelStrategy, type[BaseModel]] = {
    cls.strategy: cls
    for cls in (LinearRegressionModel, PolynomialRegressionModel, DecisionTreeModel, RandomForestModel, KMeansModel)
}


def make_model(strategy: ModelStrategy | str, params: ModelParams | None = None) -> BaseModel:
    """Instantiate the strategy registered for ``strategy``.

    Raises:
        ValidationError: If ``strategy`` is not one of :class:`ModelStrategy`.
    """
    try:
        key = ModelStrategy(strategy)
    except ValueError as err:
        raise ValidationError(f"Unknown model strategy: {strategy!r}") from err
    return _MODELS[key](params)
