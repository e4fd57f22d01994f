"""Shared engine configuration (fences, fold count, rounding, split bounds)."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class KernelConfig:
    """Tunable defaults used across analyzers, transforms and the ML harness."""

    iqr_threshold: float = 1.5
    """Multiplier ``k`` for the IQR fences ``[Q1 - k*IQR, Q3 + k*IQR]``."""
    cv_folds: int = 5
    test_size: float = 0.2
    test_size_bounds: tuple[float, float] = (0.1, 0.5)
    decimals: int = 4
    """Decimal places written by the log and min-max transforms."""
    normalize_range: tuple[float, float] = (0.0, 1.0)
    random_state: int | None = 42
    """Seed handed to randomized estimators (random forest, k-means)."""
    n_jobs: int | None = None
    """Parallel workers for cross-validation folds (``None`` = sequential)."""

    def __post_init__(self) -> None:
        lo, hi = self.test_size_bounds
        if not 0.0 < lo <= hi < 1.0:
            raise ValueError(f"Invalid test_size_bounds={self.test_size_bounds}.")
        if self.cv_folds < 2:
            raise ValueError(f"cv_folds must be >= 2, got {self.cv_folds}.")


# Default configuration used when callers do not pass one
DEFAULT_CONFIG = KernelConfig()


__all__ = ["DEFAULT_CONFIG", "KernelConfig"]
