"""Common protocol of the read-only tablab analyzers."""

from abc import ABC, abstractmethod
from typing import Any


class BaseAnalyser(ABC):
    """Protocol shared by every analyzer and by the evaluation harness.

    Lifecycle:
    1. Construct from a :class:`~tablab.data.views.DatasetView` (or a whole
       :class:`~tablab.data.dataset.Dataset` for dataset-wide checks)
    2. ``fit()`` runs the computation and returns ``self``
    3. ``result()`` hands back a frozen dataclass

    Inputs are never modified. Columns that do not resolve produce neutral
    values (0, empty, ``None``) instead of exceptions, and results never carry NaN.

    Analyzers are normally built through the ``Dataset.make_*`` factories, e.g.
    ``ds.make_correlation_analyzer(["a", "b"]).fit().result()``.
    """

    @abstractmethod
    def fit(self) -> "BaseAnalyser":
        """Run the analysis; returns ``self`` so calls can be chained."""
        ...

    @abstractmethod
    def result(self) -> Any:
        """Return the frozen result of the last :meth:`fit`.

        Raises:
            ValueError: If fit() has not been called yet.
        """
        ...
