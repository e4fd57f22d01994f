"""Training lifecycle around the evaluation harness."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from enum import StrEnum

from tablab.analysis.evaluation import EvaluationResult, ModelEvaluator
from tablab.analysis.models import ModelParams, ModelStrategy
from tablab.data.dataset import Dataset
from tablab.exceptions import ValidationError
from tablab.utils.config import DEFAULT_CONFIG, KernelConfig


logger = logging.getLogger(__name__)


class TrainingState(StrEnum):
    IDLE = "idle"
    TRAINING = "training"
    TRAINED = "trained"


class LogKind(StrEnum):
    START = "start"
    PROCESS = "process"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class LogEntry:
    kind: LogKind
    message: str


class TrainingSession:
    """State machine ``idle -> training -> trained`` (and ``trained -> training`` on re-train).

    Requests never raise: validation problems are stored in :attr:`error`,
    appended to :attr:`log` and leave the state as it was. A failure while
    fitting drops the session back to ``idle``.

    Example:
        >>> session = TrainingSession(ds)
        >>> session.train("y", ["x"], ModelStrategy.LINEAR_REGRESSION)
        >>> session.state
        <TrainingState.TRAINED: 'trained'>
        >>> session.predict(["5"])
    """

    def __init__(self, dataset: Dataset, config: KernelConfig | None = None) -> None:
        self.dataset = dataset
        self._config = config or DEFAULT_CONFIG
        self.state = TrainingState.IDLE
        self.result: EvaluationResult | None = None
        self.prediction: float | None = None
        self.error: str | None = None
        self.log: list[LogEntry] = []

    @property
    def is_trained(self) -> bool:
        return self.state is TrainingState.TRAINED

    def _record(self, kind: LogKind, message: str) -> None:
        self.log.append(LogEntry(kind, message))

    def _fail(self, message: str) -> None:
        self.error = message
        self._record(LogKind.ERROR, f"Error: {message}")
        logger.warning(message)

    def train(
        self,
        target: str,
        features: Sequence[str],
        strategy: ModelStrategy | str,
        params: ModelParams | None = None,
        *,
        test_size: float | None = None,
    ) -> EvaluationResult | None:
        """Validate the request, then fit and evaluate; return the result or ``None`` on failure."""
        self.error = None
        evaluator = ModelEvaluator(
            self.dataset,
            target=target,
            features=features,
            strategy=strategy,
            params=params,
            test_size=test_size,
            config=self._config,
            on_phase=lambda message: self._record(LogKind.PROCESS, message),
        )
        try:
            evaluator.validate()
        except ValidationError as err:
            self._fail(str(err))
            return None

        self.log = [LogEntry(LogKind.START, f"Starting {ModelStrategy(strategy).value} training...")]
        self.state = TrainingState.TRAINING
        self.result = None
        self.prediction = None
        try:
            result = evaluator.fit().result()
        except ValidationError as err:
            self.state = TrainingState.IDLE
            self._fail(str(err))
            return None

        # the final phase message is a success, not a process step
        if self.log and self.log[-1].kind is LogKind.PROCESS:
            self.log[-1] = LogEntry(LogKind.SUCCESS, self.log[-1].message)
        self.result = result
        self.state = TrainingState.TRAINED
        return result

    def predict(self, values: Sequence[str | float | None]) -> float | None:
        """Single-point prediction; refused unless the session is trained."""
        self.error = None
        if not self.is_trained or self.result is None:
            self._fail("Please train the model before making predictions.")
            return None
        try:
            self.prediction = self.result.predict(values)
        except ValidationError as err:
            self._fail(str(err))
            return None
        self._record(LogKind.SUCCESS, f"Prediction made: Input {list(values)} → Output {self.prediction:.4f}")
        return self.prediction
