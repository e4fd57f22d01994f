"""Arming gate guarding statistics and chart generation against premature requests."""

import logging
from enum import StrEnum

from tablab.analysis.chart_data import ChartSeries, ChartType, build_chart_series
from tablab.analysis.descriptive_stats import DescriptiveStatsResult
from tablab.data.dataset import Dataset


logger = logging.getLogger(__name__)


class ArmingState(StrEnum):
    UNARMED = "unarmed"
    ARMED = "armed"


class GateKind(StrEnum):
    STATISTICS = "statistics"
    VISUALIZATION = "visualization"


_MESSAGES = {
    GateKind.STATISTICS: (
        "Please select a column before arming the analysis.",
        "Please arm the analysis before generating results.",
    ),
    GateKind.VISUALIZATION: (
        "Please select all required columns before arming the visualization.",
        "Please arm the visualization before generating charts.",
    ),
}


class AnalysisGate:
    """Two-state machine: ``unarmed -> armed`` on :meth:`arm`, back to ``unarmed`` on any selection change.

    :meth:`generate` only computes while armed; otherwise it records a
    validation message in :attr:`error` and returns ``None``.

    Example:
        >>> gate = AnalysisGate(ds, GateKind.STATISTICS)
        >>> gate.select_column("v")
        >>> gate.arm()
        True
        >>> gate.generate().mean
    """

    def __init__(self, dataset: Dataset, kind: GateKind | str = GateKind.STATISTICS) -> None:
        self.dataset = dataset
        self.kind = GateKind(kind)
        self.state = ArmingState.UNARMED
        self.chart_type = ChartType.BAR
        self.column: str | None = None
        self.x_column: str | None = None
        self.y_column: str | None = None
        self.error: str | None = None

    @property
    def is_armed(self) -> bool:
        return self.state is ArmingState.ARMED

    def _disarm(self) -> None:
        if self.state is ArmingState.ARMED:
            logger.debug("%s gate disarmed", self.kind.value)
        self.state = ArmingState.UNARMED

    def set_dataset(self, dataset: Dataset) -> None:
        self.dataset = dataset
        self._disarm()

    def select_column(self, column: str | None) -> None:
        self.column = column
        self._disarm()

    def select_axes(self, x_column: str | None, y_column: str | None) -> None:
        self.x_column = x_column
        self.y_column = y_column
        self._disarm()

    def set_chart_type(self, chart_type: ChartType | str) -> None:
        self.chart_type = ChartType(chart_type)
        self._disarm()

    def _selection_complete(self) -> bool:
        if self.kind is GateKind.VISUALIZATION and self.chart_type.needs_xy:
            return bool(self.x_column and self.y_column)
        return bool(self.column)

    def arm(self) -> bool:
        """Arm the gate if the required columns are selected; return whether it is armed."""
        if not self._selection_complete():
            self.error = _MESSAGES[self.kind][0]
            self.state = ArmingState.UNARMED
            return False
        self.error = None
        self.state = ArmingState.ARMED
        return True

    def generate(self) -> DescriptiveStatsResult | ChartSeries | None:
        """Compute the armed request (statistics result or chart series).

        Statistics of a column without numeric data are also ``None``.
        """
        if not self.is_armed:
            self.error = _MESSAGES[self.kind][1]
            logger.info(self.error)
            return None
        self.error = None
        if self.kind is GateKind.STATISTICS:
            return self.dataset.make_stats_analyzer(self.column).fit().result()
        return build_chart_series(
            self.dataset,
            self.chart_type,
            column=self.column,
            x_column=self.x_column,
            y_column=self.y_column,
        )
