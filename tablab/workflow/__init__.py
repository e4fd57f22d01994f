"""UI-facing state machines: arming gates and the training session."""

from .gate import AnalysisGate, ArmingState, GateKind
from .session import LogEntry, LogKind, TrainingSession, TrainingState


__all__ = [
    "AnalysisGate",
    "ArmingState",
    "GateKind",
    "LogEntry",
    "LogKind",
    "TrainingSession",
    "TrainingState",
]
