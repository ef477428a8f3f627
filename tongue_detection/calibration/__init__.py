"""Tongue ordering for layout calibration."""

from .selection import SelectionSequencer, SelectionState
from .session import CalibrationSession

__all__ = [
    "SelectionSequencer",
    "SelectionState",
    "CalibrationSession",
]
