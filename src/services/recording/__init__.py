"""
Recording module - Capture lifecycle state machine and elapsed-time tracker.
"""

from .controller import RecordingController
from .timer import ElapsedTimer

__all__ = ["ElapsedTimer", "RecordingController"]
