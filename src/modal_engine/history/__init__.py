"""Macro recording and dot-repeat bookkeeping."""

from .macros import MacroRecorder
from .repeat import CommandShape, InsertSession, LastCommand, OperatorTarget, RepeatTracker

__all__ = [
    "MacroRecorder",
    "CommandShape",
    "InsertSession",
    "LastCommand",
    "OperatorTarget",
    "RepeatTracker",
]
