"""Motions, text objects and operators over buffer documents."""

from .motions import (
    CHAR_MOTIONS,
    LINE_END_COLUMN,
    VERTICAL_MOTIONS,
    Motion,
    MotionRequest,
    apply_motion,
    clamp_to_char,
    goto_line,
)
from .operators import Operator, OperatorEngine, OperatorOutcome, line_span, motion_span
from .text_objects import OBJECT_KEYS, TextObjectKind, resolve_text_object
from .types import FindSpec, MotionResult, SearchSpec, Span

__all__ = [
    "CHAR_MOTIONS",
    "LINE_END_COLUMN",
    "VERTICAL_MOTIONS",
    "Motion",
    "MotionRequest",
    "MotionResult",
    "apply_motion",
    "clamp_to_char",
    "goto_line",
    "Operator",
    "OperatorEngine",
    "OperatorOutcome",
    "line_span",
    "motion_span",
    "OBJECT_KEYS",
    "TextObjectKind",
    "resolve_text_object",
    "FindSpec",
    "SearchSpec",
    "Span",
]
