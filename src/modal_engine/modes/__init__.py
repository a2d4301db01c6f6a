"""Mode manager, operator pipeline, and dispatch logic."""

from .base_mode import ActionRequest, KeyInput, Mode, ModeBus, ModeContext, ModeResult
from .editor_state import CommandLineState, EditorState, PendingState, VisualState
from .operator_pipeline import OperatorPipeline
from .keymap_mode import KeymapMode
from .normal_mode import NormalMode
from .insert_mode import InsertMode
from .visual_mode import VisualLineMode, VisualMode
from .command_mode import CommandMode

__all__ = [
    "ActionRequest",
    "KeyInput",
    "Mode",
    "ModeBus",
    "ModeContext",
    "ModeResult",
    "CommandLineState",
    "EditorState",
    "PendingState",
    "VisualState",
    "KeymapMode",
    "NormalMode",
    "InsertMode",
    "VisualMode",
    "VisualLineMode",
    "CommandMode",
    "OperatorPipeline",
]
