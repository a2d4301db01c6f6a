"""UI-agnostic modal text editing engine."""

from .config import EngineConfig
from .engine import EditorEngine, create_engine

__all__ = [
    "EditorEngine",
    "EngineConfig",
    "create_engine",
    "actions",
    "adapters",
    "buffer",
    "editing",
    "history",
    "keymaps",
    "modes",
    "runtime",
]

__version__ = "0.1.0"
