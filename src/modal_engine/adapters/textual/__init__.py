"""Textual host for the modal engine."""

from .controller import EngineSnapshot, TextualUIHooks, TextualVimAdapter

__all__ = ["EngineSnapshot", "TextualUIHooks", "TextualVimAdapter"]
