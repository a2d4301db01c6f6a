"""Engine-wide configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

ENV_PREFIX = "MODAL_ENGINE_"


@dataclass(frozen=True, slots=True)
class EngineConfig:
    """Tunables shared by every engine component.

    ``undo_limit`` caps both the undo and the redo stack (oldest entries are
    evicted first). ``indent_width`` is the number of spaces ``>``/``<`` and
    insert-mode ``TAB`` work with. ``clipboard_registers`` lists the register
    names mirrored to the clipboard provider. ``macro_depth_limit`` bounds
    nested macro playback so a macro that invokes itself terminates.
    """

    undo_limit: int = 100
    indent_width: int = 2
    clipboard_registers: str = "*+"
    use_system_clipboard: bool = False
    macro_depth_limit: int = 100
    logger_name: str = "modal_engine"

    def __post_init__(self) -> None:
        if self.undo_limit <= 0:
            raise ValueError("undo_limit must be positive")
        if self.indent_width <= 0:
            raise ValueError("indent_width must be positive")
        if self.macro_depth_limit <= 0:
            raise ValueError("macro_depth_limit must be positive")
        if not self.logger_name:
            raise ValueError("logger_name cannot be empty")

    @property
    def indent_unit(self) -> str:
        return " " * self.indent_width

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "EngineConfig":
        env = os.environ if environ is None else environ
        kwargs: dict[str, object] = {}

        undo_limit = env.get(f"{ENV_PREFIX}UNDO_LIMIT")
        if undo_limit is not None:
            kwargs["undo_limit"] = _parse_int("UNDO_LIMIT", undo_limit)

        indent_width = env.get(f"{ENV_PREFIX}INDENT_WIDTH")
        if indent_width is not None:
            kwargs["indent_width"] = _parse_int("INDENT_WIDTH", indent_width)

        system_clipboard = env.get(f"{ENV_PREFIX}SYSTEM_CLIPBOARD")
        if system_clipboard is not None:
            kwargs["use_system_clipboard"] = system_clipboard.strip().lower() in {
                "1",
                "true",
                "yes",
                "on",
            }

        logger_name = env.get(f"{ENV_PREFIX}LOGGER")
        if logger_name:
            kwargs["logger_name"] = logger_name

        return cls(**kwargs)  # type: ignore[arg-type]


def _parse_int(name: str, raw: str) -> int:
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{ENV_PREFIX}{name} must be an integer, got {raw!r}") from exc


__all__ = ["EngineConfig"]
