"""Routes keys to the active mode and applies the transitions it requests."""

from __future__ import annotations

from typing import Dict, Optional, Type

from modal_engine.keymaps import KeymapRegistry, KeymapResolver, load_default_keymaps
from modal_engine.runtime import telemetry

from .base_mode import KeyInput, Mode, ModeContext, ModeResult
from .keymap_helpers import update_flag


class ModeManager:
    """Owns the mode instances of one editor.

    ``handle_key`` is the single entry point for live keys and for macro
    playback; the active macro recording sees every key before it is
    dispatched. A registry passed in is used as-is, otherwise a fresh one
    is seeded with the default keymaps. Either way the registry, its
    resolver and the manager itself are published in ``context.extras``
    for the modes and actions.
    """

    def __init__(
        self,
        context: ModeContext,
        *,
        keymap_registry: Optional[KeymapRegistry] = None,
    ) -> None:
        self.context = context
        self._modes: Dict[str, Mode] = {}
        self._active: Optional[str] = None
        self._logger_name = context.state.config.logger_name
        if keymap_registry is None:
            keymap_registry = KeymapRegistry(logger_name=f"{self._logger_name}.keymaps")
            load_default_keymaps(keymap_registry)
        self.keymap_registry = keymap_registry
        self.keymap_resolver = KeymapResolver(
            keymap_registry, logger_name=f"{self._logger_name}.keymaps"
        )
        context.extras.update(
            keymap_registry=self.keymap_registry,
            keymap_resolver=self.keymap_resolver,
            mode_manager=self,
        )
        context.extras.setdefault("keymap_flags", {})

    @property
    def mode_name(self) -> Optional[str]:
        return self._active

    def register_mode(self, mode_cls: Type[Mode]) -> Mode:
        """Instantiate ``mode_cls``; the first registered mode starts active."""

        mode = mode_cls(self.context)
        if mode.name in self._modes:
            raise ValueError(f"mode {mode.name!r} is already registered")
        self._modes[mode.name] = mode
        if self._active is None:
            self._active = mode.name
            mode.on_enter(None)
        return mode

    def switch_mode(self, name: str) -> None:
        if name not in self._modes:
            raise KeyError(f"unknown mode {name!r}")
        previous = self._active
        if previous == name:
            return
        if previous is not None:
            self._modes[previous].on_exit(name)
        self._active = name
        self._modes[name].on_enter(previous)
        telemetry.record_event(
            "mode.switch",
            data={"mode": name, "previous": previous},
            logger_name=self._logger_name,
        )
        self.context.bus.emit("mode.switch", name)

    def handle_key(self, key: KeyInput) -> ModeResult:
        if self._active is None:
            raise RuntimeError("no mode registered")
        mode = self._modes[self._active]
        self.context.state.macros.record(key)
        with telemetry.span(
            f"mode::{mode.name}",
            logger_name=self._logger_name,
            metadata={"key": key.key},
        ):
            result = mode.handle_key(key)

        if result.switch_to:
            self.switch_mode(result.switch_to)
        update_flag(self.context, "recording", self.context.state.macros.recording is not None)
        if result.message is not None:
            self.context.state.status = result.message
            self.context.bus.emit("status", result.message)
        return result


__all__ = ["ModeManager"]
