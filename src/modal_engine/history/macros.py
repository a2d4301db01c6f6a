"""Macro recording and playback."""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Dict, Iterator, List, Optional, Tuple

from modal_engine.runtime import telemetry

if TYPE_CHECKING:
    from modal_engine.modes.base_mode import KeyInput

Dispatch = Callable[["KeyInput"], object]


class MacroRecorder:
    """Captures key events into named slots and replays them.

    Playback feeds each stored key back through ``dispatch`` (the same entry
    point live keys use). Recording is suspended while a macro plays, and
    nested playback stops at ``depth_limit`` so a macro that calls itself
    terminates.
    """

    def __init__(self, *, depth_limit: int = 100, logger_name: Optional[str] = None) -> None:
        self.depth_limit = depth_limit
        self.recording: Optional[str] = None
        self.last_played: Optional[str] = None
        self._buffer: List["KeyInput"] = []
        self._macros: Dict[str, Tuple["KeyInput", ...]] = {}
        self._depth = 0
        self._logger_name = logger_name

    @property
    def playing(self) -> bool:
        return self._depth > 0

    def __contains__(self, name: object) -> bool:
        return name in self._macros

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._macros))

    def get(self, name: str) -> Tuple["KeyInput", ...]:
        return self._macros.get(name.lower(), ())

    def start(self, name: str) -> bool:
        if not (len(name) == 1 and name.isalnum()):
            return False
        self.recording = name
        self._buffer = []
        telemetry.record_event(
            "macro.record_start", data={"register": name}, logger_name=self._logger_name
        )
        return True

    def record(self, key: "KeyInput") -> None:
        if self.recording is None or self.playing:
            return
        self._buffer.append(key)

    def stop(self) -> Optional[str]:
        """Commit the recording; the key that stopped it is not kept."""

        name = self.recording
        if name is None:
            return None
        keys = self._buffer[:-1]
        if name.isupper():
            slot = name.lower()
            self._macros[slot] = self._macros.get(slot, ()) + tuple(keys)
        else:
            self._macros[name] = tuple(keys)
        self.recording = None
        self._buffer = []
        telemetry.record_event(
            "macro.record_stop",
            data={"register": name, "keys": len(keys)},
            logger_name=self._logger_name,
        )
        return name

    def play(self, name: str, dispatch: Dispatch, *, count: int = 1) -> bool:
        """Replay macro ``name`` ``count`` times; ``@`` replays the last one."""

        if name == "@":
            if self.last_played is None:
                return False
            name = self.last_played
        keys = self.get(name)
        if not keys:
            telemetry.soft_failure(
                "unknown_macro", data={"register": name}, logger_name=self._logger_name
            )
            return False
        if self._depth >= self.depth_limit:
            telemetry.soft_failure(
                "macro_depth", data={"register": name}, logger_name=self._logger_name
            )
            return False
        self.last_played = name.lower()
        self._depth += 1
        try:
            with telemetry.span(
                "macro::play",
                logger_name=self._logger_name,
                component="macros",
                metadata={"register": name, "keys": len(keys), "count": count},
            ):
                for _ in range(max(count, 1)):
                    for key in keys:
                        dispatch(key)
        finally:
            self._depth -= 1
        return True

    def set(self, name: str, keys: Tuple["KeyInput", ...]) -> None:
        self._macros[name.lower()] = tuple(keys)


__all__ = ["MacroRecorder"]
