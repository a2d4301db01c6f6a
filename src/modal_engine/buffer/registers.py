"""Register storage and clipboard integration."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Dict, Iterator, Mapping, Optional, Protocol

import pyperclip

from modal_engine.runtime import telemetry

UNNAMED = '"'
BLACK_HOLE = "_"
YANK = "0"
SMALL_DELETE = "-"
NUMBERED_DELETES = "123456789"
CHARWISE = "charwise"
LINEWISE = "linewise"


@dataclass(frozen=True, slots=True)
class RegisterValue:
    text: str
    type: str = CHARWISE

    @classmethod
    def of(cls, text: str) -> "RegisterValue":
        """Build a value whose type follows the trailing-newline convention."""

        return cls(text=text, type=LINEWISE if text.endswith("\n") else CHARWISE)

    @property
    def linewise(self) -> bool:
        return self.type == LINEWISE

    def __bool__(self) -> bool:
        return bool(self.text)


EMPTY = RegisterValue(text="")


class ClipboardProvider(Protocol):
    """Platform clipboard the ``*`` and ``+`` registers mirror to."""

    async def read_text(self) -> str:
        ...

    def write_text(self, text: str) -> None:
        ...


class MemoryClipboard:
    """In-process clipboard used by default and in tests."""

    def __init__(self, text: str = "") -> None:
        self.text = text
        self.writes = 0

    async def read_text(self) -> str:
        return self.text

    def write_text(self, text: str) -> None:
        self.text = text
        self.writes += 1


class SystemClipboard:
    """pyperclip-backed clipboard; reads run in a worker thread."""

    def __init__(self, *, logger_name: Optional[str] = None) -> None:
        self._logger_name = logger_name

    async def read_text(self) -> str:
        try:
            text = await asyncio.to_thread(pyperclip.paste)
        except pyperclip.PyperclipException as exc:
            telemetry.soft_failure(
                "clipboard_read", data={"error": str(exc)}, logger_name=self._logger_name
            )
            return ""
        return text or ""

    def write_text(self, text: str) -> None:
        try:
            pyperclip.copy(text)
        except pyperclip.PyperclipException as exc:
            telemetry.soft_failure(
                "clipboard_write", data={"error": str(exc)}, logger_name=self._logger_name
            )


class RegisterBank:
    """Tracks unnamed, numbered, named, and clipboard registers.

    Writes follow these rules:

    * the unnamed register ``"`` always receives the written value;
    * ``0`` receives every yank;
    * deletes that span a line boundary shift ``1``..``8`` into ``2``..``9``
      and land in ``1``; smaller deletes land in ``-``;
    * an uppercase name appends to its lowercase slot;
    * ``*``/``+`` are mirrored to the clipboard provider;
    * the black hole ``_`` discards the write entirely.

    Reads of an empty slot fall back to the unnamed register.
    """

    def __init__(
        self,
        *,
        clipboard: Optional[ClipboardProvider] = None,
        clipboard_registers: str = "*+",
        logger_name: Optional[str] = None,
    ) -> None:
        self._registers: Dict[str, RegisterValue] = {UNNAMED: EMPTY}
        self.clipboard: ClipboardProvider = clipboard or MemoryClipboard()
        self.clipboard_registers = clipboard_registers
        self._logger_name = logger_name
        self._read_generation = 0

    # ------------------------------------------------------------------ access

    def get(self, name: str) -> RegisterValue:
        """Return the raw slot content without falling back."""

        return self._registers.get(_slot(name), EMPTY)

    def read(self, name: str = UNNAMED) -> RegisterValue:
        if name == BLACK_HOLE:
            return EMPTY
        value = self.get(name)
        if not value.text:
            return self.get(UNNAMED)
        return value

    def set(self, name: str, value: RegisterValue) -> None:
        """Store ``value`` verbatim; no unnamed/numbered bookkeeping."""

        if name == BLACK_HOLE:
            return
        self._registers[_slot(name)] = value

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(name for name, value in self._registers.items() if value))

    def write(self, name: str, text: str, *, is_yank: bool) -> bool:
        """Store ``text`` following the register rules; ``False`` if discarded."""

        name = name or UNNAMED
        if name == BLACK_HOLE:
            telemetry.record_event(
                "register.discard", level="debug", logger_name=self._logger_name
            )
            return False

        value = RegisterValue.of(text)
        if name.isalpha() and name.isupper():
            slot = name.lower()
            value = RegisterValue.of(self.get(slot).text + text)
            self._registers[slot] = value
        elif name in self.clipboard_registers:
            for clip_name in self.clipboard_registers:
                self._registers[clip_name] = value
            self.clipboard.write_text(text)
        elif name != UNNAMED:
            self._registers[name] = value

        self._registers[UNNAMED] = value
        if is_yank:
            self._registers[YANK] = value
        elif name == UNNAMED:
            self._record_delete(value)

        telemetry.record_event(
            "register.write",
            level="debug",
            data={"register": name, "yank": is_yank, "type": value.type},
            logger_name=self._logger_name,
        )
        return True

    def _record_delete(self, value: RegisterValue) -> None:
        if "\n" not in value.text:
            self._registers[SMALL_DELETE] = value
            return
        for index in range(len(NUMBERED_DELETES) - 1, 0, -1):
            previous = self._registers.get(NUMBERED_DELETES[index - 1])
            if previous is not None:
                self._registers[NUMBERED_DELETES[index]] = previous
        self._registers[NUMBERED_DELETES[0]] = value

    # ------------------------------------------------------------- persistence

    def serialize(self) -> Mapping[str, RegisterValue]:
        return dict(self._registers)

    def load(self, data: Mapping[str, RegisterValue | str]) -> None:
        for name, value in data.items():
            if isinstance(value, RegisterValue):
                self.set(name, RegisterValue(text=value.text, type=value.type))
            else:
                self.set(name, RegisterValue.of(str(value)))

    def clear(self) -> None:
        self._registers = {UNNAMED: EMPTY}

    # --------------------------------------------------------------- clipboard

    def begin_clipboard_read(self) -> int:
        """Issue a new clipboard read; any older pending read becomes stale."""

        self._read_generation += 1
        return self._read_generation

    def complete_clipboard_read(self, generation: int, text: str) -> bool:
        """Apply a resolved read unless a newer read was issued since."""

        if generation != self._read_generation:
            telemetry.record_event(
                "clipboard.stale_read",
                level="debug",
                data={"generation": generation, "latest": self._read_generation},
                logger_name=self._logger_name,
            )
            return False
        value = RegisterValue.of(text)
        for clip_name in self.clipboard_registers:
            self._registers[clip_name] = value
        return True

    async def fetch_clipboard(self) -> Optional[RegisterValue]:
        """Read the provider into the clipboard registers.

        Returns ``None`` when a later read superseded this one.
        """

        generation = self.begin_clipboard_read()
        text = await self.clipboard.read_text()
        if not self.complete_clipboard_read(generation, text):
            return None
        return RegisterValue.of(text)


def _slot(name: str) -> str:
    if name.isalpha() and name.isupper():
        return name.lower()
    return name


__all__ = [
    "ClipboardProvider",
    "MemoryClipboard",
    "RegisterBank",
    "RegisterValue",
    "SystemClipboard",
    "CHARWISE",
    "LINEWISE",
]
