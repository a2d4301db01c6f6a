"""Last-change tracking for the ``.`` command."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import List, Optional


class CommandShape(str, Enum):
    INSERT = "insert"
    DELETE = "delete"
    CHANGE = "change"
    REPLACE = "replace"
    OTHER = "other"


@dataclass(frozen=True, slots=True)
class OperatorTarget:
    """What an operator acted on, re-resolved from the cursor on replay.

    ``kind`` is ``"motion"`` (``key`` is the motion), ``"object"`` (``key``
    is the text-object key, ``around`` picks ``a`` over ``i``) or ``"line"``
    for doubled operators such as ``dd``.
    """

    kind: str
    key: str = ""
    around: bool = False
    char: Optional[str] = None


@dataclass(frozen=True, slots=True)
class LastCommand:
    shape: CommandShape
    action_id: str
    count: int = 1
    text: str = ""
    char: Optional[str] = None
    operator: Optional[str] = None
    target: Optional[OperatorTarget] = None
    register: str = '"'

    def with_count(self, count: int) -> "LastCommand":
        return replace(self, count=count)


@dataclass(slots=True)
class InsertSession:
    """Text typed between entering Insert mode and leaving it.

    ``base`` is the command that opened the session; its ``text`` is filled
    in when the session finishes. Backspace only removes characters typed
    during this session from the record.
    """

    base: LastCommand
    typed: List[str] = field(default_factory=list)
    repeat_with_newline: bool = False

    @property
    def text(self) -> str:
        return "".join(self.typed)

    def type(self, text: str) -> None:
        self.typed.append(text)

    def backspace(self) -> None:
        if not self.typed:
            return
        last = self.typed[-1]
        if len(last) > 1:
            self.typed[-1] = last[:-1]
        else:
            self.typed.pop()


class RepeatTracker:
    def __init__(self) -> None:
        self._last: Optional[LastCommand] = None
        self.session: Optional[InsertSession] = None

    @property
    def last(self) -> Optional[LastCommand]:
        return self._last

    def record(self, command: LastCommand) -> None:
        self._last = command

    def begin_insert(
        self, base: LastCommand, *, repeat_with_newline: bool = False
    ) -> InsertSession:
        self.session = InsertSession(base=base, repeat_with_newline=repeat_with_newline)
        return self.session

    def finish_insert(self) -> Optional[LastCommand]:
        """Close the session and record it as the last change."""

        session = self.session
        self.session = None
        if session is None:
            return None
        command = replace(session.base, text=session.text)
        self._last = command
        return command


__all__ = [
    "CommandShape",
    "InsertSession",
    "LastCommand",
    "OperatorTarget",
    "RepeatTracker",
]
