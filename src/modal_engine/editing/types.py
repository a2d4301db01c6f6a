"""Value types passed between motions, text objects and operators."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

FORWARD_FINDS = {"f": "F", "t": "T", "F": "f", "T": "t"}


@dataclass(frozen=True, slots=True)
class FindSpec:
    """In-line character search remembered for ``;`` and ``,``."""

    kind: str  # one of f, F, t, T
    char: str

    @property
    def forward(self) -> bool:
        return self.kind in ("f", "t")

    @property
    def till(self) -> bool:
        return self.kind in ("t", "T")

    def reversed(self) -> "FindSpec":
        return FindSpec(kind=FORWARD_FINDS[self.kind], char=self.char)


@dataclass(frozen=True, slots=True)
class SearchSpec:
    term: str
    backward: bool = False


@dataclass(frozen=True, slots=True)
class MotionResult:
    """Destination of a motion plus how an operator should treat it."""

    offset: int
    inclusive: bool = False
    linewise: bool = False
    failed: bool = False
    desired_column: Optional[int] = None
    find: Optional[FindSpec] = None
    jump: bool = False


@dataclass(frozen=True, slots=True)
class Span:
    """Half-open ``[start, end)`` range an operator acts on.

    For linewise spans ``start`` is the first line's start and ``end`` the
    last line's end (its newline excluded).
    """

    start: int
    end: int
    linewise: bool = False

    def __post_init__(self) -> None:
        if self.start > self.end:
            start, end = self.end, self.start
            object.__setattr__(self, "start", start)
            object.__setattr__(self, "end", end)

    @property
    def empty(self) -> bool:
        return self.start == self.end and not self.linewise


__all__ = ["FindSpec", "SearchSpec", "MotionResult", "Span"]
