"""Named buffer positions set with ``m`` and jumped to with ``'``/`` ` ``."""

from __future__ import annotations

from typing import Dict, Iterator, Mapping, Optional

PREVIOUS = "'"


def is_mark_name(name: str) -> bool:
    return len(name) == 1 and name.isascii() and name.isalpha()


class MarkTable:
    """Letter -> offset table plus the position before the latest jump.

    Offsets are stored as-is: edits elsewhere in the buffer do not shift
    them, and a mark past the end of a shortened buffer is clamped only when
    it is used.
    """

    def __init__(self) -> None:
        self._marks: Dict[str, int] = {}
        self.previous_position: Optional[int] = None

    def __contains__(self, name: object) -> bool:
        return name in self._marks

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._marks))

    def __len__(self) -> int:
        return len(self._marks)

    def set(self, name: str, offset: int) -> None:
        if not is_mark_name(name):
            raise ValueError(f"Invalid mark name {name!r}")
        self._marks[name] = max(0, offset)

    def get(self, name: str) -> Optional[int]:
        if name == PREVIOUS:
            return self.previous_position
        return self._marks.get(name)

    def delete(self, name: str) -> bool:
        return self._marks.pop(name, None) is not None

    def clear(self) -> None:
        self._marks.clear()
        self.previous_position = None

    def serialize(self) -> Mapping[str, int]:
        return dict(self._marks)

    def load(self, data: Mapping[str, int]) -> None:
        for name, offset in data.items():
            self.set(name, int(offset))


__all__ = ["MarkTable", "is_mark_name", "PREVIOUS"]
