"""Character classification shared by motions and text objects."""

from __future__ import annotations

import re

# ASCII word characters plus hiragana, katakana and CJK unified ideographs.
WORD_CHAR = re.compile(r"[A-Za-z0-9_\u3040-\u309F\u30A0-\u30FF\u4E00-\u9FAF]")

BLANK = 0
PUNCTUATION = 1
WORD = 2


def is_word_char(ch: str) -> bool:
    return bool(ch) and WORD_CHAR.fullmatch(ch) is not None


def char_class(ch: str, *, big: bool = False) -> int:
    """Classify ``ch`` for word motions.

    With ``big`` (WORD motions) every non-blank character is one class.
    """

    if not ch or ch.isspace():
        return BLANK
    if big or is_word_char(ch):
        return WORD
    return PUNCTUATION


__all__ = ["is_word_char", "char_class", "BLANK", "PUNCTUATION", "WORD"]
