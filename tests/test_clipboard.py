import asyncio
from typing import List, Tuple

import pyperclip
import pytest

from modal_engine.buffer import MemoryClipboard, RegisterBank, SystemClipboard
from modal_engine.engine import EditorEngine


class DeferredClipboard:
    """Clipboard whose reads resolve only when the test says so."""

    def __init__(self) -> None:
        self.reads: List["asyncio.Future[str]"] = []
        self.text = ""

    async def read_text(self) -> str:
        future: "asyncio.Future[str]" = asyncio.get_running_loop().create_future()
        self.reads.append(future)
        return await future

    def write_text(self, text: str) -> None:
        self.text = text


def test_latest_clipboard_read_wins() -> None:
    clipboard = DeferredClipboard()
    engine = EditorEngine("x", clipboard=clipboard)

    async def scenario() -> Tuple[bool, bool]:
        first = asyncio.create_task(engine.paste_from_clipboard())
        await asyncio.sleep(0)
        second = asyncio.create_task(engine.paste_from_clipboard())
        await asyncio.sleep(0)
        clipboard.reads[1].set_result("new")
        second_applied = await second
        clipboard.reads[0].set_result("old")
        first_applied = await first
        return first_applied, second_applied

    first_applied, second_applied = asyncio.run(scenario())

    assert first_applied is False
    assert second_applied is True
    assert engine.get_buffer_text() == "xnew"
    assert engine.registers.get("*").text == "new"


def test_stale_read_is_dropped_by_generation() -> None:
    bank = RegisterBank(clipboard=MemoryClipboard())

    first = bank.begin_clipboard_read()
    second = bank.begin_clipboard_read()

    assert bank.complete_clipboard_read(first, "old") is False
    assert bank.complete_clipboard_read(second, "new") is True
    assert bank.get("+").text == "new"


def test_empty_clipboard_paste_is_a_noop() -> None:
    engine = EditorEngine("abc", clipboard=MemoryClipboard(""))

    applied = asyncio.run(engine.paste_from_clipboard())

    assert applied is False
    assert engine.get_buffer_text() == "abc"


def test_system_clipboard_read_failure_is_soft(monkeypatch: pytest.MonkeyPatch) -> None:
    def unavailable() -> str:
        raise pyperclip.PyperclipException("no clipboard mechanism")

    monkeypatch.setattr(pyperclip, "paste", unavailable)

    assert asyncio.run(SystemClipboard().read_text()) == ""


def test_system_clipboard_write_uses_pyperclip(monkeypatch: pytest.MonkeyPatch) -> None:
    copied: List[str] = []
    monkeypatch.setattr(pyperclip, "copy", copied.append)

    SystemClipboard().write_text("hello")

    assert copied == ["hello"]
