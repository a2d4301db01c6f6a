from __future__ import annotations

from typing import List, Tuple

from modal_engine.adapters.textual import EngineSnapshot, TextualUIHooks, TextualVimAdapter
from modal_engine.adapters.textual.app import render_buffer
from modal_engine.engine import EditorEngine


def make_adapter(
    text: str = "",
) -> Tuple[EditorEngine, TextualVimAdapter, List[EngineSnapshot], List[Tuple[str, object]]]:
    engine = EditorEngine(text)
    frames: List[EngineSnapshot] = []
    events: List[Tuple[str, object]] = []
    hooks = TextualUIHooks(
        render=frames.append,
        on_event=lambda name, payload: events.append((name, payload)),
    )
    return engine, TextualVimAdapter(engine, hooks), frames, events


def test_adapter_renders_initial_snapshot() -> None:
    _, _, frames, _ = make_adapter("abc")

    assert len(frames) == 1
    assert frames[0].text == "abc"
    assert frames[0].status_line == ""


def test_adapter_renders_after_typing() -> None:
    _, adapter, frames, _ = make_adapter()

    adapter.handle_textual_key("i")
    assert frames[-1].status_line == "-- INSERT --"
    adapter.handle_textual_key("h", text="h")
    adapter.handle_textual_key("i", text="i")
    adapter.handle_textual_key("ESC")

    assert frames[-1].text == "hi"
    assert frames[-1].mode == "normal"
    assert frames[-1].cursor == 1


def test_adapter_skips_unchanged_frames() -> None:
    _, adapter, frames, _ = make_adapter("abc")

    adapter.refresh()
    adapter.refresh()

    assert len(frames) == 1


def test_adapter_lowercases_modifiers() -> None:
    engine, adapter, _, _ = make_adapter("abc")

    adapter.handle_textual_key("x")
    adapter.handle_textual_key("u")
    adapter.handle_textual_key("r", modifiers=("CTRL",))

    assert engine.get_buffer_text() == "bc"


def test_adapter_relays_write_request() -> None:
    _, adapter, frames, events = make_adapter("abc")

    for key in ":w":
        adapter.handle_textual_key(key, text=key)
    assert frames[-1].command_line == ":w"
    adapter.handle_textual_key("ENTER")

    assert frames[-1].command_line == ""
    assert ("command.submit", ":w") in events
    written = next(payload for name, payload in events if name == "command.write")
    assert isinstance(written, dict)
    assert written["force"] is False


def test_adapter_shows_recording_marker() -> None:
    _, adapter, frames, _ = make_adapter("abc")

    adapter.handle_textual_key("q")
    adapter.handle_textual_key("a", text="a")
    adapter.handle_textual_key("i")

    assert frames[-1].recording == "a"
    assert frames[-1].status_line == "-- INSERT --  recording @a"


def test_render_buffer_marks_cursor_and_selection() -> None:
    engine = EditorEngine("abc\n")
    engine.feed("l")
    cursor = render_buffer(EngineSnapshot.capture(engine))

    assert cursor.plain == "abc\n"
    assert [(span.start, span.end) for span in cursor.spans] == [(1, 2)]

    engine.feed("vl")
    selection = render_buffer(EngineSnapshot.capture(engine))
    assert [(span.start, span.end) for span in selection.spans] == [(1, 3)]


def test_render_buffer_pads_cursor_at_line_break() -> None:
    engine = EditorEngine("\nx")

    rendered = render_buffer(EngineSnapshot.capture(engine))

    assert rendered.plain == " \nx"
    assert [(span.start, span.end) for span in rendered.spans] == [(0, 1)]


def test_adapter_relays_new_buffer_request() -> None:
    _, adapter, _, events = make_adapter("abc")

    for key in ":new":
        adapter.handle_textual_key(key, text=key)
    adapter.handle_textual_key("ENTER")

    assert [name for name, _ in events if name.startswith("command.new")] == ["command.new"]
