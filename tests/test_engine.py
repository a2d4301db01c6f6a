from typing import List

import pytest

from modal_engine import EngineConfig, create_engine
from modal_engine.buffer import BufferMirror
from modal_engine.engine import EditorEngine


def test_config_from_env() -> None:
    config = EngineConfig.from_env(
        {
            "MODAL_ENGINE_UNDO_LIMIT": "5",
            "MODAL_ENGINE_INDENT_WIDTH": "4",
            "MODAL_ENGINE_SYSTEM_CLIPBOARD": "yes",
            "MODAL_ENGINE_LOGGER": "editor",
        }
    )

    assert config.undo_limit == 5
    assert config.indent_unit == "    "
    assert config.use_system_clipboard is True
    assert config.logger_name == "editor"


def test_config_rejects_bad_values() -> None:
    with pytest.raises(ValueError):
        EngineConfig.from_env({"MODAL_ENGINE_UNDO_LIMIT": "many"})
    with pytest.raises(ValueError):
        EngineConfig(indent_width=0)


def test_indent_width_comes_from_config() -> None:
    engine = EditorEngine("foo", config=EngineConfig(indent_width=4))

    engine.feed(">>")

    assert engine.get_buffer_text() == "    foo"


def test_engines_share_no_state() -> None:
    first = create_engine("abc")
    second = create_engine("abc")

    first.feed("yiwx")

    assert second.get_buffer_text() == "abc"
    assert second.registers.get('"').text == ""


def test_dispatch_key_accepts_named_keys_and_modifiers() -> None:
    engine = EditorEngine("abc")

    engine.dispatch_key("x")
    engine.dispatch_key("u")
    assert engine.get_buffer_text() == "abc"

    engine.dispatch_key("r", ("ctrl",))
    assert engine.get_buffer_text() == "bc"

    engine.dispatch_key("i")
    engine.dispatch_key("escape")
    assert engine.mode == "normal"


def test_selection_equals_cursor_outside_visual() -> None:
    engine = EditorEngine("abc")

    engine.feed("l")

    assert engine.get_selection() == (1, 1)


def test_visual_escape_clears_selection() -> None:
    engine = EditorEngine("abcdef")

    engine.feed("vll")
    assert engine.get_selection() == (0, 3)

    engine.feed("<Esc>")
    assert engine.mode == "normal"
    assert engine.get_selection() == (2, 2)


def test_selection_stays_within_buffer() -> None:
    engine = EditorEngine("abc")

    engine.buffer.set_selection(5, -2)

    start, end = engine.get_selection()
    assert 0 <= start <= end <= len(engine.get_buffer_text())


def test_selection_after_deleting_the_buffer() -> None:
    engine = EditorEngine("abc\ndef")

    engine.feed("Vjd")

    assert engine.get_buffer_text() == ""
    assert engine.get_selection() == (0, 0)


def test_insert_at_cursor_is_undoable() -> None:
    engine = EditorEngine("ac")
    engine.feed("l")

    engine.insert_at_cursor("b")
    assert engine.get_buffer_text() == "abc"

    engine.feed("u")
    assert engine.get_buffer_text() == "ac"


def test_insert_at_cursor_during_insert_joins_the_session() -> None:
    engine = EditorEngine("")

    engine.feed("ia")
    engine.insert_at_cursor("bc")
    engine.feed("<Esc>u")

    assert engine.get_buffer_text() == ""


def test_replace_entire_buffer_resets_and_stays_undoable() -> None:
    engine = EditorEngine("old text")
    replaced: List[object] = []
    engine.subscribe("buffer.replaced", replaced.append)
    engine.feed("v")

    engine.replace_entire_buffer("new")

    assert engine.mode == "normal"
    assert engine.get_buffer_text() == "new"
    assert engine.cursor == 0
    assert replaced == [3]

    engine.feed("u")
    assert engine.get_buffer_text() == "old text"


def test_host_sync_round_trip() -> None:
    engine = EditorEngine("abc")

    engine.push_host_edit(
        BufferMirror(text="abcd", cursor=3, selection_start=3, selection_end=3)
    )
    mirror = engine.pull_buffer()

    assert mirror.text == "abcd"
    assert mirror.cursor == 3
    assert mirror.attributes["mode"] == "normal"


def test_status_events_are_published() -> None:
    engine = EditorEngine("abc")
    statuses: List[object] = []
    modes: List[object] = []
    engine.subscribe("status", statuses.append)
    engine.subscribe("mode.switch", modes.append)

    engine.feed("i<Esc>")

    assert "-- INSERT --" in statuses
    assert modes == ["insert", "normal"]
    assert engine.status == ""


def test_escape_at_line_start_steps_onto_the_previous_line() -> None:
    engine = EditorEngine("ab\ncd")

    engine.feed("j0i<Esc>")

    assert engine.mode == "normal"
    assert engine.cursor == 1


def test_escape_at_buffer_start_stays_put() -> None:
    engine = EditorEngine("abc")

    engine.feed("i<Esc>")

    assert engine.cursor == 0
