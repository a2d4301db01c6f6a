import pytest

from modal_engine.buffer import Buffer, BufferDocument, UndoEntry, UndoHistory
from modal_engine.config import EngineConfig
from modal_engine.engine import EditorEngine


def test_undo_and_redo_restore_text_and_cursor() -> None:
    engine = EditorEngine("hello world")

    engine.feed("wdw")
    assert engine.get_buffer_text() == "hello "

    engine.feed("u")
    assert engine.get_buffer_text() == "hello world"
    assert engine.cursor == 6
    assert engine.status == "undone"

    engine.feed("<C-r>")
    assert engine.get_buffer_text() == "hello "
    assert engine.cursor == 5
    assert engine.status == "redone"


def test_nothing_to_undo_is_a_soft_failure() -> None:
    engine = EditorEngine("abc")

    results = engine.feed("u")

    assert results[-1].status == "nothing_to_undo"
    assert engine.status == "nothing to undo"
    assert engine.get_buffer_text() == "abc"


def test_insert_session_undoes_in_one_step() -> None:
    engine = EditorEngine("")

    engine.feed("ihello<CR>world<Esc>")
    assert engine.get_buffer_text() == "hello\nworld"

    engine.feed("u")
    assert engine.get_buffer_text() == ""


def test_open_line_undoes_with_its_text() -> None:
    engine = EditorEngine("a")

    engine.feed("obc<Esc>u")

    assert engine.get_buffer_text() == "a"


def test_undo_history_is_capped() -> None:
    engine = EditorEngine("abcdefg", config=EngineConfig(undo_limit=3))

    engine.feed("xxxxx")
    assert engine.get_buffer_text() == "fg"

    engine.feed("uuu")
    assert engine.get_buffer_text() == "cdefg"

    results = engine.feed("u")
    assert results[-1].status == "nothing_to_undo"


def test_configured_undo_limit_reaches_the_buffer() -> None:
    engine = EditorEngine("abc", config=EngineConfig(undo_limit=3))

    assert engine.buffer.undo_history.limit == 3


def test_buffer_keeps_an_empty_history_it_is_given() -> None:
    history = UndoHistory(2)
    document = BufferDocument.from_text("")

    buffer = Buffer(document=document, undo=history)

    assert buffer.undo_history is history
    assert buffer.document is document


def test_new_change_clears_redo() -> None:
    engine = EditorEngine("abc")

    engine.feed("xux")
    results = engine.feed("<C-r>")

    assert results[-1].status == "nothing_to_redo"
    assert engine.get_buffer_text() == "bc"


def test_dot_repeats_delete() -> None:
    engine = EditorEngine("a b c d")

    engine.feed("dw.")

    assert engine.get_buffer_text() == "c d"


def test_dot_repeats_counted_insert() -> None:
    engine = EditorEngine("")

    engine.feed("3ix<Esc>")
    assert engine.get_buffer_text() == "xxx"

    engine.feed(".")
    assert engine.get_buffer_text() == "xxxxxx"


def test_dot_repositions_like_the_original_insert() -> None:
    engine = EditorEngine("a\nb")

    engine.feed("A;<Esc>j.")

    assert engine.get_buffer_text() == "a;\nb;"


def test_dot_count_replaces_original_count() -> None:
    engine = EditorEngine("abcdef")

    engine.feed("x3.")

    assert engine.get_buffer_text() == "ef"


def test_dot_repeats_change_with_typed_text() -> None:
    engine = EditorEngine("aa bb cc")

    engine.feed("cwX<Esc>w.")

    assert engine.get_buffer_text() == "X X cc"


def test_dot_records_backspaced_text() -> None:
    engine = EditorEngine("")

    engine.feed("iab<BS>c<Esc>")
    assert engine.get_buffer_text() == "ac"

    engine.feed(".")
    assert engine.get_buffer_text() == "aacc"


def test_dot_is_a_single_undo_step() -> None:
    engine = EditorEngine("a b c")

    engine.feed("dw.u")

    assert engine.get_buffer_text() == "b c"


def test_dot_without_a_change() -> None:
    engine = EditorEngine("abc")

    results = engine.feed(".")

    assert results[-1].status == "nothing_to_repeat"
    assert engine.get_buffer_text() == "abc"


def test_undo_history_moves_entries_between_stacks() -> None:
    history = UndoHistory(limit=2)
    for text in ("a", "ab", "abc"):
        history.push(UndoEntry(text=text, cursor=0))

    assert len(history) == 2
    restored = history.undo(UndoEntry(text="abcd", cursor=3))

    assert restored == UndoEntry(text="abc", cursor=0)
    assert history.can_redo() and history.redo_depth == 1
    assert history.redo(UndoEntry(text="abc", cursor=0)) == UndoEntry(text="abcd", cursor=3)
    assert not history.can_redo()


def test_undo_history_push_clears_redo() -> None:
    history = UndoHistory()
    history.push(UndoEntry(text="", cursor=0))
    history.undo(UndoEntry(text="x", cursor=0))

    history.push(UndoEntry(text="", cursor=0))

    assert history.redo_depth == 0
    assert history.can_undo()
    assert history.redo(UndoEntry(text="y", cursor=0)) is None


def test_undo_history_requires_positive_limit() -> None:
    with pytest.raises(ValueError):
        UndoHistory(limit=0)
