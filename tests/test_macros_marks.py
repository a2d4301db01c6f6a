from modal_engine.config import EngineConfig
from modal_engine.engine import EditorEngine
from modal_engine.modes.keymap_helpers import parse_keys


def test_record_and_replay_macro_with_count() -> None:
    engine = EditorEngine("abc\nabc\nabc")

    engine.feed("qaxjq")
    assert engine.state.macros.recording is None
    assert [key.key for key in engine.state.macros.get("a")] == ["x", "j"]

    engine.feed("2@a")

    assert engine.get_buffer_text() == "bc\nbc\nbc"


def test_recording_sets_status_and_flag() -> None:
    engine = EditorEngine("abc")

    engine.feed("qa")
    assert engine.status == "recording @a"
    assert engine.context.extras["keymap_flags"]["recording"] is True

    engine.feed("q")
    assert engine.status == "recorded @a"
    assert engine.context.extras["keymap_flags"]["recording"] is False


def test_at_at_replays_last_macro() -> None:
    engine = EditorEngine("abcd")

    engine.feed("qaxq@a@@")

    assert engine.get_buffer_text() == "d"


def test_uppercase_macro_name_appends() -> None:
    engine = EditorEngine("abcdef")

    engine.feed("qaxqqAxq@a")

    assert engine.get_buffer_text() == "ef"


def test_unknown_macro_is_a_soft_failure() -> None:
    engine = EditorEngine("abc")

    results = engine.feed("@z")

    assert results[-1].status == "unknown_macro"
    assert engine.status == "no macro @z"
    assert engine.get_buffer_text() == "abc"


def test_self_invoking_macro_stops_at_depth_limit() -> None:
    engine = EditorEngine("abcdef", config=EngineConfig(macro_depth_limit=3))
    engine.state.macros.set("a", tuple(parse_keys("x@a")))

    engine.feed("@a")

    assert engine.get_buffer_text() == "def"
    assert engine.state.macros.playing is False


def test_set_and_jump_to_mark() -> None:
    engine = EditorEngine("  abc\ndef")

    engine.feed("3lma")
    engine.feed("j")
    assert engine.cursor == 8

    engine.feed("`a")
    assert engine.cursor == 3

    engine.feed("j'a")
    assert engine.cursor == 2


def test_previous_position_mark() -> None:
    engine = EditorEngine("abc\ndef")

    engine.feed("lmaj`a")
    assert engine.cursor == 1

    engine.feed("`'")
    assert engine.cursor == 5


def test_unset_mark_reports_message() -> None:
    engine = EditorEngine("abc")

    results = engine.feed("`z")

    assert results[-1].status == "mark_unset"
    assert engine.status == "mark not set: z"


def test_stale_mark_is_clamped_on_use() -> None:
    engine = EditorEngine("abcdef")

    engine.feed("$ma0d$`a")

    assert engine.get_buffer_text() == ""
    assert engine.cursor == 0


def test_replacing_the_buffer_drops_marks() -> None:
    engine = EditorEngine("abc")
    engine.feed("ma")

    engine.replace_entire_buffer("xyz")

    assert "a" not in engine.marks
