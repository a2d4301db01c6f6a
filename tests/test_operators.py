from modal_engine.engine import EditorEngine


def make_engine(text: str) -> EditorEngine:
    return EditorEngine(text)


def test_delete_word() -> None:
    engine = make_engine("hello world\n")

    engine.feed("dw")

    assert engine.get_buffer_text() == "world\n"
    assert engine.registers.get('"').text == "hello "
    assert engine.cursor == 0


def test_delete_word_at_line_end_keeps_newline() -> None:
    engine = make_engine("foo\nbar")

    engine.feed("dw")

    assert engine.get_buffer_text() == "\nbar"


def test_counts_multiply_across_operator_and_motion() -> None:
    engine = make_engine("one two three four five six seven")

    engine.feed("2d3w")

    assert engine.get_buffer_text() == "seven"


def test_delete_inner_parens() -> None:
    engine = make_engine("(foo (bar) baz)")
    engine.buffer.set_cursor(7)

    engine.feed("di(")

    assert engine.get_buffer_text() == "(foo () baz)"
    assert engine.registers.get('"').text == "bar"


def test_text_object_without_match_changes_nothing() -> None:
    engine = make_engine("plain")

    results = engine.feed("di(")

    assert engine.get_buffer_text() == "plain"
    assert results[-1].status == "no_match"
    assert engine.state.pending.active is False


def test_counted_line_delete() -> None:
    engine = make_engine("one\ntwo\nthree\nfour\nfive")

    engine.feed("3dd")

    assert engine.get_buffer_text() == "four\nfive"
    value = engine.registers.get('"')
    assert value.text == "one\ntwo\nthree\n"
    assert value.linewise is True


def test_deleting_the_last_line_removes_preceding_newline() -> None:
    engine = make_engine("a\nb")

    engine.feed("jdd")

    assert engine.get_buffer_text() == "a"
    assert engine.cursor == 0


def test_linewise_motions() -> None:
    engine = make_engine("a\nb\nc")
    engine.feed("dj")
    assert engine.get_buffer_text() == "c"

    engine = make_engine("a\nb\nc")
    engine.feed("dG")
    assert engine.get_buffer_text() == ""


def test_delete_then_put_before_round_trips() -> None:
    engine = make_engine("alpha beta")

    engine.feed("dwP")

    assert engine.get_buffer_text() == "alpha beta"


def test_x_and_swap_with_put() -> None:
    engine = make_engine("abc")

    engine.feed("xp")

    assert engine.get_buffer_text() == "bac"
    assert engine.cursor == 1


def test_x_on_last_character_clamps_cursor() -> None:
    engine = make_engine("abc")
    engine.feed("$x")

    assert engine.get_buffer_text() == "ab"
    assert engine.cursor == 1


def test_counted_x_writes_small_delete_register() -> None:
    engine = make_engine("abcdef")

    engine.feed("3x")

    assert engine.get_buffer_text() == "def"
    assert engine.registers.get("-").text == "abc"


def test_delete_to_line_end() -> None:
    engine = make_engine("hello world")

    engine.feed("wD")

    assert engine.get_buffer_text() == "hello "
    assert engine.cursor == 5


def test_delete_through_found_char() -> None:
    engine = make_engine("abcdef")

    engine.feed("dfc")

    assert engine.get_buffer_text() == "def"


def test_yank_line_and_put() -> None:
    engine = make_engine("a\nb")
    engine.feed("yyp")
    assert engine.get_buffer_text() == "a\na\nb"
    assert engine.cursor == 2

    engine = make_engine("a\nb")
    engine.feed("jyyP")
    assert engine.get_buffer_text() == "a\nb\nb"
    assert engine.cursor == 2


def test_linewise_put_after_last_line() -> None:
    engine = make_engine("a\nb")

    engine.feed("yyjp")

    assert engine.get_buffer_text() == "a\nb\na"
    assert engine.cursor == 4


def test_yank_inner_word_moves_to_start() -> None:
    engine = make_engine("foo bar")
    engine.buffer.set_cursor(5)

    engine.feed("yiw")

    assert engine.get_buffer_text() == "foo bar"
    assert engine.registers.get('"').text == "bar"
    assert engine.registers.get("0").text == "bar"
    assert engine.cursor == 4


def test_change_word_acts_like_change_to_word_end() -> None:
    engine = make_engine("foo bar")

    engine.feed("cwbaz<Esc>")

    assert engine.get_buffer_text() == "baz bar"
    assert engine.mode == "normal"
    assert engine.cursor == 2


def test_change_line_clears_the_whole_line() -> None:
    engine = make_engine("  foo\nbar")

    engine.feed("ccx<Esc>")

    assert engine.get_buffer_text() == "x\nbar"


def test_change_inside_quotes() -> None:
    engine = make_engine('say "hi" now')

    engine.feed('f"ci"yo<Esc>')

    assert engine.get_buffer_text() == 'say "yo" now'


def test_escape_cancels_pending_operator() -> None:
    engine = make_engine("abc")

    results = engine.feed("d<Esc>")

    assert results[-1].status == "cancelled"
    assert engine.get_buffer_text() == "abc"
    assert engine.state.pending.active is False


def test_indent_and_dedent() -> None:
    engine = make_engine("foo")
    engine.feed(">>")
    assert engine.get_buffer_text() == "  foo"
    assert engine.cursor == 2

    engine = make_engine("a\nb\nc\nd")
    engine.feed("3>>")
    assert engine.get_buffer_text() == "  a\n  b\n  c\nd"

    engine = make_engine("    foo")
    engine.feed("<<")
    assert engine.get_buffer_text() == "  foo"


def test_join_lines() -> None:
    engine = make_engine("a\n  b")
    engine.feed("J")
    assert engine.get_buffer_text() == "a b"

    engine = make_engine("a\nb\nc\nd")
    engine.feed("3J")
    assert engine.get_buffer_text() == "a b c\nd"


def test_toggle_case_and_replace() -> None:
    engine = make_engine("abc")
    engine.feed("~")
    assert engine.get_buffer_text() == "Abc"
    assert engine.cursor == 1

    engine = make_engine("abc")
    engine.feed("3rx")
    assert engine.get_buffer_text() == "xxx"
    assert engine.cursor == 0


def test_replace_past_line_end_fails_softly() -> None:
    engine = make_engine("abc")

    results = engine.feed("4rx")

    assert engine.get_buffer_text() == "abc"
    assert results[-1].status == "replace_failed"
