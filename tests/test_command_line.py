from typing import List

from modal_engine.engine import EditorEngine


def test_substitute_first_match_on_current_line() -> None:
    engine = EditorEngine("foo foo\nfoo")

    engine.feed(":s/foo/bar/<CR>")

    assert engine.get_buffer_text() == "bar foo\nfoo"
    assert engine.status == "1 substitution"
    assert engine.mode == "normal"


def test_substitute_whole_buffer_global() -> None:
    engine = EditorEngine("foo foo\nfoo")

    engine.feed(":%s/foo/bar/g<CR>")

    assert engine.get_buffer_text() == "bar bar\nbar"
    assert engine.status == "3 substitutions"
    assert engine.cursor == 8


def test_substitute_is_one_undo_step() -> None:
    engine = EditorEngine("foo\nfoo")

    engine.feed(":%s/foo/x/<CR>u")

    assert engine.get_buffer_text() == "foo\nfoo"


def test_substitute_supports_groups_and_escaped_delimiter() -> None:
    engine = EditorEngine("foo bar")
    engine.feed(r":s/(\w+) (\w+)/\2 \1/<CR>")
    assert engine.get_buffer_text() == "bar foo"

    engine = EditorEngine("a/b")
    engine.feed(r":s/a\/b/c/<CR>")
    assert engine.get_buffer_text() == "c"


def test_substitute_failures_are_soft() -> None:
    engine = EditorEngine("abc")

    results = engine.feed(":s/zzz/y/<CR>")
    assert results[-1].status == "pattern_not_found"
    assert engine.status == "pattern not found: zzz"

    results = engine.feed(":s/(/y/<CR>")
    assert results[-1].status == "invalid_pattern"
    assert engine.status == "invalid pattern: ("
    assert engine.get_buffer_text() == "abc"


def test_line_number_jumps() -> None:
    engine = EditorEngine("a\nb\nc\nd")

    engine.feed(":3<CR>")

    assert engine.cursor == 4


def test_search_forward_and_repeat() -> None:
    engine = EditorEngine("one two one two")

    engine.feed("/two<CR>")
    assert engine.cursor == 4
    assert engine.mode == "normal"

    engine.feed("n")
    assert engine.cursor == 12
    engine.feed("N")
    assert engine.cursor == 4


def test_search_backward_wraps() -> None:
    engine = EditorEngine("one two one")

    engine.feed("?one<CR>")

    assert engine.cursor == 8


def test_search_miss_reports_message() -> None:
    engine = EditorEngine("abc")

    results = engine.feed("/zzz<CR>")

    assert results[-1].status == "pattern_not_found"
    assert engine.status == "pattern not found"
    assert engine.cursor == 0


def test_search_word_under_cursor() -> None:
    engine = EditorEngine("foo bar foo")

    engine.feed("*")

    assert engine.cursor == 8
    assert engine.status == "/foo"


def test_unknown_command() -> None:
    engine = EditorEngine("abc")
    errors: List[object] = []
    engine.subscribe("command.error", errors.append)

    results = engine.feed(":frob<CR>")

    assert results[-1].status == "command_error"
    assert engine.status == "not an editor command: frob"
    assert errors == ["frob"]
    assert engine.mode == "normal"


def test_echo_sets_status() -> None:
    engine = EditorEngine("")

    engine.feed(":echo hi there<CR>")

    assert engine.status == "hi there"


def test_command_history_navigation() -> None:
    engine = EditorEngine("")
    engine.feed(":echo one<CR>")

    engine.feed(":<Up>")
    assert engine.command_line == ":echo one"

    engine.feed("<Down>")
    assert engine.command_line == ":"


def test_escape_abandons_command_line() -> None:
    engine = EditorEngine("abc")
    submitted: List[object] = []
    engine.subscribe("command.submit", submitted.append)

    engine.feed(":wq<Esc>")

    assert engine.mode == "normal"
    assert submitted == []


def test_registers_and_marks_listing() -> None:
    engine = EditorEngine("foo\nbar")
    engine.feed("yiwjlma")

    engine.feed(":registers<CR>")
    assert '"0 foo' in engine.status

    engine.feed(":marks<CR>")
    assert engine.status == "a 2:1"


def test_new_requests_an_empty_document() -> None:
    engine = EditorEngine("abc")
    requests: List[object] = []
    engine.subscribe("command.new", requests.append)

    engine.feed(":new<CR>")

    assert engine.mode == "normal"
    assert len(requests) == 1
    payload = requests[0]
    assert isinstance(payload, dict)
    assert payload["force"] is False
    assert payload["args"] == []
    assert payload["snapshot"].text == "abc"
    assert engine.get_buffer_text() == "abc"
