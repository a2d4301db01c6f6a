from modal_engine.buffer import BufferDocument
from modal_engine.editing import Span, resolve_text_object


def make_document(text: str) -> BufferDocument:
    return BufferDocument.from_text(text)


def test_inner_and_around_word() -> None:
    document = make_document("foo bar")

    assert resolve_text_object(document, 1, "w", around=False) == Span(0, 3)
    assert resolve_text_object(document, 1, "w", around=True) == Span(0, 4)


def test_around_word_at_line_end_takes_leading_blanks() -> None:
    document = make_document("foo bar")

    assert resolve_text_object(document, 5, "w", around=True) == Span(3, 7)


def test_big_word_spans_punctuation() -> None:
    document = make_document("a.b c")

    assert resolve_text_object(document, 0, "w", around=False) == Span(0, 1)
    assert resolve_text_object(document, 0, "W", around=False) == Span(0, 3)


def test_word_object_on_empty_line_matches_nothing() -> None:
    document = make_document("abc\n\ndef")

    assert resolve_text_object(document, 4, "w", around=False) is None


def test_quote_object() -> None:
    document = make_document('say "hi there" now')

    assert resolve_text_object(document, 6, '"', around=False) == Span(5, 13)
    assert resolve_text_object(document, 6, '"', around=True) == Span(4, 14)


def test_quote_object_skips_escaped_quotes() -> None:
    document = make_document('a "x\\"y" b')

    assert resolve_text_object(document, 3, '"', around=False) == Span(3, 7)


def test_quote_object_without_quotes() -> None:
    document = make_document("plain text")

    assert resolve_text_object(document, 2, '"', around=False) is None


def test_bracket_object_selects_innermost_pair() -> None:
    document = make_document("(foo (bar) baz)")

    assert resolve_text_object(document, 7, "(", around=False) == Span(6, 9)
    assert resolve_text_object(document, 7, ")", around=True) == Span(5, 10)
    assert resolve_text_object(document, 7, "b", around=False) == Span(6, 9)


def test_bracket_object_count_widens_to_outer_pair() -> None:
    document = make_document("(foo (bar) baz)")

    assert resolve_text_object(document, 7, "(", around=False, count=2) == Span(1, 14)


def test_bracket_object_with_cursor_on_a_bracket() -> None:
    document = make_document("(foo (bar) baz)")

    assert resolve_text_object(document, 5, "(", around=False) == Span(6, 9)
    assert resolve_text_object(document, 9, "(", around=False) == Span(6, 9)


def test_brace_alias_and_missing_pair() -> None:
    assert resolve_text_object(make_document("{x}"), 1, "B", around=False) == Span(1, 2)
    assert resolve_text_object(make_document("abc"), 1, "(", around=False) is None
    assert resolve_text_object(make_document("abc"), 1, "q", around=False) is None
