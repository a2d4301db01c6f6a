from modal_engine.buffer import MemoryClipboard, RegisterBank, RegisterValue
from modal_engine.engine import EditorEngine


def make_bank() -> RegisterBank:
    return RegisterBank(clipboard=MemoryClipboard())


def test_yank_updates_unnamed_and_yank_registers() -> None:
    bank = make_bank()

    bank.write('"', "foo", is_yank=True)

    assert bank.get('"').text == "foo"
    assert bank.get("0").text == "foo"
    assert bank.get("1").text == ""


def test_uppercase_name_appends() -> None:
    bank = make_bank()

    bank.write("a", "foo", is_yank=True)
    bank.write("A", "bar", is_yank=True)

    assert bank.get("a").text == "foobar"
    assert bank.get('"').text == "foobar"


def test_black_hole_discards() -> None:
    bank = make_bank()
    bank.write('"', "keep", is_yank=True)

    assert bank.write("_", "gone", is_yank=False) is False

    assert bank.get('"').text == "keep"
    assert bank.read("_").text == ""


def test_multiline_deletes_shift_numbered_registers() -> None:
    bank = make_bank()

    bank.write('"', "one\n", is_yank=False)
    bank.write('"', "two\n", is_yank=False)
    bank.write('"', "x", is_yank=False)

    assert bank.get("1").text == "two\n"
    assert bank.get("2").text == "one\n"
    assert bank.get("-").text == "x"
    assert bank.get('"').text == "x"


def test_read_falls_back_to_unnamed() -> None:
    bank = make_bank()
    bank.write('"', "fallback", is_yank=True)

    assert bank.read("q").text == "fallback"
    assert bank.get("q").text == ""


def test_clipboard_registers_mirror_to_provider() -> None:
    clipboard = MemoryClipboard()
    bank = RegisterBank(clipboard=clipboard)

    bank.write("*", "clip", is_yank=True)

    assert clipboard.text == "clip"
    assert clipboard.writes == 1
    assert bank.get("+").text == "clip"


def test_register_type_follows_trailing_newline() -> None:
    assert RegisterValue.of("line\n").linewise is True
    assert RegisterValue.of("word").linewise is False


def test_load_and_clear() -> None:
    bank = make_bank()
    bank.load({"a": "text", "b": RegisterValue(text="x\n", type="linewise")})

    assert bank.get("a").text == "text"
    assert bank.get("b").linewise is True
    assert list(bank) == ["a", "b"]

    bank.clear()
    assert list(bank) == []


def test_named_yank_and_append_through_engine() -> None:
    engine = EditorEngine("foo bar")

    engine.feed('"ayww"Ayw')

    assert engine.registers.get("a").text == "foo bar"


def test_register_prefix_applies_to_one_command() -> None:
    engine = EditorEngine("foo bar")

    engine.feed('"ayiwwyiw')

    assert engine.registers.get("a").text == "foo"
    assert engine.registers.get('"').text == "bar"


def test_put_from_named_register() -> None:
    engine = EditorEngine("foo bar")

    engine.feed('"ayiw$"ap')

    assert engine.get_buffer_text() == "foo barfoo"


def test_black_hole_delete_leaves_unnamed_untouched() -> None:
    engine = EditorEngine("foo bar")

    engine.feed('"_dw')

    assert engine.get_buffer_text() == "bar"
    assert engine.registers.get('"').text == ""


def test_line_deletes_through_engine_rotate() -> None:
    engine = EditorEngine("a\nb\nc")

    engine.feed("dddd")

    assert engine.get_buffer_text() == "c"
    assert engine.registers.get("1").text == "b\n"
    assert engine.registers.get("2").text == "a\n"


def test_clipboard_yank_through_engine() -> None:
    clipboard = MemoryClipboard()
    engine = EditorEngine("foo\nbar", clipboard=clipboard)

    engine.feed('"*yy')

    assert clipboard.text == "foo\n"
    assert engine.registers.get("+").text == "foo\n"


def test_invalid_register_name() -> None:
    engine = EditorEngine("foo")

    results = engine.feed('"!')

    assert results[-1].status == "invalid_register"
    assert engine.status == "invalid register: !"
