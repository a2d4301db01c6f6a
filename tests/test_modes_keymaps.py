from __future__ import annotations

from typing import Dict, List, Optional

import pytest

from modal_engine.buffer import Buffer, RegisterBank
from modal_engine.keymaps import Binding, KeySequence, KeymapRegistry, load_default_keymaps
from modal_engine.modes import (
    CommandMode,
    InsertMode,
    KeyInput,
    ModeBus,
    ModeContext,
    NormalMode,
    VisualLineMode,
    VisualMode,
)
from modal_engine.modes.mode_manager import ModeManager

ALL_MODES = (NormalMode, InsertMode, VisualMode, VisualLineMode, CommandMode)


def make_manager(text: str = "", registry: Optional[KeymapRegistry] = None) -> ModeManager:
    context = ModeContext(
        buffer=Buffer.from_text(text),
        registers=RegisterBank(),
        bus=ModeBus(),
    )
    manager = ModeManager(context, keymap_registry=registry)
    for mode_cls in ALL_MODES:
        manager.register_mode(mode_cls)
    return manager


def press(manager: ModeManager, *keys: str) -> None:
    for key in keys:
        text = key if len(key) == 1 else None
        manager.handle_key(KeyInput(key=key, text=text))


def collect(manager: ModeManager, event: str) -> List[object]:
    seen: List[object] = []
    manager.context.bus.subscribe(event, seen.append)
    return seen


def test_manager_publishes_keymap_services() -> None:
    manager = make_manager()
    extras = manager.context.extras

    assert extras["keymap_registry"] is manager.keymap_registry
    assert extras["keymap_resolver"] is manager.keymap_resolver
    assert extras["mode_manager"] is manager
    assert manager.mode_name == "normal"


def test_register_mode_twice_fails() -> None:
    manager = make_manager()

    with pytest.raises(ValueError):
        manager.register_mode(NormalMode)
    with pytest.raises(KeyError):
        manager.switch_mode("replace")


def test_mode_can_run_outside_the_manager() -> None:
    context = make_manager("abc").context
    mode = NormalMode(context)

    result = mode.handle_key(KeyInput(key="i"))

    assert result.switch_to == "insert"
    assert result.consumed is True


def test_insert_mode_types_unbound_text() -> None:
    manager = make_manager()

    press(manager, "i", "h", "i")

    assert manager.context.buffer.text == "hi"
    assert manager.context.buffer.cursor == 2


def test_custom_registry_sequence_is_pending_then_matches() -> None:
    registry = KeymapRegistry()
    load_default_keymaps(registry)
    registry.register_binding(
        Binding(
            id="normal.zi",
            mode="normal",
            sequence=KeySequence.from_strings("z", "i"),
            action_id="edit.insert",
        )
    )
    manager = make_manager(registry=registry)

    pending = manager.handle_key(KeyInput(key="z", text="z"))
    assert pending.status == "pending"
    assert manager.mode_name == "normal"

    press(manager, "i")
    assert manager.mode_name == "insert"


def test_unbound_key_cancels_pending_count() -> None:
    manager = make_manager("abc")

    press(manager, "3")
    assert manager.context.state.pending.count == "3"

    result = manager.handle_key(KeyInput(key="Q", text="Q"))

    assert result.status == "cancelled"
    assert manager.context.state.pending.active is False


def test_zero_is_a_motion_unless_a_count_is_in_progress() -> None:
    manager = make_manager("abcdefghijklmnop")
    manager.context.buffer.set_cursor(5)

    press(manager, "0")
    assert manager.context.buffer.cursor == 0

    press(manager, "1", "0", "l")
    assert manager.context.buffer.cursor == 10


def test_mode_switches_are_published() -> None:
    manager = make_manager("abc")
    switches = collect(manager, "mode.switch")

    press(manager, "i", "ESC", "v", "ESC")

    assert switches == ["insert", "normal", "visual", "normal"]


def test_visual_selection_and_yank() -> None:
    manager = make_manager("alpha")

    press(manager, "v", "l")
    assert manager.context.buffer.state.selection == (0, 2)

    press(manager, "y")
    assert manager.mode_name == "normal"
    assert manager.context.registers.get('"').text == "al"


def test_visual_swap_anchor() -> None:
    manager = make_manager("abcd")

    press(manager, "v", "l", "o")

    assert manager.context.buffer.cursor == 0
    assert manager.context.state.visual.anchor == 1
    assert manager.context.buffer.state.selection == (0, 2)


def test_visual_change_switches_to_insert() -> None:
    manager = make_manager("alpha")

    press(manager, "v", "l", "c")

    assert manager.mode_name == "insert"
    assert manager.context.buffer.text == "pha"


def test_visual_line_selection_covers_whole_lines() -> None:
    manager = make_manager("one\ntwo\nthree")
    manager.context.buffer.set_cursor(1)

    press(manager, "V", "j")

    assert manager.mode_name == "visual_line"
    assert manager.context.buffer.state.selection == (0, 8)


def test_command_line_submit_publishes_text() -> None:
    manager = make_manager()
    submitted = collect(manager, "command.submit")

    press(manager, ":", "w", "q", "ENTER")

    assert manager.mode_name == "normal"
    assert submitted == [":wq"]


@pytest.mark.parametrize(
    ("command", "writes", "quits", "force"),
    [
        ("wq", 1, 1, False),
        ("x", 1, 1, False),
        ("w!", 1, 0, True),
        ("q!", 0, 1, True),
    ],
)
def test_file_commands_emit_requests(command: str, writes: int, quits: int, force: bool) -> None:
    manager = make_manager("abc")
    write_events = collect(manager, "command.write")
    quit_events = collect(manager, "command.quit")

    press(manager, ":", *command, "ENTER")

    assert len(write_events) == writes
    assert len(quit_events) == quits
    payloads: List[Dict[str, object]] = [*write_events, *quit_events]  # type: ignore[list-item]
    assert all(payload["force"] is force for payload in payloads)


def test_edit_command_carries_arguments() -> None:
    manager = make_manager()
    edits = collect(manager, "command.edit")

    press(manager, ":", *"e! notes.txt", "ENTER")

    assert len(edits) == 1
    payload = edits[0]
    assert isinstance(payload, dict)
    assert payload["force"] is True
    assert payload["args"] == ["notes.txt"]


def test_backspace_on_empty_command_line_cancels() -> None:
    manager = make_manager("abc")

    press(manager, ":")
    assert manager.mode_name == "command"
    press(manager, "BACKSPACE")

    assert manager.mode_name == "normal"
