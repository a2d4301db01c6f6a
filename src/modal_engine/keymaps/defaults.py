"""Built-in keymaps that seed each mode with Vim's default bindings.

Keymaps: ``normal``, ``operator`` (keys after ``d``/``c``/``y``/``>``/``<``),
``visual`` (shared by charwise and linewise Visual), ``insert`` and
``command``. Motions and text objects are generated from their tables so
every mode that accepts them stays in sync.
"""

from __future__ import annotations

from typing import Callable, Iterable, Mapping, Sequence

from modal_engine.actions import command as command_actions
from modal_engine.actions import core as core_actions
from modal_engine.actions import edits as edit_actions
from modal_engine.actions import visual as visual_actions
from modal_engine.editing.motions import CHAR_MOTIONS, Motion
from modal_engine.editing.operators import Operator
from modal_engine.editing.text_objects import OBJECT_KEYS

from .models import ARGUMENT_CHAR, ActionRef, Binding, KeySequence
from .registry import KeymapRegistry

CHAR_ARGUMENT = {"argument": ARGUMENT_CHAR}

# motion -> key sequences; the first is the canonical one
MOTION_KEYS: Mapping[Motion, tuple[tuple[str, ...], ...]] = {
    Motion.LEFT: (("h",), ("LEFT",)),
    Motion.RIGHT: (("l",), ("RIGHT",), (" ",)),
    Motion.UP: (("k",), ("UP",)),
    Motion.DOWN: (("j",), ("DOWN",)),
    Motion.WORD_FORWARD: (("w",),),
    Motion.WORD_BACKWARD: (("b",),),
    Motion.WORD_END: (("e",),),
    Motion.WORD_END_BACKWARD: (("g", "e"),),
    Motion.BIG_WORD_FORWARD: (("W",),),
    Motion.BIG_WORD_BACKWARD: (("B",),),
    Motion.BIG_WORD_END: (("E",),),
    Motion.BIG_WORD_END_BACKWARD: (("g", "E"),),
    Motion.LINE_START: (("0",),),
    Motion.FIRST_NON_BLANK: (("^",),),
    Motion.LINE_END: (("$",),),
    Motion.DOCUMENT_START: (("g", "g"),),
    Motion.DOCUMENT_END: (("G",),),
    Motion.PARAGRAPH_FORWARD: (("}",),),
    Motion.PARAGRAPH_BACKWARD: (("{",),),
    Motion.MATCHING_BRACKET: (("%",),),
    Motion.FIND_CHAR: (("f",),),
    Motion.FIND_CHAR_BACKWARD: (("F",),),
    Motion.TILL_CHAR: (("t",),),
    Motion.TILL_CHAR_BACKWARD: (("T",),),
    Motion.REPEAT_FIND: ((";",),),
    Motion.REPEAT_FIND_REVERSE: ((",",),),
    Motion.SEARCH_NEXT: (("n",),),
    Motion.SEARCH_PREVIOUS: (("N",),),
}

OPERATOR_KEYS: Mapping[Operator, str] = {
    Operator.DELETE: "d",
    Operator.YANK: "y",
    Operator.CHANGE: "c",
    Operator.INDENT_RIGHT: ">",
    Operator.INDENT_LEFT: "<",
}


def _motion_action_id(motion: Motion) -> str:
    return f"motion.{motion.name.lower()}"


def _operator_action_id(operator: Operator) -> str:
    return f"operator.{operator.name.lower()}"


def _motion_actions() -> tuple[ActionRef, ...]:
    return tuple(
        ActionRef(
            id=_motion_action_id(motion),
            handler=core_actions.run_motion,
            description=f"Motion {motion.value}",
            metadata={
                "motion": motion.value,
                **(CHAR_ARGUMENT if motion in CHAR_MOTIONS else {}),
            },
        )
        for motion in MOTION_KEYS
    )


def _operator_actions() -> tuple[ActionRef, ...]:
    return tuple(
        ActionRef(
            id=_operator_action_id(operator),
            handler=core_actions.begin_operator,
            description=f"Operator {key}",
            metadata={"operator": operator.value},
        )
        for operator, key in OPERATOR_KEYS.items()
    )


def _action(
    action_id: str,
    handler: Callable[..., object],
    description: str,
    **metadata: object,
) -> ActionRef:
    return ActionRef(id=action_id, handler=handler, description=description, metadata=metadata)


DEFAULT_ACTIONS: tuple[ActionRef, ...] = (
    *_motion_actions(),
    *_operator_actions(),
    _action("textobject.select", core_actions.select_text_object, "Select a text object"),
    # mode switches
    _action("core.cancel", core_actions.cancel_pending, "Cancel the pending command"),
    _action("core.enter_visual", core_actions.enter_visual_mode, "Enter visual mode"),
    _action(
        "core.enter_visual_line", core_actions.enter_visual_line_mode, "Enter visual line mode"
    ),
    _action("core.enter_command", core_actions.enter_command_mode, "Enter command-line mode"),
    _action("core.search_forward", core_actions.enter_search_forward, "Search forward"),
    _action("core.search_backward", core_actions.enter_search_backward, "Search backward"),
    _action("core.search_word", core_actions.search_word_under_cursor, "Search word under cursor"),
    # history
    _action("core.undo", core_actions.undo, "Undo"),
    _action("core.redo", core_actions.redo, "Redo"),
    _action("core.set_mark", core_actions.set_mark, "Set a mark", **CHAR_ARGUMENT),
    _action(
        "core.jump_mark_line",
        core_actions.jump_to_mark,
        "Jump to a mark's line",
        **CHAR_ARGUMENT,
        linewise=True,
    ),
    _action("core.jump_mark", core_actions.jump_to_mark, "Jump to a mark", **CHAR_ARGUMENT),
    _action("core.select_register", core_actions.select_register, "Use register", **CHAR_ARGUMENT),
    _action("core.record_macro", core_actions.start_macro, "Record a macro", **CHAR_ARGUMENT),
    _action("core.stop_macro", core_actions.stop_macro, "Stop recording"),
    _action("core.play_macro", core_actions.play_macro, "Play a macro", **CHAR_ARGUMENT),
    # insert entry
    _action("edit.insert", edit_actions.enter_insert, "Insert before the cursor"),
    _action("edit.append", edit_actions.enter_insert, "Append after the cursor"),
    _action("edit.insert_line_start", edit_actions.enter_insert, "Insert at first non-blank"),
    _action("edit.append_line_end", edit_actions.enter_insert, "Append at line end"),
    _action("edit.open_below", edit_actions.enter_insert, "Open a line below"),
    _action("edit.open_above", edit_actions.enter_insert, "Open a line above"),
    # normal edits
    _action("edit.delete_char", edit_actions.operator_shorthand, "Delete characters"),
    _action(
        "edit.delete_char_before", edit_actions.operator_shorthand, "Delete characters before"
    ),
    _action("edit.delete_to_end", edit_actions.operator_shorthand, "Delete to line end"),
    _action("edit.change_to_end", edit_actions.operator_shorthand, "Change to line end"),
    _action("edit.substitute_char", edit_actions.operator_shorthand, "Substitute characters"),
    _action("edit.substitute_line", edit_actions.operator_shorthand, "Substitute lines"),
    _action("edit.yank_line", edit_actions.operator_shorthand, "Yank lines"),
    _action("edit.put_after", edit_actions.put_after, "Put after the cursor"),
    _action("edit.put_before", edit_actions.put_before, "Put before the cursor"),
    _action("edit.join", edit_actions.join_lines, "Join lines"),
    _action("edit.toggle_case", edit_actions.toggle_case, "Toggle case"),
    _action("edit.replace_char", edit_actions.replace_char, "Replace characters", **CHAR_ARGUMENT),
    _action("edit.repeat", edit_actions.repeat_last_change, "Repeat the last change"),
    # insert mode
    _action("insert.exit", edit_actions.exit_insert, "Leave insert mode"),
    _action("insert.backspace", edit_actions.insert_backspace, "Delete before the cursor"),
    _action("insert.newline", edit_actions.insert_newline, "Insert a line break"),
    _action("insert.tab", edit_actions.insert_tab, "Insert one indent unit"),
    _action("insert.dedent", edit_actions.insert_dedent, "Dedent the current line"),
    # visual mode
    _action("visual.exit", visual_actions.exit_visual, "Leave visual mode"),
    _action("visual.toggle_charwise", visual_actions.toggle_charwise, "Toggle charwise visual"),
    _action("visual.toggle_linewise", visual_actions.toggle_linewise, "Toggle linewise visual"),
    _action("visual.swap_anchor", visual_actions.swap_anchor, "Swap selection anchor"),
    _action("visual.yank_selection", visual_actions.yank_selection, "Yank the selection"),
    _action("visual.delete_selection", visual_actions.delete_selection, "Delete the selection"),
    _action("visual.change_selection", visual_actions.change_selection, "Change the selection"),
    _action("visual.indent_right", visual_actions.indent_selection, "Indent the selection"),
    _action("visual.indent_left", visual_actions.dedent_selection, "Dedent the selection"),
    _action("visual.toggle_case", visual_actions.toggle_case_selection, "Toggle selection case"),
    # command line
    _action("command.cancel", command_actions.cancel_command_line, "Cancel the command line"),
    _action("command.submit_line", command_actions.submit_command_line, "Submit the command line"),
    _action("command.backspace", command_actions.command_backspace, "Delete the last character"),
    _action("command.history_previous", command_actions.history_previous, "Previous command"),
    _action("command.history_next", command_actions.history_next, "Next command"),
)


def _bind(
    mode: str,
    name: str,
    action_id: str,
    *sequences: Sequence[str],
    when: tuple[str, ...] = (),
) -> list[Binding]:
    """One binding per key sequence; alternates get a numeric suffix."""

    bindings = []
    for index, keys in enumerate(sequences):
        suffix = "" if index == 0 else f".{index + 1}"
        bindings.append(
            Binding(
                id=f"{mode}.{name}{suffix}",
                mode=mode,
                sequence=KeySequence.from_strings(*keys),
                action_id=action_id,
                when=when,
            )
        )
    return bindings


def _motion_bindings(mode: str) -> list[Binding]:
    bindings: list[Binding] = []
    for motion, sequences in MOTION_KEYS.items():
        action_id = _motion_action_id(motion)
        bindings.extend(_bind(mode, action_id, action_id, *sequences))
    return bindings


def _text_object_bindings(mode: str) -> list[Binding]:
    bindings: list[Binding] = []
    for prefix in ("i", "a"):
        for key in OBJECT_KEYS:
            name = f"textobject.{prefix}{key}"
            bindings.extend(_bind(mode, name, "textobject.select", (prefix, key)))
    return bindings


def _operator_bindings(mode: str) -> list[Binding]:
    bindings: list[Binding] = []
    for operator, key in OPERATOR_KEYS.items():
        action_id = _operator_action_id(operator)
        bindings.extend(_bind(mode, action_id, action_id, (key,)))
    return bindings


# normal-mode commands: (binding name, action id, key sequences...)
NORMAL_COMMANDS: tuple[tuple[str, str, tuple[tuple[str, ...], ...]], ...] = (
    ("cancel", "core.cancel", (("ESC",),)),
    ("insert", "edit.insert", (("i",),)),
    ("append", "edit.append", (("a",),)),
    ("insert_line_start", "edit.insert_line_start", (("I",),)),
    ("append_line_end", "edit.append_line_end", (("A",),)),
    ("open_below", "edit.open_below", (("o",),)),
    ("open_above", "edit.open_above", (("O",),)),
    ("enter_visual", "core.enter_visual", (("v",),)),
    ("enter_visual_line", "core.enter_visual_line", (("V",),)),
    ("enter_command", "core.enter_command", ((":",),)),
    ("search_forward", "core.search_forward", (("/",),)),
    ("search_backward", "core.search_backward", (("?",),)),
    ("search_word", "core.search_word", (("*",),)),
    ("delete_char", "edit.delete_char", (("x",), ("DELETE",))),
    ("delete_char_before", "edit.delete_char_before", (("X",),)),
    ("delete_to_end", "edit.delete_to_end", (("D",),)),
    ("change_to_end", "edit.change_to_end", (("C",),)),
    ("substitute_char", "edit.substitute_char", (("s",),)),
    ("substitute_line", "edit.substitute_line", (("S",),)),
    ("yank_line", "edit.yank_line", (("Y",),)),
    ("put_after", "edit.put_after", (("p",),)),
    ("put_before", "edit.put_before", (("P",),)),
    ("join", "edit.join", (("J",),)),
    ("toggle_case", "edit.toggle_case", (("~",),)),
    ("replace_char", "edit.replace_char", (("r",),)),
    ("repeat", "edit.repeat", ((".",),)),
    ("undo", "core.undo", (("u",),)),
    ("redo", "core.redo", (("ctrl+r",),)),
    ("set_mark", "core.set_mark", (("m",),)),
    ("jump_mark_line", "core.jump_mark_line", (("'",),)),
    ("jump_mark", "core.jump_mark", (("`",),)),
    ("select_register", "core.select_register", (('"',),)),
    ("play_macro", "core.play_macro", (("@",),)),
)

VISUAL_COMMANDS: tuple[tuple[str, str, tuple[tuple[str, ...], ...]], ...] = (
    ("exit", "visual.exit", (("ESC",),)),
    ("toggle_charwise", "visual.toggle_charwise", (("v",),)),
    ("toggle_linewise", "visual.toggle_linewise", (("V",),)),
    ("swap_anchor", "visual.swap_anchor", (("o",),)),
    ("yank_selection", "visual.yank_selection", (("y",),)),
    ("delete_selection", "visual.delete_selection", (("d",), ("x",), ("DELETE",))),
    ("change_selection", "visual.change_selection", (("c",), ("s",))),
    ("indent_right", "visual.indent_right", ((">",),)),
    ("indent_left", "visual.indent_left", (("<",),)),
    ("toggle_case", "visual.toggle_case", (("~",),)),
    ("select_register", "core.select_register", (('"',),)),
    ("set_mark", "core.set_mark", (("m",),)),
    ("jump_mark_line", "core.jump_mark_line", (("'",),)),
    ("jump_mark", "core.jump_mark", (("`",),)),
)

INSERT_COMMANDS: tuple[tuple[str, str, tuple[tuple[str, ...], ...]], ...] = (
    ("exit", "insert.exit", (("ESC",),)),
    ("backspace", "insert.backspace", (("BACKSPACE",),)),
    ("newline", "insert.newline", (("ENTER",),)),
    ("tab", "insert.tab", (("TAB",),)),
    ("dedent", "insert.dedent", (("shift+TAB",),)),
)

COMMAND_LINE_COMMANDS: tuple[tuple[str, str, tuple[tuple[str, ...], ...]], ...] = (
    ("cancel", "command.cancel", (("ESC",),)),
    ("submit", "command.submit_line", (("ENTER",),)),
    ("backspace", "command.backspace", (("BACKSPACE",),)),
    ("history_previous", "command.history_previous", (("UP",),)),
    ("history_next", "command.history_next", (("DOWN",),)),
)


def _table_bindings(
    mode: str, table: Iterable[tuple[str, str, tuple[tuple[str, ...], ...]]]
) -> list[Binding]:
    bindings: list[Binding] = []
    for name, action_id, sequences in table:
        bindings.extend(_bind(mode, name, action_id, *sequences))
    return bindings


def _build_bindings() -> tuple[Binding, ...]:
    bindings: list[Binding] = []
    bindings.extend(_table_bindings("normal", NORMAL_COMMANDS))
    bindings.extend(_motion_bindings("normal"))
    bindings.extend(_operator_bindings("normal"))
    # q{reg} starts recording; a bare q stops it
    bindings.extend(
        _bind("normal", "record_macro", "core.record_macro", ("q",), when=("!recording",))
    )
    bindings.extend(_bind("normal", "stop_macro", "core.stop_macro", ("q",), when=("recording",)))

    bindings.extend(_bind("operator", "cancel", "core.cancel", ("ESC",)))
    bindings.extend(_motion_bindings("operator"))
    bindings.extend(_operator_bindings("operator"))
    bindings.extend(_text_object_bindings("operator"))

    bindings.extend(_table_bindings("visual", VISUAL_COMMANDS))
    bindings.extend(_motion_bindings("visual"))
    bindings.extend(_text_object_bindings("visual"))

    bindings.extend(_table_bindings("insert", INSERT_COMMANDS))
    bindings.extend(_table_bindings("command", COMMAND_LINE_COMMANDS))
    return tuple(bindings)


DEFAULT_BINDINGS: tuple[Binding, ...] = _build_bindings()


def load_default_keymaps(
    registry: KeymapRegistry,
    *,
    replace: bool = False,
    extra_bindings: Iterable[Binding] | None = None,
    include_actions: Sequence[str] | None = None,
    exclude_actions: Sequence[str] | None = None,
    include_bindings: Sequence[str] | None = None,
    exclude_bindings: Sequence[str] | None = None,
    per_mode_overrides: Mapping[str, Iterable[Binding]] | None = None,
) -> None:
    """Register built-in actions and bindings for every mode.

    Bindings whose action was filtered out are skipped rather than failing
    registration.
    """

    allowed_actions = _build_filters(include_actions, exclude_actions)
    allowed_bindings = _build_filters(include_bindings, exclude_bindings)

    registered: set[str] = set()
    for action in DEFAULT_ACTIONS:
        if not _selected(action.id, allowed_actions):
            continue
        registry.register_action(action, replace=replace)
        registered.add(action.id)

    for binding in DEFAULT_BINDINGS:
        if binding.action_id not in registered:
            continue
        if not _selected(binding.id, allowed_bindings):
            continue
        registry.register_binding(binding, replace=replace)

    if extra_bindings:
        for binding in extra_bindings:
            registry.register_binding(binding, replace=replace)

    if per_mode_overrides:
        for mode, bindings in per_mode_overrides.items():
            for binding in bindings:
                if binding.mode != mode:
                    raise ValueError(
                        f"Override binding '{binding.id}' must target mode '{mode}'"
                    )
                registry.register_binding(binding, replace=True)


def _build_filters(
    include: Sequence[str] | None, exclude: Sequence[str] | None
) -> tuple[set[str] | None, set[str]]:
    include_set = set(include) if include else None
    exclude_set = set(exclude or ())
    return include_set, exclude_set


def _selected(item_id: str, filters: tuple[set[str] | None, set[str]]) -> bool:
    include, exclude = filters
    if include is not None and item_id not in include:
        return False
    if item_id in exclude:
        return False
    return True


__all__ = ["load_default_keymaps", "DEFAULT_ACTIONS", "DEFAULT_BINDINGS"]
