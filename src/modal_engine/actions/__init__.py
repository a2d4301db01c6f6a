"""High-level editing verbs reused across modes."""

from .core import (
    begin_operator,
    cancel_pending,
    enter_command_mode,
    enter_search_backward,
    enter_search_forward,
    enter_visual_line_mode,
    enter_visual_mode,
    jump_to_mark,
    play_macro,
    redo,
    run_motion,
    search_word_under_cursor,
    select_register,
    select_text_object,
    set_mark,
    start_macro,
    stop_macro,
    undo,
)
from .edits import (
    enter_insert,
    exit_insert,
    insert_backspace,
    insert_dedent,
    insert_newline,
    insert_tab,
    join_lines,
    operator_shorthand,
    put_after,
    put_before,
    repeat_last_change,
    replace_char,
    toggle_case,
)
from .visual import (
    change_selection,
    dedent_selection,
    delete_selection,
    exit_visual,
    indent_selection,
    swap_anchor,
    toggle_case_selection,
    toggle_charwise,
    toggle_linewise,
    yank_selection,
)
from .command import (
    cancel_command_line,
    command_backspace,
    history_next,
    history_previous,
    submit_command_line,
)

__all__ = [
    "begin_operator",
    "cancel_pending",
    "enter_command_mode",
    "enter_search_backward",
    "enter_search_forward",
    "enter_visual_line_mode",
    "enter_visual_mode",
    "jump_to_mark",
    "play_macro",
    "redo",
    "run_motion",
    "search_word_under_cursor",
    "select_register",
    "select_text_object",
    "set_mark",
    "start_macro",
    "stop_macro",
    "undo",
    "enter_insert",
    "exit_insert",
    "insert_backspace",
    "insert_dedent",
    "insert_newline",
    "insert_tab",
    "join_lines",
    "operator_shorthand",
    "put_after",
    "put_before",
    "repeat_last_change",
    "replace_char",
    "toggle_case",
    "change_selection",
    "dedent_selection",
    "delete_selection",
    "exit_visual",
    "indent_selection",
    "swap_anchor",
    "toggle_case_selection",
    "toggle_charwise",
    "toggle_linewise",
    "yank_selection",
    "cancel_command_line",
    "command_backspace",
    "history_next",
    "history_previous",
    "submit_command_line",
]
