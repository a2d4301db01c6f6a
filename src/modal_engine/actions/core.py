"""Core action implementations shared across modes."""

from __future__ import annotations

from typing import TYPE_CHECKING, cast

from modal_engine.buffer.marks import is_mark_name
from modal_engine.editing.motions import Motion, MotionRequest, apply_motion, clamp_to_char
from modal_engine.editing.operators import Operator
from modal_engine.editing.text_objects import resolve_text_object, text_object_word
from modal_engine.editing.types import SearchSpec
from modal_engine.modes.base_mode import ActionRequest, ModeContext, ModeResult
from modal_engine.modes.operator_pipeline import OperatorPipeline
from modal_engine.modes.selection import sync_selection
from modal_engine.runtime import telemetry

if TYPE_CHECKING:
    from modal_engine.modes.mode_manager import ModeManager

REGISTER_NAMES = frozenset('"-_*+0123456789') | frozenset(
    "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"
)


def _logger_name(context: ModeContext) -> str:
    return context.state.config.logger_name


def _soft_fail(
    context: ModeContext, reason: str, message: str | None = None, **data: object
) -> ModeResult:
    telemetry.soft_failure(reason, data=dict(data), logger_name=_logger_name(context))
    return ModeResult(consumed=True, status=reason, message=message)


# ------------------------------------------------------------------- modes


def enter_visual_mode(context: ModeContext, request: ActionRequest) -> ModeResult:
    del request
    return ModeResult(consumed=True, switch_to="visual", message="-- VISUAL --")


def enter_visual_line_mode(context: ModeContext, request: ActionRequest) -> ModeResult:
    del request
    return ModeResult(consumed=True, switch_to="visual_line", message="-- VISUAL LINE --")


def enter_command_mode(context: ModeContext, request: ActionRequest) -> ModeResult:
    del request
    context.state.command_line.reset(":")
    return ModeResult(consumed=True, switch_to="command", status="enter_command")


def enter_search_forward(context: ModeContext, request: ActionRequest) -> ModeResult:
    del request
    context.state.command_line.reset("/")
    return ModeResult(consumed=True, switch_to="command", status="enter_search")


def enter_search_backward(context: ModeContext, request: ActionRequest) -> ModeResult:
    del request
    context.state.command_line.reset("?")
    return ModeResult(consumed=True, switch_to="command", status="enter_search")


def cancel_pending(context: ModeContext, request: ActionRequest) -> ModeResult:
    del request
    context.state.pending.reset()
    return ModeResult(consumed=True, status="cancelled")


# ----------------------------------------------------------------- motions


def run_motion(context: ModeContext, request: ActionRequest) -> ModeResult:
    """Move the cursor, or hand the motion to a pending operator.

    Vertical motions keep the sticky column in ``BufferState.desired_column``
    so ``j``/``k`` through short lines return to the original column.
    """

    motion = Motion(str(request.metadata["motion"]))
    state = context.state
    if state.pending.operator is not None:
        return OperatorPipeline(context).motion(
            motion, count=request.count, has_count=request.has_count, char=request.argument
        )

    buffer = context.buffer
    document = buffer.document
    cursor = buffer.cursor
    result = apply_motion(
        document,
        cursor,
        motion,
        MotionRequest(
            count=request.count,
            has_count=request.has_count,
            char=request.argument,
            desired_column=buffer.state.desired_column,
            last_find=state.last_find,
            search=state.search,
        ),
    )
    if result.failed:
        return _soft_fail(context, "motion_failed", motion=motion.value, offset=cursor)

    if result.find is not None:
        state.last_find = result.find
    if result.jump:
        state.marks.previous_position = cursor
    buffer.set_cursor(clamp_to_char(document, result.offset))
    if result.desired_column is not None:
        buffer.state.desired_column = result.desired_column

    if state.visual.active:
        sync_selection(context)
        return ModeResult(consumed=True, status="visual_select")
    return ModeResult(consumed=True, status="motion")


def select_text_object(context: ModeContext, request: ActionRequest) -> ModeResult:
    """``i``/``a`` + object key: operator target in Operator-pending, selection in Visual."""

    prefix, key = request.match.binding.sequence.tokens[-2:]
    around = prefix == "a"
    if context.state.pending.operator is not None:
        return OperatorPipeline(context).text_object(key, around=around, count=request.count)

    if not context.state.visual.active:
        return _soft_fail(context, "no_target", key=key)
    span = resolve_text_object(
        context.buffer.document, context.buffer.cursor, key, around=around, count=request.count
    )
    if span is None:
        return _soft_fail(context, "no_match", key=key)
    context.state.visual.anchor = span.start
    context.buffer.set_cursor(max(span.start, span.end - 1))
    sync_selection(context)
    return ModeResult(consumed=True, status="visual_select")


# --------------------------------------------------------------- operators


def begin_operator(context: ModeContext, request: ActionRequest) -> ModeResult:
    operator = Operator(str(request.metadata["operator"]))
    return OperatorPipeline(context).begin(
        operator, count=request.count, has_count=request.has_count
    )


# ------------------------------------------------------------------- marks


def set_mark(context: ModeContext, request: ActionRequest) -> ModeResult:
    name = request.argument or ""
    if not is_mark_name(name):
        return _soft_fail(context, "invalid_mark", f"invalid mark: {name}", mark=name)
    context.state.marks.set(name, context.buffer.cursor)
    return ModeResult(consumed=True, status="mark_set")


def jump_to_mark(context: ModeContext, request: ActionRequest) -> ModeResult:
    """Backtick jump: exact offset. Quote jump: first non-blank of the mark's line."""

    name = request.argument or ""
    marks = context.state.marks
    offset = marks.get(name)
    if offset is None:
        return _soft_fail(context, "mark_unset", f"mark not set: {name}", mark=name)

    buffer = context.buffer
    document = buffer.document
    target = clamp_to_char(document, offset)
    if request.metadata.get("linewise"):
        target = document.first_non_blank(target)
    marks.previous_position = buffer.cursor
    buffer.set_cursor(target)
    if context.state.visual.active:
        sync_selection(context)
    return ModeResult(consumed=True, status="mark_jump")


# ------------------------------------------------------------------ search


def search_word_under_cursor(context: ModeContext, request: ActionRequest) -> ModeResult:
    buffer = context.buffer
    span = text_object_word(buffer.document, buffer.cursor, around=False)
    word = buffer.get_text_range(span.start, span.end) if span is not None else ""
    if not word.strip():
        return _soft_fail(context, "no_word", "no string under cursor")

    context.state.search = SearchSpec(term=word)
    result = apply_motion(
        buffer.document,
        buffer.cursor,
        Motion.SEARCH_NEXT,
        count=request.count,
        search=context.state.search,
    )
    if result.failed:
        return _soft_fail(context, "pattern_not_found", "pattern not found", term=word)
    context.state.marks.previous_position = buffer.cursor
    buffer.set_cursor(result.offset)
    return ModeResult(consumed=True, status="search", message=f"/{word}")


# -------------------------------------------------------------- undo/redo


def undo(context: ModeContext, request: ActionRequest) -> ModeResult:
    buffer = context.buffer
    changed = False
    for _ in range(request.count):
        if not buffer.undo():
            break
        changed = True
    if not changed:
        return _soft_fail(context, "nothing_to_undo", "nothing to undo")
    buffer.set_cursor(clamp_to_char(buffer.document, buffer.cursor))
    return ModeResult(consumed=True, status="undone", message="undone")


def redo(context: ModeContext, request: ActionRequest) -> ModeResult:
    buffer = context.buffer
    changed = False
    for _ in range(request.count):
        if not buffer.redo():
            break
        changed = True
    if not changed:
        return _soft_fail(context, "nothing_to_redo", "nothing to redo")
    buffer.set_cursor(clamp_to_char(buffer.document, buffer.cursor))
    return ModeResult(consumed=True, status="redone", message="redone")


# --------------------------------------------------------------- registers


def select_register(context: ModeContext, request: ActionRequest) -> ModeResult:
    name = request.argument or ""
    if name not in REGISTER_NAMES:
        return _soft_fail(context, "invalid_register", f"invalid register: {name}")
    context.state.pending.register = name
    return ModeResult(consumed=True, status="pending")


# ------------------------------------------------------------------ macros


def start_macro(context: ModeContext, request: ActionRequest) -> ModeResult:
    name = request.argument or ""
    if not context.state.macros.start(name):
        return _soft_fail(context, "invalid_register", f"invalid register: {name}")
    return ModeResult(consumed=True, status="recording", message=f"recording @{name}")


def stop_macro(context: ModeContext, request: ActionRequest) -> ModeResult:
    del request
    name = context.state.macros.stop()
    message = f"recorded @{name}" if name else ""
    return ModeResult(consumed=True, status="recorded", message=message)


def play_macro(context: ModeContext, request: ActionRequest) -> ModeResult:
    name = request.argument or ""
    manager = cast("ModeManager", context.extras["mode_manager"])
    # playback dispatches through the manager, so pending state must be clear
    context.state.pending.reset()
    if not context.state.macros.play(name, manager.handle_key, count=request.count):
        return ModeResult(consumed=True, status="unknown_macro", message=f"no macro @{name}")
    return ModeResult(consumed=True, status="macro_played")


__all__ = [
    "REGISTER_NAMES",
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
]
