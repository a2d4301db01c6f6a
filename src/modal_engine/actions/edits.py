"""Normal- and Insert-mode editing verbs plus dot-repeat."""

from __future__ import annotations

from typing import Callable, Dict

from modal_engine.editing.motions import Motion, clamp_to_char
from modal_engine.editing.operators import Operator
from modal_engine.editing.types import Span
from modal_engine.history import CommandShape, LastCommand, OperatorTarget
from modal_engine.modes.base_mode import ActionRequest, ModeContext, ModeResult
from modal_engine.modes.operator_pipeline import OperatorPipeline
from modal_engine.runtime import telemetry

Positioner = Callable[[ModeContext], None]


def _soft_fail(context: ModeContext, reason: str, message: str | None = None) -> ModeResult:
    telemetry.soft_failure(reason, logger_name=context.state.config.logger_name)
    return ModeResult(consumed=True, status=reason, message=message)


# -------------------------------------------------------------- insert entry


def _position_insert(context: ModeContext) -> None:
    del context


def _position_append(context: ModeContext) -> None:
    buffer = context.buffer
    buffer.set_cursor(min(buffer.cursor + 1, buffer.document.line_end(buffer.cursor)))


def _position_line_start(context: ModeContext) -> None:
    buffer = context.buffer
    buffer.set_cursor(buffer.document.first_non_blank(buffer.cursor))


def _position_line_end(context: ModeContext) -> None:
    buffer = context.buffer
    buffer.set_cursor(buffer.document.line_end(buffer.cursor))


def _position_open_below(context: ModeContext) -> None:
    buffer = context.buffer
    buffer.insert_text("\n", at=buffer.document.line_end(buffer.cursor), label="open_line")


def _position_open_above(context: ModeContext) -> None:
    buffer = context.buffer
    at = buffer.document.line_start(buffer.cursor)
    buffer.replace_range(at, at, "\n", label="open_line", cursor=at)


INSERT_POSITIONS: Dict[str, Positioner] = {
    "edit.insert": _position_insert,
    "edit.append": _position_append,
    "edit.insert_line_start": _position_line_start,
    "edit.append_line_end": _position_line_end,
    "edit.open_below": _position_open_below,
    "edit.open_above": _position_open_above,
}
LINE_OPENERS = frozenset({"edit.open_below", "edit.open_above"})


def enter_insert(context: ModeContext, request: ActionRequest) -> ModeResult:
    """``i a I A o O``: position the cursor and start an Insert session.

    The action id picks the positioning rule and is remembered so ``.``
    can position the same way before re-inserting the typed text.
    """

    action_id = request.match.action.id
    base = LastCommand(shape=CommandShape.INSERT, action_id=action_id, count=request.count)
    context.state.begin_insert(
        context.buffer, base, repeat_with_newline=action_id in LINE_OPENERS
    )
    INSERT_POSITIONS[action_id](context)
    return ModeResult(consumed=True, switch_to="insert", message="-- INSERT --")


def _repeated_insert(text: str, count: int, *, newline: bool) -> str:
    if count <= 1 or not text:
        return ""
    return ("\n" + text if newline else text) * (count - 1)


def _step_back(context: ModeContext) -> None:
    """One position left unless at buffer start, then onto a character."""

    buffer = context.buffer
    target = max(buffer.cursor - 1, 0)
    buffer.set_cursor(clamp_to_char(buffer.document, target))


def exit_insert(context: ModeContext, request: ActionRequest) -> ModeResult:
    """Leave Insert: apply the insert count, close the undo group, step left."""

    del request
    buffer = context.buffer
    repeat = context.state.repeat
    session = repeat.session
    if session is not None and session.base.shape is CommandShape.INSERT:
        extra = _repeated_insert(
            session.text, session.base.count, newline=session.repeat_with_newline
        )
        if extra:
            buffer.insert_text(extra, label="insert")
    repeat.finish_insert()
    buffer.close_group()
    _step_back(context)
    return ModeResult(consumed=True, switch_to="normal", message="")


def insert_backspace(context: ModeContext, request: ActionRequest) -> ModeResult:
    del request
    buffer = context.buffer
    cursor = buffer.cursor
    if cursor == 0:
        return ModeResult(consumed=True, status="noop")
    buffer.delete_range(cursor - 1, cursor, label="insert")
    session = context.state.repeat.session
    if session is not None:
        session.backspace()
    return ModeResult(consumed=True, status="insert")


def insert_newline(context: ModeContext, request: ActionRequest) -> ModeResult:
    del request
    context.state.insert_typed(context.buffer, "\n")
    return ModeResult(consumed=True, status="insert")


def insert_tab(context: ModeContext, request: ActionRequest) -> ModeResult:
    del request
    context.state.insert_typed(context.buffer, context.state.config.indent_unit)
    return ModeResult(consumed=True, status="insert")


def insert_dedent(context: ModeContext, request: ActionRequest) -> ModeResult:
    """``shift+TAB``: remove one indent unit from the current line."""

    del request
    buffer = context.buffer
    document = buffer.document
    cursor = buffer.cursor
    start = document.line_start(cursor)
    line = document.slice(start, document.line_end(cursor))
    width = len(context.state.config.indent_unit)
    removed = 0
    while removed < width and removed < len(line) and line[removed] == " ":
        removed += 1
    if removed == 0 and line.startswith("\t"):
        removed = 1
    if removed == 0:
        return ModeResult(consumed=True, status="unchanged")
    target = max(start, cursor - removed)
    buffer.replace_range(start, start + removed, "", label="insert", cursor=target)
    return ModeResult(consumed=True, status="insert")


# ------------------------------------------------------- operator shorthands


def _motion(motion: Motion) -> OperatorTarget:
    return OperatorTarget(kind="motion", key=motion.value)


SHORTHANDS: Dict[str, tuple[Operator, OperatorTarget]] = {
    "edit.delete_char": (Operator.DELETE, _motion(Motion.RIGHT)),
    "edit.delete_char_before": (Operator.DELETE, _motion(Motion.LEFT)),
    "edit.delete_to_end": (Operator.DELETE, _motion(Motion.LINE_END)),
    "edit.change_to_end": (Operator.CHANGE, _motion(Motion.LINE_END)),
    "edit.substitute_char": (Operator.CHANGE, _motion(Motion.RIGHT)),
    "edit.substitute_line": (Operator.CHANGE, OperatorTarget(kind="line")),
    "edit.yank_line": (Operator.YANK, OperatorTarget(kind="line")),
}


def operator_shorthand(context: ModeContext, request: ActionRequest) -> ModeResult:
    """``x X D C s S Y`` expressed as operator + fixed target."""

    operator, target = SHORTHANDS[request.match.action.id]
    return OperatorPipeline(context).run(
        operator,
        target,
        count=request.count,
        register=request.register,
        has_count=request.has_count,
    )


# --------------------------------------------------------------------- put


def _put(context: ModeContext, *, before: bool, count: int, register: str) -> ModeResult:
    outcome = context.operators.put(register, before=before, count=count)
    if not outcome.applied:
        return _soft_fail(context, outcome.status, f"nothing in register {register}")
    action_id = "edit.put_before" if before else "edit.put_after"
    context.state.repeat.record(
        LastCommand(
            shape=CommandShape.OTHER, action_id=action_id, count=count, register=register
        )
    )
    return ModeResult(consumed=True, status="put")


def put_after(context: ModeContext, request: ActionRequest) -> ModeResult:
    return _put(context, before=False, count=request.count, register=request.register)


def put_before(context: ModeContext, request: ActionRequest) -> ModeResult:
    return _put(context, before=True, count=request.count, register=request.register)


# -------------------------------------------------------------------- join


def _join(context: ModeContext, count: int) -> ModeResult:
    buffer = context.buffer
    joins = max(count - 1, 1)
    done = 0
    with buffer.transaction("join"):
        for _ in range(joins):
            document = buffer.document
            text = document.text
            line_end = document.line_end(buffer.cursor)
            if line_end >= len(text):
                break
            next_start = line_end + 1
            next_end = document.line_end(next_start)
            content_start = next_start
            while content_start < next_end and text[content_start] in " \t":
                content_start += 1
            current = text[document.line_start(line_end) : line_end]
            if content_start == next_end or not current or current.endswith((" ", "\t")):
                separator = ""
            elif text[content_start] == ")":
                separator = ""
            else:
                separator = " "
            buffer.replace_range(
                line_end, content_start, separator, label="join", cursor=line_end
            )
            done += 1
    if not done:
        return _soft_fail(context, "nothing_to_join")
    context.state.repeat.record(
        LastCommand(shape=CommandShape.OTHER, action_id="edit.join", count=count)
    )
    return ModeResult(consumed=True, status="joined")


def join_lines(context: ModeContext, request: ActionRequest) -> ModeResult:
    return _join(context, request.count)


# ------------------------------------------------------------- toggle case


def _toggle_case(context: ModeContext, count: int) -> ModeResult:
    buffer = context.buffer
    document = buffer.document
    cursor = buffer.cursor
    end = min(cursor + count, document.line_end(cursor))
    if end <= cursor:
        return _soft_fail(context, "no_match")
    swapped = document.slice(cursor, end).swapcase()
    with buffer.transaction("toggle_case"):
        buffer.replace_range(cursor, end, swapped, label="toggle_case")
        buffer.set_cursor(clamp_to_char(buffer.document, end))
    context.state.repeat.record(
        LastCommand(shape=CommandShape.OTHER, action_id="edit.toggle_case", count=count)
    )
    return ModeResult(consumed=True, status="toggled")


def toggle_case(context: ModeContext, request: ActionRequest) -> ModeResult:
    return _toggle_case(context, request.count)


# ---------------------------------------------------------------- replace


def _replace(context: ModeContext, char: str, count: int) -> ModeResult:
    buffer = context.buffer
    document = buffer.document
    cursor = buffer.cursor
    end = cursor + count
    if end > document.line_end(cursor):
        return _soft_fail(context, "replace_failed")
    with buffer.transaction("replace"):
        buffer.replace_range(cursor, end, char * count, label="replace", cursor=cursor)
    context.state.repeat.record(
        LastCommand(
            shape=CommandShape.REPLACE, action_id="edit.replace_char", count=count, char=char
        )
    )
    return ModeResult(consumed=True, status="replaced")


def replace_char(context: ModeContext, request: ActionRequest) -> ModeResult:
    return _replace(context, request.argument or "", request.count)


# ------------------------------------------------------------- dot repeat


def _replay_insert(context: ModeContext, command: LastCommand) -> ModeResult:
    INSERT_POSITIONS[command.action_id](context)
    newline = command.action_id in LINE_OPENERS
    text = command.text + _repeated_insert(command.text, command.count, newline=newline)
    if text:
        context.buffer.insert_text(text, label="repeat")
    _step_back(context)
    context.state.repeat.record(command)
    return ModeResult(consumed=True, status="repeated")


def _replay_change(context: ModeContext, command: LastCommand) -> ModeResult:
    target = command.target or OperatorTarget(kind="line")
    span = OperatorPipeline(context).resolve(Operator.CHANGE, target, count=command.count)
    if span is None:
        if target.kind != "motion":
            return _soft_fail(context, "no_match")
        span = Span(context.buffer.cursor, context.buffer.cursor)
    context.operators.change(span, register=command.register)
    if command.text:
        context.buffer.insert_text(command.text, label="repeat")
    _step_back(context)
    context.state.repeat.record(command)
    return ModeResult(consumed=True, status="repeated")


REPLAYERS: Dict[str, Callable[[ModeContext, LastCommand], ModeResult]] = {
    "edit.put_after": lambda context, command: _put(
        context, before=False, count=command.count, register=command.register
    ),
    "edit.put_before": lambda context, command: _put(
        context, before=True, count=command.count, register=command.register
    ),
    "edit.join": lambda context, command: _join(context, command.count),
    "edit.toggle_case": lambda context, command: _toggle_case(context, command.count),
    "edit.replace_char": lambda context, command: _replace(
        context, command.char or "", command.count
    ),
}


def repeat_last_change(context: ModeContext, request: ActionRequest) -> ModeResult:
    """``.``: replay the last buffer-changing command as one undo step.

    A count given to ``.`` replaces the original count.
    """

    state = context.state
    command = state.repeat.last
    if command is None:
        return ModeResult(consumed=True, status="nothing_to_repeat")
    if request.has_count:
        command = command.with_count(request.count)

    with telemetry.span(
        "history::repeat",
        logger_name=state.config.logger_name,
        component="history",
        metadata={"action": command.action_id, "count": command.count},
    ):
        with context.buffer.transaction("repeat"):
            if command.shape is CommandShape.INSERT:
                return _replay_insert(context, command)
            if command.shape is CommandShape.CHANGE:
                return _replay_change(context, command)
            if command.operator is not None and command.target is not None:
                result = OperatorPipeline(context).run(
                    Operator(command.operator),
                    command.target,
                    count=command.count,
                    register=command.register,
                )
                return ModeResult(consumed=True, status=result.status)
            replay = REPLAYERS.get(command.action_id)
            if replay is None:
                return _soft_fail(context, "not_repeatable")
            return replay(context, command)


__all__ = [
    "INSERT_POSITIONS",
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
]
