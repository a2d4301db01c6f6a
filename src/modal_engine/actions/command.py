"""Actions that evaluate Ex-style command lines and searches."""

from __future__ import annotations

import re
from typing import Callable, Dict, List, Optional

from modal_engine.editing.motions import Motion, apply_motion, goto_line
from modal_engine.editing.types import SearchSpec
from modal_engine.modes.base_mode import ActionRequest, ModeContext, ModeResult
from modal_engine.runtime import telemetry

CommandHandler = Callable[[ModeContext, List[str]], ModeResult]

SEARCH_PREFIXES = ("/", "?")


# ------------------------------------------------------------ line editing


def cancel_command_line(context: ModeContext, request: ActionRequest) -> ModeResult:
    del request
    return ModeResult(consumed=True, switch_to="normal", status="command_cancelled")


def command_backspace(context: ModeContext, request: ActionRequest) -> ModeResult:
    line = context.state.command_line
    if not line.text:
        return cancel_command_line(context, request)
    line.text = line.text[:-1]
    context.bus.emit("command.text", line.text)
    return ModeResult(consumed=True, status="command_edit")


def history_previous(context: ModeContext, request: ActionRequest) -> ModeResult:
    del request
    line = context.state.command_line
    if not line.history:
        return ModeResult(consumed=True, status="history_empty")
    if line.history_index is None:
        line.history_index = len(line.history) - 1
    else:
        line.history_index = max(0, line.history_index - 1)
    line.text = line.history[line.history_index]
    context.bus.emit("command.text", line.text)
    return ModeResult(consumed=True, status="history")


def history_next(context: ModeContext, request: ActionRequest) -> ModeResult:
    del request
    line = context.state.command_line
    if line.history_index is None:
        return ModeResult(consumed=True, status="history_empty")
    if line.history_index + 1 >= len(line.history):
        line.history_index = None
        line.text = ""
    else:
        line.history_index += 1
        line.text = line.history[line.history_index]
    context.bus.emit("command.text", line.text)
    return ModeResult(consumed=True, status="history")


# -------------------------------------------------------------- submission


def submit_command_line(context: ModeContext, request: ActionRequest) -> ModeResult:
    del request
    line = context.state.command_line
    prefix = line.prefix
    raw = line.text
    text = raw.strip()
    context.bus.emit("command.submit", prefix + text)
    if text and (not line.history or line.history[-1] != text):
        line.history.append(text)
    line.text = ""

    if prefix in SEARCH_PREFIXES:
        return _search(context, raw, backward=prefix == "?")
    if not text:
        return ModeResult(consumed=True, switch_to="normal", status="command_empty")
    if text.isdigit():
        return _goto_line(context, int(text))
    substitute = _parse_substitute(text)
    if substitute is not None:
        return _substitute(context, *substitute)

    command, *args = text.split()
    return _run_ex_command(context, command, args)


def _unknown_command(context: ModeContext, command: str) -> ModeResult:
    context.bus.emit("command.error", command)
    telemetry.soft_failure(
        "command_error",
        data={"command": command},
        logger_name=context.state.config.logger_name,
    )
    return ModeResult(
        consumed=True,
        switch_to="normal",
        status="command_error",
        message=f"not an editor command: {command}",
    )


# ------------------------------------------------------------------ search


def _search(context: ModeContext, term: str, *, backward: bool) -> ModeResult:
    state = context.state
    if not term:
        if state.search is None:
            return ModeResult(
                consumed=True,
                switch_to="normal",
                status="no_previous_pattern",
                message="no previous search pattern",
            )
        term = state.search.term
    state.search = SearchSpec(term=term, backward=backward)
    buffer = context.buffer
    result = apply_motion(buffer.document, buffer.cursor, Motion.SEARCH_NEXT, search=state.search)
    if result.failed:
        telemetry.soft_failure(
            "pattern_not_found",
            data={"term": term},
            logger_name=state.config.logger_name,
        )
        return ModeResult(
            consumed=True,
            switch_to="normal",
            status="pattern_not_found",
            message="pattern not found",
        )
    state.marks.previous_position = buffer.cursor
    buffer.set_cursor(result.offset)
    return ModeResult(consumed=True, switch_to="normal", status="search")


# -------------------------------------------------------------- navigation


def _goto_line(context: ModeContext, number: int) -> ModeResult:
    buffer = context.buffer
    result = goto_line(buffer.document, number)
    context.state.marks.previous_position = buffer.cursor
    buffer.set_cursor(result.offset)
    return ModeResult(consumed=True, switch_to="normal", status="command_goto")


# -------------------------------------------------------------- substitute


def _split_unescaped(body: str, delimiter: str) -> List[str]:
    """Split on ``delimiter`` unless backslash-escaped; ``\\/`` becomes ``/``."""

    parts: List[str] = []
    current: List[str] = []
    index = 0
    while index < len(body):
        ch = body[index]
        if ch == "\\" and index + 1 < len(body):
            following = body[index + 1]
            current.append(following if following == delimiter else ch + following)
            index += 2
            continue
        if ch == delimiter:
            parts.append("".join(current))
            current = []
        else:
            current.append(ch)
        index += 1
    parts.append("".join(current))
    return parts


def _parse_substitute(text: str) -> Optional[tuple[bool, str, str, str]]:
    """``[%]s/pattern/replacement/[flags]`` -> (whole buffer, pattern, replacement, flags)."""

    whole = text.startswith("%")
    body = text[1:] if whole else text
    if len(body) < 2 or body[0] != "s":
        return None
    delimiter = body[1]
    if delimiter.isalnum() or delimiter.isspace() or delimiter == "\\":
        return None
    parts = _split_unescaped(body[2:], delimiter)
    if len(parts) < 2 or not parts[0]:
        return None
    flags = parts[2] if len(parts) > 2 else ""
    return whole, parts[0], parts[1], flags


def _substitute(
    context: ModeContext, whole: bool, pattern: str, replacement: str, flags: str
) -> ModeResult:
    """Regex substitution per line: first match, or every match with ``g``."""

    logger_name = context.state.config.logger_name
    try:
        regex = re.compile(pattern, re.IGNORECASE if "i" in flags else 0)
    except re.error as exc:
        telemetry.soft_failure(
            "invalid_pattern",
            data={"pattern": pattern, "error": str(exc)},
            logger_name=logger_name,
        )
        return ModeResult(
            consumed=True,
            switch_to="normal",
            status="invalid_pattern",
            message=f"invalid pattern: {pattern}",
        )

    buffer = context.buffer
    document = buffer.document
    if whole:
        start, end = 0, len(document)
    else:
        start, end = document.line_start(buffer.cursor), document.line_end(buffer.cursor)
    lines = document.slice(start, end).split("\n")
    per_line = 0 if "g" in flags else 1
    total = 0
    last_changed: Optional[int] = None
    updated: List[str] = []
    for index, line in enumerate(lines):
        try:
            new_line, made = regex.subn(
                lambda match: match.expand(replacement), line, count=per_line
            )
        except (re.error, IndexError) as exc:
            telemetry.soft_failure(
                "invalid_replacement",
                data={"replacement": replacement, "error": str(exc)},
                logger_name=logger_name,
            )
            return ModeResult(
                consumed=True,
                switch_to="normal",
                status="invalid_replacement",
                message=f"invalid replacement: {replacement}",
            )
        if made:
            total += made
            last_changed = index
        updated.append(new_line)

    if not total:
        return ModeResult(
            consumed=True,
            switch_to="normal",
            status="pattern_not_found",
            message=f"pattern not found: {pattern}",
        )

    new_text = "\n".join(updated)
    with buffer.transaction("substitute"):
        buffer.replace_range(start, end, new_text, label="substitute")
        line_offset = start + sum(len(line) + 1 for line in updated[: last_changed or 0])
        buffer.set_cursor(buffer.document.first_non_blank(line_offset))
    noun = "substitution" if total == 1 else "substitutions"
    return ModeResult(
        consumed=True,
        switch_to="normal",
        status="command_substitute",
        message=f"{total} {noun}",
    )


# ------------------------------------------------------------ ex commands


def _handle_echo(context: ModeContext, args: List[str]) -> ModeResult:
    message = " ".join(args)
    context.bus.emit("command.echo", message)
    return ModeResult(
        consumed=True,
        switch_to="normal",
        status="command_echo",
        message=message,
    )


def _handle_nohlsearch(context: ModeContext, args: List[str]) -> ModeResult:
    del args
    context.state.search = None
    return ModeResult(consumed=True, switch_to="normal", status="command_noh", message="")


def _visible(text: str) -> str:
    return text.replace("\n", "^J").replace("\t", "^I")


def _handle_registers(context: ModeContext, args: List[str]) -> ModeResult:
    wanted = set("".join(args))
    entries = [
        f'"{name} {_visible(value.text)}'
        for name, value in context.registers.serialize().items()
        if value and (not wanted or name in wanted)
    ]
    message = " | ".join(entries) if entries else "no registers"
    context.bus.emit("command.registers", entries)
    return ModeResult(
        consumed=True, switch_to="normal", status="command_registers", message=message
    )


def _handle_marks(context: ModeContext, args: List[str]) -> ModeResult:
    del args
    document = context.buffer.document
    marks = context.state.marks
    entries = []
    for name in marks:
        offset = min(marks.get(name) or 0, len(document))
        entries.append(f"{name} {document.line_index(offset) + 1}:{document.column(offset)}")
    message = " | ".join(entries) if entries else "no marks"
    context.bus.emit("command.marks", entries)
    return ModeResult(consumed=True, switch_to="normal", status="command_marks", message=message)


# host requests each file command publishes, in order
_FILE_REQUESTS: Dict[str, tuple[str, ...]] = {
    "w": ("write",),
    "write": ("write",),
    "q": ("quit",),
    "quit": ("quit",),
    "wq": ("write", "quit"),
    "x": ("write", "quit"),
    "exit": ("write", "quit"),
    "e": ("edit",),
    "edit": ("edit",),
    "new": ("new",),
    "enew": ("new",),
}


def _request_from_host(
    context: ModeContext, name: str, args: List[str], *, force: bool
) -> ModeResult:
    """Publish ``command.write``/``quit``/``edit``/``new``.

    The engine owns no files; the host performs the request. All but quit
    payloads carry the arguments and a snapshot of the buffer.
    """

    requests = _FILE_REQUESTS[name]
    for request in requests:
        payload: Dict[str, object] = {"force": force}
        if request != "quit":
            payload["args"] = list(args)
            payload["snapshot"] = context.buffer.view()
        context.bus.emit(f"command.{request}", payload)
    status = "_".join(("command", *requests, *(("force",) if force else ())))
    return ModeResult(consumed=True, switch_to="normal", status=status)


_COMMAND_HANDLERS: Dict[str, CommandHandler] = {
    "echo": _handle_echo,
    "noh": _handle_nohlsearch,
    "nohlsearch": _handle_nohlsearch,
    "reg": _handle_registers,
    "registers": _handle_registers,
    "di": _handle_registers,
    "display": _handle_registers,
    "marks": _handle_marks,
}


def _run_ex_command(context: ModeContext, command: str, args: List[str]) -> ModeResult:
    force = command.endswith("!") and len(command) > 1
    name = command[:-1] if force else command
    if name in _FILE_REQUESTS:
        return _request_from_host(context, name, args, force=force)
    handler = None if force else _COMMAND_HANDLERS.get(name)
    if handler is None:
        return _unknown_command(context, command)
    return handler(context, args)


__all__ = [
    "cancel_command_line",
    "command_backspace",
    "history_next",
    "history_previous",
    "submit_command_line",
]

