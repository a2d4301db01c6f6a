"""Actions dedicated to Visual mode selection management."""

from __future__ import annotations

from modal_engine.editing.motions import clamp_to_char
from modal_engine.editing.types import Span
from modal_engine.modes.base_mode import ActionRequest, ModeContext, ModeResult
from modal_engine.modes.selection import selection_span, sync_selection


def exit_visual(context: ModeContext, request: ActionRequest) -> ModeResult:
    del request
    return ModeResult(consumed=True, switch_to="normal", message="")


def toggle_charwise(context: ModeContext, request: ActionRequest) -> ModeResult:
    """``v``: leave charwise Visual, or turn linewise Visual charwise."""

    del request
    if context.state.visual.linewise:
        return ModeResult(consumed=True, switch_to="visual", message="-- VISUAL --")
    return ModeResult(consumed=True, switch_to="normal", message="")


def toggle_linewise(context: ModeContext, request: ActionRequest) -> ModeResult:
    del request
    if context.state.visual.linewise:
        return ModeResult(consumed=True, switch_to="normal", message="")
    return ModeResult(consumed=True, switch_to="visual_line", message="-- VISUAL LINE --")


def swap_anchor(context: ModeContext, request: ActionRequest) -> ModeResult:
    del request
    visual = context.state.visual
    cursor = context.buffer.cursor
    anchor = visual.anchor
    visual.anchor = cursor
    context.buffer.set_cursor(anchor)
    sync_selection(context)
    return ModeResult(consumed=True, status="visual_swap")


def _finish(context: ModeContext, span: Span) -> None:
    """Park the cursor at the start of what the selection covered."""

    document = context.buffer.document
    start = min(span.start, len(document))
    if span.linewise:
        context.buffer.set_cursor(document.first_non_blank(start))
    else:
        context.buffer.set_cursor(clamp_to_char(document, start))


def yank_selection(context: ModeContext, request: ActionRequest) -> ModeResult:
    span = selection_span(context)
    outcome = context.operators.yank(span, register=request.register)
    if not outcome.applied:
        return ModeResult(consumed=True, switch_to="normal", status="no_selection")
    _finish(context, span)
    context.bus.emit(
        "visual.yank",
        {"register": request.register, "text": outcome.text, "range": (span.start, span.end)},
    )
    return ModeResult(consumed=True, switch_to="normal", status="visual_yank")


def delete_selection(context: ModeContext, request: ActionRequest) -> ModeResult:
    span = selection_span(context)
    outcome = context.operators.delete(span, register=request.register)
    if not outcome.applied:
        return ModeResult(consumed=True, switch_to="normal", status="no_selection")
    context.bus.emit(
        "visual.delete",
        {"register": request.register, "text": outcome.text, "range": (span.start, span.end)},
    )
    return ModeResult(consumed=True, switch_to="normal", status="visual_delete")


def change_selection(context: ModeContext, request: ActionRequest) -> ModeResult:
    """Delete the selection and enter Insert; the whole change undoes at once."""

    span = selection_span(context)
    buffer = context.buffer
    buffer.open_group("visual_change", eager=True)
    context.operators.change(span, register=request.register)
    context.bus.emit(
        "visual.delete",
        {"register": request.register, "range": (span.start, span.end), "change": True},
    )
    return ModeResult(
        consumed=True, switch_to="insert", status="visual_change", message="-- INSERT --"
    )


def _indent(context: ModeContext, request: ActionRequest, *, right: bool) -> ModeResult:
    span = selection_span(context)
    outcome = context.operators.indent(span, amount=request.count, right=right)
    return ModeResult(consumed=True, switch_to="normal", status=outcome.status)


def indent_selection(context: ModeContext, request: ActionRequest) -> ModeResult:
    return _indent(context, request, right=True)


def dedent_selection(context: ModeContext, request: ActionRequest) -> ModeResult:
    return _indent(context, request, right=False)


def toggle_case_selection(context: ModeContext, request: ActionRequest) -> ModeResult:
    del request
    span = selection_span(context)
    buffer = context.buffer
    text = buffer.get_text_range(span.start, span.end)
    swapped = text.swapcase()
    if swapped != text:
        with buffer.transaction("toggle_case"):
            buffer.replace_range(span.start, span.end, swapped, label="toggle_case")
    _finish(context, span)
    return ModeResult(consumed=True, switch_to="normal", status="toggled")


__all__ = [
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
]
