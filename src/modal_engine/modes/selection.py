"""Visual selection geometry shared by the visual modes and their actions."""

from __future__ import annotations

from modal_engine.editing.types import Span

from .base_mode import ModeContext

VISUAL_MODES = ("visual", "visual_line")


def selection_span(context: ModeContext) -> Span:
    """Span the current visual selection covers (linewise spans exclude the
    final newline, matching operator spans)."""

    document = context.buffer.document
    visual = context.state.visual
    low, high = sorted((visual.anchor, context.buffer.cursor))
    if visual.linewise:
        return Span(document.line_start(low), document.line_end(high), linewise=True)
    return Span(low, min(high + 1, len(document)))


def sync_selection(context: ModeContext) -> None:
    """Mirror the anchor/cursor pair into the buffer selection offsets."""

    buffer = context.buffer
    span = selection_span(context)
    end = span.end
    if span.linewise and end < len(buffer):
        end += 1
    cursor = buffer.cursor
    buffer.set_selection(span.start, end)
    context.bus.emit(
        "visual.selection",
        {"anchor": context.state.visual.anchor, "cursor": cursor, "range": (span.start, end)},
    )


__all__ = ["VISUAL_MODES", "selection_span", "sync_selection"]
