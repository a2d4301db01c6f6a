"""Operator-pending pipeline: operator + (motion | text object | same key)."""

from __future__ import annotations

from typing import Optional

from modal_engine.buffer.document import BufferDocument
from modal_engine.editing.chars import char_class
from modal_engine.editing.motions import Motion, MotionRequest, apply_motion
from modal_engine.editing.operators import Operator, line_span, motion_span
from modal_engine.editing.text_objects import resolve_text_object
from modal_engine.editing.types import Span
from modal_engine.history import CommandShape, LastCommand, OperatorTarget
from modal_engine.runtime import telemetry

from .base_mode import ModeContext, ModeResult
from .editor_state import PendingState

WORD_MOTIONS = {Motion.WORD_FORWARD: False, Motion.BIG_WORD_FORWARD: True}

SHAPES = {
    Operator.DELETE: CommandShape.DELETE,
    Operator.CHANGE: CommandShape.CHANGE,
    Operator.INDENT_RIGHT: CommandShape.OTHER,
    Operator.INDENT_LEFT: CommandShape.OTHER,
}


class OperatorPipeline:
    """Resolves the second half of an operator command into a span and runs it."""

    def __init__(self, context: ModeContext) -> None:
        self.context = context

    @property
    def pending(self) -> PendingState:
        return self.context.state.pending

    @property
    def document(self) -> BufferDocument:
        return self.context.buffer.document

    # ----------------------------------------------------------- key stages

    def begin(self, operator: Operator, *, count: int, has_count: bool) -> ModeResult:
        """Handle an operator key: start pending, or run ``dd``-style lines."""

        pending = self.pending
        if pending.operator is None:
            pending.operator = operator
            pending.operator_count = count
            pending.operator_has_count = has_count
            pending.count = ""
            return ModeResult(consumed=True, status="pending")
        if pending.operator is operator:
            target = OperatorTarget(kind="line")
            return self.run(operator, target, count=count, register=self._register())
        return self.cancel("operator_mismatch")

    def motion(
        self, motion: Motion, *, count: int, has_count: bool, char: Optional[str] = None
    ) -> ModeResult:
        operator = self.pending.operator
        if operator is None:
            return self.cancel("no_operator")
        target = OperatorTarget(kind="motion", key=motion.value, char=char)
        return self.run(
            operator, target, count=count, register=self._register(), has_count=has_count
        )

    def text_object(self, key: str, *, around: bool, count: int) -> ModeResult:
        operator = self.pending.operator
        if operator is None:
            return self.cancel("no_operator")
        target = OperatorTarget(kind="object", key=key, around=around)
        return self.run(operator, target, count=count, register=self._register())

    def cancel(self, reason: str) -> ModeResult:
        self.pending.reset()
        telemetry.soft_failure(reason, logger_name=self.context.state.config.logger_name)
        return ModeResult(consumed=True, status=reason)

    def _register(self) -> str:
        return self.pending.register or '"'

    # ------------------------------------------------------------ resolving

    def resolve(
        self,
        operator: Operator,
        target: OperatorTarget,
        *,
        count: int,
        has_count: bool = False,
    ) -> Optional[Span]:
        """Span ``target`` covers from the cursor, or ``None`` on no match."""

        document = self.document
        cursor = self.context.buffer.cursor
        if target.kind == "line":
            return line_span(document, cursor, count)
        if target.kind == "object":
            return resolve_text_object(
                document, cursor, target.key, around=target.around, count=count
            )

        motion = Motion(target.key)
        if operator is Operator.CHANGE and motion in WORD_MOTIONS:
            span = self._change_word_span(document, cursor, motion, count)
            if span is not None:
                return span
        state = self.context.state
        request = MotionRequest(
            count=count,
            has_count=has_count,
            char=target.char,
            last_find=state.last_find,
            search=state.search,
        )
        result = apply_motion(document, cursor, motion, request)
        if result.failed:
            return None
        if result.find is not None:
            state.last_find = result.find
        return motion_span(document, cursor, result, motion)

    def _change_word_span(
        self, document: BufferDocument, start: int, motion: Motion, count: int
    ) -> Optional[Span]:
        """``cw`` acts like ``ce`` when the cursor is on a non-blank."""

        text = document.text
        if start >= len(text) or text[start].isspace():
            return None
        big = WORD_MOTIONS[motion]
        run_class = char_class(text[start], big=big)
        end = start
        limit = document.line_end(start)
        while end < limit and char_class(text[end], big=big) == run_class:
            end += 1
        if count > 1:
            word_end = Motion.BIG_WORD_END if big else Motion.WORD_END
            result = apply_motion(document, end - 1, word_end, count=count - 1)
            if not result.failed:
                end = result.offset + 1
        return Span(start, end)

    # ------------------------------------------------------------ execution

    def run(
        self,
        operator: Operator,
        target: OperatorTarget,
        *,
        count: int,
        register: str = '"',
        has_count: bool = False,
        record: bool = True,
    ) -> ModeResult:
        context = self.context
        span = self.resolve(operator, target, count=count, has_count=has_count)
        self.pending.reset()
        if span is None and operator is Operator.CHANGE and target.kind == "motion":
            # cl on an empty line still enters Insert
            cursor = context.buffer.cursor
            span = Span(cursor, cursor)
        if span is None:
            telemetry.soft_failure(
                "no_match",
                data={"operator": operator.value, "target": target.key or target.kind},
                logger_name=context.state.config.logger_name,
            )
            return ModeResult(consumed=True, status="no_match")

        command = LastCommand(
            shape=SHAPES.get(operator, CommandShape.OTHER),
            action_id=f"operator.{operator.name.lower()}",
            count=count,
            operator=operator.value,
            target=target,
            register=register,
        )
        if operator is Operator.CHANGE:
            context.state.begin_insert(context.buffer, command)
            context.operators.change(span, register=register)
            return ModeResult(consumed=True, switch_to="insert", status="change")

        outcome = context.operators.apply(operator, span, register=register)
        if operator.mutates and outcome.applied and record:
            context.state.repeat.record(command)
        return ModeResult(consumed=True, status=outcome.status)


__all__ = ["OperatorPipeline", "PendingState"]
