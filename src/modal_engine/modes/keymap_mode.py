"""Shared key handling for modes driven by the keymap resolver."""

from __future__ import annotations

from typing import Optional

from modal_engine.keymaps.resolver import ResolutionMatch
from modal_engine.runtime import telemetry

from .base_mode import ActionRequest, KeyInput, Mode, ModeContext, ModeResult
from .editor_state import PendingState
from .keymap_helpers import (
    ESCAPE_TOKENS,
    key_to_token,
    keymap_flag_context,
    require_keymap_resolver,
)

OPERATOR_KEYMAP = "operator"


class KeymapMode(Mode):
    """Resolves keys against a keymap and runs the matched action.

    Modes with ``counts`` enabled accumulate a numeric prefix; ``0`` only
    counts once another digit has been typed, otherwise it resolves as a
    binding (line start). While an operator is pending, keys resolve
    against the ``operator`` keymap. Bindings whose action carries
    ``argument="char"`` metadata hold the command until the next key
    supplies its character.
    """

    keymap: str = "normal"
    counts: bool = False

    def __init__(self, context: ModeContext) -> None:
        super().__init__(context)
        self.logger = telemetry.get_logger(
            f"{context.state.config.logger_name}.modes.{self.name}"
        )
        self._resolver = require_keymap_resolver(context)
        self._flags = keymap_flag_context(context)

    @property
    def pending(self) -> PendingState:
        return self.context.state.pending

    def handle_key(self, key: KeyInput) -> ModeResult:
        token = key_to_token(key)
        if token is None:
            return ModeResult(consumed=False, status="ignored")

        pending = self.pending
        if pending.awaiting is not None:
            return self._supply_argument(pending.awaiting, key, token)

        if self.counts and self._is_count_digit(token):
            pending.count += token
            return ModeResult(consumed=True, status="pending")

        pending.keys.append(token)
        keymap = OPERATOR_KEYMAP if pending.operator is not None else self.keymap
        result = self._resolver.resolve(keymap, tuple(pending.keys), context=self._flags)

        if result.status == "match" and result.match:
            pending.keys.clear()
            if result.match.needs_argument:
                pending.awaiting = result.match
                return ModeResult(consumed=True, status="pending")
            return self.execute(result.match, key=key)

        if result.status == "pending":
            return ModeResult(consumed=True, status="pending")

        pending.keys.clear()
        return self.handle_miss(key, token)

    def _is_count_digit(self, token: str) -> bool:
        if len(token) != 1 or not token.isdigit() or self.pending.keys:
            return False
        return token != "0" or bool(self.pending.count)

    def _supply_argument(self, match: ResolutionMatch, key: KeyInput, token: str) -> ModeResult:
        self.pending.awaiting = None
        if token in ESCAPE_TOKENS:
            self.pending.reset()
            return ModeResult(consumed=True, status="cancelled")
        argument = key.text if key.text and len(key.text) == 1 else token
        if len(argument) != 1:
            self.pending.reset()
            return ModeResult(consumed=True, status="invalid_argument")
        return self.execute(match, key=key, argument=argument)

    def execute(
        self,
        match: ResolutionMatch,
        *,
        key: Optional[KeyInput] = None,
        argument: Optional[str] = None,
    ) -> ModeResult:
        pending = self.pending
        count, has_count = pending.take_count()
        request = ActionRequest(
            match=match,
            count=count,
            has_count=has_count,
            argument=argument,
            register=pending.register or '"',
            key=key,
        )
        with telemetry.span(
            "keymaps::execute",
            component="keymaps",
            metadata={"binding_id": match.binding.id, "action": match.action.id},
        ):
            outcome = match.action(self.context, request)

        result = outcome if isinstance(outcome, ModeResult) else ModeResult(consumed=True)
        if result.status != "pending":
            pending.reset()
        return result

    def handle_miss(self, key: KeyInput, token: str) -> ModeResult:
        """Unbound key: drop whatever command was being typed."""

        was_pending = self.pending.active
        self.pending.reset()
        telemetry.soft_failure(
            "unbound_key",
            data={"mode": self.name, "key": token},
            logger_name=self.context.state.config.logger_name,
        )
        status = "cancelled" if was_pending else "miss"
        return ModeResult(consumed=was_pending, status=status)


__all__ = ["KeymapMode", "OPERATOR_KEYMAP"]
