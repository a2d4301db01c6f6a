"""Turn the keys typed so far into a match, a pending prefix, or a miss."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Literal, Mapping, Optional, Sequence

from modal_engine.runtime.telemetry import span

from .models import ActionRef, Binding
from .registry import KeymapRegistry

Tokens = tuple[str, ...]


@dataclass(frozen=True, slots=True)
class ResolutionMatch:
    binding: Binding
    action: ActionRef

    @property
    def needs_argument(self) -> bool:
        """The action still wants one key (``f``, ``r``, ``m`` ...)."""

        return self.action.takes_argument


@dataclass(frozen=True, slots=True)
class ResolutionResult:
    status: Literal["match", "pending", "miss"]
    match: Optional[ResolutionMatch] = None
    next_expected: Tokens = ()


@dataclass(slots=True)
class _KeymapTable:
    """Flattened view of one mode: full sequences and the keys that may follow a prefix."""

    revision: int
    exact: Dict[Tokens, list[Binding]] = field(default_factory=dict)
    continuations: Dict[Tokens, set[str]] = field(default_factory=dict)

    def add(self, binding: Binding) -> None:
        tokens = binding.sequence.tokens
        self.exact.setdefault(tokens, []).append(binding)
        for size in range(1, len(tokens)):
            self.continuations.setdefault(tokens[:size], set()).add(tokens[size])


class KeymapResolver:
    """Resolves key tokens against a :class:`KeymapRegistry`.

    Tables are rebuilt per mode when the registry revision moves on.
    """

    def __init__(self, registry: KeymapRegistry, *, logger_name: str | None = None) -> None:
        self._registry = registry
        self._logger_name = logger_name
        self._tables: Dict[str, _KeymapTable] = {}

    def resolve(
        self,
        mode: str,
        tokens: Sequence[str],
        *,
        context: Optional[Mapping[str, bool]] = None,
    ) -> ResolutionResult:
        typed = tuple(tokens)
        flags = context or {}
        with span(
            "keymaps::resolve",
            logger_name=self._logger_name,
            metadata={"mode": mode, "keys": " ".join(typed)},
        ) as handle:
            table = self._table(mode)
            match = self._best(table.exact.get(typed, ()), flags)
            if match is not None:
                handle.add_metadata("binding", match.binding.id)
                return ResolutionResult(status="match", match=match)

            following = table.continuations.get(typed)
            if following:
                return ResolutionResult(status="pending", next_expected=tuple(sorted(following)))
            handle.add_metadata("miss", True)
            return ResolutionResult(status="miss")

    def _table(self, mode: str) -> _KeymapTable:
        revision = self._registry.revision()
        table = self._tables.get(mode)
        if table is None or table.revision != revision:
            table = _KeymapTable(revision=revision)
            for binding in self._registry.iter_bindings(mode):
                table.add(binding)
            self._tables[mode] = table
        return table

    def _best(
        self, candidates: Sequence[Binding], flags: Mapping[str, bool]
    ) -> Optional[ResolutionMatch]:
        active = [binding for binding in candidates if binding.allows(flags)]
        if not active:
            return None
        chosen = min(active, key=lambda binding: (-binding.priority, binding.id))
        return ResolutionMatch(binding=chosen, action=self._registry.get_action(chosen.action_id))


__all__ = [
    "KeymapResolver",
    "ResolutionResult",
    "ResolutionMatch",
]
