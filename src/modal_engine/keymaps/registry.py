"""Store of actions and bindings shared by every mode's keymap."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, Iterable, Iterator, Optional

from modal_engine.runtime.telemetry import record_event, span

from .models import ActionRef, Binding


@dataclass(frozen=True, slots=True)
class RegistryStats:
    action_count: int
    binding_count: int
    modes: tuple[str, ...]


class KeymapConflictError(RuntimeError):
    """A binding would be ambiguous or unreachable next to existing ones."""

    def __init__(self, binding: Binding, conflicts: Iterable[Binding]):
        self.binding = binding
        self.conflicts = tuple(conflicts)
        names = ", ".join(conflict.id for conflict in self.conflicts)
        super().__init__(f"binding {binding.id!r} conflicts with {names}")


def bindings_clash(new: Binding, existing: Binding) -> bool:
    """Whether two bindings of one keymap cannot both be registered.

    Keys are resolved without timeouts, so a binding whose keys are a strict
    prefix of another hides the longer one whenever both apply. Identical
    keys are only ambiguous when both apply at the same priority.
    """

    if new.mode != existing.mode or new.can_coexist(existing):
        return False
    if new.sequence.tokens == existing.sequence.tokens:
        return new.priority == existing.priority
    return new.sequence.is_prefix_of(existing.sequence) or existing.sequence.is_prefix_of(
        new.sequence
    )


class KeymapRegistry:
    """Actions by id, bindings by id, and bindings grouped by mode.

    Every binding change bumps :meth:`revision` so resolvers can rebuild
    their lookup tables lazily.
    """

    def __init__(self, *, logger_name: str | None = None) -> None:
        self._actions: Dict[str, ActionRef] = {}
        self._bindings: Dict[str, Binding] = {}
        self._by_mode: Dict[str, Dict[str, Binding]] = {}
        self._logger_name = logger_name
        self._revision = 0

    def revision(self) -> int:
        return self._revision

    def get_action(self, action_id: str) -> ActionRef:
        if action_id not in self._actions:
            raise KeyError(f"unknown action {action_id!r}")
        return self._actions[action_id]

    def get_binding(self, binding_id: str) -> Binding:
        if binding_id not in self._bindings:
            raise KeyError(f"unknown binding {binding_id!r}")
        return self._bindings[binding_id]

    def register_action(self, action: ActionRef, *, replace: bool = False) -> ActionRef:
        if action.id in self._actions and not replace:
            raise ValueError(f"action {action.id!r} is already registered")
        self._actions[action.id] = action
        return action

    def register_binding(self, binding: Binding, *, replace: bool = False) -> Binding:
        """Add ``binding``; with ``replace`` it evicts whatever it clashes with."""

        with span(
            "keymaps::bind",
            logger_name=self._logger_name,
            component="keymaps",
            metadata={"binding": binding.id, "keys": " ".join(binding.sequence.tokens)},
        ) as handle:
            self._require_action(binding)
            if binding.id in self._bindings and not replace:
                raise ValueError(f"binding {binding.id!r} is already registered")

            others = [b for b in self.iter_bindings(binding.mode) if b.id != binding.id]
            conflicts = [other for other in others if bindings_clash(binding, other)]
            if conflicts and not replace:
                handle.add_metadata("conflicts", ",".join(c.id for c in conflicts))
                raise KeymapConflictError(binding, conflicts)
            for conflict in conflicts:
                self._drop(conflict.id)
                handle.add_metadata("evicted", conflict.id)

            self._drop(binding.id)
            self._store(binding)
            return binding

    def update_binding(self, binding_id: str, **changes: object) -> Binding:
        current = self.get_binding(binding_id)
        updated = replace(current, **changes)
        self._require_action(updated)
        conflicts = [
            other
            for other in self.iter_bindings(updated.mode)
            if other.id != binding_id and bindings_clash(updated, other)
        ]
        if conflicts:
            raise KeymapConflictError(updated, conflicts)
        self._drop(binding_id)
        self._store(updated)
        return updated

    def unregister_binding(self, binding_id: str) -> Optional[Binding]:
        removed = self._drop(binding_id)
        if removed is not None:
            self._revision += 1
            record_event(
                "keymaps::unbind",
                data={"binding": binding_id, "mode": removed.mode},
                logger_name=self._logger_name,
            )
        return removed

    def iter_bindings(self, mode: Optional[str] = None) -> Iterator[Binding]:
        if mode is None:
            yield from self._bindings.values()
        else:
            yield from self._by_mode.get(mode, {}).values()

    def iter_actions(self) -> Iterator[ActionRef]:
        yield from self._actions.values()

    def stats(self) -> RegistryStats:
        return RegistryStats(
            action_count=len(self._actions),
            binding_count=len(self._bindings),
            modes=tuple(sorted(self._by_mode)),
        )

    def _require_action(self, binding: Binding) -> None:
        if binding.action_id not in self._actions:
            raise KeyError(f"binding {binding.id!r} names unknown action {binding.action_id!r}")

    def _store(self, binding: Binding) -> None:
        self._bindings[binding.id] = binding
        self._by_mode.setdefault(binding.mode, {})[binding.id] = binding
        self._revision += 1

    def _drop(self, binding_id: str) -> Optional[Binding]:
        binding = self._bindings.pop(binding_id, None)
        if binding is None:
            return None
        keymap = self._by_mode.get(binding.mode, {})
        keymap.pop(binding_id, None)
        if not keymap:
            self._by_mode.pop(binding.mode, None)
        return binding


__all__ = [
    "KeymapRegistry",
    "KeymapConflictError",
    "RegistryStats",
    "bindings_clash",
]
