"""Dataclasses describing key sequences, actions and bindings."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Mapping

# actions whose metadata carries this consume the next key as their argument
ARGUMENT_CHAR = "char"


@dataclass(frozen=True, slots=True)
class KeyStroke:
    """One key token such as ``w``, ``ESC`` or ``ctrl+r``.

    Modifiers are lowercased, deduplicated and sorted so two spellings of
    the same chord compare equal.
    """

    key: str
    modifiers: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.key:
            raise ValueError("key cannot be empty")
        cleaned = {m.strip().lower() for m in self.modifiers if m.strip()}
        object.__setattr__(self, "modifiers", tuple(sorted(cleaned)))

    @classmethod
    def parse(cls, token: str) -> "KeyStroke":
        """``"ctrl+r"`` -> ``KeyStroke("r", ("ctrl",))``; ``"+"`` stays a key."""

        if len(token) > 1 and "+" in token[:-1]:
            *modifiers, key = token.split("+")
            if key:
                return cls(key, tuple(modifiers))
        return cls(token)

    @property
    def token(self) -> str:
        if not self.modifiers:
            return self.key
        return "+".join((*self.modifiers, self.key))


@dataclass(frozen=True, slots=True)
class KeySequence:
    strokes: tuple[KeyStroke, ...]

    def __post_init__(self) -> None:
        if not self.strokes:
            raise ValueError("KeySequence requires at least one stroke")

    def __len__(self) -> int:
        return len(self.strokes)

    @property
    def tokens(self) -> tuple[str, ...]:
        return tuple(stroke.token for stroke in self.strokes)

    def is_prefix_of(self, other: "KeySequence") -> bool:
        """Strict prefix test: ``g`` is a prefix of ``g g``, ``g g`` is not."""

        return len(self) < len(other) and other.tokens[: len(self)] == self.tokens

    @classmethod
    def from_strings(cls, *keys: str) -> "KeySequence":
        return cls(strokes=tuple(KeyStroke.parse(key) for key in keys if key))


@dataclass(frozen=True, slots=True)
class WhenClause:
    """Editor flag a binding requires (``recording``) or forbids (``!recording``)."""

    flag: str
    expected: bool = True

    def __post_init__(self) -> None:
        if not self.flag:
            raise ValueError("flag cannot be empty")

    @classmethod
    def parse(cls, expression: str) -> "WhenClause":
        expr = expression.strip()
        negated = expr.startswith("!")
        flag = expr[1:].strip() if negated else expr
        return cls(flag, not negated)

    def evaluate(self, flags: Mapping[str, bool]) -> bool:
        return bool(flags.get(self.flag, False)) is self.expected

    def __str__(self) -> str:
        return self.flag if self.expected else f"!{self.flag}"


@dataclass(frozen=True, slots=True)
class ActionRef:
    """Named handler a binding invokes, plus static metadata.

    Metadata is how one handler serves many actions: every motion shares
    ``run_motion`` and reads ``metadata["motion"]``; ``argument="char"``
    marks actions like ``f``, ``r`` and ``m`` that wait for one more key.
    """

    id: str
    handler: Callable[..., object]
    description: str = ""
    metadata: Mapping[str, object] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("ActionRef id cannot be empty")
        if not callable(self.handler):
            raise TypeError(f"handler for {self.id!r} must be callable")
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    @property
    def takes_argument(self) -> bool:
        return self.metadata.get("argument") == ARGUMENT_CHAR

    def __call__(self, *args: object, **kwargs: object) -> object:
        return self.handler(*args, **kwargs)


@dataclass(frozen=True, slots=True)
class Binding:
    """Key sequence in one keymap that triggers an action.

    ``when`` clauses gate the binding on editor flags; among bindings that
    apply to the same keys the highest ``priority`` wins.
    """

    id: str
    mode: str
    sequence: KeySequence
    action_id: str
    description: str = ""
    when: tuple[WhenClause, ...] = ()
    priority: int = 0

    def __post_init__(self) -> None:
        for name in ("id", "mode", "action_id"):
            if not getattr(self, name):
                raise ValueError(f"binding {name} cannot be empty")
        clauses = tuple(
            clause if isinstance(clause, WhenClause) else WhenClause.parse(str(clause))
            for clause in self.when
        )
        object.__setattr__(self, "when", clauses)

    def allows(self, flags: Mapping[str, bool]) -> bool:
        return all(clause.evaluate(flags) for clause in self.when)

    def can_coexist(self, other: "Binding") -> bool:
        """True when no flag state activates both bindings.

        That requires one flag that this binding wants set and the other
        wants cleared (``recording`` vs ``!recording``).
        """

        mine = {clause.flag: clause.expected for clause in self.when}
        return any(
            clause.flag in mine and mine[clause.flag] != clause.expected
            for clause in other.when
        )


__all__ = [
    "ARGUMENT_CHAR",
    "KeyStroke",
    "KeySequence",
    "WhenClause",
    "ActionRef",
    "Binding",
]
