"""Helper utilities for keymap-driven modes."""

from __future__ import annotations

from typing import Iterable, List, Mapping, MutableMapping, Optional, cast

from modal_engine.keymaps.resolver import KeymapResolver

from .base_mode import KeyInput, ModeContext

KEY_ALIASES = {
    "<esc>": "ESC",
    "esc": "ESC",
    "escape": "ESC",
    "<cr>": "ENTER",
    "enter": "ENTER",
    "return": "ENTER",
    "<bs>": "BACKSPACE",
    "backspace": "BACKSPACE",
    "<tab>": "TAB",
    "tab": "TAB",
    "<s-tab>": "shift+TAB",
    "shift+tab": "shift+TAB",
    "<up>": "UP",
    "up": "UP",
    "<down>": "DOWN",
    "down": "DOWN",
    "<left>": "LEFT",
    "left": "LEFT",
    "<right>": "RIGHT",
    "right": "RIGHT",
    "<del>": "DELETE",
    "delete": "DELETE",
    "space": " ",
    "<space>": " ",
    "<lt>": "<",
    "ctrl+[": "ESC",
    "<c-[>": "ESC",
}

MODIFIER_KEYS = frozenset({"shift", "ctrl", "control", "alt", "meta", "super", "cmd"})
MODIFIER_ALIASES = {"control": "ctrl", "c": "ctrl", "s": "shift", "a": "alt", "m": "meta"}
ESCAPE_TOKENS = frozenset({"ESC"})
TEXT_BLOCKING_MODIFIERS = frozenset({"ctrl", "alt", "meta", "super", "cmd"})


def _canonical_key(key: str) -> str:
    return KEY_ALIASES.get(key.lower(), key) if len(key) > 1 else key


def _build_token(key: str, modifiers: Iterable[str]) -> Optional[str]:
    cleaned = (m.strip().lower() for m in modifiers)
    mods = sorted({MODIFIER_ALIASES.get(mod, mod) for mod in cleaned if mod})
    base = _canonical_key(key)
    if len(base) == 1 and mods == ["shift"]:
        # shifted printable characters already arrive as their own glyph
        mods = []
    if not mods:
        return base
    token = f"{'+'.join(mods)}+{base.lower() if len(base) == 1 else base}"
    return KEY_ALIASES.get(token, token)


def key_to_token(key: KeyInput) -> Optional[str]:
    """Map a key event onto the token form bindings are written in.

    Named keys become ``ESC``/``ENTER``/``BACKSPACE``/``TAB``/arrow names,
    modifiers are lowercased and sorted (``ctrl+r``), and ``ctrl+[`` folds
    into ``ESC``. Bare modifier presses yield ``None``.
    """

    raw = key.key
    if not raw:
        return None
    if raw.lower() in MODIFIER_KEYS:
        return None
    modifiers = list(key.modifiers)
    if "+" in raw and len(raw) > 1 and raw.lower() not in KEY_ALIASES:
        *prefix, base = raw.split("+")
        if base == "":
            base = "+"
            prefix = prefix[:-1]
        modifiers.extend(prefix)
        raw = base
    return _build_token(raw, modifiers)


def is_text_input(key: KeyInput) -> bool:
    """Printable text not combined with a command modifier."""

    if not key.text or not key.text.isprintable():
        return False
    return not any(mod.lower() in TEXT_BLOCKING_MODIFIERS for mod in key.modifiers)


def parse_keys(notation: str) -> List[KeyInput]:
    """Expand ``"d2w<Esc>"`` style notation into key events."""

    keys: List[KeyInput] = []
    index = 0
    while index < len(notation):
        ch = notation[index]
        if ch == "<":
            close = notation.find(">", index + 1)
            if close > index + 1:
                name = notation[index + 1 : close]
                keys.append(_named_key(name))
                index = close + 1
                continue
        keys.append(KeyInput(key=ch, text=ch))
        index += 1
    return keys


def _named_key(name: str) -> KeyInput:
    lowered = name.lower()
    if "-" in lowered and len(lowered) > 2:
        prefix, _, base = name.rpartition("-")
        modifiers = tuple(
            MODIFIER_ALIASES.get(part.lower(), part.lower()) for part in prefix.split("-")
        )
        return KeyInput(key=base, modifiers=modifiers)
    canonical = KEY_ALIASES.get(f"<{lowered}>", KEY_ALIASES.get(lowered, name))
    text = canonical if len(canonical) == 1 else None
    return KeyInput(key=canonical, text=text)


def require_keymap_resolver(context: ModeContext) -> KeymapResolver:
    resolver = context.extras.get("keymap_resolver")
    if not isinstance(resolver, KeymapResolver):
        raise RuntimeError("ModeContext.extras missing 'keymap_resolver'")
    return resolver


def keymap_flag_context(context: ModeContext) -> Mapping[str, bool]:
    flags = context.extras.setdefault("keymap_flags", {})
    return cast(Mapping[str, bool], flags)


def update_flag(context: ModeContext, key: str, value: bool) -> None:
    flags = cast(
        MutableMapping[str, bool], context.extras.setdefault("keymap_flags", {})
    )
    flags[key] = value


__all__ = [
    "ESCAPE_TOKENS",
    "is_text_input",
    "key_to_token",
    "parse_keys",
    "require_keymap_resolver",
    "keymap_flag_context",
    "update_flag",
]
