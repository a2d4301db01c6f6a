"""Textual front end: ``modal-engine [path]`` opens a file in the engine."""

from __future__ import annotations

import argparse
from dataclasses import replace
from pathlib import Path
from typing import Optional, Sequence, Tuple

from rich.text import Text
from textual import events
from textual.app import App, ComposeResult
from textual.widgets import Footer, Static

from modal_engine.config import EngineConfig
from modal_engine.engine import create_engine
from modal_engine.modes.selection import VISUAL_MODES
from modal_engine.runtime import telemetry

from .controller import EngineSnapshot, TextualUIHooks, TextualVimAdapter

# textual key names -> engine key tokens
NAMED_KEYS = {
    "escape": "ESC",
    "enter": "ENTER",
    "backspace": "BACKSPACE",
    "tab": "TAB",
    "up": "UP",
    "down": "DOWN",
    "left": "LEFT",
    "right": "RIGHT",
    "delete": "DELETE",
}
QUIT_KEYS = frozenset({"ctrl+c", "ctrl+q"})


def render_buffer(snapshot: EngineSnapshot) -> Text:
    """Buffer text with the selection (Visual) or the cursor cell reversed."""

    if snapshot.mode in VISUAL_MODES:
        start, end = snapshot.selection
    else:
        start, end = snapshot.cursor, snapshot.cursor + 1
    body = snapshot.text
    if end > len(body) or body[start:end] == "\n":
        # the cursor sits past the last character or on a line break
        body = body[:start] + " " + body[start:]
        end = start + 1
    text = Text(body)
    text.stylize("reverse", start, end)
    return text


def translate_key(event: events.Key) -> Optional[Tuple[str, Optional[str], Tuple[str, ...]]]:
    """``(key, text, modifiers)`` for the engine, or ``None`` to let Textual handle it."""

    if event.key in QUIT_KEYS:
        return None
    *modifiers, base = event.key.split("+")
    if base in NAMED_KEYS:
        return NAMED_KEYS[base], None, tuple(modifiers)
    if event.character and event.character.isprintable():
        return event.character, event.character, ()
    return base, None, tuple(modifiers)


class ModalEngineApp(App[None]):
    CSS = """
    #buffer {
        height: 1fr;
        padding: 0 1;
        overflow-y: auto;
    }
    #status, #command {
        height: 1;
        padding: 0 1;
    }
    #status {
        background: $panel;
    }
    """

    BINDINGS = [("ctrl+q", "quit", "Quit")]

    def __init__(self, *, path: Optional[Path] = None, config: Optional[EngineConfig] = None):
        super().__init__()
        self.path = path
        self.config = config or EngineConfig.from_env()
        self._logger = telemetry.get_logger(f"{self.config.logger_name}.textual")
        text = path.read_text(encoding="utf-8") if path is not None and path.exists() else ""
        self.engine = create_engine(text, config=self.config)
        self.adapter: Optional[TextualVimAdapter] = None

    def compose(self) -> ComposeResult:
        yield Static(id="buffer")
        yield Static(id="status")
        yield Static(id="command")
        yield Footer()

    def on_mount(self) -> None:
        self.title = str(self.path) if self.path else "[No Name]"
        hooks = TextualUIHooks(render=self.render_snapshot, on_event=self.on_engine_event)
        self.adapter = TextualVimAdapter(self.engine, hooks)

    def on_key(self, event: events.Key) -> None:
        translated = translate_key(event)
        if self.adapter is None or translated is None:
            return
        key, text, modifiers = translated
        self.adapter.handle_textual_key(key, text=text, modifiers=modifiers)
        event.stop()

    def render_snapshot(self, snapshot: EngineSnapshot) -> None:
        self.query_one("#buffer", Static).update(render_buffer(snapshot))
        self.query_one("#status", Static).update(snapshot.status_line)
        self.query_one("#command", Static).update(snapshot.command_line)

    def on_engine_event(self, name: str, payload: object | None) -> None:
        args = payload.get("args", []) if isinstance(payload, dict) else []
        if args:
            self.path = Path(args[0])
            self.title = str(self.path)
        if name == "command.write":
            self.write_buffer()
        elif name == "command.quit":
            self.exit()
        elif name == "command.edit":
            # reload outside the dispatch that emitted the event
            self.call_later(self.reload_buffer)
        elif name == "command.new":
            if not args:
                self.path = None
                self.title = "[No Name]"
            self.call_later(self.engine.replace_entire_buffer, "")

    def write_buffer(self) -> None:
        if self.path is None:
            self.notify("no file name", severity="error")
            return
        try:
            self.path.write_text(self.engine.get_buffer_text(), encoding="utf-8")
        except OSError as exc:
            self._logger.error(f"write failed: {exc}")
            self.notify(f"cannot write {self.path}: {exc.strerror}", severity="error")
            return
        self.notify(f'"{self.path}" written')

    def reload_buffer(self) -> None:
        if self.path is not None and self.path.exists():
            self.engine.replace_entire_buffer(self.path.read_text(encoding="utf-8"))


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Edit a file with the modal engine.")
    parser.add_argument("path", nargs="?", type=Path, help="file to open")
    parser.add_argument(
        "--system-clipboard",
        action="store_true",
        help="back the * and + registers with the OS clipboard",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _parse_args(argv)
    config = EngineConfig.from_env()
    if args.system_clipboard:
        config = replace(config, use_system_clipboard=True)
    ModalEngineApp(path=args.path, config=config).run()


if __name__ == "__main__":  # pragma: no cover - manual run
    main()
