#!/usr/bin/env python3
"""TUI application - DomeTUI wires the dispatcher to a prompt_toolkit Application."""

import asyncio
import logging
import os
from typing import List, Optional, Tuple

from prompt_toolkit.application import Application
from prompt_toolkit.filters import Condition
from prompt_toolkit.formatted_text import FormattedText
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.keys import Keys
from prompt_toolkit.layout import HSplit, Layout, VSplit, Window
from prompt_toolkit.layout.containers import ConditionalContainer, Float, FloatContainer
from prompt_toolkit.layout.controls import FormattedTextControl
from prompt_toolkit.layout.dimension import Dimension
from prompt_toolkit.widgets import Frame

from application.dispatcher import ActionQueue, Dispatcher
from application.keymap import DEFAULT_KEYBINDINGS, KeybindingMatcher, Keymaps, build_keymaps
from application.ports import RecordStore
from application.selection import SelectionTracker
from core.actions import ClearScreen, ComponentId, Mode, Render, Resize, Resume, Tick

from .components import WORKSPACES_WIDTH, SortMenu, TasksComponent, WorkspacesComponent
from .tui_themes import DEFAULT_THEME, build_style

logger = logging.getLogger("dome.tui")

SORT_MENU_WIDTH = 32

# Keys that never reach the matcher: terminal reports and pseudo keys.
_NON_INPUT_KEYS = {
    Keys.Any,
    Keys.CPRResponse,
    Keys.Vt100MouseEvent,
    Keys.WindowsMouseEvent,
    Keys.BracketedPaste,
    Keys.SIGINT,
    Keys.Ignore,
    Keys.ScrollUp,
    Keys.ScrollDown,
}


def key_name(key) -> str:
    """prompt_toolkit KeyPress.key -> the string form used in keymaps."""
    return key.value if isinstance(key, Keys) else str(key)


def format_keys(keys: Tuple[str, ...]) -> str:
    names = {" ": "space", "c-m": "enter", "c-i": "tab", "c-h": "backspace", "escape": "esc"}
    return "".join(names.get(k, k) for k in keys)


class DomeTUI:
    def __init__(
        self,
        store: RecordStore,
        keymaps: Optional[Keymaps] = None,
        tick_rate: float = 4.0,
        frame_rate: float = 30.0,
        theme: str = DEFAULT_THEME,
        config: Optional[dict] = None,
    ):
        self.tick_rate = tick_rate
        self.frame_rate = frame_rate
        self.keymaps = keymaps or build_keymaps(DEFAULT_KEYBINDINGS)
        self.queue = ActionQueue()
        tracker = SelectionTracker()
        self.workspaces = WorkspacesComponent(tracker)
        self.tasks = TasksComponent(tracker)
        self.sort_menu = SortMenu()
        self.dispatcher = Dispatcher(
            store,
            {
                ComponentId.WORKSPACES: self.workspaces,
                ComponentId.TASKS: self.tasks,
                ComponentId.SORT_MENU: self.sort_menu,
            },
            KeybindingMatcher(self.keymaps),
            self.queue,
            config=config,
            on_render=self._invalidate,
            on_clear=self._clear,
        )
        self._exiting = False
        self._last_size: Optional[Tuple[int, int]] = None

        self.style = build_style(theme)
        self.app = Application(
            layout=Layout(self._build_layout()),
            key_bindings=self._build_key_bindings(),
            style=self.style,
            full_screen=True,
            refresh_interval=None,
        )
        # Esc is a regular key here; do not wait for escape sequences long.
        try:
            self.app.ttimeoutlen = max(0.0, float(os.getenv("DOME_TUI_TTIMEOUTLEN", "0.05")))
        except ValueError:
            self.app.ttimeoutlen = 0.05
        self.app.before_render += self._check_size

    # ---------- layout ----------
    def _build_layout(self):
        body = VSplit(
            [
                Window(FormattedTextControl(self.workspaces.render, focusable=True), width=WORKSPACES_WIDTH),
                Window(width=1, char="│", style="class:border"),
                Window(FormattedTextControl(self.tasks.render), wrap_lines=False),
            ]
        )
        status = Window(FormattedTextControl(self._status_text), height=1, style="class:status")
        sort_menu = ConditionalContainer(
            Frame(
                Window(FormattedTextControl(self.sort_menu.render), width=SORT_MENU_WIDTH, style="class:menu"),
                title="Sort",
            ),
            filter=Condition(lambda: self.sort_menu.is_open),
        )
        help_box = ConditionalContainer(
            Frame(
                Window(FormattedTextControl(self._help_text), width=Dimension(max=60), style="class:menu"),
                title="Keys (? to close)",
            ),
            filter=Condition(lambda: self.dispatcher.help_visible),
        )
        return FloatContainer(
            content=HSplit([body, status]),
            floats=[Float(content=sort_menu), Float(content=help_box)],
        )

    def _status_text(self) -> FormattedText:
        mode = self.dispatcher.mode
        fragments: List[Tuple[str, str]] = [("class:status.mode", f" {mode.value.upper()} ")]
        pending = self.dispatcher.matcher.pending
        if pending:
            fragments.append(("class:status.keys", f" {format_keys(pending)}"))
        if mode is Mode.INSERT:
            fragments.append(("class:status", "  enter: save  esc: cancel"))
        else:
            fragments.append(("class:status", "  ?: help  q: quit"))
        return FormattedText(fragments)

    def _help_text(self) -> FormattedText:
        fragments: List[Tuple[str, str]] = []
        for mode in (Mode.GLOBAL, Mode.NAVIGATION):
            fragments.append(("class:header", f" {mode.value}\n"))
            for keys, action in sorted(self.keymaps.get(mode, {}).items(), key=lambda item: item[1].variant):
                fragments.append(("class:status.keys", f"  {format_keys(keys):<10}"))
                fragments.append(("class:text", f" {action.variant}\n"))
        return FormattedText(fragments)

    # ---------- input ----------
    def _build_key_bindings(self) -> KeyBindings:
        kb = KeyBindings()
        # Chords are resolved by the KeybindingMatcher, not by prompt_toolkit.
        kb.timeout = 0

        def _on_key(event):
            for press in event.key_sequence:
                self.dispatcher.handle_key(key_name(press.key), press.data)
            self.pump()

        kb.add(Keys.Any, eager=True)(_on_key)
        # Named keys need explicit bindings to win over prompt_toolkit's defaults.
        for key in Keys:
            if key not in _NON_INPUT_KEYS:
                kb.add(key, eager=True)(_on_key)
        return kb

    # ---------- loop ----------
    def pump(self) -> None:
        """Drain the action queue and apply quit/suspend requests."""
        try:
            self.dispatcher.drain()
        except Exception as exc:
            logger.exception("Fatal error while dispatching actions")
            if self.app.is_running and not self._exiting:
                self._exiting = True
                self.app.exit(exception=exc)
                return
            raise
        if self.dispatcher.should_quit:
            if self.app.is_running and not self._exiting:
                self._exiting = True
                self.app.exit()
        elif self.dispatcher.should_suspend and self.app.is_running:
            self.app.suspend_to_background()
            self.dispatcher.send(Resume())
            self.dispatcher.send(ClearScreen())
            self.pump()

    async def _periodic(self, rate: float, factory) -> None:
        interval = 1.0 / rate
        while True:
            await asyncio.sleep(interval)
            self.dispatcher.send(factory())
            self.pump()

    def _pre_run(self) -> None:
        self.app.create_background_task(self._periodic(self.tick_rate, Tick))
        self.app.create_background_task(self._periodic(self.frame_rate, Render))

    def _invalidate(self) -> None:
        self.app.invalidate()

    def _clear(self) -> None:
        if self.app.is_running:
            self.app.renderer.clear()

    def _check_size(self, _app=None) -> None:
        size = self.app.output.get_size()
        current = (size.columns, size.rows)
        if current != self._last_size:
            self._last_size = current
            self.dispatcher.send(Resize(*current))

    def start(self) -> None:
        self.dispatcher.start()
        self.pump()

    def run(self) -> None:
        self.start()
        logger.info("starting TUI (tick %.1f Hz, frame %.1f Hz)", self.tick_rate, self.frame_rate)
        self.app.run(pre_run=self._pre_run)
        logger.info("TUI stopped")


__all__ = ["DomeTUI", "key_name", "format_keys", "WORKSPACES_WIDTH"]
