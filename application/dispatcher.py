"""Action hub: queue, routing and global UI state.

Every intent enters through ``ActionQueue.send`` and is delivered by
``Dispatcher.drain`` in FIFO order. ``route`` decides the recipient:

- ``ALL``: the dispatcher updates its own state, then broadcasts;
- ``FOCUSED``: the component holding focus;
- ``DATABASE_*``: the store, followed by a re-fetch of the touched scope;
- a concrete component id: that component.
"""

import logging
import queue
from typing import Callable, Dict, Optional, Tuple

from application.keymap import KeybindingMatcher
from application.ports import RecordStore
from core import actions as act
from core.actions import Action, ComponentId, Mode
from core.errors import KIND_TASK, DuplicateNameError, NotFoundError

logger = logging.getLogger("dome.dispatch")

_QUIET = (act.Tick, act.Render)
_FOCUS_TARGETS = {
    act.FocusOnTasks: ComponentId.TASKS,
    act.FocusOnWorkspaces: ComponentId.WORKSPACES,
}


class ActionQueue:
    """Unbounded FIFO shared by every producer (keys, ticks, components)."""

    def __init__(self):
        self._queue: "queue.SimpleQueue[Action]" = queue.SimpleQueue()

    def send(self, action: Action) -> None:
        self._queue.put(action)

    def try_recv(self) -> Optional[Action]:
        try:
            return self._queue.get_nowait()
        except queue.Empty:
            return None

    def empty(self) -> bool:
        return self._queue.empty()


class Dispatcher:
    def __init__(
        self,
        store: RecordStore,
        components: Dict[ComponentId, object],
        matcher: KeybindingMatcher,
        action_queue: Optional[ActionQueue] = None,
        *,
        config: Optional[Dict] = None,
        initial_focus: ComponentId = ComponentId.WORKSPACES,
        on_render: Optional[Callable[[], None]] = None,
        on_clear: Optional[Callable[[], None]] = None,
    ):
        self.store = store
        self.components = dict(components)
        self.matcher = matcher
        self.queue = action_queue or ActionQueue()
        self.config = dict(config or {})
        self.initial_focus = initial_focus
        self.on_render = on_render
        self.on_clear = on_clear

        self.focused: Optional[ComponentId] = None
        self.mode = Mode.NAVIGATION
        self.should_quit = False
        self.should_suspend = False
        self.selected_workspace: Optional[int] = None
        self.help_visible = False
        self.size: Optional[Tuple[int, int]] = None

    # ---------- lifecycle ----------
    def start(self) -> None:
        for component in self.components.values():
            component.register_action_handler(self.queue)
            component.register_config_handler(self.config)
        for component in self.components.values():
            component.init()
        self.set_focus(self.initial_focus)

    def send(self, action: Action) -> None:
        self.queue.send(action)

    def handle_key(self, key: str, data: str = "") -> None:
        if self.mode is Mode.INSERT:
            self.send(act.SendKeyEvent(key, data))
            return
        action = self.matcher.feed(key, self.mode)
        if action is not None:
            self.send(action)

    def drain(self) -> int:
        """Deliver queued actions, including follow-ups, until the queue is empty."""
        handled = 0
        while True:
            action = self.queue.try_recv()
            if action is None:
                return handled
            self.dispatch(action)
            handled += 1

    # ---------- routing ----------
    def dispatch(self, action: Action) -> None:
        if not isinstance(action, _QUIET):
            logger.info("Got action: %s", action)
        target = action.target
        if target is ComponentId.ALL:
            self._apply_global(action)
            for component in list(self.components.values()):
                component.update(action)
        elif target is ComponentId.FOCUSED:
            component = self.components.get(self.focused) if self.focused else None
            if component is None:
                logger.error("No focused component for %s", action.variant)
                return
            component.update(action)
        elif target is ComponentId.DATABASE_SET_TASKS:
            self._write(action)
            if self.selected_workspace is not None:
                self.send(act.RequestTasksData(self.selected_workspace))
        elif target is ComponentId.DATABASE_SET_WORKSPACES:
            self._write(action)
            self.send(act.RequestWorkspacesData())
            if isinstance(action, act.RemoveWorkspace) and self.selected_workspace is not None:
                self.send(act.RequestTasksData(self.selected_workspace))
        elif target is ComponentId.DATABASE_GET:
            self._read(action)
        elif target is ComponentId.NONE:
            return
        else:
            component = self.components.get(target)
            if component is None:
                logger.error("Component not found: %s (action %s)", target.value, action.variant)
                return
            component.update(action)

    def set_focus(self, target: ComponentId) -> None:
        if target == self.focused:
            return
        new = self.components.get(target)
        if new is None:
            logger.error("Cannot focus missing component %s", target.value)
            return
        old = self.components.get(self.focused) if self.focused else None
        if old is not None:
            old.focus(False)
        self.focused = target
        new.focus(True)

    # ---------- global state ----------
    def _apply_global(self, action: Action) -> None:
        if isinstance(action, act.Tick):
            self.matcher.tick()
        elif isinstance(action, act.Render):
            if self.on_render is not None:
                self.on_render()
        elif isinstance(action, act.Quit):
            self.should_quit = True
        elif isinstance(action, act.Suspend):
            self.should_suspend = True
        elif isinstance(action, act.Resume):
            self.should_suspend = False
        elif isinstance(action, act.ClearScreen):
            if self.on_clear is not None:
                self.on_clear()
        elif isinstance(action, act.Resize):
            self.size = (action.width, action.height)
        elif isinstance(action, act.Help):
            self.help_visible = not self.help_visible
        elif isinstance(action, act.Error):
            logger.error("Error: %s", action.message)
        elif isinstance(action, act.EnterInsertMode):
            self.mode = Mode.INSERT
            self.matcher.cancel()
        elif isinstance(action, act.LeaveInsertMode):
            self.mode = Mode.NAVIGATION
            self.matcher.cancel()
        elif isinstance(action, act.SelectWorkspace):
            self.selected_workspace = action.id
        elif isinstance(action, act.UnselectWorkspace):
            self.selected_workspace = None
            if self.focused is ComponentId.TASKS:
                self.set_focus(ComponentId.WORKSPACES)
        elif isinstance(action, (act.FocusOnTasks, act.FocusOnWorkspaces)):
            target = _FOCUS_TARGETS[type(action)]
            if target is ComponentId.TASKS and self.selected_workspace is None:
                logger.debug("Ignoring focus on tasks without a selected workspace")
                return
            self.set_focus(target)
        elif isinstance(action, act.OpenSortMenu):
            if self.focused in (ComponentId.TASKS, ComponentId.WORKSPACES):
                self.send(act.SetupSortMenu(self.focused))
                self.set_focus(ComponentId.SORT_MENU)
        elif isinstance(action, act.ExitSortMenu):
            self.set_focus(action.objective)

    # ---------- store ----------
    def _write(self, action: Action) -> None:
        try:
            if isinstance(action, act.AddTask):
                self.store.add_task(action.info)
            elif isinstance(action, act.UpdateTask):
                self.store.update_task(action.info)
            elif isinstance(action, act.RemoveTask):
                self.store.remove_task(action.id)
            elif isinstance(action, act.AddWorkspace):
                self.store.add_workspace(action.info)
            elif isinstance(action, act.UpdateWorkspace):
                self.store.update_workspace(action.info)
            elif isinstance(action, act.RemoveWorkspace):
                self.store.remove_workspace(action.id)
        except DuplicateNameError as exc:
            logger.info("%s", exc)
            if exc.kind == KIND_TASK:
                self.send(act.HighlightTask(exc.name))
            else:
                self.send(act.HighlightWorkspace(exc.name))
        except NotFoundError as exc:
            logger.warning("Ignoring %s: %s", action.variant, exc)

    def _read(self, action: Action) -> None:
        if isinstance(action, act.RequestTasksData):
            tasks = self.store.list_tasks(action.workspace_id)
            self.send(act.NewTasksData(tuple(tasks), action.workspace_id))
        elif isinstance(action, act.RequestWorkspacesData):
            self.send(act.NewWorkspacesData(tuple(self.store.list_workspaces())))


__all__ = ["ActionQueue", "Dispatcher"]
