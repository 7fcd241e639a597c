"""UI recipients: the workspace list, the task list and the sort menu.

Components never touch the store. They turn navigation/edit intents into
store-mutation actions, receive fresh data through ``New*Data`` and keep
their cursor stable with a ``SelectionTracker``.
"""

import logging
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from prompt_toolkit.formatted_text import FormattedText

from application.selection import WORKSPACE_SCOPE, SelectionTracker
from core import actions as act
from core.actions import Action, ComponentId
from core.models import (
    PRIORITY_MAX,
    PRIORITY_MIN,
    AddTask,
    AddWorkspace,
    UpdateTask,
    UpdateWorkspace,
)
from core.sorting import (
    TASK_SORT_OPTIONS,
    WORKSPACE_SORT_OPTIONS,
    TaskSorter,
    WorkspaceSorter,
)

from .line_editor import CANCEL, SUBMIT, LineEditor
from .tui_display import display_width, trim_display

logger = logging.getLogger("dome.tui")

HIGHLIGHT_TICKS = 10
WORKSPACES_WIDTH = 24
DEFAULT_WIDTH = 80


class Component:
    """Base recipient: receives actions, may send actions, draws itself."""

    component_id: ComponentId = ComponentId.NONE

    def __init__(self):
        self.action_queue = None
        self.config: Dict[str, Any] = {}
        self.is_focused = False

    def register_action_handler(self, action_queue) -> None:
        self.action_queue = action_queue

    def register_config_handler(self, config: Dict[str, Any]) -> None:
        self.config = dict(config or {})

    def init(self) -> None:
        pass

    def update(self, action: Action) -> None:
        pass

    def focus(self, focused: bool) -> None:
        self.is_focused = focused

    def render(self) -> FormattedText:
        return FormattedText([])

    def send(self, action: Action) -> None:
        if self.action_queue is None:
            raise RuntimeError(f"{type(self).__name__} has no action handler registered")
        self.action_queue.send(action)


class EditState(Enum):
    NONE = "none"
    INSERT = "insert"
    RENAME = "rename"
    DESCRIBE = "describe"


_NAVIGATION = (act.GoUp, act.GoDown, act.GoToTop, act.GoToBottom)
_MOVES = (act.MoveItemUp, act.MoveItemDown, act.MoveItemTop, act.MoveItemBottom)


class ListComponent(Component):
    """Shared behaviour of the workspace and task lists.

    Both lists may share one ``SelectionTracker``; scopes keep them apart
    and let the workspace list drop what the task list remembers about a
    removed workspace.
    """

    title = ""
    empty_text = "Nothing here yet"

    def __init__(self, tracker: Optional[SelectionTracker] = None):
        super().__init__()
        self.items: List[Any] = []
        self.selected: Optional[int] = None
        self.tracker = tracker if tracker is not None else SelectionTracker()
        self.editor = LineEditor()
        self.edit_state = EditState.NONE
        self.insert_row: Optional[int] = None
        self.insert_order: Optional[int] = None
        self.highlight: Optional[Tuple[str, int]] = None
        self.sorter: Any = None
        self.width = DEFAULT_WIDTH

    # ---------- hooks ----------
    @property
    def scope(self):
        raise NotImplementedError

    def can_edit(self) -> bool:
        return True

    def _add_action(self, name: str, order: Optional[int]) -> Action:
        raise NotImplementedError

    def _rename_action(self, record, name: str) -> Action:
        raise NotImplementedError

    def _move_action(self, record, order: int) -> Action:
        raise NotImplementedError

    def _remove_action(self, record) -> Action:
        raise NotImplementedError

    def _describe_action(self, record, text: str) -> Optional[Action]:
        return None

    def _on_cursor_moved(self) -> None:
        pass

    def _render_row(self, record, selected: bool) -> List[Tuple[str, str]]:
        raise NotImplementedError

    # ---------- state ----------
    @property
    def current(self):
        if self.selected is None or not self.items:
            return None
        return self.items[self.selected]

    @property
    def editing(self) -> bool:
        return self.edit_state is not EditState.NONE

    def load(self, records) -> None:
        self.items = self.sorter.sort(records)
        self.selected = self.tracker.reload(self.scope, self.items)

    def apply_sorter(self, sorter) -> None:
        keep = self.current
        self.sorter = sorter
        self.items = sorter.sort(self.items)
        if keep is not None:
            self.selected = next(i for i, item in enumerate(self.items) if item.id == keep.id)
            self.tracker.navigate(self.scope, self.selected)

    def select(self, index: Optional[int]) -> None:
        if index == self.selected:
            return
        self.selected = index
        self.tracker.navigate(self.scope, index)
        self._on_cursor_moved()

    def resize(self, terminal_width: int) -> None:
        self.width = max(1, terminal_width)

    # ---------- actions ----------
    def update_list(self, action: Action) -> bool:
        """Handle what both lists share; False when ``action`` is not one of those."""
        if isinstance(action, act.Tick):
            self._tick_highlight()
        elif isinstance(action, act.Resize):
            self.resize(action.width)
        elif isinstance(action, act.SendKeyEvent):
            if self.editing:
                self._edit_key(action.key, action.data)
        elif self.editing:
            # The editor owns the list until it is submitted or cancelled.
            return True
        elif isinstance(action, _NAVIGATION):
            self._navigate(action)
        elif isinstance(action, _MOVES):
            self._move(action)
        elif isinstance(action, (act.AddItemAfter, act.AddItemBefore)):
            self._start_insert(after=isinstance(action, act.AddItemAfter))
        elif isinstance(action, act.EditItem):
            if self.current is not None and self.can_edit():
                self._start_edit(EditState.RENAME, self.current.name)
        elif isinstance(action, act.DeleteItem):
            self._delete()
        else:
            return False
        return True

    def _navigate(self, action: Action) -> None:
        count = len(self.items)
        if count == 0:
            return
        if isinstance(action, act.GoToTop):
            target = 0
        elif isinstance(action, act.GoToBottom):
            target = count - 1
        elif self.selected is None:
            target = 0
        elif isinstance(action, act.GoDown):
            target = (self.selected + 1) % count
        else:
            target = (self.selected - 1) % count
        self.select(target)

    def _move(self, action: Action) -> None:
        record = self.current
        if record is None:
            return
        last = len(self.items) - 1
        if isinstance(action, act.MoveItemUp):
            target = record.order - 1
        elif isinstance(action, act.MoveItemDown):
            target = record.order + 1
        elif isinstance(action, act.MoveItemTop):
            target = 0
        else:
            target = last
        target = max(0, min(target, last))
        if target == record.order:
            return
        self.tracker.expect(self.scope, self.selected, record.name)
        self.send(self._move_action(record, target))

    def _delete(self) -> None:
        record = self.current
        if record is None:
            return
        self.tracker.expect(self.scope, self.selected)
        self.send(self._remove_action(record))

    def _start_insert(self, after: bool) -> None:
        if not self.can_edit():
            return
        record = self.current
        if record is None:
            self.insert_row = len(self.items) if after else 0
            self.insert_order = None if after else 0
        elif after:
            self.insert_row = self.selected + 1
            self.insert_order = record.order + 1
        else:
            self.insert_row = self.selected
            self.insert_order = record.order
        self._start_edit(EditState.INSERT, "")

    def _start_edit(self, state: EditState, text: str) -> None:
        self.edit_state = state
        self.editor.reset(text)
        self.send(act.EnterInsertMode())

    def _finish_edit(self) -> None:
        self.edit_state = EditState.NONE
        self.insert_row = None
        self.insert_order = None
        self.editor.reset()
        self.send(act.LeaveInsertMode())

    def _edit_key(self, key: str, data: str) -> None:
        outcome = self.editor.handle_key(key, data)
        if outcome == CANCEL:
            self._finish_edit()
        elif outcome == SUBMIT:
            self._submit(self.editor.text.strip())
            self._finish_edit()

    def _submit(self, text: str) -> None:
        record = self.current
        if self.edit_state is EditState.INSERT:
            if text:
                self.tracker.expect(self.scope, self.insert_row or 0, text)
                self.send(self._add_action(text, self.insert_order))
        elif self.edit_state is EditState.RENAME:
            if record is not None and text and text != record.name:
                self.tracker.expect(self.scope, self.selected, text)
                self.send(self._rename_action(record, text))
        elif self.edit_state is EditState.DESCRIBE and record is not None:
            describe = self._describe_action(record, text)
            if describe is not None:
                self.tracker.expect(self.scope, self.selected, record.name)
                self.send(describe)

    def _tick_highlight(self) -> None:
        if self.highlight is None:
            return
        name, ticks = self.highlight
        self.highlight = (name, ticks - 1) if ticks > 1 else None

    def start_highlight(self, name: str) -> None:
        """The store rejected ``name``; the reload that follows keeps the cursor."""
        self.tracker.discard_hint(self.scope)
        self.highlight = (name, self.highlight_ticks)

    @property
    def highlight_ticks(self) -> int:
        return int(self.config.get("highlight_ticks", HIGHLIGHT_TICKS))

    def is_highlighted(self, record) -> bool:
        return self.highlight is not None and self.highlight[0] == record.name

    # ---------- rendering ----------
    def render(self) -> FormattedText:
        header_style = "class:header" if self.is_focused else "class:header.dim"
        fragments: List[Tuple[str, str]] = [(header_style, f" {self.title}"), ("class:text.dim", f"  {self.sorter.label}\n")]
        rows: List[List[Tuple[str, str]]] = []
        for index, record in enumerate(self.items):
            if self.edit_state is EditState.RENAME and index == self.selected:
                rows.append(self._render_editor())
            else:
                rows.append(self._render_row(record, self.is_focused and index == self.selected))
        if self.edit_state is EditState.INSERT:
            rows.insert(max(0, min(self.insert_row or 0, len(rows))), self._render_editor())
        if not rows:
            rows.append([("class:text.dimmer", f"  {self.empty_text}")])
        for row in rows:
            fragments.extend(row)
            fragments.append(("", "\n"))
        if self.edit_state is EditState.DESCRIBE and self.current is not None:
            fragments.append(("class:text.dim", " description: "))
            fragments.extend(self._render_editor()[1:])
            fragments.append(("", "\n"))
        return FormattedText(fragments)

    def _render_editor(self) -> List[Tuple[str, str]]:
        before, under, after = self.editor.split()
        return [
            ("class:editor", " > "),
            ("class:editor", before),
            ("class:editor.cursor", under),
            ("class:editor", after),
        ]


class WorkspacesComponent(ListComponent):
    component_id = ComponentId.WORKSPACES
    title = "Workspaces"
    empty_text = "No workspaces (o to add)"

    def __init__(self, tracker: Optional[SelectionTracker] = None):
        super().__init__(tracker)
        self.sorter = WorkspaceSorter()
        self.active_id: Optional[int] = None
        self.width = WORKSPACES_WIDTH

    @property
    def scope(self):
        return WORKSPACE_SCOPE

    def resize(self, terminal_width: int) -> None:
        self.width = min(WORKSPACES_WIDTH, max(1, terminal_width))

    def init(self) -> None:
        self.send(act.RequestWorkspacesData())

    def update(self, action: Action) -> None:
        if isinstance(action, act.NewWorkspacesData):
            self.load(action.workspaces)
            self._announce_selection()
        elif isinstance(action, act.HighlightWorkspace):
            self.start_highlight(action.name)
        elif isinstance(action, act.SortWorkspaces):
            self.apply_sorter(action.sorter)
        elif isinstance(action, act.SelectWorkspace):
            self.active_id = action.id
        elif isinstance(action, act.UnselectWorkspace):
            self.active_id = None
        elif isinstance(action, act.Select):
            if self.current is not None and not self.editing:
                self._announce_selection()
                self.send(act.FocusOnTasks())
        else:
            self.update_list(action)

    def _on_cursor_moved(self) -> None:
        self._announce_selection()

    def _announce_selection(self) -> None:
        record = self.current
        if record is None:
            if self.active_id is not None:
                self.active_id = None
                self.send(act.UnselectWorkspace())
        elif record.id != self.active_id:
            self.active_id = record.id
            self.send(act.SelectWorkspace(record.id))

    def _add_action(self, name: str, order: Optional[int]) -> Action:
        return act.AddWorkspace(AddWorkspace(name=name, order=order))

    def _rename_action(self, record, name: str) -> Action:
        return act.UpdateWorkspace(UpdateWorkspace(id=record.id, name=name))

    def _move_action(self, record, order: int) -> Action:
        return act.UpdateWorkspace(UpdateWorkspace(id=record.id, order=order))

    def _remove_action(self, record) -> Action:
        return act.RemoveWorkspace(record.id)

    def _delete(self) -> None:
        record = self.current
        super()._delete()
        if record is not None:
            self.tracker.forget(record.id)

    def _render_row(self, record, selected: bool) -> List[Tuple[str, str]]:
        if self.is_highlighted(record):
            style = "class:highlight"
        elif selected:
            style = "class:selected"
        elif record.id == self.active_id:
            style = "class:text.active"
        else:
            style = "class:text"
        return [(style, " " + trim_display(record.name, self.width - 2))]


class TasksComponent(ListComponent):
    component_id = ComponentId.TASKS
    title = "Tasks"
    empty_text = "No tasks (o to add)"

    def __init__(self, tracker: Optional[SelectionTracker] = None):
        super().__init__(tracker)
        self.sorter = TaskSorter()
        self.workspace_id: Optional[int] = None

    @property
    def scope(self):
        return self.workspace_id

    def resize(self, terminal_width: int) -> None:
        self.width = max(1, terminal_width - WORKSPACES_WIDTH - 1)

    def can_edit(self) -> bool:
        return self.workspace_id is not None

    def update(self, action: Action) -> None:
        if isinstance(action, act.SelectWorkspace):
            if action.id != self.workspace_id:
                self.workspace_id = action.id
                self.items = []
                self.selected = None
                self.send(act.RequestTasksData(action.id))
        elif isinstance(action, act.UnselectWorkspace):
            self.workspace_id = None
            self.items = []
            self.selected = None
        elif isinstance(action, act.NewTasksData):
            if action.workspace_id == self.workspace_id:
                self.load(action.tasks)
            else:
                logger.debug("dropping tasks of workspace %s", action.workspace_id)
        elif isinstance(action, act.HighlightTask):
            self.start_highlight(action.name)
        elif isinstance(action, act.SortTasks):
            self.apply_sorter(action.sorter)
        elif self.update_list(action):
            return
        elif isinstance(action, (act.ToggleCompletion, act.Select)):
            self._toggle_completion()
        elif isinstance(action, act.IncreasePriority):
            self._shift_priority(+1)
        elif isinstance(action, act.DecreasePriority):
            self._shift_priority(-1)
        elif isinstance(action, act.EditDescription):
            if self.current is not None:
                self._start_edit(EditState.DESCRIBE, self.current.description or "")
        elif isinstance(action, act.Cancel):
            self.send(act.FocusOnWorkspaces())

    def _toggle_completion(self) -> None:
        task = self.current
        if task is None:
            return
        self.tracker.expect(self.scope, self.selected, task.name)
        self.send(act.UpdateTask(UpdateTask(id=task.id, completed=not task.completed)))

    def _shift_priority(self, delta: int) -> None:
        task = self.current
        if task is None:
            return
        priority = max(PRIORITY_MIN, min(PRIORITY_MAX, task.priority + delta))
        if priority == task.priority:
            return
        self.tracker.expect(self.scope, self.selected, task.name)
        self.send(act.UpdateTask(UpdateTask(id=task.id, priority=priority)))

    def _add_action(self, name: str, order: Optional[int]) -> Action:
        return act.AddTask(AddTask(name=name, workspace_id=self.workspace_id, order=order))

    def _rename_action(self, record, name: str) -> Action:
        return act.UpdateTask(UpdateTask(id=record.id, name=name))

    def _move_action(self, record, order: int) -> Action:
        return act.UpdateTask(UpdateTask(id=record.id, order=order))

    def _remove_action(self, record) -> Action:
        return act.RemoveTask(record.id)

    def _describe_action(self, record, text: str) -> Optional[Action]:
        if text == (record.description or ""):
            return None
        return act.UpdateTask(UpdateTask(id=record.id, description=text))

    def render(self) -> FormattedText:
        if self.workspace_id is None:
            return FormattedText([("class:header.dim", f" {self.title}\n"), ("class:text.dimmer", "  No workspace selected\n")])
        return super().render()

    def _render_row(self, record, selected: bool) -> List[Tuple[str, str]]:
        if self.is_highlighted(record):
            style = "class:highlight"
        elif selected:
            style = "class:selected"
        elif record.completed:
            style = "class:text.done"
        else:
            style = "class:text"
        mark = "[x]" if record.completed else "[ ]"
        prefix = f" {mark} P{record.priority} "
        room = self.width - display_width(prefix)
        name = trim_display(record.name, room)
        row = [
            (style, f" {mark} "),
            (f"class:priority.p{record.priority}", f"P{record.priority} "),
            (style, name),
        ]
        room -= display_width(name) + 2
        if record.description and room > 3:
            row.append(("class:text.dim", "  " + trim_display(record.description, room)))
        return row


class SortMenu(Component):
    component_id = ComponentId.SORT_MENU

    def __init__(self):
        super().__init__()
        self.objective: Optional[ComponentId] = None
        self.options: Tuple = ()
        self.selected = 0
        self.descending = False

    @property
    def is_open(self) -> bool:
        return self.objective is not None

    def update(self, action: Action) -> None:
        if isinstance(action, act.SetupSortMenu):
            self.objective = action.objective
            self.options = TASK_SORT_OPTIONS if action.objective is ComponentId.TASKS else WORKSPACE_SORT_OPTIONS
            self.selected = 0
            self.descending = False
        elif isinstance(action, act.ExitSortMenu):
            self.objective = None
        elif not self.is_open:
            return
        elif isinstance(action, act.ToggleSortDirection):
            self.descending = not self.descending
        elif isinstance(action, _NAVIGATION):
            self._navigate(action)
        elif isinstance(action, act.Select):
            sort_type = self.options[self.selected]
            if self.objective is ComponentId.TASKS:
                self.send(act.SortTasks(TaskSorter(sort_type, self.descending)))
            else:
                self.send(act.SortWorkspaces(WorkspaceSorter(sort_type, self.descending)))
            self.send(act.ExitSortMenu(self.objective))
        elif isinstance(action, act.Cancel):
            self.send(act.ExitSortMenu(self.objective))

    def _navigate(self, action: Action) -> None:
        count = len(self.options)
        if isinstance(action, act.GoToTop):
            self.selected = 0
        elif isinstance(action, act.GoToBottom):
            self.selected = count - 1
        elif isinstance(action, act.GoDown):
            self.selected = (self.selected + 1) % count
        else:
            self.selected = (self.selected - 1) % count

    def render(self) -> FormattedText:
        target = "tasks" if self.objective is ComponentId.TASKS else "workspaces"
        fragments: List[Tuple[str, str]] = [("class:header", f" Sort {target} by\n")]
        for index, option in enumerate(self.options):
            style = "class:selected" if index == self.selected else "class:text"
            fragments.append((style, f"  {option.value}\n"))
        direction = "descending" if self.descending else "ascending"
        fragments.append(("class:text.dim", f" {direction} (r to toggle)\n"))
        return FormattedText(fragments)


__all__ = [
    "Component",
    "ListComponent",
    "WorkspacesComponent",
    "TasksComponent",
    "SortMenu",
    "EditState",
    "HIGHLIGHT_TICKS",
]
