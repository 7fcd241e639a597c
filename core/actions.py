"""Actions flowing through the dispatcher and the static routing table.

Every intent of the application is one frozen dataclass deriving from
``Action``. ``route`` maps each variant to the recipient that owns it; the
table is closed, and a variant without an entry is a ``RoutingError``.
"""

from dataclasses import dataclass, fields
from enum import Enum
from typing import Dict, List, Optional, Tuple, Type

from .errors import ConfigError, RoutingError
from .models import AddTask as AddTaskRecord
from .models import AddWorkspace as AddWorkspaceRecord
from .models import Task, UpdateTask as UpdateTaskRecord
from .models import UpdateWorkspace as UpdateWorkspaceRecord
from .models import Workspace
from .sorting import TaskSorter, WorkspaceSorter


class ComponentId(Enum):
    WORKSPACES = "workspaces"
    TASKS = "tasks"
    SORT_MENU = "sort_menu"
    DATABASE_GET = "database_get"
    DATABASE_SET_TASKS = "database_set_tasks"
    DATABASE_SET_WORKSPACES = "database_set_workspaces"
    # Virtual targets
    ALL = "all"
    FOCUSED = "focused"
    NONE = "none"


class Mode(Enum):
    GLOBAL = "Global"
    NAVIGATION = "Navigation"
    INSERT = "Insert"


@dataclass(frozen=True)
class Action:
    @property
    def variant(self) -> str:
        return type(self).__name__

    @property
    def target(self) -> ComponentId:
        return route(self)


# ---- lifecycle ----
@dataclass(frozen=True)
class Tick(Action):
    pass


@dataclass(frozen=True)
class Render(Action):
    pass


@dataclass(frozen=True)
class Resize(Action):
    width: int
    height: int


@dataclass(frozen=True)
class Suspend(Action):
    pass


@dataclass(frozen=True)
class Resume(Action):
    pass


@dataclass(frozen=True)
class Quit(Action):
    pass


@dataclass(frozen=True)
class ClearScreen(Action):
    pass


@dataclass(frozen=True)
class Error(Action):
    message: str


@dataclass(frozen=True)
class Help(Action):
    pass


# ---- navigation ----
@dataclass(frozen=True)
class GoUp(Action):
    pass


@dataclass(frozen=True)
class GoDown(Action):
    pass


@dataclass(frozen=True)
class GoToTop(Action):
    pass


@dataclass(frozen=True)
class GoToBottom(Action):
    pass


# ---- modes ----
@dataclass(frozen=True)
class EnterInsertMode(Action):
    pass


@dataclass(frozen=True)
class LeaveInsertMode(Action):
    pass


@dataclass(frozen=True)
class SendKeyEvent(Action):
    key: str
    data: str = ""


# ---- list editing intents ----
@dataclass(frozen=True)
class AddItemBefore(Action):
    pass


@dataclass(frozen=True)
class AddItemAfter(Action):
    pass


@dataclass(frozen=True)
class DeleteItem(Action):
    pass


@dataclass(frozen=True)
class EditItem(Action):
    pass


@dataclass(frozen=True)
class EditDescription(Action):
    pass


@dataclass(frozen=True)
class ToggleCompletion(Action):
    pass


@dataclass(frozen=True)
class IncreasePriority(Action):
    pass


@dataclass(frozen=True)
class DecreasePriority(Action):
    pass


@dataclass(frozen=True)
class MoveItemUp(Action):
    pass


@dataclass(frozen=True)
class MoveItemDown(Action):
    pass


@dataclass(frozen=True)
class MoveItemTop(Action):
    pass


@dataclass(frozen=True)
class MoveItemBottom(Action):
    pass


# ---- store mutations ----
@dataclass(frozen=True)
class AddTask(Action):
    info: AddTaskRecord


@dataclass(frozen=True)
class AddWorkspace(Action):
    info: AddWorkspaceRecord


@dataclass(frozen=True)
class UpdateTask(Action):
    info: UpdateTaskRecord


@dataclass(frozen=True)
class UpdateWorkspace(Action):
    info: UpdateWorkspaceRecord


@dataclass(frozen=True)
class RemoveTask(Action):
    id: int


@dataclass(frozen=True)
class RemoveWorkspace(Action):
    id: int


# ---- data requests / arrivals ----
@dataclass(frozen=True)
class RequestTasksData(Action):
    workspace_id: int


@dataclass(frozen=True)
class RequestWorkspacesData(Action):
    pass


@dataclass(frozen=True)
class NewTasksData(Action):
    tasks: Tuple[Task, ...]
    workspace_id: int


@dataclass(frozen=True)
class NewWorkspacesData(Action):
    workspaces: Tuple[Workspace, ...]


# ---- scope / focus ----
@dataclass(frozen=True)
class SelectWorkspace(Action):
    id: int


@dataclass(frozen=True)
class UnselectWorkspace(Action):
    pass


@dataclass(frozen=True)
class HighlightWorkspace(Action):
    name: str


@dataclass(frozen=True)
class HighlightTask(Action):
    name: str


@dataclass(frozen=True)
class FocusOnTasks(Action):
    pass


@dataclass(frozen=True)
class FocusOnWorkspaces(Action):
    pass


# ---- sorting ----
@dataclass(frozen=True)
class SortTasks(Action):
    sorter: TaskSorter


@dataclass(frozen=True)
class SortWorkspaces(Action):
    sorter: WorkspaceSorter


@dataclass(frozen=True)
class ToggleSortDirection(Action):
    pass


@dataclass(frozen=True)
class Select(Action):
    pass


@dataclass(frozen=True)
class Cancel(Action):
    pass


@dataclass(frozen=True)
class OpenSortMenu(Action):
    pass


@dataclass(frozen=True)
class SetupSortMenu(Action):
    objective: ComponentId


@dataclass(frozen=True)
class ExitSortMenu(Action):
    objective: ComponentId


_FOCUSED = ComponentId.FOCUSED
_ALL = ComponentId.ALL

ROUTING_TABLE: Dict[Type[Action], ComponentId] = {
    AddTask: ComponentId.DATABASE_SET_TASKS,
    UpdateTask: ComponentId.DATABASE_SET_TASKS,
    RemoveTask: ComponentId.DATABASE_SET_TASKS,
    AddWorkspace: ComponentId.DATABASE_SET_WORKSPACES,
    UpdateWorkspace: ComponentId.DATABASE_SET_WORKSPACES,
    RemoveWorkspace: ComponentId.DATABASE_SET_WORKSPACES,
    RequestTasksData: ComponentId.DATABASE_GET,
    RequestWorkspacesData: ComponentId.DATABASE_GET,
    NewTasksData: ComponentId.TASKS,
    HighlightTask: ComponentId.TASKS,
    SortTasks: ComponentId.TASKS,
    NewWorkspacesData: ComponentId.WORKSPACES,
    HighlightWorkspace: ComponentId.WORKSPACES,
    SortWorkspaces: ComponentId.WORKSPACES,
    ToggleSortDirection: ComponentId.SORT_MENU,
    SetupSortMenu: ComponentId.SORT_MENU,
    GoUp: _FOCUSED,
    GoDown: _FOCUSED,
    GoToTop: _FOCUSED,
    GoToBottom: _FOCUSED,
    AddItemBefore: _FOCUSED,
    AddItemAfter: _FOCUSED,
    DeleteItem: _FOCUSED,
    EditItem: _FOCUSED,
    EditDescription: _FOCUSED,
    ToggleCompletion: _FOCUSED,
    IncreasePriority: _FOCUSED,
    DecreasePriority: _FOCUSED,
    MoveItemUp: _FOCUSED,
    MoveItemDown: _FOCUSED,
    MoveItemTop: _FOCUSED,
    MoveItemBottom: _FOCUSED,
    SendKeyEvent: _FOCUSED,
    Select: _FOCUSED,
    Cancel: _FOCUSED,
    Tick: _ALL,
    Render: _ALL,
    Resize: _ALL,
    Suspend: _ALL,
    Resume: _ALL,
    Quit: _ALL,
    ClearScreen: _ALL,
    Error: _ALL,
    Help: _ALL,
    EnterInsertMode: _ALL,
    LeaveInsertMode: _ALL,
    SelectWorkspace: _ALL,
    UnselectWorkspace: _ALL,
    FocusOnTasks: _ALL,
    FocusOnWorkspaces: _ALL,
    OpenSortMenu: _ALL,
    ExitSortMenu: _ALL,
}


def route(action: Action) -> ComponentId:
    try:
        return ROUTING_TABLE[type(action)]
    except KeyError:
        raise RoutingError(f"no route for action {type(action).__name__}") from None


def action_variants() -> List[Type[Action]]:
    """All concrete Action classes, including subclasses of subclasses."""
    found: List[Type[Action]] = []
    pending = list(Action.__subclasses__())
    while pending:
        cls = pending.pop(0)
        found.append(cls)
        pending.extend(cls.__subclasses__())
    return found


def _is_bindable(cls: Type[Action]) -> bool:
    return not fields(cls)


BINDABLE_ACTIONS: Dict[str, Type[Action]] = {
    cls.__name__: cls for cls in action_variants() if _is_bindable(cls)
}


def action_from_name(name: str) -> Action:
    """Build an argument-less action from its config name (``"GoDown"``)."""
    cls: Optional[Type[Action]] = BINDABLE_ACTIONS.get(str(name).strip())
    if cls is None:
        raise ConfigError(f"Unknown or non-bindable action: {name!r}")
    return cls()


__all__ = [
    "Action",
    "ComponentId",
    "Mode",
    "ROUTING_TABLE",
    "route",
    "action_variants",
    "action_from_name",
    "BINDABLE_ACTIONS",
]
