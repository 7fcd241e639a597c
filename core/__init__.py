from .models import (
    Task,
    Workspace,
    AddTask,
    AddWorkspace,
    UpdateTask,
    UpdateWorkspace,
    PRIORITY_MIN,
    PRIORITY_MAX,
    DEFAULT_PRIORITY,
)
from .errors import (
    DomeError,
    DuplicateNameError,
    TaskAlreadyExists,
    WorkspaceAlreadyExists,
    NotFoundError,
    StorageError,
    RoutingError,
    ConfigError,
    OrderInvariantError,
)
from .sorting import (
    TaskSorter,
    WorkspaceSorter,
    TaskSortType,
    WorkspaceSortType,
)
from .actions import Action, ComponentId, Mode, route

__all__ = [
    "Task",
    "Workspace",
    "AddTask",
    "AddWorkspace",
    "UpdateTask",
    "UpdateWorkspace",
    "PRIORITY_MIN",
    "PRIORITY_MAX",
    "DEFAULT_PRIORITY",
    # Errors
    "DomeError",
    "DuplicateNameError",
    "TaskAlreadyExists",
    "WorkspaceAlreadyExists",
    "NotFoundError",
    "StorageError",
    "RoutingError",
    "ConfigError",
    "OrderInvariantError",
    # Sorting
    "TaskSorter",
    "WorkspaceSorter",
    "TaskSortType",
    "WorkspaceSortType",
    # Actions
    "Action",
    "ComponentId",
    "Mode",
    "route",
]
