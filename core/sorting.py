"""Display sorters for task and workspace lists.

Sorting never touches the persisted ``order``; it only decides how a
reloaded list is laid out on screen. Ties always fall back to ``order``
ascending so the layout is deterministic.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Tuple

from .models import Task, Workspace


class TaskSortType(Enum):
    ORDER = "Order"
    NAME = "Name"
    COMPLETION = "Completion"
    CREATE_DATE = "Date created"
    PRIORITY = "Priority"
    DESCRIPTION = "Description"


class WorkspaceSortType(Enum):
    ORDER = "Order"
    NAME = "Name"
    CREATE_DATE = "Date created"
    UPDATE_DATE = "Last updated"


_TASK_KEYS: Dict[TaskSortType, Callable[[Task], Any]] = {
    TaskSortType.ORDER: lambda t: t.order,
    TaskSortType.NAME: lambda t: t.name.casefold(),
    TaskSortType.COMPLETION: lambda t: t.completed,
    TaskSortType.CREATE_DATE: lambda t: t.create_date,
    TaskSortType.PRIORITY: lambda t: t.priority,
    TaskSortType.DESCRIPTION: lambda t: (t.description or "").casefold(),
}

_WORKSPACE_KEYS: Dict[WorkspaceSortType, Callable[[Workspace], Any]] = {
    WorkspaceSortType.ORDER: lambda w: w.order,
    WorkspaceSortType.NAME: lambda w: w.name.casefold(),
    WorkspaceSortType.CREATE_DATE: lambda w: w.create_date,
    WorkspaceSortType.UPDATE_DATE: lambda w: w.update_date,
}


def _sorted(records: Iterable[Any], key: Callable[[Any], Any], descending: bool) -> List[Any]:
    # Two stable passes: tie-break on order ascending, then the primary key.
    items = sorted(records, key=lambda r: r.order)
    items.sort(key=key, reverse=descending)
    return items


@dataclass(frozen=True)
class TaskSorter:
    sort_type: TaskSortType = TaskSortType.ORDER
    descending: bool = False

    def sort(self, tasks: Iterable[Task]) -> List[Task]:
        return _sorted(tasks, _TASK_KEYS[self.sort_type], self.descending)

    @property
    def label(self) -> str:
        return f"{self.sort_type.value} {'desc' if self.descending else 'asc'}"


@dataclass(frozen=True)
class WorkspaceSorter:
    sort_type: WorkspaceSortType = WorkspaceSortType.ORDER
    descending: bool = False

    def sort(self, workspaces: Iterable[Workspace]) -> List[Workspace]:
        return _sorted(workspaces, _WORKSPACE_KEYS[self.sort_type], self.descending)

    @property
    def label(self) -> str:
        return f"{self.sort_type.value} {'desc' if self.descending else 'asc'}"


TASK_SORT_OPTIONS: Tuple[TaskSortType, ...] = tuple(TaskSortType)
WORKSPACE_SORT_OPTIONS: Tuple[WorkspaceSortType, ...] = tuple(WorkspaceSortType)


__all__ = [
    "TaskSortType",
    "WorkspaceSortType",
    "TaskSorter",
    "WorkspaceSorter",
    "TASK_SORT_OPTIONS",
    "WORKSPACE_SORT_OPTIONS",
]
