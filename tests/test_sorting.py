from datetime import datetime

from core.models import Task, Workspace
from core.sorting import TaskSorter, TaskSortType, WorkspaceSorter, WorkspaceSortType


def _tasks():
    return [
        Task(id=1, name="beta", workspace_id=1, order=2, priority=2, completed=True,
             create_date=datetime(2024, 1, 3), description="zzz"),
        Task(id=2, name="Alpha", workspace_id=1, order=0, priority=4,
             create_date=datetime(2024, 1, 1), description="aaa"),
        Task(id=3, name="gamma", workspace_id=1, order=1, priority=2,
             create_date=datetime(2024, 1, 2)),
    ]


def test_default_sorter_uses_persisted_order():
    assert [t.id for t in TaskSorter().sort(_tasks())] == [2, 3, 1]


def test_sort_by_name_is_case_insensitive():
    assert [t.name for t in TaskSorter(TaskSortType.NAME).sort(_tasks())] == ["Alpha", "beta", "gamma"]


def test_priority_ties_fall_back_to_order():
    result = TaskSorter(TaskSortType.PRIORITY, descending=False).sort(_tasks())
    # Priority 2 tie between ids 3 (order 1) and 1 (order 2).
    assert [t.id for t in result] == [3, 1, 2]


def test_completion_and_date_keys():
    assert [t.id for t in TaskSorter(TaskSortType.COMPLETION).sort(_tasks())] == [2, 3, 1]
    assert [t.id for t in TaskSorter(TaskSortType.CREATE_DATE, descending=True).sort(_tasks())] == [1, 3, 2]


def test_missing_description_sorts_first():
    assert [t.id for t in TaskSorter(TaskSortType.DESCRIPTION).sort(_tasks())] == [3, 2, 1]


def test_sort_never_touches_order():
    tasks = TaskSorter(TaskSortType.NAME, descending=True).sort(_tasks())
    assert [t.name for t in tasks] == ["gamma", "beta", "Alpha"]
    assert sorted(t.order for t in tasks) == [0, 1, 2]
    assert {t.id: t.order for t in tasks} == {1: 2, 2: 0, 3: 1}


def test_workspace_sorter_by_update_date():
    workspaces = [
        Workspace(id=1, name="a", order=0, update_date=datetime(2024, 5, 1)),
        Workspace(id=2, name="b", order=1, update_date=datetime(2024, 6, 1)),
    ]
    result = WorkspaceSorter(WorkspaceSortType.UPDATE_DATE, descending=True).sort(workspaces)
    assert [w.id for w in result] == [2, 1]
    assert WorkspaceSorter().label == "Order asc"
