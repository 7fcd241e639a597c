"""YAML-backed record store for workspaces and tasks.

The whole store is one YAML document rewritten after every mutation::

    schema_version: 1
    next_ids: {task: 4, workspace: 2}
    workspaces: [{id: 1, name: Home, order: 0, ...}]
    tasks: [{id: 1, name: Buy milk, order: 0, workspace_id: 1, ...}]

The file only carries plain integer ``order`` values; density per scope is
maintained here with ``core.ordering``. ``path=None`` keeps the store in
memory.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from application.ports import RecordStore
from core import ordering
from core.errors import (
    KIND_TASK,
    KIND_WORKSPACE,
    NotFoundError,
    StorageError,
    TaskAlreadyExists,
    WorkspaceAlreadyExists,
)
from core.models import (
    DEFAULT_PRIORITY,
    AddTask,
    AddWorkspace,
    Task,
    UpdateTask,
    UpdateWorkspace,
    Workspace,
    clamp_priority,
    now,
)

logger = logging.getLogger("dome.store")

STORE_FILENAME = "dome.yaml"


class YamlRecordStore(RecordStore):
    SCHEMA_VERSION = 1

    def __init__(self, path: Optional[Path] = None, *, check_invariants: bool = True):
        self.path = Path(path).expanduser() if path is not None else None
        self.check_invariants = check_invariants
        self._tasks: Dict[int, Task] = {}
        self._workspaces: Dict[int, Workspace] = {}
        self._next_ids: Dict[str, int] = {KIND_TASK: 1, KIND_WORKSPACE: 1}
        if self.path is not None and self.path.exists():
            self._load()

    @classmethod
    def in_data_dir(cls, data_dir: Path, **kwargs) -> "YamlRecordStore":
        return cls(Path(data_dir) / STORE_FILENAME, **kwargs)

    # ---------- queries ----------
    def list_tasks(self, workspace_id: int) -> List[Task]:
        return [t.copy() for t in self._tasks.values() if t.workspace_id == workspace_id]

    def list_workspaces(self) -> List[Workspace]:
        return [w.copy() for w in self._workspaces.values()]

    def get_task(self, task_id: int) -> Optional[Task]:
        task = self._tasks.get(task_id)
        return task.copy() if task else None

    def get_workspace(self, workspace_id: int) -> Optional[Workspace]:
        workspace = self._workspaces.get(workspace_id)
        return workspace.copy() if workspace else None

    def find_task(self, name: str, workspace_id: int) -> Optional[int]:
        for task in self._task_scope(workspace_id):
            if task.name == name:
                return task.id
        return None

    def find_workspace(self, name: str) -> Optional[int]:
        for workspace in self._workspaces.values():
            if workspace.name == name:
                return workspace.id
        return None

    # ---------- mutations ----------
    def add_workspace(self, info: AddWorkspace) -> int:
        name = info.name.strip()
        if self.find_workspace(name) is not None:
            raise WorkspaceAlreadyExists(name)
        with self._transaction():
            workspace = Workspace(id=self._allocate(KIND_WORKSPACE), name=name)
            scope = list(self._workspaces.values())
            ordering.insert_at(scope, workspace, info.order)
            self._workspaces[workspace.id] = workspace
            self._verify(scope, None)
        logger.debug("added workspace %s at %s", workspace.id, workspace.order)
        return workspace.id

    def add_task(self, info: AddTask) -> int:
        if info.workspace_id not in self._workspaces:
            raise NotFoundError(KIND_WORKSPACE, info.workspace_id)
        name = info.name.strip()
        if self.find_task(name, info.workspace_id) is not None:
            raise TaskAlreadyExists(name)
        with self._transaction():
            task = Task(
                id=self._allocate(KIND_TASK),
                name=name,
                workspace_id=info.workspace_id,
                description=info.description or "",
                priority=clamp_priority(info.priority if info.priority is not None else DEFAULT_PRIORITY),
            )
            scope = self._task_scope(info.workspace_id)
            ordering.insert_at(scope, task, info.order)
            self._tasks[task.id] = task
            self._verify(scope, info.workspace_id)
        logger.debug("added task %s at %s in workspace %s", task.id, task.order, task.workspace_id)
        return task.id

    def update_workspace(self, info: UpdateWorkspace) -> None:
        workspace = self._workspaces.get(info.id)
        if workspace is None:
            raise NotFoundError(KIND_WORKSPACE, info.id)
        name = info.name.strip() if info.name is not None else None
        if name is not None and name != workspace.name and self.find_workspace(name) is not None:
            raise WorkspaceAlreadyExists(name)
        with self._transaction():
            changed = False
            if name is not None and name != workspace.name:
                workspace.name = name
                changed = True
            if info.order is not None and info.order != workspace.order:
                scope = list(self._workspaces.values())
                ordering.move_to(scope, workspace.id, info.order)
                self._verify(scope, None)
                changed = True
            if changed:
                workspace.update_date = now()

    def update_task(self, info: UpdateTask) -> None:
        task = self._tasks.get(info.id)
        if task is None:
            raise NotFoundError(KIND_TASK, info.id)
        name = info.name.strip() if info.name is not None else None
        if name is not None and name != task.name and self.find_task(name, task.workspace_id) is not None:
            raise TaskAlreadyExists(name)
        with self._transaction():
            if name is not None:
                task.name = name
            if info.description is not None:
                task.description = info.description
            if info.priority is not None:
                task.priority = clamp_priority(info.priority)
            if info.completed is not None:
                task.completed = bool(info.completed)
            if info.order is not None:
                scope = self._task_scope(task.workspace_id)
                ordering.move_to(scope, task.id, info.order)
                self._verify(scope, task.workspace_id)

    def remove_workspace(self, workspace_id: int) -> None:
        if workspace_id not in self._workspaces:
            raise NotFoundError(KIND_WORKSPACE, workspace_id)
        with self._transaction():
            for task_id in [t.id for t in self._task_scope(workspace_id)]:
                del self._tasks[task_id]
            scope = list(self._workspaces.values())
            ordering.remove(scope, workspace_id)
            del self._workspaces[workspace_id]
            self._verify(scope, None)
        logger.debug("removed workspace %s", workspace_id)

    def remove_task(self, task_id: int) -> None:
        task = self._tasks.get(task_id)
        if task is None:
            raise NotFoundError(KIND_TASK, task_id)
        with self._transaction():
            scope = self._task_scope(task.workspace_id)
            ordering.remove(scope, task_id)
            del self._tasks[task_id]
            self._verify(scope, task.workspace_id)
        logger.debug("removed task %s", task_id)

    # ---------- internals ----------
    def _task_scope(self, workspace_id: int) -> List[Task]:
        return [t for t in self._tasks.values() if t.workspace_id == workspace_id]

    def _allocate(self, kind: str) -> int:
        next_id = self._next_ids[kind]
        self._next_ids[kind] = next_id + 1
        return next_id

    def _verify(self, scope, scope_id) -> None:
        if self.check_invariants:
            ordering.check_density(scope, scope_id)

    def _snapshot(self) -> Tuple[Dict[int, Task], Dict[int, Workspace], Dict[str, int]]:
        return (
            {k: v.copy() for k, v in self._tasks.items()},
            {k: v.copy() for k, v in self._workspaces.items()},
            dict(self._next_ids),
        )

    def _transaction(self):
        return _Transaction(self)

    def _to_document(self) -> Dict[str, Any]:
        return {
            "schema_version": self.SCHEMA_VERSION,
            "next_ids": dict(self._next_ids),
            "workspaces": [w.to_dict() for w in ordering.by_order(self._workspaces.values())],
            "tasks": [t.to_dict() for t in sorted(self._tasks.values(), key=lambda t: (t.workspace_id, t.order))],
        }

    def _save(self) -> None:
        if self.path is None:
            return
        payload = yaml.safe_dump(self._to_document(), allow_unicode=True, sort_keys=False)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=".dome-", suffix=".tmp", dir=str(self.path.parent))
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(payload)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise StorageError(f"Failed to write {self.path}: {exc}") from exc

    def _load(self) -> None:
        assert self.path is not None
        try:
            data = yaml.safe_load(self.path.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as exc:
            raise StorageError(f"Failed to read {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise StorageError(f"Malformed store file {self.path}")
        try:
            workspaces = [Workspace.from_dict(raw) for raw in data.get("workspaces") or []]
            tasks = [Task.from_dict(raw) for raw in data.get("tasks") or []]
            raw_ids = data.get("next_ids") or {}
            next_ids = {kind: int(raw_ids.get(kind, 1)) for kind in (KIND_TASK, KIND_WORKSPACE)}
        except (KeyError, TypeError, ValueError) as exc:
            raise StorageError(f"Malformed record in {self.path}: {exc}") from exc

        self._workspaces = {w.id: w for w in workspaces}
        self._tasks = {t.id: t for t in tasks if t.workspace_id in self._workspaces}
        self._next_ids = {
            KIND_WORKSPACE: max([next_ids[KIND_WORKSPACE]] + [w.id + 1 for w in workspaces]),
            KIND_TASK: max([next_ids[KIND_TASK]] + [t.id + 1 for t in tasks]),
        }
        if len(self._workspaces) != len(workspaces) or len({t.id for t in tasks}) != len(tasks):
            raise StorageError(f"Duplicate record ids in {self.path}")
        if not ordering.is_dense(self._workspaces.values()):
            raise StorageError(f"Workspace order is corrupted in {self.path}")
        for workspace_id in self._workspaces:
            if not ordering.is_dense(self._task_scope(workspace_id)):
                raise StorageError(f"Task order of workspace {workspace_id} is corrupted in {self.path}")
        logger.info("loaded %d workspaces and %d tasks from %s", len(self._workspaces), len(self._tasks), self.path)


class _Transaction:
    """Apply a mutation and persist it, or roll memory back when anything fails."""

    def __init__(self, store: YamlRecordStore):
        self.store = store
        self.snapshot = store._snapshot()

    def __enter__(self) -> "_Transaction":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is None:
            try:
                self.store._save()
                return False
            except StorageError:
                self._rollback()
                raise
        self._rollback()
        return False

    def _rollback(self) -> None:
        tasks, workspaces, next_ids = self.snapshot
        self.store._tasks = tasks
        self.store._workspaces = workspaces
        self.store._next_ids = next_ids


__all__ = ["YamlRecordStore", "STORE_FILENAME"]
