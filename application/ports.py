from typing import List, Optional, Protocol

from core.models import AddTask, AddWorkspace, Task, UpdateTask, UpdateWorkspace, Workspace


class RecordStore(Protocol):
    """Storage contract consumed by the dispatcher.

    ``list_*`` return records in arbitrary order; ``order`` is always dense
    per scope after every call that mutates the store.
    """

    def add_task(self, info: AddTask) -> int:
        ...

    def add_workspace(self, info: AddWorkspace) -> int:
        ...

    def update_task(self, info: UpdateTask) -> None:
        ...

    def update_workspace(self, info: UpdateWorkspace) -> None:
        ...

    def remove_task(self, task_id: int) -> None:
        ...

    def remove_workspace(self, workspace_id: int) -> None:
        ...

    def list_tasks(self, workspace_id: int) -> List[Task]:
        ...

    def list_workspaces(self) -> List[Workspace]:
        ...

    def get_task(self, task_id: int) -> Optional[Task]:
        ...

    def get_workspace(self, workspace_id: int) -> Optional[Workspace]:
        ...

    def find_task(self, name: str, workspace_id: int) -> Optional[int]:
        ...

    def find_workspace(self, name: str) -> Optional[int]:
        ...
