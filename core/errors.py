"""Error taxonomy shared by the store, the dispatcher and the TUI.

- DuplicateNameError: domain conflict, recovered by highlighting the item.
- NotFoundError: stale id, logged and ignored by the dispatcher.
- StorageError: I/O or corruption, fatal for the session.
- RoutingError: an action variant without a routing entry.
- OrderInvariantError: the dense ordering of a scope was broken.
- ConfigError: unusable user configuration (keybindings, values).
"""

from typing import Optional

KIND_TASK = "task"
KIND_WORKSPACE = "workspace"


class DomeError(Exception):
    """Base class for application errors."""


class DuplicateNameError(DomeError):
    def __init__(self, name: str, kind: str):
        self.name = name
        self.kind = kind
        super().__init__(f"The {kind} {name} already exists")


class TaskAlreadyExists(DuplicateNameError):
    def __init__(self, name: str):
        super().__init__(name, KIND_TASK)


class WorkspaceAlreadyExists(DuplicateNameError):
    def __init__(self, name: str):
        super().__init__(name, KIND_WORKSPACE)


class NotFoundError(DomeError):
    def __init__(self, kind: str, record_id: Optional[int]):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"The {kind} {record_id} was not found")


class StorageError(DomeError):
    """Disk or format failure of the record store."""


class RoutingError(DomeError):
    """Action variant missing from the routing table."""


class ConfigError(DomeError):
    """Invalid configuration value."""


class OrderInvariantError(AssertionError):
    """Orders of a scope are not exactly 0..n-1."""

    def __init__(self, scope: object, orders):
        self.scope = scope
        self.orders = sorted(orders)
        super().__init__(f"order density broken in scope {scope!r}: {self.orders}")


__all__ = [
    "KIND_TASK",
    "KIND_WORKSPACE",
    "DomeError",
    "DuplicateNameError",
    "TaskAlreadyExists",
    "WorkspaceAlreadyExists",
    "NotFoundError",
    "StorageError",
    "RoutingError",
    "ConfigError",
    "OrderInvariantError",
]
