"""Records persisted by the store and the requests that mutate them."""

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, Optional

PRIORITY_MIN = 1
PRIORITY_MAX = 4
DEFAULT_PRIORITY = 3

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def now() -> datetime:
    return datetime.now().replace(microsecond=0)


def clamp_priority(value: int) -> int:
    return max(PRIORITY_MIN, min(PRIORITY_MAX, int(value)))


def format_timestamp(value: datetime) -> str:
    return value.strftime(TIMESTAMP_FORMAT)


def parse_timestamp(raw: Any) -> datetime:
    """Accept the stored string form or a datetime already parsed by YAML."""
    if isinstance(raw, datetime):
        return raw
    text = str(raw or "").strip()
    if not text:
        return now()
    try:
        return datetime.strptime(text, TIMESTAMP_FORMAT)
    except ValueError:
        return datetime.fromisoformat(text)


@dataclass
class Task:
    id: int
    name: str
    workspace_id: int
    order: int = 0
    description: Optional[str] = None
    priority: int = DEFAULT_PRIORITY
    completed: bool = False
    create_date: datetime = field(default_factory=now)

    @property
    def scope(self) -> int:
        return self.workspace_id

    def copy(self) -> "Task":
        return replace(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "priority": self.priority,
            "completed": self.completed,
            "create_date": format_timestamp(self.create_date),
            "order": self.order,
            "workspace_id": self.workspace_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Task":
        return cls(
            id=int(data["id"]),
            name=str(data["name"]),
            workspace_id=int(data["workspace_id"]),
            order=int(data.get("order", 0)),
            description=data.get("description"),
            priority=clamp_priority(data.get("priority", DEFAULT_PRIORITY)),
            completed=bool(data.get("completed", False)),
            create_date=parse_timestamp(data.get("create_date")),
        )


@dataclass
class Workspace:
    id: int
    name: str
    order: int = 0
    create_date: datetime = field(default_factory=now)
    update_date: datetime = field(default_factory=now)

    @property
    def scope(self) -> None:
        return None

    def copy(self) -> "Workspace":
        return replace(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "order": self.order,
            "create_date": format_timestamp(self.create_date),
            "update_date": format_timestamp(self.update_date),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Workspace":
        return cls(
            id=int(data["id"]),
            name=str(data["name"]),
            order=int(data.get("order", 0)),
            create_date=parse_timestamp(data.get("create_date")),
            update_date=parse_timestamp(data.get("update_date")),
        )


# Mutation requests. A field left as None is not touched by the store.


@dataclass(frozen=True)
class AddTask:
    name: str
    workspace_id: int
    description: Optional[str] = None
    priority: Optional[int] = None
    order: Optional[int] = None


@dataclass(frozen=True)
class AddWorkspace:
    name: str
    order: Optional[int] = None


@dataclass(frozen=True)
class UpdateTask:
    id: int
    name: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[int] = None
    completed: Optional[bool] = None
    order: Optional[int] = None


@dataclass(frozen=True)
class UpdateWorkspace:
    id: int
    name: Optional[str] = None
    order: Optional[int] = None


__all__ = [
    "PRIORITY_MIN",
    "PRIORITY_MAX",
    "DEFAULT_PRIORITY",
    "Task",
    "Workspace",
    "AddTask",
    "AddWorkspace",
    "UpdateTask",
    "UpdateWorkspace",
    "clamp_priority",
    "parse_timestamp",
    "format_timestamp",
]
