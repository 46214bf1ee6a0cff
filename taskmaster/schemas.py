"""
Data models for the TaskMaster API.

Tasks travel over the wire as plain camelCase dicts (``TaskDict``); inside
the process they are ``Task`` dataclasses.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from typing import Any, Optional, TypedDict


PRIORITIES = ["low", "medium", "high"]
DEFAULT_PRIORITY = "medium"
DEFAULT_CATEGORY = "General"


class TaskDict(TypedDict, total=False):
    id: int
    title: str
    description: str
    priority: str
    completed: bool
    category: str
    createdAt: str
    updatedAt: str
    completedAt: Optional[str]
    dueDate: Optional[str]


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 string into an aware datetime.

    Date-only and naive values are taken as UTC. Anything unparseable
    yields None.
    """
    if not value or not isinstance(value, str):
        return None
    raw = value.strip()
    if raw.endswith("Z") or raw.endswith("z"):
        raw = raw[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass
class Task:
    id: int
    title: str
    created_at: str
    description: str = ""
    priority: str = DEFAULT_PRIORITY
    completed: bool = False
    category: str = DEFAULT_CATEGORY
    updated_at: Optional[str] = None
    completed_at: Optional[str] = None
    due_date: Optional[str] = None

    def to_dict(self) -> TaskDict:
        data: TaskDict = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "priority": self.priority,
            "completed": self.completed,
            "category": self.category,
            "createdAt": self.created_at,
            "completedAt": self.completed_at,
            "dueDate": self.due_date,
        }
        if self.updated_at is not None:
            data["updatedAt"] = self.updated_at
        return data

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Task":
        """Rebuild a task from its stored form, filling in missing defaults."""
        return cls(
            id=int(raw["id"]),
            title=str(raw.get("title") or ""),
            created_at=str(raw.get("createdAt") or now_iso()),
            description=str(raw.get("description") or ""),
            priority=str(raw.get("priority") or DEFAULT_PRIORITY),
            completed=bool(raw.get("completed", False)),
            category=str(raw.get("category") or DEFAULT_CATEGORY),
            updated_at=raw.get("updatedAt"),
            completed_at=raw.get("completedAt"),
            due_date=raw.get("dueDate"),
        )


@dataclass(frozen=True)
class TaskDraft:
    """Fields accepted when creating a task. Only ``title`` is required."""

    title: str
    description: Optional[str] = None
    priority: Optional[str] = None
    due_date: Optional[str] = None
    category: Optional[str] = None


class _Unset:
    __slots__ = ()

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


# Marks a patch field the caller did not supply.
UNSET: Any = _Unset()


@dataclass(frozen=True)
class TaskPatch:
    """
    Partial update of a task.

    Every field defaults to ``UNSET`` and is left alone when applied.
    ``due_date=None`` clears the due date; the other fields are not nullable.
    Fields are applied in declaration order.
    """

    title: Any = field(default=UNSET)
    description: Any = field(default=UNSET)
    priority: Any = field(default=UNSET)
    completed: Any = field(default=UNSET)
    due_date: Any = field(default=UNSET)
    category: Any = field(default=UNSET)

    def supplied(self) -> dict[str, Any]:
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not UNSET
        }
