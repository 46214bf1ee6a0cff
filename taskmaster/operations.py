"""
Operation handlers for the TaskMaster API.

Each handler takes the repository and a plain ``args`` dict (JSON body,
query parameters and path id merged) and returns the success payload.
Failures are raised as ``ValidationError`` / ``NotFoundError``.
"""

from __future__ import annotations

from typing import Any, Optional

from .errors import NotFoundError, ValidationError
from .query import TaskQuery
from .repository import TaskRepository
from .schemas import TaskDraft, TaskPatch, UNSET, now_iso


# ---------------------------------------------------------------------------
# Argument coercion
# ---------------------------------------------------------------------------

_TRUE_STRINGS = {"true", "1", "yes", "on"}


def _coerce_string(args: dict, field: str) -> Optional[str]:
    val = args.get(field)
    if val is None:
        return None
    return val if isinstance(val, str) else str(val)


def _coerce_bool(args: dict, field: str) -> Optional[bool]:
    val = args.get(field)
    if val is None:
        return None
    if isinstance(val, str):
        return val.strip().lower() in _TRUE_STRINGS
    return bool(val)


def _task_id(args: dict) -> int:
    """Path ids that are not integers can never match a task."""
    raw = args.get("id")
    if isinstance(raw, bool):
        raise NotFoundError()
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise NotFoundError() from None


def draft_from_args(args: dict) -> TaskDraft:
    title = _coerce_string(args, "title")
    if not title or not title.strip():
        raise ValidationError("Task title is required")
    return TaskDraft(
        title=title,
        description=_coerce_string(args, "description"),
        priority=_coerce_string(args, "priority"),
        due_date=_coerce_string(args, "dueDate"),
        category=_coerce_string(args, "category"),
    )


def patch_from_args(args: dict) -> TaskPatch:
    """
    Build a patch from a request body.

    A missing or null field is left untouched, except ``dueDate`` where an
    explicit null clears the date. Values are stored as given; only
    ``completed`` is coerced to a boolean.
    """
    title = _coerce_string(args, "title")
    description = _coerce_string(args, "description")
    priority = _coerce_string(args, "priority")
    completed = _coerce_bool(args, "completed")
    category = _coerce_string(args, "category")
    due_date = _coerce_string(args, "dueDate") if "dueDate" in args else UNSET

    return TaskPatch(
        title=UNSET if title is None else title,
        description=UNSET if description is None else description,
        priority=UNSET if priority is None else priority,
        completed=UNSET if completed is None else completed,
        due_date=due_date,
        category=UNSET if category is None else category,
    )


# ---------------------------------------------------------------------------
# Operation handlers
# ---------------------------------------------------------------------------

def tasks_list(repo: TaskRepository, args: dict) -> dict:
    items = repo.list(TaskQuery.from_params(args or {}))
    return {
        "data": [t.to_dict() for t in items],
        "total": len(items),
        "timestamp": now_iso(),
    }


def tasks_stats(repo: TaskRepository, args: dict) -> dict:
    return {"data": repo.summary()}


def tasks_get(repo: TaskRepository, args: dict) -> dict:
    return {"data": repo.get(_task_id(args)).to_dict()}


def tasks_create(repo: TaskRepository, args: dict) -> dict:
    task = repo.create(draft_from_args(args or {}))
    return {"message": "Task created successfully", "data": task.to_dict()}


def tasks_update(repo: TaskRepository, args: dict) -> dict:
    task_id = _task_id(args)
    task = repo.update(task_id, patch_from_args(args))
    return {"message": "Task updated successfully", "data": task.to_dict()}


def tasks_toggle(repo: TaskRepository, args: dict) -> dict:
    task = repo.toggle(_task_id(args))
    message = "Task completed" if task.completed else "Task reopened"
    return {"message": message, "data": task.to_dict()}


def tasks_delete(repo: TaskRepository, args: dict) -> dict:
    task = repo.delete(_task_id(args))
    return {"message": "Task deleted successfully", "data": task.to_dict()}


# ---------------------------------------------------------------------------
# Operations registry (handler dispatch table)
# ---------------------------------------------------------------------------

OPERATIONS: dict[str, dict[str, Any]] = {
    "tasks.list": {
        "handler": tasks_list,
        "side_effecting": False,
        "status": 200,
        "failure_message": "Failed to fetch tasks",
    },
    "tasks.stats": {
        "handler": tasks_stats,
        "side_effecting": False,
        "status": 200,
        "failure_message": "Failed to compute task statistics",
    },
    "tasks.get": {
        "handler": tasks_get,
        "side_effecting": False,
        "status": 200,
        "failure_message": "Failed to fetch task",
    },
    "tasks.create": {
        "handler": tasks_create,
        "side_effecting": True,
        "status": 201,
        "failure_message": "Failed to create task",
    },
    "tasks.update": {
        "handler": tasks_update,
        "side_effecting": True,
        "status": 200,
        "failure_message": "Failed to update task",
    },
    "tasks.toggle": {
        "handler": tasks_toggle,
        "side_effecting": True,
        "status": 200,
        "failure_message": "Failed to update task",
    },
    "tasks.delete": {
        "handler": tasks_delete,
        "side_effecting": True,
        "status": 200,
        "failure_message": "Failed to delete task",
    },
}
