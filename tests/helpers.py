# tests/helpers.py

from __future__ import annotations

from taskmaster.schemas import Task


def make_task(task_id: int, title: str, **kwargs) -> Task:
    """Task with a deterministic createdAt: higher ids are newer."""
    kwargs.setdefault("created_at", f"2025-09-{10 + task_id:02d}T10:00:00Z")
    return Task(id=task_id, title=title, **kwargs)
