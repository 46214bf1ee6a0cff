"""
Task repositories.

``InMemoryTaskRepository`` backs the HTTP API. ``LocalTaskRepository`` adds
timestamp ids, newest-first insertion and write-through to a key-value
storage slot. Both share the same mutators and query pipeline.
"""

from __future__ import annotations

import copy
import json
import logging
import threading
import time
from typing import Iterable, Optional, Protocol

from .errors import NotFoundError, ValidationError
from .query import TaskQuery, run_query, summarize
from .schemas import (
    DEFAULT_CATEGORY,
    DEFAULT_PRIORITY,
    Task,
    TaskDraft,
    TaskPatch,
    now_iso,
)
from .storage import TASKS_KEY, LocalStorage

logger = logging.getLogger(__name__)


SAMPLE_TASKS: list[dict] = [
    {
        "id": 1,
        "title": "Set up development environment",
        "description": "Install Node.js, Docker, and configure development tools",
        "priority": "high",
        "completed": False,
        "createdAt": "2025-09-27T10:00:00Z",
        "dueDate": "2025-09-28T00:00:00Z",
        "category": "Development",
    },
    {
        "id": 2,
        "title": "Design database schema",
        "description": "Create ERD and plan database structure for the application",
        "priority": "medium",
        "completed": True,
        "createdAt": "2025-09-26T14:30:00Z",
        "dueDate": "2025-09-27T00:00:00Z",
        "category": "Planning",
    },
]

LOCAL_SAMPLE_TASKS: list[dict] = SAMPLE_TASKS + [
    {
        "id": 3,
        "title": "Write unit tests",
        "description": "Create comprehensive test suite for all API endpoints",
        "priority": "medium",
        "completed": False,
        "createdAt": "2025-09-25T09:15:00Z",
        "dueDate": "2025-09-30T00:00:00Z",
        "category": "Testing",
    },
]


class TaskRepository(Protocol):
    """Port used by the API and the CLI; both repositories satisfy it."""

    def create(self, draft: TaskDraft) -> Task: ...

    def get(self, task_id: int) -> Task: ...

    def list(self, query: Optional[TaskQuery] = None) -> list[Task]: ...

    def update(self, task_id: int, patch: TaskPatch) -> Task: ...

    def toggle(self, task_id: int) -> Task: ...

    def delete(self, task_id: int) -> Task: ...

    def summary(self) -> dict[str, int]: ...


def _clean_title(title: object) -> str:
    if not isinstance(title, str) or not title.strip():
        raise ValidationError("Task title is required")
    return title.strip()


def _has_numeric_id(item: dict) -> bool:
    value = item.get("id")
    if value is None or isinstance(value, bool):
        return False
    try:
        int(value)
    except (TypeError, ValueError):
        return False
    return True


def _set_completed(task: Task, completed: bool, now: str) -> None:
    if task.completed == completed:
        return
    task.completed = completed
    task.completed_at = now if completed else None


class InMemoryTaskRepository:
    """
    Ordered task collection held in process memory.

    Storage order is insertion order; ``list`` only ever sorts a copy.
    Returned tasks are copies, so callers cannot mutate the collection.
    """

    def __init__(self, tasks: Iterable[Task | dict] = ()) -> None:
        self._lock = threading.Lock()
        self._tasks: list[Task] = [
            t if isinstance(t, Task) else Task.from_dict(t) for t in tasks
        ]
        logger.debug("%s ready total=%s", type(self).__name__, len(self._tasks))

    # ---- hooks ----

    def _allocate_id(self) -> int:
        return max((t.id for t in self._tasks), default=0) + 1

    def _insert(self, task: Task) -> None:
        self._tasks.append(task)

    def _after_mutation(self) -> None:
        return

    # ---- helpers ----

    def _commit(self, snapshot: list[Task]) -> None:
        """Run the mutation hook; on failure put the collection back as it was."""
        try:
            self._after_mutation()
        except Exception:
            self._tasks = snapshot
            raise

    def _index_of(self, task_id: int) -> int:
        for i, task in enumerate(self._tasks):
            if task.id == task_id:
                return i
        raise NotFoundError()

    # ---- operations ----

    def create(self, draft: TaskDraft) -> Task:
        title = _clean_title(draft.title)
        priority = draft.priority or DEFAULT_PRIORITY
        category = (draft.category or "").strip() or DEFAULT_CATEGORY

        with self._lock:
            snapshot = [copy.copy(t) for t in self._tasks]
            task = Task(
                id=self._allocate_id(),
                title=title,
                created_at=now_iso(),
                description=(draft.description or "").strip(),
                priority=priority,
                completed=False,
                category=category,
                due_date=draft.due_date or None,
            )
            self._insert(task)
            self._commit(snapshot)
            logger.info("Created task id=%s title=%r", task.id, task.title)
            return copy.copy(task)

    def get(self, task_id: int) -> Task:
        with self._lock:
            return copy.copy(self._tasks[self._index_of(task_id)])

    def list(self, query: Optional[TaskQuery] = None) -> list[Task]:
        with self._lock:
            snapshot = [copy.copy(t) for t in self._tasks]
        items = run_query(snapshot, query)
        logger.debug("Listed %s of %s tasks query=%s", len(items), len(snapshot), query)
        return items

    def all(self) -> list[Task]:
        """All tasks in storage order."""
        with self._lock:
            return [copy.copy(t) for t in self._tasks]

    def update(self, task_id: int, patch: TaskPatch) -> Task:
        changes = patch.supplied()
        if "title" in changes:
            changes["title"] = _clean_title(changes["title"])
        if "description" in changes:
            changes["description"] = (changes["description"] or "").strip()

        with self._lock:
            snapshot = [copy.copy(t) for t in self._tasks]
            task = self._tasks[self._index_of(task_id)]
            now = now_iso()
            for name, value in changes.items():
                if name == "completed":
                    _set_completed(task, bool(value), now)
                else:
                    setattr(task, name, value)
            task.updated_at = now
            self._commit(snapshot)
            logger.info("Updated task id=%s fields=%s", task_id, sorted(changes))
            return copy.copy(task)

    def toggle(self, task_id: int) -> Task:
        with self._lock:
            snapshot = [copy.copy(t) for t in self._tasks]
            task = self._tasks[self._index_of(task_id)]
            now = now_iso()
            _set_completed(task, not task.completed, now)
            task.updated_at = now
            self._commit(snapshot)
            logger.info("Toggled task id=%s completed=%s", task_id, task.completed)
            return copy.copy(task)

    def delete(self, task_id: int) -> Task:
        with self._lock:
            snapshot = [copy.copy(t) for t in self._tasks]
            task = self._tasks.pop(self._index_of(task_id))
            self._commit(snapshot)
            logger.info("Deleted task id=%s", task_id)
            return task

    def summary(self) -> dict[str, int]:
        with self._lock:
            return summarize(self._tasks)


class LocalTaskRepository(InMemoryTaskRepository):
    """
    Task collection persisted to a ``LocalStorage`` slot.

    The whole array is rewritten under ``TASKS_KEY`` after every mutation.
    When the slot is empty the repository starts from ``seed`` and saves it.
    """

    def __init__(
        self,
        storage: LocalStorage,
        *,
        seed: Iterable[dict] = (),
        key: str = TASKS_KEY,
    ) -> None:
        self._storage = storage
        self._key = key
        raw = storage.get_item(key)
        if raw is None:
            super().__init__(seed)
            self._save()
        else:
            super().__init__(self._decode(raw))
        logger.info("LocalTaskRepository ready path=%s total=%s", storage.path, len(self._tasks))

    def _decode(self, raw: str) -> list[dict]:
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Stored tasks under %r are not valid JSON; starting empty.", self._key)
            return []
        if not isinstance(data, list):
            logger.warning("Stored tasks under %r are not a list; starting empty.", self._key)
            return []
        tasks = [item for item in data if isinstance(item, dict) and _has_numeric_id(item)]
        if len(tasks) != len(data):
            logger.warning(
                "Dropped %s stored task(s) under %r without a numeric id.",
                len(data) - len(tasks), self._key,
            )
        return tasks

    def _save(self) -> None:
        payload = json.dumps([t.to_dict() for t in self._tasks], ensure_ascii=False)
        self._storage.set_item(self._key, payload)

    def _allocate_id(self) -> int:
        taken = {t.id for t in self._tasks}
        candidate = int(time.time() * 1000)
        while candidate in taken:
            candidate += 1
        return candidate

    def _insert(self, task: Task) -> None:
        self._tasks.insert(0, task)

    def _after_mutation(self) -> None:
        self._save()
