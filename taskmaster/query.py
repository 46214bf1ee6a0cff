"""
Query pipeline: filter, search and sort a task collection into a view.

Everything here is a pure function of its inputs. Unknown or empty
parameter values fall back to "no filter" / the default order instead of
raising.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from functools import lru_cache
from typing import Iterable, Mapping, Optional

from pyuca import Collator

from .schemas import PRIORITIES, Task, parse_timestamp


STATUS_FILTERS = ["all", "active", "completed"]
SORT_KEYS = ["dueDate", "priority", "alphabetical", "default"]

PRIORITY_WEIGHT = {"high": 3, "medium": 2, "low": 1}

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class TaskQuery:
    status: str = "all"
    priority: Optional[str] = None
    search: str = ""
    sort: str = "default"

    @classmethod
    def from_params(cls, params: Mapping[str, object]) -> "TaskQuery":
        """Build a query from request-style parameters.

        Accepts the HTTP names ``filter``, ``priority``, ``search`` and
        ``sort``. Values that are not recognised are dropped.
        """
        status = params.get("filter")
        if status not in STATUS_FILTERS:
            status = "all"

        priority = params.get("priority")
        if priority not in PRIORITIES:
            priority = None

        search = params.get("search")
        if not isinstance(search, str):
            search = ""

        sort = params.get("sort")
        if sort not in SORT_KEYS:
            sort = "default"

        return cls(status=status, priority=priority, search=search, sort=sort)


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------

def matches_status(task: Task, status: str) -> bool:
    if status == "active":
        return not task.completed
    if status == "completed":
        return task.completed
    return True


def matches_priority(task: Task, priority: Optional[str]) -> bool:
    if priority not in PRIORITIES:
        return True
    return task.priority == priority


def matches_search(task: Task, search: str) -> bool:
    needle = (search or "").lower()
    if not needle:
        return True
    return (
        needle in (task.title or "").lower()
        or needle in (task.description or "").lower()
        or needle in (task.category or "").lower()
    )


# ---------------------------------------------------------------------------
# Sorting
# ---------------------------------------------------------------------------

def _due_date_key(task: Task) -> tuple:
    due = parse_timestamp(task.due_date)
    if due is None:
        return (1, _EPOCH)
    return (0, due)


def _priority_key(task: Task) -> int:
    return -PRIORITY_WEIGHT.get(task.priority, 0)


@lru_cache(maxsize=1)
def _collator() -> Collator:
    return Collator()


def _alphabetical_key(task: Task) -> tuple:
    # Unicode collation: accents and case only break ties, lowercase first.
    return _collator().sort_key(task.title or "")


def _created_at_key(task: Task) -> datetime:
    return parse_timestamp(task.created_at) or _EPOCH


def sort_tasks(tasks: Iterable[Task], sort: str = "default") -> list[Task]:
    """Return a new, stably sorted list. The input is left untouched."""
    if sort == "dueDate":
        return sorted(tasks, key=_due_date_key)
    if sort == "priority":
        return sorted(tasks, key=_priority_key)
    if sort == "alphabetical":
        return sorted(tasks, key=_alphabetical_key)
    return sorted(tasks, key=_created_at_key, reverse=True)


def run_query(tasks: Iterable[Task], query: Optional[TaskQuery] = None) -> list[Task]:
    if query is None:
        query = TaskQuery()
    items = [
        t for t in tasks
        if matches_status(t, query.status)
        and matches_priority(t, query.priority)
        and matches_search(t, query.search)
    ]
    return sort_tasks(items, query.sort)


def summarize(tasks: Iterable[Task]) -> dict[str, int]:
    items = list(tasks)
    total = len(items)
    completed = sum(1 for t in items if t.completed)
    percentage = int(completed / total * 100 + 0.5) if total else 0
    return {
        "total": total,
        "active": total - completed,
        "completed": completed,
        "percentage": percentage,
    }
