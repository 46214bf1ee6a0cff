# tests/test_query.py

from __future__ import annotations

import pytest

from taskmaster.query import TaskQuery, run_query, sort_tasks, summarize

from .helpers import make_task


@pytest.fixture()
def tasks():
    return [
        make_task(1, "Write report", priority="low", category="Work",
                  due_date="2025-10-05T00:00:00Z"),
        make_task(2, "buy groceries", priority="high", completed=True,
                  description="Milk and bread", category="Home"),
        make_task(3, "Call plumber", priority="medium", category="Home"),
        make_task(4, "Answer email", priority="high", category="Work",
                  due_date="2025-09-28"),
    ]


def _ids(items):
    return [t.id for t in items]


def test_active_and_completed_partition_the_collection(tasks) -> None:
    active = run_query(tasks, TaskQuery(status="active"))
    completed = run_query(tasks, TaskQuery(status="completed"))

    assert all(not t.completed for t in active)
    assert all(t.completed for t in completed)
    assert set(_ids(active)).isdisjoint(_ids(completed))
    assert set(_ids(active)) | set(_ids(completed)) == {1, 2, 3, 4}


def test_priority_filter(tasks) -> None:
    assert set(_ids(run_query(tasks, TaskQuery(priority="high")))) == {2, 4}
    assert len(run_query(tasks, TaskQuery(priority=None))) == 4


def test_search_matches_title_description_and_category_case_insensitively(tasks) -> None:
    assert _ids(run_query(tasks, TaskQuery(search="REPORT"))) == [1]
    assert _ids(run_query(tasks, TaskQuery(search="bread"))) == [2]
    assert set(_ids(run_query(tasks, TaskQuery(search="home")))) == {2, 3}
    assert run_query(tasks, TaskQuery(search="nothing like this")) == []
    assert len(run_query(tasks, TaskQuery(search=""))) == 4


def test_filters_combine(tasks) -> None:
    result = run_query(tasks, TaskQuery(status="active", priority="high", search="work"))
    assert _ids(result) == [4]


def test_default_sort_is_newest_first(tasks) -> None:
    assert _ids(run_query(tasks)) == [4, 3, 2, 1]


def test_due_date_sort_puts_undated_tasks_last_in_original_order(tasks) -> None:
    assert _ids(sort_tasks(tasks, "dueDate")) == [4, 1, 2, 3]


def test_due_date_sort_dated_before_undated() -> None:
    undated = make_task(1, "Someday")
    dated = make_task(2, "Soon", due_date="2025-09-28")
    assert _ids(sort_tasks([undated, dated], "dueDate")) == [2, 1]


def test_priority_sort_is_descending_and_stable(tasks) -> None:
    assert _ids(sort_tasks(tasks, "priority")) == [2, 4, 3, 1]


def test_alphabetical_sort_ignores_case_and_is_idempotent(tasks) -> None:
    once = sort_tasks(tasks, "alphabetical")
    assert [t.title for t in once] == [
        "Answer email", "buy groceries", "Call plumber", "Write report",
    ]
    assert _ids(sort_tasks(once, "alphabetical")) == _ids(once)


def test_alphabetical_sort_treats_accents_as_base_letters() -> None:
    tasks = [make_task(1, "Zebra"), make_task(2, "Éclair"), make_task(3, "apple")]
    assert [t.title for t in sort_tasks(tasks, "alphabetical")] == ["apple", "Éclair", "Zebra"]


def test_alphabetical_sort_puts_lowercase_first_on_ties() -> None:
    tasks = [make_task(1, "Task"), make_task(2, "task")]
    assert [t.title for t in sort_tasks(tasks, "alphabetical")] == ["task", "Task"]


def test_sorting_returns_a_new_list(tasks) -> None:
    before = _ids(tasks)
    sort_tasks(tasks, "alphabetical")
    run_query(tasks, TaskQuery(sort="priority"))
    assert _ids(tasks) == before


def test_from_params_falls_back_on_unknown_values() -> None:
    query = TaskQuery.from_params({"filter": "bogus", "priority": "all", "sort": "random"})
    assert query == TaskQuery()

    query = TaskQuery.from_params(
        {"filter": "completed", "priority": "low", "search": "x", "sort": "dueDate"}
    )
    assert query == TaskQuery(status="completed", priority="low", search="x", sort="dueDate")


def test_summarize_rounds_percentage() -> None:
    assert summarize([]) == {"total": 0, "active": 0, "completed": 0, "percentage": 0}

    items = [make_task(1, "a", completed=True), make_task(2, "b"), make_task(3, "c")]
    assert summarize(items) == {"total": 3, "active": 2, "completed": 1, "percentage": 33}

    items[1].completed = True
    assert summarize(items)["percentage"] == 67
