# tests/test_cli.py

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest
from click.testing import CliRunner

from taskmaster.cli import cli
from taskmaster.config import get_settings
from taskmaster.storage import TASKS_KEY, THEME_KEY


@pytest.fixture()
def run(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("TASKMASTER_SEED_SAMPLE_TASKS", "false")
    get_settings.cache_clear()
    storage_path = tmp_path / "storage.json"
    runner = CliRunner()

    def _run(*args: str):
        return runner.invoke(cli, ["--storage", str(storage_path), *args])

    _run.storage_path = storage_path

    # The CLI reconfigures the root logger; put pytest's handlers back afterwards.
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    yield _run
    for h in list(root.handlers):
        root.removeHandler(h)
    for h in saved_handlers:
        root.addHandler(h)
    root.setLevel(saved_level)
    get_settings.cache_clear()


def _stored(path: Path) -> dict:
    return json.loads(path.read_text(encoding="utf-8"))


def _tasks(path: Path) -> list[dict]:
    return json.loads(_stored(path)[TASKS_KEY])


def test_add_list_done_rm(run) -> None:
    result = run("add", "Buy milk", "-p", "high", "-c", "Home")
    assert result.exit_code == 0, result.output
    assert "Task created successfully" in result.output

    [task] = _tasks(run.storage_path)
    assert task["title"] == "Buy milk"
    assert task["priority"] == "high"
    task_id = str(task["id"])

    result = run("list", "--filter", "active")
    assert result.exit_code == 0
    assert "Buy milk" in result.output

    result = run("done", task_id)
    assert result.exit_code == 0
    assert _tasks(run.storage_path)[0]["completed"] is True

    result = run("list", "--filter", "active")
    assert "No tasks found" in result.output

    result = run("rm", task_id)
    assert result.exit_code == 0
    assert _tasks(run.storage_path) == []


def test_titles_with_markup_are_printed_literally(run) -> None:
    result = run("add", "fix [/bold] tag")
    assert result.exit_code == 0, result.output
    task_id = str(_tasks(run.storage_path)[0]["id"])

    result = run("list")
    assert result.exit_code == 0, result.output
    assert "fix [/bold] tag" in result.output

    result = run("rm", task_id)
    assert result.exit_code == 0, result.output
    assert '"fix [/bold] tag" deleted' in result.output
    assert _tasks(run.storage_path) == []


def test_edit_and_clear_due(run) -> None:
    run("add", "Report", "--due", "2025-09-28")
    task_id = str(_tasks(run.storage_path)[0]["id"])

    result = run("edit", task_id, "--title", "Final report", "--clear-due")
    assert result.exit_code == 0, result.output
    task = _tasks(run.storage_path)[0]
    assert task["title"] == "Final report"
    assert task["dueDate"] is None


def test_errors_exit_nonzero(run) -> None:
    result = run("add", "   ")
    assert result.exit_code == 1
    assert "title" in result.output

    result = run("rm", "999")
    assert result.exit_code == 1
    assert "Task not found" in result.output


def test_stats(run) -> None:
    run("add", "a")
    run("add", "b")
    task_id = str(_tasks(run.storage_path)[0]["id"])
    run("done", task_id)

    result = run("stats")
    assert "Total: 2" in result.output
    assert "Progress: 50%" in result.output


def test_theme(run) -> None:
    assert "Theme: light" in run("theme").output
    assert "Theme: dark" in run("theme", "toggle").output
    assert _stored(run.storage_path)[THEME_KEY] == "dark"
    assert "Theme: light" in run("theme", "light").output
