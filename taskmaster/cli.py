"""Command-line interface.

Usage:
    taskmaster serve                   # HTTP API on 127.0.0.1:3000
    taskmaster list --filter active    # tasks from the local store
    taskmaster add "Buy milk" -p high
    taskmaster done 1727431200000      # toggle completion
    taskmaster theme toggle
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import NoReturn, Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import get_settings
from .errors import TaskError
from .logging_setup import setup_logging
from .query import SORT_KEYS, STATUS_FILTERS, TaskQuery
from .repository import LOCAL_SAMPLE_TASKS, LocalTaskRepository
from .schemas import PRIORITIES, UNSET, TaskDraft, TaskPatch
from .storage import LocalStorage, get_theme, set_theme, toggle_theme

logger = logging.getLogger(__name__)

console = Console()

PRIORITY_STYLE = {"high": "red", "medium": "yellow", "low": "green"}


class _State:
    def __init__(self, storage_path: Path, seed: bool) -> None:
        self.storage_path = storage_path
        self.seed = seed
        self._storage: Optional[LocalStorage] = None
        self._repo: Optional[LocalTaskRepository] = None

    @property
    def storage(self) -> LocalStorage:
        if self._storage is None:
            self._storage = LocalStorage(self.storage_path)
        return self._storage

    @property
    def repo(self) -> LocalTaskRepository:
        if self._repo is None:
            self._repo = LocalTaskRepository(
                self.storage, seed=LOCAL_SAMPLE_TASKS if self.seed else ()
            )
        return self._repo


def _fail(err: TaskError) -> NoReturn:
    console.print(f"[red]Error: {escape(err.message)}[/red]")
    raise SystemExit(1) from None


@click.group()
@click.option(
    "--storage",
    "storage_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Local storage file (defaults to TASKMASTER_STORAGE_PATH)",
)
@click.pass_context
def cli(ctx: click.Context, storage_path: Optional[Path]) -> None:
    """TaskMaster task list."""
    settings = get_settings()
    setup_logging(level=settings.log_level)
    ctx.obj = _State(storage_path or settings.storage_path, settings.seed_sample_tasks)


@cli.command()
@click.option("--host", default=None, help="Host to bind to (127.0.0.1 for local only)")
@click.option("--port", type=int, default=None, help="Port to listen on")
def serve(host: Optional[str], port: Optional[int]) -> None:
    """Start the TaskMaster HTTP API."""
    import uvicorn

    from .main import create_app

    settings = get_settings()
    setup_logging(level=settings.log_level, log_dir=settings.data_dir)
    host = host or settings.host
    port = port or settings.port

    app = create_app(settings)
    url = f"http://{host}:{port}"

    console.print()
    console.print("[bold green]TaskMaster[/bold green]")
    console.print(f"   Frontend: {url}")
    console.print(f"   API: {url}/api/health")
    console.print(f"   Environment: {settings.env}")
    console.print()

    uvicorn.run(app, host=host, port=port, log_config=None)


@cli.command("list")
@click.option("--filter", "status", type=click.Choice(STATUS_FILTERS), default="all")
@click.option("--priority", "-p", type=click.Choice(PRIORITIES), default=None)
@click.option("--search", "-s", default="", help="Match title, description or category")
@click.option("--sort", type=click.Choice(SORT_KEYS), default="default")
@click.pass_obj
def list_cmd(state: _State, status: str, priority: Optional[str], search: str, sort: str) -> None:
    """Show tasks from the local store."""
    query = TaskQuery(status=status, priority=priority, search=search, sort=sort)
    tasks = state.repo.list(query)
    if not tasks:
        console.print("[dim]No tasks found[/dim]")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("ID", justify="right")
    table.add_column("")
    table.add_column("Title")
    table.add_column("Priority")
    table.add_column("Due")
    table.add_column("Category")
    for t in tasks:
        table.add_row(
            str(t.id),
            "[green]x[/green]" if t.completed else " ",
            f"[strike]{escape(t.title)}[/strike]" if t.completed else escape(t.title),
            f"[{PRIORITY_STYLE.get(t.priority, 'white')}]{escape(t.priority)}[/]",
            (t.due_date or "")[:10],
            escape(t.category),
        )
    console.print(table)


@cli.command()
@click.argument("title")
@click.option("--description", "-d", default=None)
@click.option("--priority", "-p", type=click.Choice(PRIORITIES), default=None)
@click.option("--due", default=None, help="Due date (ISO-8601)")
@click.option("--category", "-c", default=None)
@click.pass_obj
def add(state: _State, title: str, description: Optional[str], priority: Optional[str],
        due: Optional[str], category: Optional[str]) -> None:
    """Create a task."""
    try:
        task = state.repo.create(TaskDraft(
            title=title, description=description, priority=priority,
            due_date=due, category=category,
        ))
    except TaskError as err:
        _fail(err)
    console.print(f"[green]Task created successfully![/green] id={task.id}")


@cli.command()
@click.argument("task_id", type=int)
@click.option("--title", default=None)
@click.option("--description", "-d", default=None)
@click.option("--priority", "-p", type=click.Choice(PRIORITIES), default=None)
@click.option("--due", default=None, help="Due date (ISO-8601)")
@click.option("--clear-due", is_flag=True, help="Remove the due date")
@click.option("--category", "-c", default=None)
@click.pass_obj
def edit(state: _State, task_id: int, title: Optional[str], description: Optional[str],
         priority: Optional[str], due: Optional[str], clear_due: bool,
         category: Optional[str]) -> None:
    """Update some fields of a task."""
    due_date = None if clear_due else (UNSET if due is None else due)
    patch = TaskPatch(
        title=UNSET if title is None else title,
        description=UNSET if description is None else description,
        priority=UNSET if priority is None else priority,
        due_date=due_date,
        category=UNSET if category is None else category,
    )
    try:
        state.repo.update(task_id, patch)
    except TaskError as err:
        _fail(err)
    console.print("[green]Task updated successfully![/green]")


@cli.command()
@click.argument("task_id", type=int)
@click.pass_obj
def done(state: _State, task_id: int) -> None:
    """Toggle completion of a task."""
    try:
        task = state.repo.toggle(task_id)
    except TaskError as err:
        _fail(err)
    console.print("[green]Task completed![/green]" if task.completed else "Task reopened")


@cli.command()
@click.argument("task_id", type=int)
@click.pass_obj
def rm(state: _State, task_id: int) -> None:
    """Delete a task."""
    try:
        task = state.repo.delete(task_id)
    except TaskError as err:
        _fail(err)
    console.print(f'"{escape(task.title)}" deleted')


@cli.command()
@click.pass_obj
def stats(state: _State) -> None:
    """Show progress over all tasks."""
    s = state.repo.summary()
    console.print(
        f"Total: {s['total']}  Active: {s['active']}  "
        f"Completed: {s['completed']}  Progress: {s['percentage']}%"
    )


@cli.command()
@click.argument("choice", required=False, type=click.Choice(["light", "dark", "toggle"]))
@click.pass_obj
def theme(state: _State, choice: Optional[str]) -> None:
    """Show or change the stored UI theme."""
    if choice is None:
        current = get_theme(state.storage)
    elif choice == "toggle":
        current = toggle_theme(state.storage)
    else:
        current = set_theme(state.storage, choice)
    console.print(f"Theme: {current}")


def main() -> None:
    cli()
