# tests/conftest.py

from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from taskmaster.config import Settings
from taskmaster.main import create_app
from taskmaster.repository import InMemoryTaskRepository, SAMPLE_TASKS
from taskmaster.storage import LocalStorage


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """
    Settings built directly rather than from the environment, so tests do
    not depend on the developer's shell or .env file.
    """
    static_dir = tmp_path / "static"
    static_dir.mkdir()
    (static_dir / "index.html").write_text("<h1>TaskMaster</h1>", encoding="utf-8")
    return Settings(
        host="127.0.0.1",
        port=3000,
        env="production",
        frontend_url="http://localhost:3000",
        static_dir=static_dir,
        log_level="DEBUG",
        data_dir=tmp_path,
        storage_path=tmp_path / "storage.json",
        seed_sample_tasks=True,
    )


@pytest.fixture()
def repo() -> InMemoryTaskRepository:
    return InMemoryTaskRepository(SAMPLE_TASKS)


@pytest.fixture()
def client(settings: Settings, repo: InMemoryTaskRepository) -> TestClient:
    return TestClient(create_app(settings, repo))


@pytest.fixture()
def storage(tmp_path: Path) -> LocalStorage:
    return LocalStorage(tmp_path / "storage.json")
