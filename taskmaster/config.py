"""Settings loaded from environment variables (+ optional .env).

Every variable uses the ``TASKMASTER_`` prefix. ``PORT`` is also honoured
without the prefix, as hosting platforms set it that way.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

ENV_PREFIX = "TASKMASTER"

PACKAGE_STATIC_DIR = Path(__file__).parent / "static"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True)
class Settings:
    # ---- Server ----
    host: str
    port: int
    env: str
    frontend_url: str
    static_dir: Optional[Path]

    # ---- Logging ----
    log_level: str

    # ---- Local data ----
    data_dir: Path
    storage_path: Path
    seed_sample_tasks: bool

    @property
    def debug(self) -> bool:
        return self.env == "development"

    @staticmethod
    def from_env() -> "Settings":
        host = _env(_k("HOST"), "127.0.0.1")
        port = _env_int(_k("PORT"), _env_int("PORT", 3000))
        env = _env(_k("ENV"), "production").strip().lower() or "production"
        frontend_url = _env(_k("FRONTEND_URL"), "http://localhost:3000")

        static_dir: Optional[Path] = _env_path(_k("STATIC_DIR"), PACKAGE_STATIC_DIR)
        if not static_dir.is_dir():
            static_dir = None

        log_level = _env(_k("LOG_LEVEL"), "INFO").upper()

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/taskmaster"))
        storage_path = _env_path(_k("STORAGE_PATH"), data_dir / "storage.json")
        seed_sample_tasks = _env_bool(_k("SEED_SAMPLE_TASKS"), True)

        return Settings(
            host=host,
            port=port,
            env=env,
            frontend_url=frontend_url,
            static_dir=static_dir,
            log_level=log_level,
            data_dir=data_dir,
            storage_path=storage_path,
            seed_sample_tasks=seed_sample_tasks,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    load_dotenv(override=False)
    return Settings.from_env()
