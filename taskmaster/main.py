"""
FastAPI application for the TaskMaster API.

Run with ``taskmaster serve`` or ``uvicorn --factory taskmaster.main:create_app``.
"""

from __future__ import annotations

import json
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import FileResponse, JSONResponse, Response

from . import __version__
from .config import Settings, get_settings
from .repository import SAMPLE_TASKS, InMemoryTaskRepository, TaskRepository
from .router import handle_call
from .schemas import now_iso

logger = logging.getLogger(__name__)


async def _read_json_object(request: Request) -> tuple[Optional[dict], Optional[JSONResponse]]:
    """Parse the request body; an empty body counts as ``{}``."""
    body = await request.body()
    if not body.strip():
        return {}, None
    try:
        payload = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None, JSONResponse(
            status_code=400,
            content={"success": False, "message": "Invalid JSON in request body"},
        )
    if not isinstance(payload, dict):
        return None, JSONResponse(
            status_code=400,
            content={"success": False, "message": "Request body must be a JSON object"},
        )
    return payload, None


def create_app(
    settings: Optional[Settings] = None,
    repository: Optional[TaskRepository] = None,
) -> FastAPI:
    settings = settings or get_settings()
    if repository is None:
        repository = InMemoryTaskRepository(SAMPLE_TASKS if settings.seed_sample_tasks else ())

    app = FastAPI(title="TaskMaster API", version=__version__)
    app.state.settings = settings
    app.state.repository = repository

    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def _respond(op: str, args: dict) -> JSONResponse:
        result = handle_call(op, repository, args, debug=settings.debug)
        return JSONResponse(status_code=result["status"], content=result["body"])

    # -----------------------------------------------------------------------
    # Startup
    # -----------------------------------------------------------------------

    @app.on_event("startup")
    async def startup() -> None:
        logger.info(
            "TaskMaster API %s starting env=%s ui=%s",
            __version__,
            settings.env,
            settings.static_dir or "none",
        )

    # -----------------------------------------------------------------------
    # Errors
    # -----------------------------------------------------------------------

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "message": "Something went wrong!",
                "error": str(exc) if settings.debug else "Internal server error",
            },
        )

    # -----------------------------------------------------------------------
    # Routes
    # -----------------------------------------------------------------------

    @app.get("/api/health")
    async def health() -> JSONResponse:
        return JSONResponse(
            status_code=200,
            content={
                "status": "OK",
                "message": "TaskMaster API is running",
                "timestamp": now_iso(),
                "version": __version__,
            },
        )

    @app.get("/api/tasks")
    async def list_tasks(request: Request) -> JSONResponse:
        return _respond("tasks.list", dict(request.query_params))

    @app.get("/api/tasks/stats")
    async def task_stats() -> JSONResponse:
        return _respond("tasks.stats", {})

    @app.get("/api/tasks/{task_id}")
    async def get_task(task_id: str) -> JSONResponse:
        return _respond("tasks.get", {"id": task_id})

    @app.post("/api/tasks")
    async def create_task(request: Request) -> JSONResponse:
        args, error = await _read_json_object(request)
        if error is not None:
            return error
        return _respond("tasks.create", args)

    @app.put("/api/tasks/{task_id}")
    async def update_task(task_id: str, request: Request) -> JSONResponse:
        args, error = await _read_json_object(request)
        if error is not None:
            return error
        return _respond("tasks.update", {**args, "id": task_id})

    @app.post("/api/tasks/{task_id}/toggle")
    async def toggle_task(task_id: str) -> JSONResponse:
        return _respond("tasks.toggle", {"id": task_id})

    @app.delete("/api/tasks/{task_id}")
    async def delete_task(task_id: str) -> JSONResponse:
        return _respond("tasks.delete", {"id": task_id})

    # Everything else serves the UI entry point.
    @app.get("/{full_path:path}")
    async def frontend(full_path: str) -> Response:
        static_dir = settings.static_dir
        if static_dir is not None:
            candidate = (static_dir / full_path).resolve()
            if (
                full_path
                and candidate.is_file()
                and candidate.is_relative_to(static_dir.resolve())
            ):
                return FileResponse(candidate)
            index = static_dir / "index.html"
            if index.is_file():
                return FileResponse(index)
        return JSONResponse(
            status_code=404,
            content={"success": False, "message": "Not found"},
        )

    return app
