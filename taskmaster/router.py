"""
Operation dispatch for the TaskMaster API.
"""

from __future__ import annotations

import logging
from typing import Any

from .errors import TaskError
from .operations import OPERATIONS
from .repository import TaskRepository

logger = logging.getLogger(__name__)


def handle_call(
    op: str,
    repo: TaskRepository,
    args: dict,
    *,
    debug: bool = False,
) -> dict:
    """
    Run operation ``op`` and return {"status": int, "body": dict}.

    Domain errors map to their status code; anything else is logged and
    reported as a 500 without internals unless ``debug`` is set.
    """
    operation = OPERATIONS.get(op)
    if operation is None:
        return {
            "status": 404,
            "body": {"success": False, "message": f"Unknown operation: {op}"},
        }

    try:
        result = operation["handler"](repo, args)
    except TaskError as err:
        level = logging.INFO if operation["side_effecting"] else logging.DEBUG
        logger.log(level, "%s rejected: %s", op, err.message)
        return {
            "status": err.status_code,
            "body": {"success": False, "message": err.message},
        }
    except Exception as err:
        logger.exception("%s failed", op)
        body: dict[str, Any] = {
            "success": False,
            "message": operation["failure_message"],
            "error": (str(err) or type(err).__name__) if debug else "Internal server error",
        }
        return {"status": 500, "body": body}

    return {
        "status": operation["status"],
        "body": {"success": True, **result},
    }
