"""
Error types raised by the task repository and operation handlers.
"""

from __future__ import annotations


class TaskError(Exception):
    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(TaskError):
    status_code = 400


class NotFoundError(TaskError):
    status_code = 404

    def __init__(self, message: str = "Task not found"):
        super().__init__(message)
