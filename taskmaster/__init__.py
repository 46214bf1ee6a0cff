"""
TaskMaster: a single-user task list with an HTTP API and a local store.
"""

__version__ = "1.0.0"
