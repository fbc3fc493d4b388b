"""Ordered to-do list storage with a FastAPI boundary."""

from todo_store.errors import IndexOutOfRange, InvalidInput, PersistenceFailure, TodoStoreError
from todo_store.models import Task
from todo_store.storage import JsonFileStorage
from todo_store.store import TaskStore

__all__ = [
    "IndexOutOfRange",
    "InvalidInput",
    "JsonFileStorage",
    "PersistenceFailure",
    "Task",
    "TaskStore",
    "TodoStoreError",
]
