"""Errors raised by the task store."""


class TodoStoreError(Exception):
    """Base class for task store errors."""


class InvalidInput(TodoStoreError):
    """The task text is empty or whitespace only."""


class IndexOutOfRange(TodoStoreError):
    """A positional index does not address a task in the current list."""

    def __init__(self, index: int, size: int) -> None:
        super().__init__(f"Task index {index} out of range (list has {size} tasks)")
        self.index = index
        self.size = size


class PersistenceFailure(TodoStoreError):
    """The backing file could not be read or written."""
