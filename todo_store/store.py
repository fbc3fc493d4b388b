"""Ordered task storage backed by a JSON file.

Tasks are addressed by their position in the list. Any add or remove
shifts positions, so callers must re-fetch the list before issuing another
index-based call.
"""

import logging
import threading
from collections.abc import Callable
from datetime import UTC, datetime

from todo_store.errors import IndexOutOfRange, InvalidInput
from todo_store.models import Task
from todo_store.storage import JsonFileStorage

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


class TaskStore:
    """Sole owner of the ordered task list.

    Mutations are serialized by a lock. Each one builds a new tuple, writes
    it to storage and only then swaps it in, so a failed write leaves the
    in-memory list untouched and readers never see a half-applied change.
    """

    def __init__(self, storage: JsonFileStorage, clock: Clock = utc_now) -> None:
        """Initialize the store and load persisted tasks.

        Raises PersistenceFailure if the backing file cannot be read.
        """
        self._storage = storage
        self._clock = clock
        self._lock = threading.Lock()
        self._tasks: tuple[Task, ...] = ()
        self.reload()

    def list_all(self) -> list[Task]:
        """Return a snapshot of all tasks in insertion order."""
        return list(self._tasks)

    def add(self, text: str, priority: bool = False) -> Task:
        """Append a new task and return it."""
        text = text.strip()
        if not text:
            raise InvalidInput("Task text must not be empty")

        with self._lock:
            now = self._now()
            task = Task(
                text=text,
                done=False,
                priority=priority,
                created_at=now,
                updated_at=now,
            )
            self._commit((*self._tasks, task))
        logger.info("Added task %r (priority=%s)", text, priority)
        return task

    def remove(self, index: int) -> None:
        """Delete the task at ``index``; later tasks shift down by one."""
        with self._lock:
            tasks = list(self._tasks)
            self._check_index(index, len(tasks))
            removed = tasks.pop(index)
            self._commit(tuple(tasks))
        logger.info("Removed task %d %r", index, removed.text)

    def set_done(self, index: int, done: bool) -> Task:
        """Set the completion state of the task at ``index``.

        ``updated_at`` moves only when the task goes from active to done.
        """
        with self._lock:
            tasks = list(self._tasks)
            self._check_index(index, len(tasks))
            task = tasks[index]
            if task.done == done:
                return task

            update: dict[str, object] = {"done": done}
            if done:
                update["updated_at"] = self._now()
            tasks[index] = task.model_copy(update=update)
            self._commit(tuple(tasks))
        logger.info("Marked task %d done=%s", index, done)
        return tasks[index]

    def reload(self) -> None:
        """Replace the in-memory list with the contents of storage."""
        with self._lock:
            self._tasks = tuple(self._storage.load())

    def __len__(self) -> int:
        return len(self._tasks)

    def _now(self) -> datetime:
        now = self._clock()
        if now.tzinfo is None:
            raise ValueError("Clock returned a naive datetime; timestamps need a UTC offset")
        return now

    @staticmethod
    def _check_index(index: int, size: int) -> None:
        if not 0 <= index < size:
            raise IndexOutOfRange(index, size)

    def _commit(self, tasks: tuple[Task, ...]) -> None:
        # Must be called with the lock held.
        try:
            self._storage.save(tasks)
        except Exception:
            logger.exception("Failed to persist %d tasks to %s", len(tasks), self._storage.path)
            raise
        self._tasks = tasks
