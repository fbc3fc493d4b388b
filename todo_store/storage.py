"""JSON file persistence for the task list.

The whole list is read and written at once. Writes go to a sibling
``.tmp`` file that then replaces the target, so the file on disk is always
either the previous or the new list.

Files written by the earlier desktop build are upgraded on load: their
timestamps carry nanoseconds and a zone abbreviation (``... 10:11:12.123456789
WIB``), and unfinished tasks have an empty ``updated_at``.
"""

import json
import logging
import os
import re
from collections.abc import Sequence
from datetime import UTC, datetime, tzinfo
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter, ValidationError

from todo_store.errors import PersistenceFailure
from todo_store.models import Task, format_timestamp

logger = logging.getLogger(__name__)

_task_list = TypeAdapter(list[Task])

# "2025-01-02 10:11:12.123456789 WIB" as written by the earlier desktop build.
_LEGACY_TIMESTAMP = re.compile(
    r"^(?P<base>\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2})(?:\.(?P<frac>\d+))? (?P<zone>[A-Za-z]+)$"
)


def default_data_file() -> Path:
    """Return ``~/Documents/todo-app/todos.json``, or ``./todos.json`` without a home."""
    home = os.environ.get("HOME") or os.environ.get("USERPROFILE")
    if not home:
        return Path("todos.json")
    return Path(home) / "Documents" / "todo-app" / "todos.json"


def _upgrade_timestamp(value: str, tz: tzinfo) -> str:
    """Rewrite a legacy timestamp in the current format; other values pass through."""
    match = _LEGACY_TIMESTAMP.match(value)
    if match is None:
        return value
    base = datetime.strptime(match["base"], "%Y-%m-%d %H:%M:%S")
    # Microsecond precision: nanosecond digits are truncated.
    micros = int((match["frac"] or "0")[:6].ljust(6, "0"))
    return format_timestamp(base.replace(microsecond=micros, tzinfo=tz))


def upgrade_legacy_record(record: Any, tz: tzinfo) -> Any:
    """Bring one stored record written by the earlier desktop build up to date.

    The zone abbreviation is read as ``tz``. An empty ``updated_at`` becomes
    ``created_at``.
    """
    if not isinstance(record, dict):
        return record
    upgraded = dict(record)
    for key in ("created_at", "updated_at"):
        if isinstance(upgraded.get(key), str):
            upgraded[key] = _upgrade_timestamp(upgraded[key], tz)
    if upgraded.get("updated_at") == "" and "created_at" in upgraded:
        upgraded["updated_at"] = upgraded["created_at"]
    return upgraded


class JsonFileStorage:
    """Reads and writes the ordered task list as a JSON array.

    ``timezone`` is the zone assumed for legacy timestamps that only carry an
    abbreviation.
    """

    def __init__(self, path: str | Path, timezone: tzinfo = UTC) -> None:
        self._path = Path(path)
        self._timezone = timezone

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> list[Task]:
        """Load all tasks. A missing file is an empty list."""
        if not self._path.exists():
            logger.info("No task file at %s, starting empty", self._path)
            return []
        try:
            raw = self._path.read_text(encoding="utf-8")
            data = json.loads(raw) if raw.strip() else []
            if not isinstance(data, list):
                raise ValueError("expected a JSON array of tasks")
            upgraded = [upgrade_legacy_record(record, self._timezone) for record in data]
            tasks = _task_list.validate_python(upgraded)
        except (OSError, ValueError, ValidationError) as exc:
            raise PersistenceFailure(f"Cannot read task file {self._path}: {exc}") from exc
        if upgraded != data:
            logger.info("Upgraded legacy task records in %s", self._path)
        logger.info("Loaded %d tasks from %s", len(tasks), self._path)
        return tasks

    def save(self, tasks: Sequence[Task]) -> None:
        """Write all tasks, replacing the previous file contents."""
        data = _task_list.dump_json(list(tasks), by_alias=True, indent=2)
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_bytes(data)
            os.replace(tmp_path, self._path)
        except OSError as exc:
            raise PersistenceFailure(f"Cannot write task file {self._path}: {exc}") from exc
        logger.debug("Saved %d tasks to %s", len(tasks), self._path)
