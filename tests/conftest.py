"""Pytest fixtures for the Todo Store tests."""

from datetime import datetime, timedelta
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest
from fastapi.testclient import TestClient

from todo_store.config import Settings
from todo_store.main import create_app
from todo_store.storage import JsonFileStorage
from todo_store.store import TaskStore

JAKARTA = ZoneInfo("Asia/Jakarta")


class FakeClock:
    """Deterministic clock advancing one second per call."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 10, 19, 9, 30, 0, 123456, tzinfo=JAKARTA)

    def __call__(self) -> datetime:
        current = self.now
        self.now = current + timedelta(seconds=1)
        return current


@pytest.fixture
def data_file(tmp_path: Path) -> Path:
    """Location of the JSON file backing the store."""
    return tmp_path / "todo-app" / "todos.json"


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(data_file: Path, clock: FakeClock) -> TaskStore:
    """An empty store persisted under tmp_path."""
    return TaskStore(JsonFileStorage(data_file), clock=clock)


@pytest.fixture
def settings(data_file: Path) -> Settings:
    return Settings(
        data_file=data_file,
        timezone=ZoneInfo("UTC"),
        log_level="INFO",
        log_dir=None,
        host="127.0.0.1",
        port=8000,
        cors_origins=["http://localhost:1420"],
    )


@pytest.fixture
def client(store: TaskStore, settings: Settings) -> TestClient:
    """Create a test client for the API."""
    return TestClient(create_app(store=store, settings=settings))
