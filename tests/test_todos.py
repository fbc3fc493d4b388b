"""Tests for the todo endpoints."""

import importlib
import inspect
from pathlib import Path

import pytest
from fastapi.routing import APIRoute
from fastapi.testclient import TestClient

import todo_store.main
from todo_store.config import Settings, get_settings
from todo_store.errors import PersistenceFailure
from todo_store.main import create_app
from todo_store.store import TaskStore


def test_list_todos_empty(client: TestClient) -> None:
    """Test listing todos when none exist."""
    response = client.get("/api/todos")
    assert response.status_code == 200
    assert response.json() == []


def test_add_todo(client: TestClient) -> None:
    """Test adding a new todo."""
    response = client.post("/api/todos", json={"todo": "Test task", "ispriority": True})
    assert response.status_code == 201
    data = response.json()
    assert data["todo"] == "Test task"
    assert data["isdone"] is False
    assert data["ispriority"] is True
    assert data["created_at"] == data["updated_at"]


def test_add_todo_priority_defaults_false(client: TestClient) -> None:
    """Test that ispriority may be omitted."""
    response = client.post("/api/todos", json={"todo": "Plain"})
    assert response.status_code == 201
    assert response.json()["ispriority"] is False


def test_timestamp_shape(client: TestClient) -> None:
    """Test that timestamps split into date and time the way the frontend expects."""
    created_at = client.post("/api/todos", json={"todo": "Stamp"}).json()["created_at"]

    date_part = created_at.split(" ")[0]
    time_part = created_at.split(" ")[1].split(".")[0]
    assert date_part == "2026-10-19"
    assert time_part == "09:30:00"


def test_add_todo_blank_text(client: TestClient) -> None:
    """Test that whitespace-only text is rejected."""
    response = client.post("/api/todos", json={"todo": "   ", "ispriority": False})
    assert response.status_code == 422
    assert client.get("/api/todos").json() == []


def test_add_todo_missing_text(client: TestClient) -> None:
    """Test that a body without text is rejected."""
    response = client.post("/api/todos", json={"ispriority": True})
    assert response.status_code == 422


def test_update_todo(client: TestClient) -> None:
    """Test marking a todo as done."""
    client.post("/api/todos", json={"todo": "Complete me"})

    response = client.patch("/api/todos/0", json={"isdone": True})
    assert response.status_code == 200
    data = response.json()
    assert data["isdone"] is True
    assert data["updated_at"] > data["created_at"]
    assert client.get("/api/todos").json()[0] == data


def test_update_todo_not_found(client: TestClient) -> None:
    """Test updating an index past the end."""
    response = client.patch("/api/todos/0", json={"isdone": True})
    assert response.status_code == 404
    assert "out of range" in response.json()["detail"]


def test_update_todo_negative_index(client: TestClient) -> None:
    """Test that negative indices are not treated as offsets from the end."""
    client.post("/api/todos", json={"todo": "Only"})

    response = client.patch("/api/todos/-1", json={"isdone": True})
    assert response.status_code == 404
    assert client.get("/api/todos").json()[0]["isdone"] is False


def test_remove_todo(client: TestClient) -> None:
    """Test removing a todo shifts the later ones down."""
    for text in ("Task 1", "Task 2", "Task 3"):
        client.post("/api/todos", json={"todo": text})

    response = client.delete("/api/todos/1")
    assert response.status_code == 204

    todos = [t["todo"] for t in client.get("/api/todos").json()]
    assert todos == ["Task 1", "Task 3"]


def test_remove_todo_not_found(client: TestClient) -> None:
    """Test removing an index equal to the list length."""
    client.post("/api/todos", json={"todo": "Only"})

    response = client.delete("/api/todos/1")
    assert response.status_code == 404
    assert len(client.get("/api/todos").json()) == 1


def test_list_todos_in_insertion_order(client: TestClient) -> None:
    """Test that priority todos are not moved to the front."""
    client.post("/api/todos", json={"todo": "Buy milk", "ispriority": False})
    client.post("/api/todos", json={"todo": "Pay rent", "ispriority": True})

    todos = client.get("/api/todos").json()
    assert [(t["todo"], t["ispriority"]) for t in todos] == [
        ("Buy milk", False),
        ("Pay rent", True),
    ]


def test_persistence_failure_is_reported(
    client: TestClient, store: TaskStore, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Test that a failed write surfaces as 503 and changes nothing."""

    def broken_save(tasks: object) -> None:
        raise PersistenceFailure("disk full")

    monkeypatch.setattr(store._storage, "save", broken_save)

    response = client.post("/api/todos", json={"todo": "Lost"})
    assert response.status_code == 503
    assert response.json()["detail"] == "disk full"
    assert store.list_all() == []


def test_store_unavailable_when_file_corrupt(data_file: Path, settings: Settings) -> None:
    """Test that a store that fails to load makes the todo routes answer 503."""
    data_file.parent.mkdir(parents=True)
    data_file.write_text("[{broken", encoding="utf-8")

    with TestClient(create_app(settings=settings)) as client:
        response = client.get("/api/todos")
        assert response.status_code == 503
        assert response.json()["detail"] == "Task store unavailable"
        assert client.get("/api/health").json()["status"] == "unavailable"


def test_store_loaded_at_startup(data_file: Path, settings: Settings, store: TaskStore) -> None:
    """Test that the app loads persisted todos when started without a store."""
    store.add("Saved earlier", True)

    with TestClient(create_app(settings=settings)) as client:
        todos = client.get("/api/todos").json()

    assert [t["todo"] for t in todos] == ["Saved earlier"]


def test_todo_routes_run_in_threadpool(settings: Settings, store: TaskStore) -> None:
    """Test that routes touching the store are plain functions, off the event loop."""
    app = create_app(store=store, settings=settings)

    todo_routes = [
        r for r in app.routes if isinstance(r, APIRoute) and r.path.startswith("/api/todos")
    ]
    assert len(todo_routes) == 4
    for route in todo_routes:
        assert not inspect.iscoroutinefunction(route.endpoint)


def test_import_does_not_read_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test that importing the app module leaves settings unloaded."""
    monkeypatch.setenv("TODO_TIMEZONE", "Mars/Olympus_Mons")
    get_settings.cache_clear()
    try:
        importlib.reload(todo_store.main)
        assert get_settings.cache_info().currsize == 0
    finally:
        get_settings.cache_clear()
