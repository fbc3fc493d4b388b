"""FastAPI application factory.

Serve with ``uvicorn todo_store.main:create_app --factory``; settings are only
read when the app is built.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Annotated

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from todo_store.config import Settings, get_settings
from todo_store.errors import IndexOutOfRange, InvalidInput, PersistenceFailure
from todo_store.models import HealthResponse, Task, TaskCreate, TaskUpdate
from todo_store.storage import JsonFileStorage
from todo_store.store import TaskStore

logger = logging.getLogger(__name__)


def open_store(settings: Settings) -> TaskStore:
    """Load the task store described by ``settings``."""
    return TaskStore(
        JsonFileStorage(settings.data_file, timezone=settings.timezone),
        clock=lambda: datetime.now(settings.timezone),
    )


def get_store(request: Request) -> TaskStore:
    """Return the app's task store, or 503 if it failed to load."""
    store = request.app.state.store
    if store is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Task store unavailable",
        )
    return store


StoreDep = Annotated[TaskStore, Depends(get_store)]


def _error(status_code: int, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


async def invalid_input_handler(request: Request, exc: InvalidInput) -> JSONResponse:
    return _error(422, exc)


async def index_out_of_range_handler(request: Request, exc: IndexOutOfRange) -> JSONResponse:
    return _error(status.HTTP_404_NOT_FOUND, exc)


async def persistence_failure_handler(request: Request, exc: PersistenceFailure) -> JSONResponse:
    return _error(status.HTTP_503_SERVICE_UNAVAILABLE, exc)


def create_app(store: TaskStore | None = None, settings: Settings | None = None) -> FastAPI:
    """Build the API around ``store``.

    Without an explicit store one is loaded from ``settings`` at startup. If
    that load fails the app still starts, and every todo route answers 503.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if app.state.store is None:
            try:
                app.state.store = open_store(settings)
            except PersistenceFailure:
                logger.exception("Task store unavailable: failed to load %s", settings.data_file)
        yield

    app = FastAPI(
        title="Todo Store API",
        description="Ordered to-do list storage for the desktop todo app.",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.store = store

    # Configure CORS for frontend access
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(InvalidInput, invalid_input_handler)
    app.add_exception_handler(IndexOutOfRange, index_out_of_range_handler)
    app.add_exception_handler(PersistenceFailure, persistence_failure_handler)

    @app.get("/api/health", response_model=HealthResponse, tags=["System"])
    async def health_check(request: Request) -> HealthResponse:
        """Health check endpoint."""
        current = request.app.state.store
        if current is None:
            return HealthResponse(status="unavailable")
        return HealthResponse(tasks=len(current))

    @app.get("/api/todos", response_model=list[Task], tags=["Todos"])
    def get_todos(store: StoreDep) -> list[Task]:
        """List all todos in insertion order."""
        return store.list_all()

    @app.post(
        "/api/todos",
        response_model=Task,
        status_code=status.HTTP_201_CREATED,
        tags=["Todos"],
    )
    def add_todo(data: TaskCreate, store: StoreDep) -> Task:
        """Append a new todo."""
        return store.add(data.text, data.priority)

    @app.patch("/api/todos/{index}", response_model=Task, tags=["Todos"])
    def update_todo(index: int, data: TaskUpdate, store: StoreDep) -> Task:
        """Set the completion state of the todo at ``index``."""
        return store.set_done(index, data.done)

    @app.delete(
        "/api/todos/{index}",
        status_code=status.HTTP_204_NO_CONTENT,
        tags=["Todos"],
    )
    def remove_todo(index: int, store: StoreDep) -> None:
        """Delete the todo at ``index``."""
        store.remove(index)

    return app
