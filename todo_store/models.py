"""Pydantic models for the Todo Store API.

Field aliases match the names the desktop frontend reads and sends
(``todo``, ``isdone``, ``ispriority``). The same shape is written to disk.
"""

from datetime import datetime

from pydantic import (
    AwareDatetime,
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S.%f %z"


def format_timestamp(value: datetime) -> str:
    """Render a timestamp as ``date time.micros offset``."""
    return value.strftime(TIMESTAMP_FORMAT)


def parse_timestamp(value: str) -> datetime:
    return datetime.strptime(value, TIMESTAMP_FORMAT)


class TaskCreate(BaseModel):
    """Request body for adding a task."""

    model_config = ConfigDict(populate_by_name=True)

    text: str = Field(..., alias="todo", description="The task description")
    priority: bool = Field(
        default=False,
        alias="ispriority",
        description="Whether the task is flagged as a priority",
    )


class TaskUpdate(BaseModel):
    """Request body for changing a task's completion state."""

    model_config = ConfigDict(populate_by_name=True)

    done: bool = Field(..., alias="isdone", description="New completion status")


class Task(BaseModel):
    """A to-do item.

    Records are frozen; the store replaces a task with an updated copy
    instead of mutating it. Text is stripped and must stay non-empty;
    timestamps must carry a UTC offset so they can be written back.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, str_strip_whitespace=True)

    text: str = Field(..., min_length=1, alias="todo", description="The task description")
    done: bool = Field(default=False, alias="isdone", description="Whether the task is completed")
    priority: bool = Field(
        default=False,
        alias="ispriority",
        description="Priority flag, set when the task is created",
    )
    created_at: AwareDatetime = Field(..., description="When the task was created")
    updated_at: AwareDatetime = Field(..., description="When the task was last completed")

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def _parse_timestamp(cls, value: object) -> object:
        if isinstance(value, str):
            try:
                return parse_timestamp(value)
            except ValueError:
                # Let pydantic try ISO-8601 and report its own error.
                return value
        return value

    @field_serializer("created_at", "updated_at")
    def _serialize_timestamp(self, value: datetime) -> str:
        return format_timestamp(value)


class HealthResponse(BaseModel):
    """Response from the health check endpoint."""

    status: str = "healthy"
    version: str = "1.0.0"
    tasks: int | None = None
