"""Task domain model."""

from __future__ import annotations

from datetime import datetime
from typing import Any, ClassVar

from pydantic import BaseModel, Field, field_validator

from ..utils import new_id
from .enums import AttachmentType, Priority, TaskStatus

# Time entries shorter than this are never persisted
MIN_TIME_ENTRY_SECONDS = 60


class ChecklistItem(BaseModel):
    """A single checklist line on a task."""

    id: str = Field(default_factory=new_id)
    content: str
    is_completed: bool = False


class CommentAuthor(BaseModel):
    """Author reference embedded in a comment."""

    id: str
    name: str


class Comment(BaseModel):
    """A comment left on a task."""

    id: str = Field(default_factory=new_id)
    content: str
    author: CommentAuthor
    created_at: datetime | None = None
    updated_at: datetime | None = None


class Attachment(BaseModel):
    """A file or link attached to a task. Only the reference URL is stored."""

    id: str = Field(default_factory=new_id)
    name: str
    url: str
    type: AttachmentType = AttachmentType.LINK
    created_at: datetime | None = None


class TimeEntry(BaseModel):
    """A completed block of tracked time."""

    id: str = Field(default_factory=new_id)
    task_id: str
    user_id: str
    description: str = "Work on task"
    start_time: datetime
    end_time: datetime | None = None
    duration: int = Field(..., ge=0)  # seconds
    created_at: datetime | None = None
    updated_at: datetime | None = None


class PriorityFactors(BaseModel):
    """Inputs to the weighted priority score, each rated 1 to 10."""

    WEIGHTS: ClassVar[dict[str, float]] = {
        "urgency": 0.4,
        "impact": 0.3,
        "effort": 0.2,
        "dependencies": 0.1,
    }

    urgency: int = Field(default=5, ge=1, le=10)
    impact: int = Field(default=5, ge=1, le=10)
    effort: int = Field(default=5, ge=1, le=10)
    dependencies: int = Field(default=5, ge=1, le=10)

    @property
    def score(self) -> float:
        """Weighted score rounded to one decimal place."""
        total = sum(getattr(self, name) * weight for name, weight in self.WEIGHTS.items())
        return round(total, 1)


class Task(BaseModel):
    """A unit of work living in one column of one board."""

    id: str
    title: str
    description: str | None = None
    status: TaskStatus = TaskStatus.TODO
    priority: Priority = Priority.MEDIUM
    due_date: datetime | None = None

    # Ownership
    column_id: str
    board_id: str
    business_id: str
    position: int = 0

    assignee: str | None = None  # Member id
    labels: list[str] = Field(default_factory=list)
    checklist: list[ChecklistItem] = Field(default_factory=list)
    attachments: list[Attachment] = Field(default_factory=list)
    time_entries: list[TimeEntry] = Field(default_factory=list)
    comments: list[Comment] = Field(default_factory=list)

    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def checklist_complete(self) -> bool:
        """True when the checklist has items and every one is completed."""
        return bool(self.checklist) and all(item.is_completed for item in self.checklist)

    @property
    def tracked_seconds(self) -> int:
        """Total seconds across all time entries."""
        return sum(entry.duration for entry in self.time_entries)

    def is_overdue(self, now: datetime) -> bool:
        """Whether the due date has passed."""
        return self.due_date is not None and self.due_date < now

    def to_document(self) -> dict[str, Any]:
        """Convert to a JSON-compatible document (id is the document key)."""
        return self.model_dump(mode="json", exclude={"id"})

    @classmethod
    def from_document(cls, doc_id: str, data: dict[str, Any]) -> Task:
        """Create Task from a stored document."""
        return cls.model_validate({**data, "id": doc_id})


class TaskDraft(BaseModel):
    """Caller-supplied fields for a new task."""

    title: str = "New Task"
    description: str | None = None
    priority: Priority = Priority.MEDIUM
    due_date: datetime | None = None
    column_id: str = Field(..., min_length=1)
    board_id: str | None = None
    assignee: str | None = None
    labels: list[str] = Field(default_factory=list)


class TaskUpdate(BaseModel):
    """Partial task fields. Only fields that were explicitly set are written."""

    model_config = {"extra": "forbid"}

    title: str | None = None
    description: str | None = None
    status: TaskStatus | None = None
    priority: Priority | None = None
    due_date: datetime | None = None
    column_id: str | None = None
    position: int | None = None
    assignee: str | None = None
    labels: list[str] | None = None
    checklist: list[ChecklistItem] | None = None
    attachments: list[Attachment] | None = None
    time_entries: list[TimeEntry] | None = None
    comments: list[Comment] | None = None

    @field_validator(
        "title",
        "status",
        "priority",
        "column_id",
        "position",
        "labels",
        "checklist",
        "attachments",
        "time_entries",
        "comments",
    )
    @classmethod
    def not_null(cls, v: Any) -> Any:
        """Only description, due_date and assignee may be cleared."""
        if v is None:
            raise ValueError("Field cannot be null")
        return v

    @field_validator("due_date", mode="before")
    @classmethod
    def blank_due_date_clears(cls, v: Any) -> Any:
        """Treat an empty string as an explicit clear."""
        if isinstance(v, str) and not v.strip():
            return None
        return v
