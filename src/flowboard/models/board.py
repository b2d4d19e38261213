"""Board state models."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

from ..utils import new_id
from .automation import Automation
from .enums import MemberRole
from .task import Task


class Member(BaseModel):
    """A team member that tasks on a board can be assigned to."""

    id: str
    name: str
    email: str | None = None
    role: MemberRole = MemberRole.MEMBER
    avatar: str | None = None


class Column(BaseModel):
    """A lane within a board.

    Only id and title are persisted; ``tasks`` is filled in when a board is
    joined with its task collection.
    """

    id: str = Field(default_factory=new_id)
    title: str = Field(..., min_length=1)
    tasks: list[Task] = Field(default_factory=list)


class Board(BaseModel):
    """A named collection of columns and tasks belonging to one business."""

    id: str
    name: str
    description: str | None = None
    business_id: str
    columns: list[Column] = Field(default_factory=list)
    members: list[Member] = Field(default_factory=list)
    labels: list[str] = Field(default_factory=list)
    automations: list[Automation] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def column_ids(self) -> list[str]:
        """Column ids in display order."""
        return [col.id for col in self.columns]

    @property
    def all_tasks(self) -> list[Task]:
        """Every joined task, column by column."""
        return [task for col in self.columns for task in col.tasks]

    def get_column(self, column_id: str) -> Column | None:
        """Find a column by id."""
        for col in self.columns:
            if col.id == column_id:
                return col
        return None

    def get_member(self, member_id: str) -> Member | None:
        """Find a member by id."""
        for member in self.members:
            if member.id == member_id:
                return member
        return None

    def with_tasks(self, tasks: Iterable[Task]) -> Board:
        """Return a copy with tasks distributed into their columns.

        Tasks for other boards or unknown columns are dropped. Within a
        column tasks are sorted by position; ties keep their input order.
        """
        by_column: dict[str, list[Task]] = {col.id: [] for col in self.columns}
        for task in tasks:
            if task.board_id == self.id and task.column_id in by_column:
                by_column[task.column_id].append(task)

        columns = [
            col.model_copy(
                update={"tasks": sorted(by_column[col.id], key=lambda t: t.position)}
            )
            for col in self.columns
        ]
        return self.model_copy(update={"columns": columns})

    def to_document(self) -> dict[str, Any]:
        """Convert to a stored document (joined tasks are not persisted)."""
        return self.model_dump(
            mode="json",
            exclude={"id": True, "columns": {"__all__": {"tasks"}}},
        )

    @classmethod
    def from_document(cls, doc_id: str, data: dict[str, Any]) -> Board:
        """Create Board from a stored document."""
        return cls.model_validate({**data, "id": doc_id})


class BoardDraft(BaseModel):
    """Caller-supplied fields for a new board."""

    name: str = Field(..., min_length=1)
    description: str | None = None
    columns: list[Column] = Field(default_factory=list)
    members: list[Member] = Field(default_factory=list)
    labels: list[str] = Field(default_factory=list)
    automations: list[Automation] = Field(default_factory=list)


class BoardSnapshot(BaseModel):
    """One pushed state of a business's boards.

    Snapshots replace each other; they are never mutated. When the
    transport reports an error, ``error`` is set and ``boards`` still holds
    the last good state.
    """

    model_config = {"frozen": True}

    boards: tuple[Board, ...] = ()
    error: str | None = None

    @property
    def ok(self) -> bool:
        """Whether this snapshot reflects a successful push."""
        return self.error is None

    def get(self, board_id: str) -> Board | None:
        """Find a board in the snapshot."""
        for board in self.boards:
            if board.id == board_id:
                return board
        return None


class BoardUpdate(BaseModel):
    """Partial board fields. Only fields that were explicitly set are written."""

    model_config = {"extra": "forbid"}

    name: str | None = Field(default=None, min_length=1)
    description: str | None = None
    columns: list[Column] | None = None
    members: list[Member] | None = None
    labels: list[str] | None = None
    automations: list[Automation] | None = None

    @field_validator("name", "columns", "members", "labels", "automations")
    @classmethod
    def not_null(cls, v: Any) -> Any:
        """Only description may be cleared."""
        if v is None:
            raise ValueError("Field cannot be null")
        return v

    def to_fields(self) -> dict[str, Any]:
        """Dump the set fields as document values."""
        return self.model_dump(
            mode="json",
            exclude_unset=True,
            exclude={"columns": {"__all__": {"tasks"}}},
        )
