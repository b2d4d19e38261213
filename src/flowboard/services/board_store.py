"""Authoritative board and task store for one business."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Any

from pydantic import ValidationError

from ..models import (
    Board,
    BoardDraft,
    BoardUpdate,
    Column,
    Task,
    TaskDraft,
    TaskStatus,
    TaskUpdate,
)
from ..repositories import BOARDS, TASKS, DocumentStoreError, DocumentStoreProtocol
from ..utils import now_utc, to_iso, to_utc_instant
from .errors import ContextError, RemoteWriteError, StoreError
from .subscription import DEFAULT_MAX_PENDING, BoardSubscription

logger = logging.getLogger(__name__)


class BoardStore:
    """
    Boards and tasks of the signed-in business.

    Mutations are written straight to the document store; the in-memory
    view is only ever rebuilt from what the store pushes back to a
    BoardSubscription. Nothing is applied locally ahead of the store, so a
    failed write needs no rollback.

    Every mutation raises ContextError when no business is resolved and
    RemoteWriteError when the document store fails. Nothing is retried.
    """

    def __init__(self, documents: DocumentStoreProtocol, business_id: str | None) -> None:
        self.documents = documents
        self.business_id = business_id

    # --- Subscriptions ---

    def subscribe(self, max_pending: int = DEFAULT_MAX_PENDING) -> BoardSubscription:
        """Create a subscription handle; call ``start()`` to begin delivery."""
        return BoardSubscription(self.documents, self._require_business(), max_pending)

    # --- Reads ---

    def get_board(self, board_id: str) -> Board | None:
        """Load one board with its tasks joined into columns."""
        business_id = self._require_business()
        with self._remote("Failed to load board"):
            doc = self.documents.get(BOARDS, board_id)
            if doc is None or doc.data.get("business_id") != business_id:
                return None
            board = Board.from_document(doc.id, doc.data)
            return board.with_tasks(self.list_tasks(board_id))

    def list_boards(self) -> list[Board]:
        """Load every board of the business with tasks joined."""
        business_id = self._require_business()
        with self._remote("Failed to load boards"):
            tasks = [
                Task.from_document(doc.id, doc.data)
                for doc in self.documents.query(TASKS, business_id=business_id)
            ]
            return [
                Board.from_document(doc.id, doc.data).with_tasks(tasks)
                for doc in self.documents.query(BOARDS, business_id=business_id)
            ]

    def get_task(self, task_id: str) -> Task | None:
        """Load one task by id."""
        business_id = self._require_business()
        with self._remote("Failed to load task"):
            doc = self.documents.get(TASKS, task_id)
            if doc is None or doc.data.get("business_id") != business_id:
                return None
            return Task.from_document(doc.id, doc.data)

    def list_tasks(self, board_id: str) -> list[Task]:
        """Load the tasks of one board, unsorted."""
        business_id = self._require_business()
        with self._remote("Failed to load tasks"):
            docs = self.documents.query(TASKS, business_id=business_id, board_id=board_id)
            return [Task.from_document(doc.id, doc.data) for doc in docs]

    # --- Boards ---

    def add_board(self, draft: BoardDraft) -> str:
        """Create a board and return its id."""
        business_id = self._require_business()
        now = now_utc()
        board = Board(
            id="",
            business_id=business_id,
            created_at=now,
            updated_at=now,
            **draft.model_dump(),
        )

        with self._remote("Failed to create board"):
            board_id = self.documents.add(BOARDS, board.to_document())

        logger.info("Board created: %s (%s)", board_id, board.name)
        return board_id

    def update_board(self, board_id: str, updates: BoardUpdate | Mapping[str, Any]) -> None:
        """Merge the given fields into a board; omitted fields are untouched."""
        self._require_board(board_id)
        if not isinstance(updates, BoardUpdate):
            updates = BoardUpdate.model_validate(updates)

        data = updates.to_fields()
        data["updated_at"] = to_iso(now_utc())

        with self._remote("Failed to update board"):
            self.documents.update(BOARDS, board_id, data)
        logger.debug("Board updated: %s (%s)", board_id, ", ".join(sorted(data)))

    def delete_board(self, board_id: str) -> None:
        """Delete a board and every task on it in one atomic write."""
        business_id = self._require_business()
        self._require_board(board_id)

        with self._remote("Failed to delete board"):
            batch = self.documents.batch()
            batch.delete(BOARDS, board_id)
            task_docs = self.documents.query(TASKS, business_id=business_id, board_id=board_id)
            for doc in task_docs:
                batch.delete(TASKS, doc.id)
            batch.commit()

        logger.info("Board deleted: %s (%d task(s))", board_id, len(task_docs))

    # --- Columns ---

    def add_column(self, board_id: str, title: str) -> str:
        """Append a column to a board and return its id."""
        board = self._require_board(board_id)
        column = Column(title=title)
        self.update_board(board_id, BoardUpdate(columns=[*board.columns, column]))
        logger.info("Column added: %s (%s) on board %s", column.id, title, board_id)
        return column.id

    def rename_column(self, board_id: str, column_id: str, title: str) -> None:
        """Change a column's title."""
        board = self._require_board(board_id)
        if board.get_column(column_id) is None:
            raise ContextError("Column not found")

        columns = [
            col.model_copy(update={"title": title}) if col.id == column_id else col
            for col in board.columns
        ]
        self.update_board(board_id, BoardUpdate(columns=columns))

    def delete_column(self, board_id: str, column_id: str) -> None:
        """Remove a column and all tasks assigned to it in one atomic write."""
        business_id = self._require_business()
        board = self._require_board(board_id)

        remaining = BoardUpdate(columns=[col for col in board.columns if col.id != column_id])
        fields = remaining.to_fields()
        fields["updated_at"] = to_iso(now_utc())

        with self._remote("Failed to delete column"):
            task_docs = self.documents.query(
                TASKS, business_id=business_id, board_id=board_id, column_id=column_id
            )
            batch = self.documents.batch()
            for doc in task_docs:
                batch.delete(TASKS, doc.id)
            batch.update(BOARDS, board_id, fields)
            batch.commit()

        logger.info(
            "Column deleted: %s on board %s (%d task(s))", column_id, board_id, len(task_docs)
        )

    # --- Tasks ---

    def add_task(self, draft: TaskDraft) -> str:
        """
        Create a task at the end of its column and return its id.

        The position is one more than the highest position already in the
        column, or 0 for an empty column.
        """
        business_id = self._require_business()
        if not draft.board_id:
            raise ContextError("Invalid business or board")

        board = self._require_board(draft.board_id)
        if board.get_column(draft.column_id) is None:
            raise ContextError("Column not found")

        with self._remote("Failed to create task"):
            siblings = self.documents.query(
                TASKS,
                business_id=business_id,
                board_id=draft.board_id,
                column_id=draft.column_id,
            )
            position = max((doc.data.get("position", 0) for doc in siblings), default=-1) + 1

            now = now_utc()
            task = Task(
                id="",
                title=draft.title,
                description=draft.description,
                status=TaskStatus.TODO,
                priority=draft.priority,
                due_date=to_utc_instant(draft.due_date) if draft.due_date else None,
                column_id=draft.column_id,
                board_id=draft.board_id,
                business_id=business_id,
                position=position,
                assignee=draft.assignee,
                labels=list(draft.labels),
                created_at=now,
                updated_at=now,
            )
            task_id = self.documents.add(TASKS, task.to_document())

        logger.info(
            "Task created: %s in column %s (position=%d)", task_id, draft.column_id, position
        )
        return task_id

    def update_task(self, task_id: str, updates: TaskUpdate | Mapping[str, Any]) -> None:
        """
        Merge the given fields into a task; omitted fields are untouched.

        A ``due_date`` value is stored as a UTC instant. ``due_date=None``
        (or an empty string) clears it.
        """
        self._require_task(task_id)
        if not isinstance(updates, TaskUpdate):
            updates = TaskUpdate.model_validate(updates)

        data = updates.model_dump(mode="json", exclude_unset=True)
        if updates.due_date is not None:
            data["due_date"] = to_iso(to_utc_instant(updates.due_date))
        data["updated_at"] = to_iso(now_utc())

        with self._remote("Failed to update task"):
            self.documents.update(TASKS, task_id, data)
        logger.debug("Task updated: %s (%s)", task_id, ", ".join(sorted(data)))

    def delete_task(self, task_id: str) -> None:
        """Delete a task. Remaining positions are not repacked."""
        self._require_task(task_id)
        with self._remote("Failed to delete task"):
            self.documents.delete(TASKS, task_id)
        logger.info("Task deleted: %s", task_id)

    def reorder_tasks(self, column_id: str, ordered_task_ids: list[str]) -> None:
        """
        Set each listed task's position to its index, atomically.

        Every listed task must belong to this business and sit in the
        column. Tasks not in the list are left alone. If any check or the
        batch fails, no position changes.
        """
        self._require_business()
        if len(set(ordered_task_ids)) != len(ordered_task_ids):
            raise ValueError("Task ids must be unique")
        for task_id in ordered_task_ids:
            task = self._require_task(task_id)
            if task.column_id != column_id:
                logger.error("Task %s is not in column %s", task_id, column_id)
                raise ContextError("Task not in column")

        updated_at = to_iso(now_utc())
        with self._remote("Failed to reorder tasks"):
            batch = self.documents.batch()
            for index, task_id in enumerate(ordered_task_ids):
                batch.update(TASKS, task_id, {"position": index, "updated_at": updated_at})
            batch.commit()

        logger.debug("Column %s reordered: %d task(s)", column_id, len(ordered_task_ids))

    # --- Private Methods ---

    def _require_business(self) -> str:
        if not self.business_id:
            logger.error("Store operation attempted without a business")
            raise ContextError("No business selected")
        return self.business_id

    def _require_board(self, board_id: str) -> Board:
        board = self.get_board(board_id)
        if board is None:
            logger.error("Board not found: %s", board_id)
            raise ContextError("Invalid business or board")
        return board

    def _require_task(self, task_id: str) -> Task:
        task = self.get_task(task_id)
        if task is None:
            logger.error("Task not found: %s", task_id)
            raise ContextError("Task not found")
        return task

    @contextmanager
    def _remote(self, message: str) -> Iterator[None]:
        """Translate document store failures into a RemoteWriteError."""
        try:
            yield
        except DocumentStoreError as e:
            logger.error("%s: %s", message, e)
            raise RemoteWriteError(message) from e
        except ValidationError as e:
            logger.error("%s: malformed document: %s", message, e)
            raise StoreError(message) from e
