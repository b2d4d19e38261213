"""Task actions that run automations and notifications after each write."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime, timedelta
from typing import Any

from ..models import Board, Task, TaskDraft, TaskStatus, TaskUpdate, TriggerKind
from ..notifications import NotificationService, NotificationType
from ..utils import now_utc
from .automation_engine import evaluate
from .board_store import BoardStore
from .errors import ContextError
from .task_service import TaskService

logger = logging.getLogger(__name__)


class BoardWorkflow:
    """
    Caller-side loop for one board.

    Each action writes through the store, rereads the task, picks the
    trigger that describes the change and asks the automation engine for
    follow-up updates. Those updates are written once and do not trigger
    automations again.
    """

    def __init__(
        self,
        store: BoardStore,
        board_id: str,
        notifications: NotificationService | None = None,
    ) -> None:
        self.store = store
        self.board_id = board_id
        self._notifications = notifications
        self.tasks = TaskService(store, updater=self.update_task)

    def create_task(self, draft: TaskDraft) -> str:
        """Create a task on this board and run taskCreated automations."""
        if draft.board_id is None:
            draft = draft.model_copy(update={"board_id": self.board_id})
        task_id = self.store.add_task(draft)
        self.run_automations(task_id, TriggerKind.TASK_CREATED)
        return task_id

    def move_task(self, task_id: str, column_id: str) -> Task | None:
        """Move a task to another column of this board."""
        board = self._require_board()
        if board.get_column(column_id) is None:
            raise ContextError("Column not found")
        return self.update_task(task_id, TaskUpdate(column_id=column_id))

    def set_status(self, task_id: str, status: TaskStatus | str) -> Task | None:
        """Change a task's status."""
        return self.update_task(task_id, TaskUpdate(status=TaskStatus(status)))

    def update_task(self, task_id: str, updates: TaskUpdate | Mapping[str, Any]) -> Task | None:
        """
        Write an update, then react to it.

        Returns:
            The task as stored after any automation updates.
        """
        if not isinstance(updates, TaskUpdate):
            updates = TaskUpdate.model_validate(updates)

        before = self._require_task(task_id)
        self.store.update_task(task_id, updates)
        after = self._require_task(task_id)

        status_changed = "status" in updates.model_fields_set and after.status != before.status
        moved = after.column_id != before.column_id
        checklist_done = (
            "checklist" in updates.model_fields_set
            and after.checklist_complete
            and not before.checklist_complete
        )

        if status_changed:
            self._notify(after, NotificationType.STATUS_CHANGE)
        if checklist_done:
            self._notify(after, NotificationType.CHECKLIST_COMPLETED)

        if status_changed:
            trigger = TriggerKind.STATUS_CHANGED
        elif moved:
            trigger = TriggerKind.TASK_MOVED
        elif checklist_done:
            trigger = TriggerKind.CHECKLIST_COMPLETED
        else:
            trigger = TriggerKind.TASK_UPDATED

        if self.run_automations(task_id, trigger, task=after) is None:
            return after
        return self.store.get_task(task_id)

    def check_due_dates(self, within: timedelta, now: datetime | None = None) -> list[str]:
        """
        Run dueDateApproaching automations for open tasks due soon.

        Returns:
            Ids of tasks that automations updated.
        """
        now = now or now_utc()
        board = self._require_board()
        updated: list[str] = []
        for task in board.all_tasks:
            if task.status == TaskStatus.COMPLETED or task.due_date is None:
                continue
            if now <= task.due_date <= now + within:
                if self.run_automations(
                    task.id, TriggerKind.DUE_DATE_APPROACHING, task=task, board=board
                ):
                    updated.append(task.id)
        return updated

    def run_automations(
        self,
        task_id: str,
        trigger: TriggerKind,
        task: Task | None = None,
        board: Board | None = None,
    ) -> dict[str, Any] | None:
        """Evaluate the board's rules for one event and write the result."""
        board = board or self._require_board()
        task = task or self._require_task(task_id)

        updates = evaluate(board, task, trigger)
        if updates is None:
            return None

        logger.info("Applying automation updates to task %s: %s", task_id, sorted(updates))
        self.store.update_task(task_id, updates)
        return updates

    # --- Private Methods ---

    def _require_board(self) -> Board:
        board = self.store.get_board(self.board_id)
        if board is None:
            raise ContextError("Invalid business or board")
        return board

    def _require_task(self, task_id: str) -> Task:
        task = self.store.get_task(task_id)
        if task is None:
            raise ContextError("Task not found")
        return task

    def _notify(self, task: Task, notification_type: NotificationType) -> None:
        if self._notifications is not None:
            self._notifications.notify_change(task, notification_type)
