"""CLI commands operating on the local document store."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta

from pydantic import ValidationError

from ..config import Settings
from ..models import Board, BoardDraft, Business, Column, TaskDraft, TaskStatus
from ..notifications import NotificationService, WebhookNotifier
from ..repositories import BUSINESSES, DocumentStoreProtocol, FilesystemDocumentStore
from ..services import (
    AnalyticsService,
    BoardStore,
    BoardWorkflow,
    FilterService,
    StoreError,
    format_duration,
)
from .output import detail, error, header, info, success

logger = logging.getLogger(__name__)

DEFAULT_COLUMNS = ("To Do", "In Progress", "Done")


@dataclass
class CliContext:
    """Everything a command needs, built once from settings."""

    settings: Settings
    documents: DocumentStoreProtocol
    store: BoardStore

    @classmethod
    def from_settings(cls, settings: Settings) -> CliContext:
        documents = FilesystemDocumentStore(settings.data_dir)
        return cls(settings, documents, BoardStore(documents, settings.business_id))

    def workflow(self, board_id: str) -> BoardWorkflow:
        """Workflow for a board, with notifications when a webhook is configured."""
        notifications = None
        if self.settings.webhook_url and self.settings.business_id:
            doc = self.documents.get(BUSINESSES, self.settings.business_id)
            business = Business.from_document(doc.id, doc.data) if doc else None
            notifier = WebhookNotifier(self.settings.webhook_url, self.settings.webhook_timeout)
            notifications = NotificationService(business, notifier)
        return BoardWorkflow(self.store, board_id, notifications)


def run_create_board(ctx: CliContext, name: str, columns: list[str] | None = None) -> int:
    """Create a board with the given (or default) columns."""
    titles = columns or list(DEFAULT_COLUMNS)
    try:
        draft = BoardDraft(name=name, columns=[Column(title=title) for title in titles])
        board_id = ctx.store.add_board(draft)
    except (StoreError, ValidationError) as e:
        error(f"Failed to create board: {e}")
        return 1
    success(f"Created board {name} ({board_id})")
    return 0


def run_list_boards(ctx: CliContext) -> int:
    """List every board of the business."""
    try:
        boards = ctx.store.list_boards()
    except StoreError as e:
        error(str(e))
        return 1

    if not boards:
        info("No boards yet. Create one with 'flowboard create-board NAME'")
        return 0

    header(f"Boards ({len(boards)})")
    for board in boards:
        info(f"{board.name} [{board.id}] - {len(board.all_tasks)} task(s)")
    return 0


def run_show_board(ctx: CliContext, board_id: str, expression: str | None = None) -> int:
    """Print a board column by column, optionally filtered."""
    board = _load_board(ctx, board_id)
    if board is None:
        return 1

    filter_service = FilterService()
    task_filter = filter_service.parse(expression or "")

    header(board.name)
    for column in board.columns:
        tasks = filter_service.apply(column.tasks, task_filter)
        info(f"{column.title} [{column.id}] ({len(tasks)})")
        for task in tasks:
            due = f" due {task.due_date:%Y-%m-%d}" if task.due_date else ""
            detail(
                f"{task.position}. {task.title} [{task.id}] "
                f"{task.status.value}/{task.priority.value}{due}"
            )
    return 0


def run_add_task(
    ctx: CliContext,
    board_id: str,
    column_id: str,
    title: str,
    priority: str = "medium",
    due: str | None = None,
) -> int:
    """Add a task to the end of a column."""
    try:
        draft = TaskDraft(
            title=title,
            priority=priority,
            due_date=due,
            column_id=column_id,
            board_id=board_id,
        )
        task_id = ctx.workflow(board_id).create_task(draft)
    except (StoreError, ValidationError) as e:
        error(f"Failed to add task: {e}")
        return 1
    success(f"Added task {title} ({task_id})")
    return 0


def run_move_task(ctx: CliContext, board_id: str, task_id: str, column_id: str) -> int:
    """Move a task to another column."""
    try:
        task = ctx.workflow(board_id).move_task(task_id, column_id)
    except StoreError as e:
        error(f"Failed to move task: {e}")
        return 1
    if task is not None:
        success(f"Moved {task.title} to column {task.column_id}")
    return 0


def run_set_status(ctx: CliContext, board_id: str, task_id: str, status: str) -> int:
    """Change a task's status."""
    try:
        task = ctx.workflow(board_id).set_status(task_id, TaskStatus(status))
    except ValueError:
        error(f"Invalid status: {status}")
        return 1
    except StoreError as e:
        error(f"Failed to update task status: {e}")
        return 1
    if task is not None:
        success(f"{task.title} is now {task.status.value}")
    return 0


def run_analytics(ctx: CliContext, board_id: str) -> int:
    """Print board metrics."""
    board = _load_board(ctx, board_id)
    if board is None:
        return 1

    metrics = AnalyticsService().compute(board)
    header(f"{board.name} analytics")
    info(
        f"Completion: {metrics.completion_rate}% "
        f"({metrics.completed_tasks}/{metrics.total_tasks})"
    )
    info(f"Overdue: {metrics.overdue_tasks}")
    info(
        f"Checklist: {metrics.checklist_completed}/{metrics.checklist_total} "
        f"({metrics.checklist_rate}%)"
    )
    info("Priorities: " + ", ".join(f"{k}={v}" for k, v in metrics.priorities.items()))
    for column in metrics.tasks_by_column:
        detail(f"{column.title}: {column.count}")
    for user_id, seconds in metrics.tracked_seconds_by_user.items():
        detail(f"{user_id}: {format_duration(seconds)} tracked")
    return 0


def run_due_soon(ctx: CliContext, board_id: str) -> int:
    """Run dueDateApproaching automations for tasks due within the window."""
    window = timedelta(hours=ctx.settings.due_soon_hours)
    try:
        updated = ctx.workflow(board_id).check_due_dates(window)
    except StoreError as e:
        error(str(e))
        return 1
    if updated:
        success(f"Automations updated {len(updated)} task(s)")
    else:
        info(f"No automations applied to tasks due within {ctx.settings.due_soon_hours}h")
    return 0


def _load_board(ctx: CliContext, board_id: str) -> Board | None:
    try:
        board = ctx.store.get_board(board_id)
    except StoreError as e:
        error(str(e))
        return None
    if board is None:
        error(f"Board not found: {board_id}")
    return board
