"""Service for task details: comments, checklist, attachments and time."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import PurePosixPath
from urllib.parse import urlparse

from ..models import (
    MIN_TIME_ENTRY_SECONDS,
    Attachment,
    AttachmentType,
    ChecklistItem,
    Comment,
    CommentAuthor,
    Task,
    TaskUpdate,
    TimeEntry,
)
from ..utils import now_utc
from .board_store import BoardStore
from .errors import ContextError

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".webp", ".svg", ".bmp"}
DOCUMENT_EXTENSIONS = {
    ".pdf",
    ".doc",
    ".docx",
    ".xls",
    ".xlsx",
    ".ppt",
    ".pptx",
    ".txt",
    ".csv",
    ".md",
}

TaskUpdater = Callable[[str, TaskUpdate], object]


def infer_attachment_type(url: str) -> AttachmentType:
    """Guess the attachment kind from the URL's file extension."""
    suffix = PurePosixPath(urlparse(url).path).suffix.lower()
    if suffix in IMAGE_EXTENSIONS:
        return AttachmentType.IMAGE
    if suffix in DOCUMENT_EXTENSIONS:
        return AttachmentType.DOCUMENT
    return AttachmentType.LINK


class TaskService:
    """
    Edits to the lists embedded in a task.

    Each method reads the current task, rewrites one list and hands the
    result to ``updater`` (``BoardStore.update_task`` by default, or a
    BoardWorkflow so that automations and notifications run).
    """

    def __init__(self, store: BoardStore, updater: TaskUpdater | None = None) -> None:
        self.store = store
        self._update = updater or store.update_task

    # --- Comments ---

    def add_comment(self, task_id: str, content: str, author: CommentAuthor) -> Comment:
        """Append a comment."""
        task = self._require_task(task_id)
        now = now_utc()
        comment = Comment(
            content=_require_text(content, "Comment"),
            author=author,
            created_at=now,
            updated_at=now,
        )
        self._update(task_id, TaskUpdate(comments=[*task.comments, comment]))
        logger.debug("Comment added to task %s by %s", task_id, author.id)
        return comment

    def edit_comment(self, task_id: str, comment_id: str, content: str) -> None:
        """Replace a comment's text."""
        task = self._require_task(task_id)
        content = _require_text(content, "Comment")
        comments = [
            c.model_copy(update={"content": content, "updated_at": now_utc()})
            if c.id == comment_id
            else c
            for c in task.comments
        ]
        self._update(task_id, TaskUpdate(comments=comments))

    def delete_comment(self, task_id: str, comment_id: str) -> None:
        """Remove a comment."""
        task = self._require_task(task_id)
        comments = [c for c in task.comments if c.id != comment_id]
        self._update(task_id, TaskUpdate(comments=comments))

    # --- Checklist ---

    def add_checklist_item(self, task_id: str, content: str) -> ChecklistItem:
        """Append an unchecked checklist item."""
        task = self._require_task(task_id)
        item = ChecklistItem(content=_require_text(content, "Checklist item"))
        self._update(task_id, TaskUpdate(checklist=[*task.checklist, item]))
        return item

    def toggle_checklist_item(self, task_id: str, item_id: str) -> list[ChecklistItem]:
        """Flip one item's completed flag and return the new checklist."""
        task = self._require_task(task_id)
        checklist = [
            item.model_copy(update={"is_completed": not item.is_completed})
            if item.id == item_id
            else item
            for item in task.checklist
        ]
        self._update(task_id, TaskUpdate(checklist=checklist))
        return checklist

    def remove_checklist_item(self, task_id: str, item_id: str) -> None:
        """Remove a checklist item."""
        task = self._require_task(task_id)
        checklist = [item for item in task.checklist if item.id != item_id]
        self._update(task_id, TaskUpdate(checklist=checklist))

    # --- Attachments ---

    def add_attachment(
        self,
        task_id: str,
        name: str,
        url: str,
        attachment_type: AttachmentType | None = None,
    ) -> Attachment:
        """Attach a file or link by reference URL."""
        task = self._require_task(task_id)
        attachment = Attachment(
            name=_require_text(name, "Attachment name"),
            url=_require_text(url, "Attachment URL"),
            type=attachment_type or infer_attachment_type(url),
            created_at=now_utc(),
        )
        self._update(task_id, TaskUpdate(attachments=[*task.attachments, attachment]))
        logger.debug("Attachment added to task %s: %s", task_id, attachment.type.value)
        return attachment

    def remove_attachment(self, task_id: str, attachment_id: str) -> None:
        """Detach an attachment."""
        task = self._require_task(task_id)
        attachments = [a for a in task.attachments if a.id != attachment_id]
        self._update(task_id, TaskUpdate(attachments=attachments))

    # --- Time entries ---

    def add_time_entry(self, task_id: str, entry: TimeEntry) -> bool:
        """
        Record a completed time entry.

        Returns:
            False (and writes nothing) when the entry is shorter than a minute.
        """
        if entry.duration < MIN_TIME_ENTRY_SECONDS:
            logger.debug(
                "Time entry under %ds ignored for task %s", MIN_TIME_ENTRY_SECONDS, task_id
            )
            return False

        task = self._require_task(task_id)
        self._update(task_id, TaskUpdate(time_entries=[*task.time_entries, entry]))
        logger.info("Time entry recorded for task %s: %ds", task_id, entry.duration)
        return True

    def _require_task(self, task_id: str) -> Task:
        task = self.store.get_task(task_id)
        if task is None:
            raise ContextError("Task not found")
        return task


def _require_text(value: str, what: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError(f"{what} cannot be empty")
    return value
