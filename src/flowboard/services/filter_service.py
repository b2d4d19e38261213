"""Service for parsing and applying filters to tasks."""

import contextlib
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from ..models import Priority, Task, TaskStatus
from ..utils import now_utc

DUE_BUCKETS = ("overdue", "today", "week", "none")
UNASSIGNED = "unassigned"


@dataclass
class Filter:
    """Represents a parsed filter expression."""

    text: str | None = None  # Free text search
    priorities: list[Priority] = field(default_factory=list)  # priority:value
    statuses: list[TaskStatus] = field(default_factory=list)  # status:value
    labels: list[str] = field(default_factory=list)  # label:value
    exclude_labels: list[str] = field(default_factory=list)  # -label:value
    assignee: str | None = None  # assignee:<member id> or assignee:unassigned
    due: str | None = None  # due:overdue/today/week/none

    @property
    def is_empty(self) -> bool:
        return not (
            self.text
            or self.priorities
            or self.statuses
            or self.labels
            or self.exclude_labels
            or self.assignee
            or self.due
        )


class FilterService:
    """Service for parsing and applying filters to tasks."""

    # Pattern for key:value tokens
    TOKEN_PATTERN = re.compile(r"(-?)(?:(label|status|priority|assignee|due):)?(\S+)")

    def parse(self, expression: str) -> Filter:
        """
        Parse a filter expression string.

        Syntax:
        - Free text: matches title, description or labels
        - label:value / -label:value: include or exclude a label
        - status:todo/in_progress/completed/blocked
        - priority:low/medium/high
        - assignee:<member id> or assignee:unassigned
        - due:overdue/today/week/none

        Multiple conditions are ANDed together. Unknown values are ignored.
        """
        f = Filter()
        text_parts: list[str] = []

        for match in self.TOKEN_PATTERN.finditer(expression):
            negated = match.group(1) == "-"
            key = match.group(2)
            raw = match.group(3)
            value = raw.lower()

            if key is None:
                if not negated:
                    text_parts.append(raw)

            elif key == "label":
                if negated:
                    f.exclude_labels.append(value)
                else:
                    f.labels.append(value)

            elif key == "status":
                with contextlib.suppress(ValueError):
                    f.statuses.append(TaskStatus(value))

            elif key == "priority":
                with contextlib.suppress(ValueError):
                    f.priorities.append(Priority(value))

            elif key == "assignee":
                # Member ids are case-sensitive
                f.assignee = UNASSIGNED if value == UNASSIGNED else raw

            elif key == "due" and value in DUE_BUCKETS:
                f.due = value

        if text_parts:
            f.text = " ".join(text_parts)

        return f

    def apply(self, tasks: list[Task], filter_: Filter, now: datetime | None = None) -> list[Task]:
        """Apply filter to a list of tasks."""
        now = now or now_utc()
        return [task for task in tasks if self._matches(task, filter_, now)]

    def _matches(self, task: Task, f: Filter, now: datetime) -> bool:
        """Check if a task matches the filter."""
        task_labels = [label.lower() for label in task.labels]

        # Text search (case-insensitive)
        if f.text:
            search_text = f.text.lower()
            in_title = search_text in task.title.lower()
            in_description = search_text in (task.description or "").lower()
            in_labels = any(search_text in label for label in task_labels)
            if not (in_title or in_description or in_labels):
                return False

        # Label inclusion (any match)
        if f.labels and not any(label in task_labels for label in f.labels):
            return False

        # Label exclusion (no matches)
        if f.exclude_labels and any(label in task_labels for label in f.exclude_labels):
            return False

        if f.statuses and task.status not in f.statuses:
            return False

        if f.priorities and task.priority not in f.priorities:
            return False

        if f.assignee == UNASSIGNED:
            if task.assignee:
                return False
        elif f.assignee and task.assignee != f.assignee:
            return False

        if f.due:
            return _in_due_bucket(task, f.due, now)

        return True


def _in_due_bucket(task: Task, bucket: str, now: datetime) -> bool:
    """Compare by calendar day in UTC."""
    if bucket == "none":
        return task.due_date is None
    if task.due_date is None:
        return False

    today = now.date()
    due = task.due_date.date()
    if bucket == "overdue":
        return due < today
    if bucket == "today":
        return due == today
    # week
    return today <= due <= today + timedelta(days=7)
