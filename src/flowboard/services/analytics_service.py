"""Board metrics for the analytics view."""

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime

from ..models import Board, Priority, TaskStatus
from ..utils import now_utc


@dataclass
class ColumnCount:
    """Number of tasks in one column."""

    column_id: str
    title: str
    count: int


@dataclass
class BoardMetrics:
    """Aggregates over every task on a board."""

    total_tasks: int = 0
    completed_tasks: int = 0
    overdue_tasks: int = 0
    priorities: dict[str, int] = field(default_factory=dict)
    tasks_by_column: list[ColumnCount] = field(default_factory=list)
    checklist_completed: int = 0
    checklist_total: int = 0
    tracked_seconds_by_user: dict[str, int] = field(default_factory=dict)

    @property
    def completion_rate(self) -> int:
        """Completed tasks as a whole percentage."""
        if self.total_tasks == 0:
            return 0
        return round(self.completed_tasks / self.total_tasks * 100)

    @property
    def checklist_rate(self) -> int:
        """Completed checklist items as a whole percentage."""
        if self.checklist_total == 0:
            return 0
        return round(self.checklist_completed / self.checklist_total * 100)


class AnalyticsService:
    """Single-pass aggregation over a board joined with its tasks."""

    def compute(self, board: Board, now: datetime | None = None) -> BoardMetrics:
        now = now or now_utc()
        tasks = board.all_tasks

        priorities: Counter[str] = Counter({p.value: 0 for p in Priority})
        tracked: Counter[str] = Counter()
        metrics = BoardMetrics(total_tasks=len(tasks))

        for task in tasks:
            priorities[task.priority.value] += 1
            if task.status == TaskStatus.COMPLETED:
                metrics.completed_tasks += 1
            if task.is_overdue(now):
                metrics.overdue_tasks += 1
            metrics.checklist_total += len(task.checklist)
            metrics.checklist_completed += sum(1 for item in task.checklist if item.is_completed)
            for entry in task.time_entries:
                tracked[entry.user_id] += entry.duration

        metrics.priorities = dict(priorities)
        metrics.tracked_seconds_by_user = dict(tracked)
        metrics.tasks_by_column = [
            ColumnCount(column_id=col.id, title=col.title, count=len(col.tasks))
            for col in board.columns
        ]
        return metrics
