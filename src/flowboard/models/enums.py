"""Enums for task status, priority and related tags."""

from enum import Enum


class TaskStatus(str, Enum):
    """Valid statuses for a task."""

    TODO = "todo"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    BLOCKED = "blocked"


class Priority(str, Enum):
    """Priority levels for tasks."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class AttachmentType(str, Enum):
    """Kinds of task attachment."""

    IMAGE = "image"
    LINK = "link"
    DOCUMENT = "document"


class MemberRole(str, Enum):
    """Roles a team member can hold within a business."""

    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"


STATUS_VALUES = frozenset(s.value for s in TaskStatus)
PRIORITY_VALUES = frozenset(p.value for p in Priority)
