"""Data models."""

from .account import Business, NotificationSettings, User
from .automation import (
    Action,
    AddLabelAction,
    AssignToAction,
    Automation,
    AutomationDraft,
    ChecklistCompletedTrigger,
    Condition,
    ConditionOperator,
    DueDateApproachingTrigger,
    MoveTaskAction,
    RemoveLabelAction,
    SetPriorityAction,
    SetStatusAction,
    StatusChangedTrigger,
    TaskCreatedTrigger,
    TaskMovedTrigger,
    TaskUpdatedTrigger,
    Trigger,
    TriggerKind,
)
from .board import Board, BoardDraft, BoardSnapshot, BoardUpdate, Column, Member
from .enums import (
    PRIORITY_VALUES,
    STATUS_VALUES,
    AttachmentType,
    MemberRole,
    Priority,
    TaskStatus,
)
from .task import (
    MIN_TIME_ENTRY_SECONDS,
    Attachment,
    ChecklistItem,
    Comment,
    CommentAuthor,
    PriorityFactors,
    Task,
    TaskDraft,
    TaskUpdate,
    TimeEntry,
)

__all__ = [
    "MIN_TIME_ENTRY_SECONDS",
    "PRIORITY_VALUES",
    "STATUS_VALUES",
    "Action",
    "AddLabelAction",
    "AssignToAction",
    "Attachment",
    "AttachmentType",
    "Automation",
    "AutomationDraft",
    "Board",
    "BoardDraft",
    "BoardSnapshot",
    "BoardUpdate",
    "Business",
    "ChecklistCompletedTrigger",
    "ChecklistItem",
    "Column",
    "Comment",
    "CommentAuthor",
    "Condition",
    "ConditionOperator",
    "DueDateApproachingTrigger",
    "Member",
    "MemberRole",
    "MoveTaskAction",
    "NotificationSettings",
    "Priority",
    "PriorityFactors",
    "RemoveLabelAction",
    "SetPriorityAction",
    "SetStatusAction",
    "StatusChangedTrigger",
    "Task",
    "TaskCreatedTrigger",
    "TaskDraft",
    "TaskMovedTrigger",
    "TaskStatus",
    "TaskUpdate",
    "TaskUpdatedTrigger",
    "TimeEntry",
    "Trigger",
    "TriggerKind",
    "User",
]
