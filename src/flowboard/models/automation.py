"""Automation rule models.

Triggers and actions are discriminated unions keyed by ``type``: each kind
carries only the fields it needs. The discriminator values match the
stored tags (``"statusChanged"``, ``"moveTask"``, ...).
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field

from ..utils import new_id


class TriggerKind(str, Enum):
    """Events an automation can react to."""

    TASK_MOVED = "taskMoved"
    TASK_CREATED = "taskCreated"
    STATUS_CHANGED = "statusChanged"
    TASK_UPDATED = "taskUpdated"
    DUE_DATE_APPROACHING = "dueDateApproaching"
    CHECKLIST_COMPLETED = "checklistCompleted"


class ConditionOperator(str, Enum):
    """Comparison operators for trigger conditions."""

    EQUALS = "equals"
    NOT_EQUALS = "notEquals"
    CONTAINS = "contains"
    LESS_THAN = "lessThan"
    GREATER_THAN = "greaterThan"


class Condition(BaseModel):
    """A field-level test applied to the task that fired the trigger."""

    field: str = Field(..., min_length=1)
    operator: ConditionOperator
    value: Any = None


# --- Triggers ---


class _TriggerBase(BaseModel):
    conditions: list[Condition] = Field(default_factory=list)


class TaskMovedTrigger(_TriggerBase):
    type: Literal["taskMoved"] = "taskMoved"


class TaskCreatedTrigger(_TriggerBase):
    type: Literal["taskCreated"] = "taskCreated"


class StatusChangedTrigger(_TriggerBase):
    """Fires on status change, optionally only for one target status."""

    type: Literal["statusChanged"] = "statusChanged"
    status_filter: str | None = None


class TaskUpdatedTrigger(_TriggerBase):
    type: Literal["taskUpdated"] = "taskUpdated"


class DueDateApproachingTrigger(_TriggerBase):
    type: Literal["dueDateApproaching"] = "dueDateApproaching"


class ChecklistCompletedTrigger(_TriggerBase):
    type: Literal["checklistCompleted"] = "checklistCompleted"


Trigger = Annotated[
    TaskMovedTrigger
    | TaskCreatedTrigger
    | StatusChangedTrigger
    | TaskUpdatedTrigger
    | DueDateApproachingTrigger
    | ChecklistCompletedTrigger,
    Field(discriminator="type"),
]


# --- Actions ---


class MoveTaskAction(BaseModel):
    type: Literal["moveTask"] = "moveTask"
    column_id: str


class SetStatusAction(BaseModel):
    # Plain string so that stale stored rules still load; checked on use
    type: Literal["setStatus"] = "setStatus"
    status: str


class SetPriorityAction(BaseModel):
    type: Literal["setPriority"] = "setPriority"
    priority: str


class AssignToAction(BaseModel):
    type: Literal["assignTo"] = "assignTo"
    member_id: str


class AddLabelAction(BaseModel):
    type: Literal["addLabel"] = "addLabel"
    label: str


class RemoveLabelAction(BaseModel):
    type: Literal["removeLabel"] = "removeLabel"
    label: str


Action = Annotated[
    MoveTaskAction
    | SetStatusAction
    | SetPriorityAction
    | AssignToAction
    | AddLabelAction
    | RemoveLabelAction,
    Field(discriminator="type"),
]


class Automation(BaseModel):
    """A stored "when trigger (and conditions) then actions" rule."""

    id: str = Field(default_factory=new_id)
    name: str
    enabled: bool = True
    trigger: Trigger
    actions: list[Action] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None


class AutomationDraft(BaseModel):
    """An automation before validation. Anything may be missing."""

    name: str = ""
    enabled: bool = True
    trigger: Trigger | None = None
    actions: list[Action] = Field(default_factory=list)
