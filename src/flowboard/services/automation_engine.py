"""Automation rule evaluation and draft validation.

Evaluation is a pure function of (board, task, trigger kind): it picks the
first enabled rule whose trigger and conditions match and turns that rule's
actions into a dict of task field updates. It never writes anything; the
caller applies the result through BoardStore.update_task.
"""

from __future__ import annotations

import logging
import operator
from collections.abc import Callable
from typing import Any

from ..models import (
    PRIORITY_VALUES,
    STATUS_VALUES,
    Action,
    AddLabelAction,
    AssignToAction,
    Automation,
    AutomationDraft,
    Board,
    Condition,
    ConditionOperator,
    MoveTaskAction,
    RemoveLabelAction,
    SetPriorityAction,
    SetStatusAction,
    StatusChangedTrigger,
    Task,
    TriggerKind,
)
from .errors import AutomationValidationError

logger = logging.getLogger(__name__)


def evaluate(board: Board, task: Task, trigger: TriggerKind | str) -> dict[str, Any] | None:
    """
    Compute the field updates the board's automations make for this event.

    Only the first applicable rule is used. If that rule's actions all
    fail to resolve, the result is None; later rules are not consulted.

    Returns:
        A dict of task field updates, or None when nothing applies.
    """
    trigger = TriggerKind(trigger)
    applicable = find_applicable(board, task, trigger)
    if not applicable:
        return None

    automation = applicable[0]
    logger.info("Executing automation: %s (%s)", automation.name, automation.id)
    try:
        updates = apply_actions(board, task, automation)
    except Exception as e:
        logger.error("Failed to execute automation %s: %s", automation.id, e)
        return None

    if updates is None:
        logger.debug("Automation %s produced no updates", automation.id)
    else:
        logger.info("Automation completed: %s -> %s", automation.name, sorted(updates))
    return updates


def find_applicable(board: Board, task: Task, trigger: TriggerKind) -> list[Automation]:
    """Enabled rules for this trigger whose filter and conditions hold, in stored order."""
    applicable: list[Automation] = []
    for automation in board.automations:
        if not automation.enabled or automation.trigger.type != trigger.value:
            continue

        rule_trigger = automation.trigger
        if (
            isinstance(rule_trigger, StatusChangedTrigger)
            and rule_trigger.status_filter
            and task.status.value != rule_trigger.status_filter
        ):
            continue

        if check_conditions(task, rule_trigger.conditions):
            applicable.append(automation)
    return applicable


def check_conditions(task: Task, conditions: list[Condition]) -> bool:
    """True when every condition holds (vacuously true for none)."""
    if not conditions:
        return True
    values = task.model_dump(mode="json")
    return all(_check_condition(values.get(c.field), c) for c in conditions)


_ORDERED: dict[ConditionOperator, Callable[[Any, Any], bool]] = {
    ConditionOperator.LESS_THAN: operator.lt,
    ConditionOperator.GREATER_THAN: operator.gt,
}


def _check_condition(task_value: Any, condition: Condition) -> bool:
    op = condition.operator
    if op == ConditionOperator.EQUALS:
        return task_value == condition.value
    if op == ConditionOperator.NOT_EQUALS:
        return task_value != condition.value
    if op == ConditionOperator.CONTAINS:
        if isinstance(task_value, list):
            return condition.value in task_value
        if task_value is None:
            return False
        return str(condition.value) in str(task_value)

    # Ordered comparison; anything that can't be ordered is a non-match
    if task_value is None or condition.value is None or isinstance(task_value, (list, dict)):
        return False
    try:
        return bool(_ORDERED[op](task_value, condition.value))
    except TypeError:
        return False


def apply_actions(board: Board, task: Task, automation: Automation) -> dict[str, Any] | None:
    """
    Accumulate a rule's actions into one updates dict.

    Actions whose reference no longer resolves on the board, or whose value
    is not a valid status/priority, are skipped.
    """
    updates: dict[str, Any] = {}
    labels = list(task.labels)

    for action in automation.actions:
        if isinstance(action, MoveTaskAction):
            if board.get_column(action.column_id) is not None:
                updates["column_id"] = action.column_id
        elif isinstance(action, SetStatusAction):
            if action.status in STATUS_VALUES:
                updates["status"] = action.status
        elif isinstance(action, SetPriorityAction):
            if action.priority in PRIORITY_VALUES:
                updates["priority"] = action.priority
        elif isinstance(action, AssignToAction):
            if board.get_member(action.member_id) is not None:
                updates["assignee"] = action.member_id
        elif isinstance(action, AddLabelAction):
            if action.label not in labels:
                labels = [*labels, action.label]
                updates["labels"] = labels
        elif isinstance(action, RemoveLabelAction):
            if action.label in labels:
                labels = [label for label in labels if label != action.label]
                updates["labels"] = labels

    return updates or None


def check_draft(draft: AutomationDraft, board: Board) -> None:
    """
    Validate an automation before it is created.

    Stricter than execution: an action that would be skipped at run time
    is an error here.

    Raises:
        AutomationValidationError: With a message describing the problem.
    """
    if not draft.name.strip():
        raise AutomationValidationError("Automation name is required")
    if draft.trigger is None:
        raise AutomationValidationError("Trigger type is required")
    if not draft.actions:
        raise AutomationValidationError("At least one action is required")

    for action in draft.actions:
        _check_action(action, board)


def _check_action(action: Action, board: Board) -> None:
    if isinstance(action, MoveTaskAction):
        if board.get_column(action.column_id) is None:
            raise AutomationValidationError("Invalid column selected for move action")
    elif isinstance(action, SetStatusAction):
        if action.status not in STATUS_VALUES:
            raise AutomationValidationError("Invalid status selected")
    elif isinstance(action, SetPriorityAction):
        if action.priority not in PRIORITY_VALUES:
            raise AutomationValidationError("Invalid priority selected")
    elif isinstance(action, AssignToAction):
        if board.get_member(action.member_id) is None:
            raise AutomationValidationError("Invalid assignee selected")
    elif isinstance(action, (AddLabelAction, RemoveLabelAction)):
        if not action.label.strip():
            raise AutomationValidationError("Invalid label value")
    else:
        raise AutomationValidationError("Invalid action type")


def validate_draft(draft: AutomationDraft, board: Board) -> bool:
    """Return whether the draft may be created, logging the reason if not."""
    try:
        check_draft(draft, board)
    except AutomationValidationError as e:
        logger.warning("Automation draft rejected: %s", e)
        return False
    return True
