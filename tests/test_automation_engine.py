"""Tests for automation evaluation and draft validation."""

import pytest

from flowboard.models import (
    AddLabelAction,
    AssignToAction,
    Automation,
    AutomationDraft,
    Board,
    ChecklistCompletedTrigger,
    Column,
    Condition,
    ConditionOperator,
    Member,
    MoveTaskAction,
    RemoveLabelAction,
    SetPriorityAction,
    SetStatusAction,
    StatusChangedTrigger,
    Task,
    TaskCreatedTrigger,
    TaskStatus,
    TriggerKind,
)
from flowboard.services import AutomationValidationError, check_draft, evaluate, validate_draft
from flowboard.services.automation_engine import check_conditions, find_applicable


def make_board(*automations: Automation) -> Board:
    return Board(
        id="b1",
        name="Sprint",
        business_id="biz",
        columns=[
            Column(id="todo", title="To Do"),
            Column(id="doing", title="In Progress"),
            Column(id="done", title="Done"),
        ],
        members=[Member(id="m1", name="Ada")],
        automations=list(automations),
    )


def make_task(**kwargs) -> Task:
    data = {
        "id": "t1",
        "title": "Write docs",
        "column_id": "todo",
        "board_id": "b1",
        "business_id": "biz",
    }
    data.update(kwargs)
    return Task(**data)


def done_rule(**kwargs) -> Automation:
    kwargs.setdefault("name", "Completed to Done")
    return Automation(
        trigger=StatusChangedTrigger(status_filter="completed"),
        actions=[MoveTaskAction(column_id="done")],
        **kwargs,
    )


class TestEvaluate:
    """Tests for evaluate()."""

    def test_status_filter_match_moves_task(self):
        """Completing a task with a completed->Done rule moves it to Done."""
        board = make_board(done_rule())
        task = make_task(status=TaskStatus.COMPLETED)
        assert evaluate(board, task, TriggerKind.STATUS_CHANGED) == {"column_id": "done"}

    def test_completed_rule_adds_done_label(self):
        """A completed task labelled urgent gains the done label."""
        rule = Automation(
            name="Label done",
            trigger=StatusChangedTrigger(status_filter="completed"),
            actions=[AddLabelAction(label="done")],
        )
        task = make_task(status=TaskStatus.COMPLETED, labels=["urgent"])
        updates = evaluate(make_board(rule), task, TriggerKind.STATUS_CHANGED)
        assert updates == {"labels": ["urgent", "done"]}

        blocked = make_task(status=TaskStatus.BLOCKED, labels=["urgent"])
        assert evaluate(make_board(rule), blocked, TriggerKind.STATUS_CHANGED) is None

    def test_status_filter_mismatch(self):
        board = make_board(done_rule())
        task = make_task(status=TaskStatus.BLOCKED)
        assert evaluate(board, task, TriggerKind.STATUS_CHANGED) is None

    def test_no_automations(self):
        assert evaluate(make_board(), make_task(), "taskCreated") is None

    def test_trigger_kind_must_match(self):
        board = make_board(done_rule())
        task = make_task(status=TaskStatus.COMPLETED)
        assert evaluate(board, task, TriggerKind.TASK_MOVED) is None

    def test_disabled_rule_ignored(self):
        board = make_board(done_rule(enabled=False))
        task = make_task(status=TaskStatus.COMPLETED)
        assert evaluate(board, task, TriggerKind.STATUS_CHANGED) is None

    def test_dangling_column_yields_none(self):
        """A move to a deleted column is skipped, leaving no updates."""
        rule = Automation(
            name="Move",
            trigger=TaskCreatedTrigger(),
            actions=[MoveTaskAction(column_id="archived")],
        )
        assert evaluate(make_board(rule), make_task(), TriggerKind.TASK_CREATED) is None

    def test_first_applicable_rule_wins(self):
        """Only the first matching rule runs, even when it yields nothing."""
        first = Automation(
            name="Dangling",
            trigger=TaskCreatedTrigger(),
            actions=[MoveTaskAction(column_id="archived")],
        )
        second = Automation(
            name="Label",
            trigger=TaskCreatedTrigger(),
            actions=[AddLabelAction(label="new")],
        )
        board = make_board(first, second)
        assert evaluate(board, make_task(), TriggerKind.TASK_CREATED) is None

        board = make_board(second, first)
        assert evaluate(board, make_task(), TriggerKind.TASK_CREATED) == {"labels": ["new"]}

    def test_later_rule_used_when_earlier_conditions_fail(self):
        first = Automation(
            name="High only",
            trigger=TaskCreatedTrigger(
                conditions=[Condition(field="priority", operator="equals", value="high")]
            ),
            actions=[SetStatusAction(status="in_progress")],
        )
        second = Automation(
            name="Everyone",
            trigger=TaskCreatedTrigger(),
            actions=[SetPriorityAction(priority="low")],
        )
        board = make_board(first, second)
        assert evaluate(board, make_task(), TriggerKind.TASK_CREATED) == {"priority": "low"}

    def test_actions_accumulate(self):
        rule = Automation(
            name="Triage",
            trigger=TaskCreatedTrigger(),
            actions=[
                SetStatusAction(status="in_progress"),
                SetPriorityAction(priority="high"),
                AssignToAction(member_id="m1"),
                MoveTaskAction(column_id="doing"),
            ],
        )
        updates = evaluate(make_board(rule), make_task(), TriggerKind.TASK_CREATED)
        assert updates == {
            "status": "in_progress",
            "priority": "high",
            "assignee": "m1",
            "column_id": "doing",
        }

    def test_label_actions_chain(self):
        """Label actions see the labels produced by earlier actions."""
        rule = Automation(
            name="Labels",
            trigger=TaskCreatedTrigger(),
            actions=[
                AddLabelAction(label="triaged"),
                AddLabelAction(label="triaged"),
                RemoveLabelAction(label="inbox"),
            ],
        )
        task = make_task(labels=["inbox", "bug"])
        updates = evaluate(make_board(rule), task, TriggerKind.TASK_CREATED)
        assert updates == {"labels": ["bug", "triaged"]}

    def test_invalid_values_skipped(self):
        """Unknown status, priority or member leave those fields alone."""
        rule = Automation(
            name="Stale",
            trigger=TaskCreatedTrigger(),
            actions=[
                SetStatusAction(status="archived"),
                SetPriorityAction(priority="urgent"),
                AssignToAction(member_id="gone"),
                AddLabelAction(label="ok"),
            ],
        )
        assert evaluate(make_board(rule), make_task(), "taskCreated") == {"labels": ["ok"]}

    def test_unknown_trigger_kind_raises(self):
        with pytest.raises(ValueError):
            evaluate(make_board(), make_task(), "taskDeleted")

    def test_checklist_trigger(self):
        rule = Automation(
            name="Checklist",
            trigger=ChecklistCompletedTrigger(),
            actions=[SetStatusAction(status="completed")],
        )
        updates = evaluate(make_board(rule), make_task(), TriggerKind.CHECKLIST_COMPLETED)
        assert updates == {"status": "completed"}

    def test_find_applicable_keeps_stored_order(self):
        first = done_rule(name="one")
        second = done_rule(name="two")
        board = make_board(first, second)
        task = make_task(status=TaskStatus.COMPLETED)
        assert find_applicable(board, task, TriggerKind.STATUS_CHANGED) == [first, second]


class TestConditions:
    """Tests for condition operators."""

    @pytest.mark.parametrize(
        "field, operator, value, expected",
        [
            ("priority", ConditionOperator.EQUALS, "medium", True),
            ("priority", ConditionOperator.EQUALS, "high", False),
            ("priority", ConditionOperator.NOT_EQUALS, "high", True),
            ("title", ConditionOperator.CONTAINS, "docs", True),
            ("title", ConditionOperator.CONTAINS, "code", False),
            ("labels", ConditionOperator.CONTAINS, "bug", True),
            ("labels", ConditionOperator.CONTAINS, "feature", False),
            ("position", ConditionOperator.LESS_THAN, 5, True),
            ("position", ConditionOperator.GREATER_THAN, 5, False),
            ("assignee", ConditionOperator.EQUALS, None, True),
            ("assignee", ConditionOperator.CONTAINS, "m1", False),
            ("assignee", ConditionOperator.LESS_THAN, 5, False),
            ("labels", ConditionOperator.GREATER_THAN, 1, False),
            ("title", ConditionOperator.LESS_THAN, 3, False),
            ("missing_field", ConditionOperator.EQUALS, None, True),
        ],
    )
    def test_operator(self, field, operator, value, expected):
        task = make_task(labels=["bug"], position=2)
        condition = Condition(field=field, operator=operator, value=value)
        assert check_conditions(task, [condition]) is expected

    def test_all_conditions_must_hold(self):
        task = make_task(priority="high", labels=["bug"])
        conditions = [
            Condition(field="priority", operator="equals", value="high"),
            Condition(field="labels", operator="contains", value="feature"),
        ]
        assert check_conditions(task, conditions) is False

    def test_no_conditions_is_true(self):
        assert check_conditions(make_task(), []) is True


class TestValidateDraft:
    """Tests for automation draft validation."""

    def test_valid_draft(self):
        draft = AutomationDraft(
            name="Completed to Done",
            trigger=StatusChangedTrigger(status_filter="completed"),
            actions=[MoveTaskAction(column_id="done")],
        )
        assert validate_draft(draft, make_board()) is True

    def test_invalid_status_rejected(self):
        """setStatus to 'archived' is not a status; 'blocked' is."""
        board = make_board()
        archived = AutomationDraft(
            name="Archive",
            trigger=TaskCreatedTrigger(),
            actions=[SetStatusAction(status="archived")],
        )
        blocked = archived.model_copy(update={"actions": [SetStatusAction(status="blocked")]})

        assert validate_draft(archived, board) is False
        assert validate_draft(blocked, board) is True

    @pytest.mark.parametrize(
        "draft, message",
        [
            (AutomationDraft(name=" ", trigger=TaskCreatedTrigger()), "name is required"),
            (AutomationDraft(name="x"), "Trigger type is required"),
            (AutomationDraft(name="x", trigger=TaskCreatedTrigger()), "At least one action"),
            (
                AutomationDraft(
                    name="x",
                    trigger=TaskCreatedTrigger(),
                    actions=[MoveTaskAction(column_id="archived")],
                ),
                "Invalid column",
            ),
            (
                AutomationDraft(
                    name="x",
                    trigger=TaskCreatedTrigger(),
                    actions=[SetPriorityAction(priority="urgent")],
                ),
                "Invalid priority",
            ),
            (
                AutomationDraft(
                    name="x",
                    trigger=TaskCreatedTrigger(),
                    actions=[AssignToAction(member_id="nobody")],
                ),
                "Invalid assignee",
            ),
            (
                AutomationDraft(
                    name="x",
                    trigger=TaskCreatedTrigger(),
                    actions=[AddLabelAction(label="  ")],
                ),
                "Invalid label",
            ),
        ],
    )
    def test_check_draft_messages(self, draft, message):
        with pytest.raises(AutomationValidationError, match=message):
            check_draft(draft, make_board())
        assert validate_draft(draft, make_board()) is False
