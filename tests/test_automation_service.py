"""Tests for AutomationService."""

import pytest

from flowboard.models import (
    AutomationDraft,
    BoardDraft,
    Column,
    MoveTaskAction,
    StatusChangedTrigger,
)
from flowboard.repositories import InMemoryDocumentStore
from flowboard.services import AutomationService, AutomationValidationError, BoardStore


@pytest.fixture
def store() -> BoardStore:
    return BoardStore(InMemoryDocumentStore(), "biz")


@pytest.fixture
def board_id(store: BoardStore) -> str:
    return store.add_board(
        BoardDraft(
            name="Sprint",
            columns=[Column(id="todo", title="To Do"), Column(id="done", title="Done")],
        )
    )


@pytest.fixture
def service(store: BoardStore) -> AutomationService:
    return AutomationService(store)


def draft(name: str = "Completed to Done", column_id: str = "done") -> AutomationDraft:
    return AutomationDraft(
        name=name,
        trigger=StatusChangedTrigger(status_filter="completed"),
        actions=[MoveTaskAction(column_id=column_id)],
    )


class TestAutomationService:
    """Tests for managing stored rules."""

    def test_create_appends_rule(self, store: BoardStore, service, board_id: str):
        automation = service.create(store.get_board(board_id), draft("  Done  "))

        board = store.get_board(board_id)
        assert [a.id for a in board.automations] == [automation.id]
        stored = board.automations[0]
        assert stored.name == "Done"
        assert stored.trigger.status_filter == "completed"
        assert stored.actions[0].column_id == "done"

    def test_create_keeps_order(self, store: BoardStore, service, board_id: str):
        first = service.create(store.get_board(board_id), draft("one"))
        second = service.create(store.get_board(board_id), draft("two"))
        ids = [a.id for a in store.get_board(board_id).automations]
        assert ids == [first.id, second.id]

    def test_invalid_draft_writes_nothing(self, store: BoardStore, service, board_id: str):
        with pytest.raises(AutomationValidationError, match="Invalid column"):
            service.create(store.get_board(board_id), draft(column_id="archived"))
        assert store.get_board(board_id).automations == []

    def test_toggle(self, store: BoardStore, service, board_id: str):
        automation = service.create(store.get_board(board_id), draft())
        service.toggle(store.get_board(board_id), automation.id, False)
        assert store.get_board(board_id).automations[0].enabled is False

        service.toggle(store.get_board(board_id), automation.id, True)
        assert store.get_board(board_id).automations[0].enabled is True

    def test_delete(self, store: BoardStore, service, board_id: str):
        kept = service.create(store.get_board(board_id), draft("keep"))
        dropped = service.create(store.get_board(board_id), draft("drop"))
        service.delete(store.get_board(board_id), dropped.id)
        assert [a.id for a in store.get_board(board_id).automations] == [kept.id]
