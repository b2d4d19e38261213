"""Service for managing a board's automation rules."""

from __future__ import annotations

import logging

from ..models import Automation, AutomationDraft, Board, BoardUpdate
from ..utils import now_utc
from .automation_engine import check_draft
from .board_store import BoardStore

logger = logging.getLogger(__name__)


class AutomationService:
    """Create, toggle and delete the automations stored on a board."""

    def __init__(self, store: BoardStore) -> None:
        self.store = store

    def create(self, board: Board, draft: AutomationDraft) -> Automation:
        """
        Validate a draft and append it to the board's rules.

        Raises:
            AutomationValidationError: The draft is malformed; nothing is written.
        """
        check_draft(draft, board)

        now = now_utc()
        automation = Automation(
            name=draft.name.strip(),
            enabled=draft.enabled,
            trigger=draft.trigger,
            actions=list(draft.actions),
            created_at=now,
            updated_at=now,
        )
        self._save(board, [*board.automations, automation])
        logger.info(
            "Automation created: %s (%s) on board %s", automation.id, automation.name, board.id
        )
        return automation

    def toggle(self, board: Board, automation_id: str, enabled: bool) -> None:
        """Enable or disable a rule."""
        automations = [
            a.model_copy(update={"enabled": enabled, "updated_at": now_utc()})
            if a.id == automation_id
            else a
            for a in board.automations
        ]
        self._save(board, automations)
        logger.info("Automation %s %s", automation_id, "enabled" if enabled else "disabled")

    def delete(self, board: Board, automation_id: str) -> None:
        """Remove a rule from the board."""
        self._save(board, [a for a in board.automations if a.id != automation_id])
        logger.info("Automation deleted: %s", automation_id)

    def _save(self, board: Board, automations: list[Automation]) -> None:
        self.store.update_board(board.id, BoardUpdate(automations=automations))
