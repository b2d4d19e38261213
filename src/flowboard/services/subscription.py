"""Live board snapshots fed by document store listeners."""

from __future__ import annotations

import contextlib
import logging
import queue
import threading
from collections.abc import Iterator
from typing import Any

from pydantic import ValidationError

from ..models import Board, BoardSnapshot, Task
from ..repositories import BOARDS, TASKS, Document, DocumentStoreProtocol
from ..repositories.protocol import Unsubscribe

logger = logging.getLogger(__name__)

DEFAULT_MAX_PENDING = 64


class BoardSubscription:
    """
    Caller-owned handle on the live boards of one business.

    Between ``start()`` and ``stop()`` every push from the document store is
    turned into a new immutable BoardSnapshot. Iterating the handle yields
    snapshots as they arrive and ends when the subscription is stopped;
    calling ``start()`` again begins a fresh sequence.

    A transport error produces a snapshot with ``error`` set that still
    carries the last good boards. ``latest`` only ever holds good snapshots.

    At most ``max_pending`` snapshots wait to be consumed; when a new one
    arrives on a full queue the oldest pending snapshot is dropped.
    """

    def __init__(
        self,
        documents: DocumentStoreProtocol,
        business_id: str,
        max_pending: int = DEFAULT_MAX_PENDING,
    ) -> None:
        if max_pending < 1:
            raise ValueError("max_pending must be at least 1")
        self._documents = documents
        self.business_id = business_id
        self.max_pending = max_pending
        self._lock = threading.Lock()
        self._queue: queue.Queue[BoardSnapshot | None] = queue.Queue(max_pending)
        self._unsubscribes: list[Unsubscribe] = []
        self._board_docs: list[Document] | None = None
        self._task_docs: list[Document] | None = None
        self._latest = BoardSnapshot()
        self._last_error: str | None = None

    @property
    def running(self) -> bool:
        return bool(self._unsubscribes)

    @property
    def latest(self) -> BoardSnapshot:
        """Most recent good snapshot (empty until the first push)."""
        return self._latest

    @property
    def last_error(self) -> str | None:
        """Error from the most recent push, cleared by the next good one."""
        return self._last_error

    def start(self) -> BoardSubscription:
        """Register listeners. Does nothing if already running."""
        if self.running:
            return self

        self._queue = queue.Queue(self.max_pending)
        self._board_docs = None
        self._task_docs = None
        filters = {"business_id": self.business_id}

        logger.info("Subscribing to boards for business %s", self.business_id)
        self._unsubscribes = [
            self._documents.listen(BOARDS, filters, self._on_boards, self._on_error),
            self._documents.listen(TASKS, filters, self._on_tasks, self._on_error),
        ]
        return self

    def stop(self) -> None:
        """Stop delivery and end any running iteration.

        In-flight writes are not affected.
        """
        if not self.running:
            return
        for unsubscribe in self._unsubscribes:
            unsubscribe()
        self._unsubscribes = []
        with self._lock:
            self._enqueue(None)
        logger.info("Unsubscribed from boards for business %s", self.business_id)

    def __iter__(self) -> Iterator[BoardSnapshot]:
        q = self._queue
        while True:
            snapshot = q.get()
            if snapshot is None:
                return
            yield snapshot

    def get(self, timeout: float | None = None) -> BoardSnapshot | None:
        """Wait for the next snapshot; None on timeout or after stop."""
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def drain(self) -> list[BoardSnapshot]:
        """Return every snapshot queued so far without blocking."""
        snapshots: list[BoardSnapshot] = []
        while True:
            try:
                snapshot = self._queue.get_nowait()
            except queue.Empty:
                return snapshots
            if snapshot is not None:
                snapshots.append(snapshot)

    def __enter__(self) -> BoardSubscription:
        return self.start()

    def __exit__(self, *args: Any) -> None:
        self.stop()

    # --- Listener callbacks ---

    def _on_boards(self, docs: list[Document]) -> None:
        with self._lock:
            self._board_docs = docs
            self._publish()

    def _on_tasks(self, docs: list[Document]) -> None:
        with self._lock:
            self._task_docs = docs
            self._publish()

    def _on_error(self, exc: Exception) -> None:
        logger.error("Board subscription error for business %s: %s", self.business_id, exc)
        with self._lock:
            self._last_error = "Failed to load boards"
            self._enqueue(BoardSnapshot(boards=self._latest.boards, error=self._last_error))

    def _enqueue(self, item: BoardSnapshot | None) -> None:
        while True:
            try:
                self._queue.put_nowait(item)
                return
            except queue.Full:
                with contextlib.suppress(queue.Empty):
                    self._queue.get_nowait()
                logger.debug("Snapshot queue full, dropped oldest pending snapshot")

    def _publish(self) -> None:
        # Wait until both collections have reported once
        if self._board_docs is None or self._task_docs is None:
            return

        tasks = _parse_all(Task, self._task_docs)
        boards = tuple(board.with_tasks(tasks) for board in _parse_all(Board, self._board_docs))

        snapshot = BoardSnapshot(boards=boards)
        self._latest = snapshot
        self._last_error = None
        self._enqueue(snapshot)
        logger.debug("Snapshot: %d board(s), %d task(s)", len(boards), len(tasks))


def _parse_all(model: type[Board] | type[Task], docs: list[Document]) -> list[Any]:
    parsed = []
    for doc in docs:
        try:
            parsed.append(model.from_document(doc.id, doc.data))
        except ValidationError as e:
            # Skip documents that can't be parsed
            logger.warning("Skipping malformed %s %s: %s", model.__name__, doc.id, e)
    return parsed
