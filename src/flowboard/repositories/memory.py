"""In-process document store."""

from __future__ import annotations

import copy
import logging
import threading
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from ..utils import new_id
from .protocol import (
    ChangeCallback,
    Document,
    DocumentNotFoundError,
    DocumentStoreError,
    ErrorCallback,
    Unsubscribe,
)

logger = logging.getLogger(__name__)

Collections = dict[str, dict[str, dict[str, Any]]]


@dataclass
class _Write:
    op: str  # "set", "update" or "delete"
    collection: str
    doc_id: str
    data: dict[str, Any] | None = None


@dataclass
class _Listener:
    collection: str
    filters: dict[str, Any]
    on_change: ChangeCallback
    on_error: ErrorCallback
    active: bool = True


def _matches(data: Mapping[str, Any], filters: Mapping[str, Any]) -> bool:
    return all(data.get(key) == value for key, value in filters.items())


class InMemoryBatch:
    """Write batch staged against an InMemoryDocumentStore."""

    def __init__(self, store: InMemoryDocumentStore) -> None:
        self._store = store
        self._writes: list[_Write] = []
        self._committed = False

    def set(self, collection: str, doc_id: str, data: Mapping[str, Any]) -> None:
        self._writes.append(_Write("set", collection, doc_id, dict(data)))

    def update(self, collection: str, doc_id: str, data: Mapping[str, Any]) -> None:
        self._writes.append(_Write("update", collection, doc_id, dict(data)))

    def delete(self, collection: str, doc_id: str) -> None:
        self._writes.append(_Write("delete", collection, doc_id))

    def __len__(self) -> int:
        return len(self._writes)

    def commit(self) -> None:
        if self._committed:
            raise DocumentStoreError("Batch already committed")
        self._committed = True
        self._store._apply(self._writes)


class InMemoryDocumentStore:
    """
    Dict-backed document store with synchronous change delivery.

    Every write, single or batched, goes through one code path: the writes
    are applied to a copy of the data, the copy is persisted (a no-op here,
    overridden by subclasses) and only then swapped in. A failure at any
    step leaves the visible state untouched.
    """

    def __init__(self, initial: Collections | None = None) -> None:
        self._data: Collections = copy.deepcopy(initial) if initial else {}
        self._lock = threading.RLock()
        self._listeners: list[_Listener] = []

    # --- Reads ---

    def get(self, collection: str, doc_id: str) -> Document | None:
        with self._lock:
            data = self._data.get(collection, {}).get(doc_id)
            if data is None:
                return None
            return Document(doc_id, copy.deepcopy(data))

    def query(self, collection: str, **filters: Any) -> list[Document]:
        with self._lock:
            return self._select(collection, filters)

    # --- Writes ---

    def add(self, collection: str, data: Mapping[str, Any]) -> str:
        doc_id = new_id()
        self._apply([_Write("set", collection, doc_id, dict(data))])
        return doc_id

    def set(self, collection: str, doc_id: str, data: Mapping[str, Any]) -> None:
        self._apply([_Write("set", collection, doc_id, dict(data))])

    def update(self, collection: str, doc_id: str, data: Mapping[str, Any]) -> None:
        self._apply([_Write("update", collection, doc_id, dict(data))])

    def delete(self, collection: str, doc_id: str) -> None:
        self._apply([_Write("delete", collection, doc_id)])

    def batch(self) -> InMemoryBatch:
        return InMemoryBatch(self)

    # --- Subscriptions ---

    def listen(
        self,
        collection: str,
        filters: Mapping[str, Any],
        on_change: ChangeCallback,
        on_error: ErrorCallback,
    ) -> Unsubscribe:
        listener = _Listener(collection, dict(filters), on_change, on_error)
        with self._lock:
            self._listeners.append(listener)
            initial = self._select(collection, listener.filters)
        logger.debug("Listener registered: %s %s", collection, listener.filters)
        self._deliver(listener, initial)

        def unsubscribe() -> None:
            listener.active = False
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)
            logger.debug("Listener removed: %s %s", collection, listener.filters)

        return unsubscribe

    # --- Private Methods ---

    def _select(self, collection: str, filters: Mapping[str, Any]) -> list[Document]:
        return [
            Document(doc_id, copy.deepcopy(data))
            for doc_id, data in self._data.get(collection, {}).items()
            if _matches(data, filters)
        ]

    def _apply(self, writes: list[_Write]) -> None:
        if not writes:
            return

        with self._lock:
            staged = copy.deepcopy(self._data)
            for write in writes:
                docs = staged.setdefault(write.collection, {})
                if write.op == "set":
                    docs[write.doc_id] = copy.deepcopy(write.data or {})
                elif write.op == "update":
                    if write.doc_id not in docs:
                        raise DocumentNotFoundError(
                            f"No document to update: {write.collection}/{write.doc_id}"
                        )
                    docs[write.doc_id].update(copy.deepcopy(write.data or {}))
                elif write.op == "delete":
                    docs.pop(write.doc_id, None)

            self._persist(staged)
            self._data = staged

            touched = {write.collection for write in writes}
            pending = [
                (listener, self._select(listener.collection, listener.filters))
                for listener in self._listeners
                if listener.collection in touched
            ]

        logger.debug("Applied %d write(s) to %s", len(writes), sorted(touched))
        for listener, docs in pending:
            self._deliver(listener, docs)

    def _persist(self, data: Collections) -> None:
        """Hook for durable subclasses. Raise DocumentStoreError to abort."""

    def _deliver(self, listener: _Listener, docs: list[Document]) -> None:
        if not listener.active:
            return
        try:
            listener.on_change(docs)
        except Exception as e:
            logger.error("Listener on %s failed: %s", listener.collection, e)
            listener.on_error(e)
