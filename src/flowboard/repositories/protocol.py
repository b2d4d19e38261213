"""Document store protocol for board and task persistence."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

# Collection names
BUSINESSES = "businesses"
USERS = "users"
BOARDS = "boards"
TASKS = "tasks"


class DocumentStoreError(Exception):
    """Base exception for document store failures."""

    pass


class DocumentNotFoundError(DocumentStoreError):
    """An update targeted a document that does not exist."""

    pass


@dataclass
class Document:
    """A stored document and its key."""

    id: str
    data: dict[str, Any] = field(default_factory=dict)


ChangeCallback = Callable[[list[Document]], None]
ErrorCallback = Callable[[Exception], None]
Unsubscribe = Callable[[], None]


class WriteBatch(Protocol):
    """Multi-document write that is applied all at once or not at all."""

    def set(self, collection: str, doc_id: str, data: Mapping[str, Any]) -> None: ...

    def update(self, collection: str, doc_id: str, data: Mapping[str, Any]) -> None: ...

    def delete(self, collection: str, doc_id: str) -> None: ...

    def commit(self) -> None:
        """Apply every staged write atomically.

        Raises:
            DocumentStoreError: Nothing was applied.
        """
        ...


class DocumentStoreProtocol(Protocol):
    """Interface for the hosted document database.

    Collections hold JSON-compatible documents keyed by generated ids and
    can be queried by field equality. Listeners receive the full set of
    matching documents every time one of them changes.
    """

    def get(self, collection: str, doc_id: str) -> Document | None:
        """Read a single document, or None if it doesn't exist."""
        ...

    def query(self, collection: str, **filters: Any) -> list[Document]:
        """Return documents whose fields equal every filter value."""
        ...

    def add(self, collection: str, data: Mapping[str, Any]) -> str:
        """Create a document with a generated id and return the id."""
        ...

    def set(self, collection: str, doc_id: str, data: Mapping[str, Any]) -> None:
        """Create or replace a document."""
        ...

    def update(self, collection: str, doc_id: str, data: Mapping[str, Any]) -> None:
        """Merge top-level fields into an existing document.

        Raises:
            DocumentNotFoundError: The document does not exist.
        """
        ...

    def delete(self, collection: str, doc_id: str) -> None:
        """Delete a document. Missing documents are ignored."""
        ...

    def batch(self) -> WriteBatch:
        """Start an atomic multi-document write."""
        ...

    def listen(
        self,
        collection: str,
        filters: Mapping[str, Any],
        on_change: ChangeCallback,
        on_error: ErrorCallback,
    ) -> Unsubscribe:
        """Register for pushes of the matching documents.

        The current result set is delivered immediately, then again after
        every write that touches the collection.
        """
        ...
