"""Repository layer for document access."""

from .filesystem import FilesystemDocumentStore
from .memory import InMemoryDocumentStore
from .protocol import (
    BOARDS,
    BUSINESSES,
    TASKS,
    USERS,
    Document,
    DocumentNotFoundError,
    DocumentStoreError,
    DocumentStoreProtocol,
    WriteBatch,
)

__all__ = [
    "BOARDS",
    "BUSINESSES",
    "TASKS",
    "USERS",
    "Document",
    "DocumentNotFoundError",
    "DocumentStoreError",
    "DocumentStoreProtocol",
    "FilesystemDocumentStore",
    "InMemoryDocumentStore",
    "WriteBatch",
]
