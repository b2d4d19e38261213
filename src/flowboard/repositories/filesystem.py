"""Filesystem-backed document store."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

import yaml

from .memory import Collections, InMemoryDocumentStore
from .protocol import DocumentStoreError

logger = logging.getLogger(__name__)


class FilesystemDocumentStore(InMemoryDocumentStore):
    """
    Document store persisted to a single YAML file.

    The whole store is rewritten on every commit through a temp file and
    os.replace, so a batch either lands on disk completely or not at all.
    Listeners only see writes made through this instance.
    """

    STORE_YAML = "flowboard.yaml"

    def __init__(self, data_dir: Path) -> None:
        """
        Initialize the store.

        Args:
            data_dir: Directory holding flowboard.yaml (created on first write)
        """
        self.data_dir = data_dir
        super().__init__(self._load())

    @property
    def path(self) -> Path:
        return self.data_dir / self.STORE_YAML

    def ensure_directory(self) -> None:
        """Create the data directory if it doesn't exist."""
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def reload(self) -> None:
        """Discard in-memory state and reread the file."""
        data = self._load()
        with self._lock:
            self._data = data

    # --- Private Methods ---

    def _load(self) -> Collections:
        if not self.path.exists():
            return {}
        try:
            with self.path.open() as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise DocumentStoreError(f"Cannot parse {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise DocumentStoreError(f"Unexpected content in {self.path}")
        logger.debug("Loaded %s (%s)", self.path, ", ".join(sorted(data)) or "empty")
        return data

    def _persist(self, data: Collections) -> None:
        try:
            self.ensure_directory()
            fd, tmp_name = tempfile.mkstemp(
                dir=self.data_dir, prefix=".flowboard-", suffix=".yaml"
            )
            try:
                with os.fdopen(fd, "w") as f:
                    f.write("# Auto-generated - do not edit manually\n")
                    yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            logger.error("Failed to write %s: %s", self.path, e)
            raise DocumentStoreError(f"Cannot write {self.path}: {e}") from e
