"""
Storage backends for persisted result history.

Provides an abstract interface and implementations for storing the raw,
serialized history list. The aggregator owns the record format; stores only
move JSON-compatible lists in and out under a key.
"""
import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_KEY = "test_results"


class HistoryCorruptedError(ValueError):
    """Raised when the stored history payload cannot be read."""


class HistoryStore(ABC):
    """
    Abstract storage interface for result history.

    This interface allows different storage backends to be used, making it
    easy to switch between an in-memory store (tests, previews) and a durable
    file-backed one.
    """

    @abstractmethod
    def get_raw_history(self) -> Optional[Any]:
        """
        Get the stored history payload.

        Returns:
            The stored value (normally a list of record dicts), or None if
            nothing has been stored

        Raises:
            HistoryCorruptedError: If the backing data cannot be read
        """
        pass

    @abstractmethod
    def set_raw_history(self, records: List[Dict[str, Any]]) -> None:
        """
        Replace the stored history payload.

        Args:
            records: Full list of serialized records
        """
        pass

    @abstractmethod
    def clear(self) -> None:
        """Remove the stored history entirely."""
        pass


class InMemoryHistoryStore(HistoryStore):
    """
    In-memory storage backend.

    Keeps values in a dictionary keyed by ``key``. Data is lost when the
    process exits.
    """

    def __init__(self, key: str = DEFAULT_HISTORY_KEY):
        """
        Initialize in-memory storage.

        Args:
            key: Key the history list is stored under
        """
        self.key = key
        self._data: Dict[str, Any] = {}

    def get_raw_history(self) -> Optional[Any]:
        """Get a copy of the stored history, or None if not set."""
        records = self._data.get(self.key)
        return list(records) if records is not None else None

    def set_raw_history(self, records: List[Dict[str, Any]]) -> None:
        """Store a copy of the history list."""
        self._data[self.key] = list(records)

    def clear(self) -> None:
        """Remove the stored history."""
        self._data.pop(self.key, None)


class JsonFileHistoryStore(HistoryStore):
    """
    File-backed storage backend.

    Stores a single JSON document mapping ``key`` to the history list, so
    other keys written by other components survive updates. Writes go to a
    temporary file in the same directory and are moved into place atomically.
    """

    def __init__(self, path: Union[str, Path], key: str = DEFAULT_HISTORY_KEY):
        """
        Initialize file storage.

        Args:
            path: Location of the JSON document (created on first write)
            key: Key the history list is stored under
        """
        self.path = Path(path)
        self.key = key

    def _read_document(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            text = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise HistoryCorruptedError(f"Cannot read history file {self.path}: {e}") from e
        if not text.strip():
            return {}
        try:
            document = json.loads(text)
        except json.JSONDecodeError as e:
            raise HistoryCorruptedError(
                f"History file {self.path} is not valid JSON: {e}"
            ) from e
        if not isinstance(document, dict):
            raise HistoryCorruptedError(
                f"History file {self.path} must contain a JSON object, "
                f"got {type(document).__name__}"
            )
        return document

    def _write_document(self, document: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(document, f, indent=2)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def get_raw_history(self) -> Optional[Any]:
        """Get the stored history, or None if the file or key is absent."""
        return self._read_document().get(self.key)

    def set_raw_history(self, records: List[Dict[str, Any]]) -> None:
        """Replace the history list, preserving other keys in the document."""
        try:
            document = self._read_document()
        except HistoryCorruptedError:
            logger.warning(
                f"Overwriting unreadable history file {self.path}", exc_info=True
            )
            document = {}
        document[self.key] = list(records)
        self._write_document(document)
        logger.debug(f"Wrote {len(records)} history records to {self.path}")

    def clear(self) -> None:
        """Remove the history key; delete the file if nothing else remains."""
        try:
            document = self._read_document()
        except HistoryCorruptedError:
            logger.warning(f"Removing unreadable history file {self.path}")
            self.path.unlink(missing_ok=True)
            return
        document.pop(self.key, None)
        if document:
            self._write_document(document)
        else:
            self.path.unlink(missing_ok=True)
