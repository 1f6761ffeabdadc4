"""
JSON file storage base for local CRM records.

Each store keeps a list of camelCase records in a single JSON file.
Reads and writes are whole-file; there is no locking, so concurrent
writers must be serialized by the caller.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when a store file cannot be read or written."""

    pass


def utc_now_iso() -> str:
    """Current time as an ISO 8601 UTC timestamp with millisecond precision."""
    return (
        datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace(
            "+00:00", "Z"
        )
    )


class JsonStore:
    """
    Whole-file JSON list storage.

    Usage:
        store = JsonStore(Path("/data/members.json"))
        records = store.read_records()
        store.write_records(records)
    """

    def __init__(self, path: Path | str):
        """
        Initialize the store.

        Args:
            path: Path to the JSON file. Parent directories are created on write.
        """
        self.path = Path(path)

    def read_records(self) -> list[dict[str, Any]]:
        """
        Read all records.

        Returns:
            List of record dictionaries, empty if the file does not exist

        Raises:
            StorageError: If the file exists but is not a JSON list
        """
        if not self.path.exists():
            logger.debug(f"Store file not found, treating as empty: {self.path}")
            return []

        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "[]")
        except json.JSONDecodeError as e:
            raise StorageError(f"Corrupt store file {self.path}: {e}") from e
        except OSError as e:
            raise StorageError(f"Failed to read store file {self.path}: {e}") from e

        if not isinstance(data, list):
            raise StorageError(
                f"Store file {self.path} must contain a JSON list, "
                f"got {type(data).__name__}"
            )
        return data

    def write_records(self, records: list[dict[str, Any]]) -> None:
        """
        Replace all records.

        Raises:
            StorageError: If the file cannot be written
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(records, f, indent=2, ensure_ascii=False)
        except OSError as e:
            raise StorageError(f"Failed to write store file {self.path}: {e}") from e

    def __repr__(self) -> str:
        return f"{type(self).__name__}(path={str(self.path)!r})"
