"""Keyed record store with a CSV backend.

The engine only relies on the ``RecordStore`` contract (get_all / add / update /
remove). ``CsvRecordStore`` keeps one CSV file per collection and writes it
atomically; file I/O runs in worker threads so callers can await several reads
concurrently.
"""

import asyncio
import csv
import dataclasses
import logging
import os
import sys
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, Generic, Optional, TypeVar

from freelance_tracker.core.exceptions import PersistenceError, RecordNotFoundError
from freelance_tracker.core.models import Project, Task, TimeEntry
from freelance_tracker.core.query import Query

logger = logging.getLogger(__name__)

T = TypeVar("T")

PROJECT_FIELDS = ["id", "owner_id", "name", "hourly_rate", "status", "description", "created_at"]
TASK_FIELDS = [
    "id",
    "owner_id",
    "project_id",
    "name",
    "estimated_hours",
    "status",
    "due_at",
    "tags",
    "description",
    "created_at",
]
TIME_ENTRY_FIELDS = [
    "id",
    "owner_id",
    "project_id",
    "task_id",
    "hours",
    "start_time",
    "created_at",
]


def _lock_file(file_obj: Any, exclusive: bool = True) -> None:
    """Lock a file in a cross-platform way.

    Args:
        file_obj: File object to lock
        exclusive: If True, acquire exclusive lock; if False, acquire shared lock
    """
    if sys.platform == "win32":
        import msvcrt  # type: ignore[import-not-found]

        mode = msvcrt.LK_NBLCK if exclusive else msvcrt.LK_NBRLCK
        msvcrt.locking(file_obj.fileno(), mode, 1)
    else:
        import fcntl  # type: ignore[import-not-found]

        mode = fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH
        fcntl.flock(file_obj.fileno(), mode)


def _unlock_file(file_obj: Any) -> None:
    """Unlock a file in a cross-platform way."""
    if sys.platform == "win32":
        import msvcrt  # type: ignore[import-not-found]

        msvcrt.locking(file_obj.fileno(), msvcrt.LK_UNLCK, 1)
    else:
        import fcntl  # type: ignore[import-not-found]

        fcntl.flock(file_obj.fileno(), fcntl.LOCK_UN)


class RecordStore(ABC, Generic[T]):
    """Generic keyed-record store for one collection."""

    collection: str = "records"

    @abstractmethod
    async def get_all(self, query: Optional[Query] = None) -> list[T]:
        """Return records matching every condition of the query.

        Raises:
            PersistenceError: If the store cannot be read
        """

    @abstractmethod
    async def add(self, record: T) -> str:
        """Insert a record and return its id.

        Raises:
            PersistenceError: If the store cannot be written
        """

    @abstractmethod
    async def update(self, record_id: str, changes: dict[str, Any]) -> None:
        """Apply field changes to an existing record.

        Raises:
            RecordNotFoundError: If no record has this id
            PersistenceError: If the store cannot be written
        """

    @abstractmethod
    async def remove(self, record_id: str) -> None:
        """Delete a record.

        Raises:
            RecordNotFoundError: If no record has this id
            PersistenceError: If the store cannot be written
        """

    async def get(self, record_id: str) -> Optional[T]:
        """Return the record with this id, or None."""
        records = await self.get_all(Query().where("id", "==", record_id))
        return records[0] if records else None


class CsvRecordStore(RecordStore[T]):
    """Record store backed by a single CSV file with atomic rewrites."""

    def __init__(
        self,
        file_path: Path,
        fieldnames: list[str],
        decode: Callable[[dict[str, Any]], T],
        collection: str,
    ):
        """Initialize the store, creating the CSV file with headers if missing.

        Args:
            file_path: CSV file holding the collection
            fieldnames: CSV header
            decode: Builds a record from a CSV row
            collection: Collection name used in messages
        """
        self.file_path = file_path
        self.fieldnames = fieldnames
        self.decode = decode
        self.collection = collection
        self._write_lock = threading.Lock()

        try:
            self.file_path.parent.mkdir(parents=True, exist_ok=True)
            if not self.file_path.exists():
                self._write_csv_atomic([])
        except OSError as e:
            raise PersistenceError(f"Cannot initialize {collection} store: {e}") from e

    def _write_csv_atomic(self, rows: list[dict[str, Any]]) -> None:
        """Write the CSV file atomically using a temporary file and rename."""
        temp_file = self.file_path.with_suffix(".tmp")

        try:
            with open(temp_file, "w", newline="", encoding="utf-8") as f:
                _lock_file(f, exclusive=True)

                writer = csv.DictWriter(f, fieldnames=self.fieldnames)
                writer.writeheader()
                writer.writerows(rows)

                f.flush()
                os.fsync(f.fileno())

                _unlock_file(f)

            temp_file.replace(self.file_path)

        except Exception:
            if temp_file.exists():
                temp_file.unlink()
            raise

    def _read_rows(self) -> list[dict[str, Any]]:
        """Read raw CSV rows with a shared lock."""
        if not self.file_path.exists():
            return []

        with open(self.file_path, encoding="utf-8") as f:
            _lock_file(f, exclusive=False)
            try:
                rows = list(csv.DictReader(f))
            finally:
                _unlock_file(f)

        return rows

    def _load(self) -> list[T]:
        try:
            rows = self._read_rows()
            return [self.decode(row) for row in rows]
        except (OSError, csv.Error) as e:
            raise PersistenceError(f"Cannot read {self.collection}: {e}") from e
        except (KeyError, ValueError) as e:
            raise PersistenceError(f"Corrupted {self.collection} record: {e}") from e

    def _mutate(self, record_id: str, change: Callable[[T], Optional[T]]) -> None:
        """Replace or drop one record under the write lock.

        Args:
            record_id: Id of the record to change
            change: Returns the new record, or None to delete it
        """
        with self._write_lock:
            records = self._load()
            for i, record in enumerate(records):
                if getattr(record, "id") == record_id:
                    break
            else:
                raise RecordNotFoundError(self.collection, record_id)

            updated = change(records[i])
            if updated is None:
                del records[i]
            else:
                records[i] = updated
            self._save(records)

    def _save(self, records: list[T]) -> None:
        try:
            self._write_csv_atomic([record.to_dict() for record in records])  # type: ignore[attr-defined]
        except OSError as e:
            raise PersistenceError(f"Cannot write {self.collection}: {e}") from e
        logger.debug(f"Wrote {len(records)} {self.collection} record(s) to {self.file_path}")

    def _add_sync(self, record: T) -> str:
        with self._write_lock:
            records = self._load()
            record_id: str = getattr(record, "id")
            if any(getattr(r, "id") == record_id for r in records):
                raise PersistenceError(f"{self.collection} record already exists: {record_id}")
            records.append(record)
            self._save(records)
        return record_id

    def _update_sync(self, record_id: str, changes: dict[str, Any]) -> None:
        if "id" in changes and changes["id"] != record_id:
            raise PersistenceError("Record id cannot be changed")

        def apply(record: T) -> T:
            try:
                return dataclasses.replace(record, **changes)  # type: ignore[type-var]
            except (TypeError, ValueError) as e:
                raise PersistenceError(f"Invalid {self.collection} update: {e}") from e

        self._mutate(record_id, apply)

    async def get_all(self, query: Optional[Query] = None) -> list[T]:
        records = await asyncio.to_thread(self._load)
        return (query or Query()).apply(records)

    async def add(self, record: T) -> str:
        return await asyncio.to_thread(self._add_sync, record)

    async def update(self, record_id: str, changes: dict[str, Any]) -> None:
        await asyncio.to_thread(self._update_sync, record_id, changes)

    async def remove(self, record_id: str) -> None:
        await asyncio.to_thread(self._mutate, record_id, lambda record: None)


class StorageManager:
    """Opens the CSV stores for projects, tasks and time entries."""

    def __init__(self, data_dir: Optional[Path] = None):
        """Initialize storage manager.

        Args:
            data_dir: Custom data directory. Defaults to ~/.freelance-tracker/data
        """
        if data_dir is None:
            data_dir = Path.home() / ".freelance-tracker" / "data"

        self.data_dir = data_dir
        self.projects: RecordStore[Project] = CsvRecordStore(
            data_dir / "projects.csv", PROJECT_FIELDS, Project.from_dict, "projects"
        )
        self.tasks: RecordStore[Task] = CsvRecordStore(
            data_dir / "tasks.csv", TASK_FIELDS, Task.from_dict, "tasks"
        )
        self.time_entries: RecordStore[TimeEntry] = CsvRecordStore(
            data_dir / "time_entries.csv", TIME_ENTRY_FIELDS, TimeEntry.from_dict, "time entries"
        )
