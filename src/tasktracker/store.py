from __future__ import annotations

import contextlib
import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .errors import CorruptStoreError, StoreIOError
from .models import Task, TaskStatus

logger = logging.getLogger(__name__)

DEFAULT_TASKS_FILE = "tasks.json"

_FIELDS = ("id", "description", "status", "created_at", "updated_at")


def _parse_timestamp(value: Any, field: str, index: int) -> datetime:
    if not isinstance(value, str):
        raise CorruptStoreError(f"Record {index}: '{field}' must be a date-time string")
    try:
        dt = datetime.fromisoformat(value)
    except ValueError as e:
        raise CorruptStoreError(f"Record {index}: '{field}' is not a valid date-time: {value}") from e
    # naive values are read as UTC so they compare with fresh timestamps
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def task_from_record(record: Any, index: int) -> Task:
    if not isinstance(record, dict):
        raise CorruptStoreError(f"Record {index} is not an object")

    missing = [f for f in _FIELDS if f not in record]
    if missing:
        raise CorruptStoreError(f"Record {index} is missing: {', '.join(missing)}")

    task_id = record["id"]
    if isinstance(task_id, bool) or not isinstance(task_id, int) or task_id <= 0:
        raise CorruptStoreError(f"Record {index}: 'id' must be a positive integer")

    description = record["description"]
    if not isinstance(description, str) or not description.strip():
        raise CorruptStoreError(f"Record {index}: 'description' must be a non-empty string")

    raw_status = record["status"]
    try:
        status = TaskStatus(raw_status)
    except ValueError:
        raise CorruptStoreError(f"Record {index}: unknown status {raw_status!r}") from None

    created_at = _parse_timestamp(record["created_at"], "created_at", index)
    updated_at = _parse_timestamp(record["updated_at"], "updated_at", index)
    if updated_at < created_at:
        raise CorruptStoreError(f"Record {index}: 'updated_at' is earlier than 'created_at'")

    return Task(
        id=task_id,
        description=description,
        status=status,
        created_at=created_at,
        updated_at=updated_at,
        created_at_text=record["created_at"],
        updated_at_text=record["updated_at"],
    )


class TaskStore:
    """JSON file store for the task collection.

    The whole collection is read by ``load()`` and written back by ``save()``.
    Writes go to a sibling ``.tmp`` file that is then moved over the target,
    so an interrupted save leaves the previous contents in place.
    """

    def __init__(self, path: str | Path = DEFAULT_TASKS_FILE) -> None:
        self.path = Path(path)

    def load(self) -> list[Task]:
        if not self.path.exists():
            logger.debug("No store at %s, starting empty", self.path)
            return []

        try:
            raw = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise StoreIOError(f"failed to read tasks file {self.path}: {e}") from e

        if not raw.strip():
            return []

        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as e:
            raise CorruptStoreError(f"failed to parse tasks file {self.path}: {e}") from e

        if not isinstance(payload, list):
            raise CorruptStoreError(f"tasks file {self.path} must contain a JSON array")

        tasks = [task_from_record(rec, i) for i, rec in enumerate(payload)]

        seen: set[int] = set()
        for t in tasks:
            if t.id in seen:
                raise CorruptStoreError(f"duplicate task ID {t.id} in {self.path}")
            seen.add(t.id)

        logger.debug("Loaded %d tasks from %s", len(tasks), self.path)
        return tasks

    def save(self, tasks: list[Task]) -> None:
        data = json.dumps([t.to_record() for t in tasks], ensure_ascii=False, indent=2)
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(data + "\n", encoding="utf-8")
            os.replace(tmp, self.path)
        except OSError as e:
            with contextlib.suppress(OSError):
                tmp.unlink(missing_ok=True)
            raise StoreIOError(f"failed to write tasks file {self.path}: {e}") from e

        logger.debug("Saved %d tasks to %s", len(tasks), self.path)
