from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from .errors import NotFoundError, ValidationError
from .models import Task, TaskStatus

logger = logging.getLogger(__name__)


class ListOutcome(Enum):
    FOUND = "found"
    NO_TASKS = "no_tasks"
    NO_MATCH = "no_match"


@dataclass(slots=True)
class TaskResult:
    tasks: list[Task]
    task: Task
    message: str


class TaskListing:
    """Lazy view over a collection, optionally restricted to one status.

    Every ``iter()`` walks the underlying collection again in order, so the
    listing can be consumed more than once.
    """

    def __init__(self, tasks: list[Task], status: TaskStatus | None = None) -> None:
        self._tasks = tasks
        self.status = status

    def __iter__(self) -> Iterator[Task]:
        for t in self._tasks:
            if self.status is None or t.status == self.status:
                yield t

    @property
    def outcome(self) -> ListOutcome:
        if not self._tasks:
            return ListOutcome.NO_TASKS
        for _ in self:
            return ListOutcome.FOUND
        return ListOutcome.NO_MATCH


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _clean_description(description: str) -> str:
    text = description.strip()
    if not text:
        raise ValidationError("task description cannot be empty")
    return text


def parse_task_id(raw: str) -> int:
    try:
        task_id = int(raw)
    except (TypeError, ValueError):
        raise ValidationError("invalid task ID: must be a number") from None
    if task_id <= 0:
        raise ValidationError("invalid task ID: must be greater than zero")
    return task_id


def next_task_id(tasks: list[Task]) -> int:
    # gaps left by deletions are kept; only a deleted highest id is handed out again
    return max((t.id for t in tasks), default=0) + 1


def find_task(tasks: list[Task], task_id: int) -> Task:
    for t in tasks:
        if t.id == task_id:
            return t
    raise NotFoundError(task_id)


def _touch(task: Task, now: datetime | None, **changes: Any) -> Task:
    stamp = now or _now()
    if stamp <= task.created_at:
        # updated_at never goes below created_at
        return replace(task, updated_at=task.created_at, updated_at_text=task.created_at_text, **changes)
    return replace(task, updated_at=stamp, updated_at_text=None, **changes)


def _replace_task(tasks: list[Task], updated: Task) -> list[Task]:
    return [updated if t.id == updated.id else t for t in tasks]


def add_task(tasks: list[Task], description: str, *, now: datetime | None = None) -> TaskResult:
    text = _clean_description(description)
    stamp = now or _now()
    task = Task(
        id=next_task_id(tasks),
        description=text,
        status=TaskStatus.TODO,
        created_at=stamp,
        updated_at=stamp,
    )
    logger.info("Added task id=%s", task.id)
    return TaskResult(
        tasks=[*tasks, task],
        task=task,
        message=f"Task added successfully (ID: {task.id})",
    )


def update_task(
    tasks: list[Task], task_id: int, description: str, *, now: datetime | None = None
) -> TaskResult:
    text = _clean_description(description)
    current = find_task(tasks, task_id)
    updated = _touch(current, now, description=text)
    logger.info("Updated task id=%s", task_id)
    return TaskResult(
        tasks=_replace_task(tasks, updated),
        task=updated,
        message=f"Task updated successfully (ID: {task_id}, Description: {text})",
    )


def delete_task(tasks: list[Task], task_id: int) -> TaskResult:
    removed = find_task(tasks, task_id)
    remaining = [t for t in tasks if t.id != task_id]
    logger.info("Deleted task id=%s", task_id)
    return TaskResult(
        tasks=remaining,
        task=removed,
        message=f"Task deleted successfully (ID: {task_id})",
    )


def mark_task(
    tasks: list[Task], task_id: int, status: str, *, now: datetime | None = None
) -> TaskResult:
    new_status = TaskStatus.parse(status)
    current = find_task(tasks, task_id)
    updated = _touch(current, now, status=new_status)
    logger.info("Marked task id=%s status=%s", task_id, new_status)
    return TaskResult(
        tasks=_replace_task(tasks, updated),
        task=updated,
        message=f"Task {task_id} marked as {new_status} successfully",
    )


def list_tasks(tasks: list[Task], status_filter: str | None = "") -> TaskListing:
    status = TaskStatus.parse(status_filter) if status_filter else None
    return TaskListing(tasks, status)
