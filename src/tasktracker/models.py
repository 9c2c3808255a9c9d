from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any

from .errors import ValidationError


class TaskStatus(StrEnum):
    TODO = "todo"
    IN_PROGRESS = "in-progress"
    DONE = "done"

    @classmethod
    def parse(cls, raw: str) -> TaskStatus:
        try:
            return cls(raw)
        except ValueError:
            allowed = ", ".join(s.value for s in cls)
            raise ValidationError(f"invalid status: {raw} (must be one of {allowed})") from None


@dataclass(slots=True)
class Task:
    id: int
    description: str
    status: TaskStatus
    created_at: datetime
    updated_at: datetime
    # text as read from disk; written back unchanged until the field is refreshed
    created_at_text: str | None = field(default=None, compare=False, repr=False)
    updated_at_text: str | None = field(default=None, compare=False, repr=False)

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "description": self.description,
            "status": self.status.value,
            "created_at": self.created_at_text or self.created_at.isoformat(),
            "updated_at": self.updated_at_text or self.updated_at.isoformat(),
        }
