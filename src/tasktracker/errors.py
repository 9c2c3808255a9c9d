from __future__ import annotations


class TaskError(RuntimeError):
    pass


class ValidationError(TaskError):
    pass


class NotFoundError(TaskError):
    def __init__(self, task_id: int) -> None:
        super().__init__(f"task with ID {task_id} not found")
        self.task_id = task_id


class StoreError(TaskError):
    pass


class StoreIOError(StoreError):
    pass


class CorruptStoreError(StoreError):
    pass


class ConfigError(TaskError):
    pass
