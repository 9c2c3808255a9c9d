"""Settings loaded from environment variables (+ optional .env).

Variables:
- TASK_CLI_FILE: path of the JSON store (default: tasks.json)
- TASK_CLI_LOG_LEVEL: console log level name (default: WARNING)
- TASK_CLI_LOG_FILE: optional file that receives full debug logs

A .env file found from the current directory upwards is read first;
variables already set in the environment win.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

from .store import DEFAULT_TASKS_FILE

ENV_PREFIX = "TASK_CLI"


def _k(suffix: str) -> str:
    return f"{ENV_PREFIX}_{suffix}"


def _env_path(name: str, default: Path) -> Path:
    return _env_optional_path(name) or default


def _env_optional_path(name: str) -> Path | None:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    return Path(raw).expanduser()


def _env_log_level(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    level = logging.getLevelName(raw.strip().upper())
    return level if isinstance(level, int) else default


@dataclass(frozen=True, slots=True)
class Settings:
    tasks_file: Path
    log_level: int
    log_file: Path | None

    @staticmethod
    def from_env(*, dotenv: bool = True) -> Settings:
        if dotenv:
            load_dotenv(find_dotenv(usecwd=True), override=False)

        return Settings(
            tasks_file=_env_path(_k("FILE"), Path(DEFAULT_TASKS_FILE)),
            log_level=_env_log_level(_k("LOG_LEVEL"), logging.WARNING),
            log_file=_env_optional_path(_k("LOG_FILE")),
        )
