from __future__ import annotations

import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from tasktracker.store import TaskStore


REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = str(REPO_ROOT / "src")

T0 = datetime(2026, 1, 1, 9, 0, 0, 123456, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def _isolate_task_cli_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for name in list(os.environ):
        if name.startswith("TASK_CLI_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def tasks_path(tmp_path: Path) -> Path:
    return tmp_path / "data" / "tasks.json"


@pytest.fixture
def store(tasks_path: Path) -> TaskStore:
    return TaskStore(tasks_path)


@pytest.fixture
def clock(monkeypatch: pytest.MonkeyPatch) -> list[datetime]:
    """Make tasks._now() return T0, T0+1s, T0+2s, ... and record what was handed out."""
    issued: list[datetime] = []

    def fake_now() -> datetime:
        stamp = T0 + timedelta(seconds=len(issued))
        issued.append(stamp)
        return stamp

    monkeypatch.setattr("tasktracker.tasks._now", fake_now)
    return issued


@pytest.fixture
def cli_cmd() -> list[str]:
    return [sys.executable, "-m", "tasktracker.cli"]


@pytest.fixture
def cli_env(tasks_path: Path) -> dict[str, str]:
    env = {k: v for k, v in os.environ.items() if not k.startswith("TASK_CLI_")}
    existing = env.get("PYTHONPATH")
    env["PYTHONPATH"] = SRC_PATH if not existing else f"{SRC_PATH}:{existing}"
    env["TASK_CLI_FILE"] = str(tasks_path)
    return env
