from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Callable, Sequence
from typing import NoReturn

from .config import Settings
from .errors import ConfigError, TaskError, ValidationError
from .logging_setup import setup_logging
from .models import Task, TaskStatus
from .store import TaskStore
from .tasks import (
    ListOutcome,
    TaskResult,
    add_task,
    delete_task,
    list_tasks,
    mark_task,
    parse_task_id,
    update_task,
)

logger = logging.getLogger(__name__)

PROG = "task-cli"

USAGE = f"""\
            Task Tracker CLI
        a simple CLI task tracker
========================================
Usage: {PROG} [--file PATH] <command> [arguments]
========================================
Commands:
  add <description>            Add a new task
  update <id> <description>    Update a task's description
  delete <id>                  Delete a task
  mark-todo <id>               Mark a task as todo
  mark-in-progress <id>        Mark a task as in-progress
  mark-done <id>               Mark a task as done
  list                         List all tasks
  list [filter]                List tasks (filter: todo|in-progress|done)
  help                         Show this help
Options:
  --file PATH                  Tasks file (default: $TASK_CLI_FILE or tasks.json)
========================================"""

MARK_COMMANDS: dict[str, TaskStatus] = {
    "mark-todo": TaskStatus.TODO,
    "mark-in-progress": TaskStatus.IN_PROGRESS,
    "mark-done": TaskStatus.DONE,
}

COMMANDS = {"add", "update", "delete", "list", *MARK_COMMANDS}
HELP_COMMANDS = {"help", "-h", "--help"}


class _Parser(argparse.ArgumentParser):
    """ArgumentParser that reports usage mistakes as ValidationError instead of exiting."""

    def error(self, message: str) -> NoReturn:
        raise ValidationError(message)


def _format_task(t: Task) -> str:
    return f"ID: {t.id} | Description: {t.description} | Status: {t.status}"


def _mutate(store: TaskStore, op: Callable[[list[Task]], TaskResult]) -> int:
    tasks = store.load()
    result = op(tasks)
    store.save(result.tasks)
    print(result.message)
    return 0


def cmd_add(args: argparse.Namespace, store: TaskStore) -> int:
    description = " ".join(args.description)
    return _mutate(store, lambda tasks: add_task(tasks, description))


def cmd_update(args: argparse.Namespace, store: TaskStore) -> int:
    task_id = parse_task_id(args.task_id)
    description = " ".join(args.description)
    return _mutate(store, lambda tasks: update_task(tasks, task_id, description))


def cmd_delete(args: argparse.Namespace, store: TaskStore) -> int:
    task_id = parse_task_id(args.task_id)
    return _mutate(store, lambda tasks: delete_task(tasks, task_id))


def cmd_mark(args: argparse.Namespace, store: TaskStore) -> int:
    task_id = parse_task_id(args.task_id)
    status = MARK_COMMANDS[args.cmd]
    return _mutate(store, lambda tasks: mark_task(tasks, task_id, status))


def cmd_list(args: argparse.Namespace, store: TaskStore) -> int:
    listing = list_tasks(store.load(), args.status)
    outcome = listing.outcome
    if outcome is ListOutcome.NO_TASKS:
        print("No tasks found.")
    elif outcome is ListOutcome.NO_MATCH:
        print(f"No tasks found with status: {listing.status}")
    else:
        for t in listing:
            print(_format_task(t))
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = _Parser(prog=PROG, add_help=False)
    sub = p.add_subparsers(dest="cmd", required=True, parser_class=_Parser)

    a = sub.add_parser("add", add_help=False)
    a.add_argument("description", nargs="+")
    a.set_defaults(func=cmd_add)

    u = sub.add_parser("update", add_help=False)
    u.add_argument("task_id")
    u.add_argument("description", nargs="+")
    u.set_defaults(func=cmd_update)

    d = sub.add_parser("delete", add_help=False)
    d.add_argument("task_id")
    d.set_defaults(func=cmd_delete)

    for name in MARK_COMMANDS:
        m = sub.add_parser(name, add_help=False)
        m.add_argument("task_id")
        m.set_defaults(func=cmd_mark)

    ls = sub.add_parser("list", add_help=False)
    ls.add_argument("status", nargs="?", default="")
    ls.set_defaults(func=cmd_list)

    return p


def _global_parser() -> argparse.ArgumentParser:
    g = _Parser(prog=PROG, add_help=False, allow_abbrev=False)
    g.add_argument("--file")
    return g


def _split_global_options(argv: list[str]) -> tuple[list[str], list[str]]:
    """Split argv into the leading global options and the command with its arguments."""
    i = 0
    while i < len(argv):
        token = argv[i]
        if token == "--file":
            i += 2
        elif token.startswith("--file="):
            i += 1
        else:
            break
    return argv[:i], argv[i:]


def _configure_logging(settings: Settings) -> None:
    try:
        setup_logging(console_level=settings.log_level, log_file=settings.log_file)
    except OSError as e:
        raise ConfigError(f"cannot open log file {settings.log_file}: {e}") from e


def _usage_error(message: str) -> int:
    print(USAGE)
    print(f"error: {message}", file=sys.stderr)
    return 1


def main(argv: Sequence[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)

    try:
        settings = Settings.from_env()
        _configure_logging(settings)

        global_args, rest = _split_global_options(argv)
        opts = _global_parser().parse_args(global_args)
        if not rest:
            return _usage_error("no command provided")

        command = rest[0]
        if command in HELP_COMMANDS:
            print(USAGE)
            return 0
        if command not in COMMANDS:
            return _usage_error(f"invalid command: {command}")

        args = build_parser().parse_args(rest)
        store = TaskStore(opts.file or settings.tasks_file)
        logger.debug("Running %s against %s", args.cmd, store.path)
        return args.func(args, store)
    except TaskError as e:
        logger.debug("Command failed", exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
