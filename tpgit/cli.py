"""CLI entrypoint for tpgit runs."""

from __future__ import annotations

import argparse
import json
import logging
from collections.abc import Callable

from tpgit.commands import comment as comment_command
from tpgit.commands import log as log_command
from tpgit.commands import run as run_command
from tpgit.commands.common import normalize_command
from tpgit.commands.parser import build_parser
from tpgit.connectors.targetprocess import TargetProcessError
from tpgit.gitlog import GitCommandError, LogDecodeError
from tpgit.logging_utils import configure_logging, failure_record, log_failure
from tpgit.pipeline import ProcessingError
from tpgit.services.command_runtime import CommandRuntime, default_runtime
from tpgit.storage.base import StoreError

logger = logging.getLogger(__name__)

CommandHandler = Callable[..., int]

COMMANDS: dict[str, CommandHandler] = {
    "run": run_command.run,
    "log": log_command.run,
    "comment": comment_command.run,
}


def _failure_stage(exc: Exception) -> tuple[str, str | None]:
    if isinstance(exc, ProcessingError):
        return exc.stage, exc.commit_hash
    if isinstance(exc, LogDecodeError):
        return "decode", None
    if isinstance(exc, GitCommandError):
        return "git", None
    if isinstance(exc, StoreError):
        return "store", None
    if isinstance(exc, TargetProcessError):
        return "comment", None
    return "config", None


def _dispatch(args: argparse.Namespace, runtime: CommandRuntime) -> int:
    handler = COMMANDS[normalize_command(args.command)]
    try:
        return handler(args, runtime=runtime)
    except (ProcessingError, LogDecodeError, GitCommandError, StoreError, TargetProcessError, ValueError) as exc:
        stage, commit_hash = _failure_stage(exc)
        record = failure_record(stage, exc, commit_hash)
        log_failure(logger, record)
        if getattr(args, "json", False):
            print(json.dumps(record, indent=2))
        return 1


def main(argv: list[str] | None = None, *, runtime: CommandRuntime | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    return _dispatch(args, runtime or default_runtime())


if __name__ == "__main__":
    raise SystemExit(main())
