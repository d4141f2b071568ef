"""Comment command: post one message to a TargetProcess entity."""

from __future__ import annotations

import argparse
import logging
from datetime import UTC, datetime

from tpgit.commands.common import CommandRuntime, load_config

logger = logging.getLogger(__name__)


def run(args: argparse.Namespace, *, runtime: CommandRuntime) -> int:
    config = load_config(args)
    commenter = runtime.commenter_factory(config.targetprocess)
    message = args.message or f"test message {datetime.now(UTC).isoformat()}"
    logger.info("Adding comment to entity %s: %s", args.entity, message)
    commenter.comment(args.entity, message)
    return 0
