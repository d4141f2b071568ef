"""Process command: comment on tickets referenced by unprocessed commits."""

from __future__ import annotations

import argparse
import logging

from tpgit.commands.common import CommandRuntime, load_config
from tpgit.config import default_commit_url_prefix
from tpgit.connectors.base import Commenter, DisabledCommenter
from tpgit.pipeline import CommitProcessor

logger = logging.getLogger(__name__)


def run(args: argparse.Namespace, *, runtime: CommandRuntime) -> int:
    config = load_config(args)

    repository = runtime.repository_factory(config.git.repo, branch=config.git.branch, git_bin=config.git.git_bin)
    try:
        commits = repository.log()
    finally:
        repository.cleanup()

    if args.hash:
        commits = [commit for commit in commits if commit.hash == args.hash]
        if not commits:
            logger.warning("Commit %s not found on branch %s", args.hash, config.git.branch)

    processing = config.processing
    if not processing.commit_url_prefix:
        processing = processing.model_copy(update={"commit_url_prefix": default_commit_url_prefix(config.git.repo)})

    commenter: Commenter
    if processing.dry_run:
        commenter = DisabledCommenter()
    else:
        commenter = runtime.commenter_factory(config.targetprocess)

    store = runtime.store_factory(config.storage)
    logger.info(
        "Processing %s commits repo=%s backend=%s dry_run=%s max_comments=%s",
        len(commits),
        config.git.repo,
        config.storage.backend,
        processing.dry_run,
        processing.max_comments,
    )
    report = CommitProcessor(processing, store, commenter).run(commits)

    if args.json:
        print(report.model_dump_json(indent=2))
    return 0
