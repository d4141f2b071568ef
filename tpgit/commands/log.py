"""Log command: show decoded history with extracted ticket ids."""

from __future__ import annotations

import argparse
import json

from tpgit.commands.common import CommandRuntime, load_config
from tpgit.tickets import extract_ticket_ids


def run(args: argparse.Namespace, *, runtime: CommandRuntime) -> int:
    config = load_config(args)
    repository = runtime.repository_factory(config.git.repo, branch=config.git.branch, git_bin=config.git.git_bin)
    try:
        commits = repository.log()
    finally:
        repository.cleanup()

    if args.json:
        payload = [{**commit.model_dump(mode="json"), "ticket_ids": extract_ticket_ids(commit.body)} for commit in commits]
        print(json.dumps(payload, indent=2))
        return 0

    for commit in commits:
        ids = extract_ticket_ids(commit.body)
        subject = commit.body.splitlines()[0] if commit.body else ""
        print(
            "{hash} {date} {email} tickets=[{ids}] {subject}".format(
                hash=commit.hash[:12],
                date=commit.date.strftime("%Y-%m-%d"),
                email=commit.author_email,
                ids=", ".join(str(entity_id) for entity_id in ids),
                subject=subject,
            )
        )
    return 0
