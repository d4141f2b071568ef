"""CLI parser construction."""

from __future__ import annotations

import argparse

from tpgit.commands.common import add_common_config_flags, add_repo_flags, add_targetprocess_flags


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Comment on TargetProcess entities referenced by git commits")
    parser.add_argument("--log-level", default="INFO", help="Logging level (DEBUG, INFO, WARNING, ERROR)")

    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", aliases=["process"], help="Comment on tickets for every commit not yet processed")
    add_repo_flags(run)
    add_targetprocess_flags(run)
    run.add_argument(
        "--backend",
        choices=["localfile", "redis", "inmemory", "none"],
        help="Where processed commit hashes are recorded",
    )
    run.add_argument("--backend-file", help="Processed-hash file for the localfile backend")
    run.add_argument("--redis-url", help="Redis URL for the redis backend")
    run.add_argument("--lease-ttl-seconds", type=int, help="Lease expiry for the redis backend")
    run.add_argument(
        "--dry-run",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Log the comments that would be posted instead of posting them (default: on)",
    )
    run.add_argument("--hash", help="Only process the commit with this hash")
    run.add_argument("--max-comments", type=int, help="Stop commenting once this many comments were posted (0 = no cap)")
    run.add_argument("--commit-url-prefix", help="Prefix joined with the commit hash in comments, e.g. https://github.com/a-h/ver/commit/")
    run.add_argument("--json", action="store_true", help="Emit machine-readable JSON run report")
    add_common_config_flags(run)

    log = sub.add_parser("log", aliases=["show-log"], help="Show decoded commits and the ticket ids they reference")
    add_repo_flags(log)
    log.add_argument("--json", action="store_true", help="Emit machine-readable JSON")
    add_common_config_flags(log)

    comment = sub.add_parser("comment", aliases=["post-comment"], help="Post a single comment to a TargetProcess entity")
    add_targetprocess_flags(comment)
    comment.add_argument("--entity", type=int, required=True, help="Entity id to add the comment to")
    comment.add_argument("--message", help="Comment text (default: a timestamped test message)")
    add_common_config_flags(comment)

    return parser
