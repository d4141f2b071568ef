"""Shared helpers for CLI command modules."""

from __future__ import annotations

import argparse
from typing import Any

from tpgit.config import TpgitConfig, load_effective_config, overrides_from_fields, read_yaml_mapping
from tpgit.services.command_runtime import CommandRuntime

ALIAS_TO_CANONICAL = {
    "process": "run",
    "show-log": "log",
    "post-comment": "comment",
}


def normalize_command(name: str) -> str:
    return ALIAS_TO_CANONICAL.get(name, name)


# (argparse dest, config section, config key)
_FLAG_OVERRIDES = (
    ("repo", "git", "repo"),
    ("branch", "git", "branch"),
    ("git_bin", "git", "git_bin"),
    ("tp_url", "targetprocess", "url"),
    ("tp_username", "targetprocess", "username"),
    ("tp_password", "targetprocess", "password"),
    ("tp_token", "targetprocess", "token"),
    ("backend", "storage", "backend"),
    ("backend_file", "storage", "file_path"),
    ("redis_url", "storage", "redis_url"),
    ("lease_ttl_seconds", "storage", "lease_ttl_seconds"),
    ("commit_url_prefix", "processing", "commit_url_prefix"),
    ("max_comments", "processing", "max_comments"),
    ("dry_run", "processing", "dry_run"),
)


def flag_overrides(args: argparse.Namespace) -> dict[str, Any]:
    return overrides_from_fields((section, key, getattr(args, dest, None)) for dest, section, key in _FLAG_OVERRIDES)


def load_config(args: argparse.Namespace) -> TpgitConfig:
    return load_effective_config(
        repo_path=args.repo_path,
        org_defaults=read_yaml_mapping(args.org_config, required=True),
        system_defaults=read_yaml_mapping(args.system_config, required=True),
        runtime_override=read_yaml_mapping(args.runtime_override, required=True),
        flag_overrides=flag_overrides(args),
    )


def add_common_config_flags(cmd: argparse.ArgumentParser) -> None:
    cmd.add_argument("--repo-path", default=".", help="Directory holding an optional .tpgit.yaml")
    cmd.add_argument("--org-config", help="Optional org defaults YAML")
    cmd.add_argument("--system-config", help="Optional system defaults YAML")
    cmd.add_argument("--runtime-override", help="Optional runtime override YAML")


def add_repo_flags(cmd: argparse.ArgumentParser) -> None:
    cmd.add_argument("--repo", help="Local checkout path or clone URL to read commits from")
    cmd.add_argument("--branch", help="Branch whose first-parent history is walked (default: master)")
    cmd.add_argument("--git-bin", help="Path/name of git binary")


def add_targetprocess_flags(cmd: argparse.ArgumentParser) -> None:
    cmd.add_argument("--tp-url", help="Root address of the TargetProcess account, e.g. https://example.tpondemand.com")
    cmd.add_argument("--tp-username", help="TargetProcess username for basic auth")
    cmd.add_argument("--tp-password", help="TargetProcess password (or set TPGIT_TP_PASSWORD)")
    cmd.add_argument("--tp-token", help="TargetProcess access token (or set TPGIT_TP_TOKEN)")
