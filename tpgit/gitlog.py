"""Git log retrieval and decoding into ordered commit records."""

from __future__ import annotations

import logging
import re
import shutil
import subprocess
import tempfile
from pathlib import Path

from tpgit.models import Commit

logger = logging.getLogger(__name__)

# Commit bodies are free text; these tokens only need to never occur in one.
FIELD_SEPARATOR = ":ec0c7bc17e1ef95b57f47e6ee9f63f54ac187325:"
RECORD_SEPARATOR = ":7e7dd4cbeda4c5f65b46e9d55ac526f63fa9a7c9:\n"

_LOG_FIELDS = ("%H", "%B", "%aN", "%aE", "%ad", "%at")
_TIMESTAMP_RE = re.compile(r"[+-]?[0-9]+")
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


class LogDecodeError(ValueError):
    pass


class GitCommandError(RuntimeError):
    def __init__(self, message: str, *, command: list[str], output: str = "") -> None:
        super().__init__(message)
        self.command = command
        self.output = output


def log_format() -> str:
    return "--pretty=format:" + FIELD_SEPARATOR.join(_LOG_FIELDS) + RECORD_SEPARATOR


def _parse_timestamp(raw: str, record: str) -> int:
    if not _TIMESTAMP_RE.fullmatch(raw):
        raise LogDecodeError(f"failed to parse timestamp value of '{raw}' for record '{record}'")
    if len(raw.lstrip("+-").lstrip("0")) > len(str(_INT64_MAX)):
        raise LogDecodeError(f"timestamp value '{raw}' is out of range for record '{record}'")
    value = int(raw)
    if not _INT64_MIN <= value <= _INT64_MAX:
        raise LogDecodeError(f"timestamp value '{raw}' is out of range for record '{record}'")
    return value


def decode_record(record: str) -> Commit:
    parts = record.split(FIELD_SEPARATOR)
    if len(parts) != len(_LOG_FIELDS):
        raise LogDecodeError(
            f"failed to parse log record '{record}': expected {len(_LOG_FIELDS)} fields, found {len(parts)}"
        )
    commit_hash, body, name, email, _date, raw_timestamp = (part.strip() for part in parts)
    return Commit(
        hash=commit_hash,
        body=body,
        author_name=name,
        author_email=email,
        timestamp=_parse_timestamp(raw_timestamp, record),
    )


def decode_log(output: str) -> list[Commit]:
    """Decode separator-delimited git log output, keeping the log's order.

    Any malformed record fails the whole batch: a format or encoding mismatch
    would corrupt every record after it too.
    """
    commits: list[Commit] = []
    for chunk in output.split(RECORD_SEPARATOR):
        if not chunk.strip():
            continue
        commits.append(decode_record(chunk))
    return commits


class GitRepository:
    """A local checkout that can be queried for its first-parent history."""

    def __init__(self, path: str | Path, *, branch: str = "master", git_bin: str = "git", temporary: bool = False) -> None:
        self.path = Path(path)
        self.branch = branch
        self.git_bin = git_bin
        self.temporary = temporary

    @classmethod
    def open(cls, path: str | Path, *, branch: str = "master", git_bin: str = "git") -> GitRepository:
        repo_path = Path(path)
        if not repo_path.exists():
            raise GitCommandError(f"repository path does not exist: {repo_path}", command=[])
        return cls(repo_path, branch=branch, git_bin=git_bin)

    @classmethod
    def clone(cls, url: str, *, branch: str = "master", git_bin: str = "git") -> GitRepository:
        base = Path(tempfile.mkdtemp(prefix="tpgit_history_"))
        target = base / "repo"
        cmd = [git_bin, "clone", url, str(target)]
        logger.info("Cloning repo=%s into %s", url, target)
        proc = subprocess.run(cmd, text=True, encoding="utf-8", errors="replace", capture_output=True, check=False)
        if proc.returncode != 0:
            shutil.rmtree(base, ignore_errors=True)
            output = (proc.stdout + proc.stderr).strip()
            raise GitCommandError(
                f"failed to clone repo {url} to temp directory {target}: {output}",
                command=cmd,
                output=output,
            )
        return cls(target, branch=branch, git_bin=git_bin, temporary=True)

    @classmethod
    def from_location(cls, location: str, *, branch: str = "master", git_bin: str = "git") -> GitRepository:
        if "://" in location or location.startswith("git@"):
            return cls.clone(location, branch=branch, git_bin=git_bin)
        return cls.open(location, branch=branch, git_bin=git_bin)

    def log(self) -> list[Commit]:
        cmd = [self.git_bin, "--no-pager", "log", "--first-parent", self.branch, "--reverse", log_format()]
        proc = subprocess.run(
            cmd,
            cwd=self.path,
            text=True,
            encoding="utf-8",
            errors="replace",
            capture_output=True,
            check=False,
        )
        if proc.returncode != 0:
            output = proc.stderr.strip()
            raise GitCommandError(
                f"failed to get the log of {self.path} (branch={self.branch}): {output}",
                command=cmd,
                output=output,
            )
        commits = decode_log(proc.stdout)
        logger.info("Decoded %s commits from %s (branch=%s)", len(commits), self.path, self.branch)
        return commits

    def cleanup(self) -> None:
        if self.temporary:
            shutil.rmtree(self.path.parent, ignore_errors=True)
