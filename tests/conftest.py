import subprocess
from pathlib import Path

import pytest


def git(repo: Path, *args: str) -> None:
    subprocess.run(
        ["git", "-C", str(repo), "-c", "user.name=Dev", "-c", "user.email=dev@example.com", *args],
        check=True,
        capture_output=True,
    )


@pytest.fixture
def git_repo(tmp_path: Path) -> Path:
    repo = tmp_path / "repo"
    repo.mkdir()
    git(repo, "init")
    git(repo, "symbolic-ref", "HEAD", "refs/heads/master")
    git(repo, "commit", "--allow-empty", "-m", "TP-1 first commit")
    git(repo, "commit", "--allow-empty", "-m", "Second commit\n\nRefs TP-2, with | pipes, and commas")
    return repo
