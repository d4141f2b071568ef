"""Plain-text file store: one processed hash per line plus a lock marker."""

from __future__ import annotations

import logging
import os
import uuid
from pathlib import Path

from tpgit.storage.base import LeaseHeldError, StoreError

logger = logging.getLogger(__name__)

LOCK_SUFFIX = ".lock"


class LocalFileStore:
    """File-backed processed set.

    Marks are held in memory and written out by ``cancel_lease``, so a crash
    mid-run loses that run's marks and the commits are reprocessed next time.
    """

    def __init__(self, file_path: str | Path) -> None:
        self.file_path = Path(file_path)
        self.lock_path = Path(f"{self.file_path}{LOCK_SUFFIX}")
        self._hashes = self._load()

    def _load(self) -> set[str]:
        try:
            text = self.file_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return set()
        except OSError as exc:
            raise StoreError(f"failed to load processed hashes from {self.file_path}: {exc}") from exc
        return {line.strip() for line in text.splitlines() if line.strip()}

    def acquire_lease(self) -> str:
        token = uuid.uuid4().hex
        try:
            self.lock_path.parent.mkdir(parents=True, exist_ok=True)
            fd = os.open(self.lock_path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
        except FileExistsError as exc:
            raise LeaseHeldError(f"lease is held: lock marker {self.lock_path} exists") from exc
        except OSError as exc:
            raise StoreError(f"failed to create lock marker {self.lock_path}: {exc}") from exc
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(token)
        logger.debug("Acquired lease marker=%s", self.lock_path)
        return token

    def extend_lease(self, token: str) -> bool:
        try:
            held = self.lock_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return False
        except OSError as exc:
            raise StoreError(f"failed to read lock marker {self.lock_path}: {exc}") from exc
        return held.strip() == token

    def cancel_lease(self) -> None:
        self._save()
        try:
            self.lock_path.unlink(missing_ok=True)
        except OSError as exc:
            raise StoreError(f"failed to remove lock marker {self.lock_path}: {exc}") from exc
        logger.debug("Released lease marker=%s hashes=%s", self.lock_path, len(self._hashes))

    def _save(self) -> None:
        tmp_path = self.file_path.with_name(f"{self.file_path.name}.tmp")
        try:
            self.file_path.parent.mkdir(parents=True, exist_ok=True)
            with tmp_path.open("w", encoding="utf-8") as handle:
                for commit_hash in sorted(self._hashes):
                    handle.write(commit_hash + "\n")
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_path, self.file_path)
        except OSError as exc:
            raise StoreError(f"failed to write processed hashes to {self.file_path}: {exc}") from exc

    def is_processed(self, commit_hash: str) -> bool:
        return commit_hash in self._hashes

    def mark_processed(self, commit_hash: str) -> None:
        self._hashes.add(commit_hash)
