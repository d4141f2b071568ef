"""Process-local stores: an in-memory set and a store that remembers nothing."""

from __future__ import annotations


class InMemoryStore:
    """Processed set that lives for the process lifetime; leasing always succeeds."""

    def __init__(self, hashes: set[str] | None = None) -> None:
        self._hashes: set[str] = set(hashes or ())

    def acquire_lease(self) -> str:
        return ""

    def extend_lease(self, token: str) -> bool:
        return True

    def cancel_lease(self) -> None:
        return None

    def is_processed(self, commit_hash: str) -> bool:
        return commit_hash in self._hashes

    def mark_processed(self, commit_hash: str) -> None:
        self._hashes.add(commit_hash)


class NoOpStore:
    """For callers that already guarantee each commit is handled exactly once."""

    def acquire_lease(self) -> str:
        return ""

    def extend_lease(self, token: str) -> bool:
        return True

    def cancel_lease(self) -> None:
        return None

    def is_processed(self, commit_hash: str) -> bool:
        return False

    def mark_processed(self, commit_hash: str) -> None:
        return None
