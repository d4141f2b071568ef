"""Processed-commit store interfaces and errors."""

from __future__ import annotations

from typing import Protocol


class StoreError(RuntimeError):
    pass


class LeaseHeldError(StoreError):
    pass


class ProcessedStore(Protocol):
    def acquire_lease(self) -> str: ...

    def extend_lease(self, token: str) -> bool: ...

    def cancel_lease(self) -> None: ...

    def is_processed(self, commit_hash: str) -> bool: ...

    def mark_processed(self, commit_hash: str) -> None: ...
