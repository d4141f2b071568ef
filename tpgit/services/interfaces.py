"""Service interfaces used by command/runtime orchestration."""

from __future__ import annotations

from typing import Protocol

from tpgit.config import StorageConfig, TargetProcessConfig
from tpgit.connectors.base import Commenter
from tpgit.models import Commit
from tpgit.storage.base import ProcessedStore


class Repository(Protocol):
    def log(self) -> list[Commit]: ...

    def cleanup(self) -> None: ...


class RepositoryFactory(Protocol):
    def __call__(self, location: str, *, branch: str = "master", git_bin: str = "git") -> Repository: ...


class StoreFactory(Protocol):
    def __call__(self, config: StorageConfig) -> ProcessedStore: ...


class CommenterFactory(Protocol):
    def __call__(self, config: TargetProcessConfig) -> Commenter: ...
