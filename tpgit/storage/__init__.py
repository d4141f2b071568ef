"""Processed-commit store implementations."""

from __future__ import annotations

from tpgit.config import StorageConfig
from tpgit.storage.base import LeaseHeldError, ProcessedStore, StoreError
from tpgit.storage.local_file import LocalFileStore
from tpgit.storage.memory import InMemoryStore, NoOpStore
from tpgit.storage.redis_kv import RedisStore


def open_store(config: StorageConfig) -> ProcessedStore:
    if config.backend == "localfile":
        return LocalFileStore(config.file_path)
    if config.backend == "redis":
        return RedisStore.from_url(
            config.redis_url,
            namespace=config.redis_namespace,
            lease_ttl_seconds=config.lease_ttl_seconds,
        )
    if config.backend == "inmemory":
        return InMemoryStore()
    if config.backend == "none":
        return NoOpStore()
    raise ValueError(f"unknown storage backend: {config.backend!r}")


__all__ = [
    "InMemoryStore",
    "LeaseHeldError",
    "LocalFileStore",
    "NoOpStore",
    "ProcessedStore",
    "RedisStore",
    "StoreError",
    "open_store",
]
