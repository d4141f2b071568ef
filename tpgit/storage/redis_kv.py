"""Redis-backed store for runs that share processed state across machines."""

from __future__ import annotations

import logging
import uuid
from typing import Any

import redis
from redis.exceptions import RedisError

from tpgit.storage.base import LeaseHeldError, StoreError

logger = logging.getLogger(__name__)


def _as_text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)


class RedisStore:
    """Processed set in a redis set, lease in an expiring key.

    Network failures surface as ``StoreError``; retrying is left to the caller.
    """

    def __init__(self, client: Any, *, namespace: str = "tpgit", lease_ttl_seconds: int = 900) -> None:
        if lease_ttl_seconds <= 0:
            raise ValueError("lease_ttl_seconds must be positive")
        self.client = client
        self.processed_key = f"{namespace}:processed"
        self.lease_key = f"{namespace}:lease"
        self.lease_ttl_seconds = lease_ttl_seconds
        self._token: str | None = None

    @classmethod
    def from_url(cls, url: str, *, namespace: str = "tpgit", lease_ttl_seconds: int = 900) -> RedisStore:
        return cls(redis.Redis.from_url(url), namespace=namespace, lease_ttl_seconds=lease_ttl_seconds)

    def acquire_lease(self) -> str:
        token = uuid.uuid4().hex
        try:
            acquired = self.client.set(self.lease_key, token, nx=True, ex=self.lease_ttl_seconds)
        except RedisError as exc:
            raise StoreError(f"failed to acquire lease key={self.lease_key}: {exc}") from exc
        if not acquired:
            raise LeaseHeldError(f"lease is held: key {self.lease_key} exists")
        self._token = token
        logger.debug("Acquired lease key=%s ttl=%ss", self.lease_key, self.lease_ttl_seconds)
        return token

    def extend_lease(self, token: str) -> bool:
        try:
            current = _as_text(self.client.get(self.lease_key))
            if current != token:
                return False
            return bool(self.client.expire(self.lease_key, self.lease_ttl_seconds))
        except RedisError as exc:
            raise StoreError(f"failed to extend lease key={self.lease_key}: {exc}") from exc

    def cancel_lease(self) -> None:
        if self._token is None:
            return
        try:
            if _as_text(self.client.get(self.lease_key)) == self._token:
                self.client.delete(self.lease_key)
            else:
                logger.warning("Lease key=%s expired or was taken over before release", self.lease_key)
        except RedisError as exc:
            raise StoreError(f"failed to release lease key={self.lease_key}: {exc}") from exc
        self._token = None

    def is_processed(self, commit_hash: str) -> bool:
        try:
            return bool(self.client.sismember(self.processed_key, commit_hash))
        except RedisError as exc:
            raise StoreError(f"failed to look up hash={commit_hash} in key={self.processed_key}: {exc}") from exc

    def mark_processed(self, commit_hash: str) -> None:
        try:
            self.client.sadd(self.processed_key, commit_hash)
        except RedisError as exc:
            raise StoreError(f"failed to mark hash={commit_hash} in key={self.processed_key}: {exc}") from exc
