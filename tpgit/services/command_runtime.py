"""Typed command runtime dependency container."""

from __future__ import annotations

from dataclasses import dataclass

from tpgit.config import TargetProcessConfig
from tpgit.connectors.targetprocess import TargetProcessClient, password_auth, token_auth
from tpgit.gitlog import GitRepository
from tpgit.services.interfaces import CommenterFactory, RepositoryFactory, StoreFactory
from tpgit.storage import open_store


@dataclass(frozen=True)
class CommandRuntime:
    repository_factory: RepositoryFactory
    store_factory: StoreFactory
    commenter_factory: CommenterFactory


def build_targetprocess_client(config: TargetProcessConfig) -> TargetProcessClient:
    if not config.url:
        raise ValueError("targetprocess.url is required to post comments (--tp-url)")
    token = config.resolved_token()
    if token:
        authenticator = token_auth(token)
    else:
        password = config.resolved_password()
        if not config.username or not password:
            raise ValueError("TargetProcess credentials missing: pass --tp-token, or --tp-username with --tp-password")
        authenticator = password_auth(config.username, password)
    return TargetProcessClient(config.url, authenticator, timeout_seconds=config.timeout_seconds)


def default_runtime() -> CommandRuntime:
    return CommandRuntime(
        repository_factory=GitRepository.from_location,
        store_factory=open_store,
        commenter_factory=build_targetprocess_client,
    )
