"""Configuration models and loading for tpgit."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

REPO_CONFIG_NAME = ".tpgit.yaml"

StorageBackendName = Literal["localfile", "redis", "inmemory", "none"]


class GitConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    repo: str = "."
    branch: str = "master"
    git_bin: str = "git"


class TargetProcessConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    url: str | None = None
    username: str | None = None
    password: str | None = None
    password_env: str | None = "TPGIT_TP_PASSWORD"
    token: str | None = None
    token_env: str | None = "TPGIT_TP_TOKEN"
    timeout_seconds: float = 30.0

    def resolved_password(self) -> str | None:
        if self.password:
            return self.password
        if self.password_env:
            return os.environ.get(self.password_env) or None
        return None

    def resolved_token(self) -> str | None:
        if self.token:
            return self.token
        if self.token_env:
            return os.environ.get(self.token_env) or None
        return None


class StorageConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    backend: StorageBackendName = "localfile"
    file_path: str = ".tpgit/processed.txt"
    redis_url: str = "redis://localhost:6379/0"
    redis_namespace: str = "tpgit"
    lease_ttl_seconds: int = Field(default=900, gt=0)


class ProcessingConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    commit_url_prefix: str = ""
    max_comments: int = Field(default=50, ge=0, description="Comments allowed per run; 0 disables the cap")
    dry_run: bool = True
    lease_extend_every: int = Field(default=50, ge=0)


class TpgitConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    git: GitConfig = Field(default_factory=GitConfig)
    targetprocess: TargetProcessConfig = Field(default_factory=TargetProcessConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    processing: ProcessingConfig = Field(default_factory=ProcessingConfig)


def default_commit_url_prefix(repo: str) -> str:
    """Derive a web commit URL prefix from an http(s) clone URL, e.g. https://github.com/a-h/ver."""
    if not repo.startswith(("http://", "https://")):
        return ""
    base = repo.rstrip("/")
    if base.endswith(".git"):
        base = base[: -len(".git")]
    return f"{base}/commit/"


# Lowest precedence first; "flags" are the command-line options.
LAYER_ORDER = ("system", "org", "repo", "runtime", "flags")


def read_yaml_mapping(path: str | Path | None, *, required: bool = False) -> dict[str, Any]:
    """Read one YAML config layer. An empty document is an empty layer."""
    if not path:
        return {}
    path = Path(path)
    if not path.exists():
        if required:
            raise ValueError(f"config file {path} does not exist")
        return {}
    data = yaml.safe_load(path.read_text())
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"config file {path} must contain a mapping, got {type(data).__name__}")
    return data


def overrides_from_fields(fields: Iterable[tuple[str, str, Any]]) -> dict[str, dict[str, Any]]:
    """Group (section, key, value) triples into a layer, skipping unset values."""
    layer: dict[str, dict[str, Any]] = {}
    for section, key, value in fields:
        if value is not None:
            layer.setdefault(section, {})[key] = value
    return layer


def _merge_into(target: dict[str, Any], layer: dict[str, Any]) -> None:
    # Nested dicts are copied; input layers stay untouched.
    for key, value in layer.items():
        if isinstance(value, dict):
            current = target.get(key)
            if not isinstance(current, dict):
                current = target[key] = {}
            _merge_into(current, value)
        else:
            target[key] = value


def load_effective_config(
    repo_path: str | Path,
    org_defaults: dict[str, Any] | None = None,
    system_defaults: dict[str, Any] | None = None,
    runtime_override: dict[str, Any] | None = None,
    flag_overrides: dict[str, Any] | None = None,
) -> TpgitConfig:
    """Merge config layers in LAYER_ORDER, each one overriding those before it.

    The "repo" layer is the .tpgit.yaml found in ``repo_path``.
    """
    layers = {
        "system": system_defaults,
        "org": org_defaults,
        "repo": read_yaml_mapping(Path(repo_path) / REPO_CONFIG_NAME),
        "runtime": runtime_override,
        "flags": flag_overrides,
    }
    merged: dict[str, Any] = {}
    for name in LAYER_ORDER:
        layer = layers[name]
        if layer:
            logger.debug("Applying config layer=%s sections=%s", name, ",".join(sorted(layer)))
            _merge_into(merged, layer)
    return TpgitConfig.model_validate(merged)
