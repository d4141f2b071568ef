"""Logging configuration and failure diagnostics."""

from __future__ import annotations

import logging
from typing import Any

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    normalized = level.upper()
    logging.basicConfig(
        level=getattr(logging, normalized, logging.INFO),
        format=LOG_FORMAT,
    )


def failure_record(stage: str, error: BaseException, commit_hash: str | None = None) -> dict[str, Any]:
    """Describe a fatal run error so it can be diagnosed without re-running."""
    record: dict[str, Any] = {
        "status": "failed",
        "stage": stage,
        "error_type": type(error).__name__,
        "error": str(error),
    }
    if commit_hash:
        record["commit"] = commit_hash
    cause = error.__cause__
    if cause is not None:
        record["cause"] = f"{type(cause).__name__}: {cause}"
    return record


def log_failure(logger: logging.Logger, record: dict[str, Any]) -> None:
    logger.error(
        "Run failed stage=%s commit=%s error_type=%s error=%s cause=%s",
        record["stage"],
        record.get("commit", "-"),
        record["error_type"],
        record["error"],
        record.get("cause", "-"),
    )
