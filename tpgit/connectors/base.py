"""Connector interfaces for ticket-system sinks."""

from __future__ import annotations

from typing import Protocol


class Commenter(Protocol):
    def comment(self, entity_id: int, message: str) -> None: ...


class DisabledCommenter:
    """Stand-in for dry runs, where no ticket-system credentials are needed."""

    def comment(self, entity_id: int, message: str) -> None:
        _ = message
        raise RuntimeError(f"commenting is disabled; refusing to comment on entity {entity_id}")
