"""Core Pydantic domain models for tpgit."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field


class Commit(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    hash: str
    body: str = ""
    author_name: str = ""
    author_email: str = ""
    timestamp: int

    @property
    def date(self) -> datetime:
        return datetime.fromtimestamp(self.timestamp, UTC)


class CommentFailure(BaseModel):
    model_config = ConfigDict(extra="forbid")

    commit_hash: str
    entity_id: int
    error: str


class RunReport(BaseModel):
    model_config = ConfigDict(extra="forbid")

    generated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    dry_run: bool
    total_commits: int = 0
    skipped_commits: int = 0
    processed_commits: int = 0
    comments_posted: int = 0
    comment_failures: list[CommentFailure] = Field(default_factory=list)
    budget_exhausted: bool = False
