"""Commit processing: comment on referenced tickets once per commit."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from tpgit.config import ProcessingConfig
from tpgit.connectors.base import Commenter
from tpgit.models import CommentFailure, Commit, RunReport
from tpgit.storage.base import ProcessedStore, StoreError
from tpgit.tickets import extract_ticket_ids

logger = logging.getLogger(__name__)


class ProcessingError(RuntimeError):
    def __init__(self, message: str, *, stage: str, commit_hash: str | None = None) -> None:
        super().__init__(message)
        self.stage = stage
        self.commit_hash = commit_hash


def build_comment_message(commit: Commit, commit_url_prefix: str) -> str:
    return "\n\n".join(
        [
            f"Commit {commit_url_prefix}{commit.hash}",
            commit.date.strftime("%Y-%m-%d %H:%M:%S UTC"),
            commit.author_email,
            commit.body,
        ]
    )


class CommitProcessor:
    """Walks commits oldest first under the store's lease.

    A failed comment is recorded and the run continues; a failed processed-mark
    aborts it. The lease is released either way.
    """

    def __init__(self, config: ProcessingConfig, store: ProcessedStore, commenter: Commenter) -> None:
        self.config = config
        self.store = store
        self.commenter = commenter

    def run(self, commits: Iterable[Commit]) -> RunReport:
        report = RunReport(dry_run=self.config.dry_run)
        try:
            token = self.store.acquire_lease()
        except StoreError as exc:
            raise ProcessingError(f"failed to acquire lease: {exc}", stage="lease") from exc

        completed = False
        try:
            self._process_all(commits, token, report)
            completed = True
        finally:
            self._release(raise_errors=completed)

        logger.info(
            "Run complete: commits=%s skipped=%s processed=%s comments=%s failures=%s budget_exhausted=%s dry_run=%s",
            report.total_commits,
            report.skipped_commits,
            report.processed_commits,
            report.comments_posted,
            len(report.comment_failures),
            report.budget_exhausted,
            report.dry_run,
        )
        return report

    def _process_all(self, commits: Iterable[Commit], token: str, report: RunReport) -> None:
        extend_every = self.config.lease_extend_every
        for commit in commits:
            report.total_commits += 1
            if self._is_processed(commit):
                report.skipped_commits += 1
                logger.debug("Skipping already processed commit=%s", commit.hash)
            else:
                self._process_commit(commit, report)
                report.processed_commits += 1
            if extend_every and report.total_commits % extend_every == 0:
                self._extend(token, commit.hash)

    def _is_processed(self, commit: Commit) -> bool:
        try:
            return self.store.is_processed(commit.hash)
        except StoreError as exc:
            raise ProcessingError(
                f"failed to check processed state of {commit.hash}: {exc}",
                stage="lookup",
                commit_hash=commit.hash,
            ) from exc

    def _process_commit(self, commit: Commit, report: RunReport) -> None:
        ids = extract_ticket_ids(commit.body)
        if ids:
            message = build_comment_message(commit, self.config.commit_url_prefix)
            if self.config.dry_run:
                for entity_id in ids:
                    logger.info("Dry run: would comment on entity=%s for commit=%s", entity_id, commit.hash)
            elif self._budget_exhausted(report):
                report.budget_exhausted = True
                logger.info("Comment budget of %s reached; commit=%s marked without comments", self.config.max_comments, commit.hash)
            else:
                self._post_comments(commit, ids, message, report)
        else:
            logger.debug("No ticket references in commit=%s", commit.hash)

        try:
            self.store.mark_processed(commit.hash)
        except StoreError as exc:
            raise ProcessingError(
                f"failed to mark {commit.hash} as processed: {exc}",
                stage="mark",
                commit_hash=commit.hash,
            ) from exc

    def _budget_exhausted(self, report: RunReport) -> bool:
        return self.config.max_comments > 0 and report.comments_posted >= self.config.max_comments

    def _post_comments(self, commit: Commit, ids: list[int], message: str, report: RunReport) -> None:
        for entity_id in ids:
            try:
                self.commenter.comment(entity_id, message)
            except Exception as exc:
                logger.warning("Failed to comment on entity=%s for commit=%s: %s", entity_id, commit.hash, exc)
                report.comment_failures.append(CommentFailure(commit_hash=commit.hash, entity_id=entity_id, error=str(exc)))
                continue
            report.comments_posted += 1
            logger.info("Commented on entity=%s for commit=%s", entity_id, commit.hash)

    def _extend(self, token: str, commit_hash: str) -> None:
        try:
            extended = self.store.extend_lease(token)
        except StoreError as exc:
            raise ProcessingError(f"failed to extend lease: {exc}", stage="lease", commit_hash=commit_hash) from exc
        if not extended:
            raise ProcessingError("lease was lost during the run", stage="lease", commit_hash=commit_hash)

    def _release(self, *, raise_errors: bool) -> None:
        try:
            self.store.cancel_lease()
        except StoreError as exc:
            if raise_errors:
                raise ProcessingError(f"failed to release lease: {exc}", stage="release") from exc
            logger.error("Failed to release lease after aborted run: %s", exc)
