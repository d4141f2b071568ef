from pathlib import Path

import pytest

from tpgit.config import ProcessingConfig
from tpgit.models import Commit
from tpgit.pipeline import CommitProcessor, ProcessingError, build_comment_message
from tpgit.storage import InMemoryStore, LocalFileStore, NoOpStore, StoreError


class RecordingCommenter:
    def __init__(self, fail_for: set[int] | None = None) -> None:
        self.calls: list[tuple[int, str]] = []
        self.fail_for = fail_for or set()

    def comment(self, entity_id: int, message: str) -> None:
        self.calls.append((entity_id, message))
        if entity_id in self.fail_for:
            raise RuntimeError(f"status 500 for {entity_id}")


class TrackingStore(InMemoryStore):
    def __init__(self, fail_mark_for: str | None = None, extend_result: bool = True) -> None:
        super().__init__()
        self.fail_mark_for = fail_mark_for
        self.extend_result = extend_result
        self.events: list[str] = []

    def acquire_lease(self) -> str:
        self.events.append("acquire")
        return "token"

    def extend_lease(self, token: str) -> bool:
        self.events.append("extend")
        return self.extend_result

    def cancel_lease(self) -> None:
        self.events.append("cancel")

    def mark_processed(self, commit_hash: str) -> None:
        if commit_hash == self.fail_mark_for:
            raise StoreError(f"disk full writing {commit_hash}")
        super().mark_processed(commit_hash)


def _commit(commit_hash: str, body: str) -> Commit:
    return Commit(hash=commit_hash, body=body, author_name="Dev", author_email="dev@example.com", timestamp=1486425600)


def _config(**overrides) -> ProcessingConfig:
    values = {"commit_url_prefix": "https://github.com/a-h/ver/commit/", "max_comments": 0, "dry_run": False}
    values.update(overrides)
    return ProcessingConfig(**values)


def test_build_comment_message_layout() -> None:
    message = build_comment_message(_commit("abc123", "TP-1 fix\n\ndetails"), "https://github.com/a-h/ver/commit/")
    assert message == (
        "Commit https://github.com/a-h/ver/commit/abc123\n\n"
        "2017-02-07 00:00:00 UTC\n\n"
        "dev@example.com\n\n"
        "TP-1 fix\n\ndetails"
    )


def test_run_comments_each_id_and_marks_commits() -> None:
    store = InMemoryStore()
    commenter = RecordingCommenter()
    commits = [_commit("a1", "TP-1, TP-2 work"), _commit("b2", "no tickets here"), _commit("c3", "#3 header")]

    report = CommitProcessor(_config(), store, commenter).run(commits)

    assert [entity_id for entity_id, _ in commenter.calls] == [1, 2, 3]
    assert commenter.calls[0][1].startswith("Commit https://github.com/a-h/ver/commit/a1")
    assert all(store.is_processed(commit.hash) for commit in commits)
    assert report.processed_commits == 3
    assert report.comments_posted == 3
    assert report.comment_failures == []


def test_second_run_skips_processed_commits() -> None:
    store = InMemoryStore()
    commits = [_commit("a1", "TP-1 work")]
    CommitProcessor(_config(), store, RecordingCommenter()).run(commits)

    commenter = RecordingCommenter()
    report = CommitProcessor(_config(), store, commenter).run(commits + [_commit("b2", "TP-2 more")])

    assert [entity_id for entity_id, _ in commenter.calls] == [2]
    assert report.skipped_commits == 1
    assert report.processed_commits == 1


def test_dry_run_never_comments_but_marks() -> None:
    store = InMemoryStore()
    commenter = RecordingCommenter()

    report = CommitProcessor(_config(dry_run=True), store, commenter).run([_commit("a1", "TP-1 TP-2")])

    assert commenter.calls == []
    assert store.is_processed("a1")
    assert report.dry_run
    assert report.comments_posted == 0


def test_comment_failure_is_isolated() -> None:
    store = InMemoryStore()
    commenter = RecordingCommenter(fail_for={2})
    commits = [_commit("a1", "TP-1 TP-2 TP-3"), _commit("b2", "TP-4")]

    report = CommitProcessor(_config(), store, commenter).run(commits)

    assert [entity_id for entity_id, _ in commenter.calls] == [1, 2, 3, 4]
    assert report.comments_posted == 3
    assert [(failure.commit_hash, failure.entity_id) for failure in report.comment_failures] == [("a1", 2)]
    assert store.is_processed("a1")
    assert store.is_processed("b2")


def test_budget_exhaustion_keeps_marking_without_commenting() -> None:
    store = InMemoryStore()
    commenter = RecordingCommenter()
    commits = [_commit("a1", "TP-1"), _commit("b2", "TP-2"), _commit("c3", "TP-3")]

    report = CommitProcessor(_config(max_comments=1), store, commenter).run(commits)

    assert [entity_id for entity_id, _ in commenter.calls] == [1]
    assert report.budget_exhausted
    assert all(store.is_processed(commit.hash) for commit in commits)


def test_budget_allows_all_ids_of_the_commit_in_progress() -> None:
    commenter = RecordingCommenter()
    commits = [_commit("a1", "TP-1 TP-2"), _commit("b2", "TP-3")]

    CommitProcessor(_config(max_comments=1), InMemoryStore(), commenter).run(commits)

    assert [entity_id for entity_id, _ in commenter.calls] == [1, 2]


def test_mark_failure_aborts_and_still_releases_lease() -> None:
    store = TrackingStore(fail_mark_for="b2")
    commenter = RecordingCommenter()
    commits = [_commit("a1", "TP-1"), _commit("b2", "TP-2"), _commit("c3", "TP-3")]

    with pytest.raises(ProcessingError) as excinfo:
        CommitProcessor(_config(), store, commenter).run(commits)

    assert excinfo.value.stage == "mark"
    assert excinfo.value.commit_hash == "b2"
    assert [entity_id for entity_id, _ in commenter.calls] == [1, 2]
    assert store.events == ["acquire", "cancel"]
    assert not store.is_processed("c3")


def test_held_lease_aborts_before_touching_commits(tmp_path: Path) -> None:
    path = tmp_path / "processed.txt"
    holder = LocalFileStore(path)
    holder.acquire_lease()
    commenter = RecordingCommenter()

    with pytest.raises(ProcessingError) as excinfo:
        CommitProcessor(_config(), LocalFileStore(path), commenter).run([_commit("a1", "TP-1")])

    assert excinfo.value.stage == "lease"
    assert commenter.calls == []
    assert Path(f"{path}.lock").exists()


def test_local_file_run_flushes_on_release(tmp_path: Path) -> None:
    path = tmp_path / "processed.txt"
    CommitProcessor(_config(dry_run=True), LocalFileStore(path), RecordingCommenter()).run(
        [_commit("a1", "TP-1"), _commit("b2", "nothing")]
    )

    assert set(path.read_text().splitlines()) == {"a1", "b2"}
    assert not Path(f"{path}.lock").exists()


def test_lease_is_extended_periodically() -> None:
    store = TrackingStore()
    commits = [_commit(f"h{i}", "no refs") for i in range(5)]

    CommitProcessor(_config(lease_extend_every=2), store, RecordingCommenter()).run(commits)

    assert store.events == ["acquire", "extend", "extend", "cancel"]


def test_lost_lease_is_fatal() -> None:
    store = TrackingStore(extend_result=False)
    commits = [_commit("a1", "no refs"), _commit("b2", "no refs")]

    with pytest.raises(ProcessingError) as excinfo:
        CommitProcessor(_config(lease_extend_every=1), store, RecordingCommenter()).run(commits)

    assert excinfo.value.stage == "lease"
    assert store.events == ["acquire", "extend", "cancel"]


def test_release_failure_is_reported() -> None:
    class FailingRelease(InMemoryStore):
        def cancel_lease(self) -> None:
            raise StoreError("cannot write processed.txt")

    with pytest.raises(ProcessingError) as excinfo:
        CommitProcessor(_config(), FailingRelease(), RecordingCommenter()).run([_commit("a1", "x")])
    assert excinfo.value.stage == "release"


def test_noop_store_reprocesses_every_run() -> None:
    store = NoOpStore()
    commenter = RecordingCommenter()
    commits = [_commit("a1", "TP-1")]

    CommitProcessor(_config(), store, commenter).run(commits)
    CommitProcessor(_config(), store, commenter).run(commits)

    assert [entity_id for entity_id, _ in commenter.calls] == [1, 1]


def test_zero_max_comments_disables_the_cap() -> None:
    commenter = RecordingCommenter()
    commits = [_commit(f"c{index}", f"TP-{index}") for index in range(1, 6)]

    report = CommitProcessor(_config(max_comments=0), InMemoryStore(), commenter).run(commits)

    assert [entity_id for entity_id, _ in commenter.calls] == [1, 2, 3, 4, 5]
    assert report.comments_posted == 5
    assert not report.budget_exhausted
