"""Tests for discovery records, run summaries and progress events."""

from __future__ import annotations

from models import Group, RepoInfo, RunSummary, SyncOutcome, SyncStatus
from progress import ProgressEvent, QueueSink, strip_color_hint


def test_summary_folds_outcomes() -> None:
    repo = RepoInfo("o", "n", "u")
    summary = RunSummary(total=4)
    for status in (SyncStatus.CLONED, SyncStatus.UPDATED, SyncStatus.NO_CHANGE, SyncStatus.FAILED):
        summary = summary.record(SyncOutcome(repo, "/p", status))

    assert (summary.cloned, summary.updated, summary.unchanged, summary.failed) == (1, 1, 1, 1)
    assert summary.transferred == 2
    assert len(summary.outcomes) == 4


def test_gitlab_record_requires_namespace_path() -> None:
    assert RepoInfo.from_gitlab({"name": "n", "http_url_to_repo": "u"}) is None
    assert RepoInfo.from_gitlab(
        {"name": "n", "namespace": {"full_path": "g/s"}, "http_url_to_repo": "u"}
    ) == RepoInfo("g/s", "n", "u")


def test_group_rejects_boolean_id() -> None:
    assert Group.from_gitlab({"id": True, "full_path": "x"}) is None
    assert Group.from_gitlab({"id": 3, "full_path": "x"}) == Group(3, "x")


def test_event_line_carries_color_hint() -> None:
    line = ProgressEvent.success("cloned: a/b").line

    assert line == "[green] cloned: a/b"
    assert strip_color_hint(line) == "cloned: a/b"
    assert strip_color_hint("[blue] [x] y") == "[x] y"


def test_queue_sink_redacts_credentials() -> None:
    sink = QueueSink()

    sink.error("fatal: https://user:pw@host/x.git")

    event = sink.events.get_nowait()
    assert "pw" not in event.text
    assert event.line.startswith("[red] ")
