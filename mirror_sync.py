#!/usr/bin/env python3
"""Bring a local mirror tree in line with the discovered repositories."""

from __future__ import annotations

import os
import re
import threading
from typing import List, Optional

from config import Profile
from errors import SyncCancelled
from git_runner import GitRunner
from layout import plan_repo_path
from logging_utils import Logger
from models import RepoInfo, RunSummary, SyncOutcome, SyncStatus
from progress import ProgressSink
from security import SecurityValidator
from utils import inject_credentials

UP_TO_DATE_PATTERN = re.compile(r"already up[ -]to[ -]date", re.IGNORECASE)


class MirrorSyncEngine:
    """Clone absent repositories and pull present ones, one at a time.

    A failure on one repository is recorded and the loop moves on.
    """

    def __init__(
        self,
        profile: Profile,
        base_dir: str,
        runner: GitRunner,
        sink: ProgressSink,
        *,
        cancel_event: Optional[threading.Event] = None,
        dry_run: bool = False,
    ) -> None:
        self.profile = profile
        self.base_dir = base_dir
        self.runner = runner
        self.sink = sink
        self.cancel_event = cancel_event
        self.dry_run = dry_run

    def sync_all(self, repos: List[RepoInfo]) -> RunSummary:
        summary = RunSummary(total=len(repos))
        previously_present = 0
        total = len(repos)

        for idx, repo in enumerate(repos, start=1):
            if self.cancel_event is not None and self.cancel_event.is_set():
                raise SyncCancelled(
                    f"cancelled after {idx - 1}/{total} repositories"
                )
            path = plan_repo_path(self.profile, self.base_dir, repo)
            present = os.path.exists(path)
            if present:
                previously_present += 1

            if self.dry_run:
                action = "would update" if present else "would clone"
                self.sink.info(f"[{idx}/{total}] {action}: {repo.full_name} -> {path}")
                continue

            outcome = self.sync_one(repo, path, present, prefix=f"[{idx}/{total}]")
            summary = summary.record(outcome)

        if not self.dry_run:
            self._report(summary, previously_present)
        return summary

    def sync_one(
        self, repo: RepoInfo, path: str, present: bool, prefix: str = ""
    ) -> SyncOutcome:
        label = f"{prefix} {repo.full_name}".strip()
        try:
            if present:
                self.sink.info(f"{label}: pulling updates")
                outcome = self._update(repo, path)
            else:
                self.sink.info(f"{label}: cloning")
                outcome = self._clone(repo, path)
        except SyncCancelled:
            raise
        except Exception as e:
            detail = SecurityValidator.sanitize_for_logging(str(e))
            outcome = SyncOutcome(repo, path, SyncStatus.FAILED, detail)

        if outcome.status == SyncStatus.FAILED:
            self.sink.error(f"{label}: failed\n{outcome.detail or ''}".rstrip())
        elif outcome.status == SyncStatus.NO_CHANGE:
            self.sink.info(f"{label}: already up to date")
        else:
            self.sink.success(f"{label}: {outcome.status.value}")
        return outcome

    def _clone(self, repo: RepoInfo, path: str) -> SyncOutcome:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        url = inject_credentials(repo.clone_url, self.profile.token, self.profile.username)
        result = self.runner.clone(url, path)
        if result.ok:
            return SyncOutcome(repo, path, SyncStatus.CLONED)
        return SyncOutcome(repo, path, SyncStatus.FAILED, result.output)

    def _update(self, repo: RepoInfo, path: str) -> SyncOutcome:
        result = self.runner.pull(path)
        if not result.ok:
            return SyncOutcome(repo, path, SyncStatus.FAILED, result.output)
        if UP_TO_DATE_PATTERN.search(result.output):
            return SyncOutcome(repo, path, SyncStatus.NO_CHANGE)
        return SyncOutcome(repo, path, SyncStatus.UPDATED)

    def _report(self, summary: RunSummary, previously_present: int) -> None:
        self.sink.info(
            f"summary: discovered {summary.total}, cloned {summary.cloned}, "
            f"updated {summary.updated}, unchanged {summary.unchanged}, "
            f"failed {summary.failed}"
        )
        Logger.debug(summary.describe())
        if summary.transferred == 0 and previously_present == 0:
            self.sink.warning(
                "no repositories were cloned or updated; "
                "check the access token and its permissions"
            )
        elif summary.failed:
            self.sink.warning(f"{summary.failed} repositories failed to sync")
        else:
            self.sink.success("all repositories cloned or updated")
