#!/usr/bin/env python3
"""Main orchestrator: discover repositories, then mirror them locally."""

from __future__ import annotations

import dataclasses
import os
import subprocess
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Union

import requests

from config import Config, ProviderKind, Profile
from errors import (EXIT_AUTH_ERROR, EXIT_CANCELLED, EXIT_EXECUTION_ERROR,
                    EXIT_GITHUB_ERROR, EXIT_GITLAB_ERROR, EXIT_PARTIAL_FAILURE,
                    EXIT_SUCCESS, APIError, AuthenticationFailed, CloningFailed,
                    RepositoryError, SyncCancelled)
from git_runner import GitRunner
from github_source import GitHubSource
from gitlab_source import GitLabSource
from logging_utils import Logger
from mirror_sync import MirrorSyncEngine
from models import RepoInfo, RunSummary
from progress import LoggerSink, ProgressSink
from security import SecurityValidator
from utils import inject_credentials


@dataclass(frozen=True)
class SyncResult:
    summary: RunSummary
    profile: Profile


class SyncOrchestrator:
    def __init__(
        self,
        cfg: Config,
        sink: Optional[ProgressSink] = None,
        *,
        session: Optional[requests.Session] = None,
        runner: Optional[GitRunner] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> None:
        self.cfg = cfg
        self.sink = sink or LoggerSink()
        self.cancel_event = cancel_event or threading.Event()
        self.runner = runner or GitRunner(
            cfg.options.git_binary, cfg.options.git_timeout_s
        )
        SecurityValidator.register_secret(cfg.profile.token)
        self.source = self._make_source(session)

    def _make_source(
        self, session: Optional[requests.Session]
    ) -> Union[GitHubSource, GitLabSource]:
        profile = self.cfg.profile
        source_cls = GitHubSource if profile.kind == ProviderKind.GITHUB else GitLabSource
        return source_cls(
            profile.url,
            profile.token,
            self.sink,
            session=session,
            requests_per_minute=self.cfg.options.requests_per_minute,
            cancel_event=self.cancel_event,
        )

    def cancel(self) -> None:
        """Stop at the next page or repository boundary."""
        self.cancel_event.set()

    def run(self) -> int:
        try:
            if self.cfg.options.single:
                self.clone_profile_url()
                return EXIT_SUCCESS
            result = self.sync()
            if result.summary.failed:
                return EXIT_PARTIAL_FAILURE
            Logger.info("mission accomplished")
            return EXIT_SUCCESS
        except AuthenticationFailed as e:
            Logger.error(str(e))
            return EXIT_AUTH_ERROR
        except APIError as e:
            Logger.error(str(e))
            if e.status in (401, 403):
                Logger.error("the token was rejected or lacks permission")
            if self.cfg.profile.kind == ProviderKind.GITHUB:
                return EXIT_GITHUB_ERROR
            return EXIT_GITLAB_ERROR
        except SyncCancelled as e:
            Logger.warn(str(e))
            return EXIT_CANCELLED
        except RepositoryError as e:
            Logger.error(str(e))
            return EXIT_EXECUTION_ERROR
        except Exception as e:
            Logger.error(f"unexpected error: {e}")
            return EXIT_EXECUTION_ERROR

    def discover(self) -> List[RepoInfo]:
        """Full inventory for the profile; any API failure propagates."""
        profile = self.cfg.profile
        login = self.source.connect()
        if profile.kind == ProviderKind.GITLAB:
            if not profile.username:
                Logger.warn(
                    f"no username set (authenticated as '{login}'); "
                    "private clones may fail"
                )
            repos = self.source.list_repositories(profile.fetch_mode)
        else:
            repos = self.source.list_repositories()

        self.sink.info(f"unique repositories found: {len(repos)}")
        self.sink.info(
            f"repository records returned by the API: {self.source.records_seen}"
        )
        return self._apply_exclude(repos)

    def _apply_exclude(self, repos: List[RepoInfo]) -> List[RepoInfo]:
        pattern = self.cfg.options.exclude
        if not pattern:
            return repos
        kept: List[RepoInfo] = []
        for repo in repos:
            if pattern in repo.full_name:
                self.sink.warning(f"excluding: {repo.full_name}")
                continue
            kept.append(repo)
        return kept

    def sync(self) -> SyncResult:
        """Discover, then clone or pull every repository.

        Returns the summary and the profile stamped with the sync time.
        """
        repos = self.discover()
        engine = MirrorSyncEngine(
            self.cfg.profile,
            self.cfg.options.base_dir,
            self.runner,
            self.sink,
            cancel_event=self.cancel_event,
            dry_run=self.cfg.options.dry_run,
        )
        summary = engine.sync_all(repos)
        profile = self.cfg.profile
        if not self.cfg.options.dry_run:
            profile = dataclasses.replace(profile, last_sync=datetime.now(timezone.utc))
        return SyncResult(summary=summary, profile=profile)

    def clone_profile_url(self) -> None:
        """Mirror-clone the single repository the profile URL points at."""
        profile = self.cfg.profile
        base_dir = self.cfg.options.base_dir
        os.makedirs(base_dir, exist_ok=True)
        url = inject_credentials(profile.url, profile.token)
        self.sink.info(f"mirror clone: {profile.url}")
        try:
            result = self.runner.clone_mirror(url, base_dir)
        except (OSError, subprocess.SubprocessError) as e:
            raise CloningFailed(SecurityValidator.sanitize_for_logging(str(e))) from e
        if not result.ok:
            self.sink.error(f"clone failed: {result.output}")
            raise CloningFailed(result.output)
        self.sink.success(f"repository cloned: {profile.url}")
