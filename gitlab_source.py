#!/usr/bin/env python3
"""GitLab API wrapper for discovering groups and projects."""

from __future__ import annotations

import threading
from typing import Iterable, List, Optional, Set, Tuple

import gitlab
import requests

from config import GitLabFetchMode
from errors import APIError, AuthenticationFailed
from logging_utils import Logger
from models import Group, RepoInfo
from paginator import Paginator
from progress import ProgressSink
from utils import RateLimiter, gitlab_api_url


class GitLabSource:
    """Walk GitLab groups and subgroups and list their projects."""

    def __init__(
        self,
        url: str,
        token: str,
        sink: ProgressSink,
        *,
        session: Optional[requests.Session] = None,
        requests_per_minute: int = 120,
        cancel_event: Optional[threading.Event] = None,
    ) -> None:
        self.url = url.rstrip("/")
        self.api_url = gitlab_api_url(url)
        self.token = token
        self.sink = sink
        self.paginator = Paginator(
            session or requests.Session(),
            token,
            rate_limiter=RateLimiter(max_requests_per_minute=requests_per_minute),
            cancel_event=cancel_event,
        )

    @property
    def records_seen(self) -> int:
        return self.paginator.records_seen

    def connect(self) -> str:
        """Check the token and return the authenticated username."""
        Logger.info(f"init gitlab API: {self.url}")
        try:
            api = gitlab.Gitlab(url=self.url, private_token=self.token)
            api.auth()
        except gitlab.exceptions.GitlabAuthenticationError as e:
            raise AuthenticationFailed("gitlab", str(e.error_message)) from e
        except gitlab.exceptions.GitlabError as e:
            raise APIError(
                "GitLab (user)", e.response_code, str(e.error_message)
            ) from e
        except requests.RequestException as e:
            raise APIError("GitLab (user)", None, str(e)) from e
        username = getattr(api.user, "username", "") if api.user else ""
        Logger.debug(f"gitlab user: {username}")
        return username

    def list_repositories(self, mode: GitLabFetchMode) -> List[RepoInfo]:
        if mode == GitLabFetchMode.BASH_STYLE:
            return self.list_projects_by_group()
        return self.list_projects_recursive()

    def list_projects_recursive(self) -> List[RepoInfo]:
        """One listing over every visible project, nested namespaces included."""
        self.sink.info("recursive mode: listing all projects")
        records = self.paginator.iter_records(
            f"{self.api_url}/projects",
            "GitLab (projects, recursive)",
            params={"include_subgroups": "true"},
        )
        repos: List[RepoInfo] = []
        self._collect((RepoInfo.from_gitlab(r) for r in records), set(), repos)
        self.sink.info(f"projects found (recursive): {len(repos)}")
        return repos

    def list_projects_by_group(self) -> List[RepoInfo]:
        """Discover every group, then list each group's own projects."""
        groups = self.discover_groups()
        self.sink.info("bash-style mode: listing projects per group")
        seen: Set[Tuple[str, str]] = set()
        repos: List[RepoInfo] = []
        for group in groups:
            self.sink.info(f"group: {group.full_path} (id: {group.id})")
            records = self.paginator.iter_records(
                f"{self.api_url}/groups/{group.id}/projects",
                "GitLab (group projects, bash-style)",
            )
            self._collect((RepoInfo.from_gitlab(r) for r in records), seen, repos)
        self.sink.info(f"projects found (bash-style): {len(repos)}")
        return repos

    def discover_groups(self) -> List[Group]:
        """Top-level groups plus the full closure of their subgroups.

        Every group in the working set gets its subgroups listed exactly
        once; the walk ends when a pass appends nothing new.
        """
        self.sink.info("listing GitLab groups")
        groups: List[Group] = []
        known: Set[int] = set()
        self._add_groups(
            self.paginator.iter_records(f"{self.api_url}/groups", "GitLab (groups)"),
            groups,
            known,
            "group",
        )

        self.sink.info("listing subgroups")
        expanded = 0
        while expanded < len(groups):
            group = groups[expanded]
            expanded += 1
            self._add_groups(
                self.paginator.iter_records(
                    f"{self.api_url}/groups/{group.id}/subgroups",
                    f"GitLab (subgroups of {group.full_path})",
                ),
                groups,
                known,
                "subgroup",
            )

        self.sink.info(f"groups and subgroups found: {len(groups)}")
        for group in groups:
            self.sink.info(f"  {group.full_path}")
        return groups

    def _add_groups(
        self, records: Iterable[dict], groups: List[Group], known: Set[int], label: str
    ) -> None:
        for record in records:
            group = Group.from_gitlab(record)
            if group is None or group.id in known:
                continue
            known.add(group.id)
            groups.append(group)
            self.sink.info(f"{label} found: {group.full_path}")

    def _collect(
        self,
        candidates: Iterable[Optional[RepoInfo]],
        seen: Set[Tuple[str, str]],
        repos: List[RepoInfo],
    ) -> None:
        for repo in candidates:
            if repo is None:
                continue
            key = (repo.owner, repo.name)
            if key in seen:
                Logger.debug(f"duplicate: {repo.full_name}")
                continue
            seen.add(key)
            repos.append(repo)
            self.sink.info(f"  found: {repo.full_name}")
