#!/usr/bin/env python3
"""GitHub API wrapper for discovering every repository a token can see."""

from __future__ import annotations

import threading
from typing import Iterable, List, Optional, Set, Tuple

import github
import requests

from errors import APIError, AuthenticationFailed
from logging_utils import Logger
from models import RepoInfo
from paginator import Paginator
from progress import ProgressSink
from utils import RateLimiter, github_api_url


class GitHubSource:
    """Enumerate personal and organization repositories."""

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
        self.api_url = github_api_url(url)
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
        """Check the token and return the authenticated login."""
        Logger.info(f"init github API: {self.api_url}")
        auth = github.Auth.Token(self.token)
        try:
            if self.api_url != "https://api.github.com":
                api = github.Github(base_url=self.api_url, auth=auth)
            else:
                api = github.Github(auth=auth)
            login = api.get_user().login
        except github.BadCredentialsException as e:
            raise AuthenticationFailed("github", str(e.data)) from e
        except github.GithubException as e:
            raise APIError("GitHub (user)", e.status, str(e.data)) from e
        except requests.RequestException as e:
            raise APIError("GitHub (user)", None, str(e)) from e
        Logger.debug(f"github user: {login}")
        return login

    def list_repositories(self) -> List[RepoInfo]:
        """Personal repos, then each organization's repos in listing order.

        Any failed call aborts the whole listing.
        """
        seen: Set[Tuple[str, str]] = set()
        repos: List[RepoInfo] = []

        self.sink.info("GitHub API request: user/repos")
        personal = self._collect(
            (
                RepoInfo.from_github(record)
                for record in self.paginator.iter_records(
                    f"{self.api_url}/user/repos", "GitHub (user repos)"
                )
            ),
            seen,
            repos,
        )
        self.sink.info(f"personal repositories found: {personal}")

        self.sink.info("GitHub API request: user/orgs")
        orgs = self._list_org_logins()

        org_total = 0
        for login in orgs:
            self.sink.info(f"organization: {login}")
            org_total += self._collect(
                (
                    RepoInfo.from_github(record, owner=login)
                    for record in self.paginator.iter_records(
                        f"{self.api_url}/orgs/{login}/repos", "GitHub (org repos)"
                    )
                ),
                seen,
                repos,
            )
        self.sink.info(f"organization repositories found: {org_total}")
        return repos

    def _list_org_logins(self) -> List[str]:
        logins: List[str] = []
        for record in self.paginator.iter_records(
            f"{self.api_url}/user/orgs", "GitHub (orgs)"
        ):
            login = record.get("login")
            if isinstance(login, str) and login:
                logins.append(login)
            else:
                Logger.debug(f"skipping organization record without login: {record}")
        return logins

    def _collect(
        self,
        candidates: Iterable[Optional[RepoInfo]],
        seen: Set[Tuple[str, str]],
        repos: List[RepoInfo],
    ) -> int:
        added = 0
        for repo in candidates:
            if repo is None:
                continue
            key = (repo.owner, repo.name)
            if key in seen:
                Logger.debug(f"duplicate: {repo.full_name}")
                continue
            seen.add(key)
            repos.append(repo)
            added += 1
            self.sink.info(f"  found: {repo.full_name}")
        return added
