#!/usr/bin/env python3
"""Exception taxonomy and exit codes for repo-mirror-sync."""

from __future__ import annotations

from typing import Optional

# Exit codes
EXIT_SUCCESS = 0
EXIT_EXECUTION_ERROR = 1
EXIT_MISSING_ARGUMENTS = 2
EXIT_GITLAB_ERROR = 30
EXIT_GITHUB_ERROR = 31
EXIT_AUTH_ERROR = 40
EXIT_PARTIAL_FAILURE = 50
EXIT_CANCELLED = 130


class RepositoryError(Exception):
    """Base class for all discovery and sync errors."""


class InvalidURL(RepositoryError):
    """The configured base URL cannot be used."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"invalid url '{url}': {reason}")
        self.url = url
        self.reason = reason


class AuthenticationFailed(RepositoryError):
    """The provider rejected the token."""

    def __init__(self, provider: str, body: str = "") -> None:
        super().__init__(f"authentication failed ({provider}): {body}".rstrip(": "))
        self.provider = provider
        self.body = body


class APIError(RepositoryError):
    """A listing call returned something other than 200."""

    def __init__(self, context: str, status: Optional[int], body: str) -> None:
        status_text = status if status is not None else "no response"
        super().__init__(f"{context} API error: {status_text} {body}".rstrip())
        self.context = context
        self.status = status
        self.body = body


class CloningFailed(RepositoryError):
    """A single-URL mirror clone exited non-zero."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class SyncCancelled(RepositoryError):
    """The caller asked the run to stop."""
