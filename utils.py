#!/usr/bin/env python3
"""Utility functions for repo-mirror-sync."""

import threading
import time
from typing import List, Optional
from urllib.parse import urlparse

from logging_utils import Logger

GITHUB_PUBLIC_API = "https://api.github.com"
GITHUB_PUBLIC_HOSTS = ("github.com", "www.github.com", "api.github.com")


class RateLimiter:
    """Rate limiter to prevent abuse and respect API limits."""

    def __init__(self, max_requests_per_minute: int = 60):
        self.max_requests = max_requests_per_minute
        self.requests: List[float] = []
        self.lock = threading.Lock()

    def wait_if_needed(self, operation_type: str = "API") -> None:
        """Wait if necessary to respect rate limits."""
        current_time = time.time()

        with self.lock:
            self._clean_old_requests(current_time)
            if len(self.requests) >= self.max_requests:
                wait_time = 60 - (current_time - self.requests[0])
                if wait_time > 0:
                    Logger.security_event(
                        "RATE_LIMIT_HIT",
                        f"rate limit reached for {operation_type}, "
                        f"waiting {wait_time:.2f}s",
                    )
                    time.sleep(wait_time)
                    current_time = time.time()
                    self._clean_old_requests(current_time)
            self.requests.append(current_time)

    def _clean_old_requests(self, current_time: float) -> None:
        """Remove requests older than 1 minute."""
        cutoff_time = current_time - 60
        self.requests = [
            req_time for req_time in self.requests if req_time > cutoff_time
        ]


def inject_credentials(
    clone_url: str, token: Optional[str], username: Optional[str] = None
) -> str:
    """Embed credentials in an HTTPS clone URL.

    Example: 'https://host/x.git' -> 'https://U:T@host/x.git'
    Non-HTTPS URLs and empty tokens are returned unchanged.
    """
    prefix = "https://"
    if not token or not clone_url.startswith(prefix):
        return clone_url
    rest = clone_url[len(prefix):]
    if username:
        return f"{prefix}{username}:{token}@{rest}"
    return f"{prefix}{token}@{rest}"


def github_api_url(base_url: str) -> str:
    """Return the REST API root for a GitHub profile URL.

    github.com profiles use the public API; any other host is treated as
    GitHub Enterprise, which serves the API under /api/v3.
    """
    parsed = urlparse(base_url)
    host = parsed.netloc.lower()
    if not host or host in GITHUB_PUBLIC_HOSTS:
        return GITHUB_PUBLIC_API
    return f"{parsed.scheme}://{parsed.netloc}/api/v3"


def gitlab_api_url(base_url: str) -> str:
    return base_url.rstrip("/") + "/api/v4"
