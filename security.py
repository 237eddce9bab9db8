#!/usr/bin/env python3
"""Security validation utilities for repo-mirror-sync."""

import os
import re
from typing import Iterable, List, Optional
from urllib.parse import urlparse


class SecurityValidator:
    """Security validation utilities for input sanitization and validation."""

    # Maximum lengths to prevent buffer overflow attacks
    MAX_URL_LENGTH = 2048
    MAX_USERNAME_LENGTH = 100
    MAX_PATH_LENGTH = 500
    # Shorter values would redact ordinary words
    MIN_SECRET_LENGTH = 8

    SAFE_USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9._-]+$")

    # Secrets registered at runtime (profile tokens) are redacted verbatim
    _known_secrets: List[str] = []

    @classmethod
    def register_secret(cls, secret: Optional[str]) -> None:
        """Redact this exact value from every sanitized message."""
        if (
            secret
            and len(secret) >= cls.MIN_SECRET_LENGTH
            and secret not in cls._known_secrets
        ):
            cls._known_secrets.append(secret)

    @classmethod
    def forget_secrets(cls) -> None:
        cls._known_secrets = []

    @classmethod
    def validate_url(cls, url: str, allowed_schemes: Optional[Iterable[str]] = None) -> str:
        """Validate a base URL and return it without a trailing slash."""
        if not url or not isinstance(url, str):
            raise ValueError("URL must be a non-empty string")

        if len(url) > cls.MAX_URL_LENGTH:
            raise ValueError(f"URL exceeds maximum length of {cls.MAX_URL_LENGTH}")

        # Check for null bytes and control characters
        if "\x00" in url or any(ord(c) < 32 for c in url):
            raise ValueError("URL contains null bytes or control characters")

        parsed = urlparse(url)
        schemes = list(allowed_schemes or ["http", "https"])
        if parsed.scheme.lower() not in schemes:
            raise ValueError(
                f"URL scheme '{parsed.scheme}' not in allowed schemes: {schemes}"
            )
        if not parsed.netloc:
            raise ValueError("URL has no host")
        if "@" in parsed.netloc:
            raise ValueError("URL must not embed credentials")

        return url.rstrip("/")

    @classmethod
    def validate_username(cls, username: str) -> str:
        """Validate username for security."""
        if not username or not isinstance(username, str):
            raise ValueError("Username must be a non-empty string")

        if len(username) > cls.MAX_USERNAME_LENGTH:
            raise ValueError(
                f"Username exceeds maximum length of {cls.MAX_USERNAME_LENGTH}"
            )

        # Check for null bytes and control characters
        if "\x00" in username or any(ord(c) < 32 for c in username):
            raise ValueError("Username contains null bytes or control characters")

        if not cls.SAFE_USERNAME_PATTERN.match(username):
            raise ValueError("Username contains invalid characters")

        return username

    @classmethod
    def validate_file_path(cls, path: str) -> str:
        """Validate file path for security."""
        if not path or not isinstance(path, str):
            raise ValueError("File path must be a non-empty string")

        if len(path) > cls.MAX_PATH_LENGTH:
            raise ValueError(
                f"File path exceeds maximum length of {cls.MAX_PATH_LENGTH}"
            )

        if "\x00" in path:
            raise ValueError("File path contains null bytes")

        if ".." in path.split(os.sep):
            raise ValueError("File path contains path traversal sequences")

        return os.path.normpath(os.path.expanduser(path))

    @classmethod
    def sanitize_for_logging(cls, message: str) -> str:
        """Sanitize message for safe logging by removing potential credentials."""
        if not message:
            return message

        patterns = [
            (r"https://[^/\s@]+@", "https://[REDACTED]@"),  # URLs with credentials
            (r"token[=:]\s*[^\s]+", "token=[REDACTED]"),  # Token assignments
            (r"password[=:]\s*[^\s]+", "password=[REDACTED]"),  # Password assignments
            (r"glpat-[A-Za-z0-9_-]+", "[GITLAB_TOKEN_REDACTED]"),  # GitLab tokens
            (r"gh[pousr]_[A-Za-z0-9_]+", "[GITHUB_TOKEN_REDACTED]"),  # GitHub tokens
            (r"github_pat_[A-Za-z0-9_]+", "[GITHUB_TOKEN_REDACTED]"),  # Fine-grained
        ]

        sanitized = str(message)
        for secret in cls._known_secrets:
            sanitized = sanitized.replace(secret, "[REDACTED]")
        for pattern, replacement in patterns:
            sanitized = re.sub(pattern, replacement, sanitized, flags=re.IGNORECASE)

        return sanitized
