#!/usr/bin/env python3
"""Configuration dataclasses for repo-mirror-sync."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class ProviderKind(Enum):
    """Hosted Git provider a profile points at."""
    GITHUB = "github"
    GITLAB = "gitlab"


class GitLabFetchMode(Enum):
    """How GitLab projects are discovered."""
    RECURSIVE = "recursive"
    BASH_STYLE = "bash-style"


@dataclass(frozen=True)
class Profile:
    """Account profile supplied by the profile-management front end."""
    name: str
    token: str
    url: str
    kind: ProviderKind
    username: Optional[str] = None
    gitlab_fetch_mode: Optional[GitLabFetchMode] = None
    last_sync: Optional[datetime] = None
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    @property
    def fetch_mode(self) -> GitLabFetchMode:
        return self.gitlab_fetch_mode or GitLabFetchMode.RECURSIVE


@dataclass
class SyncOptions:
    """Sync behavior configuration."""
    base_dir: str
    git_binary: str = "git"
    git_timeout_s: float = 900.0
    exclude: Optional[str] = None
    dry_run: bool = False
    single: bool = False
    requests_per_minute: int = 120


@dataclass
class Config:
    """Main configuration for a mirror run."""
    profile: Profile
    options: SyncOptions
