#!/usr/bin/env python3
"""Map discovered repositories to local mirror paths."""

from __future__ import annotations

import os
from urllib.parse import urlparse

from config import Profile
from models import RepoInfo

FORKS_DIR = "FORKS"
ORGANISATIONS_DIR = "organisations"


def account_root_name(profile: Profile) -> str:
    """Last path segment of the profile URL, or the profile name.

    Example: 'https://github.com/octocat/' -> 'octocat'
    """
    segments = [s for s in urlparse(profile.url).path.split("/") if s]
    if segments:
        return segments[-1]
    return profile.name


def plan_repo_path(profile: Profile, base_dir: str, repo: RepoInfo) -> str:
    """Target directory for ``repo``; same inputs always give the same path."""
    root_name = account_root_name(profile)
    root = os.path.join(base_dir, root_name)
    if repo.owner == root_name:
        return os.path.join(root, repo.name)
    # Nested namespaces (group/sub) are filed as forks
    if "/" in repo.owner:
        return os.path.join(root, FORKS_DIR, repo.name)
    return os.path.join(root, ORGANISATIONS_DIR, repo.owner, repo.name)
