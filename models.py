#!/usr/bin/env python3
"""Records produced by discovery and sync."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Mapping, Optional, Tuple


def _string(value: Any) -> Optional[str]:
    if isinstance(value, str) and value:
        return value
    return None


def _nested_string(record: Mapping[str, Any], outer: str, inner: str) -> Optional[str]:
    nested = record.get(outer)
    if not isinstance(nested, Mapping):
        return None
    return _string(nested.get(inner))


@dataclass(frozen=True)
class RepoInfo:
    """A repository discovered on the provider."""
    owner: str
    name: str
    clone_url: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    @classmethod
    def from_github(
        cls, record: Mapping[str, Any], owner: Optional[str] = None
    ) -> Optional["RepoInfo"]:
        """Build from a GitHub repo record; None when a field is missing.

        Organization listings pass the org login as ``owner``.
        """
        name = _string(record.get("name"))
        clone_url = _string(record.get("clone_url"))
        if owner is None:
            owner = _nested_string(record, "owner", "login")
        if not (name and clone_url and owner):
            return None
        return cls(owner=owner, name=name, clone_url=clone_url)

    @classmethod
    def from_gitlab(cls, record: Mapping[str, Any]) -> Optional["RepoInfo"]:
        """Build from a GitLab project record; None when a field is missing."""
        name = _string(record.get("name"))
        owner = _nested_string(record, "namespace", "full_path")
        clone_url = _string(record.get("http_url_to_repo"))
        if not (name and owner and clone_url):
            return None
        return cls(owner=owner, name=name, clone_url=clone_url)


@dataclass(frozen=True)
class Group:
    """A GitLab group or subgroup."""
    id: int
    full_path: str

    @classmethod
    def from_gitlab(cls, record: Mapping[str, Any]) -> Optional["Group"]:
        group_id = record.get("id")
        full_path = _string(record.get("full_path"))
        # bool is an int subclass
        if not isinstance(group_id, int) or isinstance(group_id, bool):
            return None
        if not full_path:
            return None
        return cls(id=group_id, full_path=full_path)


class SyncStatus(Enum):
    CLONED = "cloned"
    UPDATED = "updated"
    NO_CHANGE = "no-change"
    FAILED = "failed"


@dataclass(frozen=True)
class SyncOutcome:
    """Result of one repository attempt."""
    repo: RepoInfo
    path: str
    status: SyncStatus
    detail: Optional[str] = None


@dataclass(frozen=True)
class RunSummary:
    """Counts for one sync run, folded one outcome at a time."""
    total: int = 0
    cloned: int = 0
    updated: int = 0
    unchanged: int = 0
    failed: int = 0
    outcomes: Tuple[SyncOutcome, ...] = ()

    def record(self, outcome: SyncOutcome) -> "RunSummary":
        counts = {
            SyncStatus.CLONED: {"cloned": self.cloned + 1},
            SyncStatus.UPDATED: {"updated": self.updated + 1},
            SyncStatus.NO_CHANGE: {"unchanged": self.unchanged + 1},
            SyncStatus.FAILED: {"failed": self.failed + 1},
        }[outcome.status]
        return replace(self, outcomes=self.outcomes + (outcome,), **counts)

    @property
    def transferred(self) -> int:
        return self.cloned + self.updated

    def describe(self) -> str:
        return (
            f"total={self.total} cloned={self.cloned} updated={self.updated} "
            f"unchanged={self.unchanged} failed={self.failed}"
        )
