#!/usr/bin/env python3
"""Thin wrapper around the external git executable."""

from __future__ import annotations

import os
import subprocess
from dataclasses import dataclass
from typing import List, Optional

from logging_utils import Logger
from security import SecurityValidator


@dataclass(frozen=True)
class GitResult:
    exit_code: int
    output: str

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


class GitRunner:
    """Run git with combined stdout/stderr capture.

    Raises OSError when the binary cannot be started and
    subprocess.TimeoutExpired when a command overruns its timeout.
    """

    def __init__(self, binary: str = "git", timeout_s: Optional[float] = 900.0) -> None:
        self.binary = binary
        self.timeout_s = timeout_s

    def run(self, args: List[str], cwd: Optional[str] = None) -> GitResult:
        env = os.environ.copy()
        env["GIT_TERMINAL_PROMPT"] = "0"
        Logger.debug(f"running: {self.binary} {' '.join(args)} (cwd={cwd or '.'})")
        completed = subprocess.run(
            [self.binary, *args],
            cwd=cwd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            encoding="utf-8",
            errors="replace",
            timeout=self.timeout_s,
            env=env,
            check=False,
        )
        output = SecurityValidator.sanitize_for_logging(completed.stdout or "")
        return GitResult(completed.returncode, output)

    def clone(self, url: str, dest: str) -> GitResult:
        return self.run(["clone", url, dest])

    def clone_mirror(self, url: str, cwd: str) -> GitResult:
        return self.run(["clone", "--mirror", url], cwd=cwd)

    def pull(self, repo_dir: str) -> GitResult:
        return self.run(["pull"], cwd=repo_dir)
