"""Tests for the git process wrapper."""

from __future__ import annotations

import subprocess
from unittest.mock import MagicMock, patch

from git_runner import GitRunner


@patch("git_runner.subprocess.run")
def test_clone_merges_output_streams(mock_run: MagicMock) -> None:
    mock_run.return_value = subprocess.CompletedProcess(
        args=[], returncode=0, stdout="Cloning into 'x'...\n"
    )
    runner = GitRunner("/usr/bin/git", timeout_s=60)

    result = runner.clone("https://host/x.git", "/m/x")

    assert result.ok
    assert result.output == "Cloning into 'x'...\n"
    args, kwargs = mock_run.call_args
    assert args[0] == ["/usr/bin/git", "clone", "https://host/x.git", "/m/x"]
    assert kwargs["stderr"] == subprocess.STDOUT
    assert kwargs["timeout"] == 60
    assert kwargs["env"]["GIT_TERMINAL_PROMPT"] == "0"


@patch("git_runner.subprocess.run")
def test_pull_runs_in_repository(mock_run: MagicMock) -> None:
    mock_run.return_value = subprocess.CompletedProcess(args=[], returncode=1, stdout=None)

    result = GitRunner().pull("/m/x")

    assert not result.ok
    assert result.exit_code == 1
    assert result.output == ""
    assert mock_run.call_args.args[0] == ["git", "pull"]
    assert mock_run.call_args.kwargs["cwd"] == "/m/x"


@patch("git_runner.subprocess.run")
def test_output_is_redacted(mock_run: MagicMock) -> None:
    mock_run.return_value = subprocess.CompletedProcess(
        args=[], returncode=128, stdout="fatal: unable to access 'https://tok12345@host/x.git/'"
    )

    result = GitRunner().clone("https://tok12345@host/x.git", "/m/x")

    assert "tok12345" not in result.output
