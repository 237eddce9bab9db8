"""Tests for command line parsing."""

from __future__ import annotations

import pytest

from argument_parser import build_config
from config import GitLabFetchMode, ProviderKind
from errors import EXIT_AUTH_ERROR, EXIT_MISSING_ARGUMENTS


def test_gitlab_profile_from_arguments(tmp_path) -> None:
    cfg = build_config(
        [
            "--provider", "gitlab",
            "--url", "https://gitlab.example.com/",
            "--token", "glpat-abc",
            "--username", "dev",
            "--gitlab-mode", "bash-style",
            "--dest", str(tmp_path),
        ]
    )

    assert cfg.profile.kind == ProviderKind.GITLAB
    assert cfg.profile.url == "https://gitlab.example.com"
    assert cfg.profile.username == "dev"
    assert cfg.profile.fetch_mode == GitLabFetchMode.BASH_STYLE
    assert cfg.options.base_dir == str(tmp_path)
    assert cfg.options.dry_run is False


def test_token_falls_back_to_environment(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("GITHUB_TOKEN", "ghp_fromenv")

    cfg = build_config(["--provider", "github", "--dest", str(tmp_path)])

    assert cfg.profile.token == "ghp_fromenv"
    assert cfg.profile.url == "https://github.com"
    assert cfg.profile.username is None


def test_missing_token_exits_with_auth_error(monkeypatch, tmp_path) -> None:
    monkeypatch.delenv("GITLAB_TOKEN", raising=False)

    with pytest.raises(SystemExit) as excinfo:
        build_config(["--provider", "gitlab", "--dest", str(tmp_path)])

    assert excinfo.value.code == EXIT_AUTH_ERROR


def test_malformed_url_exits_with_argument_error(tmp_path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        build_config(
            ["--provider", "github", "--url", "ftp://x", "--token", "t", "--dest", str(tmp_path)]
        )

    assert excinfo.value.code == EXIT_MISSING_ARGUMENTS
