#!/usr/bin/env python3
"""Command line argument parsing and configuration building."""

from __future__ import annotations

import argparse
import os
import sys
from typing import Optional

from config import Config, GitLabFetchMode, Profile, ProviderKind, SyncOptions
from errors import EXIT_AUTH_ERROR, EXIT_MISSING_ARGUMENTS, InvalidURL
from logging_utils import Logger
from security import SecurityValidator

TOKEN_ENV_VARS = {
    ProviderKind.GITHUB: "GITHUB_TOKEN",
    ProviderKind.GITLAB: "GITLAB_TOKEN",
}
DEFAULT_URLS = {
    ProviderKind.GITHUB: "https://github.com",
    ProviderKind.GITLAB: "https://gitlab.com",
}


def _create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        description="Mirror every GitHub or GitLab repository a token can access",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --provider github --url https://github.com/octocat --dest ~/mirrors
  %(prog)s --provider gitlab --username me --gitlab-mode bash-style
  %(prog)s --provider gitlab --url https://gitlab.company.com --dry-run
  %(prog)s --provider github --url https://github.com/octocat/hello.git --single
        """,
    )
    return parser


def _add_profile_arguments(parser: argparse.ArgumentParser) -> None:
    """Add profile-related arguments to parser."""
    parser.add_argument(
        "--provider",
        dest="provider",
        choices=[kind.value for kind in ProviderKind],
        required=True,
        help="Hosted Git provider",
    )
    parser.add_argument(
        "--url",
        dest="url",
        help="Base URL of the account (default: provider host)",
    )
    parser.add_argument(
        "--token",
        dest="token",
        help="API token (or set GITHUB_TOKEN / GITLAB_TOKEN env var)",
    )
    parser.add_argument(
        "--username",
        dest="username",
        help="Username for HTTPS git auth (or set GITLAB_USERNAME env var)",
    )
    parser.add_argument(
        "--name",
        dest="name",
        help="Profile name, used as the mirror root when the URL has no path",
    )
    parser.add_argument(
        "--gitlab-mode",
        dest="gitlab_mode",
        choices=[mode.value for mode in GitLabFetchMode],
        default=GitLabFetchMode.RECURSIVE.value,
        help="GitLab discovery strategy (default: recursive)",
    )


def _add_behavior_arguments(parser: argparse.ArgumentParser) -> None:
    """Add behavior and configuration arguments to parser."""
    parser.add_argument(
        "--dest",
        dest="dest",
        default=os.getenv("REPO_MIRROR_DIR", os.path.join("~", "Database")),
        help="Local directory holding the mirrors (or set REPO_MIRROR_DIR)",
    )
    parser.add_argument(
        "--git-binary",
        dest="git_binary",
        default="git",
        help="git executable to invoke (default: git)",
    )
    parser.add_argument(
        "--git-timeout",
        dest="git_timeout_s",
        type=float,
        default=900.0,
        help="Seconds before a single git command is abandoned (default: 900)",
    )
    parser.add_argument(
        "--requests-per-minute",
        dest="requests_per_minute",
        type=int,
        default=120,
        help="API request budget per minute (default: 120)",
    )
    parser.add_argument(
        "-e",
        "--exclude",
        dest="exclude",
        help="Skip repositories whose owner/name contains this pattern",
    )
    parser.add_argument(
        "-d",
        "--dry-run",
        action="store_true",
        dest="dry_run",
        help="List actions without doing them",
    )
    parser.add_argument(
        "--single",
        action="store_true",
        dest="single",
        help="Mirror-clone only the repository the --url points at",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        dest="verbose",
        help="Show debug output",
    )


def _validate_parsed_arguments(args) -> SyncOptions:
    """Validate behavior arguments and build sync options."""
    try:
        dest = SecurityValidator.validate_file_path(args.dest)
        if args.git_timeout_s <= 0:
            raise ValueError("git timeout must be positive")
        if args.requests_per_minute < 1:
            raise ValueError("requests per minute must be at least 1")
        if args.exclude and len(args.exclude) > 100:
            raise ValueError("exclude pattern too long (max 100 characters)")
    except ValueError as e:
        Logger.security_event(
            "CONFIG_VALIDATION_FAILED", f"configuration validation failed: {e}"
        )
        Logger.error(f"configuration validation error: {e}")
        sys.exit(EXIT_MISSING_ARGUMENTS)

    return SyncOptions(
        base_dir=dest,
        git_binary=args.git_binary,
        git_timeout_s=args.git_timeout_s,
        exclude=args.exclude,
        dry_run=args.dry_run,
        single=args.single,
        requests_per_minute=args.requests_per_minute,
    )


def validate_base_url(url: str) -> str:
    """Return the normalized base URL or raise InvalidURL."""
    try:
        return SecurityValidator.validate_url(url, ["https", "http"])
    except ValueError as e:
        raise InvalidURL(url, str(e)) from e


def _get_and_validate_credentials(args, kind: ProviderKind) -> tuple:
    """Get the token and optional username."""
    env_var = TOKEN_ENV_VARS[kind]
    token = args.token or os.getenv(env_var)
    if not token:
        Logger.error(
            f"error: {kind.value} access token missing (use --token or {env_var})"
        )
        sys.exit(EXIT_AUTH_ERROR)

    username: Optional[str] = args.username
    if not username and kind == ProviderKind.GITLAB:
        username = os.getenv("GITLAB_USERNAME")
    if username:
        try:
            username = SecurityValidator.validate_username(username)
        except ValueError as e:
            Logger.security_event(
                "USERNAME_VALIDATION_FAILED", f"username validation failed: {e}"
            )
            Logger.error(f"username validation error: {e}")
            sys.exit(EXIT_AUTH_ERROR)
    return token, username or None


def build_config(argv=None) -> Config:
    """Parse command line arguments and return configuration object."""
    parser = _create_argument_parser()
    _add_profile_arguments(parser)
    _add_behavior_arguments(parser)

    args = parser.parse_args(argv)
    Logger.verbose = args.verbose

    kind = ProviderKind(args.provider)
    try:
        url = validate_base_url(args.url or DEFAULT_URLS[kind])
    except InvalidURL as e:
        Logger.error(str(e))
        sys.exit(EXIT_MISSING_ARGUMENTS)

    options = _validate_parsed_arguments(args)
    token, username = _get_and_validate_credentials(args, kind)

    profile = Profile(
        name=args.name or kind.value,
        token=token,
        url=url,
        kind=kind,
        username=username,
        gitlab_fetch_mode=GitLabFetchMode(args.gitlab_mode),
    )
    return Config(profile=profile, options=options)


def parse_arguments() -> Config:
    return build_config()
