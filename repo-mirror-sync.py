#!/usr/bin/env python3
"""
Repo Mirror Sync - Mirror every repository a GitHub or GitLab token can
access into a local directory tree.

Repositories are discovered through the provider REST API (personal repos,
organizations, GitLab groups and subgroups). Absent repositories are cloned,
present ones are pulled, and a failure on one repository never stops the
rest of the run.
"""

from __future__ import annotations

import sys
from typing import NoReturn

from argument_parser import parse_arguments
from errors import EXIT_EXECUTION_ERROR
from sync_orchestrator import SyncOrchestrator


def main() -> NoReturn:
    if __name__ != "__main__":
        sys.exit(EXIT_EXECUTION_ERROR)

    cfg = parse_arguments()
    orchestrator = SyncOrchestrator(cfg)
    sys.exit(orchestrator.run())


if __name__ == "__main__":
    main()
