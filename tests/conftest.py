"""Shared fixtures."""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

import pytest

from security import SecurityValidator


@pytest.fixture(autouse=True)
def _forget_registered_secrets():
    yield
    SecurityValidator.forget_secrets()


def make_response(status: int = 200, body: Any = None, text: str = "") -> MagicMock:
    """Stand-in for a requests.Response."""
    response = MagicMock()
    response.status_code = status
    response.text = text
    if isinstance(body, Exception):
        response.json.side_effect = body
    else:
        response.json.return_value = body if body is not None else []
    return response


def make_session(routes: dict) -> MagicMock:
    """Session whose get() serves ``routes[url][page - 1]``.

    Route values are lists of page bodies or a make_response() result that
    is returned for every page.
    """
    session = MagicMock()

    def get(url, params=None, headers=None, timeout=None):
        page = (params or {}).get("page", 1)
        if url not in routes:
            raise AssertionError(f"unexpected request: {url}")
        route = routes[url]
        if not isinstance(route, list):
            return route
        if page > len(route):
            return make_response(body=[])
        return make_response(body=route[page - 1])

    session.get.side_effect = get
    return session
