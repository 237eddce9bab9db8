#!/usr/bin/env python3
"""Page walker for provider REST listing endpoints."""

from __future__ import annotations

import threading
from typing import Any, Dict, Iterator, List, Optional

import requests

from errors import APIError, SyncCancelled
from logging_utils import Logger
from utils import RateLimiter

PAGE_SIZE = 100


class Paginator:
    """Fetch every page of a listing endpoint as a flat stream of records.

    A walk stops at the first page holding fewer than ``per_page`` records.
    Bodies that are not a JSON array of objects end the walk quietly.
    """

    def __init__(
        self,
        session: requests.Session,
        token: str,
        *,
        per_page: int = PAGE_SIZE,
        timeout: float = 30,
        rate_limiter: Optional[RateLimiter] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> None:
        self.session = session
        self.token = token
        self.per_page = per_page
        self.timeout = timeout
        self.rate_limiter = rate_limiter
        self.cancel_event = cancel_event
        self.records_seen = 0

    def _headers(self) -> Dict[str, str]:
        return {
            "Accept": "application/json",
            "Authorization": f"Bearer {self.token}",
        }

    def iter_records(
        self, url: str, context: str, params: Optional[Dict[str, Any]] = None
    ) -> Iterator[Dict[str, Any]]:
        page = 1
        while True:
            records = self._fetch_page(url, context, params, page)
            self.records_seen += len(records)
            yield from records
            if len(records) < self.per_page:
                return
            page += 1

    def _fetch_page(
        self, url: str, context: str, params: Optional[Dict[str, Any]], page: int
    ) -> List[Dict[str, Any]]:
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise SyncCancelled(f"cancelled while listing {context}")

        query: Dict[str, Any] = {"per_page": self.per_page}
        query.update(params or {})
        if page > 1:
            query["page"] = page

        if self.rate_limiter is not None:
            self.rate_limiter.wait_if_needed(context)
        Logger.debug(f"GET {url} page {page}")
        try:
            response = self.session.get(
                url, params=query, headers=self._headers(), timeout=self.timeout
            )
        except requests.RequestException as e:
            raise APIError(context, None, str(e)) from e

        if response.status_code != 200:
            raise APIError(context, response.status_code, response.text)

        try:
            body = response.json()
        except ValueError:
            Logger.warn(f"{context}: response is not JSON, stopping at page {page}")
            return []
        if not isinstance(body, list) or not all(isinstance(r, dict) for r in body):
            Logger.warn(f"{context}: unexpected response shape, stopping at page {page}")
            return []
        return body
