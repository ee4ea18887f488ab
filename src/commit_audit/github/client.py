"""Async GitHub REST client for organisations, repositories and commits."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any

import httpx

from ..models import parse_timestamp
from .rate_limit import RateLimitMonitor

logger = logging.getLogger(__name__)

API_URL = "https://api.github.com"
PER_PAGE = 100
MAX_ATTEMPTS = 3


def to_api_time(value: datetime) -> str:
    """Format a boundary as the UTC ISO-8601 string GitHub expects."""
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _author_date(commit: dict[str, Any]) -> datetime:
    return parse_timestamp(commit["commit"]["author"]["date"])


class GitHubClient:
    """Thin wrapper over :class:`httpx.AsyncClient`.

    Use as an async context manager::

        async with GitHubClient(token) as client:
            repos = await client.list_repos("my-org")
    """

    def __init__(
        self,
        token: str,
        base_url: str = API_URL,
        transport: httpx.AsyncBaseTransport | None = None,
        retry_delay: float = 1.0,
    ):
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={
                "Authorization": f"token {token}",
                "Accept": "application/vnd.github.v3+json",
            },
            timeout=30.0,
            transport=transport,
        )
        self._rate_limit = RateLimitMonitor()
        self._retry_delay = retry_delay

    async def __aenter__(self) -> GitHubClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """GET ``path`` and return decoded JSON, retrying transient failures."""
        for attempt in range(1, MAX_ATTEMPTS + 1):
            await self._rate_limit.wait_if_needed()
            try:
                response = await self._client.get(path, params=params)
            except httpx.TransportError as e:
                if attempt == MAX_ATTEMPTS:
                    raise
                logger.debug("GET %s failed (%s), retrying", path, e)
            else:
                self._rate_limit.update(response)
                if response.status_code < 500 or attempt == MAX_ATTEMPTS:
                    response.raise_for_status()
                    return response.json()
                logger.debug("GET %s returned %d, retrying", path, response.status_code)
            await asyncio.sleep(self._retry_delay * 2 ** (attempt - 1))

    async def list_repos(self, org: str) -> list[dict[str, Any]]:
        repos: list[dict[str, Any]] = []
        page = 1
        while True:
            data = await self._get(
                f"/orgs/{org}/repos",
                params={"per_page": PER_PAGE, "page": page, "sort": "updated", "direction": "desc"},
            )
            repos.extend(data)
            if len(data) < PER_PAGE:
                return repos
            page += 1

    async def list_commits(
        self, owner: str, repo: str, since: datetime, until: datetime
    ) -> list[dict[str, Any]]:
        """List commits whose author date lies within ``[since, until]``.

        GitHub filters on committer date, so results are re-checked against
        the author date. Pages arrive newest first.
        """
        since_utc = since.astimezone(timezone.utc)
        until_utc = until.astimezone(timezone.utc)
        commits: list[dict[str, Any]] = []
        page = 1
        while True:
            data = await self._get(
                f"/repos/{owner}/{repo}/commits",
                params={
                    "since": to_api_time(since),
                    "until": to_api_time(until),
                    "per_page": PER_PAGE,
                    "page": page,
                },
            )
            commits.extend(c for c in data if since_utc <= _author_date(c) <= until_utc)
            if len(data) < PER_PAGE or _author_date(data[-1]) < since_utc:
                return commits
            page += 1

    async def get_commit(self, owner: str, repo: str, sha: str) -> dict[str, Any]:
        return await self._get(f"/repos/{owner}/{repo}/commits/{sha}")
