"""GitHub REST API client implementing the repo-insights data source."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any, TypeVar

import httpx

from ..errors import NotFoundError, TransientError
from ..models import Commit, ContributorRecord, RepositoryRef
from .parsing import parse_commit, parse_contributor, parse_repository
from .rate_limit import RateLimitMonitor

logger = logging.getLogger(__name__)

BASE_URL = "https://api.github.com"

T = TypeVar("T")


def _parse_all(parser: Callable[[dict[str, Any]], T], items: list[Any], what: str) -> list[T]:
    try:
        return [parser(item) for item in items]
    except (KeyError, TypeError, ValueError) as exc:
        raise TransientError(f"malformed {what} payload: {exc}") from exc


class GitHubClient:
    """Async GitHub REST API client with rate limit support."""

    def __init__(
        self,
        token: str | None = None,
        concurrency: int = 5,
        base_url: str | None = None,
        verify_ssl: bool = True,
        timeout: float = 30.0,
    ) -> None:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.AsyncClient(
            base_url=base_url or BASE_URL,
            headers=headers,
            timeout=timeout,
            verify=verify_ssl,
        )
        self._rate_limit = RateLimitMonitor()
        self._semaphore = asyncio.Semaphore(concurrency)

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> GitHubClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    async def _get(
        self, url: str, params: dict[str, Any] | None = None
    ) -> httpx.Response:
        """GET ``url``; transport failures and 4xx/5xx become TransientError."""
        async with self._semaphore:
            await self._rate_limit.wait_if_needed()
            try:
                response = await self._client.get(url, params=params)
            except httpx.RequestError as exc:
                raise TransientError(f"request to {url} failed: {exc}") from exc
            self._rate_limit.update(response)
            try:
                response.raise_for_status()
            except httpx.HTTPStatusError as exc:
                status = exc.response.status_code
                raise TransientError(
                    f"GitHub API returned {status} for {url}", status=status
                ) from exc
            return response

    async def _get_json(self, url: str, params: dict[str, Any] | None = None) -> Any:
        response = await self._get(url, params)
        if response.status_code == 204:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise TransientError(f"invalid JSON from {url}") from exc

    async def get_repository_by_id(self, repo_id: int) -> RepositoryRef:
        """Look a repository up by its numeric id."""
        try:
            data = await self._get_json(f"/repositories/{repo_id}")
        except TransientError as exc:
            if exc.status == 404:
                raise NotFoundError(f"repository {repo_id} not found") from exc
            raise
        if not isinstance(data, dict):
            raise TransientError(f"unexpected payload for repository {repo_id}")
        return _parse_all(parse_repository, [data], "repository")[0]

    async def list_commits(self, owner: str, name: str, limit: int = 100) -> list[Commit]:
        """The most recent ``limit`` commits (one page, at most 100)."""
        per_page = max(1, min(limit, 100))
        try:
            data = await self._get_json(
                f"/repos/{owner}/{name}/commits", params={"per_page": per_page}
            )
        except TransientError as exc:
            # 409: repository is empty
            if exc.status == 409:
                return []
            raise
        if not isinstance(data, list):
            return []
        return _parse_all(parse_commit, data[:limit], "commit")

    async def get_contributors_page(
        self, owner: str, name: str, page_size: int = 100, page_index: int = 1
    ) -> list[ContributorRecord]:
        """One page of contributors, anonymous authors included."""
        data = await self._get_json(
            f"/repos/{owner}/{name}/contributors",
            params={"anon": "1", "per_page": page_size, "page": page_index},
        )
        # 204: repository has no contributors
        if not isinstance(data, list):
            return []
        return _parse_all(parse_contributor, data, "contributor")

    async def get_languages(self, owner: str, name: str) -> dict[str, int]:
        """Language breakdown (bytes) for a repository."""
        data = await self._get_json(f"/repos/{owner}/{name}/languages")
        if not isinstance(data, dict):
            return {}
        try:
            return {lang: int(b) for lang, b in data.items()}
        except (KeyError, TypeError, ValueError) as exc:
            raise TransientError(f"malformed languages payload: {exc}") from exc
