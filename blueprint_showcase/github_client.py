"""HTTP client for the GitHub REST endpoints used to enrich the page."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Any
from urllib.parse import quote

import httpx

from .config import GitHubSettings, RateLimitInfo, UTC
from .errors import RateLimitError, ShapeError, TransportError
from .models import RepoMeta, Repository, load_repositories

LOGGER = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = "GitHub rate limit exceeded. Please try again later."


class GitHubClient:
    """Light-weight REST client with rate-limit detection.

    Requests are never retried; a failure is reported to the caller once.
    Concurrent metadata lookups for the same repository share one request.
    """

    def __init__(self, settings: GitHubSettings, client: httpx.AsyncClient | None = None) -> None:
        self._settings = settings
        self._base_url = settings.api_url.rstrip("/")
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": "blueprint-showcase",
        }
        if settings.token:
            headers["Authorization"] = f"Bearer {settings.token}"
        self._client = client or httpx.AsyncClient(
            headers=headers,
            timeout=settings.request_timeout,
        )
        self._owns_client = client is None
        self._headers = headers
        self._in_flight: dict[str, asyncio.Future[RepoMeta]] = {}

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # type: ignore[override]
        await self.close()

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def list_org_repositories(self, org: str | None = None) -> list[Repository]:
        """Return the organization's repositories, most recently updated first."""

        org = org or self._settings.org
        try:
            payload = await self._get_json(
                f"/orgs/{quote(org, safe='')}/repos",
                params={"per_page": self._settings.per_page, "sort": "updated"},
            )
        except ShapeError as exc:
            LOGGER.warning("Ignoring malformed repository list for %s: %s", org, exc)
            return []
        if not isinstance(payload, list):
            LOGGER.warning("Repository list for %s is not an array", org)
            return []
        repositories = load_repositories(payload)
        LOGGER.debug("Fetched %s repositories for %s", len(repositories), org)
        return repositories

    async def get_repository_meta(self, repo_path: str) -> RepoMeta:
        """Fetch language, stars, forks and last update for ``owner/repo``."""

        repo_path = (repo_path or "").strip()
        if not repo_path:
            raise ValueError("Missing repository path")

        future = self._in_flight.get(repo_path)
        if future is None:
            future = asyncio.ensure_future(self._fetch_repository_meta(repo_path))
            self._in_flight[repo_path] = future
            future.add_done_callback(lambda done: self._forget(repo_path, done))
        else:
            LOGGER.debug("Joining in-flight request for %s", repo_path)
        return await asyncio.shield(future)

    def _forget(self, repo_path: str, future: asyncio.Future[RepoMeta]) -> None:
        if self._in_flight.get(repo_path) is future:
            del self._in_flight[repo_path]

    async def _fetch_repository_meta(self, repo_path: str) -> RepoMeta:
        payload = await self._get_json(f"/repos/{repo_path}")
        return RepoMeta.from_payload(payload)

    async def _get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        try:
            response = await self._client.get(
                f"{self._base_url}{path}",
                params=params,
                headers=self._headers,
            )
        except httpx.RequestError as exc:
            LOGGER.warning("GitHub request error: %s", exc)
            raise TransportError("GitHub request failed (network error).") from exc

        if not response.is_success:
            if response.status_code == 403 and response.headers.get("x-ratelimit-remaining") == "0":
                rate_limit = _rate_limit_info(response)
                LOGGER.warning(
                    "GitHub rate limit exhausted; resets at %s",
                    rate_limit.reset_at.isoformat() if rate_limit.reset_at else "unknown",
                )
                raise RateLimitError(RATE_LIMIT_MESSAGE, rate_limit)
            LOGGER.info("GitHub HTTP %s for %s", response.status_code, path)
            raise TransportError(
                f"GitHub request failed ({response.status_code}).",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as exc:
            raise ShapeError(f"GitHub response for {path} is not JSON") from exc


def _rate_limit_info(response: httpx.Response) -> RateLimitInfo:
    return RateLimitInfo(
        limit=_int_header(response, "x-ratelimit-limit"),
        remaining=_int_header(response, "x-ratelimit-remaining") or 0,
        reset_at=_parse_reset(response.headers.get("x-ratelimit-reset")),
    )


def _int_header(response: httpx.Response, name: str) -> int | None:
    value = response.headers.get(name)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _parse_reset(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromtimestamp(int(value), tz=UTC)
    except (ValueError, OverflowError, OSError):
        return None


__all__ = ["GitHubClient", "RATE_LIMIT_MESSAGE"]
