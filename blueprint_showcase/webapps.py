"""Fill web application cards with live GitHub repository metadata."""

from __future__ import annotations

import asyncio
import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Protocol

from bs4 import Tag

from .cache import KeyValueStorage
from .errors import ShapeError, StorageError
from .models import RepoMeta
from .page import Page, toggle_class
from .render import format_count, format_date
from .templates import render_template

LOGGER = logging.getLogger(__name__)

META_SELECTOR = "[data-github-meta][data-github-repo]"


class RepoMetaSource(Protocol):
    async def get_repository_meta(self, repo_path: str) -> RepoMeta: ...


class RepoMetaCache:
    """Per-repository metadata stored as one ``{path: {ts, ...meta}}`` blob."""

    def __init__(
        self,
        storage: KeyValueStorage,
        key: str,
        *,
        ttl_seconds: float,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._storage = storage
        self._key = key
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries = self._read()

    def _read(self) -> dict[str, Any]:
        try:
            raw = self._storage.get_item(self._key)
            parsed = json.loads(raw) if raw else {}
        except (StorageError, ValueError) as exc:
            LOGGER.debug("Ignoring repository metadata cache: %s", exc)
            return {}
        return parsed if isinstance(parsed, dict) else {}

    def get(self, repo_path: str) -> RepoMeta | None:
        entry = self._entries.get(repo_path)
        if not isinstance(entry, dict):
            return None
        ts = entry.get("ts")
        if isinstance(ts, bool) or not isinstance(ts, (int, float)) or ts <= 0:
            return None
        if self._clock() - ts > self._ttl:
            return None
        try:
            return RepoMeta.from_payload(entry)
        except ShapeError:
            return None

    def set(self, repo_path: str, meta: RepoMeta) -> None:
        self._entries[repo_path] = {"ts": self._clock(), **meta.to_payload()}
        try:
            self._storage.set_item(self._key, json.dumps(self._entries))
        except StorageError as exc:
            LOGGER.debug("Repository metadata cache write failed: %s", exc)


@dataclass(slots=True)
class HydrationResult:
    from_cache: int = 0
    fetched: int = 0
    failed: int = 0


class WebAppsHydrator:
    """Renders stars, forks, language and last update into web app cards.

    Elements are grouped by ``data-github-repo`` so each repository is fetched
    at most once, and elements whose fetch fails stay hidden.
    """

    def __init__(self, page: Page, github: RepoMetaSource, cache: RepoMetaCache) -> None:
        self._page = page
        self._github = github
        self._cache = cache

    def _group_elements(self) -> dict[str, list[Tag]]:
        groups: dict[str, list[Tag]] = {}
        for element in self._page.select(META_SELECTOR):
            repo_path = str(element.get("data-github-repo") or "").strip()
            if repo_path:
                groups.setdefault(repo_path, []).append(element)
        return groups

    def render_meta(self, element: Tag, meta: RepoMeta) -> None:
        html = render_template(
            "repo_meta.html",
            meta=meta,
            stars=format_count(meta.stars),
            forks=format_count(meta.forks),
            updated=format_date(meta.updated_at) if meta.updated_at else None,
        )
        self._page.set_inner_html(element, html)
        toggle_class(element, "hidden", False)

    async def hydrate(self) -> HydrationResult:
        result = HydrationResult()
        groups = self._group_elements()
        if not groups:
            return result

        pending: dict[str, list[Tag]] = {}
        for repo_path, elements in groups.items():
            cached = self._cache.get(repo_path)
            if cached is None:
                pending[repo_path] = elements
                continue
            for element in elements:
                self.render_meta(element, cached)
            result.from_cache += 1

        if pending:
            await asyncio.gather(*(self._hydrate_group(path, elements, result) for path, elements in pending.items()))
        LOGGER.info(
            "Web app metadata: %s cached, %s fetched, %s failed",
            result.from_cache,
            result.fetched,
            result.failed,
        )
        return result

    async def _hydrate_group(self, repo_path: str, elements: list[Tag], result: HydrationResult) -> None:
        try:
            meta = await self._github.get_repository_meta(repo_path)
        except Exception as exc:  # any failure just leaves the chips hidden
            LOGGER.warning("Metadata for %s unavailable: %s", repo_path, exc)
            for element in elements:
                toggle_class(element, "hidden", True)
            result.failed += 1
            return

        self._cache.set(repo_path, meta)
        for element in elements:
            self.render_meta(element, meta)
        result.fetched += 1


__all__ = ["HydrationResult", "META_SELECTOR", "RepoMetaCache", "WebAppsHydrator"]
