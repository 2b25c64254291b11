"""Cache-first rendering of the product grids followed by a background refresh."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Any, Protocol

from .cache import CacheStore
from .config import AppConfig
from .errors import ShowcaseError
from .matcher import ProductMatcher
from .models import Product, Repository, load_products, load_repositories
from .render import ProductsView

LOGGER = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Unable to load products at this time."
EMPTY_MESSAGE = "No Blueprint products found yet."


class PaintState(Enum):
    BLANK = "blank"
    PAINTED_FROM_CACHE = "painted-from-cache"
    PAINTED_FROM_FRESH = "painted-from-fresh"
    EMPTY = "empty"
    ERROR = "error"


class ProductSource(Protocol):
    async def fetch_products(self) -> list[Product]: ...


class RepositorySource(Protocol):
    async def list_org_repositories(self, org: str | None = None) -> list[Repository]: ...


class ProductsPipeline:
    """Paints cached products immediately, then reconciles with fresh data.

    The catalog and the repository list are fetched concurrently and each
    outcome is handled on its own. A failed or empty catalog never replaces a
    page that was already painted from cache; a failed repository fetch never
    produces an error state.
    """

    def __init__(
        self,
        config: AppConfig,
        view: ProductsView,
        catalog: ProductSource,
        github: RepositorySource,
        products_cache: CacheStore,
        repos_cache: CacheStore,
    ) -> None:
        self._config = config
        self._view = view
        self._catalog = catalog
        self._github = github
        self._products_cache = products_cache
        self._repos_cache = repos_cache
        self._matcher = ProductMatcher(config.github.org)
        self.state = PaintState.BLANK

    async def run(self) -> PaintState:
        if not self._view.has_grids:
            LOGGER.info("Page has no product grids; nothing to render")
            return self.state

        cached = load_products(self._products_cache.load(self._config.catalog.cache_key))
        cached_repos = load_repositories(self._repos_cache.load(self._config.github.cache_key))

        if cached:
            LOGGER.info("Painting %s cached products", len(cached))
            self._paint(cached, cached_repos, PaintState.PAINTED_FROM_CACHE)

        products_result, repos_result = await asyncio.gather(
            self._catalog.fetch_products(),
            self._github.list_org_repositories(self._config.github.org),
            return_exceptions=True,
        )

        fresh_repos = self._settle_repositories(repos_result)
        repos_for_links = fresh_repos or cached_repos

        if isinstance(products_result, BaseException):
            return self._on_products_failed(_reraise_fatal(products_result), cached, fresh_repos, repos_for_links)
        return self._on_products_loaded(products_result, repos_for_links)

    def _settle_repositories(self, result: Any) -> list[Repository]:
        if isinstance(result, BaseException):
            LOGGER.warning("Repository fetch failed: %s", _reraise_fatal(result))
            return []
        if result:
            self._repos_cache.save(self._config.github.cache_key, [repo.to_payload() for repo in result])
        return list(result)

    def _on_products_loaded(self, items: list[Product], repos: list[Repository]) -> PaintState:
        if not items:
            if self.state is PaintState.PAINTED_FROM_CACHE:
                LOGGER.info("Catalog came back empty; keeping cached products on the page")
                return self.state
            self._view.render_error(EMPTY_MESSAGE)
            self.state = PaintState.EMPTY
            return self.state

        self._products_cache.save(self._config.catalog.cache_key, [product.to_payload() for product in items])
        self._paint(items, repos, PaintState.PAINTED_FROM_FRESH)
        return self.state

    def _on_products_failed(
        self,
        error: Exception,
        cached: list[Product],
        fresh_repos: list[Repository],
        repos: list[Repository],
    ) -> PaintState:
        LOGGER.warning("Catalog fetch failed: %s", error)
        if self.state is PaintState.PAINTED_FROM_CACHE:
            if fresh_repos:
                self._paint(cached, repos, PaintState.PAINTED_FROM_CACHE)
            return self.state

        message = str(error) if isinstance(error, ShowcaseError) and str(error) else GENERIC_ERROR_MESSAGE
        self._view.render_error(message)
        self.state = PaintState.ERROR
        return self.state

    def _paint(self, products: list[Product], repos: list[Repository], state: PaintState) -> None:
        self._view.render_all(self._matcher.attach(products, repos))
        self.state = state


def _reraise_fatal(error: BaseException) -> Exception:
    if not isinstance(error, Exception):
        raise error
    return error


__all__ = ["PaintState", "ProductsPipeline", "GENERIC_ERROR_MESSAGE", "EMPTY_MESSAGE"]
