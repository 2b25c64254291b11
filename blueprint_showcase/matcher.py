"""Attach GitHub repositories to catalog products."""

from __future__ import annotations

import logging
from typing import Iterable, Sequence
from urllib.parse import urlsplit

from .models import EnrichedProduct, Product, Repository, safe_url
from .repo_index import RepositoryIndex, normalize_repo_key

LOGGER = logging.getLogger(__name__)


def repo_candidates(product: Product) -> list[str]:
    """Name keys that may identify ``product``'s repository, best guess first."""

    candidates: list[str] = []
    if product.name:
        candidates.append(normalize_repo_key(product.name))
        if product.is_theme:
            candidates.append(normalize_repo_key(f"{product.name}-Theme"))
            candidates.append(normalize_repo_key(f"{product.name} Theme"))
    if product.identifier:
        candidates.append(normalize_repo_key(product.identifier))

    return [key for key in dict.fromkeys(candidates) if key]


def explicit_github_url(product: Product) -> str | None:
    offer = product.platforms.get("GITHUB")
    return safe_url(offer.url) if offer else None


def repo_key_from_github_url(url: str | None, org: str) -> str | None:
    """Return the repository name key for ``https://github.com/<org>/<repo>``."""

    href = safe_url(url)
    if not href:
        return None
    parts = urlsplit(href)
    if (parts.hostname or "").lower() != "github.com":
        return None

    segments = [segment for segment in parts.path.split("/") if segment]
    if len(segments) < 2:
        return None
    owner, repo = segments[0], segments[1]
    if owner.lower() != org.lower():
        return None
    return normalize_repo_key(repo) or None


class ProductMatcher:
    """Resolves each product to at most one repository of ``org``.

    A GitHub link declared on the product always takes precedence over name
    guessing; guessing only runs when there is no declared link or the declared
    repository is not indexed.
    """

    def __init__(self, org: str) -> None:
        self._org = org

    def resolve(self, product: Product, index: RepositoryIndex) -> Repository | None:
        explicit = explicit_github_url(product)
        if explicit:
            repo = index.get(repo_key_from_github_url(explicit, self._org))
            if repo is not None:
                return repo
        return self.infer(product, index)

    def infer(self, product: Product, index: RepositoryIndex) -> Repository | None:
        for key in repo_candidates(product):
            repo = index.get(key)
            if repo is not None and repo.html_url:
                return repo
        return None

    def enrich(self, product: Product, index: RepositoryIndex) -> EnrichedProduct:
        return _enriched(product, self.resolve(product, index))

    def attach(
        self,
        products: Sequence[Product] | None,
        repositories: Iterable[Repository] | None,
    ) -> list[EnrichedProduct]:
        """Enrich every product using a freshly built index of ``repositories``."""

        index = RepositoryIndex(repositories)
        claimed: dict[str, Product] = {}
        enriched: list[EnrichedProduct] = []
        for product in products or ():
            repo = self.resolve(product, index)
            if repo is not None:
                owner = claimed.setdefault(repo.name, product)
                if owner is not product:
                    LOGGER.warning(
                        "Products %r and %r both resolve to repository %r",
                        owner.name,
                        product.name,
                        repo.name,
                    )
            enriched.append(_enriched(product, repo))
        return enriched


def _enriched(product: Product, repo: Repository | None) -> EnrichedProduct:
    github_url = explicit_github_url(product) or (repo.html_url if repo else None)
    return EnrichedProduct(
        product=product,
        github_url=github_url,
        github_stars=repo.stargazers_count if repo else None,
        github_forks=repo.forks_count if repo else None,
    )


__all__ = ["ProductMatcher", "explicit_github_url", "repo_candidates", "repo_key_from_github_url"]
