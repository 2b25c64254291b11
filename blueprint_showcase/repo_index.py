"""Lookup of organization repositories by normalized name."""

from __future__ import annotations

import logging
import re
from typing import Any, Iterable, Iterator

from .models import Repository

LOGGER = logging.getLogger(__name__)

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def normalize_repo_key(value: Any) -> str:
    """Lowercase ``value`` and collapse every non-alphanumeric run to one hyphen.

    >>> normalize_repo_key("  Nebula  Theme! ")
    'nebula-theme'
    """

    text = str(value or "").strip().lower()
    return _NON_ALNUM.sub("-", text).strip("-")


class RepositoryIndex:
    """Maps name keys to repositories that can be linked from a product.

    Archived and forked repositories, and entries without a usable name or
    ``html_url``, are never indexed. A later repository normalizing to an
    existing key replaces the earlier one.
    """

    def __init__(self, repositories: Iterable[Repository] | None = None) -> None:
        self._by_key: dict[str, Repository] = {}
        for repo in repositories or ():
            self._add(repo)

    def _add(self, repo: Repository) -> None:
        if repo.archived or repo.fork:
            return
        key = normalize_repo_key(repo.name)
        if not key or not repo.html_url:
            return
        previous = self._by_key.get(key)
        if previous is not None and previous.name != repo.name:
            LOGGER.warning(
                "Repositories %r and %r share name key %r; keeping %r",
                previous.name,
                repo.name,
                key,
                repo.name,
            )
        self._by_key[key] = repo

    def get(self, key: str | None) -> Repository | None:
        if not key:
            return None
        return self._by_key.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self._by_key

    def __len__(self) -> int:
        return len(self._by_key)

    def __iter__(self) -> Iterator[Repository]:
        return iter(self._by_key.values())


__all__ = ["RepositoryIndex", "normalize_repo_key"]
