from __future__ import annotations

import asyncio
import json

from blueprint_showcase.cache import MemoryStorage
from blueprint_showcase.errors import TransportError
from blueprint_showcase.models import RepoMeta
from blueprint_showcase.page import Page, has_class
from blueprint_showcase.webapps import RepoMetaCache, WebAppsHydrator

KEY = "webAppsGithubRepoMetaCache:v1"
TTL = 6 * 60 * 60

PAGE = """
<div class="card"><div id="a1" class="hidden" data-github-meta data-github-repo="EuphoriaTheme/panel"></div></div>
<div class="card"><div id="a2" class="hidden" data-github-meta data-github-repo=" EuphoriaTheme/panel "></div></div>
<div class="card"><div id="b" class="hidden" data-github-meta data-github-repo="EuphoriaTheme/broken"></div></div>
<div class="card"><div id="c" data-github-meta data-github-repo=""></div></div>
<div class="card"><div id="d" data-github-repo="EuphoriaTheme/ignored"></div></div>
"""


class FakeGitHub:
    def __init__(self, metas: dict[str, RepoMeta]) -> None:
        self._metas = metas
        self.calls: list[str] = []

    async def get_repository_meta(self, repo_path: str) -> RepoMeta:
        self.calls.append(repo_path)
        await asyncio.sleep(0)
        if repo_path not in self._metas:
            raise TransportError("GitHub request failed (404).", 404)
        return self._metas[repo_path]


META = RepoMeta(language="Python", stars=1234, forks=56, updated_at="2025-02-03T04:05:06Z")


def test_hydrator_fetches_each_repository_once(clock):
    page = Page(PAGE)
    storage = MemoryStorage()
    github = FakeGitHub({"EuphoriaTheme/panel": META})
    hydrator = WebAppsHydrator(page, github, RepoMetaCache(storage, KEY, ttl_seconds=TTL, clock=clock))

    result = asyncio.run(hydrator.hydrate())

    assert sorted(github.calls) == ["EuphoriaTheme/broken", "EuphoriaTheme/panel"]
    assert (result.from_cache, result.fetched, result.failed) == (0, 1, 1)
    for element_id in ("a1", "a2"):
        element = page.get_element_by_id(element_id)
        assert not has_class(element, "hidden")
        text = element.get_text(" ", strip=True)
        assert "Python" in text
        assert "1,234 stars" in text
        assert "56 forks" in text
        assert "Updated Feb 03, 2025" in text
    assert has_class(page.get_element_by_id("b"), "hidden")
    assert page.get_element_by_id("d").get_text() == ""

    stored = json.loads(storage.get_item(KEY))
    assert stored["EuphoriaTheme/panel"]["stars"] == 1234
    assert stored["EuphoriaTheme/panel"]["ts"] == clock.now
    assert "EuphoriaTheme/broken" not in stored


def test_cached_metadata_renders_without_fetching(clock):
    storage = MemoryStorage({KEY: json.dumps({"EuphoriaTheme/panel": {"ts": clock.now, **META.to_payload()}})})
    page = Page(PAGE)
    github = FakeGitHub({})
    hydrator = WebAppsHydrator(page, github, RepoMetaCache(storage, KEY, ttl_seconds=TTL, clock=clock))

    result = asyncio.run(hydrator.hydrate())

    assert github.calls == ["EuphoriaTheme/broken"]
    assert result.from_cache == 1
    assert "1,234 stars" in page.get_element_by_id("a1").get_text(" ", strip=True)


def test_meta_cache_expires_and_tolerates_garbage(clock):
    storage = MemoryStorage({KEY: json.dumps({"fresh": {"ts": clock.now, "language": "Go"}, "bad": "x"})})
    cache = RepoMetaCache(storage, KEY, ttl_seconds=60, clock=clock)

    assert cache.get("fresh").language == "Go"
    assert cache.get("bad") is None
    assert cache.get("missing") is None

    clock.now += 61
    assert cache.get("fresh") is None

    assert RepoMetaCache(MemoryStorage({KEY: "{broken"}), KEY, ttl_seconds=60, clock=clock).get("fresh") is None
