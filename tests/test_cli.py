from __future__ import annotations

from typer.testing import CliRunner

from blueprint_showcase.cache import FileStorage
from blueprint_showcase.cli import app

KEYS = ("blueprintProductsCache:v2", "blueprintGithubReposCache:v2", "webAppsGithubRepoMetaCache:v1")


def test_clear_cache_removes_every_cached_payload(tmp_path):
    storage = FileStorage(tmp_path)
    for key in KEYS:
        storage.set_item(key, '{"ts": 1, "items": []}')
    storage.set_item("unrelated", "{}")

    result = CliRunner().invoke(app, ["clear-cache", "--cache-dir", str(tmp_path), "--log-level", "WARNING"])

    assert result.exit_code == 0, result.output
    assert "Cleared cache" in result.output
    assert all(storage.get_item(key) is None for key in KEYS)
    assert storage.get_item("unrelated") == "{}"
