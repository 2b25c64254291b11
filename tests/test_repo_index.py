from __future__ import annotations

import pytest

from blueprint_showcase.repo_index import RepositoryIndex, normalize_repo_key

from conftest import make_repo


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("Nebula", "nebula"),
        ("  Nebula  Theme! ", "nebula-theme"),
        ("--Blueprint__Recolor--", "blueprint-recolor"),
        ("Über Theme", "ber-theme"),
        ("", ""),
        (None, ""),
    ],
)
def test_normalize_repo_key(value, expected):
    assert normalize_repo_key(value) == expected


def test_index_skips_archived_forked_and_unlinked_repositories():
    index = RepositoryIndex(
        [
            make_repo("Nebula"),
            make_repo("Old-Theme", archived=True),
            make_repo("Upstream", fork=True),
            make_repo("Unlinked", html_url=None),
            make_repo("***"),
        ]
    )

    assert len(index) == 1
    assert index.get("nebula").name == "Nebula"
    for key in ("old-theme", "upstream", "unlinked", "", None, "missing"):
        assert index.get(key) is None


def test_later_duplicate_key_wins_and_is_logged(caplog):
    with caplog.at_level("WARNING"):
        index = RepositoryIndex([make_repo("Nebula-Theme", stars=1), make_repo("nebula_theme", stars=9)])

    assert index.get("nebula-theme").stargazers_count == 9
    assert "share name key" in caplog.text


def test_index_accepts_missing_input():
    assert len(RepositoryIndex(None)) == 0
    assert len(RepositoryIndex([])) == 0
