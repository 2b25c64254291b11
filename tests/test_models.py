from __future__ import annotations

from blueprint_showcase.models import Product, RepoMeta, Repository, load_products

from conftest import product_payload


def test_product_from_payload_keeps_only_known_fields():
    payload = product_payload(
        "Nebula",
        id=7,
        type="THEME",
        identifier="nebula",
        prices={"BUILTBYBIT": 9.99},
        currency="eur",
        panels=120,
        downloads=999,
        internal_notes="not for the page",
    )

    product = Product.from_payload(payload)
    data = product.to_payload()

    assert set(data) == {
        "id",
        "name",
        "identifier",
        "summary",
        "type",
        "banner",
        "platforms",
        "stats",
        "versions",
        "created",
    }
    assert product.is_theme is True
    assert product.banner == "https://cdn.example/7-low.png"
    assert product.panels == 120
    assert product.platforms["BUILTBYBIT"].currency == "EUR"
    assert product.platforms["BUILTBYBIT"].price == 9.99


def test_offer_narrowing_rejects_bad_values():
    payload = product_payload("Widget")
    payload["platforms"] = {
        "BUILTBYBIT": {"price": "not-a-number", "currency": None, "url": "javascript:alert(1)"},
        "SOURCEXCHANGE": "garbage",
    }

    product = Product.from_payload(payload)

    offer = product.platforms["BUILTBYBIT"]
    assert offer.price == 0
    assert offer.currency == ""
    assert offer.url is None
    assert "SOURCEXCHANGE" not in product.platforms


def test_latest_version_prefers_newest_created_date():
    payload = product_payload("Widget")
    payload["versions"] = [
        {"name": "1.0.0", "created": "2024-01-01T00:00:00Z"},
        {"name": "1.2.0", "created": "2024-05-01T00:00:00Z"},
        {"name": "1.1.0", "created": "2024-03-01T00:00:00Z"},
    ]

    assert Product.from_payload(payload).latest_version.name == "1.2.0"


def test_latest_version_falls_back_to_first_entry():
    payload = product_payload("Widget")
    payload["versions"] = [{"name": "2.0.0", "created": "soon"}, {"name": "1.0.0"}]

    assert Product.from_payload(payload).latest_version.name == "2.0.0"


def test_repository_from_payload_defaults_counts():
    repo = Repository.from_payload(
        {
            "name": "Nebula",
            "html_url": "https://github.com/EuphoriaTheme/Nebula",
            "stargazers_count": "12",
            "forks_count": None,
            "archived": 0,
            "owner": {"login": "EuphoriaTheme"},
        }
    )

    assert repo.stargazers_count == 0
    assert repo.forks_count == 0
    assert repo.archived is False
    assert repo.to_payload()["name"] == "Nebula"


def test_repo_meta_reads_api_and_cached_shapes():
    from_api = RepoMeta.from_payload({"language": None, "stargazers_count": 5, "forks_count": 2})
    from_cache = RepoMeta.from_payload({"ts": 1, **from_api.to_payload()})

    assert from_api.language == "Unknown"
    assert from_cache == from_api


def test_load_products_skips_malformed_records():
    products = load_products([product_payload("Widget"), "oops", None])

    assert [product.name for product in products] == ["Widget"]
    assert load_products({"not": "a list"}) == []
