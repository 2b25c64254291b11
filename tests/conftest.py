from __future__ import annotations

from typing import Any

import pytest

from blueprint_showcase.models import Product, Repository


def product_payload(
    name: str,
    *,
    id: int = 1,
    type: str = "EXTENSION",
    identifier: str | None = None,
    prices: dict[str, float] | None = None,
    currency: str = "USD",
    panels: int = 0,
    github_url: str | None = None,
    **extra: Any,
) -> dict[str, Any]:
    platforms: dict[str, Any] = {
        platform: {"price": price, "currency": currency, "url": f"https://store.example/{platform.lower()}/{id}"}
        for platform, price in (prices or {}).items()
    }
    if github_url:
        platforms["GITHUB"] = {"price": 0, "currency": "USD", "url": github_url}
    payload = {
        "id": id,
        "name": name,
        "identifier": identifier,
        "summary": f"{name} summary",
        "type": type,
        "banner": {"lowres": f"https://cdn.example/{id}-low.png", "fullres": f"https://cdn.example/{id}.png"},
        "platforms": platforms,
        "stats": {"panels": panels},
        "versions": [{"name": "1.0.0", "created": "2025-01-02T10:00:00Z"}],
        "created": "2024-06-01T00:00:00Z",
    }
    payload.update(extra)
    return payload


def make_product(name: str, **kwargs: Any) -> Product:
    return Product.from_payload(product_payload(name, **kwargs))


def make_repo(name: str, *, org: str = "EuphoriaTheme", stars: int = 0, forks: int = 0, **kwargs: Any) -> Repository:
    return Repository(
        name=name,
        html_url=kwargs.pop("html_url", f"https://github.com/{org}/{name}"),
        stargazers_count=stars,
        forks_count=forks,
        **kwargs,
    )


class FixedClock:
    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()
