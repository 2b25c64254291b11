from __future__ import annotations

import asyncio

import httpx
import pytest

from blueprint_showcase.catalog import CatalogClient
from blueprint_showcase.config import CatalogSettings
from blueprint_showcase.errors import TransportError

from conftest import product_payload

SETTINGS = CatalogSettings(stats_url="https://api.example.test/stats/")


def fetch(handler):
    async def runner():
        transport = httpx.MockTransport(handler)
        async with httpx.AsyncClient(transport=transport) as async_client:
            return await CatalogClient(SETTINGS, async_client).fetch_products()

    return asyncio.run(runner())


def test_fetch_products_projects_records():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "totalInstalls": 1000,
                "blueprintExtensions": [
                    product_payload("Nebula", id=1, type="THEME", secret="drop me"),
                    "not a record",
                    product_payload("Widget", id=2, prices={"BUILTBYBIT": 4.5}),
                ],
            },
        )

    products = fetch(handler)

    assert [product.name for product in products] == ["Nebula", "Widget"]
    assert products[1].platforms["BUILTBYBIT"].price == 4.5
    assert "secret" not in products[0].to_payload()
    assert seen[0].headers["Accept"] == "application/json"


def test_non_success_status_raises_transport_error():
    with pytest.raises(TransportError) as exc:
        fetch(lambda _: httpx.Response(503, text="maintenance"))

    assert str(exc.value) == "Request failed (503)."
    assert exc.value.status_code == 503


def test_unexpected_payload_degrades_to_empty_list(caplog):
    with caplog.at_level("WARNING"):
        assert fetch(lambda _: httpx.Response(200, json={"items": []})) == []
        assert fetch(lambda _: httpx.Response(200, text="<html>oops</html>")) == []

    assert "Catalog payload ignored" in caplog.text
