"""Client for the Blueprint product catalog."""

from __future__ import annotations

import logging

import httpx

from .config import CatalogSettings
from .errors import ShapeError, TransportError
from .models import Product, load_products

LOGGER = logging.getLogger(__name__)

CATALOG_FIELD = "blueprintExtensions"


class CatalogClient:
    """Fetches the catalog and narrows every record to :class:`Product`."""

    def __init__(self, settings: CatalogSettings, client: httpx.AsyncClient | None = None) -> None:
        self._settings = settings
        self._client = client or httpx.AsyncClient(timeout=settings.request_timeout)
        self._owns_client = client is None

    async def __aenter__(self) -> "CatalogClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # type: ignore[override]
        await self.close()

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def fetch_products(self) -> list[Product]:
        try:
            response = await self._client.get(
                self._settings.stats_url,
                headers={"Accept": "application/json"},
            )
        except httpx.RequestError as exc:
            LOGGER.warning("Catalog request error: %s", exc)
            raise TransportError("Request failed (network error).") from exc

        if not response.is_success:
            raise TransportError(f"Request failed ({response.status_code}).", status_code=response.status_code)

        try:
            records = _extract_records(response)
        except ShapeError as exc:
            LOGGER.warning("Catalog payload ignored: %s", exc)
            return []

        products = load_products(records)
        if len(products) != len(records):
            LOGGER.info("Dropped %s malformed catalog records", len(records) - len(products))
        return products


def _extract_records(response: httpx.Response) -> list:
    try:
        payload = response.json()
    except ValueError as exc:
        raise ShapeError("Catalog response is not JSON") from exc
    records = payload.get(CATALOG_FIELD) if isinstance(payload, dict) else None
    if not isinstance(records, list):
        raise ShapeError(f"Catalog response has no {CATALOG_FIELD!r} list")
    return records


__all__ = ["CatalogClient", "CATALOG_FIELD"]
