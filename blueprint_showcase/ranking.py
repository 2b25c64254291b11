"""Ordering and partitioning of catalog products."""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass
from typing import Iterable, Mapping, Sequence, TypeVar

from .models import EnrichedProduct, Offer, Product

DEFAULT_PLATFORM_PRIORITY: tuple[str, ...] = ("BUILTBYBIT", "SOURCEXCHANGE")

_CURRENCY_SYMBOLS = {"USD": "$", "EUR": "€", "GBP": "£", "JPY": "¥", "AUD": "A$", "CAD": "CA$"}

T = TypeVar("T", Product, EnrichedProduct)


@dataclass(slots=True, frozen=True)
class PriceLabel:
    label: str
    sort: float

    @property
    def is_free(self) -> bool:
        return self.label == "FREE"


def is_free(platforms: Mapping[str, Offer] | None) -> bool:
    return not any(offer.price > 0 for offer in (platforms or {}).values())


def best_paid_offer(
    platforms: Mapping[str, Offer] | None,
    priority: Sequence[str] = DEFAULT_PLATFORM_PRIORITY,
) -> Offer | None:
    """First paid offer, checking ``priority`` platforms before the rest.

    Currencies are not converted; the offer found first drives the price sort.
    """

    platforms = platforms or {}
    for key in priority:
        offer = platforms.get(key)
        if offer is not None and offer.price > 0:
            return offer
    for offer in platforms.values():
        if offer.price > 0:
            return offer
    return None


def format_amount(amount: float, currency: str = "") -> str:
    if not currency:
        return f"{amount:,.2f}"
    symbol = _CURRENCY_SYMBOLS.get(currency)
    if symbol:
        return f"{symbol}{amount:,.2f}"
    return f"{currency} {amount:,.2f}"


def price_label(product: Product, priority: Sequence[str] = DEFAULT_PLATFORM_PRIORITY) -> PriceLabel:
    if is_free(product.platforms):
        return PriceLabel("FREE", 0)
    offer = best_paid_offer(product.platforms, priority)
    if offer is None:
        return PriceLabel("PAID", 1)
    return PriceLabel(format_amount(offer.price, offer.currency), offer.price)


def name_sort_key(name: str) -> str:
    """Case and accent insensitive collation key."""

    decomposed = unicodedata.normalize("NFKD", name or "")
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()


def _product(item: Product | EnrichedProduct) -> Product:
    return item.product if isinstance(item, EnrichedProduct) else item


def sort_products(items: Iterable[T], priority: Sequence[str] = DEFAULT_PLATFORM_PRIORITY) -> list[T]:
    """Paid before free, then higher price, more panels, and name.

    ``sorted`` is stable, so products that tie on every key keep their input
    order.
    """

    def key(item: T) -> tuple[bool, float, int, str]:
        product = _product(item)
        return (
            is_free(product.platforms),
            -price_label(product, priority).sort,
            -product.panels,
            name_sort_key(product.name),
        )

    return sorted(items, key=key)


def partition(
    items: Iterable[T], priority: Sequence[str] = DEFAULT_PLATFORM_PRIORITY
) -> tuple[list[T], list[T]]:
    """Split into ``(addons, themes)``, each sorted independently."""

    addons: list[T] = []
    themes: list[T] = []
    for item in items:
        (themes if _product(item).is_theme else addons).append(item)
    return sort_products(addons, priority), sort_products(themes, priority)


__all__ = [
    "DEFAULT_PLATFORM_PRIORITY",
    "PriceLabel",
    "best_paid_offer",
    "format_amount",
    "is_free",
    "name_sort_key",
    "partition",
    "price_label",
    "sort_products",
]
