"""Turn enriched products into cards and write them into the page."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence
from urllib.parse import quote

from .config import DisplaySettings
from .disclosure import ensure_more_toggle
from .models import EnrichedProduct, Product, parse_timestamp, safe_url
from .page import Page
from .ranking import partition, price_label
from .templates import render_template

LOGGER = logging.getLogger(__name__)

ADDONS_GRID_ID = "blueprint-addons-grid"
THEMES_GRID_ID = "blueprint-themes-grid"
ADDON_COUNT_ID = "blueprint-addon-count"
THEME_COUNT_ID = "blueprint-theme-count"
NOTE_ID = "blueprint-products-note"

PRIMARY_BUTTON = (
    "inline-flex items-center justify-center px-3 py-2 rounded-lg bg-blue-600 hover:bg-blue-500 "
    "text-white text-sm font-semibold transition-colors"
)
SECONDARY_BUTTON = (
    "inline-flex items-center justify-center px-3 py-2 rounded-lg bg-neutral-800 hover:bg-neutral-700 "
    "text-neutral-100 text-sm font-semibold transition-colors border border-neutral-700"
)


def format_count(value: int) -> str:
    return f"{value:,}"


def format_date(value: str | None) -> str:
    """``Mar 04, 2025`` style date; the raw value when it does not parse."""

    parsed = parse_timestamp(value)
    if parsed is None:
        return value or ""
    return parsed.strftime("%b %d, %Y")


def avatar_url(name: str) -> str:
    return f"https://ui-avatars.com/api/?name={quote(name, safe='')}&background=3b82f6&color=fff&size=600x320"


@dataclass(slots=True, frozen=True)
class CardLink:
    label: str
    href: str
    css_class: str


@dataclass(slots=True, frozen=True)
class CardView:
    """Everything the card template shows, already resolved and formatted."""

    name: str
    summary: str
    type_label: str
    is_theme: bool
    banner_url: str
    fallback_banner_url: str
    price_label: str
    is_free: bool
    panels_display: str
    stars_display: str | None
    forks_display: str | None
    latest_label: str | None
    latest_date: str | None
    links: tuple[CardLink, ...]


def _offer_url(product: Product, platform: str) -> str | None:
    offer = product.platforms.get(platform)
    return offer.url if offer else None


def build_card_view(item: EnrichedProduct, display: DisplaySettings | None = None) -> CardView:
    display = display or DisplaySettings()
    product = item.product
    name = product.name or "Untitled"
    fallback = avatar_url(name)

    blueprint_url = None
    if product.identifier:
        blueprint_url = safe_url(f"{display.blueprint_url}{quote(product.identifier, safe='')}")
    github_url = safe_url(item.github_url) or safe_url(_offer_url(product, "GITHUB"))

    links: list[CardLink] = []
    if blueprint_url:
        links.append(CardLink("View on Blueprint", blueprint_url, PRIMARY_BUTTON))
    if github_url:
        links.append(CardLink("View on GitHub", github_url, SECONDARY_BUTTON))
    for platform, label in (("BUILTBYBIT", "BuiltByBit"), ("SOURCEXCHANGE", "SourceXchange")):
        url = safe_url(_offer_url(product, platform))
        if url:
            links.append(CardLink(label, url, SECONDARY_BUTTON))

    price = price_label(product, display.platform_priority)
    latest = product.latest_version

    return CardView(
        name=name,
        summary=product.summary or "No summary provided.",
        type_label="Theme" if product.is_theme else "Addon",
        is_theme=product.is_theme,
        banner_url=safe_url(product.banner) or fallback,
        fallback_banner_url=fallback,
        price_label=price.label,
        is_free=price.is_free,
        panels_display=format_count(product.panels),
        stars_display=format_count(item.github_stars) if github_url and item.github_stars is not None else None,
        forks_display=format_count(item.github_forks) if github_url and item.github_forks is not None else None,
        latest_label=f"v{latest.name}" if latest and latest.name else None,
        latest_date=format_date(latest.created) if latest and latest.created else None,
        links=tuple(links),
    )


def render_card(view: CardView) -> str:
    return render_template("product_card.html", card=view)


class ProductsView:
    """Writes the addon and theme grids, their counters and the tally note."""

    def __init__(self, page: Page, display: DisplaySettings | None = None) -> None:
        self._page = page
        self._display = display or DisplaySettings()

    @property
    def has_grids(self) -> bool:
        return any(self._page.get_element_by_id(grid_id) is not None for grid_id in (ADDONS_GRID_ID, THEMES_GRID_ID))

    def render_all(self, products: Sequence[EnrichedProduct]) -> None:
        addons, themes = partition(products, self._display.platform_priority)

        self._page.set_text(ADDON_COUNT_ID, str(len(addons)))
        self._page.set_text(THEME_COUNT_ID, str(len(themes)))

        self._render_grid(ADDONS_GRID_ID, addons, "No Blueprint addons found yet.")
        self._render_grid(THEMES_GRID_ID, themes, "No Blueprint themes found yet.")

        for grid_id in (ADDONS_GRID_ID, THEMES_GRID_ID):
            ensure_more_toggle(
                self._page,
                self._page.get_element_by_id(grid_id),
                rows=self._display.grid_rows,
                more_label=self._display.more_label,
                less_label=self._display.less_label,
            )

        total = len(addons) + len(themes)
        self._page.set_text(
            NOTE_ID,
            f"Showing {format_count(total)} Blueprints | {format_count(len(addons))} addons | "
            f"{format_count(len(themes))} themes",
        )
        LOGGER.debug("Rendered %s addons and %s themes", len(addons), len(themes))

    def render_error(self, message: str) -> None:
        html = render_template("grid_message.html", message=message)
        for grid_id in (ADDONS_GRID_ID, THEMES_GRID_ID):
            grid = self._page.get_element_by_id(grid_id)
            if grid is not None:
                self._page.set_inner_html(grid, html)
                ensure_more_toggle(self._page, grid, rows=self._display.grid_rows)
        self._page.set_text(ADDON_COUNT_ID, "0")
        self._page.set_text(THEME_COUNT_ID, "0")
        self._page.set_text(NOTE_ID, "")

    def _render_grid(self, grid_id: str, items: Sequence[EnrichedProduct], empty_message: str) -> None:
        grid = self._page.get_element_by_id(grid_id)
        if grid is None:
            return
        if not items:
            self._page.set_inner_html(grid, render_template("grid_message.html", message=empty_message))
            return
        grid.clear()
        for item in items:
            self._page.append_html(grid, render_card(build_card_view(item, self._display)))


__all__ = [
    "ADDONS_GRID_ID",
    "ADDON_COUNT_ID",
    "CardLink",
    "CardView",
    "NOTE_ID",
    "ProductsView",
    "THEMES_GRID_ID",
    "THEME_COUNT_ID",
    "build_card_view",
    "format_date",
    "render_card",
]
