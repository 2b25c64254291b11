"""Domain models for catalog products and GitHub repositories."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any
from urllib.parse import urlsplit

from .errors import ShapeError


UTC = timezone.utc


def safe_url(value: Any) -> str | None:
    """Return ``value`` when it is an absolute http(s) URL, otherwise ``None``."""

    if not value:
        return None
    text = str(value).strip()
    try:
        parts = urlsplit(text)
    except ValueError:
        return None
    if parts.scheme.lower() not in {"http", "https"} or not parts.netloc:
        return None
    return text


def normalize_type(value: Any) -> str:
    return str(value or "").strip().lower()


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp, treating naive values as UTC."""

    if not value or not isinstance(value, str):
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _as_number(value: Any) -> float:
    if value is None or value == "":
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def _as_count(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    if isinstance(value, float) and not math.isfinite(value):
        return 0
    return int(value)


def _as_text(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


@dataclass(slots=True, frozen=True)
class Offer:
    """Price of a product on one storefront."""

    platform: str
    price: float
    currency: str
    url: str | None

    @classmethod
    def from_payload(cls, platform: str, payload: Any) -> "Offer | None":
        if not isinstance(payload, dict):
            return None
        currency = payload.get("currency")
        return cls(
            platform=platform,
            price=_as_number(payload.get("price")),
            currency=str(currency).upper() if currency else "",
            url=safe_url(payload.get("url")),
        )

    def to_payload(self) -> dict[str, Any]:
        return {"price": self.price, "currency": self.currency, "url": self.url}


@dataclass(slots=True, frozen=True)
class Version:
    name: str
    created: str | None

    @classmethod
    def from_payload(cls, payload: Any) -> "Version | None":
        if not isinstance(payload, dict):
            return None
        return cls(name=str(payload.get("name") or ""), created=_as_text(payload.get("created")))

    @property
    def created_at(self) -> datetime | None:
        return parse_timestamp(self.created)

    def to_payload(self) -> dict[str, Any]:
        return {"name": self.name, "created": self.created}


@dataclass(slots=True, frozen=True)
class Product:
    """Normalized representation of a Blueprint catalog entry.

    Only the fields rendered or cached are kept; anything else the upstream
    API adds is dropped during projection.
    """

    id: Any
    name: str
    identifier: str | None
    summary: str | None
    type: str
    banner: str | None
    platforms: dict[str, Offer] = field(default_factory=dict)
    panels: int = 0
    versions: tuple[Version, ...] = ()
    created: str | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> "Product":
        """Project an upstream (or cached) record onto a :class:`Product`."""

        if not isinstance(payload, dict):
            raise ShapeError(f"Product record must be an object, got {type(payload).__name__}")

        raw_platforms = payload.get("platforms")
        platforms: dict[str, Offer] = {}
        if isinstance(raw_platforms, dict):
            for key, raw in raw_platforms.items():
                offer = Offer.from_payload(str(key), raw)
                if offer is not None:
                    platforms[str(key)] = offer

        stats = payload.get("stats")
        panels = _as_number(stats.get("panels")) if isinstance(stats, dict) else 0.0

        raw_versions = payload.get("versions")
        versions: list[Version] = []
        if isinstance(raw_versions, list):
            for raw in raw_versions:
                version = Version.from_payload(raw)
                if version is not None:
                    versions.append(version)

        return cls(
            id=payload.get("id"),
            name=str(payload.get("name") or ""),
            identifier=_as_text(payload.get("identifier")),
            summary=_as_text(payload.get("summary")),
            type=str(payload.get("type") or ""),
            banner=_banner_url(payload.get("banner")),
            platforms=platforms,
            panels=int(panels),
            versions=tuple(versions),
            created=_as_text(payload.get("created")),
        )

    def to_payload(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "identifier": self.identifier,
            "summary": self.summary,
            "type": self.type,
            "banner": self.banner,
            "platforms": {key: offer.to_payload() for key, offer in self.platforms.items()},
            "stats": {"panels": self.panels},
            "versions": [version.to_payload() for version in self.versions],
            "created": self.created,
        }

    @property
    def is_theme(self) -> bool:
        return normalize_type(self.type) == "theme"

    @property
    def latest_version(self) -> Version | None:
        """Newest version by ``created``; the first entry if no date parses."""

        if not self.versions:
            return None
        best: Version | None = None
        best_ts: datetime | None = None
        for version in self.versions:
            created = version.created_at
            if created is None:
                continue
            if best_ts is None or created > best_ts:
                best, best_ts = version, created
        return best or self.versions[0]


def _banner_url(value: Any) -> str | None:
    if isinstance(value, str):
        return value or None
    if isinstance(value, dict):
        return _as_text(value.get("lowres") or value.get("fullres"))
    return None


@dataclass(slots=True, frozen=True)
class Repository:
    """The subset of a GitHub repository needed for matching and linking."""

    name: str
    html_url: str | None
    archived: bool = False
    fork: bool = False
    stargazers_count: int = 0
    forks_count: int = 0

    @classmethod
    def from_payload(cls, payload: Any) -> "Repository":
        if not isinstance(payload, dict):
            raise ShapeError(f"Repository record must be an object, got {type(payload).__name__}")
        return cls(
            name=str(payload.get("name") or ""),
            html_url=_as_text(payload.get("html_url")),
            archived=bool(payload.get("archived")),
            fork=bool(payload.get("fork")),
            stargazers_count=_as_count(payload.get("stargazers_count")),
            forks_count=_as_count(payload.get("forks_count")),
        )

    def to_payload(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "html_url": self.html_url,
            "archived": self.archived,
            "fork": self.fork,
            "stargazers_count": self.stargazers_count,
            "forks_count": self.forks_count,
        }


@dataclass(slots=True, frozen=True)
class EnrichedProduct:
    """A product plus whatever GitHub data could be attached to it."""

    product: Product
    github_url: str | None = None
    github_stars: int | None = None
    github_forks: int | None = None


@dataclass(slots=True, frozen=True)
class RepoMeta:
    """Metadata shown on web application cards."""

    language: str
    stars: int
    forks: int
    updated_at: str | None

    @classmethod
    def from_payload(cls, payload: Any) -> "RepoMeta":
        if not isinstance(payload, dict):
            raise ShapeError("Repository metadata must be an object")
        return cls(
            language=str(payload.get("language") or "Unknown"),
            stars=_as_count(payload.get("stargazers_count", payload.get("stars"))),
            forks=_as_count(payload.get("forks_count", payload.get("forks"))),
            updated_at=_as_text(payload.get("updated_at")),
        )

    def to_payload(self) -> dict[str, Any]:
        return {
            "language": self.language,
            "stars": self.stars,
            "forks": self.forks,
            "updated_at": self.updated_at,
        }


def load_products(items: Any) -> list[Product]:
    """Convert a list of payloads to products, skipping malformed entries."""

    return _load_many(items, Product.from_payload)


def load_repositories(items: Any) -> list[Repository]:
    return _load_many(items, Repository.from_payload)


def _load_many(items: Any, factory) -> list:
    if not isinstance(items, list):
        return []
    loaded = []
    for item in items:
        try:
            loaded.append(factory(item))
        except ShapeError:
            continue
    return loaded


__all__ = [
    "EnrichedProduct",
    "Offer",
    "Product",
    "RepoMeta",
    "Repository",
    "Version",
    "load_products",
    "load_repositories",
    "normalize_type",
    "parse_timestamp",
    "safe_url",
]
