"""Application configuration helpers."""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, PositiveInt


UTC = timezone.utc

SIX_HOURS = 6 * 60 * 60


class CatalogSettings(BaseModel):
    """Configuration for the Blueprint product catalog endpoint."""

    stats_url: str = Field(default="https://api.euphoriadevelopment.uk/stats/")
    cache_key: str = Field(default="blueprintProductsCache:v2")
    cache_ttl: float = Field(default=SIX_HOURS, ge=0.0, description="Product cache lifetime in seconds.")
    request_timeout: float = Field(default=20.0, ge=1.0, description="Timeout for a single HTTP request in seconds.")


class GitHubSettings(BaseModel):
    """Configuration options for the GitHub REST API."""

    token: str | None = Field(default=None, description="Personal access token, optional for public data.")
    api_url: str = Field(default="https://api.github.com")
    org: str = Field(default="EuphoriaTheme", description="Organization whose repositories are linked to products.")
    per_page: PositiveInt = Field(default=100, le=100, description="Repositories fetched per listing request.")
    cache_key: str = Field(default="blueprintGithubReposCache:v2")
    cache_ttl: float = Field(default=SIX_HOURS, ge=0.0, description="Repository list cache lifetime in seconds.")
    meta_cache_key: str = Field(default="webAppsGithubRepoMetaCache:v1")
    meta_cache_ttl: float = Field(default=SIX_HOURS, ge=0.0, description="Per-repository metadata lifetime in seconds.")
    request_timeout: float = Field(default=20.0, ge=1.0, description="Timeout for a single HTTP request in seconds.")


class StorageSettings(BaseModel):
    """Where cached payloads are persisted."""

    cache_dir: Path = Field(default=Path(".showcase-cache"))


class DisplaySettings(BaseModel):
    """Knobs for rendering product grids."""

    grid_rows: PositiveInt = Field(default=1, description="Rows shown while a grid is collapsed.")
    more_label: str = Field(default="More")
    less_label: str = Field(default="Show less")
    blueprint_url: str = Field(default="https://blueprint.zip/extensions/")
    platform_priority: list[str] = Field(default_factory=lambda: ["BUILTBYBIT", "SOURCEXCHANGE"])


class AppConfig(BaseModel):
    """Root configuration container."""

    catalog: CatalogSettings = Field(default_factory=CatalogSettings)
    github: GitHubSettings = Field(default_factory=GitHubSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    display: DisplaySettings = Field(default_factory=DisplaySettings)

    @classmethod
    def from_env(cls, env: dict[str, str] | None = None, overrides: dict[str, Any] | None = None) -> "AppConfig":
        """Construct a configuration object from environment variables."""

        env = env if env is not None else os.environ
        overrides = overrides or {}
        timeout = float(overrides.get("request_timeout") or env.get("HTTP_REQUEST_TIMEOUT", 20.0))

        catalog = CatalogSettings(
            stats_url=overrides.get("stats_url") or env.get("BLUEPRINT_STATS_URL") or "https://api.euphoriadevelopment.uk/stats/",
            cache_ttl=_parse_seconds(overrides.get("catalog_cache_ttl") or env.get("BLUEPRINT_CACHE_TTL"), SIX_HOURS),
            request_timeout=timeout,
        )

        github = GitHubSettings(
            token=overrides.get("github_token") or env.get("GITHUB_TOKEN") or env.get("GH_TOKEN"),
            api_url=overrides.get("github_api_url") or env.get("GITHUB_API_URL") or "https://api.github.com",
            org=overrides.get("github_org") or env.get("GITHUB_ORG") or "EuphoriaTheme",
            cache_ttl=_parse_seconds(overrides.get("github_cache_ttl") or env.get("GITHUB_CACHE_TTL"), SIX_HOURS),
            meta_cache_ttl=_parse_seconds(
                overrides.get("github_meta_cache_ttl") or env.get("GITHUB_META_CACHE_TTL"), SIX_HOURS
            ),
            request_timeout=timeout,
        )

        storage = StorageSettings(
            cache_dir=Path(overrides.get("cache_dir") or env.get("SHOWCASE_CACHE_DIR") or ".showcase-cache"),
        )

        display = DisplaySettings(
            grid_rows=int(overrides.get("grid_rows") or env.get("SHOWCASE_GRID_ROWS", 1)),
        )

        return cls(catalog=catalog, github=github, storage=storage, display=display)


def _parse_seconds(value: Any, default: float) -> float:
    if value is None or value == "":
        return default
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid duration in seconds: {value}") from exc


@dataclass(slots=True)
class RateLimitInfo:
    """Snapshot of GitHub's REST rate limit headers."""

    limit: int | None
    remaining: int
    reset_at: datetime | None


__all__ = [
    "AppConfig",
    "CatalogSettings",
    "GitHubSettings",
    "StorageSettings",
    "DisplaySettings",
    "RateLimitInfo",
    "SIX_HOURS",
    "UTC",
]
