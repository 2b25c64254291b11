"""Command line interface for hydrating the showcase page."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer

from .cache import CacheStore, FileStorage
from .catalog import CatalogClient
from .config import AppConfig
from .errors import StorageError
from .github_client import GitHubClient
from .page import Page, TailwindLayout
from .pipeline import ProductsPipeline
from .render import ProductsView
from .templates import DEFAULT_PAGE
from .webapps import RepoMetaCache, WebAppsHydrator

app = typer.Typer(add_completion=False)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


@app.command("render")
def render(
    output: Path = typer.Option(..., exists=False, dir_okay=False, help="Destination HTML file"),
    page: Optional[Path] = typer.Option(
        None, exists=True, dir_okay=False, help="Page to hydrate; a bare skeleton is used when omitted"
    ),
    cache_dir: Optional[Path] = typer.Option(None, file_okay=False, help="Directory for cached payloads"),
    github_token: Optional[str] = typer.Option(None, envvar="GITHUB_TOKEN", help="GitHub token"),
    width: int = typer.Option(1280, min=1, help="Viewport width used to resolve grid columns"),
    web_apps: bool = typer.Option(True, "--web-apps/--no-web-apps", help="Also hydrate web app cards"),
    log_level: str = typer.Option("INFO", help="Logging level"),
) -> None:
    """Fetch products and repositories and write the hydrated page."""

    configure_logging(log_level)
    overrides = {}
    if cache_dir:
        overrides["cache_dir"] = cache_dir
    if github_token:
        overrides["github_token"] = github_token
    config = AppConfig.from_env(overrides=overrides)

    html = page.read_text(encoding="utf-8") if page else DEFAULT_PAGE
    document = Page(html, layout=TailwindLayout(width))
    storage = FileStorage(config.storage.cache_dir)

    async def runner() -> None:
        async with CatalogClient(config.catalog) as catalog, GitHubClient(config.github) as github:
            pipeline = ProductsPipeline(
                config,
                ProductsView(document, config.display),
                catalog,
                github,
                CacheStore(storage, ttl_seconds=config.catalog.cache_ttl),
                CacheStore(storage, ttl_seconds=config.github.cache_ttl),
            )
            state = await pipeline.run()
            typer.echo(f"Products: {state.value}")

            if web_apps:
                meta_cache = RepoMetaCache(
                    storage, config.github.meta_cache_key, ttl_seconds=config.github.meta_cache_ttl
                )
                result = await WebAppsHydrator(document, github, meta_cache).hydrate()
                typer.echo(
                    f"Web apps: {result.from_cache} cached, {result.fetched} fetched, {result.failed} failed"
                )

    asyncio.run(runner())
    output.write_text(document.to_html(), encoding="utf-8")
    typer.echo(f"Wrote {output}")


@app.command("clear-cache")
def clear_cache(
    cache_dir: Optional[Path] = typer.Option(None, file_okay=False, help="Directory for cached payloads"),
    log_level: str = typer.Option("INFO", help="Logging level"),
) -> None:
    """Drop the cached catalog, repository list and repository metadata."""

    configure_logging(log_level)
    overrides = {"cache_dir": cache_dir} if cache_dir else {}
    config = AppConfig.from_env(overrides=overrides)
    storage = FileStorage(config.storage.cache_dir)

    for key in (config.catalog.cache_key, config.github.cache_key, config.github.meta_cache_key):
        try:
            storage.remove_item(key)
        except StorageError as exc:
            raise typer.BadParameter(str(exc)) from exc
    typer.echo(f"Cleared cache in {storage.directory}")


__all__ = ["app"]
