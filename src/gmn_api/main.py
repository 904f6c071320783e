"""CLI entry point."""

import asyncio
import json
import logging
import sys

import click

from .config import Config
from .exceptions import GMNError
from .fetching.listing import ArticleListingClient, parse_paging_args
from .pipeline import ReaderPipeline

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@click.group()
def cli() -> None:
    """GMN API - GameSpot article listing and reader service."""
    pass


@cli.command()
@click.option("--config", "-c", default="config.yaml", help="Config file path")
@click.option("--host", default=None, help="Host to bind (default from config)")
@click.option("--port", "-p", default=None, type=int, help="Port to bind (default from config)")
@click.option("--debug/--no-debug", default=False, help="Enable debug mode")
def serve(config: str, host: str | None, port: int | None, debug: bool) -> None:
    """Start the API server."""
    from .web.app import create_app

    cfg = Config.from_yaml(config)
    app = create_app(cfg)
    host = host or cfg.host
    port = port or cfg.port
    click.echo(f"API listening on http://{host}:{port}")
    app.run(host=host, port=port, debug=debug, threaded=True)


@cli.command()
@click.argument("url")
@click.option("--config", "-c", default="config.yaml", help="Config file path")
def read(url: str, config: str) -> None:
    """Extract the readable content of an article URL as JSON."""
    cfg = Config.from_yaml(config)
    pipeline = ReaderPipeline.from_config(cfg)
    try:
        response = asyncio.run(pipeline.read(url))
    except GMNError as e:
        logger.error(f"Reader failed: {e}")
        click.echo(json.dumps({"error": e.public_message}), err=True)
        sys.exit(1)
    click.echo(json.dumps(response.to_dict(), indent=2, ensure_ascii=False))


@cli.command()
@click.option("--config", "-c", default="config.yaml", help="Config file path")
@click.option("--limit", "-n", default=None, type=int, help="Articles per page")
@click.option("--offset", "-o", default=0, type=int, help="Articles to skip")
def articles(config: str, limit: int | None, offset: int) -> None:
    """List recent articles."""
    cfg = Config.from_yaml(config)
    client = ArticleListingClient(
        api_key=cfg.gamespot_api_key,
        base_url=cfg.gamespot_base_url,
        user_agent=cfg.user_agent,
        timeout_seconds=cfg.fetch_timeout_seconds,
    )
    try:
        limit, offset = parse_paging_args(limit, offset, cfg.default_limit, cfg.max_limit)
        listing = asyncio.run(client.list_articles(limit=limit, offset=offset))
    except GMNError as e:
        logger.error(f"Listing failed: {e}")
        click.echo(json.dumps({"error": e.public_message}), err=True)
        sys.exit(1)

    if not listing.articles:
        click.echo("No articles found.")
        return

    for article in listing.articles:
        click.echo(f"[{article.date or '----------'}] {article.title or article.link}")
        click.echo(f"  {article.link}")
        if article.deck:
            click.echo(f"  {article.deck[:100]}")
        click.echo()

    paging = listing.paging
    more = "more available" if paging.has_more else "end of list"
    click.echo(f"{paging.count} articles at offset {paging.offset} ({more})")


if __name__ == "__main__":
    cli()
