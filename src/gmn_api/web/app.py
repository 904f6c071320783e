"""Flask application factory."""

import logging

from flask import Flask, request

from ..config import Config
from ..fetching.listing import ArticleListingClient
from ..pipeline import ReaderPipeline

logger = logging.getLogger(__name__)


def create_app(
    config: Config | None = None,
    reader: ReaderPipeline | None = None,
    listing: ArticleListingClient | None = None,
) -> Flask:
    """Create and configure the Flask application.

    ``reader`` and ``listing`` default to instances built from ``config``.
    """
    cfg = config or Config.from_env()
    app = Flask(__name__)

    if not cfg.gamespot_api_key:
        logger.warning("GAMESPOT_API_KEY is not set; /api/articles will fail upstream")

    app.config["APP_CONFIG"] = cfg
    app.config["READER"] = reader or ReaderPipeline.from_config(cfg)
    app.config["LISTING"] = listing or ArticleListingClient(
        api_key=cfg.gamespot_api_key,
        base_url=cfg.gamespot_base_url,
        user_agent=cfg.user_agent,
        timeout_seconds=cfg.fetch_timeout_seconds,
    )

    # Register routes
    from . import routes

    app.register_blueprint(routes.bp)

    @app.after_request
    def add_cors_headers(response):
        """Allow the static front end to call the API from another origin."""
        origin = request.headers.get("Origin")
        if "*" in cfg.cors_origins:
            response.headers["Access-Control-Allow-Origin"] = "*"
        elif origin and origin in cfg.cors_origins:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers.add("Vary", "Origin")
        response.headers.setdefault("Access-Control-Allow-Methods", "GET, OPTIONS")
        response.headers.setdefault("Access-Control-Allow-Headers", "Content-Type")
        return response

    return app
