"""Flask route handlers."""

import logging

from flask import Blueprint, current_app, jsonify, request
from werkzeug.exceptions import HTTPException

from ..exceptions import GMNError, InvalidRequest
from ..fetching.listing import parse_paging_args

logger = logging.getLogger(__name__)

bp = Blueprint("api", __name__)


def get_config():
    """Get application config from app config."""
    return current_app.config["APP_CONFIG"]


@bp.route("/health")
def health():
    return jsonify({"status": "ok"})


@bp.route("/api/articles")
async def list_articles():
    """Recent articles from the upstream API, newest first."""
    cfg = get_config()
    limit, offset = parse_paging_args(
        request.args.get("limit"),
        request.args.get("offset"),
        default_limit=cfg.default_limit,
        max_limit=cfg.max_limit,
    )
    listing = await current_app.config["LISTING"].list_articles(limit=limit, offset=offset)
    return jsonify(listing.to_dict())


@bp.route("/api/article")
async def read_article():
    """Readable, sanitized content of a single article page."""
    url = request.args.get("url", "").strip()
    if not url:
        raise InvalidRequest("Missing url query parameter", "Missing url param")

    response = await current_app.config["READER"].read(url)
    return jsonify(response.to_dict())


@bp.app_errorhandler(GMNError)
def handle_service_error(error: GMNError):
    """Convert service errors to the JSON error shape."""
    if error.status_code >= 500:
        logger.error(f"{request.path} failed: {error}")
    else:
        logger.warning(f"{request.path} rejected: {error}")
    return jsonify({"error": error.public_message}), error.status_code


@bp.app_errorhandler(HTTPException)
def handle_http_error(error: HTTPException):
    return jsonify({"error": error.description if error.code != 404 else "Not found"}), error.code


@bp.app_errorhandler(Exception)
def handle_unexpected_error(error: Exception):
    logger.exception(f"Unhandled error on {request.path}: {error}")
    return jsonify({"error": _fallback_message(request.path)}), 500


def _fallback_message(path: str) -> str:
    if path.startswith("/api/article") and not path.startswith("/api/articles"):
        return "Reader failed"
    return "Failed to fetch"
