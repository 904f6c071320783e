"""Configuration management."""

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml
from dotenv import load_dotenv

# Load .env file from current working directory
load_dotenv()


def _split_list(value: str | list | tuple | None) -> tuple[str, ...] | None:
    """Accept a comma separated string or a YAML list."""
    if value is None:
        return None
    if isinstance(value, str):
        items = value.split(",")
    else:
        items = [str(v) for v in value]
    cleaned = tuple(item.strip() for item in items if item.strip())
    return cleaned or None


@dataclass(frozen=True)
class Config:
    """Application configuration.

    Built once at start-up and passed to the components that need it.
    """

    gamespot_api_key: str | None = None
    gamespot_base_url: str = "https://www.gamespot.com/api/articles/"
    allowed_domains: tuple[str, ...] = ("gamespot.com",)
    user_agent: str = "GMN-Reader/1.0 (+https://yourdomain)"
    fetch_timeout_seconds: float = 15
    max_content_length: int = 5_000_000
    min_content_length: int = 250
    default_site_name: str = "GameSpot"
    default_limit: int = 20
    max_limit: int = 100
    cors_origins: tuple[str, ...] = field(default=("*",))
    host: str = "127.0.0.1"
    port: int = 3000

    @classmethod
    def from_env(cls) -> "Config":
        """Configuration from environment variables only."""
        return cls.from_dict({})

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Config":
        """Load configuration from a YAML file.

        A missing file is treated as empty. Environment variables take
        precedence over YAML values:
        - GAMESPOT_API_KEY: key for the upstream articles API
        - GAMESPOT_BASE_URL: articles API endpoint
        - ALLOWED_DOMAINS: comma separated reader allowlist
        - READER_USER_AGENT: User-Agent sent when fetching pages
        - FETCH_TIMEOUT_SECONDS: total timeout for one outbound request
        - CORS_ORIGINS: comma separated allowed origins
        - HOST / PORT: bind address for ``serve``
        """
        path = Path(path)
        data = {}
        if path.exists():
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"{path} must contain a mapping, got {type(data).__name__}")
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict) -> "Config":
        defaults = cls()
        env = os.environ

        allowed_domains = _split_list(env.get("ALLOWED_DOMAINS")) or _split_list(
            data.get("allowed_domains")
        )
        cors_origins = _split_list(env.get("CORS_ORIGINS")) or _split_list(data.get("cors_origins"))

        config = cls(
            gamespot_api_key=env.get("GAMESPOT_API_KEY") or data.get("gamespot_api_key"),
            gamespot_base_url=env.get("GAMESPOT_BASE_URL")
            or data.get("gamespot_base_url", defaults.gamespot_base_url),
            allowed_domains=allowed_domains or defaults.allowed_domains,
            user_agent=env.get("READER_USER_AGENT") or data.get("user_agent", defaults.user_agent),
            fetch_timeout_seconds=float(
                env.get("FETCH_TIMEOUT_SECONDS")
                or data.get("fetch_timeout_seconds", defaults.fetch_timeout_seconds)
            ),
            max_content_length=int(data.get("max_content_length", defaults.max_content_length)),
            min_content_length=int(data.get("min_content_length", defaults.min_content_length)),
            default_site_name=data.get("default_site_name", defaults.default_site_name),
            default_limit=int(data.get("default_limit", defaults.default_limit)),
            max_limit=int(data.get("max_limit", defaults.max_limit)),
            cors_origins=cors_origins or defaults.cors_origins,
            host=env.get("HOST") or data.get("host", defaults.host),
            port=int(env.get("PORT") or data.get("port", defaults.port)),
        )

        if config.fetch_timeout_seconds <= 0:
            raise ValueError("fetch_timeout_seconds must be positive")
        if not 0 < config.default_limit <= config.max_limit:
            raise ValueError("default_limit must be between 1 and max_limit")
        return config
