"""Client for the upstream GameSpot articles API."""

import asyncio
import logging

import aiohttp

from ..exceptions import InvalidRequest, UpstreamFailure
from ..models import ArticleListing, ArticleSummary, Paging, UpstreamArticle

logger = logging.getLogger(__name__)

GAMESPOT_ARTICLES_URL = "https://www.gamespot.com/api/articles/"


def _parse_non_negative(name: str, raw: str | int | None, default: int) -> int:
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return default
    try:
        value = int(raw)
    except (TypeError, ValueError) as e:
        raise InvalidRequest(f"{name}={raw!r} is not an integer", f"Invalid {name} param") from e
    if value < 0:
        raise InvalidRequest(f"{name}={value} is negative", f"Invalid {name} param")
    return value


def parse_paging_args(
    limit: str | int | None,
    offset: str | int | None,
    default_limit: int = 20,
    max_limit: int = 100,
) -> tuple[int, int]:
    """Validate raw ``limit``/``offset`` query values.

    Absent or empty values fall back to the defaults.

    Raises:
        InvalidRequest: a value is not a non-negative integer, or ``limit``
            is not between 1 and ``max_limit``.
    """
    parsed_limit = _parse_non_negative("limit", limit, default_limit)
    parsed_offset = _parse_non_negative("offset", offset, 0)
    if parsed_limit < 1:
        raise InvalidRequest("limit=0 requests an empty page", "limit must be at least 1")
    if parsed_limit > max_limit:
        raise InvalidRequest(
            f"limit={parsed_limit} exceeds {max_limit}", f"limit must be at most {max_limit}"
        )
    return parsed_limit, parsed_offset


class ArticleListingClient:
    """Fetches recent articles, newest first."""

    def __init__(
        self,
        api_key: str | None,
        base_url: str = GAMESPOT_ARTICLES_URL,
        user_agent: str = "GMN-Reader/1.0 (+https://yourdomain)",
        timeout_seconds: float = 15,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.user_agent = user_agent
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds)

    def _params(self, limit: int, offset: int) -> dict[str, str]:
        return {
            "api_key": self.api_key or "",
            "format": "json",
            "sort": "publish_date:desc",
            "limit": str(limit),
            "offset": str(offset),
        }

    async def _get_json(self, limit: int, offset: int) -> dict:
        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                headers = {"User-Agent": self.user_agent, "Accept": "application/json"}
                async with session.get(
                    self.base_url, params=self._params(limit, offset), headers=headers
                ) as response:
                    if response.status != 200:
                        raise UpstreamFailure(f"Articles API returned HTTP {response.status}")
                    data = await response.json(content_type=None)
        except asyncio.TimeoutError as e:
            raise UpstreamFailure("Articles API timed out") from e
        except aiohttp.ClientError as e:
            raise UpstreamFailure(f"Articles API request failed: {e}") from e
        except ValueError as e:
            raise UpstreamFailure(f"Articles API returned invalid JSON: {e}") from e

        if not isinstance(data, dict):
            raise UpstreamFailure("Articles API response is not an object")
        return data

    async def list_articles(self, limit: int = 20, offset: int = 0) -> ArticleListing:
        """Fetch one page of article summaries.

        ``has_more`` is true when the page came back full, which can report
        one extra empty page when the total is an exact multiple of ``limit``.

        Raises:
            UpstreamFailure: network error or unusable upstream response.
        """
        data = await self._get_json(limit, offset)

        status_code = data.get("status_code")
        if status_code is not None and status_code != 1:
            raise UpstreamFailure(f"Articles API error {status_code}: {data.get('error')}")

        results = data.get("results", [])
        if not isinstance(results, list):
            raise UpstreamFailure("Articles API 'results' is not a list")

        articles = []
        for item in results:
            if not isinstance(item, dict):
                logger.warning(f"Skipping non-object article entry: {item!r:.80}")
                continue
            articles.append(ArticleSummary.from_upstream(UpstreamArticle.from_dict(item)))

        paging = Paging(
            limit=limit,
            offset=offset,
            count=len(articles),
            has_more=len(articles) == limit,
        )
        logger.info(f"Listed {len(articles)} articles (limit={limit}, offset={offset})")
        return ArticleListing(articles=articles, paging=paging)
