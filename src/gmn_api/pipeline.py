"""Reader pipeline: fetch, parse, extract, sanitize, assemble."""

import logging

from .config import Config
from .extraction.content import ContentExtractor
from .extraction.document import parse
from .extraction.fallback import first_present, pick_lead_image
from .extraction.sanitizer import sanitize
from .fetching.fetcher import ArticleFetcher
from .models import ExtractionResult, ReaderResponse

logger = logging.getLogger(__name__)


def assemble_response(
    result: ExtractionResult,
    html: str,
    lead_image: str | None,
    default_site_name: str,
) -> ReaderResponse:
    """Combine extraction output, sanitized HTML and lead image."""
    return ReaderResponse(
        title=result.title,
        byline=result.byline or None,
        excerpt=result.excerpt or None,
        site_name=first_present([result.site_name, default_site_name]),
        lead_image=lead_image,
        html=html,
    )


class ReaderPipeline:
    """Turns an article URL into a sanitized reader response."""

    def __init__(
        self,
        fetcher: ArticleFetcher,
        extractor: ContentExtractor,
        default_site_name: str = "GameSpot",
    ):
        self.fetcher = fetcher
        self.extractor = extractor
        self.default_site_name = default_site_name

    @classmethod
    def from_config(cls, config: Config) -> "ReaderPipeline":
        fetcher = ArticleFetcher(
            allowed_domains=config.allowed_domains,
            user_agent=config.user_agent,
            timeout_seconds=config.fetch_timeout_seconds,
            max_content_length=config.max_content_length,
            site_name=config.default_site_name,
        )
        extractor = ContentExtractor(min_text_length=config.min_content_length)
        return cls(fetcher, extractor, default_site_name=config.default_site_name)

    def process_html(self, html: str, url: str) -> ReaderResponse:
        """Run everything after the fetch on an already downloaded page.

        Raises:
            ExtractionFailed: no article content was found.
        """
        doc = parse(html, url)
        result = self.extractor.extract(doc)
        clean = sanitize(result.content_html)
        lead_image = pick_lead_image(doc)
        logger.info(
            f"Extracted {result.length} characters from {url[:80]} "
            f"(lead image: {'yes' if lead_image else 'no'})"
        )
        return assemble_response(result, clean, lead_image, self.default_site_name)

    async def read(self, url: str) -> ReaderResponse:
        """Fetch ``url`` and build its reader response.

        Raises:
            InvalidRequest: the URL is malformed or not allowlisted.
            FetchFailed: the page could not be fetched.
            ExtractionFailed: no article content was found.
        """
        logger.info(f"Reading {url[:80]}")
        fetched = await self.fetcher.fetch(url)
        return self.process_html(fetched.text, fetched.url)
