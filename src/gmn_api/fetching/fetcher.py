"""Async article page fetcher with a domain allowlist."""

import asyncio
import logging
from urllib.parse import urljoin, urlparse

import aiohttp

from ..exceptions import DomainNotAllowed, FetchFailed, InvalidRequest
from ..models import FetchResult

logger = logging.getLogger(__name__)

REDIRECT_STATUSES = {301, 302, 303, 307, 308}
READ_CHUNK_SIZE = 64 * 1024


def host_allowed(hostname: str, allowed_domains: tuple[str, ...]) -> bool:
    """True if ``hostname`` is one of ``allowed_domains`` or a subdomain of one."""
    hostname = hostname.lower().rstrip(".")
    for domain in allowed_domains:
        domain = domain.lower().strip(".")
        if hostname == domain or hostname.endswith("." + domain):
            return True
    return False


class ArticleFetcher:
    """Fetches article pages from allowlisted hosts.

    No retries. The session lives only for the duration of the call, so
    cancelling the awaiting task releases the connection.
    """

    def __init__(
        self,
        allowed_domains: tuple[str, ...] = ("gamespot.com",),
        user_agent: str = "GMN-Reader/1.0 (+https://yourdomain)",
        timeout_seconds: float = 15,
        max_content_length: int = 5_000_000,
        site_name: str = "GameSpot",
        max_redirects: int = 5,
    ):
        self.allowed_domains = tuple(allowed_domains)
        self.user_agent = user_agent
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self.max_content_length = max_content_length
        self.site_name = site_name
        self.max_redirects = max_redirects

    def check_allowed(self, url: str) -> str:
        """Validate ``url`` against the allowlist and return its hostname.

        Raises:
            InvalidRequest: the URL is not an absolute http(s) URL.
            DomainNotAllowed: the host is not on the allowlist.
        """
        try:
            parsed = urlparse(url)
            hostname = parsed.hostname
        except ValueError as e:
            raise InvalidRequest(f"Unparseable URL {url!r}: {e}", "Invalid url param") from e

        if parsed.scheme not in ("http", "https") or not hostname:
            raise InvalidRequest(f"Not an absolute http(s) URL: {url!r}", "Invalid url param")

        if not host_allowed(hostname, self.allowed_domains):
            raise DomainNotAllowed(hostname, f"Only {self.site_name} URLs are allowed")
        return hostname

    async def fetch(self, url: str) -> FetchResult:
        """Fetch ``url`` and return its decoded body.

        Redirects are followed by hand so that every ``Location`` passes
        ``check_allowed`` before it is requested.

        Raises:
            InvalidRequest: see ``check_allowed``; raised before any network
                call, for the first URL and for every redirect target.
            FetchFailed: network error, timeout, non-2xx response or too many
                redirects.
        """
        self.check_allowed(url)

        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                headers = {"User-Agent": self.user_agent}
                current = url
                for _ in range(self.max_redirects + 1):
                    async with session.get(current, headers=headers, allow_redirects=False) as response:
                        if response.status in REDIRECT_STATUSES:
                            location = response.headers.get("Location")
                            if not location:
                                raise FetchFailed(url, f"HTTP {response.status} without Location")
                            target = urljoin(current, location)
                            self.check_allowed(target)
                            logger.debug(f"Redirect {current} -> {target}")
                            current = target
                            continue

                        if not 200 <= response.status < 300:
                            raise FetchFailed(url, f"HTTP {response.status}")

                        content = await self._read_text(response, current)
                        return FetchResult(
                            url=current,
                            status=response.status,
                            text=content,
                            content_type=response.headers.get("content-type") or None,
                        )

                raise FetchFailed(url, f"More than {self.max_redirects} redirects")

        except asyncio.TimeoutError as e:
            raise FetchFailed(url, "Request timed out") from e
        except aiohttp.ClientError as e:
            raise FetchFailed(url, str(e) or type(e).__name__) from e

    async def _read_text(self, response: aiohttp.ClientResponse, url: str) -> str:
        """Read at most ``max_content_length`` bytes of the body and decode them."""
        chunks = []
        size = 0
        async for chunk in response.content.iter_chunked(READ_CHUNK_SIZE):
            chunks.append(chunk)
            size += len(chunk)
            if size > self.max_content_length:
                logger.warning(f"Truncating {url} at {self.max_content_length} bytes")
                break

        body = b"".join(chunks)[: self.max_content_length]
        try:
            return body.decode(response.charset or "utf-8", errors="replace")
        except LookupError:
            return body.decode("utf-8", errors="replace")
