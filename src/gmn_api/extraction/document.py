"""Parse raw HTML into a queryable document."""

import logging
from typing import Any, Optional
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup, Tag

logger = logging.getLogger(__name__)

EMPTY_DOCUMENT = "<html><head></head><body></body></html>"


class Document:
    """A parsed HTML page bound to the URL it was fetched from.

    Owned by a single pipeline run. Callers that need to modify the tree
    should work on ``copy_tree()`` so the document stays unchanged.
    """

    def __init__(self, soup: BeautifulSoup, base_url: str | None = None):
        self.soup = soup
        self.base_url = self._resolve_base(base_url)

    def _resolve_base(self, base_url: str | None) -> str | None:
        """Honour a <base href> when present."""
        base = self.soup.find("base", href=True)
        if isinstance(base, Tag):
            href = str(base["href"]).strip()
            if href:
                return urljoin(base_url or "", href) or None
        return base_url

    def select_one(self, selector: str) -> Optional[Tag]:
        return self.soup.select_one(selector)

    def attr(self, selector: str, name: str) -> Optional[str]:
        """Read an attribute from the first element matching ``selector``."""
        element = self.select_one(selector)
        if element is None:
            return None
        value = element.get(name)
        if isinstance(value, list):
            return " ".join(value)
        return value

    def meta_content(self, key: str) -> Optional[str]:
        """Content of a <meta> tag looked up by ``property`` or ``name``."""
        key = key.lower()
        for meta in self.soup.find_all("meta"):
            prop = str(meta.get("property") or meta.get("name") or "").lower()
            if prop == key:
                content = meta.get("content")
                if content and content.strip():
                    return content.strip()
        return None

    def absolute_url(self, url: str) -> str:
        """Resolve ``url`` against the document's base URL."""
        if not self.base_url or urlparse(url).scheme:
            return url
        return urljoin(self.base_url, url)

    def html(self, element: Tag | None = None) -> str:
        """Serialize ``element`` (or the whole document) back to HTML."""
        return str(element if element is not None else self.soup)

    def copy_tree(self) -> BeautifulSoup:
        return BeautifulSoup(str(self.soup), "html.parser")

    @property
    def body(self) -> Optional[Tag]:
        return self.soup.body


def parse(html: Any, base_url: str | None = None) -> Document:
    """Parse ``html`` into a ``Document``.

    Malformed markup is repaired on a best-effort basis. Input that is not
    text (str or bytes) produces an empty document.
    """
    if not isinstance(html, (str, bytes)):
        logger.warning(f"Cannot parse {type(html).__name__} as HTML, using empty document")
        html = EMPTY_DOCUMENT
    soup = BeautifulSoup(html, "html.parser")
    return Document(soup, base_url)
