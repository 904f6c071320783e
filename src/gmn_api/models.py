"""Data models for the listing proxy and the reader pipeline."""

from dataclasses import dataclass, field, fields
from typing import Any, Optional

from .exceptions import UpstreamFailure
from .extraction.fallback import pick_image


def _str_or_none(value: Any) -> Optional[str]:
    """Keep strings, treat anything else as absent."""
    return value if isinstance(value, str) else None


@dataclass(frozen=True)
class ImageCandidateSet:
    """Image variants offered by the upstream API for one article."""

    original: Optional[str] = None
    super_url: Optional[str] = None
    medium_url: Optional[str] = None
    small_url: Optional[str] = None
    square_medium: Optional[str] = None
    square_small: Optional[str] = None
    thumb_url: Optional[str] = None
    tiny_url: Optional[str] = None

    # Largest first; the square tier sits between small and the legacy sizes.
    PRIORITY = (
        "original",
        "super_url",
        "medium_url",
        "small_url",
        "square_medium",
        "square_small",
        "thumb_url",
        "tiny_url",
    )

    @classmethod
    def from_dict(cls, data: Any) -> Optional["ImageCandidateSet"]:
        """Build from the upstream ``image`` object, or None if it isn't one."""
        if not isinstance(data, dict):
            return None
        known = {f.name for f in fields(cls)}
        return cls(**{k: _str_or_none(v) for k, v in data.items() if k in known})

    def candidates(self) -> list[Optional[str]]:
        return [getattr(self, name) for name in self.PRIORITY]


@dataclass(frozen=True)
class UpstreamArticle:
    """One item of the upstream ``results`` array."""

    title: Optional[str] = None
    site_detail_url: Optional[str] = None
    publish_date: Optional[str] = None
    deck: Optional[str] = None
    image: Optional[ImageCandidateSet] = None

    @classmethod
    def from_dict(cls, data: Any) -> "UpstreamArticle":
        """Validate a raw upstream item, defaulting absent fields to None."""
        if not isinstance(data, dict):
            raise UpstreamFailure(f"Upstream article is not an object: {type(data).__name__}")
        return cls(
            title=_str_or_none(data.get("title")),
            site_detail_url=_str_or_none(data.get("site_detail_url")),
            publish_date=_str_or_none(data.get("publish_date")),
            deck=_str_or_none(data.get("deck")),
            image=ImageCandidateSet.from_dict(data.get("image")),
        )


@dataclass(frozen=True)
class ArticleSummary:
    """Article as exposed by the listing endpoint."""

    title: Optional[str]
    link: Optional[str]
    date: Optional[str]
    deck: Optional[str]
    image: Optional[str]

    @classmethod
    def from_upstream(cls, article: UpstreamArticle) -> "ArticleSummary":
        return cls(
            title=article.title,
            link=article.site_detail_url,
            date=article.publish_date[:10] if article.publish_date else None,
            deck=article.deck,
            image=pick_image(article.image),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "link": self.link,
            "date": self.date,
            "deck": self.deck,
            "image": self.image,
        }


@dataclass(frozen=True)
class Paging:
    limit: int
    offset: int
    count: int
    has_more: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "limit": self.limit,
            "offset": self.offset,
            "count": self.count,
            "hasMore": self.has_more,
        }


@dataclass(frozen=True)
class ArticleListing:
    """A page of article summaries with its paging info."""

    articles: list[ArticleSummary] = field(default_factory=list)
    paging: Paging = field(default_factory=lambda: Paging(0, 0, 0, False))

    def to_dict(self) -> dict[str, Any]:
        return {
            "articles": [a.to_dict() for a in self.articles],
            "paging": self.paging.to_dict(),
        }


@dataclass(frozen=True)
class FetchResult:
    """Result of fetching one article page."""

    url: str
    status: int
    text: str
    content_type: Optional[str] = None


@dataclass(frozen=True)
class ExtractionResult:
    """Main content and metadata found in a page.

    ``content_html`` is untrusted and must be sanitized before it leaves the
    service.
    """

    title: Optional[str]
    byline: Optional[str]
    excerpt: Optional[str]
    site_name: Optional[str]
    content_html: str
    length: int


@dataclass(frozen=True)
class ReaderResponse:
    """Payload of the reader endpoint."""

    title: Optional[str]
    byline: Optional[str]
    excerpt: Optional[str]
    site_name: str
    lead_image: Optional[str]
    html: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "byline": self.byline,
            "excerpt": self.excerpt,
            "siteName": self.site_name,
            "leadImage": self.lead_image,
            "html": self.html,
        }
