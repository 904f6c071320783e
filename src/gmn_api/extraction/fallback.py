"""Ordered fallback selection for images and page metadata."""

from typing import TYPE_CHECKING, Iterable, Optional, TypeVar
from urllib.parse import urlparse

if TYPE_CHECKING:
    from ..models import ImageCandidateSet
    from .document import Document

T = TypeVar("T")

LEAD_IMAGE_META = ("og:image", "twitter:image")
LEAD_IMAGE_SCHEMES = ("http", "https")


def _is_present(value: object) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def first_present(candidates: Iterable[Optional[T]]) -> Optional[T]:
    """Return the first candidate that is neither None nor a blank string."""
    for candidate in candidates:
        if _is_present(candidate):
            return candidate
    return None


def pick_image(images: Optional["ImageCandidateSet"]) -> Optional[str]:
    """Choose the largest available image variant."""
    if images is None:
        return None
    return first_present(images.candidates())


def _lead_image_url(doc: "Document", key: str) -> Optional[str]:
    value = doc.meta_content(key)
    if value is None:
        return None
    url = doc.absolute_url(value.strip())
    if urlparse(url).scheme.lower() not in LEAD_IMAGE_SCHEMES:
        return None
    return url


def pick_lead_image(doc: "Document") -> Optional[str]:
    """Choose the page's lead image from its social meta tags.

    Only absolute http(s) URLs qualify; a ``data:`` or ``javascript:`` value
    is skipped in favour of the next tag.
    """
    return first_present(_lead_image_url(doc, key) for key in LEAD_IMAGE_META)
