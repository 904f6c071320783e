"""Extract the main readable content and metadata from an article page.

The heuristic follows the well known readability approach:

1. strip elements that are never content (scripts, navigation, hidden and
   "unlikely" blocks),
2. score every paragraph-like element and propagate the score to its
   ancestors, weighted by class/id hints and link density,
3. take the best scoring subtree, tidy it and make its URLs absolute.

Metadata (title, byline, excerpt, site name) is read from JSON-LD, social meta
tags and the document itself, in that order.
"""

import json
import logging
import re
from dataclasses import dataclass
from urllib.parse import urlparse

from bs4 import Comment, Tag

from ..exceptions import ExtractionFailed
from ..models import ExtractionResult
from .document import Document
from .fallback import first_present

logger = logging.getLogger(__name__)

MIN_PARAGRAPH_LENGTH = 25
MAX_ANCESTOR_LEVELS = 5
MAX_BYLINE_LENGTH = 100

REMOVE_TAGS = {
    "script",
    "style",
    "noscript",
    "template",
    "iframe",
    "object",
    "embed",
    "svg",
    "canvas",
    "form",
    "button",
    "input",
    "select",
    "textarea",
    "nav",
    "aside",
    "link",
    "meta",
}
SCORE_TAGS = ["p", "pre", "td", "blockquote"]
BLOCK_TAGS = [
    "a",
    "blockquote",
    "dl",
    "div",
    "img",
    "ol",
    "p",
    "pre",
    "table",
    "ul",
    "section",
    "article",
    "figure",
]
CONDITIONAL_TAGS = ["div", "section", "ul", "ol", "table"]
NO_REMOVE_TAGS = {"html", "body", "article", "main", "a"}
UNLIKELY_ROLES = {"menu", "menubar", "complementary", "navigation", "alert", "alertdialog", "dialog"}
ARTICLE_TYPES = {
    "Article",
    "NewsArticle",
    "ReviewNewsArticle",
    "AnalysisNewsArticle",
    "OpinionNewsArticle",
    "ReportageNewsArticle",
    "BlogPosting",
    "Review",
    "TechArticle",
    "Report",
}
LAZY_SRC_ATTRS = ("data-src", "data-original", "data-lazy-src", "data-url")

UNLIKELY_CANDIDATES = re.compile(
    r"-ad-|ai2html|banner|breadcrumbs|combx|comment|community|cover-wrap|disqus|extra|"
    r"footer|gdpr|header|legends|menu|related|remark|replies|rss|shoutbox|sidebar|"
    r"skyscraper|social|sponsor|supplemental|ad-break|agegate|pagination|pager|popup|"
    r"yom-remote|newsletter|subscribe|share|promo",
    re.I,
)
MAYBE_CANDIDATE = re.compile(r"and|article|body|column|content|main|shadow", re.I)
POSITIVE = re.compile(
    r"article|body|content|entry|hentry|h-entry|main|page|pagination|post|text|blog|story",
    re.I,
)
NEGATIVE = re.compile(
    r"-ad-|hidden|^hid$| hid$| hid |^hid |banner|combx|comment|com-|contact|foot|footer|"
    r"footnote|gdpr|masthead|media|meta|outbrain|promo|related|scroll|share|shoutbox|"
    r"sidebar|skyscraper|sponsor|shopping|tags|tool|widget",
    re.I,
)
BYLINE = re.compile(r"byline|author|dateline|writtenby|p-author", re.I)
HIDDEN_STYLE = re.compile(r"display\s*:\s*none|visibility\s*:\s*hidden", re.I)
TITLE_SEPARATOR = re.compile(r"\s+[|\-–—\\/>»:]\s+")


def normalize_text(text: str) -> str:
    """Collapse all whitespace runs to single spaces."""
    return " ".join(text.split())


def truncate_smart(text: str, length: int) -> str:
    """Truncate text at a word boundary."""
    if len(text) <= length:
        return text
    truncated = text[:length].rsplit(" ", 1)[0]
    return truncated + "..."


def _text(element: Tag) -> str:
    return normalize_text(element.get_text())


def _class_id(element: Tag) -> tuple[str, str]:
    classes = element.get("class") or []
    if isinstance(classes, str):
        classes = [classes]
    return " ".join(classes), str(element.get("id") or "")


def _link_density(element: Tag) -> float:
    text_length = len(_text(element))
    if text_length == 0:
        return 0.0
    link_length = sum(len(_text(a)) for a in element.find_all("a"))
    return link_length / text_length


def _class_weight(element: Tag) -> int:
    weight = 0
    for value in _class_id(element):
        if not value:
            continue
        if NEGATIVE.search(value):
            weight -= 25
        if POSITIVE.search(value):
            weight += 25
    return weight


def _is_hidden(element: Tag) -> bool:
    if element.has_attr("hidden"):
        return True
    if str(element.get("aria-hidden", "")).lower() == "true":
        return True
    return bool(HIDDEN_STYLE.search(str(element.get("style") or "")))


def _is_url(value: str) -> bool:
    return urlparse(value).scheme in ("http", "https")


@dataclass
class _Candidate:
    element: Tag
    score: float


class ContentExtractor:
    """Find the main article subtree of a parsed page."""

    def __init__(self, min_text_length: int = 250, excerpt_length: int = 200):
        self.min_text_length = min_text_length
        self.excerpt_length = excerpt_length

    def extract(self, doc: Document) -> ExtractionResult:
        """Extract content and metadata from ``doc``.

        The document itself is not modified, so extracting twice yields the
        same result.

        Raises:
            ExtractionFailed: no block with enough readable text was found.
        """
        json_ld = self._read_json_ld(doc)

        soup = doc.copy_tree()
        root = soup.body or soup
        self._remove_noise(root)

        top = self._select_top_candidate(root)
        if top is None:
            raise ExtractionFailed("No content candidates found")

        self._prepare_content(top, doc)
        text = _text(top)
        if len(text) < self.min_text_length:
            raise ExtractionFailed(
                f"Best candidate <{top.name}> has {len(text)} characters, "
                f"need {self.min_text_length}"
            )

        if top.name == "body":
            top.name = "div"

        result = ExtractionResult(
            title=self._find_title(doc, json_ld),
            byline=self._find_byline(doc, json_ld),
            excerpt=self._find_excerpt(doc, json_ld, top),
            site_name=self._find_site_name(doc, json_ld),
            content_html=str(top),
            length=len(text),
        )
        logger.debug(f"Extracted {result.length} characters from <{top.name}>")
        return result

    # -- cleaning ---------------------------------------------------------

    def _remove_noise(self, root: Tag) -> None:
        """Drop elements that are never part of the article body."""
        for comment in root.find_all(string=lambda s: isinstance(s, Comment)):
            comment.extract()

        for element in root.find_all(list(REMOVE_TAGS)):
            if not element.decomposed:
                element.decompose()

        for element in root.find_all(["header", "footer"]):
            if element.decomposed:
                continue
            # Article headers keep the headline and byline.
            if element.find_parent(["article", "main"]) is None:
                element.decompose()

        for element in root.find_all(True):
            if element.decomposed:
                continue
            if _is_hidden(element) or self._is_unlikely(element):
                element.decompose()

    def _is_unlikely(self, element: Tag) -> bool:
        if element.name in NO_REMOVE_TAGS:
            return False
        if str(element.get("role") or "").lower() in UNLIKELY_ROLES:
            return True
        match_string = " ".join(_class_id(element))
        if not match_string.strip():
            return False
        return bool(
            UNLIKELY_CANDIDATES.search(match_string)
            and not MAYBE_CANDIDATE.search(match_string)
            and element.find_parent("table") is None
        )

    # -- scoring ----------------------------------------------------------

    def _initial_score(self, element: Tag) -> float:
        name = element.name
        if name in ("div", "article", "main"):
            score = 5
        elif name in ("pre", "td", "blockquote"):
            score = 3
        elif name in ("address", "ol", "ul", "dl", "dd", "dt", "li", "form"):
            score = -3
        elif name in ("h1", "h2", "h3", "h4", "h5", "h6", "th"):
            score = -5
        else:
            score = 0
        return score + _class_weight(element)

    def _paragraphs(self, root: Tag) -> list[Tag]:
        """Paragraph-like elements in document order.

        A div without block-level children acts as a paragraph.
        """
        found = []
        for element in root.find_all(True):
            if element.name in SCORE_TAGS:
                found.append(element)
            elif element.name == "div" and element.find(BLOCK_TAGS) is None:
                found.append(element)
        return found

    def _select_top_candidate(self, root: Tag) -> Tag | None:
        candidates: dict[int, _Candidate] = {}

        for paragraph in self._paragraphs(root):
            text = _text(paragraph)
            if len(text) < MIN_PARAGRAPH_LENGTH:
                continue

            content_score = 1 + text.count(",") + min(len(text) // 100, 3)

            ancestor = paragraph.parent
            level = 0
            while (
                isinstance(ancestor, Tag)
                and ancestor.name not in ("[document]", "html")
                and level < MAX_ANCESTOR_LEVELS
            ):
                key = id(ancestor)
                if key not in candidates:
                    candidates[key] = _Candidate(ancestor, self._initial_score(ancestor))
                if level == 0:
                    divider = 1
                elif level == 1:
                    divider = 2
                else:
                    divider = level * 3
                candidates[key].score += content_score / divider
                ancestor = ancestor.parent
                level += 1

        if not candidates:
            return self._landmark(root)

        for candidate in candidates.values():
            candidate.score *= 1 - _link_density(candidate.element)

        # max() keeps the first of equal scores, i.e. document order.
        top = max(candidates.values(), key=lambda c: c.score).element

        # A wrapper whose only child is the winner is the same block.
        while (
            isinstance(top.parent, Tag)
            and top.parent.name not in ("[document]", "html", "body")
            and len(top.parent.find_all(True, recursive=False)) == 1
        ):
            top = top.parent
        return top

    def _landmark(self, root: Tag) -> Tag | None:
        return first_present(
            [root.find("article"), root.find(attrs={"role": "main"}), root.find("main")]
        )

    # -- post-processing --------------------------------------------------

    def _prepare_content(self, top: Tag, doc: Document) -> None:
        for element in top.find_all(CONDITIONAL_TAGS):
            if element.decomposed:
                continue
            if self._is_boilerplate(element):
                element.decompose()

        for paragraph in top.find_all("p"):
            if not _text(paragraph) and paragraph.find(["img", "picture", "video"]) is None:
                paragraph.decompose()

        for img in top.find_all("img"):
            src = str(img.get("src") or "")
            if not src or src.startswith("data:"):
                lazy = first_present(img.get(attr) for attr in LAZY_SRC_ATTRS)
                if lazy:
                    img["src"] = lazy
            if img.get("src"):
                img["src"] = doc.absolute_url(str(img["src"]).strip())

        for anchor in top.find_all("a", href=True):
            href = str(anchor["href"]).strip()
            if href and not href.startswith("#"):
                anchor["href"] = doc.absolute_url(href)

    def _is_boilerplate(self, element: Tag) -> bool:
        """Widgets inside the article: link lists, negatively named blocks."""
        if _class_weight(element) < 0:
            return True
        text_length = len(_text(element))
        if element.find(["img", "picture", "video"]) is not None and text_length < 25:
            return False
        return _link_density(element) > 0.5 and text_length < 200

    # -- metadata ---------------------------------------------------------

    def _read_json_ld(self, doc: Document) -> dict:
        """First schema.org article object found in JSON-LD blocks."""
        for script in doc.soup.find_all("script", type="application/ld+json"):
            raw = script.string or script.get_text()
            try:
                data = json.loads(raw)
            except (json.JSONDecodeError, TypeError):
                logger.debug("Skipping malformed JSON-LD block")
                continue
            article = self._find_article_node(data)
            if article is not None:
                return article
        return {}

    def _find_article_node(self, data) -> dict | None:
        if isinstance(data, list):
            for item in data:
                found = self._find_article_node(item)
                if found is not None:
                    return found
            return None
        if not isinstance(data, dict):
            return None
        if "@graph" in data:
            return self._find_article_node(data["@graph"])
        types = data.get("@type")
        if isinstance(types, str):
            types = [types]
        if isinstance(types, list) and ARTICLE_TYPES.intersection(t for t in types if isinstance(t, str)):
            return data
        return None

    @staticmethod
    def _json_ld_name(value) -> str | None:
        """Name from a JSON-LD person/organization (or a list of them)."""
        if isinstance(value, str):
            return value.strip() or None
        if isinstance(value, dict):
            name = value.get("name")
            return name.strip() if isinstance(name, str) and name.strip() else None
        if isinstance(value, list):
            names = [n for n in (ContentExtractor._json_ld_name(v) for v in value) if n]
            return ", ".join(names) or None
        return None

    @staticmethod
    def _json_ld_text(data: dict, key: str) -> str | None:
        value = data.get(key)
        return normalize_text(value) if isinstance(value, str) and value.strip() else None

    def _find_title(self, doc: Document, json_ld: dict) -> str | None:
        title_tag = doc.soup.find("title")
        h1 = doc.soup.find("h1")
        return first_present(
            [
                self._json_ld_text(json_ld, "headline"),
                doc.meta_content("og:title"),
                doc.meta_content("twitter:title"),
                self._clean_title(_text(title_tag)) if title_tag else None,
                _text(h1) if h1 else None,
            ]
        )

    def _clean_title(self, title: str) -> str:
        """Drop a trailing ``| Site Name`` segment when enough words remain."""
        separators = list(TITLE_SEPARATOR.finditer(title))
        if not separators:
            return title
        head = title[: separators[-1].start()]
        if len(head.split()) >= 3:
            return head
        return title

    def _find_byline(self, doc: Document, json_ld: dict) -> str | None:
        article_author = doc.meta_content("article:author")
        if article_author and _is_url(article_author):
            article_author = None
        return first_present(
            [
                self._json_ld_name(json_ld.get("author")),
                doc.meta_content("author"),
                article_author,
                self._byline_from_dom(doc),
            ]
        )

    def _byline_from_dom(self, doc: Document) -> str | None:
        root = doc.body or doc.soup
        for element in root.find_all(True):
            if element.name in ("script", "style", "meta", "link"):
                continue
            is_byline = (
                "author" in (element.get("rel") or [])
                or "author" in str(element.get("itemprop") or "")
                or bool(BYLINE.search(" ".join(_class_id(element))))
            )
            if not is_byline:
                continue
            name = element.find(attrs={"itemprop": "name"})
            text = _text(name if name is not None else element)
            if 0 < len(text) < MAX_BYLINE_LENGTH:
                return text
        return None

    def _find_excerpt(self, doc: Document, json_ld: dict, content: Tag) -> str | None:
        first_paragraph = None
        for paragraph in content.find_all("p"):
            text = _text(paragraph)
            if text:
                first_paragraph = truncate_smart(text, self.excerpt_length)
                break
        return first_present(
            [
                self._json_ld_text(json_ld, "description"),
                doc.meta_content("og:description"),
                doc.meta_content("description"),
                doc.meta_content("twitter:description"),
                first_paragraph,
            ]
        )

    def _find_site_name(self, doc: Document, json_ld: dict) -> str | None:
        return first_present(
            [
                self._json_ld_name(json_ld.get("publisher")),
                doc.meta_content("og:site_name"),
                doc.meta_content("application-name"),
            ]
        )

