"""Sanitize extracted article HTML for rendering in the browser."""

import bleach
from bleach.css_sanitizer import CSSSanitizer
from bleach.html5lib_shim import Filter
from bleach.sanitizer import Cleaner
from bs4 import BeautifulSoup

ALLOWED_TAGS = frozenset(bleach.sanitizer.ALLOWED_TAGS).union(
    {
        "address",
        "article",
        "aside",
        "b",
        "bdi",
        "bdo",
        "br",
        "caption",
        "cite",
        "code",
        "col",
        "colgroup",
        "data",
        "dd",
        "dfn",
        "div",
        "dl",
        "dt",
        "em",
        "footer",
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "header",
        "hr",
        "i",
        "kbd",
        "main",
        "mark",
        "nav",
        "p",
        "pre",
        "q",
        "rp",
        "rt",
        "ruby",
        "s",
        "samp",
        "section",
        "small",
        "span",
        "strong",
        "sub",
        "sup",
        "table",
        "tbody",
        "td",
        "tfoot",
        "th",
        "thead",
        "time",
        "tr",
        "u",
        "var",
        "wbr",
        # Images are the reason to use a reader view at all.
        "img",
        "figure",
        "figcaption",
    }
)

ALLOWED_ATTRIBUTES = {
    "a": ["href", "name", "target", "rel"],
    "img": ["src", "alt", "title"],
    "*": ["id", "class", "style"],
}

ALLOWED_PROTOCOLS = frozenset({"http", "https", "mailto"})

# Removed together with their content; stripping the tag alone would leave
# script source behind as text.
DROP_WITH_CONTENT = [
    "script",
    "style",
    "noscript",
    "template",
    "iframe",
    "object",
    "embed",
    "svg",
    "math",
    "title",
]

LINK_TARGET = "_blank"
LINK_REL = "noopener"


class SafeLinkFilter(Filter):
    """Force every anchor to open in a new tab without an opener reference."""

    TARGET = (None, "target")
    REL = (None, "rel")

    def __iter__(self):
        for token in Filter.__iter__(self):
            if token["type"] in ("StartTag", "EmptyTag") and token["name"] == "a":
                attrs = {
                    key: value
                    for key, value in (token.get("data") or {}).items()
                    if key not in (self.TARGET, self.REL)
                }
                attrs[self.TARGET] = LINK_TARGET
                attrs[self.REL] = LINK_REL
                token["data"] = attrs
            yield token


def _drop_executable(html: str) -> str:
    soup = BeautifulSoup(html, "html.parser")
    for element in soup.find_all(DROP_WITH_CONTENT):
        if not element.decomposed:
            element.decompose()
    return str(soup)


def sanitize(html: str | None) -> str:
    """Return ``html`` reduced to the allowed tag and attribute vocabulary.

    Event handlers, ``javascript:`` URLs and script-like elements never
    survive. Anchors always get ``target="_blank" rel="noopener"``. Running
    the result through ``sanitize`` again leaves it unchanged.
    """
    if not html:
        return ""
    cleaner = Cleaner(
        tags=ALLOWED_TAGS,
        attributes=ALLOWED_ATTRIBUTES,
        protocols=ALLOWED_PROTOCOLS,
        strip=True,
        strip_comments=True,
        css_sanitizer=CSSSanitizer(),
        filters=[SafeLinkFilter],
    )
    return cleaner.clean(_drop_executable(html))
