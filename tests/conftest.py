import pytest

from gmn_api.config import Config
from gmn_api.extraction.content import ContentExtractor
from gmn_api.fetching.fetcher import ArticleFetcher
from gmn_api.models import FetchResult
from gmn_api.pipeline import ReaderPipeline
from gmn_api.web.app import create_app

ARTICLE_URL = "https://www.gamespot.com/articles/elden-ring-dlc-release-date/1100-6520000/"

ARTICLE_HTML = """
<!DOCTYPE html>
<html lang="en">
<head>
    <title>Elden Ring DLC Gets Release Date - GameSpot</title>
    <meta property="og:title" content="Elden Ring DLC Gets Release Date">
    <meta property="og:site_name" content="GameSpot">
    <meta property="og:image" content="https://www.gamespot.com/a/uploads/original/lead.jpg">
    <meta name="twitter:image" content="https://www.gamespot.com/a/uploads/original/twitter.jpg">
    <meta name="description" content="FromSoftware has announced when Shadow of the Erdtree arrives.">
    <meta name="author" content="Jane Doe">
    <script>window.tracking = true;</script>
    <style>.ads { color: red; }</style>
</head>
<body>
    <nav class="site-nav">
        <ul>
            <li><a href="/news/">News</a></li>
            <li><a href="/reviews/">Reviews</a></li>
        </ul>
    </nav>
    <header class="site-header"><a href="/">GameSpot home page</a></header>
    <main>
        <article class="article-body">
            <h1>Elden Ring DLC Gets Release Date</h1>
            <p>FromSoftware has finally announced the release date for Shadow of the Erdtree, the
            long-awaited expansion for Elden Ring, and it is arriving sooner than many fans expected.</p>
            <script>alert("inline");</script>
            <p>The expansion takes players to the Land of Shadow, a new region, with new bosses,
            weapons, spells, and armor, according to the announcement made on Wednesday.</p>
            <figure>
                <img src="/a/uploads/figure.jpg" alt="The Erdtree">
                <figcaption>The Land of Shadow.</figcaption>
            </figure>
            <p>Pre-orders are available now on PlayStation, Xbox, and PC, with a premium bundle that
            includes a steelbook, an art book, and a digital soundtrack.
            <a href="/articles/elden-ring-guide/">Read our guide</a>.</p>
            <p onclick="steal()">Director Hidetaka Miyazaki said the expansion is the largest the
            studio has ever made, and that it will be the only expansion for the game.</p>
        </article>
        <aside class="sidebar">
            <h3>Related Stories</h3>
            <ul>
                <li><a href="/a">One</a></li>
                <li><a href="/b">Two</a></li>
            </ul>
        </aside>
    </main>
    <div class="comments">Comments are closed, please come back later to share your thoughts.</div>
    <footer><p>&copy; 2024 GameSpot. All rights reserved, every single one of them, forever.</p></footer>
</body>
</html>
"""

EMPTY_HTML = "<html><head><title>Nothing here</title></head><body></body></html>"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep developer environment variables out of the tests."""
    for name in (
        "GAMESPOT_API_KEY",
        "GAMESPOT_BASE_URL",
        "ALLOWED_DOMAINS",
        "READER_USER_AGENT",
        "FETCH_TIMEOUT_SECONDS",
        "CORS_ORIGINS",
        "HOST",
        "PORT",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config():
    return Config(gamespot_api_key="test-key")


@pytest.fixture
def article_html():
    return ARTICLE_HTML


class StubFetcher(ArticleFetcher):
    """Serves canned HTML after the real allowlist check."""

    def __init__(self, html: str | None = None, error: Exception | None = None):
        super().__init__()
        self.html = html
        self.error = error
        self.fetched: list[str] = []

    async def fetch(self, url: str) -> FetchResult:
        self.check_allowed(url)
        self.fetched.append(url)
        if self.error is not None:
            raise self.error
        return FetchResult(url=url, status=200, text=self.html or "", content_type="text/html")


class FakeListing:
    def __init__(self, listing=None, error: Exception | None = None):
        self.listing = listing
        self.error = error
        self.calls: list[tuple[int, int]] = []

    async def list_articles(self, limit: int = 20, offset: int = 0):
        self.calls.append((limit, offset))
        if self.error is not None:
            raise self.error
        return self.listing


def make_reader(html: str | None = None, error: Exception | None = None) -> ReaderPipeline:
    return ReaderPipeline(StubFetcher(html, error), ContentExtractor(), default_site_name="GameSpot")


@pytest.fixture
def make_client(config):
    """Build a test client around stub reader/listing collaborators."""

    def _make(reader=None, listing=None):
        app = create_app(
            config,
            reader=reader or make_reader(ARTICLE_HTML),
            listing=listing or FakeListing(),
        )
        app.config["TESTING"] = True
        return app.test_client()

    return _make

