import pytest

from conftest import ARTICLE_URL, EMPTY_HTML, FakeListing, make_reader
from gmn_api.config import Config
from gmn_api.exceptions import FetchFailed, UpstreamFailure
from gmn_api.models import ArticleListing, ArticleSummary, Paging
from gmn_api.web.app import create_app


def _listing(count: int, limit: int = 20, offset: int = 0) -> ArticleListing:
    articles = [
        ArticleSummary(
            title=f"Story {i}",
            link=f"https://www.gamespot.com/articles/{i}/",
            date="2024-02-21",
            deck=None,
            image=None,
        )
        for i in range(count)
    ]
    return ArticleListing(articles, Paging(limit, offset, count, count == limit))


def test_health(make_client):
    response = make_client().get("/health")
    assert response.status_code == 200
    assert response.get_json() == {"status": "ok"}


def test_article_missing_url(make_client):
    response = make_client().get("/api/article")
    assert response.status_code == 400
    assert response.get_json() == {"error": "Missing url param"}


def test_article_blank_url(make_client):
    response = make_client().get("/api/article?url=%20%20")
    assert response.status_code == 400
    assert response.get_json() == {"error": "Missing url param"}


def test_article_disallowed_domain(make_client):
    reader = make_reader("<p>never</p>")
    response = make_client(reader=reader).get("/api/article", query_string={"url": "https://evil.example.com/x"})

    assert response.status_code == 400
    assert response.get_json() == {"error": "Only GameSpot URLs are allowed"}
    assert reader.fetcher.fetched == []


def test_article_invalid_url(make_client):
    response = make_client().get("/api/article", query_string={"url": "not a url"})
    assert response.status_code == 400
    assert response.get_json() == {"error": "Invalid url param"}


def test_article_success(make_client):
    response = make_client().get("/api/article", query_string={"url": ARTICLE_URL})
    assert response.status_code == 200

    body = response.get_json()
    assert set(body) == {"title", "byline", "excerpt", "siteName", "leadImage", "html"}
    assert body["title"] == "Elden Ring DLC Gets Release Date"
    assert body["siteName"] == "GameSpot"
    assert body["leadImage"] == "https://www.gamespot.com/a/uploads/original/lead.jpg"
    assert "<script" not in body["html"]
    assert "onclick" not in body["html"]


def test_article_empty_page(make_client):
    client = make_client(reader=make_reader(EMPTY_HTML))
    response = client.get("/api/article", query_string={"url": ARTICLE_URL})
    assert response.status_code == 500
    assert response.get_json() == {"error": "Unable to parse article"}


def test_article_fetch_failure_hides_details(make_client):
    reader = make_reader(error=FetchFailed(ARTICLE_URL, "connection reset by 10.0.0.1"))
    response = make_client(reader=reader).get("/api/article", query_string={"url": ARTICLE_URL})

    assert response.status_code == 500
    assert response.get_json() == {"error": "Reader failed"}


def test_article_unexpected_error(make_client):
    reader = make_reader(error=RuntimeError("boom"))
    response = make_client(reader=reader).get("/api/article", query_string={"url": ARTICLE_URL})

    assert response.status_code == 500
    assert response.get_json() == {"error": "Reader failed"}


def test_articles_default_paging(make_client):
    listing = FakeListing(_listing(20))
    response = make_client(listing=listing).get("/api/articles")

    assert response.status_code == 200
    body = response.get_json()
    assert len(body["articles"]) == 20
    assert body["paging"] == {"limit": 20, "offset": 0, "count": 20, "hasMore": True}
    assert body["articles"][0] == {
        "title": "Story 0",
        "link": "https://www.gamespot.com/articles/0/",
        "date": "2024-02-21",
        "deck": None,
        "image": None,
    }
    assert listing.calls == [(20, 0)]


def test_articles_passes_paging_args(make_client):
    listing = FakeListing(_listing(3, limit=5, offset=10))
    response = make_client(listing=listing).get("/api/articles?limit=5&offset=10")

    assert response.status_code == 200
    assert response.get_json()["paging"]["hasMore"] is False
    assert listing.calls == [(5, 10)]


@pytest.mark.parametrize(
    "query, error",
    [
        ("limit=abc", "Invalid limit param"),
        ("limit=-1", "Invalid limit param"),
        ("offset=x", "Invalid offset param"),
        ("limit=101", "limit must be at most 100"),
        ("limit=0", "limit must be at least 1"),
    ],
)
def test_articles_invalid_paging(make_client, query, error):
    listing = FakeListing(_listing(0))
    response = make_client(listing=listing).get(f"/api/articles?{query}")

    assert response.status_code == 400
    assert response.get_json() == {"error": error}
    assert listing.calls == []


def test_articles_upstream_failure(make_client):
    listing = FakeListing(error=UpstreamFailure("Articles API returned HTTP 502"))
    response = make_client(listing=listing).get("/api/articles")

    assert response.status_code == 500
    assert response.get_json() == {"error": "Failed to fetch"}


def test_articles_unexpected_error(make_client):
    listing = FakeListing(error=KeyError("results"))
    response = make_client(listing=listing).get("/api/articles")

    assert response.status_code == 500
    assert response.get_json() == {"error": "Failed to fetch"}


def test_unknown_route_is_json_404(make_client):
    response = make_client().get("/api/nothing")
    assert response.status_code == 404
    assert response.get_json() == {"error": "Not found"}


def test_cors_wildcard_by_default(make_client):
    response = make_client().get("/health", headers={"Origin": "https://reader.example.com"})
    assert response.headers["Access-Control-Allow-Origin"] == "*"


def test_cors_restricted_origins():
    cfg = Config(gamespot_api_key="k", cors_origins=("https://reader.example.com",))
    client = create_app(cfg, reader=make_reader(), listing=FakeListing()).test_client()

    allowed = client.get("/health", headers={"Origin": "https://reader.example.com"})
    assert allowed.headers["Access-Control-Allow-Origin"] == "https://reader.example.com"

    denied = client.get("/health", headers={"Origin": "https://evil.example.com"})
    assert "Access-Control-Allow-Origin" not in denied.headers


def test_create_app_builds_default_collaborators():
    app = create_app(Config(gamespot_api_key="k", allowed_domains=("example.com",)))
    assert app.config["READER"].fetcher.allowed_domains == ("example.com",)
    assert app.config["LISTING"].api_key == "k"
