import pytest
from unittest.mock import AsyncMock, MagicMock, patch
from fastapi.testclient import TestClient

from api.main import app
from link_crawler.errors import InvalidURL
from link_crawler.models import CrawlFailure, CrawlReport

client = TestClient(app)

# a realistic CrawlReport to reuse across tests
MOCK_REPORT = CrawlReport(
    seed="https://example.com/",
    visited=[
        "https://example.com/",
        "https://example.com/calendar/",
        "https://example.com/cinema/",
    ],
    failures=[
        CrawlFailure(
            url="https://example.com/cinema/",
            kind="timeout",
            message="Request timed out after 3s: https://example.com/cinema/",
        ),
    ],
)


def mock_crawler(report=MOCK_REPORT):
    crawler = MagicMock()
    crawler.run = AsyncMock(return_value=report)
    return crawler


# --- /health ---

def test_health_returns_ok():
    with patch("api.routes.is_cache_healthy", return_value=True):
        response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["cache"] == "connected"


def test_health_when_cache_down():
    with patch("api.routes.is_cache_healthy", return_value=False):
        response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["cache"] == "unavailable"


# --- /crawl ---

def test_crawl_success():
    with patch("api.routes.get_cached_report", return_value=None), \
         patch("api.routes.cache_report"), \
         patch("api.routes.LinkCrawler", return_value=mock_crawler()):
        response = client.post("/crawl", json={"url": "https://example.com"})

    assert response.status_code == 200
    data = response.json()
    assert data["seed"] == "https://example.com/"
    assert data["urls"][1] == "https://example.com/calendar/"
    assert data["count"] == 3
    assert data["failures"][0]["kind"] == "timeout"
    assert data["cached"] is False


def test_crawl_returns_cached_report():
    with patch("api.routes.get_cached_report", return_value=MOCK_REPORT.to_dict()), \
         patch("api.routes.LinkCrawler") as crawler_cls:
        response = client.post("/crawl", json={"url": "https://example.com"})

    assert response.status_code == 200
    assert response.json()["cached"] is True
    crawler_cls.assert_not_called()


def test_crawl_invalid_url_rejected():
    response = client.post("/crawl", json={"url": "not-a-url"})
    assert response.status_code == 422


def test_crawl_missing_url_rejected():
    response = client.post("/crawl", json={})
    assert response.status_code == 422


@pytest.mark.parametrize("body", [
    {"url": "https://example.com", "timeout": 0},
    {"url": "https://example.com", "concurrency": 0},
    {"url": "https://example.com", "concurrency": 100},
    {"url": "https://example.com", "max_pages": 0},
])
def test_crawl_out_of_range_options_rejected(body):
    response = client.post("/crawl", json=body)
    assert response.status_code == 422


def test_crawler_invalid_url_maps_to_422():
    # passes the prefix check but not the crawler's own parsing
    with patch("api.routes.get_cached_report", return_value=None), \
         patch("api.routes.LinkCrawler", side_effect=InvalidURL("http://", "empty host")):
        response = client.post("/crawl", json={"url": "http://"})

    assert response.status_code == 422
    assert "empty host" in response.json()["detail"]


def test_options_passed_to_crawler():
    with patch("api.routes.get_cached_report", return_value=None), \
         patch("api.routes.cache_report"), \
         patch("api.routes.LinkCrawler", return_value=mock_crawler()) as crawler_cls:
        client.post(
            "/crawl",
            json={"url": "https://example.com", "timeout": 1.5, "same_host": True},
        )

    crawler_cls.assert_called_once_with("https://example.com", same_host=True, timeout=1.5)


def test_unreachable_seed_returns_502():
    dead = CrawlReport(
        seed="https://dead.example.com/",
        visited=["https://dead.example.com/"],
        failures=[
            CrawlFailure(
                url="https://dead.example.com/",
                kind="extraction_failed",
                message="Extraction failed for https://dead.example.com/: refused",
            ),
        ],
    )
    with patch("api.routes.get_cached_report", return_value=None), \
         patch("api.routes.cache_report") as mock_cache, \
         patch("api.routes.LinkCrawler", return_value=mock_crawler(dead)):
        response = client.post("/crawl", json={"url": "https://dead.example.com"})

    assert response.status_code == 502
    assert "Failed to reach URL" in response.json()["detail"]
    mock_cache.assert_not_called()


def test_successful_crawl_is_cached():
    clean = CrawlReport(seed=MOCK_REPORT.seed, visited=list(MOCK_REPORT.visited))
    with patch("api.routes.get_cached_report", return_value=None), \
         patch("api.routes.cache_report") as mock_cache, \
         patch("api.routes.LinkCrawler", return_value=mock_crawler(clean)):
        client.post("/crawl", json={"url": "https://example.com"})

    mock_cache.assert_called_once()
    params, report = mock_cache.call_args.args
    assert params["url"] == "https://example.com"
    assert report["count"] == 3


def test_crawl_with_timeouts_is_not_cached():
    # MOCK_REPORT has a timed-out page
    with patch("api.routes.get_cached_report", return_value=None), \
         patch("api.routes.cache_report") as mock_cache, \
         patch("api.routes.LinkCrawler", return_value=mock_crawler()):
        response = client.post("/crawl", json={"url": "https://example.com"})

    assert response.status_code == 200
    assert response.json()["cached"] is False
    mock_cache.assert_not_called()


def test_extraction_failures_alone_still_cached():
    report = CrawlReport(
        seed="https://example.com/",
        visited=["https://example.com/", "https://example.com/broken/"],
        failures=[
            CrawlFailure(
                url="https://example.com/broken/",
                kind="extraction_failed",
                message="Extraction failed for https://example.com/broken/: HTTP error! status: 404",
            ),
        ],
    )
    with patch("api.routes.get_cached_report", return_value=None), \
         patch("api.routes.cache_report") as mock_cache, \
         patch("api.routes.LinkCrawler", return_value=mock_crawler(report)):
        client.post("/crawl", json={"url": "https://example.com"})

    mock_cache.assert_called_once()


def test_invalid_url_error_has_code():
    with patch("api.routes.get_cached_report", return_value=None), \
         patch("api.routes.LinkCrawler", side_effect=InvalidURL("http://", "empty host")):
        response = client.post("/crawl", json={"url": "http://"})

    assert response.json()["code"] == "invalid_url"
