from unittest.mock import MagicMock

import pytest

from hashlink_auditor.managers.header_cache_manager import ProcessedHeaderCache
from hashlink_auditor.server.app import create_app
from page_fetcher.model import FetchError, FetchResult, SitemapParseError

SAMPLE_PAGE = (
    '<header><nav><a href="#">Home</a></nav></header>'
    '<footer><a href="/#">Top</a></footer>'
    '<p><a href="#/">Jump</a></p>'
)


@pytest.fixture
def client(controller, pages):
    pages["https://example.com/"] = FetchResult(
        url="https://example.com/", status=200, content_type="text/html", content=SAMPLE_PAGE
    )
    app = create_app(config={"server": {"cors_origin": "*"}}, cache=controller.cache, controller=controller)
    return app.test_client()


@pytest.fixture
def mock_controller():
    return MagicMock()


@pytest.fixture
def mock_client(mock_controller):
    app = create_app(config={}, cache=ProcessedHeaderCache(), controller=mock_controller)
    return app.test_client()


@pytest.mark.parametrize("path", ["/api/check-page-for-hash", "/api/fetch-page", "/api/process-sitemap-index"])
def test_url_parameter_is_required(client, path):
    response = client.get(path)
    assert response.status_code == 400
    assert response.get_json() == {"error": "URL parameter is required"}


def test_check_page_for_hash(client):
    response = client.get("/api/check-page-for-hash", query_string={"url": "https://example.com/"})
    assert response.status_code == 200

    data = response.get_json()
    assert data["success"] is True
    assert data["hasHashLinks"] is True
    assert [link["text"] for link in data["headerHashLinks"]] == ["Home"]
    assert [link["text"] for link in data["footerHashLinks"]] == ["Top"]
    assert [link["text"] for link in data["hashLinks"]] == ["Jump"]
    assert data["headerStats"]["totalHeadersProcessed"] == 2


def test_check_page_fetch_failure_is_not_an_http_error(client):
    response = client.get("/api/check-page-for-hash", query_string={"url": "https://down.example.com/"})
    assert response.status_code == 200
    data = response.get_json()
    assert data["success"] is False
    assert data["url"] == "https://down.example.com/"
    assert data["hashLinks"] == []


def test_cors_header_is_set(client):
    response = client.get("/api/header-cache")
    assert response.headers["Access-Control-Allow-Origin"] == "*"


def test_header_cache_status_and_reset(client):
    client.get("/api/check-page-for-hash", query_string={"url": "https://example.com/"})

    status = client.get("/api/header-cache").get_json()
    assert status["totalHeadersProcessed"] == 2

    reset = client.delete("/api/header-cache").get_json()
    assert reset["totalHeadersProcessed"] == 0


def test_fetch_page_not_found_returns_500(client, pages):
    pages["https://example.com/gone"] = FetchResult(
        url="https://example.com/gone", status=404, content_type="text/html", content="<h1>Not found</h1>"
    )
    response = client.get("/api/fetch-page", query_string={"url": "https://example.com/gone"})
    assert response.status_code == 500
    assert response.get_json() == {
        "error": "Failed to fetch the page",
        "message": "Request failed with status code 404"
    }


def test_sitemap_not_found_returns_500(client, pages):
    pages["https://example.com/sitemap.xml"] = FetchResult(
        url="https://example.com/sitemap.xml", status=404, content_type="application/xml",
        content="<urlset><url><loc>https://example.com/a</loc></url></urlset>"
    )
    response = client.get("/api/process-sitemap-index", query_string={"url": "https://example.com/sitemap.xml"})
    assert response.status_code == 500
    assert response.get_json()["message"] == "Request failed with status code 404"


def test_fetch_page_failure_returns_500(mock_client, mock_controller):
    mock_controller.fetch_page.side_effect = FetchError("https://x.test", "timeout of 10s exceeded")
    response = mock_client.get("/api/fetch-page", query_string={"url": "https://x.test"})
    assert response.status_code == 500
    assert response.get_json() == {"error": "Failed to fetch the page", "message": "timeout of 10s exceeded"}


def test_fetch_page_success(mock_client, mock_controller):
    mock_controller.fetch_page.return_value = {"success": True, "content": "<p>hi</p>", "isXml": False}
    response = mock_client.get("/api/fetch-page", query_string={"url": "https://x.test"})
    assert response.status_code == 200
    assert response.get_json()["content"] == "<p>hi</p>"
    mock_controller.fetch_page.assert_called_once_with("https://x.test")


def test_sitemap_not_valid_returns_400(mock_client, mock_controller):
    mock_controller.process_sitemap_index.side_effect = SitemapParseError(
        "The provided URL does not appear to be a valid sitemap"
    )
    response = mock_client.get("/api/process-sitemap-index", query_string={"url": "https://x.test/"})
    assert response.status_code == 400
    assert response.get_json() == {"error": "The provided URL does not appear to be a valid sitemap"}


def test_sitemap_fetch_failure_returns_500(mock_client, mock_controller):
    mock_controller.process_sitemap_index.side_effect = FetchError("https://x.test/", "connect ECONNREFUSED")
    response = mock_client.get("/api/process-sitemap-index", query_string={"url": "https://x.test/"})
    assert response.status_code == 500
    assert response.get_json()["error"] == "Failed to process the sitemap index"


def test_unexpected_error_in_check_returns_500(mock_client, mock_controller):
    mock_controller.check_page.side_effect = RuntimeError("boom")
    response = mock_client.get("/api/check-page-for-hash", query_string={"url": "https://x.test/"})
    assert response.status_code == 500
    assert response.get_json()["success"] is False
