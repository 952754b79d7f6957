"""Tests for the HTTP endpoints."""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from errors import AnalysisFailed, FetchFailed
from main import app
from rate_limit import RateLimiter, get_rate_limiter

PAGE = "<html><head><title>Example</title></head><body></body></html>"


@pytest.fixture
def client(db_path):
    with TestClient(app) as test_client:
        yield test_client


def _analyze(client, url="example.com", **kwargs):
    return client.post("/api/analyze", json={"url": url}, **kwargs)


class TestHealthEndpoint:
    def test_health_check(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


class TestAnalyze:
    @patch("pipeline.generate_seo_analysis", return_value="Overall SEO Score: 72/100")
    @patch("pipeline.fetch_html", return_value=PAGE)
    def test_success(self, mock_fetch, mock_generate, client):
        response = _analyze(client)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        data = body["data"]
        assert data["url"] == "https://example.com/"
        assert data["title"] == "Example"
        assert data["hasTitle"] is True
        assert data["titleLength"] == 7
        assert data["hasDescription"] is False
        assert data["hasH1"] is False
        assert data["aiAnalysis"] == "Overall SEO Score: 72/100"
        assert data["seoScore"] == 72
        assert data["scoreBand"] == "fair"
        assert "createdAt" in data and "metaTags" in data

    @pytest.mark.parametrize("payload", [{}, {"url": ""}, {"url": "   "}, {"url": 42}])
    def test_invalid_body_is_400(self, client, payload):
        response = client.post("/api/analyze", json=payload)

        assert response.status_code == 400
        assert response.json()["success"] is False
        assert response.json()["error"]

    def test_malformed_url_is_400(self, client):
        response = _analyze(client, "https://")

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Invalid URL format"}

    @patch("pipeline.fetch_html", side_effect=FetchFailed("Failed to fetch URL: HTTP 404: Not Found"))
    def test_fetch_failure_is_500_with_message(self, mock_fetch, client):
        response = _analyze(client)

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "Failed to fetch URL: HTTP 404: Not Found"}

    @patch("pipeline.generate_seo_analysis", side_effect=AnalysisFailed("Failed to generate SEO analysis: boom"))
    @patch("pipeline.fetch_html", return_value=PAGE)
    def test_analysis_failure_is_500(self, mock_fetch, mock_generate, client):
        response = _analyze(client)

        assert response.status_code == 500
        assert "boom" in response.json()["error"]

    @patch("main.run_analysis", side_effect=KeyError("unexpected"))
    def test_unexpected_failure_is_generic_500(self, mock_run, client):
        response = _analyze(client)

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "Failed to analyze website"}

    @patch("pipeline.generate_seo_analysis", return_value="fine")
    @patch("pipeline.fetch_html", return_value=PAGE)
    def test_rate_limited_after_max_requests(self, mock_fetch, mock_generate, client, monkeypatch):
        monkeypatch.setattr("rate_limit._limiter", RateLimiter(max_requests=2, window_seconds=900))
        headers = {"x-forwarded-for": "203.0.113.9"}

        assert _analyze(client, headers=headers).status_code == 200
        assert _analyze(client, headers=headers).status_code == 200
        response = _analyze(client, headers=headers)

        assert response.status_code == 429
        assert response.json()["success"] is False
        assert mock_fetch.call_count == 2
        assert _analyze(client, headers={"x-forwarded-for": "198.51.100.1"}).status_code == 200

    def test_rate_limit_checked_before_validation(self, client, monkeypatch):
        monkeypatch.setattr("rate_limit._limiter", RateLimiter(max_requests=1, window_seconds=900))
        get_rate_limiter().hit("testclient")

        response = client.post("/api/analyze", json={})
        assert response.status_code == 429


@pytest.fixture
def stored_report(client):
    with patch("pipeline.fetch_html", return_value=PAGE), patch(
        "pipeline.generate_seo_analysis", return_value="No numeric rating given."
    ):
        return _analyze(client).json()["data"]


class TestGetReport:
    def test_found(self, client, stored_report):
        response = client.get(f"/api/reports/{stored_report['id']}")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["id"] == stored_report["id"]
        # Title only: heuristic score of 25.
        assert data["seoScore"] == 25
        assert data["scoreBand"] == "poor"

    def test_not_found(self, client):
        response = client.get("/api/reports/missing-id")
        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "Report not found"}

    def test_blank_id_is_400(self, client):
        response = client.get("/api/reports/%20")
        assert response.status_code == 400


class TestDeleteReport:
    def test_delete_then_gone(self, client, stored_report):
        response = client.delete(f"/api/reports/{stored_report['id']}")
        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Report deleted successfully"}

        assert client.get(f"/api/reports/{stored_report['id']}").status_code == 404

    def test_delete_missing_is_404(self, client):
        response = client.delete("/api/reports/missing-id")
        assert response.status_code == 404
        assert response.json()["success"] is False


class TestListReports:
    @pytest.fixture
    def three_reports(self, client):
        urls = ["alpha.example.com", "beta.example.com", "gamma.other.org"]
        with patch("pipeline.fetch_html", return_value=PAGE), patch(
            "pipeline.generate_seo_analysis", return_value="Score: 50"
        ):
            return [_analyze(client, url, headers={"x-forwarded-for": url}).json()["data"] for url in urls]

    def test_defaults_newest_first(self, client, three_reports):
        response = client.get("/api/reports")

        assert response.status_code == 200
        data = response.json()["data"]
        assert [r["id"] for r in data["reports"]] == [r["id"] for r in reversed(three_reports)]
        assert data["pagination"] == {"total": 3, "limit": 10, "offset": 0, "hasMore": False}
        summary = data["reports"][0]
        assert "aiAnalysis" not in summary
        assert summary["essentialsPresent"] == 1

    def test_pagination_has_more(self, client, three_reports):
        data = client.get("/api/reports", params={"limit": 2, "offset": 0}).json()["data"]

        assert len(data["reports"]) == 2
        assert data["pagination"]["hasMore"] is True

    def test_url_filter(self, client, three_reports):
        data = client.get("/api/reports", params={"url": "EXAMPLE.COM"}).json()["data"]

        assert data["pagination"]["total"] == 2
        assert all("example.com" in r["url"] for r in data["reports"])

    @pytest.mark.parametrize(
        "params",
        [{"limit": 0}, {"limit": 51}, {"offset": -1}, {"limit": "ten"}],
    )
    def test_bad_pagination_is_400(self, client, params):
        response = client.get("/api/reports", params=params)

        assert response.status_code == 400
        assert response.json()["success"] is False
