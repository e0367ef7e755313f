"""Tests for the HTTP API (FastAPI TestClient with dependency overrides)."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from conftest import ALPHA, FakeExtractor
from outsyd_scraper.api.dependencies import get_optional_store, get_orchestrator, get_store
from outsyd_scraper.api.main import app
from outsyd_scraper.config.settings import get_settings
from outsyd_scraper.core.event_model import ExtractionResult
from outsyd_scraper.core.pipeline import ScrapeOrchestrator

CRON = {"X-Cron-Secret": "cron-secret"}


@pytest.fixture
def auth_store():
    """Supabase stand-in for session and role lookups."""
    sb = MagicMock()
    sb.get_user_id = AsyncMock(side_effect=lambda token: {"admin-jwt": "admin-1", "user-jwt": "user-1"}.get(token))
    sb.has_role = AsyncMock(side_effect=lambda user_id, role: user_id == "admin-1" and role == "admin")
    sb.get_upcoming_events = AsyncMock(return_value=[{"title": "Jazz on the Lawn", "city": "Cape Town"}])
    return sb


@pytest.fixture
def extractor(make_candidate):
    return FakeExtractor({ALPHA.name: ExtractionResult(candidates=[make_candidate()])})


@pytest.fixture
def orchestrator(store, fetcher, extractor, test_sources, run_time):
    return ScrapeOrchestrator(
        store=store,
        fetcher=fetcher,
        extractor=extractor,
        default_sources=test_sources,
        clock=lambda: run_time,
    )


@pytest.fixture
def client(settings, auth_store, orchestrator):
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_store] = lambda: auth_store
    app.dependency_overrides[get_optional_store] = lambda: None
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestScrapeEndpoint:
    """POST /scrape-events."""

    def test_cron_scrape(self, client, store):
        response = client.post("/scrape-events", headers=CRON, json={})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["count"] == 1
        assert body["valid_count"] == 1
        assert body["events"][0]["title"] == "Jazz on the Lawn"
        assert body["events"][0]["source_verified"] is True
        assert len(store.events) == 1

    def test_empty_body_allowed(self, client):
        response = client.post("/scrape-events", headers=CRON)

        assert response.status_code == 200
        assert response.json()["success"] is True

    def test_admin_session(self, client):
        response = client.post("/scrape-events", headers={"Authorization": "Bearer admin-jwt"}, json={})

        assert response.status_code == 200

    def test_ad_hoc_url(self, client, fetcher):
        response = client.post(
            "/scrape-events",
            headers=CRON,
            json={"url": "https://www.alpha-events.co.za/events/music", "country": "South Africa"},
        )

        assert response.status_code == 200
        assert fetcher.calls == ["https://www.alpha-events.co.za/events/music"]

    def test_disallowed_domain(self, client, fetcher, extractor):
        response = client.post("/scrape-events", headers=CRON, json={"url": "https://evil.example.com/events"})

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "URL domain is not an allowed event source"}
        assert fetcher.calls == []
        assert extractor.calls == []

    def test_url_too_long(self, client, fetcher):
        url = "https://www.alpha-events.co.za/" + "a" * 500

        response = client.post("/scrape-events", headers=CRON, json={"url": url})

        assert response.status_code == 400
        assert response.json()["success"] is False
        assert "url" in response.json()["error"]
        assert fetcher.calls == []

    def test_country_too_long(self, client):
        response = client.post("/scrape-events", headers=CRON, json={"country": "x" * 101})

        assert response.status_code == 400

    def test_url_must_be_string(self, client):
        response = client.post("/scrape-events", headers=CRON, json={"url": 123})

        assert response.status_code == 400

    def test_no_credentials(self, client, fetcher):
        response = client.post("/scrape-events", json={})

        assert response.status_code == 401
        assert response.json() == {"success": False, "error": "Unauthorized"}
        assert fetcher.calls == []

    def test_wrong_cron_secret(self, client):
        response = client.post("/scrape-events", headers={"X-Cron-Secret": "guess"}, json={})

        assert response.status_code == 401

    def test_invalid_session(self, client):
        response = client.post("/scrape-events", headers={"Authorization": "Bearer expired"}, json={})

        assert response.status_code == 401

    def test_non_admin_forbidden(self, client, fetcher):
        response = client.post("/scrape-events", headers={"Authorization": "Bearer user-jwt"}, json={})

        assert response.status_code == 403
        assert response.json() == {"success": False, "error": "Forbidden: admin role required"}
        assert fetcher.calls == []

    def test_auth_checked_before_body(self, client):
        response = client.post("/scrape-events", json={"url": "x" * 600})

        assert response.status_code == 401

    def test_missing_configuration(self, client, settings, fetcher):
        broken = settings.model_copy(update={"firecrawl_api_key": None})
        app.dependency_overrides[get_settings] = lambda: broken
        del app.dependency_overrides[get_orchestrator]

        response = client.post("/scrape-events", headers=CRON, json={})

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "Missing configuration: FIRECRAWL_API_KEY"}
        assert fetcher.calls == []


class TestReadEndpoints:
    """GET /sources, /events and health."""

    def test_sources_fallback(self, client):
        response = client.get("/sources")

        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 6
        assert body["sources"][0]["domain"] == "quicket.co.za"

    def test_events(self, client, auth_store):
        response = client.get("/events", params={"country": "South Africa", "category": "music", "limit": 5})

        assert response.status_code == 200
        assert response.json()["count"] == 1
        auth_store.get_upcoming_events.assert_awaited_once_with(
            country="South Africa",
            city=None,
            category="music",
            limit=5,
        )

    @pytest.mark.parametrize("params", [{"limit": 0}, {"limit": 500}, {"category": "nightlife"}])
    def test_events_invalid_filters(self, client, params):
        response = client.get("/events", params=params)

        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_root(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_health(self, client, settings):
        db = MagicMock()
        db.count_events = AsyncMock(return_value=42)
        firecrawl = MagicMock()
        firecrawl.health_check = AsyncMock(return_value=True)

        with patch("outsyd_scraper.api.main.get_supabase_client", return_value=db), \
                patch("outsyd_scraper.api.main.get_firecrawl_client", return_value=firecrawl) as factory:
            response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["database"] == "connected"
        assert body["events_in_db"] == 42
        assert body["firecrawl"] == "reachable"
        factory.assert_called_once_with(
            base_url=settings.firecrawl_url,
            api_key="fc-test",
            timeout=settings.firecrawl_timeout,
        )

    def test_health_degraded(self, client):
        firecrawl = MagicMock()
        firecrawl.health_check = AsyncMock(return_value=False)

        with patch("outsyd_scraper.api.main.get_supabase_client", side_effect=RuntimeError("db down")), \
                patch("outsyd_scraper.api.main.get_firecrawl_client", return_value=firecrawl):
            response = client.get("/health")

        body = response.json()
        assert body["database"] == "error: db down"
        assert body["events_in_db"] == 0
        assert body["firecrawl"] == "unreachable"
