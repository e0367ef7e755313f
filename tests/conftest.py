"""Pytest configuration and shared fixtures."""

import sys
from datetime import datetime, timezone
from typing import Any

import pytest

from outsyd_scraper.config.settings import Settings
from outsyd_scraper.config.sources import EventSource
from outsyd_scraper.core.event_model import (
    ExtractionResult,
    ScrapeCandidate,
    StoredEvent,
    UpsertOutcome,
)
from outsyd_scraper.core.exceptions import FirecrawlError, LLMError

# Fix encoding for Windows
if sys.platform == "win32":
    sys.stdout.reconfigure(encoding="utf-8")


RUN_TIME = datetime(2026, 3, 1, 8, 30, tzinfo=timezone.utc)

ALPHA = EventSource(
    name="Alpha Events",
    url="https://www.alpha-events.co.za/events",
    country="South Africa",
)
BETA = EventSource(
    name="Beta Tickets",
    url="https://beta-tickets.com.ng/listings",
    country="Nigeria",
)


# ============================================================
# FAKES
# ============================================================


class FakeEventStore:
    """In-memory stand-in for SupabaseClient (dedup by natural key)."""

    def __init__(self, source_rows: list[dict[str, Any]] | None = None, fail_sources: bool = False):
        self.source_rows = source_rows or []
        self.fail_sources = fail_sources
        self.events: dict[tuple[str, str, str, str], StoredEvent] = {}
        self.scraped: list[str] = []
        self.fail_titles: set[str] = set()

    async def get_enabled_sources(self) -> list[dict[str, Any]]:
        if self.fail_sources:
            raise RuntimeError("event_sources unavailable")
        return list(self.source_rows)

    async def save_event(self, event: StoredEvent, dry_run: bool = False) -> UpsertOutcome:
        if event.dedup_key in self.events:
            return UpsertOutcome.SKIPPED_DUPLICATE
        if dry_run:
            return UpsertOutcome.WOULD_INSERT
        if event.title in self.fail_titles:
            return UpsertOutcome.INSERT_FAILED
        self.events[event.dedup_key] = event
        return UpsertOutcome.INSERTED

    async def mark_source_scraped(self, url: str, scraped_at: datetime) -> bool:
        self.scraped.append(url)
        return True


class FakeFetcher:
    """Returns canned markdown per URL and records every call."""

    def __init__(self, pages: dict[str, str] | None = None, failing: set[str] | None = None):
        self.pages = pages or {}
        self.failing = failing or set()
        self.calls: list[str] = []

    async def fetch_markdown(self, url: str) -> str:
        self.calls.append(url)
        if url in self.failing:
            raise FirecrawlError("HTTP 500", status_code=500, source=url)
        return self.pages.get(url, f"# Upcoming events at {url}")


class FakeExtractor:
    """Returns a preset ExtractionResult per source name and records calls."""

    def __init__(self, results: dict[str, ExtractionResult] | None = None, failing: set[str] | None = None):
        self.results = results or {}
        self.failing = failing or set()
        self.calls: list[tuple[str, str, str]] = []

    def extract(self, content: str, source_country: str, source_name: str) -> ExtractionResult:
        self.calls.append((content, source_country, source_name))
        if source_name in self.failing:
            raise LLMError("gateway returned 429", source=source_name)
        result = self.results.get(source_name, ExtractionResult())
        return result.model_copy(deep=True)


# ============================================================
# FIXTURES
# ============================================================


@pytest.fixture(autouse=True)
def reset_singletons():
    """Drop cached clients between tests."""
    yield
    from outsyd_scraper.core import llm_extractor, supabase_client
    from outsyd_scraper.core.firecrawl_client import reset_firecrawl_client

    reset_firecrawl_client()
    llm_extractor._extractor = None
    supabase_client._client = None


@pytest.fixture
def run_time() -> datetime:
    return RUN_TIME


@pytest.fixture
def test_sources() -> tuple[EventSource, ...]:
    return (ALPHA, BETA)


@pytest.fixture
def allowlist() -> frozenset[str]:
    return frozenset({"alpha-events.co.za", "beta-tickets.com.ng"})


@pytest.fixture
def make_candidate():
    """Factory for a well-formed future concert candidate."""

    def _make(**overrides: Any) -> ScrapeCandidate:
        data = {
            "title": "Jazz on the Lawn",
            "date": "March 15, 2026",
            "time": "18:00 - 22:00",
            "venue": "Kirstenbosch Gardens",
            "description": "An evening of live jazz under the stars with local bands.",
            "category": "music",
            "city": "Cape Town",
            "ticket_url": "https://www.alpha-events.co.za/tickets/jazz-lawn",
            "ticket_price": 250,
            "image_url": "https://cdn.example.org/jazz.jpg",
        }
        data.update(overrides)
        return ScrapeCandidate.model_validate(data)

    return _make


@pytest.fixture
def store() -> FakeEventStore:
    return FakeEventStore()


@pytest.fixture
def fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture
def settings() -> Settings:
    """Fully configured settings (no .env lookup)."""
    return Settings(
        _env_file=None,
        supabase_url="https://project.supabase.co",
        supabase_service_role_key="service-role-key",
        firecrawl_api_key="fc-test",
        ai_gateway_api_key="gw-test",
        scrape_cron_secret="cron-secret",
    )
