"""Event ingestion pipeline.

One invocation is one batch job:
1. Load sources (persisted registry or built-in fallback); their domains form the allowlist
2. Per source, sequentially: fetch markdown -> extract candidates -> sanitize -> dedup/insert
3. Record last_scraped_at for registry sources that fetched and extracted fine
4. Return aggregate counts and the accepted events

Per-source and per-candidate failures are logged and skipped; only a
disallowed ad hoc URL aborts the run.

Usage:
    from outsyd_scraper.core.pipeline import create_orchestrator

    orchestrator = create_orchestrator()
    summary = await orchestrator.run()
    summary.to_response()
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Protocol

from outsyd_scraper.config.settings import Settings, get_settings
from outsyd_scraper.config.sources import DEFAULT_EVENT_SOURCES, EventSource
from outsyd_scraper.core.event_model import DEFAULT_CREATOR, StoredEvent, UpsertOutcome
from outsyd_scraper.core.exceptions import (
    CandidateRejectedError,
    DomainNotAllowedError,
    MissingCredentialsError,
)
from outsyd_scraper.core.firecrawl_client import ContentFetcher, get_firecrawl_client
from outsyd_scraper.core.llm_extractor import StructuredExtractor, get_llm_extractor
from outsyd_scraper.core.sanitizer import sanitize_candidate
from outsyd_scraper.core.source_registry import SourceRegistry
from outsyd_scraper.core.supabase_client import get_supabase_client
from outsyd_scraper.logging import get_logger, log_source_run
from outsyd_scraper.utils.urls import build_allowlist, extract_domain, is_allowed_url

logger = get_logger(__name__)


class EventStore(Protocol):
    """Storage operations the pipeline needs (see SupabaseClient)."""

    async def get_enabled_sources(self) -> list[dict[str, Any]]: ...

    async def save_event(self, event: StoredEvent, dry_run: bool = False) -> UpsertOutcome: ...

    async def mark_source_scraped(self, url: str, scraped_at: datetime) -> bool: ...


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class PipelineConfig:
    """Configuration for the ingestion pipeline."""

    content_max_chars: int = 15000
    dry_run: bool = False  # Dedup lookups only: no inserts, no timestamps
    creator: str = DEFAULT_CREATOR
    fallback_image_url: str | None = None  # Stored for events without an image


@dataclass
class SourceResult:
    """Outcome of one source within a run."""

    source_name: str
    source_url: str
    country: str

    extracted_count: int = 0
    malformed_count: int = 0
    rejected_count: int = 0
    inserted_count: int = 0
    duplicate_count: int = 0
    failed_count: int = 0

    success: bool = True
    error: str | None = None


@dataclass
class ScrapeSummary:
    """Result of a pipeline run."""

    events: list[StoredEvent] = field(default_factory=list)
    sources: list[SourceResult] = field(default_factory=list)
    dry_run: bool = False
    fallback_image_url: str | None = None

    @property
    def count(self) -> int:
        """Every candidate the extractor returned, malformed ones included."""
        return sum(s.extracted_count for s in self.sources)

    @property
    def valid_count(self) -> int:
        """Candidates that passed sanitization and were new to the store."""
        return len(self.events)

    @property
    def rejected_count(self) -> int:
        return sum(s.rejected_count + s.malformed_count for s in self.sources)

    @property
    def duplicate_count(self) -> int:
        return sum(s.duplicate_count for s in self.sources)

    @property
    def failed_count(self) -> int:
        return sum(s.failed_count for s in self.sources)

    @property
    def failed_sources(self) -> list[SourceResult]:
        return [s for s in self.sources if not s.success]

    @property
    def message(self) -> str:
        verb = "would store" if self.dry_run else "stored"
        return (
            f"Scraped {len(self.sources)} sources: {self.count} events extracted, "
            f"{self.valid_count} new events {verb}"
        )

    def to_response(self) -> dict[str, Any]:
        """JSON body for the scrape endpoint."""
        return {
            "success": True,
            "events": [e.to_record(fallback_image_url=self.fallback_image_url) for e in self.events],
            "count": self.count,
            "valid_count": self.valid_count,
            "message": self.message,
        }


class ScrapeOrchestrator:
    """Runs the fetch -> extract -> sanitize -> upsert pipeline over sources.

    Collaborators are injected so tests can run the whole control flow
    without network access.
    """

    def __init__(
        self,
        store: EventStore,
        fetcher: ContentFetcher,
        extractor: StructuredExtractor,
        default_sources: tuple[EventSource, ...] = DEFAULT_EVENT_SOURCES,
        config: PipelineConfig | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.store = store
        self.fetcher = fetcher
        self.extractor = extractor
        self.registry = SourceRegistry(store, fallback=default_sources)
        self.config = config or PipelineConfig()
        self.clock = clock

    async def run(
        self,
        requested_url: str | None = None,
        requested_country: str | None = None,
    ) -> ScrapeSummary:
        """Execute one batch.

        Args:
            requested_url: Scrape only this page (must be on an allowlisted domain)
            requested_country: Country for the ad hoc page

        Returns:
            ScrapeSummary

        Raises:
            DomainNotAllowedError: requested_url is not on a known source domain
        """
        scraped_at = self.clock()
        registry_sources = await self.registry.get_sources()
        allowlist = build_allowlist(registry_sources)

        if requested_url:
            requested_url = requested_url.strip()
            if not is_allowed_url(requested_url, allowlist):
                logger.warning("scrape_url_rejected", url=requested_url[:200])
                raise DomainNotAllowedError(requested_url)
            domain = extract_domain(requested_url)
            sources = [
                EventSource(
                    name=domain or requested_url,
                    url=requested_url,
                    country=(requested_country or "").strip() or "Unknown",
                )
            ]
            ad_hoc = True
        else:
            sources = registry_sources
            ad_hoc = False

        summary = ScrapeSummary(
            dry_run=self.config.dry_run,
            fallback_image_url=self.config.fallback_image_url,
        )
        logger.info(
            "scrape_run_start",
            sources=len(sources),
            ad_hoc=ad_hoc,
            dry_run=self.config.dry_run,
        )

        for source in sources:
            result = SourceResult(
                source_name=source.name,
                source_url=source.url,
                country=source.country,
            )
            with log_source_run(source.name, source.url, source.country):
                try:
                    accepted = await self._process_source(source, allowlist, scraped_at, result)
                    summary.events.extend(accepted)
                    if not ad_hoc and not self.config.dry_run:
                        await self.store.mark_source_scraped(source.url, scraped_at)
                except Exception as e:
                    result.success = False
                    result.error = str(e)
                    logger.error("scrape_source_failed", error=str(e), error_type=type(e).__name__)
            summary.sources.append(result)

        logger.info(
            "scrape_run_complete",
            sources=len(summary.sources),
            failed_sources=len(summary.failed_sources),
            extracted=summary.count,
            new_events=summary.valid_count,
            duplicates=summary.duplicate_count,
            rejected=summary.rejected_count,
            insert_failures=summary.failed_count,
        )
        return summary

    async def _process_source(
        self,
        source: EventSource,
        allowlist: frozenset[str],
        scraped_at: datetime,
        result: SourceResult,
    ) -> list[StoredEvent]:
        """Fetch, extract and store one source. Fetch/extract errors propagate."""
        logger.info("scrape_source_start")

        markdown = await self.fetcher.fetch_markdown(source.url)
        content = markdown[: self.config.content_max_chars]

        extraction = self.extractor.extract(content, source.country, source.name)
        result.extracted_count = extraction.total
        result.malformed_count = extraction.malformed

        accepted: list[StoredEvent] = []
        for candidate in extraction.candidates:
            try:
                event = sanitize_candidate(
                    candidate,
                    source,
                    allowlist=allowlist,
                    scraped_at=scraped_at,
                    creator=self.config.creator,
                )
            except CandidateRejectedError as e:
                result.rejected_count += 1
                logger.info("candidate_rejected", title=candidate.title[:80], reason=e.reason)
                continue

            outcome = await self.store.save_event(event, dry_run=self.config.dry_run)
            if outcome in (UpsertOutcome.INSERTED, UpsertOutcome.WOULD_INSERT):
                result.inserted_count += 1
                accepted.append(event)
            elif outcome == UpsertOutcome.SKIPPED_DUPLICATE:
                result.duplicate_count += 1
            else:
                result.failed_count += 1

        logger.info(
            "scrape_source_complete",
            extracted=result.extracted_count,
            inserted=result.inserted_count,
            duplicates=result.duplicate_count,
            rejected=result.rejected_count + result.malformed_count,
            failed=result.failed_count,
        )
        return accepted


def create_orchestrator(settings: Settings | None = None, dry_run: bool | None = None) -> ScrapeOrchestrator:
    """Wire the orchestrator to Firecrawl, the LLM extractor and Supabase.

    Raises:
        MissingCredentialsError: A required credential is not configured
    """
    settings = settings or get_settings()

    missing = settings.missing_credentials()
    if missing:
        raise MissingCredentialsError(missing)

    return ScrapeOrchestrator(
        store=get_supabase_client(settings),
        fetcher=get_firecrawl_client(
            base_url=settings.firecrawl_url,
            api_key=settings.firecrawl_api_key,
            timeout=settings.firecrawl_timeout,
        ),
        extractor=get_llm_extractor(settings),
        config=PipelineConfig(
            content_max_chars=settings.content_max_chars,
            dry_run=settings.dry_run if dry_run is None else dry_run,
            creator=settings.event_creator,
            fallback_image_url=settings.fallback_image_url,
        ),
    )
