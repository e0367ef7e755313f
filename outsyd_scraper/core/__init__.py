"""Core modules for the scraper."""

from outsyd_scraper.core.event_model import (
    EventCategory,
    ExtractionResult,
    ScrapeCandidate,
    StoredEvent,
    UpsertOutcome,
)
from outsyd_scraper.core.exceptions import (
    AccessError,
    ConfigurationError,
    ExtractionError,
    FetchError,
    OutsydError,
    ParseError,
    RequestError,
    StorageError,
)
from outsyd_scraper.core.firecrawl_client import FirecrawlClient, get_firecrawl_client
from outsyd_scraper.core.llm_extractor import LLMExtractor, get_llm_extractor
from outsyd_scraper.core.pipeline import (
    PipelineConfig,
    ScrapeOrchestrator,
    ScrapeSummary,
    SourceResult,
    create_orchestrator,
)
from outsyd_scraper.core.sanitizer import sanitize_candidate
from outsyd_scraper.core.source_registry import SourceRegistry
from outsyd_scraper.core.supabase_client import SupabaseClient, get_supabase_client

__all__ = [
    # Event models
    "EventCategory",
    "ExtractionResult",
    "ScrapeCandidate",
    "StoredEvent",
    "UpsertOutcome",
    # Pipeline
    "PipelineConfig",
    "ScrapeOrchestrator",
    "ScrapeSummary",
    "SourceResult",
    "create_orchestrator",
    "sanitize_candidate",
    "SourceRegistry",
    # Clients
    "FirecrawlClient",
    "get_firecrawl_client",
    "LLMExtractor",
    "get_llm_extractor",
    "SupabaseClient",
    "get_supabase_client",
    # Exceptions
    "OutsydError",
    "ConfigurationError",
    "RequestError",
    "AccessError",
    "FetchError",
    "ExtractionError",
    "ParseError",
    "StorageError",
]
