"""FastAPI dependencies shared by the routes."""

from fastapi import Depends

from outsyd_scraper.config.settings import Settings, get_settings
from outsyd_scraper.core.exceptions import MissingCredentialsError
from outsyd_scraper.core.pipeline import ScrapeOrchestrator, create_orchestrator
from outsyd_scraper.core.supabase_client import SupabaseClient, get_supabase_client
from outsyd_scraper.logging import get_logger

logger = get_logger(__name__)


def get_store(settings: Settings = Depends(get_settings)) -> SupabaseClient:
    """Supabase client, or MissingCredentialsError (-> 500)."""
    return get_supabase_client(settings)


def get_optional_store(settings: Settings = Depends(get_settings)) -> SupabaseClient | None:
    """Supabase client, or None when storage is not configured."""
    try:
        return get_supabase_client(settings)
    except MissingCredentialsError as e:
        logger.warning("store_not_configured", missing=e.settings)
        return None


def get_orchestrator(settings: Settings = Depends(get_settings)) -> ScrapeOrchestrator:
    """Fully wired orchestrator; fails before any other work if credentials are missing."""
    return create_orchestrator(settings)
