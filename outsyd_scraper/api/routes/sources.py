"""Sources routes - inspect what the scraper will visit."""

from fastapi import APIRouter, Depends

from outsyd_scraper.api.dependencies import get_optional_store
from outsyd_scraper.core.source_registry import SourceRegistry
from outsyd_scraper.core.supabase_client import SupabaseClient

router = APIRouter()


@router.get("")
async def list_sources(store: SupabaseClient | None = Depends(get_optional_store)):
    """List enabled sources (registry table, or the built-in fallback)."""
    sources = await SourceRegistry(store).get_sources()
    return {
        "success": True,
        "count": len(sources),
        "sources": [
            {
                "name": s.name,
                "url": s.url,
                "country": s.country,
                "category": s.category,
                "domain": s.resolved_domain,
            }
            for s in sources
        ],
    }
