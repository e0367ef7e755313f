"""Events routes - read side for the events page."""

from fastapi import APIRouter, Depends, Query

from outsyd_scraper.api.dependencies import get_store
from outsyd_scraper.core.event_model import EventCategory
from outsyd_scraper.core.supabase_client import SupabaseClient

router = APIRouter()


@router.get("")
async def list_events(
    country: str | None = Query(None, max_length=100, description="Exact country name"),
    city: str | None = Query(None, max_length=100, description="City (case-insensitive)"),
    category: EventCategory | None = Query(None, description="Event category"),
    limit: int = Query(50, ge=1, le=200, description="Max events to return"),
    store: SupabaseClient = Depends(get_store),
):
    """Upcoming events, soonest first."""
    events = await store.get_upcoming_events(
        country=country,
        city=city,
        category=category.value if category else None,
        limit=limit,
    )
    return {"success": True, "count": len(events), "events": events}
