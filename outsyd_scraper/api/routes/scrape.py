"""Scrape route - run one ingestion batch on demand."""

from typing import Any

from fastapi import APIRouter, Body, Depends
from pydantic import BaseModel, ConfigDict, Field

from outsyd_scraper.api.auth import ScrapeCaller, require_scrape_access
from outsyd_scraper.api.dependencies import get_orchestrator
from outsyd_scraper.core.pipeline import ScrapeOrchestrator
from outsyd_scraper.logging import get_logger

logger = get_logger(__name__)
router = APIRouter()


class ScrapeRequest(BaseModel):
    """Request body; both fields optional (an empty body scrapes every source)."""

    model_config = ConfigDict(str_strip_whitespace=True)

    url: str | None = Field(None, max_length=500, description="Single page to scrape (allowlisted domain)")
    country: str | None = Field(None, max_length=100, description="Country for the single page")


class ScrapeResponse(BaseModel):
    """Successful scrape result."""

    success: bool
    events: list[dict[str, Any]]
    count: int
    valid_count: int
    message: str


@router.post("", response_model=ScrapeResponse)
async def scrape_events(
    orchestrator: ScrapeOrchestrator = Depends(get_orchestrator),
    caller: ScrapeCaller = Depends(require_scrape_access),
    request: ScrapeRequest | None = Body(default=None),
):
    """Scrape the allowlisted sources (or one allowlisted page) into ``events``.

    Error responses use ``{"success": false, "error": "..."}`` with status
    400 (bad body or disallowed domain), 401/403 (access) or 500 (configuration).
    """
    request = request or ScrapeRequest()
    logger.info(
        "scrape_requested",
        caller=caller.kind,
        user_id=caller.user_id,
        url=request.url,
        country=request.country,
    )

    summary = await orchestrator.run(
        requested_url=request.url or None,
        requested_country=request.country or None,
    )
    return summary.to_response()
