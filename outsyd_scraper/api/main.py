"""FastAPI application for the Outsyd event scraper.

Run with:
    uvicorn outsyd_scraper.api.main:app --reload --port 8000
"""

from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from outsyd_scraper import __version__
from outsyd_scraper.api.routes import events, scrape, sources
from outsyd_scraper.config.settings import Settings, get_settings
from outsyd_scraper.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConfigurationError,
    OutsydError,
    RequestError,
)
from outsyd_scraper.core.firecrawl_client import close_firecrawl_client, get_firecrawl_client
from outsyd_scraper.core.supabase_client import get_supabase_client
from outsyd_scraper.logging import get_logger, setup_logging

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    settings = get_settings()
    setup_logging(
        level=settings.log_level,
        log_format=settings.log_format,
        log_file=settings.log_file,
    )
    logger.info("api_startup", environment=settings.environment, version=__version__)
    yield
    await close_firecrawl_client()


app = FastAPI(
    title="Outsyd Scraper API",
    description="Scrapes African event listing sites into the Outsyd events table",
    version=__version__,
    lifespan=lifespan,
)

# Called from the browser admin panel
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type", "x-cron-secret"],
)


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


def status_for(exc: OutsydError) -> int:
    """HTTP status for an exception that reached the request boundary."""
    if isinstance(exc, RequestError):
        return 400
    if isinstance(exc, AuthenticationError):
        return 401
    if isinstance(exc, AuthorizationError):
        return 403
    return 500


@app.exception_handler(OutsydError)
async def outsyd_error_handler(request: Request, exc: OutsydError) -> JSONResponse:
    status_code = status_for(exc)
    if isinstance(exc, ConfigurationError):
        logger.error("request_failed_configuration", path=request.url.path, error=exc.message)
    elif status_code >= 500:
        logger.error("request_failed", path=request.url.path, error=str(exc), error_type=type(exc).__name__)
    else:
        logger.info("request_rejected", path=request.url.path, status=status_code, error=exc.message)
    return error_response(status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    else:
        message = "Invalid request"
    logger.info("request_invalid", path=request.url.path, error=message)
    return error_response(400, message)


# Include routers
app.include_router(scrape.router, prefix="/scrape-events", tags=["Scrape"])
app.include_router(sources.router, prefix="/sources", tags=["Sources"])
app.include_router(events.router, prefix="/events", tags=["Events"])


@app.get("/", tags=["Health"])
async def root():
    """Health check endpoint."""
    return {
        "status": "ok",
        "service": "Outsyd Scraper API",
        "version": __version__,
    }


@app.get("/health", tags=["Health"])
async def health(settings: Settings = Depends(get_settings)):
    """Detailed health check."""
    try:
        sb = get_supabase_client(settings)
        event_count = await sb.count_events()
        db_status = "connected"
    except Exception as e:
        db_status = f"error: {str(e)}"
        event_count = 0

    firecrawl = get_firecrawl_client(
        base_url=settings.firecrawl_url,
        api_key=settings.firecrawl_api_key,
        timeout=settings.firecrawl_timeout,
    )
    firecrawl_status = "reachable" if await firecrawl.health_check() else "unreachable"

    return {
        "status": "ok",
        "database": db_status,
        "firecrawl": firecrawl_status,
        "events_in_db": event_count,
        "scheduler": "external_cron",
    }
