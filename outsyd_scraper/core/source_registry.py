"""Source registry: admin-managed sources with a built-in fallback."""

from typing import Any, Protocol

from outsyd_scraper.config.sources import DEFAULT_EVENT_SOURCES, EventSource
from outsyd_scraper.logging import get_logger

logger = get_logger(__name__)


class SourceStore(Protocol):
    async def get_enabled_sources(self) -> list[dict[str, Any]]: ...


class SourceRegistry:
    """Supplies the list of pages to scrape.

    Reads enabled rows from ``event_sources``; if that read fails or returns
    nothing usable, the fallback list is used. Never raises.
    """

    def __init__(
        self,
        store: SourceStore | None,
        fallback: tuple[EventSource, ...] = DEFAULT_EVENT_SOURCES,
    ) -> None:
        self.store = store
        self.fallback = tuple(fallback)

    async def get_sources(self) -> list[EventSource]:
        """Enabled sources, persisted configuration first."""
        if self.store is None:
            return list(self.fallback)

        try:
            rows = await self.store.get_enabled_sources()
        except Exception as e:
            logger.warning("source_registry_read_failed", error=str(e), fallback=len(self.fallback))
            return list(self.fallback)

        sources: list[EventSource] = []
        seen: set[str] = set()
        for row in rows or []:
            try:
                source = EventSource.from_row(row)
            except (AttributeError, TypeError, ValueError) as e:
                logger.warning("source_row_invalid", row=repr(row)[:200], error=str(e))
                continue
            if source is None or not source.enabled or source.url in seen:
                continue
            seen.add(source.url)
            sources.append(source)

        if not sources:
            logger.info("source_registry_empty", fallback=len(self.fallback))
            return list(self.fallback)

        logger.info("source_registry_loaded", count=len(sources))
        return sources
