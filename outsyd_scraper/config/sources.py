"""Event source definitions.

Sources are normally managed by admins in the ``event_sources`` table. The
built-in list below is what the scraper falls back to when that table is
empty or unreadable, and it is passed explicitly to the orchestrator so tests
can swap it out.

Usage:
    from outsyd_scraper.config.sources import DEFAULT_EVENT_SOURCES, EventSource

    source = EventSource(name="Quicket", url="https://www.quicket.co.za/events/", country="South Africa")
    source.resolved_domain  # "quicket.co.za"
"""

from dataclasses import dataclass
from typing import Any

from outsyd_scraper.utils.urls import extract_domain, normalize_domain


@dataclass(frozen=True)
class EventSource:
    """A listing page the pipeline scrapes for events."""

    name: str
    url: str
    country: str
    category: str = "general"
    domain: str | None = None  # Explicit allowlist domain, else derived from url
    enabled: bool = True

    def __hash__(self) -> int:
        return hash(self.url)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EventSource):
            return NotImplemented
        return self.url == other.url

    @property
    def resolved_domain(self) -> str | None:
        """Domain used for the allowlist (declared domain wins over the URL host)."""
        if self.domain:
            declared = normalize_domain(self.domain)
            if declared:
                return declared
        return extract_domain(self.url)

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "EventSource | None":
        """Build a source from an ``event_sources`` row.

        Returns:
            EventSource, or None if the row has no URL
        """
        url = (row.get("url") or "").strip()
        if not url:
            return None

        return cls(
            name=(row.get("name") or "").strip() or url,
            url=url,
            country=(row.get("country") or "").strip() or "Unknown",
            category=(row.get("category") or "").strip() or "general",
            domain=(row.get("domain") or "").strip() or None,
            enabled=bool(row.get("enabled", True)),
        )


# ============================================================
# BUILT-IN SOURCES - African event listing sites
# ============================================================

DEFAULT_EVENT_SOURCES: tuple[EventSource, ...] = (
    EventSource(
        name="Quicket",
        url="https://www.quicket.co.za/events/",
        country="South Africa",
    ),
    EventSource(
        name="Webtickets",
        url="https://www.webtickets.co.za/v2/Events.aspx",
        country="South Africa",
    ),
    EventSource(
        name="Arifriky",
        url="https://arifriky.com/events/",
        country="Nigeria",
    ),
    EventSource(
        name="Nairaland Events",
        url="https://www.nairaland.com/events",
        country="Nigeria",
    ),
    EventSource(
        name="Momondo Ghana",
        url="https://ghana.momondo.com/events",
        country="Ghana",
    ),
    EventSource(
        name="KenyaBuzz",
        url="https://www.kenyabuzz.com/events/",
        country="Kenya",
    ),
)
