"""Candidate sanitization: the enforcement point between the LLM and the store.

The extractor is told to skip past events, keep descriptions short and stick
to the category enum, but nothing here assumes it listened. Every candidate
goes through ``sanitize_candidate`` which either returns a ``StoredEvent`` or
raises ``CandidateRejectedError``. No I/O, no clock reads: the run timestamp
and reference day are passed in.
"""

from collections.abc import Iterable
from datetime import date, datetime, time, timezone

from outsyd_scraper.config.sources import EventSource
from outsyd_scraper.core.event_model import (
    DEFAULT_CREATOR,
    EventCategory,
    ScrapeCandidate,
    StoredEvent,
)
from outsyd_scraper.core.exceptions import CandidateRejectedError, InvalidDateError
from outsyd_scraper.utils.date_parser import parse_future_date
from outsyd_scraper.utils.urls import is_allowed_url, is_valid_url

MIN_TITLE_LENGTH = 4
MIN_VENUE_LENGTH = 3
MIN_CITY_LENGTH = 2
MIN_DESCRIPTION_LENGTH = 20  # Non-empty descriptions shorter than this are extraction noise

_CATEGORY_VALUES = {c.value for c in EventCategory}


def coerce_category(value: str | None) -> EventCategory:
    """Map a free-text category onto the closed enum (unknown -> other)."""
    normalized = (value or "").strip().lower()
    if normalized in _CATEGORY_VALUES:
        return EventCategory(normalized)
    return EventCategory.OTHER


def _check_length(value: str, minimum: int, field: str, title: str) -> None:
    if len(value) < minimum:
        raise CandidateRejectedError(
            f"{field} shorter than {minimum} characters",
            field=field,
            title=title,
        )


def sanitize_candidate(
    candidate: ScrapeCandidate,
    source: EventSource,
    *,
    allowlist: Iterable[str],
    scraped_at: datetime,
    today: date | None = None,
    creator: str = DEFAULT_CREATOR,
) -> StoredEvent:
    """Validate and normalize one extracted candidate.

    Steps:
    1. Trim strings
    2. Coerce category to the enum
    3. Null out ticket_url unless its host is allowlisted
    4. Parse date, reject unparsable or past (today is still valid)
    5. Reject short title/venue/city and non-empty-but-short descriptions
    6. Stamp provenance (source url/domain, verified, scraped_at)

    Args:
        candidate: Decoded extractor output
        source: Source page the candidate came from
        allowlist: Domains trusted for ticket links
        scraped_at: Run timestamp
        today: Reference day for the past-date check (defaults to scraped_at's date)
        creator: Value for the ``creator`` column

    Returns:
        StoredEvent ready for deduplication and insert

    Raises:
        CandidateRejectedError: The candidate must be dropped
    """
    title = candidate.title.strip()
    raw_date = candidate.date.strip()
    venue = candidate.venue.strip()
    city = candidate.city.strip()
    description = candidate.description.strip()
    event_time = candidate.time.strip() or "TBD"

    category = coerce_category(candidate.category)

    ticket_url = (candidate.ticket_url or "").strip() or None
    if ticket_url and not is_allowed_url(ticket_url, allowlist):
        ticket_url = None

    reference_day = today or scraped_at.date()
    parsed_date = parse_future_date(raw_date, today=reference_day)
    if parsed_date is None:
        raise InvalidDateError(raw_date, title=title)

    _check_length(title, MIN_TITLE_LENGTH, "title", title)
    _check_length(venue, MIN_VENUE_LENGTH, "venue", title)
    _check_length(city, MIN_CITY_LENGTH, "city", title)
    if description:
        _check_length(description, MIN_DESCRIPTION_LENGTH, "description", title)

    image_url = (candidate.image_url or "").strip() or None
    if image_url and not is_valid_url(image_url):
        image_url = None

    ticket_price = candidate.ticket_price
    if ticket_price is not None and ticket_price < 0:
        ticket_price = None

    return StoredEvent(
        title=title,
        date=raw_date,
        time=event_time,
        address=venue,
        description=description,
        category=category,
        country=source.country,
        city=city,
        ticket_url=ticket_url,
        ticket_price=ticket_price,
        background_image_url=image_url,
        target_date=datetime.combine(parsed_date, time.min, tzinfo=timezone.utc),
        creator=creator,
        source_url=source.url,
        source_domain=source.resolved_domain,
        source_verified=True,
        scraped_at=scraped_at,
    )
