"""Tests for candidate sanitization."""

from datetime import date, datetime, timezone

import pytest

from outsyd_scraper.core.event_model import EventCategory
from outsyd_scraper.core.exceptions import CandidateRejectedError, InvalidDateError
from outsyd_scraper.core.sanitizer import coerce_category, sanitize_candidate


@pytest.fixture
def sanitize(allowlist, run_time, test_sources):
    def _sanitize(candidate, **kwargs):
        return sanitize_candidate(candidate, test_sources[0], allowlist=allowlist, scraped_at=run_time, **kwargs)

    return _sanitize


class TestCoerceCategory:
    """Category coercion onto the closed enum."""

    @pytest.mark.parametrize("value,expected", [
        ("music", EventCategory.MUSIC),
        ("  Sports ", EventCategory.SPORTS),
        ("TECH", EventCategory.TECH),
        ("nightlife", EventCategory.OTHER),
        ("", EventCategory.OTHER),
        (None, EventCategory.OTHER),
    ])
    def test_coerce(self, value, expected):
        assert coerce_category(value) is expected


class TestSanitizeCandidate:
    """Tests for sanitize_candidate."""

    def test_valid_candidate(self, sanitize, make_candidate, run_time):
        event = sanitize(make_candidate())

        assert event.title == "Jazz on the Lawn"
        assert event.address == "Kirstenbosch Gardens"
        assert event.category is EventCategory.MUSIC
        assert event.country == "South Africa"
        assert event.ticket_url == "https://www.alpha-events.co.za/tickets/jazz-lawn"
        assert event.ticket_price == 250.0
        assert event.target_date == datetime(2026, 3, 15, tzinfo=timezone.utc)
        assert event.source_url == "https://www.alpha-events.co.za/events"
        assert event.source_domain == "alpha-events.co.za"
        assert event.source_verified is True
        assert event.scraped_at == run_time
        assert event.creator == "Outsyde Bot"

    def test_keeps_date_text_as_written(self, sanitize, make_candidate):
        event = sanitize(make_candidate(date="Sun 15 Mar 2026"))

        assert event.date == "Sun 15 Mar 2026"

    def test_unknown_category_becomes_other(self, sanitize, make_candidate):
        event = sanitize(make_candidate(category="afrobeats party"))

        assert event.category is EventCategory.OTHER

    def test_ticket_url_off_allowlist_is_nulled(self, sanitize, make_candidate):
        event = sanitize(make_candidate(ticket_url="https://phishy-tickets.example.com/buy"))

        assert event.ticket_url is None

    def test_ticket_url_on_other_allowlisted_source_is_kept(self, sanitize, make_candidate):
        event = sanitize(make_candidate(ticket_url="https://beta-tickets.com.ng/t/99"))

        assert event.ticket_url == "https://beta-tickets.com.ng/t/99"

    def test_malformed_ticket_url_is_nulled(self, sanitize, make_candidate):
        event = sanitize(make_candidate(ticket_url="buy at the door"))

        assert event.ticket_url is None

    @pytest.mark.parametrize("value", ["January 3, 2020", "February 28, 2026", "TBD", "soon", "18:00 - 22:00", "15th"])
    def test_past_or_unparsable_date_rejected(self, sanitize, make_candidate, value):
        with pytest.raises(InvalidDateError) as exc_info:
            sanitize(make_candidate(date=value))

        assert exc_info.value.field == "date"

    def test_event_today_is_accepted(self, sanitize, make_candidate):
        event = sanitize(make_candidate(date="March 1, 2026"))

        assert event.target_date.date() == date(2026, 3, 1)

    def test_explicit_today_overrides_run_date(self, sanitize, make_candidate):
        with pytest.raises(InvalidDateError):
            sanitize(make_candidate(), today=date(2026, 4, 1))

    @pytest.mark.parametrize("overrides,field", [
        ({"title": "Gig"}, "title"),
        ({"venue": "X1"}, "venue"),
        ({"city": "L"}, "city"),
        ({"description": "Fun night"}, "description"),
    ])
    def test_too_short_fields_rejected(self, sanitize, make_candidate, overrides, field):
        with pytest.raises(CandidateRejectedError) as exc_info:
            sanitize(make_candidate(**overrides))

        assert exc_info.value.field == field

    def test_empty_description_allowed(self, sanitize, make_candidate):
        event = sanitize(make_candidate(description=""))

        assert event.description == ""

    def test_invalid_image_dropped(self, sanitize, make_candidate):
        event = sanitize(make_candidate(image_url="/img/poster.jpg"))

        assert event.background_image_url is None

    def test_negative_price_dropped(self, sanitize, make_candidate):
        event = sanitize(make_candidate(ticket_price=-10))

        assert event.ticket_price is None

    def test_custom_creator(self, sanitize, make_candidate):
        event = sanitize(make_candidate(), creator="Scraper")

        assert event.creator == "Scraper"
