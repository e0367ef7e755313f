"""Pydantic models for scraped events that map to the Supabase ``events`` table."""

import re
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

DEFAULT_CREATOR = "Outsyde Bot"


class EventCategory(str, Enum):
    """Event category.

    Values must match the category filter used by the events page.
    """

    MUSIC = "music"
    SPORTS = "sports"
    TECH = "tech"
    ARTS = "arts"
    FOOD = "food"
    BUSINESS = "business"
    COMMUNITY = "community"
    WELLNESS = "wellness"
    EDUCATION = "education"
    OTHER = "other"


class UpsertOutcome(str, Enum):
    """What happened when an event reached the store."""

    INSERTED = "inserted"
    SKIPPED_DUPLICATE = "skipped_duplicate"
    INSERT_FAILED = "insert_failed"
    WOULD_INSERT = "would_insert"  # dry run, key not present


# Defaults the extractor is allowed to leave out (or send as null/blank)
_TEXT_DEFAULTS = {"time": "TBD", "description": "", "category": "other"}

_PRICE_NUMBER = re.compile(r"\d+(?:\.\d+)?")


class ScrapeCandidate(BaseModel):
    """An event as emitted by the LLM extractor.

    Untrusted input: the model may hallucinate, leave fields out or send the
    wrong types. Decoding only guarantees shape; ``sanitize_candidate`` is
    where content is checked.
    """

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    # Required by the extraction tool schema
    title: str
    date: str  # Free text, e.g. "March 15, 2026"
    venue: str
    city: str

    # Optional
    time: str = "TBD"  # "HH:MM - HH:MM" or "TBD"
    description: str = ""
    category: str = "other"
    ticket_url: str | None = None
    ticket_price: float | None = None
    image_url: str | None = None

    @field_validator("title", "date", "venue", "city", "time", "description", "category", mode="before")
    @classmethod
    def coerce_text(cls, value: Any, info: ValidationInfo) -> Any:
        """Accept scalars for text fields; fill blanks for optional ones."""
        default = _TEXT_DEFAULTS.get(info.field_name)
        if value is None:
            return default
        if isinstance(value, bool):
            return str(value).lower()
        if isinstance(value, (int, float)):
            return str(value)
        if isinstance(value, str) and default is not None and not value.strip():
            return default
        return value

    @field_validator("ticket_url", "image_url", mode="before")
    @classmethod
    def coerce_url(cls, value: Any) -> str | None:
        if not isinstance(value, str) or not value.strip():
            return None
        return value

    @field_validator("ticket_price", mode="before")
    @classmethod
    def coerce_price(cls, value: Any) -> float | None:
        """Numbers pass, "R150"/"$20.00" are reduced to their first amount, anything else is dropped."""
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            return float(value)
        if isinstance(value, str):
            match = _PRICE_NUMBER.search(value.replace(",", ""))
            return float(match.group(0)) if match else None
        return None


class StoredEvent(BaseModel):
    """A sanitized event ready for the ``events`` table."""

    title: str
    date: str
    time: str
    address: str  # venue
    description: str
    category: EventCategory
    country: str
    city: str
    ticket_url: str | None = None
    ticket_price: float | None = None
    background_image_url: str | None = None
    target_date: datetime  # UTC midnight of the parsed date
    creator: str = DEFAULT_CREATOR

    # Provenance
    source_url: str
    source_domain: str | None = None
    source_verified: bool = True
    scraped_at: datetime

    @property
    def dedup_key(self) -> tuple[str, str, str, str]:
        """Natural key used to detect an already stored event."""
        return (self.title, self.date, self.city, self.address)

    def to_record(self, fallback_image_url: str | None = None) -> dict[str, Any]:
        """Row payload for the ``events`` table.

        Args:
            fallback_image_url: Placeholder image when the source gave none
        """
        data = self.model_dump(mode="json")
        if not data.get("background_image_url") and fallback_image_url:
            data["background_image_url"] = fallback_image_url
        return data


class ExtractionResult(BaseModel):
    """Decoded extractor output for one source page."""

    candidates: list[ScrapeCandidate] = Field(default_factory=list)
    malformed: int = 0  # Items that could not be decoded into a candidate

    @property
    def total(self) -> int:
        """Every item the extractor returned, decodable or not."""
        return len(self.candidates) + self.malformed
