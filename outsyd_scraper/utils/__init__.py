"""Utility modules for the Outsyd scraper.

Provides shared utilities for:
- URL validation and the domain allowlist
- Free-text event date parsing
"""

# URL utilities
from outsyd_scraper.utils.urls import (
    build_allowlist,
    extract_domain,
    is_allowed_url,
    is_valid_url,
    normalize_domain,
)

# Date utilities
from outsyd_scraper.utils.date_parser import parse_event_date, parse_future_date

__all__ = [
    "build_allowlist",
    "extract_domain",
    "is_allowed_url",
    "is_valid_url",
    "normalize_domain",
    "parse_event_date",
    "parse_future_date",
]
