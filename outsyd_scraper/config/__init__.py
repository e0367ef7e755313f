"""Configuration: environment settings and built-in event sources."""

from outsyd_scraper.config.settings import Settings, get_settings
from outsyd_scraper.config.sources import DEFAULT_EVENT_SOURCES, EventSource

__all__ = ["Settings", "get_settings", "EventSource", "DEFAULT_EVENT_SOURCES"]
