"""Logging configuration and handlers."""

from outsyd_scraper.logging.logger import get_logger, log_source_run, setup_logging

__all__ = ["get_logger", "log_source_run", "setup_logging"]
