"""Command line interface for the Outsyd scraper.

Usage:
    python -m outsyd_scraper.cli [command] [options]

Commands:
    scrape      Run the ingestion pipeline
    sources     List configured sources
"""

from outsyd_scraper.cli.main import app

__all__ = ["app"]
