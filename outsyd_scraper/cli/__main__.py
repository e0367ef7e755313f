"""Entry point for running CLI as module.

Usage:
    python -m outsyd_scraper.cli scrape --dry-run
    python -m outsyd_scraper.cli sources
"""

from outsyd_scraper.cli.main import main

if __name__ == "__main__":
    main()
