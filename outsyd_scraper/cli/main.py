"""Command line interface for the Outsyd event scraper.

Usage:
    outsyd scrape
    outsyd scrape --dry-run
    outsyd scrape --url https://www.quicket.co.za/events/music --country "South Africa"
    outsyd sources
"""

import asyncio
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from outsyd_scraper import __version__
from outsyd_scraper.config.settings import get_settings
from outsyd_scraper.core.exceptions import (
    ConfigurationError,
    InvalidRequestError,
    MissingCredentialsError,
    RequestError,
)
from outsyd_scraper.core.firecrawl_client import close_firecrawl_client
from outsyd_scraper.core.pipeline import ScrapeOrchestrator, ScrapeSummary, create_orchestrator
from outsyd_scraper.core.source_registry import SourceRegistry
from outsyd_scraper.core.supabase_client import get_supabase_client
from outsyd_scraper.logging import setup_logging

app = typer.Typer(
    name="outsyd",
    help="Event scraper for African event listing sites",
    add_completion=False,
)
console = Console()

MAX_URL_LENGTH = 500
MAX_COUNTRY_LENGTH = 100


@app.callback()
def configure(
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Override LOG_LEVEL (DEBUG, INFO, WARNING, ERROR)",
    ),
):
    """Set up logging before any command runs."""
    settings = get_settings()
    setup_logging(
        level=log_level or settings.log_level,
        log_format=settings.log_format,
        log_file=settings.log_file,
    )


def validate_scrape_options(url: str | None, country: str | None) -> None:
    """Same limits as the HTTP endpoint."""
    if url is not None and len(url) > MAX_URL_LENGTH:
        raise InvalidRequestError(f"--url must be at most {MAX_URL_LENGTH} characters", field="url")
    if country is not None and len(country) > MAX_COUNTRY_LENGTH:
        raise InvalidRequestError(f"--country must be at most {MAX_COUNTRY_LENGTH} characters", field="country")


@app.command()
def scrape(
    url: Optional[str] = typer.Option(
        None,
        "--url", "-u",
        help="Scrape only this page (its domain must be a known source)",
    ),
    country: Optional[str] = typer.Option(
        None,
        "--country", "-c",
        help="Country for --url",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Run extraction and dedup lookups without inserting",
    ),
):
    """Run one ingestion batch.

    Examples:
        outsyd scrape
        outsyd scrape --dry-run
        outsyd scrape --url https://www.kenyabuzz.com/events/ --country Kenya
    """
    try:
        validate_scrape_options(url, country)
        orchestrator = create_orchestrator(dry_run=True if dry_run else None)
    except (ConfigurationError, RequestError) as e:
        console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(1)

    console.print()
    console.print("[bold blue]OUTSYD EVENT SCRAPE[/bold blue]")
    if orchestrator.config.dry_run:
        console.print("[yellow]Dry run: nothing will be inserted[/yellow]")
    console.print()

    try:
        summary = asyncio.run(run_batch(orchestrator, url, country))
    except RequestError as e:
        console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(1)

    print_summary(summary)


async def run_batch(orchestrator: ScrapeOrchestrator, url: str | None, country: str | None) -> ScrapeSummary:
    """Run the orchestrator, then close the shared Firecrawl connection pool."""
    try:
        return await orchestrator.run(requested_url=url, requested_country=country)
    finally:
        await close_firecrawl_client()


def print_summary(summary: ScrapeSummary) -> None:
    """Print per-source results table."""
    table = Table(show_header=True, header_style="bold")
    table.add_column("Source")
    table.add_column("Country")
    table.add_column("Extracted", justify="right")
    table.add_column("New", justify="right")
    table.add_column("Dupes", justify="right")
    table.add_column("Rejected", justify="right")
    table.add_column("Status")

    for r in summary.sources:
        if r.success:
            status = "[yellow]DRY[/yellow]" if summary.dry_run else "[green]OK[/green]"
        else:
            status = f"[red]ERR[/red] {(r.error or '')[:40]}"

        table.add_row(
            r.source_name[:30],
            r.country,
            str(r.extracted_count),
            str(r.inserted_count),
            str(r.duplicate_count),
            str(r.rejected_count + r.malformed_count),
            status,
        )

    console.print(table)
    console.print()
    console.print(f"[bold]{summary.message}[/bold]")
    if summary.failed_count:
        console.print(f"[yellow]Insert failures:[/yellow] {summary.failed_count}")


@app.command()
def sources():
    """List the sources the next scrape will visit."""
    try:
        store = get_supabase_client()
    except MissingCredentialsError:
        console.print("[yellow]Supabase not configured, showing built-in sources[/yellow]")
        store = None

    registry_sources = asyncio.run(SourceRegistry(store).get_sources())

    table = Table(show_header=True, header_style="bold")
    table.add_column("Name")
    table.add_column("Country")
    table.add_column("Domain")
    table.add_column("URL")

    for s in sorted(registry_sources, key=lambda x: (x.country, x.name)):
        table.add_row(s.name[:30], s.country, s.resolved_domain or "", s.url)

    console.print(table)
    console.print(f"[bold]Total:[/bold] {len(registry_sources)} sources")


@app.command()
def version():
    """Show version information."""
    console.print("[bold]Outsyd Event Scraper[/bold]")
    console.print(f"Version: {__version__}")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
