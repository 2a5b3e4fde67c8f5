"""
Ingestion CLI Commands
======================

CLI commands for loading Go API records into the database.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich import print as rprint
from rich.console import Console
from rich.table import Table

from gosince.core.errors import DiscoveryError
from gosince.ingestion.crawler import Crawler
from gosince.ingestion.jobs import JobStatus, ingest
from gosince.ingestion.registry import get_default_config

console = Console()
ingest_app = typer.Typer(help="Ingestion pipeline commands")


@ingest_app.command("run")
def run_ingestion(
    db_file: Optional[Path] = typer.Option(None, "--file", "-f", help="Path of the SQLite database file"),
) -> None:
    """
    Download every Go API file and store its records.

    Examples:
        gosince ingest run --file ./gosince.db
    """
    config = get_default_config()

    rprint("\n[bold]Starting ingestion[/bold]")
    rprint(f"  Search: {config.search_url}")
    rprint(f"  Queue size: {config.queue_size}")
    if db_file:
        rprint(f"  Database: {db_file}")

    with console.status("[bold blue]Ingesting...[/bold blue]"):
        result = asyncio.run(ingest(db_file, config))

    _display_job_result(result.to_dict())

    if result.status == JobStatus.FAILED:
        raise typer.Exit(1)


@ingest_app.command("sources")
def list_sources() -> None:
    """
    List the API files that a run would ingest.

    Examples:
        gosince ingest sources
    """
    config = get_default_config()

    async def _discover() -> list[str]:
        async with Crawler(config) as crawler:
            return await crawler.list_sources()

    try:
        sources = asyncio.run(_discover())
    except DiscoveryError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if not sources:
        rprint("[yellow]No API files found[/yellow]")
        return

    table = Table(title="API Sources")
    table.add_column("URL", style="bold")
    for source in sources:
        table.add_row(source)

    console.print(table)


def _display_job_result(result: dict) -> None:
    """Display job result in a formatted table."""
    status = result.get("status", "unknown")
    status_color = {
        "completed": "green",
        "failed": "red",
    }.get(status, "white")

    rprint(f"\n[bold]Results:[/bold]")
    rprint(f"  Status: [{status_color}]{status}[/{status_color}]")

    if result.get("duration_seconds"):
        rprint(f"  Duration: {result['duration_seconds']:.1f}s")

    rprint(f"\n[bold]Statistics:[/bold]")
    rprint(f"  Sources discovered: {result.get('sources_discovered', 0)}")
    rprint(f"  Sources fetched: {result.get('sources_fetched', 0)}")
    rprint(f"  Sources failed: {result.get('sources_failed', 0)}")
    rprint(f"  Lines read: {result.get('lines_read', 0)}")
    rprint(f"  Records parsed: {result.get('records_parsed', 0)}")
    rprint(f"  Unparsed lines: {result.get('parse_errors', 0)}")
    rprint(f"  Records inserted: {result.get('records_inserted', 0)}")
    rprint(f"  Duplicates: {result.get('duplicates', 0)}")
    rprint(f"  Write errors: {result.get('write_errors', 0)}")

    errors = result.get("errors", [])
    if errors:
        rprint(f"\n[bold red]Errors ({len(errors)}):[/bold red]")
        for error in errors[:10]:  # Show first 10
            rprint(f"  • {error}")
        if len(errors) > 10:
            rprint(f"  ... and {len(errors) - 10} more")
