"""gosince CLI using Typer."""

import logging
import os
from pathlib import Path
from typing import Optional

import httpx
import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from gosince.cli.ingest import ingest_app
from gosince.core.enums import Category
from gosince.core.schema import APIRecord

# Load .env file from current directory or project root
_env_paths = [
    Path.cwd() / ".env",
    Path(__file__).parent.parent.parent / ".env",
]
for _env_path in _env_paths:
    if _env_path.exists():
        load_dotenv(_env_path)
        break

VERSION = "0.1.0"

console = Console()

app = typer.Typer(
    name="gosince",
    help="gosince - find the Go release that introduced an API",
    add_completion=False,
)
app.add_typer(ingest_app, name="ingest")


def configure_logging(level: int = logging.INFO) -> None:
    """Configure application logging with Rich handler."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Set up logging for every command."""
    configure_logging(logging.DEBUG if verbose else logging.INFO)


@app.command()
def serve(
    db_file: Optional[Path] = typer.Option(None, "--file", "-f", help="Path of the SQLite database file"),
    host: str = typer.Option("0.0.0.0", "--host", "-h", help="Host to bind to"),
    port: int = typer.Option(8000, "--port", "-p", help="Port to bind to"),
) -> None:
    """Start the lookup web service."""
    import uvicorn

    if db_file is not None:
        os.environ["DATABASE_URL"] = str(db_file)

    typer.echo(f"Starting gosince lookup service on http://{host}:{port}")
    typer.echo("Press Ctrl+C to stop the server")
    typer.echo("")

    uvicorn.run(
        "gosince.web.app:create_app",
        factory=True,
        host=host,
        port=port,
    )


@app.command()
def query(
    names: list[str] = typer.Argument(..., help="API name to look up"),
    cat: str = typer.Option(
        "",
        "--cat",
        "-c",
        help='Category of API to look for. Must be one of {"const", "var", "func", "method", "type"}',
    ),
) -> None:
    """Ask the lookup service which release introduced an API."""
    from gosince.ingestion.registry import get_default_config

    if cat and cat not in Category.values():
        typer.echo("Invalid value of --cat", err=True)
        raise typer.Exit(1)

    if len(names) > 1:
        typer.echo(f"More than one name are provided. Only to query first name, {names[0]}")

    params = {"name": names[0]}
    if cat:
        params["cat"] = cat

    api_url = get_default_config().api_url
    try:
        response = httpx.get(api_url, params=params, timeout=30.0)
    except httpx.HTTPError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if response.status_code != 200:
        typer.echo(f"Server error. {response.status_code}: {response.text}", err=True)
        raise typer.Exit(1)

    records = [APIRecord.model_validate(item) for item in response.json()]
    if not records:
        typer.echo("Cannot find matching API")
        return

    console.print(_records_table(records))


def _records_table(records: list[APIRecord]) -> Table:
    """Render records as a borderless table."""
    table = Table(box=None)
    for column in ("Version", "Package", "Name", "Category", "URL"):
        table.add_column(column, style="bold" if column == "Name" else None)
    for record in records:
        table.add_row(
            record.version,
            record.package_name,
            record.name,
            record.category.value,
            record.golang_url,
        )
    return table


@app.command()
def init_db(
    db_file: Optional[Path] = typer.Option(None, "--file", "-f", help="Path of the SQLite database file"),
) -> None:
    """Initialize the database (create the table and index)."""
    from gosince.db.engine import init_db as db_init

    typer.echo("Initializing database...")
    db_init(db_file)
    typer.echo("Database initialized successfully!")


@app.command()
def version() -> None:
    """Show the gosince version."""
    typer.echo(f"gosince v{VERSION}")


@app.command()
def check_config() -> None:
    """Check the current configuration status."""
    from gosince.db.engine import get_database_url
    from gosince.ingestion.registry import get_default_config

    typer.echo("gosince Configuration")
    typer.echo("=" * 40)

    env_found = False
    for _env_path in _env_paths:
        if _env_path.exists():
            typer.echo(f"  .env file: {_env_path}")
            env_found = True
            break
    if not env_found:
        typer.echo("  .env file: Not found")

    typer.echo(f"  Database: {get_database_url()}")
    for key, value in get_default_config().to_dict().items():
        typer.echo(f"  {key}: {value}")


if __name__ == "__main__":
    app()
