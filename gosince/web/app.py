"""FastAPI application factory for the gosince lookup service."""

from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI

from gosince.db.engine import init_db

# Load .env file from project root
_project_root = Path(__file__).parent.parent.parent
_env_file = _project_root / ".env"
if _env_file.exists():
    load_dotenv(_env_file)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="gosince",
        description="Look up the Go release that introduced an API",
        version="0.1.0",
    )

    # Initialize database tables
    init_db()

    # Include routers (import here to avoid circular imports)
    from gosince.web.routes import lookup

    app.include_router(lookup.router)

    return app
