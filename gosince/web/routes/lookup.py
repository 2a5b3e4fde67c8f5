"""Lookup route answering "since when does this API exist" queries."""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from pydantic import ValidationError

from gosince.core.schema import LookupQuery
from gosince.db.engine import get_session
from gosince.db.repositories import APIRecordRepository

logger = logging.getLogger(__name__)

router = APIRouter(tags=["lookup"])


def _validation_message(exc: ValidationError) -> str:
    """Return the first validation message without pydantic's prefix."""
    error = exc.errors()[0]
    cause = error.get("ctx", {}).get("error")
    return str(cause) if cause else error["msg"]


@router.get("/v1")
async def query_name(name: str = "", cat: str = "") -> Response:
    """
    Return all records with the given name, newest release first.

    Args:
        name: Identifier to look up; only [A-Za-z0-9_] is accepted.
        cat: Optional category filter.

    Returns:
        JSON array of records, or 400 with a plain-text reason.
    """
    try:
        query = LookupQuery(name=name, category=cat)
    except ValidationError as e:
        message = _validation_message(e)
        logger.warning(f"Rejected lookup: {message}")
        return PlainTextResponse(message, status_code=400)

    with get_session() as session:
        records = APIRecordRepository(session).query(query.name, query.category)

    return JSONResponse(
        [record.model_dump(mode="json") for record in records],
        headers={"Cache-Control": "max-age=3600"},
        media_type="application/json; charset=utf-8",
    )
