"""
Ingestion Jobs Module
=====================

Runs one full ingestion pass:

1. Discover - list the API files once
2. Fan out  - one producer task per file fetches, parses and queues records
3. Fan in   - a single consumer drains the bounded queue into the store
4. Finish   - wait for producers, close the queue, wait for the consumer

Errors on a single line, file or record are logged and counted. Only a
failed discovery or database setup fails the run.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import Any
from uuid import uuid4

import httpx
from sqlalchemy.exc import SQLAlchemyError

from gosince.core.errors import DiscoveryError, FetchError, ParseError, StoreWriteError
from gosince.core.schema import APIRecord
from gosince.db.engine import create_db_engine
from gosince.db.store import RecordStore
from gosince.ingestion.crawler import Crawler, version_from_source
from gosince.ingestion.parser import LineParser
from gosince.ingestion.registry import IngestionConfig, get_default_config

logger = logging.getLogger(__name__)

# Pushed once all producers are done
_QUEUE_CLOSED = object()


class JobStatus(str, Enum):
    """Status of an ingestion job."""

    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class SourceReport:
    """What one producer did with one API file."""

    source: str
    version: str
    lines_read: int = 0
    records_parsed: int = 0
    parse_errors: int = 0
    error: str | None = None

    @property
    def success(self) -> bool:
        """Check if the whole file was read."""
        return self.error is None


@dataclass
class WriterReport:
    """What the consumer did with the queued records."""

    records_inserted: int = 0
    duplicates: int = 0
    write_errors: int = 0
    errors: list[str] = field(default_factory=list)


@dataclass
class JobResult:
    """Result of an ingestion job."""

    job_id: str
    status: JobStatus
    started_at: datetime | None = None
    completed_at: datetime | None = None
    sources_discovered: int = 0
    sources_fetched: int = 0
    sources_failed: int = 0
    lines_read: int = 0
    records_parsed: int = 0
    parse_errors: int = 0
    records_inserted: int = 0
    duplicates: int = 0
    write_errors: int = 0
    errors: list[str] = field(default_factory=list)
    duration_seconds: float | None = None

    def add_source(self, report: SourceReport) -> None:
        """Fold one producer report into the totals."""
        if report.success:
            self.sources_fetched += 1
        else:
            self.sources_failed += 1
            self.errors.append(report.error or "Unknown error")
        self.lines_read += report.lines_read
        self.records_parsed += report.records_parsed
        self.parse_errors += report.parse_errors

    def add_writer(self, report: WriterReport) -> None:
        """Fold the consumer report into the totals."""
        self.records_inserted += report.records_inserted
        self.duplicates += report.duplicates
        self.write_errors += report.write_errors
        self.errors.extend(report.errors)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "job_id": self.job_id,
            "status": self.status.value,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "sources_discovered": self.sources_discovered,
            "sources_fetched": self.sources_fetched,
            "sources_failed": self.sources_failed,
            "lines_read": self.lines_read,
            "records_parsed": self.records_parsed,
            "parse_errors": self.parse_errors,
            "records_inserted": self.records_inserted,
            "duplicates": self.duplicates,
            "write_errors": self.write_errors,
            "errors": self.errors,
            "duration_seconds": self.duration_seconds,
        }


async def produce_records(
    source_url: str,
    crawler: Crawler,
    parser: LineParser,
    queue: asyncio.Queue,
    config: IngestionConfig,
) -> SourceReport:
    """
    Fetch one API file and queue a record for every line that parses.

    A bad line is skipped; a failed download ends this producer only.
    """
    version = version_from_source(source_url, config.version_prefix, config.version_suffix)
    report = SourceReport(source=source_url, version=version)

    try:
        async for line in crawler.fetch_lines(source_url):
            report.lines_read += 1
            try:
                parsed = parser.parse(line)
            except ParseError as e:
                report.parse_errors += 1
                logger.warning(f"Skipping line in {source_url}: {e}")
                continue
            await queue.put(parsed.to_record(version, config.doc_base_url))
            report.records_parsed += 1
    except FetchError as e:
        report.error = str(e)
        logger.error(report.error)
        return report

    logger.info(
        f"Read {source_url}: {report.records_parsed} records, {report.parse_errors} bad lines"
    )
    return report


async def consume_records(queue: asyncio.Queue, store: RecordStore) -> WriterReport:
    """
    Drain the queue into the store until it is closed.

    This is the only task that writes. Each insert runs in a worker thread
    so the producers keep going, but inserts never overlap.
    """
    report = WriterReport()
    while True:
        item = await queue.get()
        if item is _QUEUE_CLOSED:
            break
        record: APIRecord = item
        try:
            inserted = await asyncio.to_thread(store.insert_ignore, record)
        except StoreWriteError as e:
            report.write_errors += 1
            report.errors.append(str(e))
            logger.error(str(e))
            continue
        except Exception as e:
            message = f"Unexpected error writing {record.package_name}.{record.name}: {e!r}"
            report.write_errors += 1
            report.errors.append(message)
            logger.exception(message)
            continue
        if inserted:
            report.records_inserted += 1
        else:
            report.duplicates += 1
    return report


async def run_ingestion(
    store: RecordStore,
    crawler: Crawler,
    config: IngestionConfig | None = None,
    parser: LineParser | None = None,
    job_id: str | None = None,
) -> JobResult:
    """
    Run discovery, the producers and the single writer.

    Args:
        store: Store owned by the consumer for the whole run
        crawler: Client used for discovery and downloads
        config: Pipeline settings
        parser: Line parser (default grammar if omitted)
        job_id: Optional job identifier

    Returns:
        JobResult with per-run counters

    Raises:
        DiscoveryError: no source list could be obtained
    """
    config = config or get_default_config()
    parser = parser or LineParser()
    result = JobResult(
        job_id=job_id or str(uuid4()),
        status=JobStatus.RUNNING,
        started_at=datetime.now(UTC),
    )

    sources = await crawler.list_sources()
    result.sources_discovered = len(sources)
    logger.info(f"Found {len(sources)} API files to process")

    queue: asyncio.Queue = asyncio.Queue(maxsize=config.queue_size)
    consumer = asyncio.create_task(consume_records(queue, store))
    producers = [
        asyncio.create_task(produce_records(source, crawler, parser, queue, config))
        for source in sources
    ]

    producing = asyncio.gather(*producers, return_exceptions=True)
    await asyncio.wait({producing, consumer}, return_when=asyncio.FIRST_COMPLETED)
    if consumer.done():
        # The writer is gone; nothing will drain the queue
        for producer in producers:
            producer.cancel()
        await producing
        consumer.result()
        raise RuntimeError("Writer stopped before the queue was closed")

    outcomes = producing.result()
    await queue.put(_QUEUE_CLOSED)
    writer_report = await consumer

    for source, outcome in zip(sources, outcomes):
        if isinstance(outcome, BaseException):
            logger.error(f"Producer for {source} crashed: {outcome!r}")
            outcome = SourceReport(
                source=source,
                version=version_from_source(source, config.version_prefix, config.version_suffix),
                error=f"{source}: {outcome!r}",
            )
        result.add_source(outcome)
    result.add_writer(writer_report)

    result.status = JobStatus.COMPLETED
    result.completed_at = datetime.now(UTC)
    result.duration_seconds = (result.completed_at - result.started_at).total_seconds()
    return result


async def ingest(
    db_path: Path | str | None = None,
    config: IngestionConfig | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> JobResult:
    """
    Set up the database and crawler, then run one ingestion pass.

    Useful for the CLI. Discovery and schema setup failures are reported
    as a FAILED result instead of raising.

    Args:
        db_path: Optional path to the SQLite file
        config: Pipeline settings
        transport: Optional httpx transport (tests)

    Returns:
        JobResult
    """
    config = config or get_default_config()
    started_at = datetime.now(UTC)

    try:
        engine = create_db_engine(db_path)
    except OSError as e:
        return _failed_result(started_at, f"Cannot open database: {e}")

    store = RecordStore(engine)
    try:
        store.ensure_schema()
        async with Crawler(config, transport=transport) as crawler:
            return await run_ingestion(store, crawler, config)
    except (DiscoveryError, SQLAlchemyError) as e:
        return _failed_result(started_at, str(e))
    finally:
        store.close()
        engine.dispose()


def _failed_result(started_at: datetime, error: str) -> JobResult:
    """Build the result of a run that could not start."""
    logger.error(f"Ingestion failed: {error}")
    completed_at = datetime.now(UTC)
    return JobResult(
        job_id=str(uuid4()),
        status=JobStatus.FAILED,
        started_at=started_at,
        completed_at=completed_at,
        errors=[error],
        duration_seconds=(completed_at - started_at).total_seconds(),
    )
