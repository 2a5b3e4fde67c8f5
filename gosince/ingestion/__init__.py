"""
gosince Ingestion Framework
===========================

This package reads the per-release Go API description files and stores one
record per exported identifier.

Pipeline Stages:
1. Discovery - Ask the code search API for api/go*.txt files
2. Fetch - Stream each file, one producer per file, all in parallel
3. Parse - Split each line into package, category, name and signature
4. Link - Build the golang.org documentation URL
5. Persist - A single writer drains the queue with insert-or-ignore
"""

from gosince.ingestion.registry import (
    IngestionConfig,
    get_default_config,
    load_config,
)
from gosince.ingestion.crawler import (
    Crawler,
    iter_api_lines,
    version_from_source,
)
from gosince.ingestion.parser import (
    DEFAULT_GRAMMAR,
    CategoryPattern,
    Grammar,
    LineParser,
    ParsedLine,
    parse_line,
)
from gosince.ingestion.urls import (
    DEFAULT_DOC_BASE_URL,
    build_golang_url,
)
from gosince.ingestion.jobs import (
    ingest,
    run_ingestion,
    JobResult,
    JobStatus,
)

__all__ = [
    # Registry
    "IngestionConfig",
    "get_default_config",
    "load_config",
    # Crawler
    "Crawler",
    "iter_api_lines",
    "version_from_source",
    # Parser
    "DEFAULT_GRAMMAR",
    "CategoryPattern",
    "Grammar",
    "LineParser",
    "ParsedLine",
    "parse_line",
    # URLs
    "DEFAULT_DOC_BASE_URL",
    "build_golang_url",
    # Jobs
    "ingest",
    "run_ingestion",
    "JobResult",
    "JobStatus",
]
