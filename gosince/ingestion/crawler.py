"""
API Source Crawler Module
=========================

Discovers the per-release API description files and streams their lines.
"""

from __future__ import annotations

import logging
import posixpath
from collections.abc import AsyncIterator, Iterable, Iterator
from typing import Any
from urllib.parse import urlparse

import httpx

from gosince.core.errors import DiscoveryError, FetchError
from gosince.ingestion.registry import IngestionConfig

logger = logging.getLogger(__name__)

COMMENT_MARKER = "#"


def iter_api_lines(lines: Iterable[str]) -> Iterator[str]:
    """Yield stripped lines, skipping blank lines and comments."""
    for raw in lines:
        line = raw.strip()
        if not line or line.startswith(COMMENT_MARKER):
            continue
        yield line


def version_from_source(source_url: str, prefix: str = "go", suffix: str = ".txt") -> str:
    """
    Derive the release token from a source URL.

    Example: .../api/go1.11.txt -> 1.11
    """
    name = posixpath.basename(urlparse(source_url).path)
    if prefix and name.startswith(prefix):
        name = name[len(prefix):]
    if suffix and name.endswith(suffix):
        name = name[: -len(suffix)]
    return name


def select_source_names(items: Iterable[Any], prefix: str) -> list[str]:
    """
    Keep the search hits that are top-level API files.

    A hit counts only when its path is exactly `api/<name>` and the name
    starts with the version file prefix.
    """
    names = []
    for item in items:
        if not isinstance(item, dict):
            continue
        name = item.get("name")
        path = item.get("path")
        if not isinstance(name, str) or not isinstance(path, str):
            continue
        if path == f"api/{name}" and name.startswith(prefix):
            names.append(name)
    return names


class Crawler:
    """
    HTTP client for the API source files.

    Every request is a single attempt; a failed source is reported to the
    caller and never retried.
    """

    def __init__(
        self,
        config: IngestionConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config or IngestionConfig()
        self._client = httpx.AsyncClient(
            headers={"User-Agent": self.config.user_agent},
            timeout=self.config.request_timeout,
            follow_redirects=True,
            transport=transport,
        )

    async def __aenter__(self) -> Crawler:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def list_sources(self) -> list[str]:
        """
        Ask the code search endpoint for API files.

        Returns:
            Raw download URLs, one per API description file

        Raises:
            DiscoveryError: the search request or its payload is unusable
        """
        try:
            response = await self._client.get(self.config.search_url)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as e:
            raise DiscoveryError(f"Search request failed: {e}") from e
        except ValueError as e:
            raise DiscoveryError(f"Search response is not valid JSON: {e}") from e

        items = payload.get("items") if isinstance(payload, dict) else None
        if not isinstance(items, list):
            raise DiscoveryError("Search response has no 'items' list")

        names = select_source_names(items, self.config.version_prefix)
        logger.info(f"Discovered {len(names)} API files out of {len(items)} search hits")
        return [self.config.raw_base_url + name for name in names]

    async def fetch_lines(self, source_url: str) -> AsyncIterator[str]:
        """
        Stream the content lines of one API file.

        Args:
            source_url: Raw URL of the file

        Yields:
            Stripped lines that are neither blank nor comments

        Raises:
            FetchError: the download failed or returned an error status
        """
        try:
            async with self._client.stream("GET", source_url) as response:
                if response.status_code >= 400:
                    raise FetchError(source_url, f"HTTP {response.status_code}")
                async for raw in response.aiter_lines():
                    for line in iter_api_lines((raw,)):
                        yield line
        except httpx.TimeoutException as e:
            raise FetchError(source_url, f"Timeout after {self.config.request_timeout}s") from e
        except httpx.HTTPError as e:
            raise FetchError(source_url, str(e)) from e
