"""
Retrieval of raw crawler source data.

The loader only needs `fetch(url) -> bytes`. HttpFetcher serves http(s)
URLs with httpx and reads file:// URLs and plain paths from disk.
"""

import asyncio
import logging
from pathlib import Path
from typing import Protocol
from urllib.parse import urlparse, unquote

import httpx

from ipcheck.config import get_settings
from ipcheck.errors import SourceFetchError


logger = logging.getLogger(__name__)


class Fetcher(Protocol):
    """Anything that can retrieve the raw bytes behind a source URL."""

    async def fetch(self, url: str) -> bytes:
        """Return the payload, raising SourceFetchError on failure."""
        ...


def local_path(url: str) -> Path | None:
    """Filesystem path for file:// URLs and plain paths, None for http(s)."""
    try:
        parsed = urlparse(url)
    except ValueError as e:
        raise SourceFetchError(url, f"Malformed URL: {e}") from e
    if parsed.scheme in ("http", "https"):
        return None
    if parsed.scheme == "file":
        return Path(unquote(parsed.path))
    # Windows drive letters parse as a one-letter scheme
    if parsed.scheme == "" or len(parsed.scheme) == 1:
        return Path(url)
    raise SourceFetchError(url, f"Unsupported URL scheme: {parsed.scheme}")


class HttpFetcher:
    """Fetch sources over HTTP(S) or from the local filesystem."""

    def __init__(
        self,
        timeout: float | None = None,
        user_agent: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        settings = get_settings()
        self.timeout = timeout if timeout is not None else settings.fetch_timeout
        self.user_agent = user_agent or settings.user_agent
        self.transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "HttpFetcher":
        self._client = self._make_client()
        return self

    async def __aexit__(self, *exc) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _make_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            headers={"User-Agent": self.user_agent},
            follow_redirects=True,
            transport=self.transport,
        )

    async def fetch(self, url: str) -> bytes:
        path = local_path(url)
        if path is not None:
            return await self._read_file(url, path)
        return await self._get(url)

    async def _read_file(self, url: str, path: Path) -> bytes:
        loop = asyncio.get_running_loop()
        try:
            data = await loop.run_in_executor(None, path.read_bytes)
        except OSError as e:
            raise SourceFetchError(url, f"Cannot read {path}: {e.strerror or e}") from e
        except ValueError as e:
            # e.g. an embedded NUL byte in the path
            raise SourceFetchError(url, f"Invalid path {path!r}: {e}") from e
        logger.debug(f"Read {len(data)} bytes from {path}")
        return data

    async def _get(self, url: str) -> bytes:
        if self._client is not None:
            return await self._request(self._client, url)
        async with self._make_client() as client:
            return await self._request(client, url)

    async def _request(self, client: httpx.AsyncClient, url: str) -> bytes:
        try:
            resp = await client.get(url)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise SourceFetchError(url, f"HTTP {e.response.status_code} from {url}") from e
        except httpx.TimeoutException as e:
            raise SourceFetchError(url, f"Timed out fetching {url}") from e
        except httpx.InvalidURL as e:
            raise SourceFetchError(url, f"Invalid URL {url}: {e}") from e
        except httpx.HTTPError as e:
            raise SourceFetchError(url, f"Request to {url} failed: {e}") from e

        logger.debug(f"Fetched {len(resp.content)} bytes from {url}")
        return resp.content
