"""
Loading crawler sources into range sets.

All sources are retrieved concurrently. Each source is loaded on its own:
a fetch or parse failure is recorded in the LoadReport and never stops
the other sources from loading.
"""

import asyncio
import logging

from ipcheck.crawler.fetch import Fetcher, HttpFetcher
from ipcheck.crawler.models import CrawlerRangeSet, CrawlerSource, LoadReport, SourceFailure
from ipcheck.crawler.parsers import get_parser
from ipcheck.crawler.sources import read_bundled
from ipcheck.errors import SourceError, SourceFetchError


logger = logging.getLogger(__name__)


class SourceLoader:
    """Load CrawlerSources through a Fetcher."""

    def __init__(
        self,
        fetcher: Fetcher | None = None,
        timeout: float | None = None,
        live: bool = False,
    ):
        self.fetcher = fetcher
        self.timeout = timeout
        # Fetch built-ins from their published URLs instead of bundled data
        self.live = live

    async def _retrieve(self, fetcher: Fetcher, source: CrawlerSource) -> bytes:
        if source.is_builtin and not self.live:
            return read_bundled(source)

        try:
            if self.timeout:
                return await asyncio.wait_for(fetcher.fetch(source.url), self.timeout)
            return await fetcher.fetch(source.url)
        except asyncio.TimeoutError as e:
            raise SourceFetchError(
                source.name, f"No response from {source.url} within {self.timeout:g}s"
            ) from e
        except SourceFetchError as e:
            # Fetchers only know the URL
            raise SourceFetchError(source.name, e.message) from e

    async def load_one_async(self, fetcher: Fetcher, source: CrawlerSource) -> CrawlerRangeSet:
        """Load a single source.

        Raises:
            SourceError: on fetch, format or parse failure
        """
        parser = get_parser(source.name, source.format)
        payload = await self._retrieve(fetcher, source)
        range_set = parser.parse(source.name, payload)
        logger.debug(f"Loaded {len(range_set)} ranges from {source.name}")
        return range_set

    async def _load_or_fail(
        self, fetcher: Fetcher, source: CrawlerSource
    ) -> CrawlerRangeSet | SourceFailure:
        try:
            return await self.load_one_async(fetcher, source)
        except SourceError as e:
            logger.info(f"Failed to load crawler source {e}")
            return SourceFailure(source.name, e)
        except Exception as e:
            # Anything unexpected still only fails this one source
            logger.debug(f"Unexpected error loading {source.name}", exc_info=True)
            error = SourceFetchError(source.name, f"Unexpected error: {type(e).__name__}: {e}")
            return SourceFailure(source.name, error)

    async def load_async(self, sources: list[CrawlerSource]) -> LoadReport:
        """Load all sources concurrently, keeping declaration order."""
        if self.fetcher is not None:
            results = await self._gather(self.fetcher, sources)
        else:
            async with HttpFetcher(timeout=self.timeout) as fetcher:
                results = await self._gather(fetcher, sources)

        report = LoadReport()
        for result in results:
            if isinstance(result, SourceFailure):
                report.failures.append(result)
            else:
                report.range_sets.append(result)
        return report

    async def _gather(
        self, fetcher: Fetcher, sources: list[CrawlerSource]
    ) -> list[CrawlerRangeSet | SourceFailure]:
        tasks = [self._load_or_fail(fetcher, source) for source in sources]
        # gather() returns results in task order, not completion order
        return list(await asyncio.gather(*tasks))

    def load(self, sources: list[CrawlerSource]) -> LoadReport:
        """Synchronous load."""
        return asyncio.run(self.load_async(sources))


def load_sources(
    sources: list[CrawlerSource],
    fetcher: Fetcher | None = None,
    timeout: float | None = None,
    live: bool = False,
) -> LoadReport:
    """Load sources with a fail-soft report."""
    return SourceLoader(fetcher=fetcher, timeout=timeout, live=live).load(sources)
