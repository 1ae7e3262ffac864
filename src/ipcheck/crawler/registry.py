"""
Crawler range registry.

Holds every loaded range set in registration order: built-in sources
first, then configured sources in the order they were declared. When an
address is covered by several sources the earliest registered one wins.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from ipcheck.crawler.fetch import Fetcher
from ipcheck.crawler.loader import SourceLoader
from ipcheck.crawler.models import (
    CrawlerRangeSet,
    CrawlerSource,
    LoadReport,
    MatchResult,
    NO_MATCH,
    SourceFailure,
)
from ipcheck.crawler.sources import BUILTIN_SOURCES, load_source_config
from ipcheck.ip.core import IpAddress


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RangeRegistry:
    """Read-only union of loaded crawler range sets."""
    range_sets: tuple[CrawlerRangeSet, ...] = ()
    failures: tuple[SourceFailure, ...] = ()
    sources: tuple[CrawlerSource, ...] = field(default=(), compare=False)

    @classmethod
    def from_report(
        cls, report: LoadReport, sources: list[CrawlerSource] | None = None
    ) -> "RangeRegistry":
        return cls(
            range_sets=tuple(report.range_sets),
            failures=tuple(report.failures),
            sources=tuple(sources or ()),
        )

    @classmethod
    def build(
        cls,
        builtins: list[CrawlerSource] | None = None,
        configured_sources: list[CrawlerSource] | None = None,
        fetcher: Fetcher | None = None,
        timeout: float | None = None,
        live: bool = False,
    ) -> "RangeRegistry":
        """Load built-in and configured sources into a registry."""
        if builtins is None:
            builtins = BUILTIN_SOURCES
        sources = list(builtins) + list(configured_sources or [])

        loader = SourceLoader(fetcher=fetcher, timeout=timeout, live=live)
        report = loader.load(sources)

        registry = cls.from_report(report, sources)
        logger.debug(
            f"Registry built: {registry.sources_loaded}/{len(sources)} sources, "
            f"{registry.total_ranges} ranges"
        )
        return registry

    @classmethod
    def from_config(
        cls,
        config_path: str | Path,
        fetcher: Fetcher | None = None,
        timeout: float | None = None,
        live: bool = False,
    ) -> "RangeRegistry":
        """Build from the built-ins plus an optional sources document."""
        config = load_source_config(config_path)
        registry = cls.build(
            configured_sources=config.sources,
            fetcher=fetcher,
            timeout=timeout,
            live=live,
        )
        if not config.failures:
            return registry
        return cls(
            range_sets=registry.range_sets,
            failures=tuple(config.failures) + registry.failures,
            sources=registry.sources,
        )

    @property
    def sources_loaded(self) -> int:
        return len(self.range_sets)

    @property
    def total_ranges(self) -> int:
        return sum(len(rs) for rs in self.range_sets)

    @property
    def is_empty(self) -> bool:
        return not self.range_sets

    def is_crawler(self, addr: IpAddress) -> MatchResult:
        """Find the first registered source whose ranges contain addr."""
        for range_set in self.range_sets:
            block = range_set.find(addr)
            if block is not None:
                return MatchResult(source_name=range_set.source_name, block=block)
        return NO_MATCH
