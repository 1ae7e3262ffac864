"""
Crawler Detection Module

Loads crawler IP ranges from bundled and configured sources and answers
whether an address belongs to a known crawler.
"""

from ipcheck.crawler.models import (
    SourceFormat,
    CrawlerSource,
    CrawlerRangeSet,
    SourceFailure,
    LoadReport,
    MatchResult,
    NO_MATCH,
)
from ipcheck.crawler.fetch import Fetcher, HttpFetcher
from ipcheck.crawler.parsers import RangeParser, JSONRangeParser, TextRangeParser, register_parser
from ipcheck.crawler.sources import BUILTIN_SOURCES, load_source_config, get_all_sources
from ipcheck.crawler.loader import SourceLoader, load_sources
from ipcheck.crawler.registry import RangeRegistry

__all__ = [
    "SourceFormat",
    "CrawlerSource",
    "CrawlerRangeSet",
    "SourceFailure",
    "LoadReport",
    "MatchResult",
    "NO_MATCH",
    "Fetcher",
    "HttpFetcher",
    "RangeParser",
    "JSONRangeParser",
    "TextRangeParser",
    "register_parser",
    "BUILTIN_SOURCES",
    "load_source_config",
    "get_all_sources",
    "SourceLoader",
    "load_sources",
    "RangeRegistry",
]
