"""
Parsers for crawler range payloads.

Each supported source format has one RangeParser implementation. Parsers
are looked up by format name, so adding a format means registering one
more parser rather than branching in the loader.
"""

import json
from abc import ABC, abstractmethod
from typing import Any

from ipcheck.crawler.models import CrawlerRangeSet, SourceFormat
from ipcheck.errors import AddressError, SourceParseError, UnsupportedSourceFormat
from ipcheck.ip.core import CidrBlock, parse_range


# Keys holding the range list in structured JSON documents
JSON_LIST_KEYS = ("prefixes", "ranges", "cidrs", "ips", "addresses")

# Keys holding a single range inside a list entry object
# (Google/Bing use ipv4Prefix/ipv6Prefix, AWS uses ip_prefix/ipv6_prefix)
JSON_ENTRY_KEYS = ("ipv4Prefix", "ipv6Prefix", "ip_prefix", "ipv6_prefix", "prefix", "cidr")

COMMENT_MARKER = "#"


class RangeParser(ABC):
    """Turn a raw payload into a CrawlerRangeSet."""

    @property
    @abstractmethod
    def format(self) -> str:
        """Return the format name this parser handles."""
        pass

    @abstractmethod
    def parse(self, source_name: str, payload: bytes) -> CrawlerRangeSet:
        """Parse raw source data.

        Raises:
            SourceParseError: if the payload or any entry is malformed
        """
        pass

    def _decode(self, source_name: str, payload: bytes) -> str:
        try:
            return payload.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise SourceParseError(source_name, f"Payload is not UTF-8 text: {e}") from e

    def _parse_entry(self, source_name: str, text: str, where: str) -> CidrBlock:
        try:
            return parse_range(text)
        except AddressError as e:
            raise SourceParseError(source_name, f"{where}: {e}") from e


class JSONRangeParser(RangeParser):
    """JSON lists of ranges, bare or wrapped in an object.

    Accepted shapes:
        ["66.249.64.0/27", "2001:4860:4801:10::/64"]
        {"prefixes": [{"ipv4Prefix": "66.249.64.0/27"}, ...]}
        {"ranges": ["157.55.39.0/24", ...]}
    """

    @property
    def format(self) -> str:
        return SourceFormat.JSON.value

    def parse(self, source_name: str, payload: bytes) -> CrawlerRangeSet:
        text = self._decode(source_name, payload)
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise SourceParseError(source_name, f"Invalid JSON: {e}") from e
        except RecursionError as e:
            raise SourceParseError(source_name, "Invalid JSON: nested too deeply") from e

        entries = self._find_entries(source_name, data)

        blocks = []
        for index, entry in enumerate(entries):
            value = self._entry_value(source_name, entry, index)
            blocks.append(self._parse_entry(source_name, value, f"entry {index}"))

        return CrawlerRangeSet.build(source_name, blocks)

    def _find_entries(self, source_name: str, data: Any) -> list[Any]:
        if isinstance(data, list):
            return data
        if isinstance(data, dict):
            for key in JSON_LIST_KEYS:
                if isinstance(data.get(key), list):
                    return data[key]
            raise SourceParseError(
                source_name,
                f"No range list found (expected one of: {', '.join(JSON_LIST_KEYS)})",
            )
        raise SourceParseError(
            source_name, f"Expected a JSON array or object, got {type(data).__name__}"
        )

    def _entry_value(self, source_name: str, entry: Any, index: int) -> str:
        if isinstance(entry, str):
            return entry
        if isinstance(entry, dict):
            for key in JSON_ENTRY_KEYS:
                if isinstance(entry.get(key), str):
                    return entry[key]
        raise SourceParseError(source_name, f"entry {index}: not a range: {entry!r}")


class TextRangeParser(RangeParser):
    """One CIDR block or address per line, '#' comments allowed."""

    @property
    def format(self) -> str:
        return SourceFormat.TEXT.value

    def parse(self, source_name: str, payload: bytes) -> CrawlerRangeSet:
        text = self._decode(source_name, payload)

        blocks = []
        for lineno, line in enumerate(text.splitlines(), start=1):
            line = line.strip()
            if not line or line.startswith(COMMENT_MARKER):
                continue
            blocks.append(self._parse_entry(source_name, line, f"line {lineno}"))

        return CrawlerRangeSet.build(source_name, blocks)


_PARSERS: dict[str, RangeParser] = {}


def register_parser(parser: RangeParser) -> None:
    """Register a parser for its format (case-insensitive)."""
    _PARSERS[parser.format.lower()] = parser


def get_parser(source_name: str, fmt: str) -> RangeParser:
    """Look up the parser for a format.

    Raises:
        UnsupportedSourceFormat: if no parser handles the format
    """
    parser = _PARSERS.get(fmt.strip().lower())
    if parser is None:
        supported = ", ".join(supported_formats())
        raise UnsupportedSourceFormat(
            source_name, f"Unsupported format {fmt!r} (supported: {supported})"
        )
    return parser


def supported_formats() -> list[str]:
    return [p.format for p in _PARSERS.values()]


register_parser(JSONRangeParser())
register_parser(TextRangeParser())
