"""
Data models for crawler range sources.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ipcheck.errors import SourceError
from ipcheck.ip.core import CidrBlock, IpAddress


class SourceFormat(str, Enum):
    """Documented source formats.

    The format field of a source is an open value: anything not listed
    here is kept as text and rejected when the source is loaded.
    """
    JSON = "JSON"
    TEXT = "Text"

    @classmethod
    def lookup(cls, value: str) -> "SourceFormat | None":
        """Case-insensitive lookup, None for unknown formats."""
        for fmt in cls:
            if fmt.value.lower() == value.strip().lower():
                return fmt
        return None


@dataclass(frozen=True)
class CrawlerSource:
    """A configured provenance of crawler IP ranges."""
    name: str
    url: str
    description: str
    format: str = SourceFormat.JSON.value
    # Bundled snapshot shipped in ipcheck/data (built-in sources only)
    resource: str | None = None

    @property
    def is_builtin(self) -> bool:
        return self.resource is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "url": self.url,
            "description": self.description,
            "format": self.format,
        }


@dataclass(frozen=True)
class CrawlerRangeSet:
    """Ranges loaded from one source, sorted by base address."""
    source_name: str
    ranges: tuple[CidrBlock, ...] = ()

    @classmethod
    def build(cls, source_name: str, blocks: list[CidrBlock]) -> "CrawlerRangeSet":
        """Sort blocks and drop exact duplicates."""
        unique = sorted(set(blocks), key=CidrBlock.sort_key)
        return cls(source_name=source_name, ranges=tuple(unique))

    def find(self, addr: IpAddress) -> CidrBlock | None:
        """First block containing the address, if any."""
        for block in self.ranges:
            if block.version != addr.version:
                continue
            # Sorted by base: nothing past the address can contain it
            if block.base.value > addr.value:
                break
            if addr in block:
                return block
        return None

    def count(self, version: int) -> int:
        return sum(1 for block in self.ranges if block.version == version)

    def __len__(self) -> int:
        return len(self.ranges)


@dataclass
class SourceFailure:
    """A source that could not be loaded."""
    source_name: str
    error: SourceError

    @property
    def kind(self) -> str:
        return self.error.kind

    @property
    def message(self) -> str:
        return self.error.message


@dataclass
class LoadReport:
    """Fail-soft result of loading several sources."""
    range_sets: list[CrawlerRangeSet] = field(default_factory=list)
    failures: list[SourceFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


@dataclass(frozen=True)
class MatchResult:
    """Outcome of a crawler lookup. A NoMatch has no source."""
    source_name: str | None = None
    block: CidrBlock | None = None

    @property
    def matched(self) -> bool:
        return self.source_name is not None

    def __bool__(self) -> bool:
        return self.matched


NO_MATCH = MatchResult()
