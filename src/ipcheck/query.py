"""
Query orchestration for the cidr and crawler commands.

Each call parses its arguments, runs one check and returns a result
object for the CLI to render. Nothing is cached or retried.
"""

from dataclasses import dataclass
from pathlib import Path

from ipcheck.config import Settings, get_settings
from ipcheck.crawler.fetch import Fetcher
from ipcheck.crawler.models import MatchResult
from ipcheck.crawler.registry import RangeRegistry
from ipcheck.errors import RegistryUnavailable
from ipcheck.ip.core import CidrBlock, IpAddress, parse_address, parse_cidr
from ipcheck.ip.overlap import comparison_length, overlaps


@dataclass(frozen=True)
class OverlapResult:
    """Answer to an overlap query with enough detail to explain it."""
    first: CidrBlock
    second: CidrBlock
    overlap: bool
    # Leading bits compared, None when the families differ
    compared_bits: int | None

    @property
    def same_family(self) -> bool:
        return self.first.version == self.second.version

    @property
    def family(self) -> str:
        if self.same_family:
            return self.first.family
        return f"{self.first.family}/{self.second.family}"


@dataclass(frozen=True)
class CrawlerResult:
    """Answer to a crawler query plus the registry it came from."""
    address: IpAddress
    match: MatchResult
    registry: RangeRegistry

    @property
    def is_crawler(self) -> bool:
        return self.match.matched


def check_overlap(network1: str, network2: str) -> OverlapResult:
    """Parse two CIDR strings and check whether they overlap.

    Raises:
        AddressError: if either argument is not valid CIDR notation
    """
    a = parse_cidr(network1)
    b = parse_cidr(network2)
    return OverlapResult(
        first=a,
        second=b,
        overlap=overlaps(a, b),
        compared_bits=comparison_length(a, b),
    )


def check_crawler(
    ip_address: str,
    settings: Settings | None = None,
    config_path: str | Path | None = None,
    fetcher: Fetcher | None = None,
    live: bool = False,
    timeout: float | None = None,
) -> CrawlerResult:
    """Check whether an address belongs to a known crawler.

    Raises:
        AddressError: if the address is malformed
        RegistryUnavailable: if no crawler source could be loaded
    """
    addr = parse_address(ip_address)

    settings = settings or get_settings()
    registry = RangeRegistry.from_config(
        config_path if config_path is not None else settings.sources_path,
        fetcher=fetcher,
        timeout=timeout if timeout is not None else settings.fetch_timeout,
        live=live,
    )
    if registry.is_empty:
        raise RegistryUnavailable(
            f"No crawler source could be loaded ({len(registry.failures)} failed)"
        )

    return CrawlerResult(address=addr, match=registry.is_crawler(addr), registry=registry)
