"""Tests for the cidr and crawler query functions."""

import httpx
import pytest

from ipcheck.config import Settings
from ipcheck.crawler.fetch import HttpFetcher
from ipcheck.crawler.sources import BUILTIN_SOURCES
from ipcheck.errors import (
    InvalidAddressFormat,
    InvalidCidrFormat,
    InvalidPrefixLength,
    RegistryUnavailable,
    SourceFetchError,
)
from ipcheck.query import check_crawler, check_overlap


class TestCheckOverlap:
    def test_overlapping(self):
        result = check_overlap("192.168.1.0/24", "192.168.1.128/25")
        assert result.overlap
        assert result.family == "IPv4"
        assert result.compared_bits == 24

    def test_disjoint(self):
        result = check_overlap("192.168.1.0/25", "192.168.1.128/25")
        assert not result.overlap
        assert result.compared_bits == 25

    def test_ipv6(self):
        result = check_overlap("2001:db8::/32", "2001:db8:abcd::/48")
        assert result.overlap
        assert result.family == "IPv6"

    def test_mixed_families(self):
        result = check_overlap("10.0.0.0/8", "2001:db8::/32")
        assert not result.overlap
        assert not result.same_family
        assert result.compared_bits is None
        assert result.family == "IPv4/IPv6"

    def test_blocks_are_canonical(self):
        result = check_overlap("192.168.1.77/24", "10.0.0.1/8")
        assert str(result.first) == "192.168.1.0/24"
        assert str(result.second) == "10.0.0.0/8"

    def test_parse_errors_propagate(self):
        with pytest.raises(InvalidCidrFormat):
            check_overlap("10.0.0.0", "10.0.0.0/8")
        with pytest.raises(InvalidPrefixLength):
            check_overlap("10.0.0.0/8", "10.0.0.0/64")


class TestCheckCrawler:
    def test_googlebot(self):
        result = check_crawler("66.249.66.1")
        assert result.is_crawler
        assert result.match.source_name == "Googlebot IP Ranges"

    def test_not_a_crawler(self):
        result = check_crawler("8.8.8.8")
        assert not result.is_crawler
        assert result.registry.failures == ()

    def test_invalid_address(self):
        with pytest.raises(InvalidAddressFormat):
            check_crawler("66.249.66")

    def test_unreachable_source_still_answers(self, write_sources):
        path = write_sources([{
            "name": "Unreachable Bot",
            "url": "https://unreachable.example/ranges.json",
            "description": "Never answers",
            "format": "JSON",
        }])

        def handler(request):
            raise httpx.ConnectError("Connection refused", request=request)

        fetcher = HttpFetcher(transport=httpx.MockTransport(handler))
        result = check_crawler("66.249.66.1", config_path=path, fetcher=fetcher)

        assert result.match.source_name == "Googlebot IP Ranges"
        failures = result.registry.failures
        assert [f.source_name for f in failures] == ["Unreachable Bot"]
        assert isinstance(failures[0].error, SourceFetchError)

    def test_default_config_location_from_settings(self, tmp_path, write_sources):
        ranges = tmp_path / "ranges.txt"
        ranges.write_text("8.8.8.0/24\n")
        path = write_sources([{
            "name": "Resolver List",
            "url": str(ranges),
            "description": "Not really a crawler",
            "format": "Text",
        }], name="custom.json")

        result = check_crawler("8.8.8.8", settings=Settings(sources_file=str(path)))

        assert result.match.source_name == "Resolver List"

    def test_default_config_file_in_working_directory(self, tmp_path, write_sources):
        ranges = tmp_path / "ranges.txt"
        ranges.write_text("8.8.4.0/24\n")
        write_sources([{
            "name": "Local List",
            "url": str(ranges),
            "description": "From the working directory",
            "format": "Text",
        }])

        assert check_crawler("8.8.4.4").match.source_name == "Local List"

    def test_nothing_loaded_is_fatal(self, make_fetcher):
        with pytest.raises(RegistryUnavailable):
            check_crawler("66.249.66.1", fetcher=make_fetcher(), live=True)

    def test_live_mode_fetches_builtins(self, make_fetcher):
        payload = b'{"prefixes": [{"ipv4Prefix": "8.8.8.0/24"}]}'
        fetcher = make_fetcher({BUILTIN_SOURCES[0].url: payload})

        result = check_crawler("8.8.8.8", fetcher=fetcher, live=True)

        assert result.match.source_name == BUILTIN_SOURCES[0].name
        assert len(result.registry.failures) == len(BUILTIN_SOURCES) - 1
