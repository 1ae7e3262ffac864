"""Tests for loading sources into range sets."""

import json

import pytest

from ipcheck.crawler.loader import SourceLoader, load_sources
from ipcheck.crawler.models import CrawlerSource
from ipcheck.crawler.sources import BUILTIN_SOURCES
from ipcheck.errors import (
    SourceFetchError,
    SourceParseError,
    UnsupportedSourceFormat,
)


def _source(name, fmt="JSON"):
    return CrawlerSource(
        name=name,
        url=f"https://{name.lower().replace(' ', '-')}.example/ranges",
        description=f"{name} ranges",
        format=fmt,
    )


def _json(*ranges):
    return json.dumps(list(ranges)).encode()


class TestLoadSources:
    def test_loads_each_format(self, make_fetcher):
        json_source = _source("Json Bot")
        text_source = _source("Text Bot", fmt="Text")
        fetcher = make_fetcher({
            json_source.url: _json("192.0.2.0/24"),
            text_source.url: b"# text\n198.51.100.0/24\n",
        })

        report = load_sources([json_source, text_source], fetcher=fetcher)

        assert report.ok
        assert [rs.source_name for rs in report.range_sets] == ["Json Bot", "Text Bot"]
        assert str(report.range_sets[1].ranges[0]) == "198.51.100.0/24"

    def test_one_failure_does_not_stop_others(self, make_fetcher):
        good = _source("Good Bot")
        down = _source("Down Bot")
        garbled = _source("Garbled Bot")
        fetcher = make_fetcher({
            good.url: _json("192.0.2.0/24"),
            garbled.url: b"<html>not json</html>",
        })

        report = load_sources([down, good, garbled], fetcher=fetcher)

        assert [rs.source_name for rs in report.range_sets] == ["Good Bot"]
        assert [f.source_name for f in report.failures] == ["Down Bot", "Garbled Bot"]
        assert isinstance(report.failures[0].error, SourceFetchError)
        assert isinstance(report.failures[1].error, SourceParseError)
        assert not report.ok

    def test_fetch_error_names_the_source(self, make_fetcher):
        down = _source("Down Bot")
        report = load_sources([down], fetcher=make_fetcher())
        error = report.failures[0].error
        assert error.source_name == "Down Bot"
        assert down.url in error.message

    def test_unsupported_format_is_not_fetched(self, make_fetcher):
        source = _source("Xml Bot", fmt="XML")
        fetcher = make_fetcher({source.url: b"<ranges/>"})

        report = load_sources([source], fetcher=fetcher)

        assert isinstance(report.failures[0].error, UnsupportedSourceFormat)
        assert fetcher.calls == []

    def test_results_follow_declaration_order(self, make_fetcher):
        slow = _source("Slow Bot")
        fast = _source("Fast Bot")
        fetcher = make_fetcher(
            {slow.url: _json("192.0.2.0/24"), fast.url: _json("198.51.100.0/24")},
            delays={slow.url: 0.05},
        )

        report = load_sources([slow, fast], fetcher=fetcher)

        assert [rs.source_name for rs in report.range_sets] == ["Slow Bot", "Fast Bot"]

    def test_timeout_is_a_fetch_error(self, make_fetcher):
        stuck = _source("Stuck Bot")
        quick = _source("Quick Bot")
        fetcher = make_fetcher(
            {stuck.url: _json("192.0.2.0/24"), quick.url: _json("198.51.100.0/24")},
            delays={stuck.url: 2.0},
        )

        report = load_sources([stuck, quick], fetcher=fetcher, timeout=0.05)

        assert [rs.source_name for rs in report.range_sets] == ["Quick Bot"]
        assert isinstance(report.failures[0].error, SourceFetchError)
        assert "within" in report.failures[0].message

    def test_unexpected_fetcher_error_is_contained(self, make_fetcher):
        broken = _source("Broken Bot")
        good = _source("Good Bot")
        fetcher = make_fetcher({
            broken.url: RuntimeError("fetcher bug"),
            good.url: _json("192.0.2.0/24"),
        })

        report = load_sources([broken, good], fetcher=fetcher)

        assert [rs.source_name for rs in report.range_sets] == ["Good Bot"]
        assert report.failures[0].source_name == "Broken Bot"
        assert isinstance(report.failures[0].error, SourceFetchError)
        assert "fetcher bug" in report.failures[0].message

    @pytest.mark.parametrize("url", [
        "http://a:notaport/x",
        "https://[::1",
        "ranges\x00.json",
    ])
    def test_malformed_location_fails_only_that_source(self, tmp_path, url):
        ranges = tmp_path / "ranges.txt"
        ranges.write_text("198.51.100.0/24\n")
        bad = CrawlerSource(name="Typo Bot", url=url, description="Typo", format="JSON")
        good = CrawlerSource(name="Good Bot", url=str(ranges), description="Good", format="Text")

        report = load_sources([bad, good])

        assert [rs.source_name for rs in report.range_sets] == ["Good Bot"]
        assert report.failures[0].source_name == "Typo Bot"
        assert isinstance(report.failures[0].error, SourceFetchError)


class TestBuiltinLoading:
    def test_builtins_use_bundled_data(self, make_fetcher):
        fetcher = make_fetcher()
        report = SourceLoader(fetcher=fetcher).load(BUILTIN_SOURCES)

        assert report.ok
        assert len(report.range_sets) == len(BUILTIN_SOURCES)
        assert fetcher.calls == []

    def test_live_builtins_are_fetched(self, make_fetcher):
        googlebot = BUILTIN_SOURCES[0]
        fetcher = make_fetcher({
            googlebot.url: json.dumps({"prefixes": [{"ipv4Prefix": "66.249.64.0/19"}]}).encode(),
        })

        report = SourceLoader(fetcher=fetcher, live=True).load([googlebot])

        assert fetcher.calls == [googlebot.url]
        assert [str(b) for b in report.range_sets[0].ranges] == ["66.249.64.0/19"]

    def test_live_failure_is_reported(self, make_fetcher):
        report = SourceLoader(fetcher=make_fetcher(), live=True).load(BUILTIN_SOURCES[:2])
        assert report.range_sets == []
        assert len(report.failures) == 2
