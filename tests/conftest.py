"""Shared test fixtures for ipcheck."""

import asyncio
import json
import logging

import pytest

from ipcheck.config import Settings, set_settings
from ipcheck.errors import SourceFetchError


class FakeFetcher:
    """In-memory Fetcher.

    `payloads` maps URL to bytes or to an exception to raise. `delays`
    maps URL to seconds to wait before answering.
    """

    def __init__(self, payloads=None, delays=None):
        self.payloads = payloads or {}
        self.delays = delays or {}
        self.calls = []

    async def fetch(self, url: str) -> bytes:
        self.calls.append(url)
        delay = self.delays.get(url)
        if delay:
            await asyncio.sleep(delay)
        payload = self.payloads.get(url)
        if payload is None:
            raise SourceFetchError(url, f"Connection refused: {url}")
        if isinstance(payload, Exception):
            raise payload
        return payload


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Default settings and a clean working directory for every test."""
    monkeypatch.chdir(tmp_path)
    set_settings(Settings())
    yield
    set_settings(None)
    logger = logging.getLogger("ipcheck")
    logger.handlers.clear()
    logger.propagate = True


@pytest.fixture
def make_fetcher():
    """Factory for in-memory fetchers."""
    return FakeFetcher


@pytest.fixture
def write_sources(tmp_path):
    """Write an additional sources document and return its path."""

    def _write(entries, name="additional_crawler_sources.json"):
        path = tmp_path / name
        path.write_text(json.dumps(entries))
        return path

    return _write
