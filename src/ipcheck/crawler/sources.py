"""
Built-in and user-configured crawler sources.

Built-in sources ship as JSON snapshots in ipcheck/data so that a crawler
check works offline. Additional sources are declared in a JSON document
(by default additional_crawler_sources.json in the working directory):

    [
      {
        "name": "Example Bot",
        "url": "https://example.com/bot-ips.json",
        "description": "Example crawler IP ranges",
        "format": "JSON"
      }
    ]
"""

import json
import logging
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import Any

from ipcheck.crawler.models import CrawlerSource, SourceFailure, SourceFormat
from ipcheck.errors import InvalidSourceDescriptor, SourceFetchError, SourceParseError


logger = logging.getLogger(__name__)

DATA_PACKAGE = "ipcheck.data"

REQUIRED_FIELDS = ("name", "url", "description", "format")

BUILTIN_SOURCES = [
    CrawlerSource(
        name="Googlebot IP Ranges",
        url="https://developers.google.com/search/apis/ipranges/googlebot.json",
        description="Common crawlers used for Google products such as Googlebot. "
                    "Always respect robots.txt rules for automatic crawls.",
        format=SourceFormat.JSON.value,
        resource="googlebot.json",
    ),
    CrawlerSource(
        name="Googlebot Special Crawlers IP Ranges",
        url="https://developers.google.com/static/search/apis/ipranges/special-crawlers.json",
        description="Crawlers that perform specific functions for Google products "
                    "where there is an agreement with the crawled site (e.g. AdsBot). "
                    "May or may not respect robots.txt rules.",
        format=SourceFormat.JSON.value,
        resource="special-crawlers.json",
    ),
    CrawlerSource(
        name="Googlebot User Triggered Fetchers IP Ranges",
        url="https://developers.google.com/static/search/apis/ipranges/user-triggered-fetchers.json",
        description="Tools and product functions where the end user triggers a fetch.",
        format=SourceFormat.JSON.value,
        resource="user-triggered-fetchers.json",
    ),
    CrawlerSource(
        name="Googlebot User Triggered Fetchers IP Ranges (Google)",
        url="https://developers.google.com/static/search/apis/ipranges/user-triggered-fetchers-google.json",
        description="Tools and product functions where the end user triggers a fetch "
                    "(Google owned ranges).",
        format=SourceFormat.JSON.value,
        resource="user-triggered-fetchers-google.json",
    ),
    CrawlerSource(
        name="Bingbot IP Ranges",
        url="https://www.bing.com/toolbox/bingbot.json",
        description="Microsoft Bing search engine crawler IP ranges",
        format=SourceFormat.JSON.value,
        resource="bingbot.json",
    ),
]

SAMPLE_SOURCES = [
    CrawlerSource(
        name="Example Bot",
        url="https://example.com/bot-ips.json",
        description="Example crawler IP ranges - customize this entry",
        format=SourceFormat.JSON.value,
    ),
    CrawlerSource(
        name="Another Bot",
        url="https://another-example.com/crawler-ranges.txt",
        description="Another example crawler - one CIDR per line",
        format=SourceFormat.TEXT.value,
    ),
]


@dataclass
class SourceConfig:
    """Additional sources read from the configuration document."""
    path: Path
    found: bool = False
    sources: list[CrawlerSource] = field(default_factory=list)
    failures: list[SourceFailure] = field(default_factory=list)


def read_bundled(source: CrawlerSource) -> bytes:
    """Read the bundled snapshot of a built-in source."""
    if source.resource is None:
        raise SourceFetchError(source.name, "No bundled data for this source")
    try:
        return resources.files(DATA_PACKAGE).joinpath(source.resource).read_bytes()
    except OSError as e:
        raise SourceFetchError(
            source.name, f"Cannot read bundled data {source.resource}: {e}"
        ) from e


def parse_descriptor(entry: Any, index: int) -> CrawlerSource:
    """Validate one configured source entry.

    Unknown extra fields are ignored. The format is not checked against
    the known formats here; an unknown format fails when loading.

    Raises:
        InvalidSourceDescriptor: if a required field is missing or empty
    """
    label = f"source #{index + 1}"
    if not isinstance(entry, dict):
        raise InvalidSourceDescriptor(label, f"Expected an object, got {type(entry).__name__}")

    name = entry.get("name")
    if isinstance(name, str) and name.strip():
        label = name

    missing = [
        key for key in REQUIRED_FIELDS
        if not isinstance(entry.get(key), str) or not entry[key].strip()
    ]
    if missing:
        raise InvalidSourceDescriptor(label, f"Missing required field(s): {', '.join(missing)}")

    fmt = SourceFormat.lookup(entry["format"])
    if fmt is None:
        logger.debug(f"Source {label} declares unknown format {entry['format']!r}")

    return CrawlerSource(
        name=entry["name"].strip(),
        url=entry["url"].strip(),
        description=entry["description"],
        format=fmt.value if fmt else entry["format"].strip(),
    )


def load_source_config(path: str | Path) -> SourceConfig:
    """Read additional sources from a JSON document.

    A missing file is not an error. A document that is not a JSON array
    is recorded as a single parse failure; invalid entries are recorded
    and skipped.
    """
    path = Path(path)
    config = SourceConfig(path=path)

    if not path.exists():
        logger.debug(f"No additional sources file at {path}")
        return config

    config.found = True
    label = f"config {path}"
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        config.failures.append(SourceFailure(label, SourceFetchError(label, str(e))))
        return config
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        config.failures.append(
            SourceFailure(label, SourceParseError(label, f"Invalid JSON: {e}"))
        )
        return config
    except RecursionError:
        config.failures.append(
            SourceFailure(label, SourceParseError(label, "Invalid JSON: nested too deeply"))
        )
        return config

    if not isinstance(data, list):
        config.failures.append(SourceFailure(
            label, SourceParseError(label, "Expected a JSON array of source objects")
        ))
        return config

    for index, entry in enumerate(data):
        try:
            config.sources.append(parse_descriptor(entry, index))
        except InvalidSourceDescriptor as e:
            logger.info(f"Skipping configured source: {e}")
            config.failures.append(SourceFailure(e.source_name, e))

    logger.debug(f"Loaded {len(config.sources)} additional sources from {path}")
    return config


def get_all_sources(config_path: str | Path) -> tuple[list[CrawlerSource], SourceConfig]:
    """Built-in sources followed by the configured ones."""
    config = load_source_config(config_path)
    return list(BUILTIN_SOURCES) + config.sources, config


def filter_sources(sources: list[CrawlerSource], name_filter: str) -> list[CrawlerSource]:
    """Case-insensitive substring match on source names."""
    needle = name_filter.lower()
    return [s for s in sources if needle in s.name.lower()]


def write_sample_config(path: str | Path, overwrite: bool = False) -> Path:
    """Write a sample additional-sources document.

    Raises:
        FileExistsError: if the file exists and overwrite is False
    """
    path = Path(path)
    if path.exists() and not overwrite:
        raise FileExistsError(f"{path} already exists")
    data = [source.to_dict() for source in SAMPLE_SOURCES]
    path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    return path
