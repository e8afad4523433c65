"""Document locator parsing.

A locator is one of a closed set of variants, tried in order:

- ``bucket-path``: ``gs://<bucket>/<path>``
- ``query-parameter``: any URL with a ``name=<path>`` parameter
- ``encoded-path``: a download URL with ``/o/<percent-encoded path>``

Unparseable locators are rejected before any pipeline work starts.
"""
import re
from dataclasses import dataclass
from typing import Callable, Optional, Tuple
from urllib.parse import unquote

import structlog

from pitchdeck import config
from pitchdeck.errors import LocatorParseError

logger = structlog.get_logger()

BUCKET_PATH = "bucket-path"
QUERY_PARAMETER = "query-parameter"
ENCODED_PATH = "encoded-path"

_GS_URL = re.compile(r"^gs://([^/]+)/(.+)$")
_NAME_PARAM = re.compile(r"[?&]name=([^&#]+)")
_ENCODED_PATH = re.compile(r"/o/([^?#]+)")
_BUCKET_SEGMENT = re.compile(r"/b/([^/]+)/o/")


@dataclass(frozen=True)
class StorageLocator:
    """A resolved storage location."""

    variant: str
    path: str
    bucket: Optional[str] = None

    def __post_init__(self):
        if not self.path.strip("/"):
            raise LocatorParseError(f"Locator resolved to an empty path ({self.variant})")


def parse_bucket_path(url: str, expected_bucket: Optional[str] = None) -> Optional[StorageLocator]:
    match = _GS_URL.match(url)
    if match is None:
        return None
    bucket, path = match.groups()
    if expected_bucket and bucket != expected_bucket:
        raise LocatorParseError(f"Invalid bucket in URL: {url}")
    return StorageLocator(BUCKET_PATH, unquote(path), bucket)


def parse_query_parameter(url: str, expected_bucket: Optional[str] = None) -> Optional[StorageLocator]:
    match = _NAME_PARAM.search(url)
    if match is None:
        return None
    bucket = _BUCKET_SEGMENT.search(url)
    return StorageLocator(
        QUERY_PARAMETER, unquote(match.group(1)), bucket.group(1) if bucket else None
    )


def parse_encoded_path(url: str, expected_bucket: Optional[str] = None) -> Optional[StorageLocator]:
    match = _ENCODED_PATH.search(url)
    if match is None:
        return None
    bucket = _BUCKET_SEGMENT.search(url)
    path = unquote(match.group(1).replace("%2F", "/").replace("%2f", "/"))
    return StorageLocator(ENCODED_PATH, path, bucket.group(1) if bucket else None)


_PARSERS: Tuple[Callable[..., Optional[StorageLocator]], ...] = (
    parse_bucket_path,
    parse_query_parameter,
    parse_encoded_path,
)


def resolve_locator(url: str, expected_bucket: Optional[str] = None) -> StorageLocator:
    """Resolve a document URL into a storage location.

    Args:
        url: Locator supplied by the caller
        expected_bucket: Reject gs:// locators for any other bucket
            (defaults to config.STORAGE_BUCKET)

    Raises:
        LocatorParseError: If no variant matches
    """
    if not url or not url.strip():
        raise LocatorParseError("Document locator is required")

    url = url.strip()
    expected_bucket = expected_bucket or config.STORAGE_BUCKET

    for parser in _PARSERS:
        locator = parser(url, expected_bucket)
        if locator is not None:
            logger.info("locator_resolved", variant=locator.variant, path=locator.path)
            return locator

    logger.warning("locator_unparseable", url=url[:200])
    raise LocatorParseError("Invalid document URL format - could not parse file path")
