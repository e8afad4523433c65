"""Tests for document locator parsing."""
import pytest

from pitchdeck.errors import LocatorParseError
from pitchdeck.locator import (
    BUCKET_PATH,
    ENCODED_PATH,
    QUERY_PARAMETER,
    resolve_locator,
)


def test_bucket_path():
    locator = resolve_locator("gs://decks-bucket/users/u1/Acme%20Deck.pdf")
    assert locator.variant == BUCKET_PATH
    assert locator.bucket == "decks-bucket"
    assert locator.path == "users/u1/Acme Deck.pdf"


def test_bucket_path_for_wrong_bucket_is_rejected():
    with pytest.raises(LocatorParseError):
        resolve_locator("gs://other/users/deck.pdf", expected_bucket="decks-bucket")


def test_query_parameter():
    url = "https://storage.example.com/download?name=users%2Fu1%2Fdeck.pdf&alt=media"
    locator = resolve_locator(url)
    assert locator.variant == QUERY_PARAMETER
    assert locator.path == "users/u1/deck.pdf"


def test_encoded_path():
    url = (
        "https://firebasestorage.googleapis.com/v0/b/decks-bucket/o/"
        "users%2Fu1%2Fdeck.pdf?alt=media&token=abc"
    )
    locator = resolve_locator(url)
    assert locator.variant == ENCODED_PATH
    assert locator.bucket == "decks-bucket"
    assert locator.path == "users/u1/deck.pdf"


@pytest.mark.parametrize(
    "url",
    ["", "   ", "https://example.com/deck.pdf", "gs://bucket-only", "ftp://nothing/here"],
)
def test_unparseable_locators(url):
    with pytest.raises(LocatorParseError):
        resolve_locator(url)


def test_empty_path_is_rejected():
    with pytest.raises(LocatorParseError):
        resolve_locator("https://example.com/v0/b/x/o/%2F?alt=media")
