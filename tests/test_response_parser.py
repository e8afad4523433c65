"""Tests for tolerant response parsing."""
import pytest

from pitchdeck.errors import UnparseableResponse
from pitchdeck.rag.response_parser import (
    ParseStatus,
    extract_fields,
    parse_direct,
    parse_embedded,
    parse_response,
)


def test_plain_json_parses_directly():
    result = parse_response('{"company": "Acme", "team": "Two founders"}')
    assert result.status is ParseStatus.OK
    assert result.stage == "direct"
    assert result.fields["company"] == "Acme"


def test_json_wrapped_in_prose_uses_span_fallback():
    raw = 'Here is the result: {"company":"Acme","marketSize":"$4B"} Thanks!'
    assert parse_direct(raw).status is ParseStatus.NEEDS_FALLBACK

    result = parse_response(raw)
    assert result.ok
    assert result.stage == "embedded"
    assert result.fields == {"company": "Acme", "marketSize": "$4B"}


def test_markdown_code_fence_is_stripped():
    raw = '```json\n{"company": "Acme"}\n```'
    result = parse_response(raw)
    assert result.stage == "direct"
    assert result.fields == {"company": "Acme"}


def test_nested_objects_use_greedy_span():
    raw = 'Answer: {"company": "Acme", "team": {"ceo": "Ada"}} done'
    assert extract_fields(raw)["team"] == {"ceo": "Ada"}


def test_no_braces_fails_with_preview():
    raw = "I could not read the document. " * 20
    result = parse_embedded(raw)
    assert result.status is ParseStatus.FAILED
    with pytest.raises(UnparseableResponse) as exc_info:
        extract_fields(raw)
    assert len(exc_info.value.preview) == 300
    assert exc_info.value.preview == raw[:300]


def test_broken_json_span_fails():
    with pytest.raises(UnparseableResponse):
        extract_fields('Result: {"company": "Acme",, } trailing')


def test_json_array_is_not_a_record():
    assert parse_direct("[1, 2, 3]").status is ParseStatus.NEEDS_FALLBACK
    with pytest.raises(UnparseableResponse):
        extract_fields("[1, 2, 3]")
