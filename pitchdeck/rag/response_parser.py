"""Recover a JSON object from model output.

Parsing is a two-stage state machine: the whole text is tried first; if
that needs a fallback, the greedy ``{...}`` span is tried. Each stage
returns a tagged ParseResult instead of raising.
"""
import enum
import json
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

import structlog

from pitchdeck.errors import UnparseableResponse

logger = structlog.get_logger()

_CODE_FENCE = re.compile(r"```(?:json)?\s*(.*?)\s*```", re.DOTALL)
_OBJECT_SPAN = re.compile(r"\{.*\}", re.DOTALL)


class ParseStatus(enum.Enum):
    OK = "ok"
    NEEDS_FALLBACK = "needs_fallback"
    FAILED = "failed"


@dataclass(frozen=True)
class ParseResult:
    status: ParseStatus
    fields: Optional[Dict[str, Any]] = None
    stage: Optional[str] = None
    preview: str = ""

    @property
    def ok(self) -> bool:
        return self.status is ParseStatus.OK


def _decode_object(candidate: str) -> Optional[Dict[str, Any]]:
    try:
        value = json.loads(candidate)
    except (json.JSONDecodeError, ValueError):
        return None
    return value if isinstance(value, dict) else None


def parse_direct(text: str) -> ParseResult:
    """Stage 1: the entire text, minus any markdown code fence, is JSON."""
    fenced = _CODE_FENCE.search(text)
    candidate = fenced.group(1) if fenced else text
    fields = _decode_object(candidate.strip())
    if fields is None:
        return ParseResult(ParseStatus.NEEDS_FALLBACK)
    return ParseResult(ParseStatus.OK, fields=fields, stage="direct")


def parse_embedded(text: str) -> ParseResult:
    """Stage 2: first "{" through last "}" is JSON."""
    match = _OBJECT_SPAN.search(text)
    if match is None:
        return ParseResult(ParseStatus.FAILED, preview=text[: UnparseableResponse.PREVIEW_CHARS])
    fields = _decode_object(match.group(0))
    if fields is None:
        return ParseResult(ParseStatus.FAILED, preview=text[: UnparseableResponse.PREVIEW_CHARS])
    return ParseResult(ParseStatus.OK, fields=fields, stage="embedded")


def parse_response(text: str) -> ParseResult:
    """Run both parse stages; the result is OK or FAILED."""
    text = text or ""
    result = parse_direct(text)
    if result.status is ParseStatus.NEEDS_FALLBACK:
        logger.warning("direct_json_failed_trying_span", text_preview=text[:200])
        result = parse_embedded(text)

    if result.ok:
        logger.info("response_parsed", stage=result.stage, keys=sorted(result.fields))
    else:
        logger.error("response_unparseable", text_preview=result.preview[:200])
    return result


def extract_fields(text: str) -> Dict[str, Any]:
    """Parse model output into a loose field map.

    Raises:
        UnparseableResponse: If neither stage finds a JSON object
    """
    result = parse_response(text)
    if not result.ok:
        raise UnparseableResponse(text)
    return result.fields
