"""Cleanup of raw text extracted from pitch-deck PDFs."""
import re

import structlog

from pitchdeck import config
from pitchdeck.errors import InsufficientContent

logger = structlog.get_logger()

_WHITESPACE = re.compile(r"\s+")
_PAGE_MARKER = re.compile(r"\bpage \d+\b", re.IGNORECASE)


def normalize_text(raw: str, min_length: int = None) -> str:
    """Collapse whitespace (blank lines included), drop "Page N" artifacts and trim.

    Args:
        raw: Raw extracted document text (may be empty)
        min_length: Minimum usable length (default from config)

    Returns:
        Normalized text

    Raises:
        InsufficientContent: If the normalized text is shorter than min_length
    """
    min_length = config.MIN_TEXT_LENGTH if min_length is None else min_length

    text = _WHITESPACE.sub(" ", raw or "")
    text = _PAGE_MARKER.sub("", text)
    # Removing a marker can leave a double space behind
    text = _WHITESPACE.sub(" ", text).strip()

    logger.info("text_normalized", raw_length=len(raw or ""), text_length=len(text))

    if len(text) < min_length:
        logger.warning("insufficient_content", text_length=len(text), minimum=min_length)
        raise InsufficientContent(len(text), min_length)

    return text
