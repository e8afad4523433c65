"""Text generation with bounded retry."""
from typing import Any, Dict

import structlog

from pitchdeck import config
from pitchdeck.errors import (
    CapabilityQuotaExceeded,
    EmptyResponse,
    GenerationUnavailable,
    TransientCapabilityError,
)
from pitchdeck.llm_client import GenerationCapability
from pitchdeck.retry import capability_retrying

logger = structlog.get_logger()


def response_text(response: Dict[str, Any]) -> str:
    """Pull the first candidate's text out of a generateContent response.

    Raises:
        EmptyResponse: If there are no candidates, parts or text, or the
            response does not have the expected shape
    """
    if not isinstance(response, dict):
        raise EmptyResponse("Malformed AI response: expected an object")

    candidates = response.get("candidates") or []
    if not isinstance(candidates, list):
        raise EmptyResponse("Malformed AI response: candidates is not a list")
    if not candidates:
        raise EmptyResponse("No candidates returned from AI")

    candidate = candidates[0]
    if not isinstance(candidate, dict):
        raise EmptyResponse("Malformed AI response: candidate is not an object")

    content = candidate.get("content") or {}
    if not isinstance(content, dict):
        raise EmptyResponse("Malformed AI response: content is not an object")

    parts = content.get("parts") or []
    if not isinstance(parts, list):
        raise EmptyResponse("Malformed AI response: parts is not a list")
    if not parts:
        raise EmptyResponse("No content parts returned from AI")

    text = "".join(
        part["text"]
        for part in parts
        if isinstance(part, dict) and isinstance(part.get("text"), str)
    )
    if not text.strip():
        raise EmptyResponse("No text content returned from AI")
    return text


class GenerationClient:
    """Sends prompts to a generation capability and returns raw text."""

    def __init__(
        self,
        capability: GenerationCapability,
        max_attempts: int = None,
        backoff_base: float = None,
    ):
        self.capability = capability
        self.max_attempts = config.MAX_ATTEMPTS if max_attempts is None else max_attempts
        self.backoff_base = backoff_base

    async def generate(self, prompt: str) -> str:
        """Generate raw text for a prompt.

        Raises:
            GenerationUnavailable: Retries exhausted on transient failures
            CapabilityQuotaExceeded: Retries exhausted on quota errors
            CapabilityPermissionDenied: Credentials rejected (not retried)
            ModelNotFound: Model missing (not retried)
            EmptyResponse: Capability answered without usable text
        """
        try:
            async for attempt in capability_retrying(
                "generate",
                max_attempts=self.max_attempts,
                backoff_base=self.backoff_base,
            ):
                with attempt:
                    response = await self.capability.generate_content(prompt)
        except CapabilityQuotaExceeded:
            logger.error("generation_quota_exhausted", attempts=self.max_attempts)
            raise
        except TransientCapabilityError as e:
            logger.error(
                "generation_unavailable", attempts=self.max_attempts, error=str(e)
            )
            raise GenerationUnavailable(
                f"Generation failed after {self.max_attempts} attempts: {e}"
            ) from e

        text = response_text(response)
        logger.info("generation_completed", response_length=len(text))
        return text
