"""Shared retry policy for capability calls."""
import structlog
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from pitchdeck import config
from pitchdeck.errors import TransientCapabilityError

logger = structlog.get_logger()


def capability_retrying(
    operation: str,
    max_attempts: int = None,
    backoff_base: float = None,
    backoff_max: float = None,
) -> AsyncRetrying:
    """Build a tenacity retrier for one capability call.

    Only TransientCapabilityError (timeouts, 5xx, 429, malformed payloads) is
    retried; the last error is re-raised once attempts run out.
    """
    max_attempts = config.MAX_ATTEMPTS if max_attempts is None else max_attempts
    if max_attempts < 1:
        raise ValueError(f"Max attempts must be at least 1 (got {max_attempts})")
    backoff_base = config.BACKOFF_BASE_SECONDS if backoff_base is None else backoff_base
    backoff_max = config.BACKOFF_MAX_SECONDS if backoff_max is None else backoff_max

    return AsyncRetrying(
        retry=retry_if_exception_type(TransientCapabilityError),
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=backoff_base, max=backoff_max),
        before_sleep=lambda retry_state: logger.warning(
            "capability_retry",
            operation=operation,
            attempt=retry_state.attempt_number,
            max_attempts=max_attempts,
            error=str(retry_state.outcome.exception()),
        ),
        reraise=True,
    )
