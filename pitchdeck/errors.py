"""Error taxonomy for the extraction pipeline.

Document-level errors (bad locator, too little text, no chunks) and the
pipeline timeout are hard failures surfaced to the caller. Capability and
parsing errors are caught at the pipeline boundary and turned into a
degraded, sentinel-filled result.
"""


class ExtractionError(Exception):
    """Base class for all extraction errors."""


# Document-level (hard) failures

class DocumentError(ExtractionError):
    """The document itself cannot be processed."""


class LocatorParseError(DocumentError):
    """A document locator could not be parsed into a storage path."""


class InsufficientContent(DocumentError):
    """Normalized text is shorter than the minimum usable length."""

    def __init__(self, length: int, minimum: int):
        self.length = length
        self.minimum = minimum
        super().__init__(
            f"Document too short for analysis ({length} chars, need {minimum})"
        )


class NoValidChunks(DocumentError):
    """Chunking produced no non-empty chunks."""


class PipelineTimeout(ExtractionError):
    """The pipeline did not finish within its wall-clock budget."""

    def __init__(self, timeout: float):
        self.timeout = timeout
        super().__init__(f"Processing timeout after {timeout}s")


# Capability failures

class CapabilityError(ExtractionError):
    """An external model capability call failed."""


class TransientCapabilityError(CapabilityError):
    """A failure worth retrying (timeouts, 5xx, malformed payloads)."""


class CapabilityQuotaExceeded(TransientCapabilityError):
    """The capability rejected the call for quota or rate limits."""


class CapabilityPermissionDenied(CapabilityError):
    """Credentials are missing or lack access to the model."""


class ModelNotFound(CapabilityError):
    """The configured model does not exist or is not enabled."""


class EmbeddingDegraded(CapabilityError):
    """A single text could not be embedded; a zero vector stands in."""


class GenerationUnavailable(CapabilityError):
    """Generation failed after exhausting retries."""


class EmptyResponse(CapabilityError):
    """Generation returned no usable text."""


class UnparseableResponse(ExtractionError):
    """Model output contains no decodable JSON object."""

    PREVIEW_CHARS = 300

    def __init__(self, raw_text: str):
        self.preview = (raw_text or "")[: self.PREVIEW_CHARS]
        super().__init__(f"Invalid AI response format: {self.preview}")
