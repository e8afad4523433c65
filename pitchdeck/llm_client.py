"""Gemini REST client wrapper with error classification.

The client implements both model capabilities the pipeline consumes:
text generation (``generateContent``) and text embedding (``embedContent``).
It holds no per-request state, so one instance is built per process and
shared by every pipeline invocation.
"""
from typing import Any, Dict, List, Optional, Protocol

import httpx
import structlog

from pitchdeck import config
from pitchdeck.errors import (
    CapabilityError,
    CapabilityPermissionDenied,
    CapabilityQuotaExceeded,
    ModelNotFound,
    TransientCapabilityError,
)

logger = structlog.get_logger()


class GenerationCapability(Protocol):
    """Anything that can turn a prompt into a generateContent-shaped dict."""

    async def generate_content(self, prompt: str) -> Dict[str, Any]:
        ...


class EmbeddingCapability(Protocol):
    """Anything that can turn one text into a vector of floats."""

    async def embed_content(self, text: str) -> List[float]:
        ...


def classify_status(response: httpx.Response) -> None:
    """Raise the matching capability error for a non-2xx response."""
    status = response.status_code
    if status < 400:
        return

    detail = response.text[:200]
    if status in (401, 403):
        raise CapabilityPermissionDenied(f"permission denied ({status}): {detail}")
    if status == 404:
        raise ModelNotFound(f"model not found ({status}): {detail}")
    if status == 429:
        raise CapabilityQuotaExceeded(f"quota exceeded ({status}): {detail}")
    if status >= 500:
        raise TransientCapabilityError(f"server error ({status}): {detail}")
    raise CapabilityError(f"request rejected ({status}): {detail}")


class GeminiClient:
    """Async client for the Gemini generative language API."""

    def __init__(
        self,
        api_key: str = None,
        base_url: str = None,
        chat_model: str = None,
        embedding_model: str = None,
        embedding_dimension: int = None,
        timeout: float = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize Gemini client.

        Args:
            api_key: API key (defaults to config.GEMINI_API_KEY)
            base_url: API base URL (defaults to config.GEMINI_BASE_URL)
            chat_model: Generation model (defaults to config.CHAT_MODEL)
            embedding_model: Embedding model (defaults to config.EMBEDDING_MODEL)
            embedding_dimension: Requested output dimensionality
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.api_key = api_key if api_key is not None else config.GEMINI_API_KEY
        self.base_url = (base_url or config.GEMINI_BASE_URL).rstrip("/")
        self.chat_model = chat_model or config.CHAT_MODEL
        self.embedding_model = embedding_model or config.EMBEDDING_MODEL
        self.embedding_dimension = embedding_dimension or config.EMBEDDING_DIMENSION
        self.timeout = timeout or config.REQUEST_TIMEOUT
        self._transport = transport

    def _client(self, timeout: float = None) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout or self.timeout,
            headers={"x-goog-api-key": self.api_key},
            transport=self._transport,
        )

    async def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        if not self.api_key:
            raise CapabilityPermissionDenied("GEMINI_API_KEY is not configured")

        try:
            async with self._client() as client:
                response = await client.post(path, json=payload)
        except httpx.TimeoutException as e:
            logger.warning("gemini_timeout", path=path, error=str(e))
            raise TransientCapabilityError(f"timeout calling {path}: {e}") from e
        except httpx.TransportError as e:
            logger.warning("gemini_connection_error", path=path, error=str(e))
            raise TransientCapabilityError(f"connection error calling {path}: {e}") from e
        except httpx.HTTPError as e:
            logger.warning("gemini_http_error", path=path, error=str(e))
            raise TransientCapabilityError(f"HTTP error calling {path}: {e}") from e

        classify_status(response)

        try:
            data = response.json()
        except ValueError as e:
            raise TransientCapabilityError(f"malformed JSON from {path}") from e

        if not isinstance(data, dict):
            logger.warning("gemini_malformed_payload", path=path, payload_type=type(data).__name__)
            raise TransientCapabilityError(f"malformed JSON from {path}: expected an object")
        return data

    async def generate_content(
        self,
        prompt: str,
        model: str = None,
        temperature: Optional[float] = None,
    ) -> Dict[str, Any]:
        """Send a generateContent request.

        Args:
            prompt: Full prompt text
            model: Model to use (defaults to self.chat_model)
            temperature: Sampling temperature

        Returns:
            Response dict with ``candidates[].content.parts[].text``

        Raises:
            CapabilityError: Classified failure (see classify_status)
        """
        model = model or self.chat_model
        payload = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": (
                    temperature
                    if temperature is not None
                    else config.GENERATION_TEMPERATURE
                ),
                "maxOutputTokens": config.MAX_OUTPUT_TOKENS,
                "responseMimeType": "application/json",
            },
        }

        logger.info("gemini_generate_request", model=model, prompt_length=len(prompt))
        data = await self._post(f"/models/{model}:generateContent", payload)
        candidates = data.get("candidates")
        logger.info(
            "gemini_generate_response",
            model=model,
            candidate_count=len(candidates) if isinstance(candidates, list) else 0,
        )
        return data

    async def embed_content(self, text: str, model: str = None) -> List[float]:
        """Generate an embedding for a single text.

        Args:
            text: Text to embed
            model: Model to use (defaults to self.embedding_model)

        Returns:
            Embedding vector

        Raises:
            CapabilityError: Classified failure, or a transient error when the
                response carries no vector
        """
        model = model or self.embedding_model
        payload = {
            "model": f"models/{model}",
            "content": {"parts": [{"text": text}]},
            "outputDimensionality": self.embedding_dimension,
        }

        logger.debug("gemini_embedding_request", model=model, text_length=len(text))
        data = await self._post(f"/models/{model}:embedContent", payload)

        embedding = data.get("embedding")
        values = embedding.get("values") if isinstance(embedding, dict) else None
        if not isinstance(values, list) or not values:
            raise TransientCapabilityError("Empty embedding returned")

        logger.debug("gemini_embedding_response", model=model, dimension=len(values))
        return values

    async def list_models(self) -> List[str]:
        """List model names visible to the configured key.

        Raises:
            CapabilityError: On API errors
        """
        try:
            async with self._client(timeout=5.0) as client:
                response = await client.get("/models")
        except httpx.HTTPError as e:
            logger.error("gemini_list_models_error", error=str(e))
            raise TransientCapabilityError(f"cannot reach Gemini API: {e}") from e

        classify_status(response)
        try:
            data = response.json()
        except ValueError as e:
            raise TransientCapabilityError("malformed JSON from /models") from e

        models = data.get("models") if isinstance(data, dict) else None
        return [
            m["name"].removeprefix("models/")
            for m in models or []
            if isinstance(m, dict) and isinstance(m.get("name"), str)
        ]
