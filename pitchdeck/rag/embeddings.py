"""Embedding generation with per-text graceful degradation.

A text that cannot be embedded gets a zero vector of the configured
dimension instead of failing the batch. Partial success is normal.
"""
import asyncio
from typing import List, Sequence

import structlog

from pitchdeck import config
from pitchdeck.errors import EmbeddingDegraded
from pitchdeck.llm_client import EmbeddingCapability
from pitchdeck.rag.models import EmbeddingBatch
from pitchdeck.retry import capability_retrying

logger = structlog.get_logger()


class EmbeddingProvider:
    """Embeds batches of texts through an embedding capability."""

    def __init__(
        self,
        capability: EmbeddingCapability,
        dimension: int = None,
        concurrency: int = None,
        max_attempts: int = None,
        backoff_base: float = None,
    ):
        """Initialize the provider.

        Args:
            capability: Object exposing ``async embed_content(text)``
            dimension: Expected vector dimension (default from config)
            concurrency: Max embedding calls in flight (default from config)
            max_attempts: Attempts per text before degrading
            backoff_base: Exponential backoff multiplier in seconds
        """
        self.capability = capability
        self.dimension = config.EMBEDDING_DIMENSION if dimension is None else dimension
        self.concurrency = config.EMBED_CONCURRENCY if concurrency is None else concurrency
        self.max_attempts = config.MAX_ATTEMPTS if max_attempts is None else max_attempts
        self.backoff_base = backoff_base

        if self.dimension < 1:
            raise ValueError(f"Embedding dimension must be at least 1 (got {self.dimension})")
        if self.concurrency < 1:
            raise ValueError(f"Concurrency must be at least 1 (got {self.concurrency})")
        if self.max_attempts < 1:
            raise ValueError(f"Max attempts must be at least 1 (got {self.max_attempts})")

    def zero_vector(self) -> List[float]:
        return [0.0] * self.dimension

    async def _embed_remote(self, text: str) -> List[float]:
        async for attempt in capability_retrying(
            "embed",
            max_attempts=self.max_attempts,
            backoff_base=self.backoff_base,
        ):
            with attempt:
                vector = await self.capability.embed_content(text)

        if len(vector) != self.dimension:
            raise EmbeddingDegraded(
                f"Embedding dimension mismatch: expected {self.dimension}, "
                f"got {len(vector)}"
            )
        return [float(v) for v in vector]

    async def embed_one(self, text: str) -> tuple[List[float], bool]:
        """Embed a single text.

        Returns:
            (vector, degraded) where degraded is True for a zero placeholder
        """
        try:
            return await self._embed_remote(text), False
        except Exception as e:
            # One bad text must never abort the batch
            logger.warning(
                "embedding_degraded",
                error=str(e),
                error_type=type(e).__name__,
                text_preview=text[:100],
            )
            return self.zero_vector(), True

    async def embed(self, texts: Sequence[str]) -> EmbeddingBatch:
        """Embed every text; output has the same length and order as input."""
        if not texts:
            return EmbeddingBatch(vectors=[], degraded=[])

        semaphore = asyncio.Semaphore(self.concurrency)

        async def bounded(text: str) -> tuple[List[float], bool]:
            async with semaphore:
                return await self.embed_one(text)

        results = await asyncio.gather(*(bounded(t) for t in texts))

        batch = EmbeddingBatch(
            vectors=[vector for vector, _ in results],
            degraded=[flag for _, flag in results],
        )

        logger.info(
            "embeddings_generated",
            count=len(texts),
            degraded=batch.degraded_count,
            any_real_embedding=batch.any_real_embedding,
        )

        return batch
