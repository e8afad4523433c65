"""Per-document chunk retrieval.

Handles:
- Query embedding generation
- Cosine similarity ranking over an in-memory chunk set
- Keyword scoring when no real embeddings are available
"""
import re
from typing import List, Optional, Sequence

import numpy as np
import structlog

from pitchdeck import config
from pitchdeck.rag.embeddings import EmbeddingProvider
from pitchdeck.rag.models import Chunk, EmbeddingBatch, RetrievalResult, ScoredChunk

logger = structlog.get_logger()

VECTOR_MODE = "vector"
KEYWORD_MODE = "keyword"

DEFAULT_QUERY = (
    "company name, value proposition, market size, traction, customers, revenue, "
    "founding team, funding ask, use of funds, business model, competitors, "
    "go-to-market strategy"
)

KEYWORDS = (
    "company",
    "market",
    "traction",
    "team",
    "funding",
    "revenue",
    "customers",
    "growth",
    "business",
    "strategy",
    "competitive",
)


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity of two vectors; 0.0 when either norm is zero."""
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    norm = float(np.linalg.norm(va) * np.linalg.norm(vb))
    if norm == 0.0:
        return 0.0
    return float(np.dot(va, vb) / norm)


def keyword_score(text: str, keywords: Sequence[str] = KEYWORDS) -> int:
    """Number of distinct keywords present in text (case-insensitive)."""
    lowered = text.lower()
    return sum(1 for keyword in keywords if keyword in lowered)


def _top_k(scored: List[ScoredChunk], k: int) -> List[ScoredChunk]:
    # sorted() is stable, so equal scores keep document order
    return sorted(scored, key=lambda s: s.score, reverse=True)[:k]


class Retriever:
    """Ranks a document's chunks against an extraction query."""

    def __init__(
        self,
        provider: EmbeddingProvider,
        top_k: int = None,
        keywords: Sequence[str] = KEYWORDS,
    ):
        """Initialize the retriever.

        Args:
            provider: Embedding provider used for the query vector
            top_k: Number of chunks to return (default from config)
            keywords: Terms used by keyword-mode scoring
        """
        self.provider = provider
        self.top_k = config.RETRIEVAL_TOP_K if top_k is None else top_k
        if self.top_k < 1:
            raise ValueError(f"top_k must be at least 1 (got {self.top_k})")
        self.keywords = tuple(k.lower() for k in keywords)

    def rank_by_vector(
        self,
        chunks: Sequence[Chunk],
        vectors: Sequence[Sequence[float]],
        query_vector: Sequence[float],
        k: int,
    ) -> List[ScoredChunk]:
        scored = [
            ScoredChunk(chunk=chunk, score=cosine_similarity(query_vector, vector))
            for chunk, vector in zip(chunks, vectors)
        ]
        return _top_k(scored, k)

    def rank_by_keywords(self, chunks: Sequence[Chunk], k: int) -> List[ScoredChunk]:
        scored = [
            ScoredChunk(chunk=chunk, score=keyword_score(chunk.text, self.keywords))
            for chunk in chunks
        ]
        return _top_k(scored, k)

    async def retrieve(
        self,
        chunks: Sequence[Chunk],
        embeddings: EmbeddingBatch,
        query: str = DEFAULT_QUERY,
        top_k: Optional[int] = None,
    ) -> RetrievalResult:
        """Select the top-k chunks for a query.

        Vector mode is used when at least one chunk has a real embedding and
        the query itself embeds; otherwise chunks are scored by keywords.

        Args:
            chunks: Chunks in document order
            embeddings: One embedding per chunk, same order
            query: Query text to rank against
            top_k: Number of chunks to return (overrides default)

        Returns:
            RetrievalResult with at most min(top_k, len(chunks)) chunks
        """
        k = self.top_k if top_k is None else top_k
        if k < 1:
            raise ValueError(f"top_k must be at least 1 (got {k})")
        if len(embeddings.vectors) != len(chunks):
            raise ValueError(
                f"Got {len(embeddings.vectors)} embeddings for {len(chunks)} chunks"
            )

        mode = KEYWORD_MODE
        if embeddings.any_real_embedding:
            query_vector, degraded = await self.provider.embed_one(query)
            if degraded:
                logger.warning("query_embedding_degraded_using_keywords")
            else:
                mode = VECTOR_MODE

        if mode == VECTOR_MODE:
            scored = self.rank_by_vector(chunks, embeddings.vectors, query_vector, k)
        else:
            scored = self.rank_by_keywords(chunks, k)

        top_score = scored[0].score if scored else None

        logger.info(
            "retrieval_completed",
            mode=mode,
            candidates=len(chunks),
            results_returned=len(scored),
            top_score=top_score,
        )

        return RetrievalResult(
            chunks=[s.chunk for s in scored],
            mode=mode,
            top_score=top_score,
            scored=scored,
        )
