"""Tests for vector and keyword retrieval."""
import math

import pytest

from conftest import DIMENSION, FakeEmbeddingCapability
from pitchdeck.rag.embeddings import EmbeddingProvider
from pitchdeck.rag.models import Chunk, EmbeddingBatch
from pitchdeck.rag.retriever import (
    KEYWORD_MODE,
    VECTOR_MODE,
    Retriever,
    cosine_similarity,
    keyword_score,
)


def unit(i: int) -> list:
    vector = [0.0] * DIMENSION
    vector[i] = 1.0
    return vector


def make_retriever(capability, top_k=3) -> Retriever:
    provider = EmbeddingProvider(capability, dimension=DIMENSION, backoff_base=0)
    return Retriever(provider, top_k=top_k)


def test_cosine_of_vector_with_itself_is_one():
    v = [0.3, -1.2, 4.0, 0.0]
    assert math.isclose(cosine_similarity(v, v), 1.0, rel_tol=1e-9)


def test_cosine_with_zero_vector_is_zero():
    assert cosine_similarity([1.0, 2.0], [0.0, 0.0]) == 0.0
    assert cosine_similarity([0.0, 0.0], [0.0, 0.0]) == 0.0


def test_cosine_of_opposite_vectors():
    assert math.isclose(cosine_similarity([1.0, 0.0], [-2.0, 0.0]), -1.0)


def test_keyword_score_counts_distinct_keywords():
    assert keyword_score("Market MARKET market growth") == 2
    assert keyword_score("nothing relevant here") == 0


@pytest.mark.asyncio
async def test_vector_mode_ranks_by_similarity():
    chunks = [Chunk(i, f"chunk {i}") for i in range(4)]
    query_vector = [1.0, 1.0] + [0.0] * (DIMENSION - 2)
    capability = FakeEmbeddingCapability(overrides={"query": query_vector})
    batch = EmbeddingBatch(
        vectors=[unit(5), unit(0), [0.0] * DIMENSION, [1.0, 1.0] + [0.0] * (DIMENSION - 2)],
        degraded=[False, False, True, False],
    )

    result = await make_retriever(capability).retrieve(chunks, batch, query="query")

    assert result.mode == VECTOR_MODE
    assert [c.index for c in result.chunks] == [3, 1, 0]
    assert math.isclose(result.top_score, 1.0)


@pytest.mark.asyncio
async def test_vector_mode_ties_keep_document_order():
    chunks = [Chunk(i, f"chunk {i}") for i in range(4)]
    capability = FakeEmbeddingCapability(overrides={"query": unit(0)})
    batch = EmbeddingBatch(vectors=[unit(0)] * 4, degraded=[False] * 4)

    result = await make_retriever(capability, top_k=4).retrieve(chunks, batch, query="query")
    assert [c.index for c in result.chunks] == [0, 1, 2, 3]


@pytest.mark.asyncio
async def test_keyword_mode_when_all_embeddings_degraded():
    chunks = [
        Chunk(0, "legal disclaimer"),
        Chunk(1, "our team and company"),
        Chunk(2, "market growth revenue customers"),
        Chunk(3, "company history"),
        Chunk(4, "funding"),
    ]
    capability = FakeEmbeddingCapability()
    batch = EmbeddingBatch(vectors=[[0.0] * DIMENSION] * 5, degraded=[True] * 5)

    result = await make_retriever(capability, top_k=3).retrieve(chunks, batch)

    assert result.mode == KEYWORD_MODE
    assert [c.index for c in result.chunks] == [2, 1, 3]
    assert result.top_score == 4
    # Keyword mode never embeds the query
    assert capability.calls == []


@pytest.mark.asyncio
async def test_returns_all_chunks_when_fewer_than_k():
    chunks = [Chunk(0, "team"), Chunk(1, "market")]
    batch = EmbeddingBatch(vectors=[[0.0] * DIMENSION] * 2, degraded=[True, True])

    result = await make_retriever(FakeEmbeddingCapability(), top_k=5).retrieve(chunks, batch)
    assert len(result.chunks) == 2


@pytest.mark.asyncio
async def test_degraded_query_embedding_falls_back_to_keywords():
    chunks = [Chunk(0, "intro"), Chunk(1, "team")]
    batch = EmbeddingBatch(vectors=[unit(0), unit(1)], degraded=[False, False])
    capability = FakeEmbeddingCapability(fail_when=lambda t: t == "query")

    result = await make_retriever(capability).retrieve(chunks, batch, query="query")

    assert result.mode == KEYWORD_MODE
    assert [c.index for c in result.chunks] == [1, 0]


@pytest.mark.asyncio
async def test_mismatched_embedding_count_is_rejected():
    batch = EmbeddingBatch(vectors=[unit(0)], degraded=[False])
    with pytest.raises(ValueError):
        await make_retriever(FakeEmbeddingCapability()).retrieve(
            [Chunk(0, "a"), Chunk(1, "b")], batch
        )


@pytest.mark.asyncio
async def test_explicit_zero_top_k_is_rejected():
    with pytest.raises(ValueError):
        make_retriever(FakeEmbeddingCapability(), top_k=0)

    batch = EmbeddingBatch(vectors=[unit(0)], degraded=[False])
    with pytest.raises(ValueError):
        await make_retriever(FakeEmbeddingCapability()).retrieve([Chunk(0, "a")], batch, top_k=0)
