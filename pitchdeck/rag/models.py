"""Data structures passed between pipeline stages."""
from dataclasses import dataclass, field
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

SENTINEL = "Not specified in document"

# Output field names, in prompt and response order
RECORD_FIELDS = (
    "company",
    "valueProposition",
    "marketSize",
    "traction",
    "team",
    "fundingAsk",
    "useOfFunds",
    "businessModel",
    "competitiveLandscape",
    "goToMarket",
)


@dataclass(frozen=True)
class Chunk:
    """A contiguous window of normalized document text."""

    index: int
    text: str


@dataclass(frozen=True)
class ScoredChunk:
    """A chunk with its retrieval score (cosine or keyword hits)."""

    chunk: Chunk
    score: float


@dataclass
class EmbeddingBatch:
    """Vectors for a batch of texts, one per input, in input order.

    ``degraded[i]`` is True when ``vectors[i]`` is a zero-vector placeholder
    rather than a real embedding.
    """

    vectors: List[List[float]]
    degraded: List[bool]

    @property
    def any_real_embedding(self) -> bool:
        return any(
            not flag and any(v != 0.0 for v in vector)
            for vector, flag in zip(self.vectors, self.degraded)
        )

    @property
    def degraded_count(self) -> int:
        return sum(self.degraded)


@dataclass
class RetrievalResult:
    """Top-k chunks plus how they were chosen."""

    chunks: List[Chunk]
    mode: str  # "vector" or "keyword"
    top_score: Optional[float] = None
    scored: List[ScoredChunk] = field(default_factory=list)


class ExtractionRecord(BaseModel):
    """The ten investment fields, always present and non-empty."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    company: str
    value_proposition: str
    market_size: str
    traction: str
    team: str
    funding_ask: str
    use_of_funds: str
    business_model: str
    competitive_landscape: str
    go_to_market: str


class PipelineResult(BaseModel):
    """Serialized outcome of one extraction run."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    success: bool = True
    data: ExtractionRecord
    extraction_id: str
    document_id: Optional[str] = None
    source: str
    rag_used: bool
    retrieval_mode: str
    top_score: Optional[float] = None
    chunk_count: int
    retrieved_chunks: int
    degraded_embeddings: int = 0
    confidence: str
    ai_enabled: bool
    ai_error: Optional[str] = None
    status: str
    next_steps: List[str] = Field(default_factory=list)
    missing_fields: List[str] = Field(default_factory=list)
    text_length: int
    sample_text: str
    ai_tokens: int = 0
    processing_time: int

    def to_response(self) -> dict:
        """JSON-ready dict with camelCase keys."""
        return self.model_dump(by_alias=True)
