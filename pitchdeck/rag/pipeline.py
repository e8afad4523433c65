"""Extraction pipeline for one pitch-deck document.

Orchestrates:
- Text normalization
- Chunking
- Embedding generation (degrades per chunk)
- Retrieval (vector or keyword)
- Prompt building and generation
- Response parsing and record validation

Generation and parsing failures never fail the run: the record is filled
with sentinels and the result carries ``confidence="low"`` plus guidance.
"""
import asyncio
import time
import uuid
from typing import List, Optional, Tuple

import structlog

from pitchdeck import config
from pitchdeck.errors import (
    CapabilityError,
    CapabilityPermissionDenied,
    CapabilityQuotaExceeded,
    EmptyResponse,
    GenerationUnavailable,
    ModelNotFound,
    PipelineTimeout,
    UnparseableResponse,
)
from pitchdeck.llm_client import EmbeddingCapability, GenerationCapability
from pitchdeck.rag.chunker import TextChunker
from pitchdeck.rag.embeddings import EmbeddingProvider
from pitchdeck.rag.generation import GenerationClient
from pitchdeck.rag.models import PipelineResult
from pitchdeck.rag.normalizer import normalize_text
from pitchdeck.rag.prompt_builder import build_prompt
from pitchdeck.rag.response_parser import extract_fields
from pitchdeck.rag.retriever import VECTOR_MODE, Retriever
from pitchdeck.rag.validator import complete_fields

logger = structlog.get_logger()

SAMPLE_TEXT_CHARS = 300


def describe_ai_error(error: Exception) -> Tuple[str, List[str]]:
    """Human-readable aiError message and next steps for a failure."""
    if isinstance(error, CapabilityPermissionDenied):
        return (
            "Gemini API permissions required - check the API key and model access",
            [
                "Set GEMINI_API_KEY to a key with Generative Language API access",
                "Confirm the key is allowed to call the configured model",
                "Retry analysis to enable AI features",
            ],
        )
    if isinstance(error, CapabilityQuotaExceeded):
        return (
            "Gemini API quota exceeded - check billing",
            [
                "Check quota and billing for the Gemini API project",
                "Retry analysis after the quota window resets",
            ],
        )
    if isinstance(error, ModelNotFound):
        return (
            "Model access required - the configured Gemini model is not available",
            [
                f"Check that CHAT_MODEL ({config.CHAT_MODEL}) names an enabled model",
                "Retry analysis to enable AI features",
            ],
        )
    if isinstance(error, GenerationUnavailable):
        return (
            f"AI service unavailable: {error}",
            ["Retry analysis in a few minutes"],
        )
    if isinstance(error, EmptyResponse):
        return (str(error), ["Retry analysis; the model returned no content"])
    if isinstance(error, UnparseableResponse):
        return (str(error), ["Retry analysis; the model returned malformed output"])
    return (str(error) or type(error).__name__, ["Retry analysis"])


class ExtractionPipeline:
    """Runs the document-to-record extraction for one document at a time.

    Capabilities are shared and read-only; everything else a run produces
    is local to that run.
    """

    def __init__(
        self,
        embedding_capability: EmbeddingCapability,
        generation_capability: GenerationCapability,
        chunk_size: int = None,
        top_k: int = None,
        min_text_length: int = None,
        max_context_chars: int = None,
        dimension: int = None,
        concurrency: int = None,
        max_attempts: int = None,
        backoff_base: float = None,
        timeout: float = None,
        model_name: str = None,
    ):
        self.chunker = TextChunker(chunk_size=chunk_size)
        self.embedder = EmbeddingProvider(
            embedding_capability,
            dimension=dimension,
            concurrency=concurrency,
            max_attempts=max_attempts,
            backoff_base=backoff_base,
        )
        self.retriever = Retriever(self.embedder, top_k=top_k)
        self.generator = GenerationClient(
            generation_capability,
            max_attempts=max_attempts,
            backoff_base=backoff_base,
        )
        self.min_text_length = min_text_length
        self.max_context_chars = max_context_chars
        self.timeout = config.PIPELINE_TIMEOUT if timeout is None else timeout
        if self.timeout <= 0:
            raise ValueError(f"Pipeline timeout must be positive (got {self.timeout})")
        self.model_name = model_name or getattr(
            generation_capability, "chat_model", config.CHAT_MODEL
        )

        logger.info(
            "extraction_pipeline_initialized",
            chunk_size=self.chunker.chunk_size,
            top_k=self.retriever.top_k,
            dimension=self.embedder.dimension,
            timeout=self.timeout,
            model=self.model_name,
        )

    async def run(self, text: str, document_id: Optional[str] = None) -> PipelineResult:
        """Extract a record from raw document text.

        Args:
            text: Raw extracted text of the document
            document_id: Optional caller-side identifier, echoed in the result

        Returns:
            PipelineResult (success is always True when this returns)

        Raises:
            InsufficientContent: Normalized text below the minimum length
            NoValidChunks: Nothing left to embed after chunking
            PipelineTimeout: Run exceeded the wall-clock budget
        """
        started = time.monotonic()
        logger.info("extraction_started", document_id=document_id, raw_length=len(text or ""))

        try:
            async with asyncio.timeout(self.timeout):
                return await self._run(text, document_id, started)
        except asyncio.TimeoutError:
            logger.error("extraction_timeout", document_id=document_id, timeout=self.timeout)
            raise PipelineTimeout(self.timeout) from None

    async def _run(self, text: str, document_id: Optional[str], started: float) -> PipelineResult:
        normalized = normalize_text(text, self.min_text_length)

        chunks = self.chunker.chunk_text(normalized)
        logger.debug("chunk_stats", **self.chunker.get_chunk_stats(chunks))

        embeddings = await self.embedder.embed([chunk.text for chunk in chunks])
        retrieval = await self.retriever.retrieve(chunks, embeddings)

        prompt = build_prompt(retrieval.chunks, len(normalized), self.max_context_chars)
        logger.info("prompt_built", prompt_length=len(prompt))

        raw_response = ""
        ai_error = None
        next_steps: List[str] = []
        try:
            raw_response = await self.generator.generate(prompt)
            fields = extract_fields(raw_response)
        except (CapabilityError, UnparseableResponse) as e:
            logger.error(
                "ai_processing_failed",
                error=str(e),
                error_type=type(e).__name__,
                document_id=document_id,
            )
            ai_error, next_steps = describe_ai_error(e)
            fields = {}

        record, missing = complete_fields(fields)
        ai_enabled = ai_error is None
        rag_used = retrieval.mode == VECTOR_MODE

        if not ai_enabled:
            confidence = "low"
            source = f"text-fallback-{retrieval.mode}"
            status = "Document processed, AI analysis unavailable"
        else:
            confidence = "high" if rag_used else "medium"
            source = f"{self.model_name}-{'rag' if rag_used else 'keyword'}"
            status = "AI-powered pitch deck analysis complete!"

        result = PipelineResult(
            data=record,
            extraction_id=f"ai-{int(time.time() * 1000)}-{uuid.uuid4().hex[:9]}",
            document_id=document_id,
            source=source,
            rag_used=rag_used,
            retrieval_mode=retrieval.mode,
            top_score=retrieval.top_score,
            chunk_count=len(chunks),
            retrieved_chunks=len(retrieval.chunks),
            degraded_embeddings=embeddings.degraded_count,
            confidence=confidence,
            ai_enabled=ai_enabled,
            ai_error=ai_error,
            status=status,
            next_steps=next_steps,
            missing_fields=missing,
            text_length=len(normalized),
            sample_text=normalized[:SAMPLE_TEXT_CHARS],
            ai_tokens=len(prompt) + len(raw_response) if ai_enabled else 0,
            processing_time=int((time.monotonic() - started) * 1000),
        )

        logger.info(
            "extraction_completed",
            document_id=document_id,
            extraction_id=result.extraction_id,
            company=record.company,
            confidence=confidence,
            retrieval_mode=retrieval.mode,
            processing_time_ms=result.processing_time,
        )

        return result
