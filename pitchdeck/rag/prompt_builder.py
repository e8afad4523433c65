"""Extraction prompt assembly."""
import json
from typing import Sequence

from pitchdeck import config
from pitchdeck.rag.models import SENTINEL, Chunk

CHUNK_SEPARATOR = "\n\n---\n\n"

FIELD_DESCRIPTIONS = {
    "company": "Company name or person's full name",
    "valueProposition": "Core value proposition or what they do in 1-2 sentences",
    "marketSize": "Market size, TAM/SAM/SOM if mentioned, or industry size estimate",
    "traction": "Key metrics: users, revenue, customers, growth, achievements",
    "team": "Key team members, founders, their experience and roles",
    "fundingAsk": "Investment amount requested and round type if mentioned",
    "useOfFunds": "How they plan to use the funding",
    "businessModel": "Revenue model, pricing strategy if mentioned",
    "competitiveLandscape": "Competitors or key differentiation if mentioned",
    "goToMarket": "Customer acquisition strategy or target market",
}

PROMPT_TEMPLATE = """You are an expert venture capital analyst extracting structured information from startup pitch decks and professional documents.

ANALYZE the document excerpts below and extract the following information as a VALID JSON object. Use "{sentinel}" for missing information.

{schema}

RULES:
- Be specific with numbers and metrics when available
- Use "{sentinel}" for missing information
- Keep descriptions concise but informative
- Return ONLY valid JSON - no explanations, no markdown, no additional text

DOCUMENT EXCERPTS ({document_length} characters in full document):
{context}

Respond with ONLY the JSON object above:"""


def schema_description() -> str:
    return json.dumps(FIELD_DESCRIPTIONS, indent=2)


def build_context(chunks: Sequence[Chunk], max_chars: int = None) -> str:
    """Join chunk texts with a separator, truncated to max_chars."""
    max_chars = config.MAX_CONTEXT_CHARS if max_chars is None else max_chars
    if max_chars < 1:
        raise ValueError(f"Context budget must be at least 1 character (got {max_chars})")
    joined = CHUNK_SEPARATOR.join(chunk.text.strip() for chunk in chunks)
    return joined[:max_chars]


def build_prompt(
    chunks: Sequence[Chunk],
    document_length: int,
    max_context_chars: int = None,
) -> str:
    """Build the extraction prompt from retrieved chunks.

    Args:
        chunks: Retrieved chunks, in retrieval order
        document_length: Character length of the whole normalized document
        max_context_chars: Budget for the joined excerpts (default from config)

    Returns:
        Prompt string; identical inputs give identical output
    """
    return PROMPT_TEMPLATE.format(
        sentinel=SENTINEL,
        schema=schema_description(),
        document_length=document_length,
        context=build_context(chunks, max_context_chars),
    )
