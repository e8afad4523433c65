"""Fixed-size text chunking for the RAG pipeline.

Implements character-based chunking to avoid tokenizer dependencies.
Windows are contiguous and non-overlapping, so joining every window in
order gives back the input exactly.
"""
from typing import List

import structlog

from pitchdeck import config
from pitchdeck.errors import NoValidChunks
from pitchdeck.rag.models import Chunk

logger = structlog.get_logger()


def split_windows(text: str, chunk_size: int) -> List[str]:
    """Partition text into consecutive windows of at most chunk_size chars."""
    if chunk_size < 1:
        raise ValueError(f"Chunk size must be at least 1 (got {chunk_size})")
    return [text[start : start + chunk_size] for start in range(0, len(text), chunk_size)]


class TextChunker:
    """Character-based text chunker without overlap."""

    def __init__(self, chunk_size: int = None):
        """Initialize the text chunker.

        Args:
            chunk_size: Size of each chunk in characters (default from config)
        """
        self.chunk_size = config.CHUNK_SIZE if chunk_size is None else chunk_size

        if self.chunk_size < 1:
            raise ValueError(f"Chunk size must be at least 1 (got {self.chunk_size})")

    def chunk_text(self, text: str) -> List[Chunk]:
        """Split text into ordered chunks, dropping whitespace-only windows.

        Args:
            text: Normalized text to chunk

        Returns:
            List of Chunk objects; ``index`` is the window position

        Raises:
            NoValidChunks: If no window has non-whitespace content
        """
        windows = split_windows(text or "", self.chunk_size)
        chunks = [
            Chunk(index=i, text=window)
            for i, window in enumerate(windows)
            if window.strip()
        ]

        if not chunks:
            logger.warning("no_valid_chunks", text_length=len(text or ""))
            raise NoValidChunks("Chunking produced no non-empty chunks")

        logger.info(
            "text_chunked",
            text_length=len(text),
            chunk_size=self.chunk_size,
            chunk_count=len(chunks),
            dropped=len(windows) - len(chunks),
        )

        return chunks

    def get_chunk_stats(self, chunks: List[Chunk]) -> dict:
        """Get statistics about a set of chunks."""
        if not chunks:
            return {
                "chunk_count": 0,
                "total_chars": 0,
                "avg_chunk_size": 0,
                "min_chunk_size": 0,
                "max_chunk_size": 0,
            }

        chunk_sizes = [len(c.text) for c in chunks]

        return {
            "chunk_count": len(chunks),
            "total_chars": sum(chunk_sizes),
            "avg_chunk_size": sum(chunk_sizes) // len(chunks),
            "min_chunk_size": min(chunk_sizes),
            "max_chunk_size": max(chunk_sizes),
        }


def chunk_text(text: str, chunk_size: int = None) -> List[Chunk]:
    """Chunk text with a one-off chunker (convenience function)."""
    return TextChunker(chunk_size=chunk_size).chunk_text(text)
