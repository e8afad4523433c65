"""RAG (Retrieval-Augmented Generation) pipeline components.

This package contains modules for:
- Text normalization and chunking
- Embedding generation with per-chunk degradation
- Vector and keyword retrieval
- Prompt building and generation
- Response parsing and record validation
"""
