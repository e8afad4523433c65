"""Application configuration with sensible defaults."""
import os

# Gemini configuration
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "")
GEMINI_BASE_URL = os.getenv(
    "GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta"
)
CHAT_MODEL = os.getenv("CHAT_MODEL", "gemini-2.5-flash-lite")
EMBEDDING_MODEL = os.getenv("EMBEDDING_MODEL", "text-embedding-004")
EMBEDDING_DIMENSION = int(os.getenv("EMBEDDING_DIMENSION", "768"))
GENERATION_TEMPERATURE = float(os.getenv("GENERATION_TEMPERATURE", "0.1"))
MAX_OUTPUT_TOKENS = int(os.getenv("MAX_OUTPUT_TOKENS", "2048"))

# RAG parameters (character-based to avoid tokenizer inconsistencies)
MIN_TEXT_LENGTH = int(os.getenv("MIN_TEXT_LENGTH", "100"))
CHUNK_SIZE = int(os.getenv("CHUNK_SIZE", "300"))
RETRIEVAL_TOP_K = int(os.getenv("RETRIEVAL_TOP_K", "5"))
MAX_CONTEXT_CHARS = int(os.getenv("MAX_CONTEXT_CHARS", "8000"))

# Resilience
MAX_ATTEMPTS = int(os.getenv("MAX_ATTEMPTS", "3"))
BACKOFF_BASE_SECONDS = float(os.getenv("BACKOFF_BASE_SECONDS", "1.0"))
BACKOFF_MAX_SECONDS = float(os.getenv("BACKOFF_MAX_SECONDS", "10.0"))
EMBED_CONCURRENCY = int(os.getenv("EMBED_CONCURRENCY", "4"))
REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "30.0"))
PIPELINE_TIMEOUT = float(os.getenv("PIPELINE_TIMEOUT", "120.0"))

# Storage locators (None = accept any bucket)
STORAGE_BUCKET = os.getenv("STORAGE_BUCKET") or None

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
