"""Pitch-deck field extraction over a per-document RAG pipeline."""
