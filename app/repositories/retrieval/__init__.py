"""Retrieval repositories."""

from app.repositories.retrieval.embedding import EmbeddingRepository, cosine_scores

__all__ = [
    "EmbeddingRepository",
    "cosine_scores",
]
