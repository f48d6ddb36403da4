"""Retrieval models - embedding records and search hits."""

from app.models.retrieval.embedding import EMBEDDING_DDL, EMBEDDING_INDEXES, EmbeddingRecord, EntityType, SearchHit

__all__ = [
    "EMBEDDING_DDL",
    "EMBEDDING_INDEXES",
    "EmbeddingRecord",
    "EntityType",
    "SearchHit",
]
