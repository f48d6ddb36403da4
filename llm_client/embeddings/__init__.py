"""Embedding API."""

from llm_client.embeddings.client import EmbeddingClient
from llm_client.embeddings.schemas import EmbeddingItem, EmbeddingResponse

__all__ = [
    "EmbeddingClient",
    "EmbeddingItem",
    "EmbeddingResponse",
]
