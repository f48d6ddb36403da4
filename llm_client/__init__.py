"""LLM provider client package."""

from llm_client.base import BaseClient, ProviderError
from llm_client.embeddings import EmbeddingClient
from llm_client.generation import GenerationClient

__all__ = [
    # Base
    "BaseClient",
    "ProviderError",
    # Clients
    "EmbeddingClient",
    "GenerationClient",
]
