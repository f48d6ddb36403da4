"""Retrieval - embedding search and indexing."""

from app.services.retrieval.indexer import Indexer, campaign_text, should_embed_message
from app.services.retrieval.retriever import RetrievalResult, Retriever

__all__ = [
    "Indexer",
    "Retriever",
    "RetrievalResult",
    "campaign_text",
    "should_embed_message",
]
