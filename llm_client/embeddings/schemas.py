"""Embedding API schemas."""

from pydantic import BaseModel


class EmbeddingItem(BaseModel):
    """One vector of a batch response; ``index`` is its position in the input."""

    index: int
    embedding: list[float]


class EmbeddingResponse(BaseModel):
    """POST /embeddings response."""

    data: list[EmbeddingItem]
    model: str = ""
