"""Embedding API client - batched, rate limited."""

import asyncio
import time

from loguru import logger
from pydantic import ValidationError

from llm_client.base import BaseClient, ProviderError
from llm_client.embeddings.schemas import EmbeddingResponse
from settings import (
    EMBEDDING_BATCH_SIZE,
    EMBEDDING_MAX_RETRIES,
    EMBEDDING_MIN_INTERVAL,
    EMBEDDING_MODEL,
    VECTOR_DIMENSIONS,
)


class EmbeddingClient(BaseClient):
    """Client for the /embeddings endpoint.

    Calls are spaced at least ``min_interval`` seconds apart across all
    callers of this instance; inputs larger than ``batch_size`` are split.
    """

    def __init__(
        self,
        model: str = EMBEDDING_MODEL,
        dimensions: int = VECTOR_DIMENSIONS,
        batch_size: int = EMBEDDING_BATCH_SIZE,
        min_interval: float = EMBEDDING_MIN_INTERVAL,
        max_retries: int = EMBEDDING_MAX_RETRIES,
        **kwargs,
    ):
        super().__init__(max_attempts=max_retries + 1, **kwargs)
        self._model = model
        self._dimensions = dimensions
        self._batch_size = batch_size
        self._min_interval = min_interval
        self._lock = asyncio.Lock()
        self._last_request: float | None = None

    @property
    def dimensions(self) -> int:
        return self._dimensions

    async def _throttle(self) -> None:
        async with self._lock:
            if self._last_request is not None:
                wait = self._min_interval - (time.monotonic() - self._last_request)
                if wait > 0:
                    logger.debug("Embedding rate limit: waiting {:.2f}s", wait)
                    await asyncio.sleep(wait)
            self._last_request = time.monotonic()

    async def embed(self, texts: list[str]) -> list[list[float]]:
        """POST /embeddings - vectors in input order."""
        if not texts:
            return []

        vectors: list[list[float]] = []
        for start in range(0, len(texts), self._batch_size):
            batch = texts[start : start + self._batch_size]
            await self._throttle()
            data = await self._post(
                "embeddings",
                {"model": self._model, "input": batch, "encoding_format": "float"},
            )
            try:
                parsed = EmbeddingResponse.model_validate(data)
            except ValidationError as e:
                raise ProviderError(f"Malformed embedding response: {e}") from e

            # Provider order is not guaranteed
            items = sorted(parsed.data, key=lambda item: item.index)
            if len(items) != len(batch):
                raise ProviderError(f"Expected {len(batch)} embeddings, got {len(items)}")
            for item in items:
                if len(item.embedding) != self._dimensions:
                    raise ProviderError(f"Expected dimension {self._dimensions}, got {len(item.embedding)}")
            vectors.extend(item.embedding for item in items)

        logger.debug("Embedded {} texts in {} batch(es)", len(texts), -(-len(texts) // self._batch_size))
        return vectors

    async def embed_one(self, text: str) -> list[float]:
        """Embed a single text."""
        return (await self.embed([text]))[0]
