"""Embedding retriever - semantic grounding for a question."""

from dataclasses import dataclass, field

import duckdb
import httpx
from loguru import logger
from tenacity import RetryError

from app.errors import RetrievalError
from app.models import EntityType, SearchHit
from app.repositories import EmbeddingRepository
from llm_client import EmbeddingClient, ProviderError
from settings import CAMPAIGN_MIN_SCORE, MESSAGE_MIN_SCORE, RETRIEVAL_MAX_HITS, RETRIEVAL_TOP_K


@dataclass
class RetrievalResult:
    campaigns: list[SearchHit] = field(default_factory=list)
    messages: list[SearchHit] = field(default_factory=list)

    @property
    def grounded(self) -> bool:
        """At least one campaign cleared the similarity threshold."""
        return bool(self.campaigns)

    @property
    def campaign_ids(self) -> list[str]:
        return [hit.record.source_id for hit in self.campaigns]


class Retriever:
    """Embeds the question and searches the tenant's campaigns and messages."""

    def __init__(
        self,
        embedder: EmbeddingClient,
        repo: EmbeddingRepository,
        top_k: int = RETRIEVAL_TOP_K,
        max_hits: int = RETRIEVAL_MAX_HITS,
        campaign_min_score: float = CAMPAIGN_MIN_SCORE,
        message_min_score: float = MESSAGE_MIN_SCORE,
    ):
        self._embedder = embedder
        self._repo = repo
        self._top_k = top_k
        self._max_hits = max_hits
        self._campaign_min_score = campaign_min_score
        self._message_min_score = message_min_score

    async def retrieve(self, tenant_id: str, question: str) -> RetrievalResult:
        try:
            vector = await self._embedder.embed_one(question)
        except (httpx.HTTPError, ProviderError, RetryError) as e:
            raise RetrievalError(f"Embedding failed: {e}") from e

        try:
            campaigns = await self._repo.search(
                vector, tenant_id, EntityType.CAMPAIGN.value, self._top_k, self._campaign_min_score
            )
            messages = await self._repo.search(
                vector, tenant_id, EntityType.CHAT_MESSAGE.value, self._top_k, self._message_min_score
            )
        except duckdb.Error as e:
            raise RetrievalError(f"Vector search failed: {e}") from e

        result = RetrievalResult(campaigns=campaigns[: self._max_hits], messages=messages[: self._max_hits])
        logger.info("Retrieved {} campaigns, {} messages", len(result.campaigns), len(result.messages))
        return result
