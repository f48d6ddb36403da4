"""Indexer - embeds campaigns and chat messages for retrieval."""

import uuid
from collections.abc import Callable
from datetime import datetime
from typing import Any

from loguru import logger

from app.models import ChatMessage, EmbeddingRecord, EntityType, utcnow
from app.repositories import CampaignMetricsRepository, EmbeddingRepository
from llm_client import EmbeddingClient
from settings import MESSAGE_EMBEDDING_INTERVAL

# Every message up to this position is embedded
EMBED_FIRST_MESSAGES = 3


def campaign_text(profile: dict[str, Any]) -> str:
    """Text embedded for a campaign: name, platform and headline metrics."""
    impressions = int(profile.get("impressions") or 0)
    clicks = int(profile.get("clicks") or 0)
    cost = float(profile.get("cost") or 0)
    ctr = clicks / impressions * 100 if impressions else 0.0
    name = profile.get("campaign_name") or profile["campaign_id"]
    return (
        f"Campaign: {name}\n"
        f"Platform: {profile.get('platform', 'unknown')}\n"
        f"Key Metrics: Impressions: {impressions:,}, Clicks: {clicks:,}, CTR: {ctr:.2f}%, "
        f"Cost: ${cost:,.2f}, Conversions: {int(profile.get('conversions') or 0):,}"
    )


def message_text(message: ChatMessage) -> str:
    return f"{message.role}: {message.content}"


def should_embed_message(position: int, interval: int = MESSAGE_EMBEDDING_INTERVAL) -> bool:
    """Embed the first few messages, then every ``interval``-th (1-based position)."""
    return position <= EMBED_FIRST_MESSAGES or position % interval == 0


class Indexer:
    """Writes embedding records for campaigns and conversation messages."""

    def __init__(
        self,
        embedder: EmbeddingClient,
        embeddings: EmbeddingRepository,
        metrics: CampaignMetricsRepository,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._embedder = embedder
        self._embeddings = embeddings
        self._metrics = metrics
        self._clock = clock

    async def index_campaigns(self, tenant_id: str) -> int:
        """Embed every campaign of the tenant (batched by the client)."""
        profiles = await self._metrics.campaign_profiles(tenant_id)
        if not profiles:
            logger.info("No campaigns to index for {}", tenant_id)
            return 0

        texts = [campaign_text(p) for p in profiles]
        vectors = await self._embedder.embed(texts)
        now = self._clock()
        records = [
            EmbeddingRecord(
                id=uuid.uuid4().hex,
                tenant_id=tenant_id,
                entity_type=EntityType.CAMPAIGN.value,
                source_id=p["campaign_id"],
                vector=vector,
                text=text,
                created_at=now,
                metadata={"platform": p.get("platform"), "campaign_name": p.get("campaign_name")},
            )
            for p, text, vector in zip(profiles, texts, vectors)
        ]
        await self._embeddings.replace(records)
        logger.info("Indexed {} campaigns for {}", len(records), tenant_id)
        return len(records)

    async def index_message(self, message: ChatMessage, position: int) -> bool:
        """Embed the message if its position is sampled. Returns True if stored."""
        if not should_embed_message(position):
            return False

        text = message_text(message)
        vector = await self._embedder.embed_one(text)
        record = EmbeddingRecord(
            id=uuid.uuid4().hex,
            tenant_id=message.tenant_id,
            entity_type=EntityType.CHAT_MESSAGE.value,
            source_id=message.id,
            vector=vector,
            text=text,
            created_at=self._clock(),
            metadata={"conversation_id": message.conversation_id, "role": message.role},
        )
        await self._embeddings.replace([record])
        logger.debug("Indexed message {} (position {})", message.id, position)
        return True
