"""Indexer and message sampling against the embedding store."""

import pytest

from app.models import ChatMessage, EntityType, utcnow
from app.services.retrieval.indexer import Indexer, should_embed_message
from etl import index_all
from llm_client import ProviderError
from tests.fakes import FakeEmbedder, metric_rows


def message(id_, content="How are my campaigns doing?"):
    return ChatMessage(
        id=id_, conversation_id="c1", tenant_id="t1", role="user", content=content, created_at=utcnow()
    )


@pytest.mark.parametrize("position,expected", [(1, True), (3, True), (4, False), (7, True), (13, False), (14, True)])
def test_should_embed_message(position, expected):
    assert should_embed_message(position) is expected


class TestIndexer:
    @pytest.mark.asyncio
    async def test_index_campaigns_replaces(self, repos, today):
        await repos["metrics"].insert_many(metric_rows("t1", today))
        embedder = FakeEmbedder()
        indexer = Indexer(embedder, repos["embedding"], repos["metrics"])

        assert await indexer.index_campaigns("t1") == 3
        assert await indexer.index_campaigns("t1") == 3
        assert await repos["embedding"].count("t1", EntityType.CAMPAIGN.value) == 3
        assert embedder.calls[0][0].startswith("Campaign: Spring Sale")

    @pytest.mark.asyncio
    async def test_index_message_sampling(self, repos):
        indexer = Indexer(FakeEmbedder(), repos["embedding"], repos["metrics"])

        assert await indexer.index_message(message("m1"), 1) is True
        assert await indexer.index_message(message("m5"), 5) is False
        assert await repos["embedding"].count("t1", EntityType.CHAT_MESSAGE.value) == 1

    @pytest.mark.asyncio
    async def test_index_all_isolates_failures(self, repos, today):
        await repos["metrics"].insert_many(metric_rows("t1", today))
        indexer = Indexer(FakeEmbedder(error=ProviderError("down")), repos["embedding"], repos["metrics"])

        result = await index_all(indexer, repos["metrics"])

        assert result == {"indexed": {}, "failed": ["t1"]}
