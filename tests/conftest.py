"""Shared fixtures: in-memory DuckDB, seeded metrics and fake providers."""

from datetime import date

import pytest
import pytest_asyncio

from app.models import EmbeddingRecord, EntityType, utcnow
from app.repositories import (
    CacheRepository,
    CampaignMetricsRepository,
    Database,
    EmbeddingRepository,
    MessageRepository,
    SummaryRepository,
)
from app.services.answer.pipeline import Pipeline
from app.services.campaign.summaries import SummaryStore
from app.services.query.cache import QueryCache
from app.services.retrieval.indexer import Indexer
from app.services.retrieval.retriever import Retriever
from app.services.sql.generator import QueryGenerator
from app.services.sql.ladder import FallbackLadder
from app.services.sql.validator import QueryExecutor, StatementValidator
from tests.fakes import CAMPAIGN_VECTOR, FakeEmbedder, FakeGeneration, metric_rows


@pytest.fixture
def db():
    database = Database(":memory:")
    database.connect()
    yield database
    database.close()


@pytest.fixture
def today() -> date:
    return utcnow().date()


@pytest.fixture
def repos(db):
    return {
        "metrics": CampaignMetricsRepository(db),
        "summary": SummaryRepository(db),
        "cache": CacheRepository(db),
        "embedding": EmbeddingRepository(db),
        "message": MessageRepository(db),
    }


@pytest_asyncio.fixture
async def seeded(repos, today):
    """Metrics for tenants t1 and t2, campaign embeddings for both."""
    for tenant_id in ("t1", "t2"):
        await repos["metrics"].insert_many(metric_rows(tenant_id, today))
        await repos["embedding"].replace(
            [
                EmbeddingRecord(
                    id=f"{tenant_id}-{cid}",
                    tenant_id=tenant_id,
                    entity_type=EntityType.CAMPAIGN.value,
                    source_id=cid,
                    vector=CAMPAIGN_VECTOR,
                    text=f"Campaign: {cid}",
                    created_at=utcnow(),
                )
                for cid in ("a1", "a2", "g1")
            ]
        )
    return repos


@pytest.fixture
def build_pipeline(db, repos):
    """Pipeline wired to the in-memory DB with separate SQL and response fakes."""

    def build(
        sql: FakeGeneration,
        response: FakeGeneration | None = None,
        embedder: FakeEmbedder | None = None,
        indexer: Indexer | None = None,
    ):
        response = response or FakeGeneration()
        embedder = embedder or FakeEmbedder()
        ladder = FallbackLadder(
            generator=QueryGenerator(sql),
            executor=QueryExecutor(StatementValidator(db), repos["metrics"]),
        )
        pipeline = Pipeline(
            generation=response,
            cache=QueryCache(repos["cache"]),
            summaries=SummaryStore(repos["summary"]),
            retriever=Retriever(embedder, repos["embedding"]),
            ladder=ladder,
            messages=repos["message"],
            indexer=indexer,
        )
        return pipeline

    return build
