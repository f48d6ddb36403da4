"""Dependency Injection container - initialized at app startup."""

from loguru import logger

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
from llm_client import EmbeddingClient, GenerationClient
from settings import DB_PATH


class Container:
    """Application DI container - holds all singleton instances."""

    _instance = None
    _initialized = False

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    async def init(
        self,
        db_path: str = DB_PATH,
        embedding_client: EmbeddingClient | None = None,
        generation_client: GenerationClient | None = None,
    ) -> None:
        """Initialize all dependencies. Call once at app startup."""
        if self._initialized:
            return

        # Store
        self.db = Database(db_path)
        self.db.connect()

        # Provider clients (owned here, closed in close())
        self.embedding_client = embedding_client or EmbeddingClient()
        self.generation_client = generation_client or GenerationClient()
        await self.embedding_client.open()
        await self.generation_client.open()

        # Repositories
        self.metrics_repo = CampaignMetricsRepository(self.db)
        self.summary_repo = SummaryRepository(self.db)
        self.cache_repo = CacheRepository(self.db)
        self.embedding_repo = EmbeddingRepository(self.db)
        self.message_repo = MessageRepository(self.db)

        # Services (with injected repos and clients)
        self.indexer = Indexer(
            embedder=self.embedding_client,
            embeddings=self.embedding_repo,
            metrics=self.metrics_repo,
        )
        ladder = FallbackLadder(
            generator=QueryGenerator(self.generation_client),
            executor=QueryExecutor(StatementValidator(self.db), self.metrics_repo),
        )
        self.pipeline = Pipeline(
            generation=self.generation_client,
            cache=QueryCache(self.cache_repo),
            summaries=SummaryStore(self.summary_repo),
            retriever=Retriever(self.embedding_client, self.embedding_repo),
            ladder=ladder,
            messages=self.message_repo,
            indexer=self.indexer,
        )

        self._initialized = True
        logger.info("Container initialized (db={})", db_path)

    async def close(self) -> None:
        """Close provider clients and the database."""
        if not self._initialized:
            return
        await self.embedding_client.close()
        await self.generation_client.close()
        self.db.close()
        self._initialized = False
        logger.info("Container closed")


# Global container instance
container = Container()
