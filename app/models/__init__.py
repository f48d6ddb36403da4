"""Models package - DDL and entities for all domains."""

from app.models.campaign import (
    CAMPAIGN_METRICS_COLUMNS,
    CAMPAIGN_METRICS_DDL,
    CAMPAIGN_METRICS_INDEXES,
    SUMMARY_DDL,
    SUMMARY_INDEXES,
    SummaryRow,
    TimeWindow,
)
from app.models.common import (
    CACHE_DDL,
    CHAT_MESSAGE_DDL,
    CHAT_MESSAGE_INDEXES,
    BaseEntity,
    CacheEntry,
    CachedPayload,
    ChatMessage,
    utcnow,
)
from app.models.query import (
    GeneratedQuery,
    Insight,
    InsightReport,
    Origin,
    Outcome,
    QueryParams,
    Timeframe,
)
from app.models.retrieval import EMBEDDING_DDL, EMBEDDING_INDEXES, EmbeddingRecord, EntityType, SearchHit

ALL_DDL = [
    # Campaign
    CAMPAIGN_METRICS_DDL,
    SUMMARY_DDL,
    # Retrieval
    EMBEDDING_DDL,
    # Common
    CACHE_DDL,
    CHAT_MESSAGE_DDL,
]

ALL_INDEXES = CAMPAIGN_METRICS_INDEXES + SUMMARY_INDEXES + EMBEDDING_INDEXES + CHAT_MESSAGE_INDEXES

__all__ = [
    # Common
    "BaseEntity",
    "utcnow",
    "CACHE_DDL",
    "CacheEntry",
    "CachedPayload",
    "CHAT_MESSAGE_DDL",
    "ChatMessage",
    # Campaign
    "CAMPAIGN_METRICS_DDL",
    "CAMPAIGN_METRICS_COLUMNS",
    "SUMMARY_DDL",
    "SummaryRow",
    "TimeWindow",
    # Retrieval
    "EMBEDDING_DDL",
    "EmbeddingRecord",
    "EntityType",
    "SearchHit",
    # Query
    "GeneratedQuery",
    "Insight",
    "InsightReport",
    "Origin",
    "Outcome",
    "QueryParams",
    "Timeframe",
    # All DDL
    "ALL_DDL",
    "ALL_INDEXES",
]
