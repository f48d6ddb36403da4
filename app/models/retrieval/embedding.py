"""Embedding store model - vectors for campaigns and chat messages."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from app.models.common import BaseEntity

EMBEDDING_DDL = """
CREATE TABLE IF NOT EXISTS embeddings (
    id VARCHAR PRIMARY KEY,
    tenant_id VARCHAR NOT NULL,
    entity_type VARCHAR NOT NULL,
    source_id VARCHAR NOT NULL,
    vector FLOAT[] NOT NULL,
    text VARCHAR,
    metadata JSON,
    created_at TIMESTAMP NOT NULL
)
"""

EMBEDDING_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_embeddings_owner ON embeddings(tenant_id, entity_type)",
]


class EntityType(str, Enum):
    CAMPAIGN = "campaign"
    CHAT_MESSAGE = "chat_message"


@dataclass
class EmbeddingRecord(BaseEntity):
    """Indexed entity. Never updated; re-indexing replaces the record."""

    id: str
    tenant_id: str
    entity_type: str
    source_id: str
    vector: list[float]
    text: str
    created_at: datetime
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class SearchHit(BaseEntity):
    """Ranked similarity search result."""

    record: EmbeddingRecord
    score: float
