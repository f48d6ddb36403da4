"""Query cache table - answers keyed by tenant and question hash."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from app.models.common.base import BaseEntity

CACHE_DDL = """
CREATE TABLE IF NOT EXISTS query_cache (
    tenant_id VARCHAR NOT NULL,
    question_hash VARCHAR NOT NULL,
    normalized_question VARCHAR NOT NULL,
    payload JSON NOT NULL,
    created_at TIMESTAMP NOT NULL,
    expires_at TIMESTAMP NOT NULL,
    hit_count INTEGER NOT NULL DEFAULT 0,
    PRIMARY KEY (tenant_id, question_hash)
)
"""


@dataclass
class CachedPayload(BaseEntity):
    """What a slow-path answer leaves behind for the next identical question."""

    rows: list[dict[str, Any]] = field(default_factory=list)
    query: str | None = None
    origin: str | None = None
    from_summary: bool = False
    fallback: bool = False
    campaign_ids: list[str] = field(default_factory=list)


@dataclass
class CacheEntry(BaseEntity):
    """One row of query_cache."""

    tenant_id: str
    question_hash: str
    normalized_question: str
    payload: CachedPayload
    created_at: datetime
    expires_at: datetime
    hit_count: int = 0
