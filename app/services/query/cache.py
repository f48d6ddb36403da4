"""Query cache service - tenant-scoped answer reuse with TTL."""

import hashlib
from collections.abc import Callable
from datetime import datetime, timedelta

import duckdb
from loguru import logger

from app.errors import CacheError
from app.models import CacheEntry, CachedPayload, utcnow
from app.repositories import CacheRepository
from app.services.query.classifier import is_complex_question
from app.services.query.normalizer import normalize
from settings import CACHE_TTL_HOURS


def question_hash(tenant_id: str, normalized_question: str) -> str:
    """SHA-256 over tenant and question, so tenants never share a key."""
    return hashlib.sha256(f"{tenant_id}:{normalized_question}".encode()).hexdigest()


class QueryCache:
    """Caches slow-path payloads per (tenant, normalized question)."""

    def __init__(
        self,
        repo: CacheRepository,
        ttl: timedelta = timedelta(hours=CACHE_TTL_HOURS),
        clock: Callable[[], datetime] = utcnow,
    ):
        self._repo = repo
        self._ttl = ttl
        self._clock = clock

    async def get(self, tenant_id: str, question: str) -> CachedPayload | None:
        """Live payload for the question, or None. Complex questions always miss."""
        if is_complex_question(question):
            logger.debug("Cache bypassed for complex question")
            return None

        key = question_hash(tenant_id, normalize(question))
        try:
            entry = await self._repo.hit(tenant_id, key, self._clock())
        except duckdb.Error as e:
            raise CacheError(f"Cache lookup failed: {e}") from e
        return entry.payload if entry else None

    async def put(self, tenant_id: str, question: str, payload: CachedPayload, ttl: timedelta | None = None) -> None:
        """Upsert the payload; expires ``ttl`` from now."""
        if is_complex_question(question):
            return

        normalized = normalize(question)
        now = self._clock()
        entry = CacheEntry(
            tenant_id=tenant_id,
            question_hash=question_hash(tenant_id, normalized),
            normalized_question=normalized,
            payload=payload,
            created_at=now,
            expires_at=now + (ttl or self._ttl),
        )
        try:
            await self._repo.upsert(entry)
        except duckdb.Error as e:
            raise CacheError(f"Cache write failed: {e}") from e
