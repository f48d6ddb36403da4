"""Cache repository - query cache storage."""

import json
from datetime import datetime

from loguru import logger

from app.models import CacheEntry, CachedPayload
from app.repositories.base import BaseRepository

_COLUMNS = "tenant_id, question_hash, normalized_question, payload, created_at, expires_at, hit_count"


def _to_entry(row: tuple) -> CacheEntry:
    payload = json.loads(row[3]) if isinstance(row[3], str) else row[3]
    return CacheEntry(
        tenant_id=row[0],
        question_hash=row[1],
        normalized_question=row[2],
        payload=CachedPayload.from_dict(payload),
        created_at=row[4],
        expires_at=row[5],
        hit_count=row[6],
    )


class CacheRepository(BaseRepository):
    """Repository for query cache operations."""

    async def hit(self, tenant_id: str, question_hash: str, now: datetime) -> CacheEntry | None:
        """Return the live entry and count the hit, in one statement."""
        row = await self.fetchone(
            f"""
            UPDATE query_cache SET hit_count = hit_count + 1
            WHERE tenant_id = ? AND question_hash = ? AND expires_at >= ?
            RETURNING {_COLUMNS}
            """,
            [tenant_id, question_hash, now],
        )
        if row:
            logger.debug("Cache hit: tenant={}, hash={}", tenant_id, question_hash[:12])
            return _to_entry(row)
        return None

    async def upsert(self, entry: CacheEntry) -> None:
        """Insert or overwrite the entry for (tenant_id, question_hash)."""
        await self.execute(
            f"""
            INSERT INTO query_cache ({_COLUMNS})
            VALUES (?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT (tenant_id, question_hash) DO UPDATE SET
                payload = excluded.payload,
                expires_at = excluded.expires_at
            """,
            [
                entry.tenant_id,
                entry.question_hash,
                entry.normalized_question,
                json.dumps(entry.payload.to_dict(), default=str),
                entry.created_at,
                entry.expires_at,
                entry.hit_count,
            ],
        )
        logger.debug("Cache saved: tenant={}, hash={}", entry.tenant_id, entry.question_hash[:12])

    async def purge(self, created_before: datetime, now: datetime) -> int:
        """Delete entries older than ``created_before`` or already expired."""
        rows = await self.fetchall(
            "DELETE FROM query_cache WHERE created_at < ? OR expires_at < ? RETURNING question_hash",
            [created_before, now],
        )
        logger.info("Cache purged: {} entries", len(rows))
        return len(rows)

    async def count(self, tenant_id: str) -> int:
        row = await self.fetchone("SELECT COUNT(*) FROM query_cache WHERE tenant_id = ?", [tenant_id])
        return row[0]
