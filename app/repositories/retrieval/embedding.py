"""Embedding repository - vector storage and cosine similarity search."""

import json

import numpy as np
from loguru import logger

from app.models import EmbeddingRecord, SearchHit
from app.repositories.base import BaseRepository

_COLUMNS = "id, tenant_id, entity_type, source_id, vector, text, metadata, created_at"


def _to_record(row: tuple) -> EmbeddingRecord:
    metadata = json.loads(row[6]) if isinstance(row[6], str) else (row[6] or {})
    return EmbeddingRecord(
        id=row[0],
        tenant_id=row[1],
        entity_type=row[2],
        source_id=row[3],
        vector=list(row[4]),
        text=row[5] or "",
        metadata=metadata,
        created_at=row[7],
    )


def cosine_scores(query: list[float], matrix: np.ndarray) -> np.ndarray:
    """Cosine similarity of ``query`` against each row; zero vectors score 0."""
    q = np.asarray(query, dtype=np.float64)
    q_norm = np.linalg.norm(q)
    row_norms = np.linalg.norm(matrix, axis=1)
    denom = row_norms * q_norm
    dots = matrix @ q
    return np.divide(dots, denom, out=np.zeros_like(dots), where=denom > 0)


class EmbeddingRepository(BaseRepository):
    """Repository for embedding records."""

    async def replace(self, records: list[EmbeddingRecord]) -> None:
        """Store records, dropping earlier records of the same sources first."""
        if not records:
            return
        statements: list[tuple[str, list | None]] = [
            (
                "DELETE FROM embeddings WHERE tenant_id = ? AND entity_type = ? AND source_id = ?",
                [[r.tenant_id, r.entity_type, r.source_id] for r in records],
            ),
            (
                f"INSERT INTO embeddings ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                [
                    [
                        r.id,
                        r.tenant_id,
                        r.entity_type,
                        r.source_id,
                        r.vector,
                        r.text,
                        json.dumps(r.metadata, default=str),
                        r.created_at,
                    ]
                    for r in records
                ],
            ),
        ]
        await self.transaction(statements)
        logger.debug("Stored {} embeddings", len(records))

    async def candidates(self, tenant_id: str, entity_type: str) -> list[EmbeddingRecord]:
        """All records of one type owned by the tenant."""
        if not tenant_id:
            raise ValueError("tenant_id is required for embedding lookups")
        rows = await self.fetchall(
            f"SELECT {_COLUMNS} FROM embeddings WHERE tenant_id = ? AND entity_type = ? ORDER BY created_at, id",
            [tenant_id, entity_type],
        )
        return [_to_record(r) for r in rows]

    async def search(
        self, vector: list[float], tenant_id: str, entity_type: str, top_k: int, min_score: float
    ) -> list[SearchHit]:
        """Top ``top_k`` records by cosine similarity, all scoring at least ``min_score``."""
        records = await self.candidates(tenant_id, entity_type)
        if not records or top_k <= 0:
            return []

        matrix = np.asarray([r.vector for r in records], dtype=np.float64)
        scores = cosine_scores(vector, matrix)
        order = np.argsort(-scores, kind="stable")[:top_k]
        hits = [SearchHit(record=records[i], score=float(scores[i])) for i in order if scores[i] >= min_score]
        logger.debug(
            "Vector search tenant={} type={}: {} candidates, {} hits >= {}",
            tenant_id,
            entity_type,
            len(records),
            len(hits),
            min_score,
        )
        return hits

    async def count(self, tenant_id: str, entity_type: str | None = None) -> int:
        if entity_type:
            row = await self.fetchone(
                "SELECT COUNT(*) FROM embeddings WHERE tenant_id = ? AND entity_type = ?", [tenant_id, entity_type]
            )
        else:
            row = await self.fetchone("SELECT COUNT(*) FROM embeddings WHERE tenant_id = ?", [tenant_id])
        return row[0]
