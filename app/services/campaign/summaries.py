"""Summary store - precomputed aggregates as a fast path."""

import duckdb
from loguru import logger

from app.errors import SummaryError
from app.models import QueryParams, SummaryRow
from app.repositories import SummaryRepository
from app.services.query.classifier import detect_timeframes

# Question vocabulary -> stored platform name
PLATFORM_ALIASES = {"facebook": "meta"}


class SummaryStore:
    """Read side of campaign_metrics_summary."""

    def __init__(self, repo: SummaryRepository):
        self._repo = repo

    async def lookup(self, tenant_id: str, question: str, params: QueryParams) -> list[SummaryRow]:
        """Rows for the windows the question mentions (monthly by default)."""
        windows = detect_timeframes(question)
        platforms = {PLATFORM_ALIASES.get(p, p) for p in params.platforms}
        try:
            rows = await self._repo.get(tenant_id, windows, platforms or None)
        except duckdb.Error as e:
            raise SummaryError(f"Summary lookup failed: {e}") from e
        logger.debug("Summary store: {} rows for {}", len(rows), [w.value for w in windows])
        return rows
