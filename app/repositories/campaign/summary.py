"""Summary repository - precomputed campaign aggregates."""

from loguru import logger

from app.models import SummaryRow, TimeWindow, utcnow
from app.repositories.base import BaseRepository

_COLUMNS = [
    "tenant_id",
    "campaign_id",
    "campaign_name",
    "platform",
    "time_window",
    "total_impressions",
    "total_clicks",
    "total_cost",
    "total_conversions",
    "total_sales",
    "ctr",
    "roas",
    "period_start",
    "period_end",
]


class SummaryRepository(BaseRepository):
    """Repository for campaign_metrics_summary."""

    async def get(
        self, tenant_id: str, windows: list[TimeWindow], platforms: set[str] | None = None
    ) -> list[SummaryRow]:
        """Summary rows for the tenant in any of ``windows``."""
        if not windows:
            return []
        query = f"""
            SELECT {', '.join(_COLUMNS)} FROM campaign_metrics_summary
            WHERE tenant_id = ? AND time_window IN ({', '.join('?' for _ in windows)})
        """
        params: list = [tenant_id, *[w.value for w in windows]]
        if platforms:
            query += f" AND lower(platform) IN ({', '.join('?' for _ in platforms)})"
            params.extend(sorted(platforms))
        query += " ORDER BY time_window, total_clicks DESC, campaign_id"

        rows = await self.fetchall(query, params)
        result = [SummaryRow(**dict(zip(_COLUMNS, r))) for r in rows]
        logger.debug("Summary lookup tenant={} windows={}: {} rows", tenant_id, [w.value for w in windows], len(result))
        return result

    async def replace_for_tenant(self, tenant_id: str, rows: list[SummaryRow]) -> None:
        """Swap the tenant's summary set in one transaction."""
        statements: list[tuple[str, list | None]] = [
            ("DELETE FROM campaign_metrics_summary WHERE tenant_id = ?", [tenant_id]),
        ]
        if rows:
            refreshed = utcnow()
            statements.append(
                (
                    f"""
                    INSERT INTO campaign_metrics_summary ({', '.join(_COLUMNS)}, refreshed_at)
                    VALUES ({', '.join('?' for _ in _COLUMNS)}, ?)
                    """,
                    [[getattr(r, c) for c in _COLUMNS] + [refreshed] for r in rows],
                )
            )
        await self.transaction(statements)
        logger.info("Summaries replaced: tenant={}, rows={}", tenant_id, len(rows))
