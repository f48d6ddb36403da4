"""Campaign metrics repository - raw daily performance data."""

from datetime import date, timedelta
from typing import Any

from loguru import logger

from app.models import SummaryRow, TimeWindow
from app.repositories.base import BaseRepository, rows_to_dicts

METRIC_COLUMNS = [
    "tenant_id",
    "platform",
    "campaign_id",
    "campaign_name",
    "date",
    "impressions",
    "clicks",
    "cost",
    "conversions",
    "sales",
]


class CampaignMetricsRepository(BaseRepository):
    """Repository for campaign_metrics reads and bulk loads."""

    async def insert_many(self, rows: list[dict[str, Any]]) -> int:
        """Load metric rows (used by imports and fixtures)."""
        if not rows:
            return 0
        placeholders = ", ".join("?" for _ in METRIC_COLUMNS)
        await self.transaction(
            [
                (
                    f"INSERT OR REPLACE INTO campaign_metrics ({', '.join(METRIC_COLUMNS)}) VALUES ({placeholders})",
                    [[r.get(c) for c in METRIC_COLUMNS] for r in rows],
                )
            ]
        )
        logger.debug("Loaded {} metric rows", len(rows))
        return len(rows)

    async def tenants(self) -> list[str]:
        """Tenants that have any metric data."""
        rows = await self.fetchall("SELECT DISTINCT tenant_id FROM campaign_metrics ORDER BY tenant_id")
        return [r[0] for r in rows]

    async def aggregate_window(self, tenant_id: str, window: TimeWindow, today: date) -> list[SummaryRow]:
        """Per-campaign totals for ``window`` ending ``today``."""
        start = today - timedelta(days=window.days)
        rows = await self.fetchall(
            """
            SELECT campaign_id, MAX(campaign_name), platform,
                   SUM(impressions), SUM(clicks), SUM(cost), SUM(conversions), SUM(sales)
            FROM campaign_metrics
            WHERE tenant_id = ? AND date >= ? AND date <= ?
            GROUP BY campaign_id, platform
            ORDER BY campaign_id, platform
            """,
            [tenant_id, start, today],
        )
        result = []
        for r in rows:
            impressions, clicks, cost = int(r[3] or 0), int(r[4] or 0), float(r[5] or 0)
            sales = float(r[7] or 0)
            result.append(
                SummaryRow(
                    tenant_id=tenant_id,
                    campaign_id=r[0],
                    campaign_name=r[1],
                    platform=r[2],
                    time_window=window.value,
                    total_impressions=impressions,
                    total_clicks=clicks,
                    total_cost=cost,
                    total_conversions=int(r[6] or 0),
                    total_sales=sales,
                    ctr=clicks / impressions if impressions else None,
                    roas=sales / cost if cost else None,
                    period_start=start,
                    period_end=today,
                )
            )
        logger.debug("aggregate_window({}, {}): {} campaigns", tenant_id, window.value, len(result))
        return result

    async def campaign_profiles(self, tenant_id: str) -> list[dict[str, Any]]:
        """All-time totals per campaign, the text source for campaign embeddings."""
        return await self.fetch_dicts(
            """
            SELECT campaign_id, MAX(campaign_name) AS campaign_name, platform,
                   SUM(impressions) AS impressions, SUM(clicks) AS clicks, SUM(cost) AS cost,
                   SUM(conversions) AS conversions, SUM(sales) AS sales
            FROM campaign_metrics
            WHERE tenant_id = ?
            GROUP BY campaign_id, platform
            ORDER BY campaign_id
            """,
            [tenant_id],
        )

    async def run_read(self, statement: str, params: list | None, max_rows: int) -> list[dict[str, Any]]:
        """Execute a validated read statement, keeping at most ``max_rows`` rows."""

        def work(cur):
            cur.execute(statement, params or [])
            return rows_to_dicts(cur, cur.fetchmany(max_rows))

        return await self._db.run(work)
