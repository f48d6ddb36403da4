"""Out-of-band maintenance: summary refresh and cache purge."""

from datetime import date, datetime, timedelta

import duckdb
from loguru import logger

from app.models import TimeWindow, utcnow
from app.repositories import CacheRepository, CampaignMetricsRepository, SummaryRepository
from settings import CACHE_PURGE_DAYS


async def refresh_summaries(
    metrics: CampaignMetricsRepository,
    summaries: SummaryRepository,
    tenant_id: str,
    today: date | None = None,
) -> int:
    """Recompute every window for one tenant and swap them in atomically."""
    today = today or utcnow().date()
    rows = []
    for window in TimeWindow:
        rows.extend(await metrics.aggregate_window(tenant_id, window, today))
    await summaries.replace_for_tenant(tenant_id, rows)
    return len(rows)


async def purge_cache(
    cache: CacheRepository,
    now: datetime | None = None,
    purge_days: int = CACHE_PURGE_DAYS,
) -> int:
    """Drop entries older than ``purge_days`` and entries already expired."""
    now = now or utcnow()
    return await cache.purge(created_before=now - timedelta(days=purge_days), now=now)


async def refresh_all(
    metrics: CampaignMetricsRepository,
    summaries: SummaryRepository,
    cache: CacheRepository,
    tenants: list[str] | None = None,
    today: date | None = None,
) -> dict:
    """Refresh summaries for each tenant (failures isolated), then purge the cache."""
    tenants = tenants if tenants is not None else await metrics.tenants()
    refreshed, failed = {}, []

    for tenant_id in tenants:
        try:
            refreshed[tenant_id] = await refresh_summaries(metrics, summaries, tenant_id, today)
        except duckdb.Error as e:
            logger.error("Failed to refresh summaries for {}: {}", tenant_id, e)
            failed.append(tenant_id)
            continue

    purged = await purge_cache(cache)
    logger.info("Maintenance complete: {} tenants refreshed, {} failed, {} cache entries purged",
                len(refreshed), len(failed), purged)
    return {"refreshed": refreshed, "failed": failed, "purged": purged}
