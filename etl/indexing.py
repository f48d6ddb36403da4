"""Campaign indexing for semantic retrieval."""

import httpx
from loguru import logger
from tenacity import RetryError

from app.repositories import CampaignMetricsRepository
from app.services.retrieval.indexer import Indexer
from llm_client import ProviderError


async def index_all(indexer: Indexer, metrics: CampaignMetricsRepository, tenants: list[str] | None = None) -> dict:
    """Embed campaigns for each tenant; a provider failure skips that tenant."""
    tenants = tenants if tenants is not None else await metrics.tenants()
    indexed, failed = {}, []

    for tenant_id in tenants:
        try:
            indexed[tenant_id] = await indexer.index_campaigns(tenant_id)
        except (httpx.HTTPError, ProviderError, RetryError) as e:
            logger.error("Failed to index campaigns for {}: {}", tenant_id, e)
            failed.append(tenant_id)
            continue

    logger.info("Indexing complete: {} campaigns over {} tenants", sum(indexed.values()), len(indexed))
    return {"indexed": indexed, "failed": failed}
