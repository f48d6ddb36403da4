"""Campaign metrics model - daily performance per campaign."""

CAMPAIGN_METRICS_DDL = """
CREATE TABLE IF NOT EXISTS campaign_metrics (
    tenant_id VARCHAR NOT NULL,
    platform VARCHAR NOT NULL,
    campaign_id VARCHAR NOT NULL,
    campaign_name VARCHAR,
    date DATE NOT NULL,
    impressions BIGINT DEFAULT 0,
    clicks BIGINT DEFAULT 0,
    cost DOUBLE DEFAULT 0,
    conversions BIGINT DEFAULT 0,
    sales DOUBLE DEFAULT 0,
    PRIMARY KEY (tenant_id, platform, campaign_id, date)
)
"""

CAMPAIGN_METRICS_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_campaign_metrics_tenant ON campaign_metrics(tenant_id)",
]

# Column reference shown to the query generator
CAMPAIGN_METRICS_COLUMNS = {
    "tenant_id": "VARCHAR - owning account, every query must filter on it",
    "platform": "VARCHAR - 'amazon', 'google' or 'meta'",
    "campaign_id": "VARCHAR",
    "campaign_name": "VARCHAR",
    "date": "DATE - one row per campaign per day",
    "impressions": "BIGINT",
    "clicks": "BIGINT",
    "cost": "DOUBLE - spend in account currency",
    "conversions": "BIGINT",
    "sales": "DOUBLE - attributed revenue",
}
