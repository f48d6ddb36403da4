"""Campaign summary model - precomputed aggregates per time window."""

from dataclasses import dataclass
from datetime import date
from enum import Enum

from app.models.common import BaseEntity

SUMMARY_DDL = """
CREATE TABLE IF NOT EXISTS campaign_metrics_summary (
    tenant_id VARCHAR NOT NULL,
    campaign_id VARCHAR NOT NULL,
    campaign_name VARCHAR,
    platform VARCHAR NOT NULL,
    time_window VARCHAR NOT NULL,
    total_impressions BIGINT DEFAULT 0,
    total_clicks BIGINT DEFAULT 0,
    total_cost DOUBLE DEFAULT 0,
    total_conversions BIGINT DEFAULT 0,
    total_sales DOUBLE DEFAULT 0,
    ctr DOUBLE,
    roas DOUBLE,
    period_start DATE,
    period_end DATE,
    refreshed_at TIMESTAMP
)
"""

SUMMARY_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_summary_tenant_window ON campaign_metrics_summary(tenant_id, time_window)",
]


class TimeWindow(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"

    @property
    def days(self) -> int:
        """Days back from today covered by the window."""
        return {"daily": 1, "weekly": 7, "monthly": 30, "quarterly": 90}[self.value]


@dataclass
class SummaryRow(BaseEntity):
    """Aggregated performance of one campaign over one time window."""

    tenant_id: str
    campaign_id: str
    campaign_name: str | None
    platform: str
    time_window: str
    total_impressions: int = 0
    total_clicks: int = 0
    total_cost: float = 0.0
    total_conversions: int = 0
    total_sales: float = 0.0
    ctr: float | None = None
    roas: float | None = None
    period_start: date | None = None
    period_end: date | None = None

    def as_result_row(self) -> dict:
        """Flatten to the same shape as a generated-query result row."""
        return {
            "campaign_name": self.campaign_name or self.campaign_id,
            "campaign_id": self.campaign_id,
            "platform": self.platform,
            "time_window": self.time_window,
            "impressions": self.total_impressions,
            "clicks": self.total_clicks,
            "cost": self.total_cost,
            "ctr": self.ctr,
            "conversions": self.total_conversions,
            "roas": self.roas,
        }
