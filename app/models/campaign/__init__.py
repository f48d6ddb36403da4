"""Campaign domain models - raw metrics and precomputed summaries."""

from app.models.campaign.metrics import CAMPAIGN_METRICS_COLUMNS, CAMPAIGN_METRICS_DDL, CAMPAIGN_METRICS_INDEXES
from app.models.campaign.summary import SUMMARY_DDL, SUMMARY_INDEXES, SummaryRow, TimeWindow

__all__ = [
    "CAMPAIGN_METRICS_DDL",
    "CAMPAIGN_METRICS_INDEXES",
    "CAMPAIGN_METRICS_COLUMNS",
    "SUMMARY_DDL",
    "SUMMARY_INDEXES",
    "SummaryRow",
    "TimeWindow",
]
