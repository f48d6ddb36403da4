"""Campaign repositories."""

from app.repositories.campaign.metrics import CampaignMetricsRepository
from app.repositories.campaign.summary import SummaryRepository

__all__ = [
    "CampaignMetricsRepository",
    "SummaryRepository",
]
