"""Campaign services."""

from app.services.campaign.summaries import SummaryStore

__all__ = [
    "SummaryStore",
]
