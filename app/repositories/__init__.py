"""Repositories package - data access layer for our database."""

from app.repositories.base import BaseRepository
from app.repositories.campaign import CampaignMetricsRepository, SummaryRepository
from app.repositories.common import CacheRepository, MessageRepository
from app.repositories.db import Database, init_tables
from app.repositories.retrieval import EmbeddingRepository

__all__ = [
    # DB
    "Database",
    "init_tables",
    # Base
    "BaseRepository",
    # Common
    "CacheRepository",
    "MessageRepository",
    # Campaign
    "CampaignMetricsRepository",
    "SummaryRepository",
    # Retrieval
    "EmbeddingRepository",
]
