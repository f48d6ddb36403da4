"""Common models - base classes and shared tables."""

from app.models.common.base import BaseEntity, utcnow
from app.models.common.cache import CACHE_DDL, CacheEntry, CachedPayload
from app.models.common.message import CHAT_MESSAGE_DDL, CHAT_MESSAGE_INDEXES, ChatMessage

__all__ = [
    "BaseEntity",
    "utcnow",
    "CACHE_DDL",
    "CacheEntry",
    "CachedPayload",
    "CHAT_MESSAGE_DDL",
    "CHAT_MESSAGE_INDEXES",
    "ChatMessage",
]
