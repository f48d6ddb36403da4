"""Common repositories - cache and conversation history."""

from app.repositories.common.cache import CacheRepository
from app.repositories.common.message import MessageRepository

__all__ = [
    "CacheRepository",
    "MessageRepository",
]
