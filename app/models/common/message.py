"""Chat message table - persisted conversation turns."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from app.models.common.base import BaseEntity

CHAT_MESSAGE_DDL = """
CREATE TABLE IF NOT EXISTS chat_messages (
    id VARCHAR PRIMARY KEY,
    conversation_id VARCHAR NOT NULL,
    tenant_id VARCHAR NOT NULL,
    role VARCHAR NOT NULL,
    content VARCHAR NOT NULL,
    metadata JSON,
    created_at TIMESTAMP NOT NULL
)
"""

CHAT_MESSAGE_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_chat_messages_conv ON chat_messages(conversation_id)",
]


@dataclass
class ChatMessage(BaseEntity):
    """A user or assistant turn."""

    id: str
    conversation_id: str
    tenant_id: str
    role: str
    content: str
    created_at: datetime
    metadata: dict[str, Any] = field(default_factory=dict)

    def as_prompt(self) -> dict[str, str]:
        """Role/content pair for a chat completion request."""
        return {"role": self.role, "content": self.content}
