"""Message repository - conversation history."""

import json

from app.models import ChatMessage
from app.repositories.base import BaseRepository

_COLUMNS = "id, conversation_id, tenant_id, role, content, metadata, created_at"


def _to_message(row: tuple) -> ChatMessage:
    metadata = json.loads(row[5]) if isinstance(row[5], str) else (row[5] or {})
    return ChatMessage(
        id=row[0],
        conversation_id=row[1],
        tenant_id=row[2],
        role=row[3],
        content=row[4],
        metadata=metadata,
        created_at=row[6],
    )


class MessageRepository(BaseRepository):
    """Repository for chat messages."""

    async def add(self, message: ChatMessage) -> None:
        await self.execute(
            f"INSERT INTO chat_messages ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?)",
            [
                message.id,
                message.conversation_id,
                message.tenant_id,
                message.role,
                message.content,
                json.dumps(message.metadata, default=str),
                message.created_at,
            ],
        )

    async def recent(self, tenant_id: str, conversation_id: str, limit: int) -> list[ChatMessage]:
        """Last ``limit`` messages of a conversation, oldest first."""
        rows = await self.fetchall(
            f"""
            SELECT {_COLUMNS} FROM (
                SELECT {_COLUMNS}, rowid AS seq FROM chat_messages
                WHERE tenant_id = ? AND conversation_id = ?
                ORDER BY created_at DESC, seq DESC
                LIMIT ?
            ) ORDER BY created_at, seq
            """,
            [tenant_id, conversation_id, limit],
        )
        return [_to_message(r) for r in rows]

    async def count(self, tenant_id: str, conversation_id: str) -> int:
        row = await self.fetchone(
            "SELECT COUNT(*) FROM chat_messages WHERE tenant_id = ? AND conversation_id = ?",
            [tenant_id, conversation_id],
        )
        return row[0]
