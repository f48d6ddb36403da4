"""Chat API response schemas."""

from datetime import datetime

from pydantic import BaseModel


class AnswerResponse(BaseModel):
    """Answer with provenance."""

    tenant_id: str
    conversation_id: str
    message_id: str
    text: str
    from_cache: bool
    from_summary: bool
    fallback: bool
    grounded: bool
    error: bool
    campaign_ids: list[str]


class MessageItem(BaseModel):
    """Stored chat message."""

    id: str
    role: str
    content: str
    created_at: datetime
    incomplete: bool = False


class HistoryResponse(BaseModel):
    """Conversation history response."""

    tenant_id: str
    conversation_id: str
    items: list[MessageItem]
