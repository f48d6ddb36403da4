"""Chat API views - thin layer over the pipeline."""

from collections.abc import AsyncIterator

from app.container import container
from settings import HISTORY_MESSAGES
from web.api.errors import NotFoundError, validate_conversation_id, validate_question, validate_tenant_id

from .schemas import AnswerResponse, HistoryResponse, MessageItem


async def ask(tenant_id: str, conversation_id: str, question: str) -> AnswerResponse:
    """Answer a question in full."""
    validate_tenant_id(tenant_id)
    validate_conversation_id(conversation_id)
    question = validate_question(question)

    result = await container.pipeline.answer(tenant_id, conversation_id, question)
    return AnswerResponse(
        tenant_id=tenant_id,
        conversation_id=conversation_id,
        message_id=result.message_id,
        text=result.text,
        from_cache=result.from_cache,
        from_summary=result.from_summary,
        fallback=result.fallback,
        grounded=result.grounded,
        error=result.error,
        campaign_ids=result.campaign_ids,
    )


def ask_stream(tenant_id: str, conversation_id: str, question: str) -> AsyncIterator[str]:
    """Answer chunks followed by the terminal marker."""
    validate_tenant_id(tenant_id)
    validate_conversation_id(conversation_id)
    question = validate_question(question)
    return container.pipeline.stream(tenant_id, conversation_id, question)


async def get_history(tenant_id: str, conversation_id: str, limit: int = HISTORY_MESSAGES) -> HistoryResponse:
    """Most recent messages of a conversation, oldest first."""
    validate_tenant_id(tenant_id)
    validate_conversation_id(conversation_id)

    messages = await container.message_repo.recent(tenant_id, conversation_id, limit)
    if not messages:
        raise NotFoundError(f"Conversation {conversation_id} not found")

    items = [
        MessageItem(
            id=m.id,
            role=m.role,
            content=m.content,
            created_at=m.created_at,
            incomplete=bool(m.metadata.get("incomplete")),
        )
        for m in messages
    ]
    return HistoryResponse(tenant_id=tenant_id, conversation_id=conversation_id, items=items)
