"""Pipeline orchestrator - one question in, a grounded streamed answer out.

Fast paths first (cache, summaries), then retrieval, generated SQL with the
fallback ladder, insights and context, and finally the response stream.
Every degraded path still yields an answer; only ladder exhaustion or a
failing response provider yields the generic error text.
"""

import asyncio
import uuid
from collections.abc import AsyncIterator, Callable
from contextlib import aclosing
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import duckdb
import httpx
from loguru import logger
from tenacity import RetryError

from app.errors import CacheError, ClassificationError, RetrievalError, SummaryError
from app.models import BaseEntity, CachedPayload, ChatMessage, QueryParams, SearchHit, utcnow
from app.repositories import MessageRepository
from app.services.answer.context import build_context, build_general_context, build_no_grounding_context
from app.services.answer.insights import extract_insights
from app.services.campaign.summaries import SummaryStore
from app.services.query.cache import QueryCache
from app.services.query.classifier import (
    contains_metric_terms,
    extract_query_params,
    is_complex_question,
    is_data_question,
)
from app.services.retrieval.indexer import Indexer
from app.services.retrieval.retriever import RetrievalResult, Retriever
from app.services.sql.ladder import FallbackLadder
from llm_client import GenerationClient, ProviderError
from settings import HISTORY_MESSAGES, MAX_CONTEXT_CHARS, RESPONSE_MAX_TOKENS, RESPONSE_TEMPERATURE

GENERIC_ERROR = "I couldn't retrieve that data — please try rephrasing"
DONE_MARKER = "[DONE]"

RESPONSE_SYSTEM_PROMPT = (
    "You are a marketing analytics assistant for advertising campaigns on Amazon, Google and Meta. "
    "Be concise, specific and quote the numbers you are given."
)


@dataclass
class PreparedAnswer:
    """Outcome of everything before the response generator."""

    context: str | None = None
    data_question: bool = True
    grounded: bool = False
    from_cache: bool = False
    from_summary: bool = False
    fallback: bool = False
    failed: bool = False
    campaign_ids: list[str] = field(default_factory=list)
    rows: list[dict[str, Any]] = field(default_factory=list)

    def metadata(self) -> dict[str, Any]:
        return {
            "from_cache": self.from_cache,
            "from_summary": self.from_summary,
            "fallback": self.fallback,
            "grounded": self.grounded,
            "campaign_ids": self.campaign_ids,
        }


@dataclass
class AnswerResult(BaseEntity):
    text: str
    message_id: str
    from_cache: bool = False
    from_summary: bool = False
    fallback: bool = False
    grounded: bool = False
    error: bool = False
    campaign_ids: list[str] = field(default_factory=list)


class Pipeline:
    """Sequences classification, fast paths, retrieval, SQL and response generation."""

    def __init__(
        self,
        generation: GenerationClient,
        cache: QueryCache,
        summaries: SummaryStore,
        retriever: Retriever,
        ladder: FallbackLadder,
        messages: MessageRepository,
        indexer: Indexer | None = None,
        temperature: float = RESPONSE_TEMPERATURE,
        max_tokens: int = RESPONSE_MAX_TOKENS,
        history_limit: int = HISTORY_MESSAGES,
        max_context_chars: int = MAX_CONTEXT_CHARS,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._generation = generation
        self._cache = cache
        self._summaries = summaries
        self._retriever = retriever
        self._ladder = ladder
        self._messages = messages
        self._indexer = indexer
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._history_limit = history_limit
        self._max_context_chars = max_context_chars
        self._clock = clock

    # Analytic phase

    async def prepare(
        self, tenant_id: str, question: str, history: list[ChatMessage] | None = None
    ) -> PreparedAnswer:
        """Run everything up to the response generator."""
        log = logger.bind(tenant=tenant_id)
        history = history or []

        try:
            if not is_data_question(question):
                log.info("General question, skipping data path")
                return PreparedAnswer(context=build_general_context(question), data_question=False)
            complex_question = is_complex_question(question)
            params = extract_query_params(question)
        except ClassificationError as e:
            log.warning("Classification failed, answering generally: {}", e)
            return PreparedAnswer(context=build_general_context(str(question)), data_question=False)

        if not complex_question:
            cached = await self._cached(tenant_id, question)
            if cached is not None:
                log.info("Cache hit ({} rows)", len(cached.rows))
                return self._from_cached(question, params, cached)

            if contains_metric_terms(question):
                prepared = await self._from_summaries(tenant_id, question, params)
                if prepared is not None:
                    log.info("Summary hit ({} rows)", len(prepared.rows))
                    return prepared

        retrieval = await self._retrieve(tenant_id, question)
        if not retrieval.grounded:
            log.info("No campaigns above threshold, answering without grounding data")
            return PreparedAnswer(context=build_no_grounding_context(question, params, self._max_context_chars))

        related = self._related_messages(retrieval.messages, history)
        result = await self._ladder.run(question, tenant_id, params, history, retrieval.campaign_ids)
        if not result.succeeded:
            return PreparedAnswer(failed=True, grounded=True, campaign_ids=retrieval.campaign_ids)

        source = "fallback" if result.fallback else "query"
        context = build_context(
            question, params, result.rows, extract_insights(result.rows), source, related, self._max_context_chars
        )
        prepared = PreparedAnswer(
            context=context,
            grounded=True,
            fallback=result.fallback,
            campaign_ids=retrieval.campaign_ids,
            rows=result.rows,
        )
        if result.rows:
            payload = CachedPayload(
                rows=result.rows,
                query=result.query.text if result.query else None,
                origin=result.query.origin.value if result.query else None,
                fallback=result.fallback,
                campaign_ids=retrieval.campaign_ids,
            )
            await self._store(tenant_id, question, payload)
        log.info("Answered from {} ({} rows, {} generations)", source, len(result.rows), result.generations)
        return prepared

    async def _cached(self, tenant_id: str, question: str) -> CachedPayload | None:
        try:
            return await self._cache.get(tenant_id, question)
        except CacheError as e:
            logger.bind(tenant=tenant_id).warning("Cache unavailable, treating as miss: {}", e)
            return None

    async def _store(self, tenant_id: str, question: str, payload: CachedPayload) -> None:
        try:
            await self._cache.put(tenant_id, question, payload)
        except CacheError as e:
            logger.bind(tenant=tenant_id).warning("Cache write skipped: {}", e)

    def _from_cached(self, question: str, params: QueryParams, cached: CachedPayload) -> PreparedAnswer:
        if cached.from_summary:
            source = "summary"
        elif cached.fallback:
            source = "fallback"
        else:
            source = "cache"
        context = build_context(
            question, params, cached.rows, extract_insights(cached.rows), source, None, self._max_context_chars
        )
        return PreparedAnswer(
            context=context,
            grounded=True,
            from_cache=True,
            from_summary=cached.from_summary,
            fallback=cached.fallback,
            campaign_ids=cached.campaign_ids,
            rows=cached.rows,
        )

    async def _from_summaries(self, tenant_id: str, question: str, params: QueryParams) -> PreparedAnswer | None:
        try:
            summary_rows = await self._summaries.lookup(tenant_id, question, params)
        except SummaryError as e:
            logger.bind(tenant=tenant_id).warning("Summaries unavailable, treating as miss: {}", e)
            return None
        if not summary_rows:
            return None

        rows = [s.as_result_row() for s in summary_rows]
        campaign_ids = list(dict.fromkeys(s.campaign_id for s in summary_rows))
        context = build_context(
            question, params, rows, extract_insights(rows), "summary", None, self._max_context_chars
        )
        await self._store(tenant_id, question, CachedPayload(rows=rows, from_summary=True, campaign_ids=campaign_ids))
        return PreparedAnswer(
            context=context, grounded=True, from_summary=True, campaign_ids=campaign_ids, rows=rows
        )

    async def _retrieve(self, tenant_id: str, question: str) -> RetrievalResult:
        try:
            return await self._retriever.retrieve(tenant_id, question)
        except RetrievalError as e:
            logger.bind(tenant=tenant_id).warning("Retrieval unavailable, continuing without grounding: {}", e)
            return RetrievalResult()

    @staticmethod
    def _related_messages(hits: list[SearchHit], history: list[ChatMessage]) -> list[SearchHit]:
        in_history = {m.id for m in history}
        return [h for h in hits if h.record.source_id not in in_history]

    # Conversation bookkeeping

    async def _history(self, tenant_id: str, conversation_id: str) -> list[ChatMessage]:
        try:
            return await self._messages.recent(tenant_id, conversation_id, self._history_limit)
        except duckdb.Error as e:
            logger.bind(tenant=tenant_id).warning("History unavailable: {}", e)
            return []

    def _message(
        self, tenant_id: str, conversation_id: str, role: str, content: str, metadata: dict[str, Any]
    ) -> ChatMessage:
        return ChatMessage(
            id=uuid.uuid4().hex,
            conversation_id=conversation_id,
            tenant_id=tenant_id,
            role=role,
            content=content,
            created_at=self._clock(),
            metadata=metadata,
        )

    async def _index(self, message: ChatMessage) -> None:
        if self._indexer is None:
            return
        try:
            position = await self._messages.count(message.tenant_id, message.conversation_id)
            await self._indexer.index_message(message, position)
        except (httpx.HTTPError, ProviderError, RetryError, duckdb.Error) as e:
            logger.bind(tenant=message.tenant_id).warning("Message indexing skipped: {}", e)

    async def _save(
        self, tenant_id: str, conversation_id: str, role: str, content: str, metadata: dict[str, Any]
    ) -> ChatMessage:
        message = self._message(tenant_id, conversation_id, role, content, metadata)
        await self._messages.add(message)
        await self._index(message)
        return message

    async def _save_question(self, tenant_id: str, conversation_id: str, question: str) -> ChatMessage | None:
        """Store the question unindexed; it is indexed once retrieval for it is done."""
        message = self._message(tenant_id, conversation_id, "user", question, {})
        try:
            await self._messages.add(message)
        except duckdb.Error as e:
            logger.bind(tenant=tenant_id).warning("Question not stored: {}", e)
            return None
        return message

    def _response_messages(self, history: list[ChatMessage], context: str) -> list[dict]:
        return (
            [{"role": "system", "content": RESPONSE_SYSTEM_PROMPT}]
            + [m.as_prompt() for m in history]
            + [{"role": "user", "content": context}]
        )

    # Caller-facing API

    async def stream(self, tenant_id: str, conversation_id: str, question: str) -> AsyncIterator[str]:
        """Yield answer chunks, then exactly one DONE_MARKER.

        If the consumer stops early, the streamed part is stored tagged
        ``incomplete`` and no marker is sent.
        """
        log = logger.bind(tenant=tenant_id)
        history = await self._history(tenant_id, conversation_id)
        asked = await self._save_question(tenant_id, conversation_id, question)

        prepared = await self.prepare(tenant_id, question, history)
        if asked is not None:
            await self._index(asked)
        metadata = prepared.metadata()
        parts: list[str] = []

        if prepared.failed:
            await self._save(tenant_id, conversation_id, "assistant", GENERIC_ERROR, {**metadata, "error": True})
            yield GENERIC_ERROR
            yield DONE_MARKER
            return

        try:
            async with aclosing(
                self._generation.stream(
                    self._response_messages(history, prepared.context),
                    temperature=self._temperature,
                    max_tokens=self._max_tokens,
                )
            ) as chunks:
                async for chunk in chunks:
                    parts.append(chunk)
                    yield chunk
        except (GeneratorExit, asyncio.CancelledError):
            log.warning("Stream closed by caller after {} chunks", len(parts))
            await self._save(tenant_id, conversation_id, "assistant", "".join(parts), {**metadata, "incomplete": True})
            raise
        except (httpx.HTTPError, ProviderError) as e:
            log.error("Response generation failed: {}", e)
            metadata["error"] = True
            parts.append(GENERIC_ERROR if not parts else f"\n\n{GENERIC_ERROR}")
            yield parts[-1]

        await self._save(tenant_id, conversation_id, "assistant", "".join(parts), metadata)
        yield DONE_MARKER

    async def answer(self, tenant_id: str, conversation_id: str, question: str) -> AnswerResult:
        """Collect the stream into one result with provenance."""
        history = await self._history(tenant_id, conversation_id)
        asked = await self._save_question(tenant_id, conversation_id, question)

        prepared = await self.prepare(tenant_id, question, history)
        if asked is not None:
            await self._index(asked)
        if prepared.failed:
            message = await self._save(
                tenant_id, conversation_id, "assistant", GENERIC_ERROR, {**prepared.metadata(), "error": True}
            )
            return AnswerResult(text=GENERIC_ERROR, message_id=message.id, error=True, **prepared.metadata())

        error = False
        try:
            text = await self._generation.complete(
                self._response_messages(history, prepared.context),
                temperature=self._temperature,
                max_tokens=self._max_tokens,
            )
        except (httpx.HTTPError, ProviderError, RetryError) as e:
            logger.bind(tenant=tenant_id).error("Response generation failed: {}", e)
            text, error = GENERIC_ERROR, True

        message = await self._save(
            tenant_id, conversation_id, "assistant", text, {**prepared.metadata(), "error": error}
        )
        return AnswerResult(text=text, message_id=message.id, error=error, **prepared.metadata())
