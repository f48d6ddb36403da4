"""Fallback ladder - bounded recovery when a generated statement fails.

A finite-state machine: PRIMARY -> RETRY -> HARDCODED -> FAILED, with DONE
reachable from every working state on success. Every transition moves
forward, so one question costs at most two generations and one hardcoded
statement.

Only statement-shaped failures (not a SELECT, unscoped, syntax, no output)
earn a corrective regeneration; that prompt can fix the statement text. A
runtime failure of a valid statement (OTHER_ERROR) says nothing a
regenerated statement would avoid, so it goes straight to the hardcoded
statement instead of ending the question with the generic message.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from loguru import logger

from app.errors import ExecutionError, GenerationError, ValidationError
from app.models import ChatMessage, GeneratedQuery, Origin, Outcome, QueryParams
from app.services.sql.generator import QueryGenerator
from app.services.sql.validator import QueryExecutor


class LadderState(str, Enum):
    PRIMARY = "primary"
    RETRY = "retry"
    HARDCODED = "hardcoded"
    DONE = "done"
    FAILED = "failed"


TERMINAL_STATES = {LadderState.DONE, LadderState.FAILED}

TRANSITIONS: dict[LadderState, dict[Outcome, LadderState]] = {
    LadderState.PRIMARY: {
        Outcome.SUCCESS: LadderState.DONE,
        Outcome.NON_SELECT: LadderState.RETRY,
        Outcome.UNSCOPED: LadderState.RETRY,
        Outcome.SYNTAX_ERROR: LadderState.RETRY,
        Outcome.GENERATION_ERROR: LadderState.RETRY,
        Outcome.OTHER_ERROR: LadderState.HARDCODED,
    },
    LadderState.RETRY: {
        Outcome.SUCCESS: LadderState.DONE,
        Outcome.NON_SELECT: LadderState.HARDCODED,
        Outcome.UNSCOPED: LadderState.HARDCODED,
        Outcome.SYNTAX_ERROR: LadderState.HARDCODED,
        Outcome.GENERATION_ERROR: LadderState.HARDCODED,
        Outcome.OTHER_ERROR: LadderState.HARDCODED,
    },
    LadderState.HARDCODED: {
        Outcome.SUCCESS: LadderState.DONE,
        Outcome.OTHER_ERROR: LadderState.FAILED,
        Outcome.SYNTAX_ERROR: LadderState.FAILED,
    },
}


def next_state(state: LadderState, outcome: Outcome, has_context: bool) -> LadderState:
    """Transition for ``outcome`` in ``state``; without context any failure is final."""
    if outcome == Outcome.SUCCESS:
        return LadderState.DONE
    if not has_context:
        return LadderState.FAILED
    return TRANSITIONS.get(state, {}).get(outcome, LadderState.FAILED)


@dataclass
class LadderStep:
    state: LadderState
    outcome: Outcome
    origin: Origin | None = None


@dataclass
class LadderResult:
    state: LadderState
    rows: list[dict[str, Any]] = field(default_factory=list)
    query: GeneratedQuery | None = None
    steps: list[LadderStep] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.state == LadderState.DONE

    @property
    def fallback(self) -> bool:
        """Answer came from the hardcoded statement."""
        return self.query is not None and self.query.origin == Origin.HARDCODED

    @property
    def generations(self) -> int:
        return sum(1 for s in self.steps if s.state in (LadderState.PRIMARY, LadderState.RETRY))


class FallbackLadder:
    """Drives generator and executor through the state machine."""

    def __init__(self, generator: QueryGenerator, executor: QueryExecutor):
        self._generator = generator
        self._executor = executor

    async def _generated_attempt(
        self,
        question: str,
        tenant_id: str,
        params: QueryParams,
        history: list[ChatMessage],
        campaign_ids: list[str],
        attempt: int,
        failure: Outcome | None,
    ) -> tuple[Outcome, GeneratedQuery | None, list[dict[str, Any]]]:
        try:
            query = await self._generator.generate(question, tenant_id, params, history, campaign_ids, attempt, failure)
        except GenerationError as e:
            logger.warning("Generation attempt {} failed: {}", attempt, e)
            return Outcome.GENERATION_ERROR, None, []

        try:
            rows = await self._executor.run(query, tenant_id)
        except (ValidationError, ExecutionError) as e:
            logger.warning("Attempt {} ({}) rejected: {}", attempt, query.origin.value, e.kind.value)
            return Outcome(e.kind), query, []
        return Outcome.SUCCESS, query, rows

    async def _hardcoded_attempt(
        self, tenant_id: str, attempt: int
    ) -> tuple[Outcome, GeneratedQuery, list[dict[str, Any]]]:
        query = self._executor.hardcoded_query(attempt)
        try:
            rows = await self._executor.run_hardcoded(tenant_id)
        except ExecutionError as e:
            return Outcome(e.kind), query, []
        return Outcome.SUCCESS, query, rows

    async def run(
        self,
        question: str,
        tenant_id: str,
        params: QueryParams,
        history: list[ChatMessage],
        campaign_ids: list[str],
    ) -> LadderResult:
        has_context = bool(history)
        state = LadderState.PRIMARY
        failure: Outcome | None = None
        steps: list[LadderStep] = []
        attempt = 0

        while state not in TERMINAL_STATES:
            attempt += 1
            if state == LadderState.HARDCODED:
                outcome, query, rows = await self._hardcoded_attempt(tenant_id, attempt)
            else:
                outcome, query, rows = await self._generated_attempt(
                    question, tenant_id, params, history, campaign_ids, attempt, failure
                )
            steps.append(LadderStep(state=state, outcome=outcome, origin=query.origin if query else None))

            new_state = next_state(state, outcome, has_context)
            if outcome != Outcome.SUCCESS:
                logger.warning("Ladder {} -> {} on {}", state.value, new_state.value, outcome.value)
                failure = outcome
            if new_state == LadderState.DONE:
                return LadderResult(state=new_state, rows=rows, query=query, steps=steps)
            state = new_state

        logger.error("Fallback ladder exhausted after {} attempts", attempt)
        return LadderResult(state=LadderState.FAILED, steps=steps)
