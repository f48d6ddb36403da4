"""Tests for the fallback ladder state machine."""

import pytest

from app.errors import ExecutionError, GenerationError, ValidationError
from app.models import ChatMessage, GeneratedQuery, Origin, Outcome, QueryParams, utcnow
from app.services.sql.ladder import TERMINAL_STATES, TRANSITIONS, FallbackLadder, LadderState, next_state

HISTORY = [
    ChatMessage(id="m1", conversation_id="c1", tenant_id="t1", role="user", content="hi", created_at=utcnow())
]


class ScriptedGenerator:
    """Returns scripted statements; an exception instance in the script is raised."""

    def __init__(self, script):
        self.script = list(script)
        self.failures = []

    async def generate(self, question, tenant_id, params, history, campaign_ids, attempt, failure=None):
        self.failures.append(failure)
        item = self.script.pop(0)
        if isinstance(item, Exception):
            raise item
        origin = Origin.PRIMARY if failure is None else (
            Origin.RETRY_SYNTAX if failure == Outcome.SYNTAX_ERROR else Origin.RETRY_NON_SELECT
        )
        return GeneratedQuery(text=item, attempt=attempt, origin=origin)


class ScriptedExecutor:
    """Maps statement text to an error, or returns one row."""

    def __init__(self, errors=None, hardcoded_error=None):
        self.errors = errors or {}
        self.hardcoded_error = hardcoded_error
        self.executed = []
        self.hardcoded_runs = 0

    async def run(self, query, tenant_id):
        self.executed.append(query.text)
        if query.text in self.errors:
            raise self.errors[query.text]
        return [{"campaign_name": "A", "clicks": 1}]

    def hardcoded_query(self, attempt):
        return GeneratedQuery(text="HARDCODED", attempt=attempt, origin=Origin.HARDCODED)

    async def run_hardcoded(self, tenant_id):
        self.hardcoded_runs += 1
        if self.hardcoded_error:
            raise self.hardcoded_error
        return [{"campaign_name": "Top", "clicks": 99}]


def non_select(text):
    return {text: ValidationError(Outcome.NON_SELECT, "not a select")}


async def run_ladder(generator, executor, history=HISTORY):
    return await FallbackLadder(generator, executor).run("q", "t1", QueryParams(), history, ["a1"])


class TestTransitionTable:
    def test_success_always_done(self):
        for state in (LadderState.PRIMARY, LadderState.RETRY, LadderState.HARDCODED):
            assert next_state(state, Outcome.SUCCESS, has_context=False) == LadderState.DONE

    def test_no_context_fails_immediately(self):
        assert next_state(LadderState.PRIMARY, Outcome.NON_SELECT, has_context=False) == LadderState.FAILED

    def test_other_error_skips_retry(self):
        assert next_state(LadderState.PRIMARY, Outcome.OTHER_ERROR, has_context=True) == LadderState.HARDCODED

    def test_always_moves_forward(self):
        order = [LadderState.PRIMARY, LadderState.RETRY, LadderState.HARDCODED, LadderState.DONE]
        for state, moves in TRANSITIONS.items():
            for target in moves.values():
                if target not in TERMINAL_STATES:
                    assert order.index(target) > order.index(state)

    def test_hardcoded_failure_is_final(self):
        assert next_state(LadderState.HARDCODED, Outcome.OTHER_ERROR, has_context=True) == LadderState.FAILED


class TestFallbackLadder:
    @pytest.mark.asyncio
    async def test_primary_success(self):
        executor = ScriptedExecutor()
        result = await run_ladder(ScriptedGenerator(["SELECT 1"]), executor)
        assert result.succeeded
        assert result.query.origin == Origin.PRIMARY
        assert not result.fallback
        assert executor.hardcoded_runs == 0

    @pytest.mark.asyncio
    async def test_retry_after_non_select(self):
        generator = ScriptedGenerator(["prose", "SELECT 2"])
        result = await run_ladder(generator, ScriptedExecutor(errors=non_select("prose")))
        assert result.succeeded
        assert result.query.origin == Origin.RETRY_NON_SELECT
        assert generator.failures == [None, Outcome.NON_SELECT]

    @pytest.mark.asyncio
    async def test_retry_after_syntax_error(self):
        executor = ScriptedExecutor(errors={"bad": ExecutionError(Outcome.SYNTAX_ERROR, "syntax error")})
        result = await run_ladder(ScriptedGenerator(["bad", "SELECT 2"]), executor)
        assert result.query.origin == Origin.RETRY_SYNTAX

    @pytest.mark.asyncio
    async def test_hardcoded_after_two_failures(self):
        executor = ScriptedExecutor(errors={**non_select("prose"), **non_select("more prose")})
        result = await run_ladder(ScriptedGenerator(["prose", "more prose"]), executor)
        assert result.succeeded
        assert result.fallback
        assert result.rows == [{"campaign_name": "Top", "clicks": 99}]
        assert result.generations == 2
        assert executor.hardcoded_runs == 1

    @pytest.mark.asyncio
    async def test_other_error_goes_to_hardcoded(self):
        executor = ScriptedExecutor(errors={"q1": ExecutionError(Outcome.OTHER_ERROR, "binder")})
        generator = ScriptedGenerator(["q1"])
        result = await run_ladder(generator, executor)
        assert result.fallback
        assert len(generator.failures) == 1

    @pytest.mark.asyncio
    async def test_generation_error_is_retried(self):
        generator = ScriptedGenerator([GenerationError("timeout"), "SELECT 2"])
        result = await run_ladder(generator, ScriptedExecutor())
        assert result.succeeded
        assert [s.outcome for s in result.steps] == [Outcome.GENERATION_ERROR, Outcome.SUCCESS]

    @pytest.mark.asyncio
    async def test_exhausted(self):
        executor = ScriptedExecutor(
            errors={**non_select("a"), **non_select("b")},
            hardcoded_error=ExecutionError(Outcome.OTHER_ERROR, "db down"),
        )
        result = await run_ladder(ScriptedGenerator(["a", "b"]), executor)
        assert result.state == LadderState.FAILED
        assert not result.succeeded
        assert len(result.steps) == 3

    @pytest.mark.asyncio
    async def test_no_context_fails_without_retry(self):
        generator = ScriptedGenerator(["prose", "SELECT 2"])
        executor = ScriptedExecutor(errors=non_select("prose"))
        result = await run_ladder(generator, executor, history=[])
        assert result.state == LadderState.FAILED
        assert len(generator.failures) == 1
        assert executor.hardcoded_runs == 0
