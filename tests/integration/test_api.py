"""Chat API views over a container wired to fakes."""

import pytest
import pytest_asyncio

from app.container import container
from app.services.answer.pipeline import DONE_MARKER
from tests.fakes import FakeEmbedder, FakeGeneration
from web.api.chat.views import ask, ask_stream, get_history
from web.api.errors import NotFoundError, ValidationError, validate_question


@pytest_asyncio.fixture
async def api():
    response = FakeGeneration(chunks=["Hi ", "there."])
    await container.init(":memory:", embedding_client=FakeEmbedder(), generation_client=response)
    yield response
    await container.close()


@pytest.mark.asyncio
async def test_ask_and_history(api):
    result = await ask("t1", "c1", "  Hello there  ")

    assert result.text == "Hi there."
    assert not result.grounded and not result.error

    history = await get_history("t1", "c1")
    assert [m.role for m in history.items] == ["user", "assistant"]
    assert history.items[0].content == "Hello there"


@pytest.mark.asyncio
async def test_ask_stream(api):
    chunks = [c async for c in ask_stream("t1", "c2", "Hello there")]
    assert chunks == ["Hi ", "there.", DONE_MARKER]


@pytest.mark.asyncio
async def test_unknown_conversation(api):
    with pytest.raises(NotFoundError):
        await get_history("t1", "missing")


@pytest.mark.asyncio
async def test_history_is_tenant_scoped(api):
    await ask("t1", "c1", "Hello there")
    with pytest.raises(NotFoundError):
        await get_history("t2", "c1")


@pytest.mark.parametrize("tenant_id", ["", "bad tenant", "t1;DROP", None])
def test_invalid_tenant(tenant_id):
    with pytest.raises(ValidationError):
        ask_stream(tenant_id, "c1", "Hello")


@pytest.mark.parametrize("question", ["", "   ", "x" * 2001])
def test_invalid_question(question):
    with pytest.raises(ValidationError):
        validate_question(question)
