"""Chat completion API schemas."""

from pydantic import BaseModel


class ChoiceMessage(BaseModel):
    """Assistant message of a completed choice."""

    role: str = "assistant"
    content: str | None = None


class Choice(BaseModel):
    """Completion choice."""

    index: int = 0
    message: ChoiceMessage
    finish_reason: str | None = None


class ChatCompletionResponse(BaseModel):
    """POST /chat/completions response (stream=false)."""

    choices: list[Choice]


class Delta(BaseModel):
    """Incremental content of a streamed choice."""

    content: str | None = None


class StreamChoice(BaseModel):
    """Streamed choice."""

    index: int = 0
    delta: Delta = Delta()
    finish_reason: str | None = None


class ChatCompletionChunk(BaseModel):
    """One ``data:`` event of a streamed completion."""

    choices: list[StreamChoice] = []
