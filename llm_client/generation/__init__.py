"""Chat completion API."""

from llm_client.generation.client import STREAM_DONE, GenerationClient
from llm_client.generation.schemas import ChatCompletionChunk, ChatCompletionResponse

__all__ = [
    "GenerationClient",
    "STREAM_DONE",
    "ChatCompletionResponse",
    "ChatCompletionChunk",
]
