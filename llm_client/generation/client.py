"""Chat completion API client - complete and streamed text generation."""

from collections.abc import AsyncIterator

from pydantic import ValidationError

from llm_client.base import BaseClient, ProviderError
from llm_client.generation.schemas import ChatCompletionChunk, ChatCompletionResponse
from settings import GENERATION_MODEL

STREAM_DONE = "[DONE]"


class GenerationClient(BaseClient):
    """Client for the /chat/completions endpoint."""

    def __init__(self, model: str = GENERATION_MODEL, **kwargs):
        super().__init__(**kwargs)
        self._model = model

    @property
    def model(self) -> str:
        return self._model

    def _payload(self, messages: list[dict], temperature: float, max_tokens: int, stream: bool) -> dict:
        return {
            "model": self._model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
            "stream": stream,
        }

    async def complete(self, messages: list[dict], temperature: float = 0.7, max_tokens: int = 1000) -> str:
        """POST /chat/completions - full text of the first choice."""
        data = await self._post("chat/completions", self._payload(messages, temperature, max_tokens, False))
        try:
            parsed = ChatCompletionResponse.model_validate(data)
        except ValidationError as e:
            raise ProviderError(f"Malformed completion response: {e}") from e
        if not parsed.choices:
            raise ProviderError("Completion response has no choices")
        return parsed.choices[0].message.content or ""

    async def stream(
        self, messages: list[dict], temperature: float = 0.7, max_tokens: int = 1000
    ) -> AsyncIterator[str]:
        """POST /chat/completions (stream=true) - yields text deltas until the finish signal.

        Not retried: a retry after the first chunk would duplicate output.
        """
        client = self._http()
        async with self._sem:
            self._request_count += 1
            async with client.stream(
                "POST", "/chat/completions", json=self._payload(messages, temperature, max_tokens, True)
            ) as resp:
                resp.raise_for_status()
                async for line in resp.aiter_lines():
                    if not line.startswith("data:"):
                        continue
                    data = line[len("data:") :].strip()
                    if data == STREAM_DONE:
                        break
                    try:
                        chunk = ChatCompletionChunk.model_validate_json(data)
                    except ValidationError as e:
                        raise ProviderError(f"Malformed stream chunk: {e}") from e
                    for choice in chunk.choices:
                        if choice.delta.content:
                            yield choice.delta.content
