"""Base HTTP client with retry logic."""

import asyncio

import httpx
from loguru import logger
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from settings import API_TIMEOUT, LLM_API_BASE_URL, LLM_API_KEY, MAX_CONCURRENT


def _is_retryable_error(exc: BaseException) -> bool:
    """Check if exception is retryable (network errors, 429 and 5xx)."""
    if isinstance(exc, (httpx.ReadError, httpx.ConnectError, httpx.TimeoutException)):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        return status == 429 or status >= 500
    return False


class BaseClient:
    """Base async HTTP client for an OpenAI-compatible provider.

    Owns its ``httpx.AsyncClient``: call ``open()``/``close()`` explicitly or
    use it as an async context manager.
    """

    def __init__(
        self,
        base_url: str = LLM_API_BASE_URL,
        api_key: str = LLM_API_KEY,
        timeout: float = API_TIMEOUT,
        max_concurrent: int = MAX_CONCURRENT,
        max_attempts: int = 3,
        backoff: float = 1.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout = timeout
        self._max_attempts = max_attempts
        self._backoff = backoff
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._sem = asyncio.Semaphore(max_concurrent)
        self._request_count = 0
        logger.info("{}: max_concurrent={}, max_attempts={}", self.__class__.__name__, max_concurrent, max_attempts)

    async def open(self) -> None:
        if self._client is not None:
            return
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            headers={"Authorization": f"Bearer {self._api_key}"},
            limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
            transport=self._transport,
        )

    async def close(self) -> None:
        logger.info("{}: total API requests: {}", self.__class__.__name__, self._request_count)
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self):
        await self.open()
        return self

    async def __aexit__(self, *_):
        await self.close()

    @property
    def request_count(self) -> int:
        return self._request_count

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError(f"{self.__class__.__name__} is not open")
        return self._client

    async def _post(self, path: str, payload: dict) -> dict:
        """POST request with exponential backoff on transient failures."""
        client = self._http()
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self._max_attempts),
            wait=wait_exponential(multiplier=self._backoff, min=self._backoff, max=30),
            retry=retry_if_exception(_is_retryable_error),
            reraise=True,
        ):
            with attempt:
                if attempt.retry_state.attempt_number > 1:
                    logger.warning("{} /{}: retry {}", self.__class__.__name__, path, attempt.retry_state.attempt_number)
                async with self._sem:
                    self._request_count += 1
                    resp = await client.post(f"/{path}", json=payload)
                    resp.raise_for_status()
                    return resp.json()


class ProviderError(Exception):
    """Provider answered, but the response did not match the expected contract."""
