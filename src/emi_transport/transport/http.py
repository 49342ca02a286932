"""HTTP command client.

Sends command requests to ``{rest_gateway}/{endpoint}`` and unwraps the
HttpResult envelope of each response. Failed attempts are retried with
exponential backoff plus jitter.

Failure modes per attempt (all retried):
- Network errors and per-attempt timeouts
- Status codes outside [200, 300)
- Request serialization errors
- Response decoding errors, only when a response model was requested;
  without one any 2xx completes the call

The retry loop runs on tenacity. Cancellation is never retried: cancelling
the calling task, during the request or during the backoff sleep,
propagates immediately.
"""

from __future__ import annotations

import asyncio
import json
import logging
import random
from typing import Any, TypeVar, overload

import httpx
from pydantic import BaseModel, ValidationError
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
)

from ..errors import CommandError, HTTPStatusError, MaxRetriesExceededError
from ..protocol.commands import Endpoint, HttpResult, dump_request

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

Request = BaseModel | dict[str, Any] | None


def compute_backoff(
    attempt: int,
    base_delay: float,
    max_delay: float,
    max_jitter: float,
    rand: random.Random | None = None,
) -> float:
    """Delay before retrying after failed attempt number ``attempt`` (0-based).

    ``min(max_delay, base_delay * 2**attempt + jitter)`` with jitter drawn
    uniformly from ``[0, max_jitter)``.
    """
    jitter = (rand or random).random() * max_jitter if max_jitter > 0 else 0.0
    return min(max_delay, base_delay * (2**attempt) + jitter)


class HttpClient:
    """Command client for the gateway's REST endpoint.

    Usage:
        async with HttpClient("http://localhost:3000/api", "token") as client:
            info = await client.post(Endpoint.GET_LOGIN_INFO, response_model=LoginInfo)

    Testing:
        transport = httpx.MockTransport(handler)
        client = HttpClient(base, http_client=httpx.AsyncClient(transport=transport))
    """

    def __init__(
        self,
        rest_gateway: str,
        access_token: str = "",
        *,
        timeout: float = 10.0,
        max_retries: int = 5,
        base_retry_delay: float = 0.1,
        max_retry_delay: float = 5.0,
        max_retry_jitter: float = 0.1,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.rest_gateway = rest_gateway
        self.access_token = access_token
        self.timeout = timeout

        self.max_retries = max_retries
        self.base_retry_delay = base_retry_delay
        self.max_retry_delay = max_retry_delay
        self.max_retry_jitter = max_retry_jitter

        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))

    def url_for(self, endpoint: str | Endpoint) -> str:
        """Join ``endpoint`` onto the configured base address."""
        name = endpoint.value if isinstance(endpoint, Endpoint) else endpoint
        return f"{self.rest_gateway.rstrip('/')}/{name.lstrip('/')}"

    @overload
    async def post(self, endpoint: str | Endpoint, request: Request = None) -> Any: ...

    @overload
    async def post(
        self, endpoint: str | Endpoint, request: Request = None, *, response_model: type[T]
    ) -> T | None: ...

    async def post(
        self,
        endpoint: str | Endpoint,
        request: Request = None,
        *,
        response_model: type[BaseModel] | None = None,
    ) -> Any:
        """Issue a command and return its unwrapped result.

        Args:
            endpoint: Operation name, joined onto the base address
            request: Request body; ``None`` sends an empty body
            response_model: Model to validate the envelope's ``data`` into

        Returns:
            None for an empty or 204 response, a ``response_model`` instance
            when one is given, otherwise the raw ``data`` value (None when
            the body is not an HttpResult envelope).

        Raises:
            MaxRetriesExceededError: Every attempt failed
            asyncio.CancelledError: The calling task was cancelled
        """
        url = self.url_for(endpoint)
        logger.debug(f"Sending post request to {url}")

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_retries + 1),
            wait=self._backoff,
            retry=retry_if_exception_type(CommandError),
            before_sleep=before_sleep_log(logger, logging.DEBUG),
            sleep=asyncio.sleep,
        )

        try:
            async for attempt in retrying:
                with attempt:
                    return await self._do_post(url, request, response_model)
        except RetryError as e:
            last_attempt = e.last_attempt
            last_error = last_attempt.exception()
            raise MaxRetriesExceededError(
                url, last_attempt.attempt_number, last_error
            ) from last_error

        # AsyncRetrying either returns from the attempt or raises
        raise RuntimeError("Retry loop completed without returning")

    def _backoff(self, retry_state: RetryCallState) -> float:
        """tenacity wait strategy; ``attempt_number`` counts from 1."""
        return compute_backoff(
            retry_state.attempt_number - 1,
            self.base_retry_delay,
            self.max_retry_delay,
            self.max_retry_jitter,
        )

    async def _do_post(
        self,
        url: str,
        request: Request,
        response_model: type[BaseModel] | None,
    ) -> Any:
        """Run a single attempt."""
        body = b""
        if request is not None:
            try:
                body = json.dumps(dump_request(request)).encode("utf-8")
            except (TypeError, ValueError) as e:
                raise CommandError(f"failed to marshal request: {e}") from e
            logger.debug(f"Request body: {body.decode('utf-8')}")

        headers = {"Content-Type": "application/json"}
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"

        try:
            response = await self._client.post(
                url, content=body, headers=headers, timeout=self.timeout
            )
        except httpx.HTTPError as e:
            raise CommandError(f"request failed: {e}") from e

        text = response.text
        logger.debug(f"Response body: {text}")

        if not 200 <= response.status_code < 300:
            raise HTTPStatusError(response.status_code, text)

        if response.status_code == 204 or not response.content:
            return None

        try:
            result = HttpResult.model_validate_json(response.content)
        except ValidationError as e:
            if response_model is None:
                # No result requested: the 2xx alone completes the call
                logger.warning(f"Ignoring undecodable response from {url}: {e}")
                return None
            raise CommandError(f"failed to decode response: {e}") from e

        if response_model is None:
            return result.data

        try:
            return response_model.model_validate({} if result.data is None else result.data)
        except ValidationError as e:
            raise CommandError(f"failed to decode response: {e}") from e

    async def close(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> HttpClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()
