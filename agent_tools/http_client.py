"""Base HTTP client shared by the GitHub and CoinGecko clients.

Wraps an ``httpx.AsyncClient`` and turns every failure into one of the
``agent_tools.errors`` kinds so callers never see raw ``httpx`` exceptions.
"""

import logging
from typing import Any

import httpx
from tenacity import AsyncRetrying, retry_if_exception, stop_after_attempt, wait_exponential

from agent_tools.errors import NetworkError, RemoteRejectedError
from agent_tools.logging_utils import log_event, log_operation

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


class ApiClient:
    """Thin request wrapper with error classification and optional GET retries."""

    service_name = "API"

    def __init__(
        self,
        base_url: str,
        *,
        headers: dict[str, str] | None = None,
        timeout: float = 30.0,
        retry_attempts: int = 1,
        retry_backoff: float = 1.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/") + "/"
        self.retry_attempts = max(1, retry_attempts)
        self.backoff = retry_backoff
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()

    def _should_retry_exception(self, exc: BaseException) -> bool:
        """Determine whether a request exception should trigger a retry."""

        if isinstance(exc, httpx.HTTPStatusError):
            return exc.response.status_code in RETRYABLE_STATUS_CODES
        return isinstance(exc, httpx.RequestError)

    async def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        # Only idempotent reads are retried; a repeated POST could create twice.
        attempts = self.retry_attempts if method.upper() == "GET" else 1
        retrying = AsyncRetrying(
            stop=stop_after_attempt(attempts),
            wait=wait_exponential(multiplier=self.backoff, min=1, max=30),
            retry=retry_if_exception(self._should_retry_exception),
            reraise=True,
        )

        async for attempt in retrying:
            with attempt:
                response = await self.client.request(method, path, **kwargs)
                response.raise_for_status()
        return response

    async def _request(
        self,
        method: str,
        path: str,
        *,
        event: str,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> Any:
        """Perform a request and return the decoded JSON body."""

        kwargs: dict[str, Any] = {}
        if params is not None:
            kwargs["params"] = params
        if json is not None:
            kwargs["json"] = json

        with log_operation(logger, event=event, query_params=params):
            try:
                response = await self._send(method, path, **kwargs)
            except httpx.HTTPStatusError as exc:
                raise self._rejected(exc.response) from exc
            except httpx.TimeoutException as exc:
                raise NetworkError(f"{self.service_name} request timed out: {exc}") from exc
            except httpx.RequestError as exc:
                raise NetworkError(f"{self.service_name} is unreachable: {exc}") from exc

            try:
                return response.json()
            except ValueError as exc:
                raise NetworkError(
                    f"{self.service_name} returned a malformed response"
                ) from exc

    def _rejected(self, response: httpx.Response) -> RemoteRejectedError:
        """Build the error for an HTTP error status."""

        payload: Any = None
        try:
            payload = response.json()
        except ValueError:
            pass

        message = self._error_message(response, payload if isinstance(payload, dict) else {})
        details = payload.get("errors") if isinstance(payload, dict) else None

        log_event(
            logger,
            f"{self.service_name} rejected request: {message}",
            level=logging.WARNING,
            status_code=response.status_code,
            event="api_rejected",
        )
        return RemoteRejectedError(message, status_code=response.status_code, details=details)

    def _error_message(self, response: httpx.Response, payload: dict[str, Any]) -> str:
        message = payload.get("message")
        if isinstance(message, str) and message:
            return message
        return response.reason_phrase or f"HTTP {response.status_code}"
