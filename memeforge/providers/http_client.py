"""
Shared HTTP client helpers for provider adapters.

Provides consistent timeouts, retry behavior, and error mapping so provider
adapters raise the stable upstream error kinds without leaking stack traces.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any

import httpx

from memeforge.core.errors import (
    UnknownFailure,
    UpstreamAuthError,
    UpstreamRequestInvalid,
    UpstreamThrottled,
)
from memeforge.core.logging import current_request_id, get_logger

logger = get_logger(__name__)

RETRYABLE_ERRORS = (
    httpx.ConnectError,
    httpx.ReadTimeout,
    httpx.WriteTimeout,
    httpx.NetworkError,
    httpx.TimeoutException,
)


def create_http_client(
    base_url: str,
    timeout_seconds: float,
    headers: dict[str, str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """
    Build an AsyncClient with consistent timeout settings.

    Args:
        base_url: Base URL for the provider.
        timeout_seconds: Timeout applied to connect, read and write.
        headers: Default headers to include.
        transport: Optional transport (used by tests with MockTransport).
    """
    timeout = httpx.Timeout(timeout_seconds)
    return httpx.AsyncClient(
        base_url=base_url.rstrip("/"),
        timeout=timeout,
        headers=headers or {},
        transport=transport,
    )


def _with_request_id(kwargs: dict[str, Any]) -> dict[str, Any]:
    headers = dict(kwargs.pop("headers", None) or {})
    request_id = current_request_id()
    if request_id and "X-Request-ID" not in headers:
        headers["X-Request-ID"] = request_id
    kwargs["headers"] = headers
    return kwargs


async def send_with_retries(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    max_retries: int,
    stream: bool = False,
    **kwargs: Any,
) -> httpx.Response:
    """
    Send a request with lightweight retries on network errors.

    Retries never apply to HTTP status codes. With ``stream=True`` the
    response body is left unread and the caller owns ``aclose()``.
    """
    request = client.build_request(method, url, **_with_request_id(kwargs))

    for attempt in range(max_retries + 1):
        try:
            return await client.send(request, stream=stream)
        except RETRYABLE_ERRORS as exc:
            if attempt < max_retries:
                await asyncio.sleep(min(0.1 * (attempt + 1), 1.0))
                continue
            raise UnknownFailure(
                f"Provider unavailable: {exc}", details={"url": str(request.url)}
            ) from exc
        except httpx.HTTPError as exc:
            raise UnknownFailure(
                f"Provider request failed: {exc}", details={"url": str(request.url)}
            ) from exc

    raise UnknownFailure("Provider unavailable")  # pragma: no cover


def upstream_message(response: httpx.Response) -> str:
    """Pull the human-readable message out of an OpenAI-style error body."""
    try:
        payload = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return response.text[:300] if response.text else f"HTTP {response.status_code}"

    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str) and error:
            return error
        if payload.get("message"):
            return str(payload["message"])
    return f"HTTP {response.status_code}"


def raise_for_status(response: httpx.Response) -> None:
    """
    Map HTTP status codes to the upstream error kinds.

    Streaming callers must ``await response.aread()`` before calling this on
    an error response so the body is available.
    """
    status = response.status_code
    if status < 400:
        return

    message = upstream_message(response)
    details = {"status": status, "url": str(response.url)}
    logger.warning(
        "Provider HTTP error",
        data={"status": status, "url": str(response.url), "message": message},
    )

    if status in (401, 403):
        raise UpstreamAuthError(details=details)
    if status == 429:
        raise UpstreamThrottled(details=details)
    if status == 400:
        raise UpstreamRequestInvalid(message, details=details)
    raise UnknownFailure(message, details=details)


def parse_json(response: httpx.Response) -> dict[str, Any]:
    """Parse a provider JSON object body; anything else is an UnknownFailure."""
    snippet = response.text[:500] if response.text else ""
    try:
        payload = response.json()
    except json.JSONDecodeError as exc:
        raise UnknownFailure(
            "Provider returned an undecodable response",
            details={"body": snippet},
        ) from exc
    if not isinstance(payload, dict):
        raise UnknownFailure(
            "Provider returned an unexpected response", details={"body": snippet}
        )
    return payload
