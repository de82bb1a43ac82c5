"""Thin async HTTP transport shared by the collectors and the LLM clients."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from solscout.errors import ApiError, TransportError

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "solscout/0.1.0"


def _error_detail(response: httpx.Response) -> str:
    detail = response.text.strip()
    try:
        body = response.json()
        if isinstance(body, dict):
            if isinstance(body.get("error"), dict):
                detail = body["error"].get("message") or body["error"].get("code") or detail
            elif body.get("error"):
                detail = str(body["error"])
            elif body.get("message"):
                detail = str(body["message"])
    except ValueError:
        pass
    if len(detail) > 400:
        detail = detail[:400]
    return detail


def raise_for_status_with_context(response: httpx.Response) -> None:
    """Raise ``ApiError`` carrying the provider's own error message."""
    if response.is_success:
        return
    detail = _error_detail(response)
    raise ApiError(
        f"Request failed ({response.status_code}) at {response.request.url}: {detail}",
        status_code=response.status_code,
        url=str(response.request.url),
    )


class HttpClient:
    """Async HTTP client with a fixed user agent and timeout."""

    def __init__(
        self,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            timeout=timeout,
            headers={"User-Agent": user_agent},
            follow_redirects=True,
            transport=transport,
        )

    async def __aenter__(self) -> HttpClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def _send(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        params: dict[str, Any] | None = None,
        content: str | None = None,
    ) -> httpx.Response:
        try:
            response = await self._client.request(
                method, url, headers=headers, params=params, content=content
            )
        except httpx.HTTPError as exc:
            raise TransportError(f"{method} {url} failed: {exc}") from exc
        raise_for_status_with_context(response)
        return response

    async def get_text(self, url: str, headers: dict[str, str] | None = None) -> str:
        response = await self._send("GET", url, headers=headers)
        return response.text

    async def get_json(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        response = await self._send("GET", url, headers=headers, params=params)
        try:
            return response.json()
        except ValueError as exc:
            raise ApiError(f"Invalid JSON from {url}: {exc}", url=url) from exc

    async def post_json_raw(
        self,
        url: str,
        body: str,
        headers: dict[str, str] | None = None,
    ) -> str:
        """POST an already-serialized JSON body and return the raw response text."""
        merged = {"Content-Type": "application/json"}
        if headers:
            merged.update(headers)
        logger.debug("POST %s (%d bytes)", url, len(body))
        response = await self._send("POST", url, headers=merged, content=body)
        return response.text

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()
