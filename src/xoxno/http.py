"""Low-level HTTP client for the MultiversX gateway (sync + async)."""

from __future__ import annotations

from typing import Any

import httpx

from xoxno.config import DEFAULT_GATEWAY_URL, DEFAULT_TIMEOUT
from xoxno.exceptions import GatewayError


def _build_url(base: str, path: str) -> str:
    return base.rstrip("/") + path


def _handle_error(resp: httpx.Response) -> None:
    if resp.is_success:
        return
    try:
        body = resp.json()
        msg = (body.get("error") or resp.text) if isinstance(body, dict) else resp.text
        code = body.get("code") if isinstance(body, dict) else None
    except ValueError:
        msg = resp.text
        code = None
    raise GatewayError(msg, status=resp.status_code, code=code)


def _unwrap(resp: httpx.Response) -> Any:
    """Return the ``data`` member of a gateway envelope.

    The gateway answers ``{"data": ..., "error": "", "code": "successful"}``;
    an ``error`` inside a 2xx envelope is still a failure.
    """
    _handle_error(resp)
    body = resp.json()
    if isinstance(body, dict) and "data" in body:
        if body.get("error"):
            raise GatewayError(body["error"], status=resp.status_code, code=body.get("code"))
        return body["data"]
    return body


# ---------------------------------------------------------------------------
# Synchronous client
# ---------------------------------------------------------------------------

class HttpClient:
    """Synchronous HTTP client wrapping ``httpx.Client``."""

    def __init__(
        self,
        base_url: str = DEFAULT_GATEWAY_URL,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        _headers: dict[str, str] = {"Content-Type": "application/json"}
        if headers:
            _headers.update(headers)
        self._client = httpx.Client(timeout=timeout, headers=_headers)

    def post(self, path: str, body: dict[str, Any] | None = None) -> Any:
        url = _build_url(self.base_url, path)
        resp = self._client.post(url, json=body)
        return _unwrap(resp)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "HttpClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()


# ---------------------------------------------------------------------------
# Asynchronous client
# ---------------------------------------------------------------------------

class AsyncHttpClient:
    """Asynchronous HTTP client wrapping ``httpx.AsyncClient``."""

    def __init__(
        self,
        base_url: str = DEFAULT_GATEWAY_URL,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        _headers: dict[str, str] = {"Content-Type": "application/json"}
        if headers:
            _headers.update(headers)
        self._client = httpx.AsyncClient(timeout=timeout, headers=_headers)

    async def post(self, path: str, body: dict[str, Any] | None = None) -> Any:
        url = _build_url(self.base_url, path)
        resp = await self._client.post(url, json=body)
        return _unwrap(resp)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "AsyncHttpClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()
