# puffer_sdk/transport.py
# SPDX-License-Identifier: Apache-2.0
"""
HTTP transport.

The orchestrator only ever talks to a `Transport`: one awaited `send()` per
operation, returning the decoded JSON body or raising a `PufferError`.
`HttpTransport` is the production implementation on top of
`httpx.AsyncClient`; tests substitute their own doubles.

Failure mapping:

    httpx.TimeoutException        -> RequestTimeout
    other httpx.TransportError    -> TransportError
    non-2xx status                -> ServiceError subclass (decoded or raw body)
    2xx with non-JSON body        -> DecodeError

Timeouts and pooling belong to the httpx client. Nothing here retries.
"""

from __future__ import annotations

import json
import logging
import math
from typing import Any, Dict, Mapping, Optional, Protocol, runtime_checkable

import httpx

from puffer_sdk.config import ClientConfig
from puffer_sdk.errors import (
    DecodeError,
    RequestTimeout,
    TransportError,
    service_error_for,
)
from puffer_sdk.types import OperationContext

LOG = logging.getLogger(__name__)


@runtime_checkable
class Transport(Protocol):
    """Capability the orchestrator needs from an HTTP layer."""

    async def send(
        self,
        method: str,
        path: str,
        body: Optional[Mapping[str, Any]] = None,
        *,
        params: Optional[Mapping[str, str]] = None,
        ctx: Optional[OperationContext] = None,
    ) -> Any: ...

    async def aclose(self) -> None: ...


def encode(value: Any) -> str:
    """Serialize a request body."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def decode(text: str) -> Any:
    """
    Parse a response body.

    An empty body decodes to {}; anything else that is not JSON raises
    DecodeError.
    """
    if not text or not text.strip():
        return {}
    try:
        return json.loads(text)
    except ValueError as exc:
        raise DecodeError("response body is not valid JSON", raw=text) from exc


def _decode_error_body(text: str) -> Any:
    """Decode an error body, falling back to the raw text."""
    try:
        return decode(text)
    except DecodeError:
        return text


def _retry_after_ms(headers: httpx.Headers) -> Optional[int]:
    raw = headers.get("retry-after")
    if not raw:
        return None
    try:
        seconds = float(raw)
    except ValueError:
        return None
    ms = seconds * 1000
    if not math.isfinite(ms):
        return None
    return max(0, int(ms))


def _ctx_details(ctx: Optional[OperationContext], base: Dict[str, Any]) -> Dict[str, Any]:
    details = dict(base)
    if ctx is not None and ctx.request_id:
        details.setdefault("request_id", ctx.request_id)
    return details


class HttpTransport:
    """
    Transport backed by a shared `httpx.AsyncClient`.

    Args:
        config: Base URL, credentials, timeout and pool size.
        client: Pre-built AsyncClient (e.g. with custom mounts); when given,
            the caller owns its lifecycle and `aclose()` leaves it open.
    """

    def __init__(self, config: ClientConfig, *, client: Optional[httpx.AsyncClient] = None) -> None:
        self._config = config
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=config.timeout_s,
            limits=httpx.Limits(max_connections=config.max_connections),
        )

    @property
    def base_url(self) -> str:
        return self._config.base_url

    def _headers(self, ctx: Optional[OperationContext]) -> Dict[str, str]:
        headers = {
            "authorization": f"Bearer {self._config.api_key}",
            "content-type": "application/json",
            "accept": "application/json",
            "user-agent": self._config.user_agent,
        }
        if ctx is not None:
            headers.update(ctx.headers())
        return headers

    def _url(self, path: str) -> str:
        return f"{self._config.base_url}{path}"

    async def _request(
        self,
        method: str,
        path: str,
        content: Optional[str],
        params: Optional[Mapping[str, str]],
        ctx: Optional[OperationContext],
    ) -> httpx.Response:
        details = _ctx_details(ctx, {"method": method, "path": path})
        try:
            return await self._client.request(
                method,
                self._url(path),
                content=content.encode("utf-8") if content is not None else None,
                params=dict(params) if params else None,
                headers=self._headers(ctx),
            )
        except httpx.TimeoutException as exc:
            raise RequestTimeout(
                f"{method} {path} timed out",
                details={**details, "cause": type(exc).__name__},
            ) from exc
        except httpx.TransportError as exc:
            raise TransportError(
                f"{method} {path} failed: {exc}",
                details={**details, "cause": type(exc).__name__},
            ) from exc

    async def send(
        self,
        method: str,
        path: str,
        body: Optional[Mapping[str, Any]] = None,
        *,
        params: Optional[Mapping[str, str]] = None,
        ctx: Optional[OperationContext] = None,
    ) -> Any:
        method = method.upper()
        content = encode(body) if body is not None else None
        LOG.debug("%s %s", method, path)

        response = await self._request(method, path, content, params, ctx)
        text = response.text

        if not 200 <= response.status_code < 300:
            raise service_error_for(
                response.status_code,
                _decode_error_body(text),
                retry_after_ms=_retry_after_ms(response.headers),
                details=_ctx_details(ctx, {"method": method, "path": path}),
            )
        return decode(text)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


__all__ = ["Transport", "HttpTransport", "encode", "decode"]
