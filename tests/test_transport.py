# SPDX-License-Identifier: Apache-2.0
"""
HttpTransport: headers, encoding and failure mapping, with httpx mocked
by respx.
"""

import json

import httpx
import pytest
import respx

from puffer_sdk.errors import (
    AuthError,
    DecodeError,
    InvalidRequest,
    NotFound,
    RequestTimeout,
    ResourceExhausted,
    TransportError,
    Unavailable,
)
from puffer_sdk.transport import HttpTransport, Transport, decode, encode
from puffer_sdk.types import OperationContext
from tests.conftest import TEST_API_KEY, TEST_BASE_URL

pytestmark = pytest.mark.asyncio

QUERY_URL = f"{TEST_BASE_URL}/v2/namespaces/docs/query"


async def test_transport_satisfies_protocol(config):
    transport = HttpTransport(config)
    try:
        assert isinstance(transport, Transport)
        assert transport.base_url == TEST_BASE_URL
    finally:
        await transport.aclose()


@respx.mock
async def test_transport_sends_json_with_auth_headers(config):
    route = respx.post(QUERY_URL).mock(return_value=httpx.Response(200, json={"rows": []}))
    transport = HttpTransport(config)
    ctx = OperationContext(request_id="req-42", traceparent="00-abc-def-01")

    body = await transport.send(
        "post", "/v2/namespaces/docs/query", {"top_k": 1, "q": "ü"}, ctx=ctx
    )
    await transport.aclose()

    assert body == {"rows": []}
    request = route.calls.last.request
    assert request.method == "POST"
    assert request.headers["authorization"] == f"Bearer {TEST_API_KEY}"
    assert request.headers["content-type"] == "application/json"
    assert request.headers["accept"] == "application/json"
    assert request.headers["user-agent"].startswith("puffer-sdk/")
    assert request.headers["x-request-id"] == "req-42"
    assert request.headers["traceparent"] == "00-abc-def-01"
    assert json.loads(request.content) == {"top_k": 1, "q": "ü"}


@respx.mock
async def test_transport_query_params_and_empty_get(config):
    route = respx.get(f"{TEST_BASE_URL}/v2/namespaces").mock(return_value=httpx.Response(200, text=""))
    transport = HttpTransport(config)

    assert await transport.send("GET", "/v2/namespaces", params={"prefix": "do"}) == {}
    await transport.aclose()

    request = route.calls.last.request
    assert request.url.params["prefix"] == "do"
    assert request.content == b""
    assert "x-request-id" not in request.headers


@respx.mock
async def test_transport_malformed_success_body(config):
    respx.post(QUERY_URL).mock(return_value=httpx.Response(200, text="<html>oops</html>"))
    transport = HttpTransport(config)

    with pytest.raises(DecodeError) as exc_info:
        await transport.send("POST", "/v2/namespaces/docs/query", {})

    err = exc_info.value
    assert err.code == "MALFORMED_BODY"
    assert err.raw == "<html>oops</html>"
    assert err.details["raw"] == "<html>oops</html>"
    assert err.retryable is False


@pytest.mark.parametrize(
    "status, error_cls, code",
    [
        (400, InvalidRequest, "INVALID_REQUEST"),
        (401, AuthError, "AUTH_ERROR"),
        (403, AuthError, "AUTH_ERROR"),
        (404, NotFound, "NOT_FOUND"),
        (422, InvalidRequest, "INVALID_REQUEST"),
        (500, Unavailable, "UNAVAILABLE"),
    ],
)
@respx.mock
async def test_transport_status_mapping(config, status, error_cls, code):
    respx.post(QUERY_URL).mock(return_value=httpx.Response(status, json={"error": "nope"}))
    transport = HttpTransport(config)
    ctx = OperationContext(request_id="req-7")

    with pytest.raises(error_cls) as exc_info:
        await transport.send("POST", "/v2/namespaces/docs/query", {}, ctx=ctx)

    err = exc_info.value
    assert err.code == code
    assert err.status == status
    assert err.body == {"error": "nope"}
    assert str(err) == f"HTTP {status}: nope"
    assert err.details["status"] == status
    assert err.details["path"] == "/v2/namespaces/docs/query"
    assert err.details["request_id"] == "req-7"
    assert err.retryable is (status >= 500)


@respx.mock
async def test_transport_rate_limit_honours_retry_after(config):
    respx.post(QUERY_URL).mock(
        return_value=httpx.Response(429, headers={"Retry-After": "2"}, json={"message": "slow down"})
    )
    transport = HttpTransport(config)

    with pytest.raises(ResourceExhausted) as exc_info:
        await transport.send("POST", "/v2/namespaces/docs/query", {})

    err = exc_info.value
    assert err.retry_after_ms == 2000
    assert err.retryable is True
    assert "slow down" in str(err)


@pytest.mark.parametrize("header", ["1e400", "1e306", "inf", "nan", "soon"])
@respx.mock
async def test_transport_rate_limit_unusable_retry_after_ignored(config, header):
    respx.post(QUERY_URL).mock(
        return_value=httpx.Response(429, headers={"Retry-After": header}, json={"error": "slow down"})
    )
    transport = HttpTransport(config)

    with pytest.raises(ResourceExhausted) as exc_info:
        await transport.send("POST", "/v2/namespaces/docs/query", {})

    err = exc_info.value
    assert err.status == 429
    assert err.retry_after_ms is None
    assert err.retryable is True


@respx.mock
async def test_transport_error_body_kept_raw_when_not_json(config):
    respx.post(QUERY_URL).mock(return_value=httpx.Response(502, text="Bad Gateway"))
    transport = HttpTransport(config)

    with pytest.raises(Unavailable) as exc_info:
        await transport.send("POST", "/v2/namespaces/docs/query", {})

    assert exc_info.value.body == "Bad Gateway"
    assert str(exc_info.value) == "HTTP 502: Bad Gateway"


@respx.mock
async def test_transport_connect_failure(config):
    respx.post(QUERY_URL).mock(side_effect=httpx.ConnectError("refused"))
    transport = HttpTransport(config)

    with pytest.raises(TransportError) as exc_info:
        await transport.send("POST", "/v2/namespaces/docs/query", {})

    err = exc_info.value
    assert err.code == "TRANSIENT_NETWORK"
    assert err.retryable is True
    assert err.details["cause"] == "ConnectError"
    assert isinstance(err.__cause__, httpx.ConnectError)


@respx.mock
async def test_transport_timeout(config):
    respx.post(QUERY_URL).mock(side_effect=httpx.ReadTimeout("slow"))
    transport = HttpTransport(config)

    with pytest.raises(RequestTimeout) as exc_info:
        await transport.send("POST", "/v2/namespaces/docs/query", {})

    assert exc_info.value.code == "TIMEOUT"
    assert isinstance(exc_info.value, TransportError)


async def test_transport_leaves_caller_client_open(config):
    client = httpx.AsyncClient()
    transport = HttpTransport(config, client=client)
    await transport.aclose()
    assert client.is_closed is False
    await client.aclose()

    owned = HttpTransport(config)
    await owned.aclose()
    assert owned._client.is_closed is True


async def test_codec_helpers():
    assert encode({"a": [1, 2]}) == '{"a":[1,2]}'
    assert decode("") == {}
    assert decode("  ") == {}
    assert decode('{"rows": []}') == {"rows": []}
    with pytest.raises(DecodeError):
        decode("{not json")
