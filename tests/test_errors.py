# SPDX-License-Identifier: Apache-2.0
"""
Error taxonomy: codes, retry hints and serialization.
"""

import json

import pytest

from puffer_sdk.errors import (
    AuthError,
    DecodeError,
    InvalidRequest,
    MissingOption,
    NotFound,
    PufferError,
    RequestTimeout,
    ResourceExhausted,
    ServiceError,
    TransportError,
    Unavailable,
    ValidationError,
    service_error_for,
)

pytestmark = pytest.mark.asyncio


@pytest.mark.parametrize(
    "status, error_cls",
    [
        (400, InvalidRequest),
        (401, AuthError),
        (403, AuthError),
        (404, NotFound),
        (409, ServiceError),
        (422, InvalidRequest),
        (429, ResourceExhausted),
        (500, Unavailable),
        (503, Unavailable),
    ],
)
async def test_errors_status_mapping(status, error_cls):
    err = service_error_for(status, {"message": "boom"})
    assert type(err) is error_cls
    assert err.status == status
    assert str(err) == f"HTTP {status}: boom"


async def test_errors_retryable_flags():
    assert service_error_for(429).retryable is True
    assert service_error_for(500).retryable is True
    assert service_error_for(400).retryable is False
    assert TransportError("down").retryable is True
    assert RequestTimeout("slow").retryable is True
    assert ValidationError("bad").retryable is False
    assert DecodeError("junk").retryable is False


async def test_errors_retry_after_only_for_retryable_statuses():
    assert service_error_for(429, retry_after_ms=100).retry_after_ms == 100
    assert service_error_for(503, retry_after_ms=100).retry_after_ms == 100
    assert service_error_for(400, retry_after_ms=100).retry_after_ms is None


async def test_errors_message_fallbacks():
    assert str(service_error_for(500)) == "HTTP 500"
    assert str(service_error_for(500, "")) == "HTTP 500"
    assert str(service_error_for(500, {"detail": "db down"})) == "HTTP 500: db down"
    assert str(service_error_for(500, {"error": {"nested": True}})) == "HTTP 500"


async def test_errors_missing_option_details():
    err = MissingOption("vector", operation="query")

    assert isinstance(err, ValidationError)
    assert err.code == "MISSING_OPTION"
    assert err.option == "vector"
    assert str(err) == "missing required option 'vector' for query"
    assert err.details == {"option": "vector", "operation": "query"}


async def test_errors_decode_error_truncates_raw():
    err = DecodeError("bad body", raw="x" * 2000)
    assert len(err.details["raw"]) == 512
    assert len(err.raw) == 2000


async def test_errors_asdict_is_json_serializable():
    err = service_error_for(429, {"error": "slow"}, retry_after_ms=250, details={"path": "/v2/namespaces"})
    data = err.asdict()

    assert data == {
        "error": "ResourceExhausted",
        "message": "HTTP 429: slow",
        "code": "RESOURCE_EXHAUSTED",
        "retryable": True,
        "retry_after_ms": 250,
        "details": {"path": "/v2/namespaces", "status": 429},
    }
    json.dumps(data)


async def test_errors_all_share_base_class():
    for cls in (ValidationError, TransportError, DecodeError):
        assert issubclass(cls, PufferError)
    assert issubclass(NotFound, ServiceError)
    assert PufferError("x").code is None
