# puffer_sdk/errors.py
# SPDX-License-Identifier: Apache-2.0
"""
Normalized error taxonomy for the puffer SDK.

Every failure surfaced by the client is a `PufferError`. The four families
map onto the four ways a call can go wrong:

    ValidationError   local, raised before any network I/O
    TransportError    connection refused, timeout, TLS failure
    ServiceError      non-2xx response; carries `status` and the error `body`
    DecodeError       2xx response whose body is not valid JSON

Callers that implement their own retry loop should branch on `retryable`
(or on the class) rather than on messages. Validation errors are never
retryable; the SDK itself never retries anything.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional


class PufferError(Exception):
    """
    Base exception for all puffer SDK errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code (UPPER_SNAKE_CASE)
        retry_after_ms: Suggested delay before retry (None if not retryable)
        details: Additional context-specific details (JSON-serializable)
    """

    retryable: bool = False

    def __init__(
        self,
        message: str = "",
        *,
        code: Optional[str] = None,
        retry_after_ms: Optional[int] = None,
        details: Optional[Mapping[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.retry_after_ms = retry_after_ms
        self.details = dict(details or {})

    def asdict(self) -> Dict[str, Any]:
        """Convert error to dictionary for serialization and logging."""
        return {
            "error": type(self).__name__,
            "message": self.message,
            "code": self.code,
            "retryable": self.retryable,
            "retry_after_ms": self.retry_after_ms,
            "details": {k: self.details[k] for k in sorted(self.details)},
        }


# Subclasses set default `code` in UPPER_SNAKE_CASE where not explicitly provided.

class ValidationError(PufferError):
    """Request rejected locally (bad options, bad configuration)."""
    def __init__(self, message: str, **kwargs: Any):
        kwargs.setdefault("code", "BAD_REQUEST")
        super().__init__(message, **kwargs)


class MissingOption(ValidationError):
    """A required option was not supplied for the operation."""
    def __init__(self, option: str, *, operation: Optional[str] = None, **kwargs: Any):
        kwargs.setdefault("code", "MISSING_OPTION")
        details = dict(kwargs.pop("details", None) or {})
        details.setdefault("option", option)
        if operation:
            details.setdefault("operation", operation)
        where = f" for {operation}" if operation else ""
        super().__init__(f"missing required option '{option}'{where}", details=details, **kwargs)
        self.option = option


class TransportError(PufferError):
    """The request never produced an HTTP response (connect, TLS, read failures)."""
    retryable = True

    def __init__(self, message: str, **kwargs: Any):
        kwargs.setdefault("code", "TRANSIENT_NETWORK")
        super().__init__(message, **kwargs)


class RequestTimeout(TransportError):
    """The transport gave up waiting for the service."""
    def __init__(self, message: str, **kwargs: Any):
        kwargs.setdefault("code", "TIMEOUT")
        super().__init__(message, **kwargs)


class DecodeError(PufferError):
    """A response body was present but was not valid JSON."""
    def __init__(self, message: str, *, raw: str = "", **kwargs: Any):
        kwargs.setdefault("code", "MALFORMED_BODY")
        details = dict(kwargs.pop("details", None) or {})
        details.setdefault("raw", raw[:512])
        super().__init__(message, details=details, **kwargs)
        self.raw = raw


class ServiceError(PufferError):
    """
    The service answered with a non-2xx status.

    `body` is the decoded JSON error body, or the raw text when the body
    could not be decoded.
    """

    def __init__(self, message: str, *, status: int, body: Any = None, **kwargs: Any):
        kwargs.setdefault("code", "SERVICE_ERROR")
        details = dict(kwargs.pop("details", None) or {})
        details.setdefault("status", status)
        super().__init__(message, details=details, **kwargs)
        self.status = status
        self.body = body

    @property
    def retryable(self) -> bool:  # type: ignore[override]
        return self.status == 429 or self.status >= 500


class InvalidRequest(ServiceError):
    """The service rejected the request body (400 / 422)."""
    def __init__(self, message: str, **kwargs: Any):
        kwargs.setdefault("code", "INVALID_REQUEST")
        super().__init__(message, **kwargs)


class AuthError(ServiceError):
    """Authentication or authorization failed (401 / 403)."""
    def __init__(self, message: str, **kwargs: Any):
        kwargs.setdefault("code", "AUTH_ERROR")
        super().__init__(message, **kwargs)


class NotFound(ServiceError):
    """The namespace or resource does not exist (404)."""
    def __init__(self, message: str, **kwargs: Any):
        kwargs.setdefault("code", "NOT_FOUND")
        super().__init__(message, **kwargs)


class ResourceExhausted(ServiceError):
    """Rate limit or quota exceeded (429)."""
    def __init__(self, message: str, **kwargs: Any):
        kwargs.setdefault("code", "RESOURCE_EXHAUSTED")
        super().__init__(message, **kwargs)


class Unavailable(ServiceError):
    """Server-side failure (5xx)."""
    def __init__(self, message: str, **kwargs: Any):
        kwargs.setdefault("code", "UNAVAILABLE")
        super().__init__(message, **kwargs)


def _error_message(status: int, body: Any) -> str:
    if isinstance(body, Mapping):
        for key in ("error", "message", "detail"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return f"HTTP {status}: {value}"
    if isinstance(body, str) and body.strip():
        return f"HTTP {status}: {body.strip()[:200]}"
    return f"HTTP {status}"


def service_error_for(
    status: int,
    body: Any = None,
    *,
    retry_after_ms: Optional[int] = None,
    details: Optional[Mapping[str, Any]] = None,
) -> ServiceError:
    """Map an HTTP status onto the matching ServiceError subclass."""
    message = _error_message(status, body)
    kwargs: Dict[str, Any] = {"status": status, "body": body, "details": details}
    if status in (400, 422):
        return InvalidRequest(message, **kwargs)
    if status in (401, 403):
        return AuthError(message, **kwargs)
    if status == 404:
        return NotFound(message, **kwargs)
    if status == 429:
        return ResourceExhausted(message, retry_after_ms=retry_after_ms, **kwargs)
    if status >= 500:
        return Unavailable(message, retry_after_ms=retry_after_ms, **kwargs)
    return ServiceError(message, **kwargs)


__all__ = [
    "PufferError",
    "ValidationError",
    "MissingOption",
    "TransportError",
    "RequestTimeout",
    "DecodeError",
    "ServiceError",
    "InvalidRequest",
    "AuthError",
    "NotFound",
    "ResourceExhausted",
    "Unavailable",
    "service_error_for",
]
