# puffer_sdk/config.py
# SPDX-License-Identifier: Apache-2.0
"""
Client configuration.

`ClientConfig` is an immutable settings object. Build it directly, or
from the environment:

    TURBOPUFFER_API_KEY     API key (required)
    TURBOPUFFER_REGION      region name, default gcp-us-central1
    TURBOPUFFER_BASE_URL    full base URL; overrides the region
    TURBOPUFFER_TIMEOUT_S   per-request timeout in seconds, default 30

Explicit keyword arguments always win over environment values.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from puffer_sdk._version import __version__
from puffer_sdk.errors import ValidationError

API_KEY_ENV = "TURBOPUFFER_API_KEY"
REGION_ENV = "TURBOPUFFER_REGION"
BASE_URL_ENV = "TURBOPUFFER_BASE_URL"
TIMEOUT_ENV = "TURBOPUFFER_TIMEOUT_S"

DEFAULT_REGION = "gcp-us-central1"
DEFAULT_TIMEOUT_S = 30.0
DEFAULT_MAX_CONNECTIONS = 20

REGIONS: Dict[str, str] = {
    "gcp-us-central1": "https://gcp-us-central1.turbopuffer.com",
    "gcp-europe-west4": "https://gcp-europe-west4.turbopuffer.com",
    "gcp-asia-northeast1": "https://gcp-asia-northeast1.turbopuffer.com",
}


def region_url(region: str) -> str:
    """Resolve a region name (dash or underscore spelling) to its base URL."""
    name = (region or "").strip().lower().replace("_", "-")
    try:
        return REGIONS[name]
    except KeyError:
        raise ValidationError(
            f"unknown region '{region}'; expected one of {sorted(REGIONS)}",
            code="BAD_CONFIG",
            details={"region": region},
        ) from None


def _env_float(name: str, default: float, env: Mapping[str, str]) -> float:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValidationError(
            f"{name} must be a number, got {raw!r}",
            code="BAD_CONFIG",
            details={"env": name},
        ) from None
    if value <= 0:
        raise ValidationError(f"{name} must be positive", code="BAD_CONFIG", details={"env": name})
    return value


@dataclass(frozen=True)
class ClientConfig:
    """
    Settings for PufferClient and HttpTransport.

    Attributes:
        api_key: Bearer token sent with every request
        region: Region name used when base_url is not given
        base_url: Service root, e.g. "https://gcp-us-central1.turbopuffer.com"
        timeout_s: Per-request timeout enforced by the transport
        max_connections: Connection-pool size of the underlying HTTP client
        user_agent: Value of the User-Agent header
    """
    api_key: str
    region: str = DEFAULT_REGION
    base_url: Optional[str] = None
    timeout_s: float = DEFAULT_TIMEOUT_S
    max_connections: int = DEFAULT_MAX_CONNECTIONS
    user_agent: str = f"puffer-sdk/{__version__}"

    def __post_init__(self) -> None:
        if not isinstance(self.api_key, str) or not self.api_key.strip():
            raise ValidationError(
                f"API key is required. Pass api_key=... or set {API_KEY_ENV}",
                code="BAD_CONFIG",
            )
        if self.base_url is None:
            object.__setattr__(self, "base_url", region_url(self.region))
        object.__setattr__(self, "base_url", str(self.base_url).rstrip("/"))
        if self.timeout_s <= 0:
            raise ValidationError("timeout_s must be positive", code="BAD_CONFIG")
        if self.max_connections <= 0:
            raise ValidationError("max_connections must be positive", code="BAD_CONFIG")

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None, **overrides: Any) -> "ClientConfig":
        """Build a config from environment variables; keyword overrides win."""
        env = os.environ if env is None else env
        values: Dict[str, Any] = {
            "api_key": env.get(API_KEY_ENV, ""),
            "region": env.get(REGION_ENV) or DEFAULT_REGION,
            "base_url": env.get(BASE_URL_ENV) or None,
            "timeout_s": _env_float(TIMEOUT_ENV, DEFAULT_TIMEOUT_S, env),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def __repr__(self) -> str:
        return (
            f"ClientConfig(api_key='***', region={self.region!r}, base_url={self.base_url!r}, "
            f"timeout_s={self.timeout_s!r}, max_connections={self.max_connections!r})"
        )


__all__ = [
    "API_KEY_ENV",
    "REGION_ENV",
    "BASE_URL_ENV",
    "TIMEOUT_ENV",
    "DEFAULT_REGION",
    "REGIONS",
    "region_url",
    "ClientConfig",
]
