# puffer_sdk/client.py
# SPDX-License-Identifier: Apache-2.0
"""
Top-level client.

    async with PufferClient(api_key="...", region="gcp-us-central1") as client:
        ns = client.namespace("docs")
        hits = await ns.query(vector=[0.1, 0.2, 0.3], top_k=5)

Without an explicit config the client reads `ClientConfig.from_env()`.
All namespace handles created by one client share its transport (and
therefore its connection pool).
"""

from __future__ import annotations

import logging
import time
from typing import Any, List, Optional

from puffer_sdk.config import ClientConfig
from puffer_sdk.errors import PufferError
from puffer_sdk.metrics import MetricsSink, NoopMetrics
from puffer_sdk.namespace import NAMESPACES_PATH, Namespace
from puffer_sdk.transport import HttpTransport, Transport
from puffer_sdk.types import OperationContext

LOG = logging.getLogger(__name__)


def _namespace_names(body: Any) -> List[str]:
    if not isinstance(body, dict):
        return []
    entries = body.get("namespaces") or []
    names: List[str] = []
    for entry in entries:
        if isinstance(entry, str):
            names.append(entry)
        elif isinstance(entry, dict):
            name = entry.get("id") or entry.get("name")
            if name:
                names.append(str(name))
    return names


class PufferClient:
    """
    Entry point: holds the transport and hands out Namespace handles.

    Args:
        config: Connection settings; read from the environment when omitted
            (keyword overrides such as api_key=... are applied on top).
        transport: Custom Transport; when given, config is optional.
        metrics: MetricsSink shared by all namespaces.
    """

    _component = "client"

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        *,
        transport: Optional[Transport] = None,
        metrics: Optional[MetricsSink] = None,
        **overrides: Any,
    ) -> None:
        if transport is None:
            config = config or ClientConfig.from_env(**overrides)
            transport = HttpTransport(config)
        self.config = config
        self._transport = transport
        self._metrics: MetricsSink = metrics or NoopMetrics()

    def namespace(self, name: str) -> Namespace:
        """Return a handle bound to `name`. No request is made."""
        return Namespace(name, self._transport, metrics=self._metrics)

    async def list_namespaces(
        self,
        *,
        prefix: Optional[str] = None,
        ctx: Optional[OperationContext] = None,
    ) -> List[str]:
        """List namespace names visible to the API key."""
        params = {"prefix": prefix} if prefix else None
        t0 = time.monotonic()
        try:
            body = await self._transport.send("GET", NAMESPACES_PATH, params=params, ctx=ctx)
        except PufferError as e:
            self._metrics.observe(
                component=self._component,
                op="list_namespaces",
                ms=(time.monotonic() - t0) * 1000.0,
                ok=False,
                code=e.code or type(e).__name__,
            )
            raise
        self._metrics.observe(
            component=self._component,
            op="list_namespaces",
            ms=(time.monotonic() - t0) * 1000.0,
            ok=True,
        )
        names = _namespace_names(body)
        LOG.debug("listed %d namespaces", len(names))
        return names

    async def aclose(self) -> None:
        await self._transport.aclose()

    async def __aenter__(self) -> "PufferClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()


__all__ = ["PufferClient"]
