# puffer_sdk/metrics.py
# SPDX-License-Identifier: Apache-2.0
"""
Metrics interface (low-cardinality, never carries secrets or raw payloads).

The orchestrator reports one `observe` per operation and a handful of
counters. Plug in any object with the `MetricsSink` shape; the default is
`NoopMetrics`. `LoggingMetrics` is a drop-in sink for local debugging that
writes one structured log line per observation.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, Protocol

LOG = logging.getLogger(__name__)


class MetricsSink(Protocol):
    """Protocol for metrics collection implementations."""

    def observe(
        self,
        *,
        component: str,
        op: str,
        ms: float,
        ok: bool,
        code: str = "OK",
        extra: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """Record operation timing and status."""
        ...

    def counter(
        self,
        *,
        component: str,
        name: str,
        value: int = 1,
        extra: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """Increment a counter metric."""
        ...


class NoopMetrics:
    """No-operation metrics sink for testing or when metrics are disabled."""
    def observe(self, **_: Any) -> None: ...
    def counter(self, **_: Any) -> None: ...


class LoggingMetrics:
    """
    Metrics sink that emits observations through `logging`.

    Args:
        logger: Target logger (default: this module's logger).
        level: Log level for observations.
        max_extra_fields: Extra keys beyond this count are dropped.
    """

    def __init__(
        self,
        *,
        logger: Optional[logging.Logger] = None,
        level: int = logging.INFO,
        max_extra_fields: int = 10,
    ) -> None:
        self._log = logger or LOG
        self._level = level
        self._max_extra_fields = max_extra_fields

    def _extra(self, extra: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        if not extra:
            return {}
        keys = sorted(extra)[: self._max_extra_fields]
        return {k: extra[k] for k in keys}

    def observe(
        self,
        *,
        component: str,
        op: str,
        ms: float,
        ok: bool,
        code: str = "OK",
        extra: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self._log.log(
            self._level,
            "%s.%s ok=%s code=%s ms=%.1f %s",
            component, op, ok, code, ms, self._extra(extra),
        )

    def counter(
        self,
        *,
        component: str,
        name: str,
        value: int = 1,
        extra: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self._log.log(self._level, "%s.%s +%d %s", component, name, value, self._extra(extra))


__all__ = ["MetricsSink", "NoopMetrics", "LoggingMetrics"]
