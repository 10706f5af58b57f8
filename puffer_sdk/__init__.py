# puffer_sdk/__init__.py
# SPDX-License-Identifier: Apache-2.0

"""
Puffer SDK - Public API

Async client for turbopuffer-style vector namespaces. All public types,
compilers and errors are re-exported here for clean imports.
"""

from puffer_sdk._version import __version__
from puffer_sdk.client import PufferClient
from puffer_sdk.config import ClientConfig, REGIONS, region_url
from puffer_sdk.errors import (
    # Error types
    PufferError,
    ValidationError,
    MissingOption,
    TransportError,
    RequestTimeout,
    DecodeError,
    ServiceError,
    InvalidRequest,
    AuthError,
    NotFound,
    ResourceExhausted,
    Unavailable,
)
from puffer_sdk.filters import compile_filters
from puffer_sdk.metrics import LoggingMetrics, MetricsSink, NoopMetrics
from puffer_sdk.namespace import Namespace
from puffer_sdk.ranking import compile_rank, project_attributes
from puffer_sdk.results import merge_results, normalize, normalize_fanout
from puffer_sdk.rows import format_row, format_rows
from puffer_sdk.transport import HttpTransport, Transport
from puffer_sdk.types import (
    # Results and rows
    Result,
    WriteRow,

    # Rank specifications and filters
    RankMethod,
    VectorRank,
    TextRank,
    CustomRank,
    RawRank,
    RawFilter,

    # Context
    OperationContext,

    # Option specs
    QuerySpec,
    TextSearchSpec,
    SubQuery,
    MultiQuerySpec,
    HybridSearchSpec,
    WriteSpec,
    NamespaceConfigSpec,
)

__all__ = [
    "__version__",
    "PufferClient",
    "Namespace",
    "ClientConfig",
    "REGIONS",
    "region_url",
    "Transport",
    "HttpTransport",
    "MetricsSink",
    "NoopMetrics",
    "LoggingMetrics",
    "compile_filters",
    "compile_rank",
    "project_attributes",
    "format_row",
    "format_rows",
    "normalize",
    "normalize_fanout",
    "merge_results",
    "Result",
    "WriteRow",
    "RankMethod",
    "VectorRank",
    "TextRank",
    "CustomRank",
    "RawRank",
    "RawFilter",
    "OperationContext",
    "QuerySpec",
    "TextSearchSpec",
    "SubQuery",
    "MultiQuerySpec",
    "HybridSearchSpec",
    "WriteSpec",
    "NamespaceConfigSpec",
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
]
