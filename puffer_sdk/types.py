# puffer_sdk/types.py
# SPDX-License-Identifier: Apache-2.0
"""
Typed value objects for the puffer SDK.

Three groups live here:

- Results: `Result`, the canonical outcome of every query operation.
- Request building blocks: `WriteRow`, the rank-specification sum type
  (`VectorRank`, `TextRank`, `CustomRank`, `RawRank`) and `RawFilter`.
- Option specs: one frozen dataclass per operation (`QuerySpec`,
  `TextSearchSpec`, ...). These replace free-form keyword bags. Each spec's
  `from_options()` keeps the allow-listed field names and ignores anything
  else, so callers passing extra keys are not rejected.

Required options are typed `Optional` with a `None` default on purpose:
constructing a spec never fails, and the orchestrator reports a missing
value as `MissingOption` instead of a `TypeError`.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, TypeVar, Union

LOG = logging.getLogger(__name__)

VECTOR_FIELD = "vector"
"""Rank subject naming the namespace's vector column."""

AttributeProjection = Union[bool, List[str]]
"""Wire value of `include_attributes`: True for all, or a list of names."""


class RankMethod(str, Enum):
    """Built-in ranking methods understood by the service."""
    ANN = "ANN"
    BM25 = "BM25"


# =============================================================================
# Results
# =============================================================================

@dataclass(frozen=True)
class Result:
    """
    A single row returned by a query.

    Attributes:
        id: Opaque row identifier, exactly as returned by the service
        distance: Similarity / relevance score (None when not returned)
        vector: Row vector, only when requested and returned
        attributes: Every non-reserved field of the row, or None when the row
            carried no such field (never an empty dict)
    """
    id: Union[str, int]
    distance: Optional[float] = None
    vector: Optional[List[float]] = None
    attributes: Optional[Dict[str, Any]] = None

    def get(self, name: str, default: Any = None) -> Any:
        """Read one attribute without checking for None first."""
        if self.attributes is None:
            return default
        return self.attributes.get(name, default)


# =============================================================================
# Write rows
# =============================================================================

@dataclass(frozen=True)
class WriteRow:
    """
    A row to upsert.

    Plain mappings are accepted everywhere a WriteRow is; they may carry their
    attributes either under `attributes` or as flattened sibling keys.
    """
    id: Optional[Union[str, int]] = None
    vector: Optional[List[float]] = None
    attributes: Optional[Mapping[str, Any]] = None


# =============================================================================
# Rank specifications (sum type)
# =============================================================================

@dataclass(frozen=True)
class VectorRank:
    """Order by approximate nearest-neighbour similarity to `vector`."""
    vector: Sequence[float]


@dataclass(frozen=True)
class TextRank:
    """Order by BM25 relevance of `attribute` to `query`."""
    attribute: str
    query: str


@dataclass(frozen=True)
class CustomRank:
    """Any (subject, method, value) triple; method is passed through verbatim."""
    subject: Any
    method: Any
    value: Any


@dataclass(frozen=True)
class RawRank:
    """Already in wire syntax; sent as-is."""
    value: Any


RankSpec = Union[VectorRank, TextRank, CustomRank, RawRank, Sequence[Any]]


@dataclass(frozen=True)
class RawFilter:
    """A filter tree already in wire syntax; sent as-is."""
    value: Any


FilterSpec = Union[Mapping[Any, Any], RawFilter, Sequence[Any], None]


# =============================================================================
# Context
# =============================================================================

@dataclass(frozen=True)
class OperationContext:
    """
    Per-call correlation data.

    Attributes:
        request_id: Correlation ID, forwarded as `x-request-id`
        traceparent: W3C Trace Context header, forwarded verbatim
        attrs: Free-form attributes for middleware; never sent on the wire
    """
    request_id: Optional[str] = None
    traceparent: Optional[str] = None
    attrs: Mapping[str, Any] = field(default_factory=dict)

    def headers(self) -> Dict[str, str]:
        out: Dict[str, str] = {}
        if self.request_id:
            out["x-request-id"] = self.request_id
        if self.traceparent:
            out["traceparent"] = self.traceparent
        return out


# =============================================================================
# Option specs
# =============================================================================

S = TypeVar("S", bound="_OptionSpec")


class _OptionSpec:
    """Mixin giving dataclass specs an allow-listed constructor."""

    @classmethod
    def allowed_options(cls) -> Tuple[str, ...]:
        return tuple(f.name for f in dataclasses.fields(cls))  # type: ignore[arg-type]

    @classmethod
    def from_options(cls: type[S], options: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> S:
        merged: Dict[str, Any] = dict(options or {})
        merged.update(kwargs)
        allowed = cls.allowed_options()
        picked = {k: v for k, v in merged.items() if k in allowed}
        ignored = sorted(k for k in merged if k not in allowed)
        if ignored:
            LOG.debug("%s ignoring unknown options: %s", cls.__name__, ", ".join(ignored))
        return cls(**picked)


@dataclass(frozen=True)
class QuerySpec(_OptionSpec):
    """
    Options for a single similarity query.

    Attributes:
        vector: Query vector (required)
        top_k: Number of rows to return
        include_attributes: True for all attributes, or a list of names
        include_vectors: Also return each row's vector
        filters: Filter expression (see `compile_filters`)
        distance_metric: Override the namespace metric, e.g. "cosine_distance"
    """
    vector: Optional[Sequence[float]] = None
    top_k: int = 10
    include_attributes: AttributeProjection = True
    include_vectors: bool = False
    filters: FilterSpec = None
    distance_metric: Optional[str] = None


@dataclass(frozen=True)
class TextSearchSpec(_OptionSpec):
    """Options for a BM25 full-text query; `query` and `attribute` are required."""
    query: Optional[str] = None
    attribute: Optional[str] = None
    top_k: int = 10
    include_attributes: AttributeProjection = True
    include_vectors: bool = False
    filters: FilterSpec = None


@dataclass(frozen=True)
class SubQuery(_OptionSpec):
    """
    One entry of a multi-query.

    Unset fields inherit from the enclosing MultiQuerySpec.
    """
    rank_by: Optional[RankSpec] = None
    top_k: Optional[int] = None
    include_attributes: Optional[AttributeProjection] = None
    filters: FilterSpec = None


@dataclass(frozen=True)
class MultiQuerySpec(_OptionSpec):
    """
    Options for a fan-out query.

    `queries` accepts SubQuery objects, mappings with the same keys, or bare
    rank specifications.
    """
    queries: Sequence[Any] = ()
    top_k: int = 10
    include_attributes: AttributeProjection = True
    include_vectors: bool = False
    filters: FilterSpec = None


@dataclass(frozen=True)
class HybridSearchSpec(_OptionSpec):
    """Vector + text search sharing top_k, filters and projection."""
    vector: Optional[Sequence[float]] = None
    text_query: Optional[str] = None
    text_attribute: Optional[str] = None
    top_k: int = 10
    include_attributes: AttributeProjection = True
    include_vectors: bool = False
    filters: FilterSpec = None


@dataclass(frozen=True)
class WriteSpec(_OptionSpec):
    """
    Options for a namespace write.

    Attributes:
        upsert_rows: Rows to insert or replace
        deletes: Row IDs to delete
        delete_by_filter: Filter selecting rows to delete
        distance_metric: e.g. "cosine_distance", "euclidean_squared"
        schema: Attribute schema, e.g. {"text": {"type": "string", "full_text_search": True}}
    """
    upsert_rows: Sequence[Any] = ()
    deletes: Sequence[Union[str, int]] = ()
    delete_by_filter: FilterSpec = None
    distance_metric: Optional[str] = None
    schema: Optional[Mapping[str, Any]] = None


@dataclass(frozen=True)
class NamespaceConfigSpec(_OptionSpec):
    """Namespace-level settings written by `Namespace.configure`."""
    schema: Optional[Mapping[str, Any]] = None
    distance_metric: Optional[str] = None


__all__ = [
    "VECTOR_FIELD",
    "AttributeProjection",
    "RankMethod",
    "Result",
    "WriteRow",
    "VectorRank",
    "TextRank",
    "CustomRank",
    "RawRank",
    "RankSpec",
    "RawFilter",
    "FilterSpec",
    "OperationContext",
    "QuerySpec",
    "TextSearchSpec",
    "SubQuery",
    "MultiQuerySpec",
    "HybridSearchSpec",
    "WriteSpec",
    "NamespaceConfigSpec",
]
