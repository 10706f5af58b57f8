# puffer_sdk/namespace.py
# SPDX-License-Identifier: Apache-2.0
"""
Namespace operations: the query orchestrator.

Every public method is one pass of the same pipeline:

    1. resolve options into a typed spec (unknown keys ignored)
    2. validate required options       -> MissingOption, before any I/O
    3. compile the request body        (filters, rank specs, rows, projection)
    4. send it through the Transport   -> errors propagate unchanged
    5. normalize the response          -> list[Result] for queries

There is no retry, no caching and no state carried between calls; a
Namespace is just a name bound to a transport.

Multi-query
-----------
`multi_query` submits several rank specifications in one request. The
service answers with one row set per query; these are flattened in
submission order and deduplicated by id, keeping the first occurrence.
`hybrid_search` is a two-query multi-query (vector rank, then BM25 rank)
sharing top_k, filters and projection.
"""

from __future__ import annotations

import dataclasses
import logging
import time
from typing import Any, Dict, List, Mapping, Optional, Sequence, Type, TypeVar, Union
from urllib.parse import quote

from puffer_sdk.errors import MissingOption, PufferError, ValidationError
from puffer_sdk.filters import compile_filters
from puffer_sdk.keys import canonical_key
from puffer_sdk.metrics import MetricsSink, NoopMetrics
from puffer_sdk.ranking import compile_rank, project_attributes
from puffer_sdk.results import merge_results, normalize, normalize_fanout
from puffer_sdk.rows import format_rows
from puffer_sdk.transport import Transport
from puffer_sdk.types import (
    AttributeProjection,
    FilterSpec,
    HybridSearchSpec,
    MultiQuerySpec,
    NamespaceConfigSpec,
    OperationContext,
    QuerySpec,
    Result,
    SubQuery,
    TextRank,
    TextSearchSpec,
    VectorRank,
    WriteSpec,
)

LOG = logging.getLogger(__name__)

S = TypeVar("S")

NAMESPACES_PATH = "/v2/namespaces"
MULTI_QUERY_PARAMS = {"stainless_overload": "multiQuery"}


def _resolve(cls: Type[S], spec: Optional[S], options: Mapping[str, Any]) -> S:
    """Turn (spec, **options) into one spec; options override spec fields."""
    if spec is None:
        return cls.from_options(options)  # type: ignore[attr-defined]
    if not isinstance(spec, cls):
        raise ValidationError(
            f"expected {cls.__name__}, got {type(spec).__name__}",
            details={"expected": cls.__name__},
        )
    if not options:
        return spec
    allowed = cls.allowed_options()  # type: ignore[attr-defined]
    return dataclasses.replace(spec, **{k: v for k, v in options.items() if k in allowed})


def _require_top_k(top_k: Any, *, option: str = "top_k") -> int:
    if isinstance(top_k, bool) or not isinstance(top_k, int) or top_k <= 0:
        raise ValidationError(f"{option} must be a positive integer", details={option: repr(top_k)})
    return top_k


def _query_body(
    rank_by: Any,
    top_k: int,
    include_attributes: AttributeProjection,
    include_vectors: bool,
    filters: FilterSpec,
) -> Dict[str, Any]:
    body: Dict[str, Any] = {
        "rank_by": compile_rank(rank_by),
        "top_k": top_k,
        "include_attributes": project_attributes(include_attributes, include_vectors),
    }
    compiled = compile_filters(filters)
    if compiled is not None:
        body["filters"] = compiled
    return body


def _as_sub_query(entry: Any) -> SubQuery:
    if isinstance(entry, SubQuery):
        return entry
    if isinstance(entry, Mapping):
        return SubQuery.from_options({canonical_key(k): v for k, v in entry.items()})
    return SubQuery(rank_by=entry)


class Namespace:
    """
    Handle on one remote namespace.

    Example:
        ns = client.namespace("docs")
        await ns.upsert([{"id": "a", "vector": [0.1, 0.2], "text": "hello"}])
        results = await ns.query(vector=[0.1, 0.2], top_k=5, filters={"text": "hello"})
    """

    _component = "namespace"

    def __init__(
        self,
        name: str,
        transport: Transport,
        *,
        metrics: Optional[MetricsSink] = None,
    ) -> None:
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("namespace must be a non-empty string", code="BAD_CONFIG")
        self.name = name
        self._transport = transport
        self._metrics: MetricsSink = metrics or NoopMetrics()
        self._path = f"{NAMESPACES_PATH}/{quote(name, safe='')}"

    def __repr__(self) -> str:
        return f"Namespace({self.name!r})"

    # --- instrumentation ---

    def _record(self, op: str, t0: float, ok: bool, *, code: str = "OK", **extra: Any) -> None:
        try:
            ms = (time.monotonic() - t0) * 1000.0
            self._metrics.observe(
                component=self._component,
                op=op,
                ms=ms,
                ok=ok,
                code=code,
                extra=extra or None,
            )
        except Exception:  # noqa: BLE001
            # Never let metrics recording break the operation
            LOG.debug("metrics sink failed for %s", op, exc_info=True)

    async def _send(
        self,
        op: str,
        method: str,
        path: str,
        body: Optional[Mapping[str, Any]] = None,
        *,
        params: Optional[Mapping[str, str]] = None,
        ctx: Optional[OperationContext] = None,
    ) -> Any:
        t0 = time.monotonic()
        try:
            response = await self._transport.send(method, path, body, params=params, ctx=ctx)
        except PufferError as e:
            code = e.code or type(e).__name__
            LOG.debug("%s on %s failed: %s", op, self.name, code)
            self._record(op, t0, False, code=code)
            raise
        except Exception:
            self._record(op, t0, False, code="UNKNOWN")
            raise
        self._record(op, t0, True)
        return response

    # --- queries ---

    async def query(
        self,
        spec: Optional[QuerySpec] = None,
        *,
        ctx: Optional[OperationContext] = None,
        **options: Any,
    ) -> List[Result]:
        """
        Similarity search by query vector.

        Options (see QuerySpec): vector (required), top_k=10,
        include_attributes=True, include_vectors=False, filters,
        distance_metric.
        """
        spec = _resolve(QuerySpec, spec, options)
        if spec.vector is None or len(spec.vector) == 0:
            raise MissingOption("vector", operation="query")
        top_k = _require_top_k(spec.top_k)

        body = _query_body(
            VectorRank(spec.vector), top_k, spec.include_attributes, spec.include_vectors, spec.filters
        )
        if spec.distance_metric is not None:
            body["distance_metric"] = spec.distance_metric

        response = await self._send("query", "POST", f"{self._path}/query", body, ctx=ctx)
        results = normalize(response)
        self._metrics.counter(component=self._component, name="rows_returned", value=len(results))
        return results

    async def text_search(
        self,
        spec: Optional[TextSearchSpec] = None,
        *,
        ctx: Optional[OperationContext] = None,
        **options: Any,
    ) -> List[Result]:
        """
        Full-text (BM25) search over one attribute.

        Options (see TextSearchSpec): query and attribute (required), top_k=10,
        include_attributes=True, include_vectors=False, filters.
        """
        spec = _resolve(TextSearchSpec, spec, options)
        if not spec.query:
            raise MissingOption("query", operation="text_search")
        if not spec.attribute:
            raise MissingOption("attribute", operation="text_search")
        top_k = _require_top_k(spec.top_k)

        body = _query_body(
            TextRank(spec.attribute, spec.query),
            top_k,
            spec.include_attributes,
            spec.include_vectors,
            spec.filters,
        )
        response = await self._send("text_search", "POST", f"{self._path}/query", body, ctx=ctx)
        return normalize(response)

    async def multi_query(
        self,
        spec: Optional[MultiQuerySpec] = None,
        *,
        ctx: Optional[OperationContext] = None,
        **options: Any,
    ) -> List[Result]:
        """
        Run several rank specifications in one request and union the hits.

        `queries` entries may be SubQuery objects, mappings with SubQuery keys
        (rank_by, top_k, include_attributes, filters) or bare rank specs.
        Unset per-query fields inherit the shared top_k, include_attributes
        and filters.
        """
        spec = _resolve(MultiQuerySpec, spec, options)
        return await self._multi_query("multi_query", spec, ctx)

    async def _multi_query(
        self,
        op: str,
        spec: MultiQuerySpec,
        ctx: Optional[OperationContext],
    ) -> List[Result]:
        if not spec.queries:
            raise MissingOption("queries", operation=op)
        top_k = _require_top_k(spec.top_k)

        per_query: List[Dict[str, Any]] = []
        for entry in spec.queries:
            sub = _as_sub_query(entry)
            if sub.rank_by is None:
                raise MissingOption("rank_by", operation=op)
            per_query.append(
                _query_body(
                    sub.rank_by,
                    _require_top_k(sub.top_k) if sub.top_k is not None else top_k,
                    sub.include_attributes if sub.include_attributes is not None else spec.include_attributes,
                    spec.include_vectors,
                    sub.filters if sub.filters is not None else spec.filters,
                )
            )

        body = {"queries": per_query, "top_k": top_k}
        response = await self._send(
            op, "POST", f"{self._path}/query", body, params=MULTI_QUERY_PARAMS, ctx=ctx
        )
        result_sets = normalize_fanout(response)
        merged = merge_results(result_sets)
        LOG.debug(
            "%s on %s: %d row sets, %d unique rows",
            op, self.name, len(result_sets), len(merged),
        )
        return merged

    async def hybrid_search(
        self,
        spec: Optional[HybridSearchSpec] = None,
        *,
        ctx: Optional[OperationContext] = None,
        **options: Any,
    ) -> List[Result]:
        """
        Vector + BM25 search as one multi-query.

        Options (see HybridSearchSpec): vector, text_query, text_attribute,
        top_k=10, include_attributes=True, include_vectors=False, filters.
        At least the vector or the text_query/text_attribute pair is required.
        """
        spec = _resolve(HybridSearchSpec, spec, options)

        queries: List[SubQuery] = []
        if spec.vector is not None and len(spec.vector) > 0:
            queries.append(SubQuery(rank_by=VectorRank(spec.vector)))
        if spec.text_query or spec.text_attribute:
            if not spec.text_query:
                raise MissingOption("text_query", operation="hybrid_search")
            if not spec.text_attribute:
                raise MissingOption("text_attribute", operation="hybrid_search")
            queries.append(SubQuery(rank_by=TextRank(spec.text_attribute, spec.text_query)))
        if not queries:
            raise MissingOption(
                "vector",
                operation="hybrid_search",
                details={"alternatives": ["text_query", "text_attribute"]},
            )

        multi = MultiQuerySpec(
            queries=queries,
            top_k=spec.top_k,
            include_attributes=spec.include_attributes,
            include_vectors=spec.include_vectors,
            filters=spec.filters,
        )
        return await self._multi_query("hybrid_search", multi, ctx)

    async def get_vectors(
        self,
        ids: Sequence[Union[str, int]],
        *,
        include_attributes: AttributeProjection = True,
        include_vectors: bool = False,
        ctx: Optional[OperationContext] = None,
    ) -> List[Result]:
        """Fetch rows by id, ordered by id."""
        if not ids:
            raise MissingOption("ids", operation="get_vectors")
        body: Dict[str, Any] = {
            "rank_by": ["id", "asc"],
            "top_k": len(ids),
            "filters": ["id", "In", list(ids)],
            "include_attributes": project_attributes(include_attributes, include_vectors),
        }
        response = await self._send("get_vectors", "POST", f"{self._path}/query", body, ctx=ctx)
        return normalize(response)

    # --- writes ---

    async def write(
        self,
        spec: Optional[WriteSpec] = None,
        *,
        ctx: Optional[OperationContext] = None,
        **options: Any,
    ) -> Dict[str, Any]:
        """
        Upsert and/or delete rows, optionally setting schema and distance metric.

        Options (see WriteSpec): upsert_rows, deletes, delete_by_filter,
        distance_metric, schema. Returns the decoded service response.
        """
        spec = _resolve(WriteSpec, spec, options)
        return await self._write("write", spec, ctx)

    async def _write(self, op: str, spec: WriteSpec, ctx: Optional[OperationContext]) -> Dict[str, Any]:
        body: Dict[str, Any] = {}
        if spec.upsert_rows:
            body["upsert_rows"] = format_rows(spec.upsert_rows)
        if spec.deletes:
            body["deletes"] = list(spec.deletes)
        delete_filter = compile_filters(spec.delete_by_filter)
        if delete_filter is not None:
            body["delete_by_filter"] = delete_filter
        if spec.distance_metric is not None:
            body["distance_metric"] = spec.distance_metric
        if spec.schema is not None:
            body["schema"] = dict(spec.schema)

        if not body:
            raise MissingOption(
                "upsert_rows",
                operation=op,
                details={"alternatives": ["deletes", "delete_by_filter", "schema", "distance_metric"]},
            )

        response = await self._send(op, "POST", self._path, body, ctx=ctx)
        if "upsert_rows" in body:
            self._metrics.counter(
                component=self._component, name="rows_upserted", value=len(body["upsert_rows"])
            )
        return response if isinstance(response, dict) else {}

    async def upsert(
        self,
        rows: Sequence[Any],
        *,
        distance_metric: Optional[str] = None,
        schema: Optional[Mapping[str, Any]] = None,
        ctx: Optional[OperationContext] = None,
    ) -> Dict[str, Any]:
        """Insert or replace rows (WriteRow objects or mappings)."""
        if not rows:
            raise MissingOption("upsert_rows", operation="upsert")
        spec = WriteSpec(upsert_rows=rows, distance_metric=distance_metric, schema=schema)
        return await self._write("upsert", spec, ctx)

    async def delete_vectors(
        self,
        ids: Sequence[Union[str, int]],
        *,
        ctx: Optional[OperationContext] = None,
    ) -> Dict[str, Any]:
        """Delete rows by id."""
        if not ids:
            raise MissingOption("deletes", operation="delete_vectors")
        return await self._write("delete_vectors", WriteSpec(deletes=ids), ctx)

    async def configure(
        self,
        spec: Optional[NamespaceConfigSpec] = None,
        *,
        ctx: Optional[OperationContext] = None,
        **options: Any,
    ) -> Dict[str, Any]:
        """
        Set the attribute schema and/or distance metric.

        Namespaces are created implicitly by their first write; this is the
        write that creates one without rows.
        """
        spec = _resolve(NamespaceConfigSpec, spec, options)
        if spec.schema is None and spec.distance_metric is None:
            raise MissingOption("schema", operation="configure", details={"alternatives": ["distance_metric"]})
        write = WriteSpec(schema=spec.schema, distance_metric=spec.distance_metric)
        return await self._write("configure", write, ctx)

    # --- namespace lifecycle ---

    async def stats(self, *, ctx: Optional[OperationContext] = None) -> Dict[str, Any]:
        """Return the service's statistics for this namespace."""
        response = await self._send("stats", "GET", f"{self._path}/stats", ctx=ctx)
        return response if isinstance(response, dict) else {}

    async def delete(self, *, ctx: Optional[OperationContext] = None) -> Dict[str, Any]:
        """Delete the namespace and all of its rows."""
        response = await self._send("delete", "DELETE", self._path, ctx=ctx)
        return response if isinstance(response, dict) else {}


__all__ = ["Namespace", "NAMESPACES_PATH", "MULTI_QUERY_PARAMS"]
