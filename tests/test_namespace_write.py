# SPDX-License-Identifier: Apache-2.0
"""
Namespace writes and lifecycle: upsert / delete payloads, schema
configuration, stats and namespace deletion.
"""

import pytest

from puffer_sdk.errors import MissingOption, ResourceExhausted, service_error_for
from puffer_sdk.types import NamespaceConfigSpec, WriteRow, WriteSpec
from tests.utils.schema_registry import WRITE, assert_valid

pytestmark = pytest.mark.asyncio

SCHEMA = {"body": {"type": "string", "full_text_search": True}}


async def test_write_full_body(ns, transport):
    transport.queue({"status": "OK"})
    response = await ns.write(
        upsert_rows=[
            {"id": "a", "vector": [0.1, 0.2], "attributes": {"body": "hello"}},
            {"id": "b", "vector": [0.3, 0.4], "body": "world"},
        ],
        deletes=["old"],
        delete_by_filter={"stale": True},
        distance_metric="cosine_distance",
        schema=SCHEMA,
    )

    call = transport.last
    assert call.method == "POST"
    assert call.path == "/v2/namespaces/docs"
    assert call.body == {
        "upsert_rows": [
            {"id": "a", "vector": [0.1, 0.2], "body": "hello"},
            {"id": "b", "vector": [0.3, 0.4], "body": "world"},
        ],
        "deletes": ["old"],
        "delete_by_filter": ["stale", "Eq", True],
        "distance_metric": "cosine_distance",
        "schema": SCHEMA,
    }
    assert_valid(WRITE, call.body)
    assert response == {"status": "OK"}


async def test_write_empty_collections_omitted(ns, transport):
    await ns.write(WriteSpec(upsert_rows=[], deletes=["x"], delete_by_filter={}))
    assert transport.last.body == {"deletes": ["x"]}
    assert_valid(WRITE, transport.last.body)


async def test_write_with_nothing_to_do_raises_before_transport(ns, transport):
    with pytest.raises(MissingOption) as exc_info:
        await ns.write(upsert_rows=[], deletes=[])

    err = exc_info.value
    assert err.option == "upsert_rows"
    assert "deletes" in err.details["alternatives"]
    assert transport.calls == []


async def test_upsert_formats_rows(ns, transport, metrics):
    await ns.upsert(
        [WriteRow(id=1, vector=[1.0], attributes={"k": "v"}), {"id": 2, "vector": (2.0,), "k": "w"}],
        distance_metric="euclidean_squared",
    )

    body = transport.last.body
    assert body == {
        "upsert_rows": [{"id": 1, "vector": [1.0], "k": "v"}, {"id": 2, "vector": [2.0], "k": "w"}],
        "distance_metric": "euclidean_squared",
    }
    assert_valid(WRITE, body)
    assert metrics.observations[-1]["op"] == "upsert"
    assert metrics.counters[-1] == {"component": "namespace", "name": "rows_upserted", "value": 2}


async def test_upsert_requires_rows(ns, transport):
    with pytest.raises(MissingOption):
        await ns.upsert([])
    assert transport.calls == []


async def test_upsert_rate_limited_error_propagates(ns, transport):
    transport.queue(service_error_for(429, {"error": "slow down"}, retry_after_ms=1500))

    with pytest.raises(ResourceExhausted) as exc_info:
        await ns.upsert([{"id": "a", "vector": [1.0]}])

    err = exc_info.value
    assert err.retryable is True
    assert err.retry_after_ms == 1500
    assert len(transport.calls) == 1


async def test_delete_vectors(ns, transport):
    await ns.delete_vectors(["a", "b"])
    assert transport.last.body == {"deletes": ["a", "b"]}

    with pytest.raises(MissingOption) as exc_info:
        await ns.delete_vectors([])
    assert exc_info.value.option == "deletes"
    assert len(transport.calls) == 1


async def test_configure_schema_and_metric(ns, transport):
    await ns.configure(schema=SCHEMA, distance_metric="cosine_distance")
    assert transport.last.body == {"distance_metric": "cosine_distance", "schema": SCHEMA}
    assert_valid(WRITE, transport.last.body)


async def test_configure_from_spec_object(ns, transport):
    await ns.configure(NamespaceConfigSpec(distance_metric="euclidean_squared"))
    assert transport.last.body == {"distance_metric": "euclidean_squared"}
    assert transport.last.path == "/v2/namespaces/docs"


async def test_configure_requires_something(ns, transport):
    with pytest.raises(MissingOption) as exc_info:
        await ns.configure()
    assert exc_info.value.option == "schema"
    assert transport.calls == []


async def test_write_non_object_response_becomes_empty_dict(ns, transport):
    transport.queue(["unexpected"])
    assert await ns.delete_vectors(["a"]) == {}


async def test_stats(ns, transport):
    transport.queue({"approx_row_count": 3, "approx_logical_bytes": 120})
    stats = await ns.stats()

    assert transport.last.method == "GET"
    assert transport.last.path == "/v2/namespaces/docs/stats"
    assert transport.last.body is None
    assert stats["approx_row_count"] == 3


async def test_delete_namespace(ns, transport, metrics):
    transport.queue({"status": "ok"})
    assert await ns.delete() == {"status": "ok"}

    assert transport.last.method == "DELETE"
    assert transport.last.path == "/v2/namespaces/docs"
    assert metrics.observations[-1]["op"] == "delete"
