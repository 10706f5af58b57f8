# puffer_sdk/results.py
# SPDX-License-Identifier: Apache-2.0
"""
Result normalizer.

Over its lifetime the service has returned query rows under three
different field names. `ROW_FIELDS` lists them in the order they are
probed; this is a compatibility shim, not a union type, and older names
can be dropped once no deployed service version emits them.

Each raw row becomes a `Result` by reserved-key subtraction: `id`,
`dist` / `$dist` and `vector` are lifted out and every other field, known
or not, is an attribute.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from puffer_sdk.types import Result

LOG = logging.getLogger(__name__)

ROW_FIELDS = ("rows", "vectors", "data")
"""Row-bearing response fields, highest priority first."""

FANOUT_FIELD = "results"
"""Multi-query responses carry one entry per submitted query here."""

DISTANCE_FIELDS = ("dist", "$dist")
RESERVED_RESULT_KEYS = frozenset(("id", "vector", *DISTANCE_FIELDS))


def extract_rows(body: Any) -> Optional[List[Any]]:
    """Return the first list-typed row field of `body`, or None."""
    if not isinstance(body, Mapping):
        return None
    for name in ROW_FIELDS:
        rows = body.get(name)
        if isinstance(rows, list):
            return rows
    return None


def to_result(row: Mapping[str, Any]) -> Result:
    """Build a Result from one raw row."""
    distance = row.get("dist")
    if distance is None:
        distance = row.get("$dist")

    attributes: Optional[Dict[str, Any]] = {
        k: v for k, v in row.items() if k not in RESERVED_RESULT_KEYS
    }
    if not attributes:
        attributes = None

    return Result(
        id=row.get("id"),
        distance=distance,
        vector=row.get("vector"),
        attributes=attributes,
    )


def to_results(rows: Iterable[Any]) -> List[Result]:
    results: List[Result] = []
    for row in rows:
        if not isinstance(row, Mapping):
            LOG.debug("skipping non-object row of type %s", type(row).__name__)
            continue
        results.append(to_result(row))
    return results


def normalize(body: Any) -> List[Result]:
    """
    Convert a decoded query response into Results, in response order.

    A body without any recognised row field yields an empty list; write
    responses and empty successes legitimately carry no rows.
    """
    rows = extract_rows(body)
    if rows is None:
        return []
    return to_results(rows)


def normalize_fanout(body: Any) -> List[List[Result]]:
    """
    Split a multi-query response into one Result list per submitted query.

    Entries of `results` may be row-bearing objects or bare row lists. A
    body without `results` is treated as a single row set.
    """
    if isinstance(body, Mapping) and isinstance(body.get(FANOUT_FIELD), list):
        sets: List[List[Result]] = []
        for entry in body[FANOUT_FIELD]:
            if isinstance(entry, list):
                sets.append(to_results(entry))
            else:
                sets.append(normalize(entry))
        return sets
    return [normalize(body)]


def merge_results(result_sets: Sequence[Sequence[Result]]) -> List[Result]:
    """
    Flatten per-query result sets and drop repeated ids.

    The first occurrence of an id, in submission order, is kept. Rows without
    an id cannot be matched up and are all kept. This is a union of hits,
    not a fused ranking.
    """
    seen = set()
    merged: List[Result] = []
    for results in result_sets:
        for result in results:
            if result.id is None:
                merged.append(result)
                continue
            if result.id in seen:
                continue
            seen.add(result.id)
            merged.append(result)
    return merged


__all__ = [
    "ROW_FIELDS",
    "FANOUT_FIELD",
    "RESERVED_RESULT_KEYS",
    "extract_rows",
    "to_result",
    "to_results",
    "normalize",
    "normalize_fanout",
    "merge_results",
]
