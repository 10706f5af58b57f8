# puffer_sdk/rows.py
# SPDX-License-Identifier: Apache-2.0
"""
Write row formatter.

The service wants every upserted row flat:

    {"id": "doc1", "vector": [0.1, 0.2], "text": "...", "category": "doc"}

Callers may instead nest attributes:

    {"id": "doc1", "vector": [0.1, 0.2], "attributes": {"text": "..."}}

Exactly one shape is honoured per row. If an `attributes` field is present
(under any key spelling) it wins and flattened siblings are ignored;
otherwise every non-reserved sibling key is an attribute.

In both shapes the canonical `id` and `vector` come from the row itself.
An attribute literally named `id` or `vector` inside `attributes` is
dropped with a warning rather than allowed to shadow the real field.
Rows missing `id` or `vector` are sent without them; required-ness is the
service's call.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping

from puffer_sdk.keys import as_mapping, lookup, without

LOG = logging.getLogger(__name__)

ID = "id"
VECTOR = "vector"
ATTRIBUTES = "attributes"

RESERVED_ROW_KEYS = (ID, VECTOR, ATTRIBUTES)


def format_row(row: Any) -> Dict[str, Any]:
    """Flatten one WriteRow or mapping into its wire shape."""
    record = as_mapping(row)

    out: Dict[str, Any] = {}
    row_id = lookup(record, ID)
    if row_id is not None:
        out[ID] = row_id
    vector = lookup(record, VECTOR)
    if vector is not None:
        out[VECTOR] = list(vector) if isinstance(vector, tuple) else vector

    nested = lookup(record, ATTRIBUTES)
    if nested is not None:
        nested_map: Mapping[Any, Any] = as_mapping(nested)
        attributes = without(nested_map, (ID, VECTOR))
        if len(attributes) != len(nested_map):
            LOG.warning(
                "row %r: ignoring reserved keys inside 'attributes' (id/vector come from the row)",
                row_id,
            )
    else:
        attributes = without(record, RESERVED_ROW_KEYS)

    for name, value in attributes.items():
        out.setdefault(name, value)
    return out


def format_rows(rows: Iterable[Any]) -> List[Dict[str, Any]]:
    """Format a batch of rows, preserving order."""
    return [format_row(row) for row in rows]


__all__ = ["RESERVED_ROW_KEYS", "format_row", "format_rows"]
