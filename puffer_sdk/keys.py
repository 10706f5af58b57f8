# puffer_sdk/keys.py
# SPDX-License-Identifier: Apache-2.0
"""
Canonical key normalization.

Callers hand us mappings whose keys may be spelled as plain strings, as
bytes, or as enum members (the usual Python stand-in for symbolic keys).
The write-row formatter, the filter compiler and multi-query entry parsing
all go through the helpers here so that every spelling of `id` is the same
`id` everywhere. Response rows need none of this: decoded JSON only ever
has string keys.
"""

from __future__ import annotations

import dataclasses
from enum import Enum
from typing import Any, Dict, Iterable, Mapping


def canonical_key(key: Any) -> str:
    """
    Stringify a key the same way everywhere.

    Enum members map to their value when it is a string, else to their name;
    bytes are decoded as UTF-8; numbers become decimal text.
    """
    if isinstance(key, Enum):
        value = key.value
        return value if isinstance(value, str) else key.name
    if isinstance(key, str):
        return key
    if isinstance(key, (bytes, bytearray)):
        return bytes(key).decode("utf-8")
    return str(key)


def as_mapping(obj: Any) -> Mapping[Any, Any]:
    """Support both dict-style and dataclass/attribute-style records."""
    if isinstance(obj, Mapping):
        return obj
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: getattr(obj, f.name) for f in dataclasses.fields(obj)}
    if hasattr(obj, "__dict__"):
        return {k: v for k, v in vars(obj).items() if not k.startswith("_")}
    raise TypeError(f"expected a mapping or record object, got {type(obj).__name__}")


def lookup(record: Mapping[Any, Any], name: str, default: Any = None) -> Any:
    """
    Fetch `name` from `record` under any of its key spellings.

    The plain string spelling wins when several spellings are present.
    A present key whose value is None counts as absent.
    """
    value = record.get(name)
    if value is not None:
        return value
    for key, candidate in record.items():
        if candidate is not None and not isinstance(key, str) and canonical_key(key) == name:
            return candidate
    return default


def without(record: Mapping[Any, Any], reserved: Iterable[str]) -> Dict[str, Any]:
    """Copy `record` with canonical keys, dropping every spelling of `reserved`."""
    drop = frozenset(reserved)
    out: Dict[str, Any] = {}
    for key, value in record.items():
        name = canonical_key(key)
        if name in drop:
            continue
        out[name] = value
    return out


__all__ = ["canonical_key", "as_mapping", "lookup", "without"]
