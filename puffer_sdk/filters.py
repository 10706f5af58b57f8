# puffer_sdk/filters.py
# SPDX-License-Identifier: Apache-2.0
"""
Filter compiler: mapping-style filter expressions → prefix-operator arrays.

The service expects filters as nested arrays:

    ["category", "Eq", "doc"]
    ["And", [["category", "Eq", "doc"], ["year", "Gte", 2020]]]

Callers usually think in mappings instead, so this module accepts:

- Simple equality:        {"category": "doc"}
- Operator mappings:      {"year": {"$gte": 2020, "$lt": 2025}}
- Logical combinators:    {"$and": [...]} / {"$or": [...]}
- Negation:               {"$not": {"category": "spam"}}

and passes anything that is not a mapping (a list already in wire shape,
or an explicit `RawFilter`) through untouched. An empty or missing
expression compiles to None, meaning "omit the field"; it never becomes an
empty array.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from puffer_sdk.errors import ValidationError
from puffer_sdk.keys import canonical_key
from puffer_sdk.types import FilterSpec, RawFilter

EQ = "Eq"
AND = "And"
OR = "Or"
NOT = "Not"

OPERATORS: Dict[str, str] = {
    "$eq": "Eq",
    "$ne": "NotEq",
    "$gt": "Gt",
    "$gte": "Gte",
    "$lt": "Lt",
    "$lte": "Lte",
    "$in": "In",
    "$nin": "NotIn",
    "$glob": "Glob",
    "$iglob": "IGlob",
    "$contains_any": "ContainsAny",
}
"""Operator-mapping keys with a known wire spelling."""

_COMBINATORS: Dict[str, str] = {"$and": AND, "$or": OR}


def _is_operator_mapping(value: Any) -> bool:
    return (
        isinstance(value, Mapping)
        and bool(value)
        and all(canonical_key(k).startswith("$") for k in value)
    )


def _wire_operator(op: str) -> str:
    known = OPERATORS.get(op.lower())
    if known is not None:
        return known
    # Unknown to this client; forward it for the service to judge.
    return op[1:]


def _conditions(expr: Mapping[Any, Any]) -> List[Any]:
    conditions: List[Any] = []
    for raw_key, value in expr.items():
        key = canonical_key(raw_key)

        if key.lower() == "$not":
            if not isinstance(value, Mapping):
                raise ValidationError(
                    f"'{key}' expects a filter expression mapping",
                    details={"operator": key},
                )
            child = compile_filters(value)
            if child is not None:
                conditions.append([NOT, child])
            continue

        combinator = _COMBINATORS.get(key.lower())
        if combinator is not None:
            if not isinstance(value, (list, tuple)):
                raise ValidationError(
                    f"'{key}' expects a list of filter expressions",
                    details={"operator": key},
                )
            children = [c for c in (compile_filters(v) for v in value) if c is not None]
            if len(children) == 1:
                conditions.append(children[0])
            elif children:
                conditions.append([combinator, children])
            continue

        if _is_operator_mapping(value):
            for op, operand in value.items():
                conditions.append([key, _wire_operator(canonical_key(op)), operand])
            continue

        conditions.append([key, EQ, value])
    return conditions


def compile_filters(expr: FilterSpec) -> Optional[Any]:
    """
    Compile a filter expression to its wire form.

    Returns None for None / empty input. A single condition is returned
    unwrapped; several are combined as ["And", [...]] in iteration order.
    """
    if expr is None:
        return None
    if isinstance(expr, RawFilter):
        return expr.value
    if isinstance(expr, Mapping):
        if not expr:
            return None
        conditions = _conditions(expr)
        if not conditions:
            return None
        if len(conditions) == 1:
            return conditions[0]
        return [AND, conditions]
    if isinstance(expr, (list, tuple)) and not expr:
        return None
    return expr


__all__ = ["OPERATORS", "compile_filters"]
