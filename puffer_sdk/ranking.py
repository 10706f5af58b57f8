# puffer_sdk/ranking.py
# SPDX-License-Identifier: Apache-2.0
"""
Rank specification compiler and attribute projection.

A rank specification on the wire is a 3-element array
`[subject, method, value]`:

    ["vector", "ANN", [0.1, 0.2, 0.3]]      similarity search
    ["content", "BM25", "machine learning"] full-text relevance

`compile_rank` accepts the typed variants from `puffer_sdk.types` as well as
loose triples whose subject / method may be enum members. Methods it does
not recognise are forwarded verbatim, and anything that is not a triple is
assumed to be raw wire syntax and forwarded unchanged.
"""

from __future__ import annotations

from typing import Any, List, Sequence

from puffer_sdk.keys import canonical_key
from puffer_sdk.types import (
    VECTOR_FIELD,
    AttributeProjection,
    CustomRank,
    RankMethod,
    RawRank,
    TextRank,
    VectorRank,
)


def _triple(subject: Any, method: Any, value: Any) -> List[Any]:
    subject_s = canonical_key(subject)
    method_s = canonical_key(method)
    if subject_s == VECTOR_FIELD and method_s.upper() == RankMethod.ANN.value:
        return [VECTOR_FIELD, RankMethod.ANN.value, value]
    if method_s.upper() == RankMethod.BM25.value:
        return [subject_s, RankMethod.BM25.value, value]
    return [subject_s, method_s, value]


def compile_rank(spec: Any) -> Any:
    """Translate a rank specification into its wire tuple."""
    if isinstance(spec, VectorRank):
        return [VECTOR_FIELD, RankMethod.ANN.value, list(spec.vector)]
    if isinstance(spec, TextRank):
        return [canonical_key(spec.attribute), RankMethod.BM25.value, spec.query]
    if isinstance(spec, CustomRank):
        return _triple(spec.subject, spec.method, spec.value)
    if isinstance(spec, RawRank):
        return spec.value
    if isinstance(spec, (list, tuple)) and len(spec) == 3:
        subject, method, value = spec
        return _triple(subject, method, value)
    return spec


def _unique(items: Sequence[Any]) -> List[Any]:
    seen = set()
    out: List[Any] = []
    for item in items:
        if item in seen:
            continue
        seen.add(item)
        out.append(item)
    return out


def project_attributes(
    include_attributes: AttributeProjection,
    include_vectors: bool = False,
) -> AttributeProjection:
    """
    Fold the include_vectors toggle into the include_attributes projection.

    The wire protocol has no separate "include vector" flag; vectors are
    requested by naming `vector` in the projection.

        True,  True  -> ["vector"]
        True,  False -> True
        L,     True  -> unique(["vector"] + L)
        L,     False -> L
    """
    if include_vectors:
        if include_attributes is True:
            return [VECTOR_FIELD]
        if include_attributes is False or include_attributes is None:
            return [VECTOR_FIELD]
        if isinstance(include_attributes, (list, tuple)):
            return _unique([VECTOR_FIELD, *include_attributes])
        return include_attributes
    if isinstance(include_attributes, tuple):
        return list(include_attributes)
    return include_attributes


__all__ = ["compile_rank", "project_attributes"]
