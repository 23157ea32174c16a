# Copyright 2025 Softwell S.r.l.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     https://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Encode engine: record fields → multi-valued query map.

Flow::

    encode(source)
        source is a QueryEncoder    → merge source.encode_query(), done
        source not a record         → UnsupportedTypeError
        for each visible field:
            excluded ("-")          → skip
            omitempty and zero      → skip
            value is QueryEncoder   → merge value.encode_query()
            scalar                  → add formatted value under key
            list                    → add one value per element, same key
            optional None           → nothing
            nested record           → recurse, same output map (no prefix)

Values are always appended, so several fields can share one key. Encode is
fail-fast: the first error propagates and no map is returned.

Example::

    from dataclasses import dataclass, field
    from genro_query import encode

    @dataclass
    class Filter:
        Field1: str = field(default="", metadata={"query": "-"})
        Field2: str = field(default="", metadata={"query": "field2,omitempty"})
        Tags: list[str] = field(default_factory=list)

    encode(Filter(Field1="x", Tags=["a", "b"]))
    # QueryValues({'tags': ['a', 'b']})
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Any

from .coercion import (
    CustomShape,
    OptionalShape,
    RecordShape,
    ScalarShape,
    SequenceShape,
    Shape,
    format_scalar,
)
from .config import CodecOptions
from .datastructures import QueryValues
from .exceptions import CoercionError, UnsupportedTypeError
from .tags import record_fields
from .types import QueryEncoder, ScalarKind

__all__ = ["encode", "encode_query_string"]

logger = logging.getLogger("genro_query")


def encode(source: Any, *, options: CodecOptions | None = None) -> QueryValues:
    """
    Build a multi-valued map from a record.

    Args:
        source: A dataclass instance, or any QueryEncoder.
        options: Codec options (directive keys, separator).

    Returns:
        QueryValues with one list of strings per key.

    Raises:
        UnsupportedTypeError: If source is neither a record nor a QueryEncoder.
        CoercionError: If a field value cannot be represented.
        Exception: Anything raised by an ``encode_query`` implementation.
    """
    result = QueryValues()

    if _is_encoder(source):
        _merge_custom(result, source)
        return result

    if not dataclasses.is_dataclass(source) or isinstance(source, type):
        raise UnsupportedTypeError(type(source), "expected a dataclass instance")

    _encode_record(result, source, options)
    return result


def encode_query_string(source: Any, *, options: CodecOptions | None = None) -> str:
    """Encode ``source`` and serialize it as an URL-encoded query string."""
    return encode(source, options=options).to_query_string()


def _encode_record(result: QueryValues, record: Any, options: CodecOptions | None) -> None:
    for spec in record_fields(type(record), options):
        if spec.excluded:
            continue
        value = getattr(record, spec.attr)
        if spec.omitempty and _is_zero(value, spec.shape, options):
            continue
        _encode_value(result, spec.key, spec.attr, spec.shape, value, options)


def _encode_value(
    result: QueryValues,
    key: str,
    attr: str,
    shape: Shape,
    value: Any,
    options: CodecOptions | None,
) -> None:
    if _is_encoder(value):
        logger.debug("Delegating field %r to %s.encode_query", attr, type(value).__name__)
        _merge_custom(result, value)
    elif isinstance(shape, ScalarShape):
        result.add(key, _format(shape.kind, value, attr))
    elif isinstance(shape, SequenceShape):
        for item in value or ():
            result.add(key, _format(shape.element, item, attr))
    elif isinstance(shape, OptionalShape):
        if value is not None:
            _encode_value(result, key, attr, shape.inner, value, options)
    elif isinstance(shape, (RecordShape, CustomShape)):
        if value is not None and dataclasses.is_dataclass(value):
            _encode_record(result, value, options)
    # other types are not encoded


def _format(kind: ScalarKind, value: Any, attr: str) -> str:
    try:
        return format_scalar(kind, value)
    except CoercionError as exc:
        raise exc.with_field(attr) from exc


def _is_encoder(value: Any) -> bool:
    return value is not None and not isinstance(value, type) and isinstance(value, QueryEncoder)


def _merge_custom(result: QueryValues, encoder: Any) -> None:
    result.extend(QueryValues(encoder.encode_query()))


def _is_zero(value: Any, shape: Shape, options: CodecOptions | None) -> bool:
    if value is None:
        return True
    if isinstance(shape, OptionalShape):
        return False
    if isinstance(shape, (ScalarShape, SequenceShape)):
        return not value
    if isinstance(shape, (RecordShape, CustomShape)) and dataclasses.is_dataclass(value):
        return all(
            _is_zero(getattr(value, spec.attr), spec.shape, options)
            for spec in record_fields(type(value), options)
        )
    return False
