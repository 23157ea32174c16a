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
Decode engine: multi-valued query map → record fields.

Flow::

    decode(values, target)
        values is None              → no-op
        target is a QueryDecoder    → target.decode_query(values), done
        target not a mutable record → UnsupportedTypeError
        for each visible field:
            custom decoder type     → field.decode_query(values)
            excluded ("-")          → skip
            values[key] or defaults → coerce by shape
            nothing to read         → skip (field untouched)
        any field failed            → DecodeError(field_errors)

A field is assigned only after its whole conversion succeeded, so a failing
field keeps its previous value. Fields are independent: one failure never
stops the walk.

Example::

    from dataclasses import dataclass, field
    from genro_query import decode
    from genro_query.types import UInt32

    @dataclass
    class Page:
        PageSize: UInt32 = field(default=0, metadata={"default": "25"})
        Numbers: list[int] = field(default_factory=list, metadata={"query": "otherName"})

    page = Page()
    decode({"otherName": ["25", "64"]}, page)
    page.PageSize   # 25
    page.Numbers    # [25, 64]
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Mapping
from typing import Any

from .coercion import (
    CustomShape,
    OptionalShape,
    ScalarShape,
    SequenceShape,
    Shape,
    parse_scalar,
)
from .config import CodecOptions
from .datastructures import QueryValues, query_values_from_scope
from .exceptions import CoercionError, DecodeError, UnsupportedTypeError
from .tags import FieldSpec, record_fields
from .types import QueryDecoder, ValueMap

__all__ = ["decode", "decode_query_string", "decode_scope"]

logger = logging.getLogger("genro_query")

# Marker for "shape not handled": the field is left untouched
_SKIP = object()


def decode(values: ValueMap | None, target: Any, *, options: CodecOptions | None = None) -> None:
    """
    Populate ``target`` from a multi-valued map.

    Args:
        values: Key to list of strings. None is a no-op.
        target: A non-frozen dataclass instance, or any QueryDecoder.
        options: Codec options (directive keys, separator).

    Raises:
        UnsupportedTypeError: If target is neither a mutable record nor a
            QueryDecoder.
        DecodeError: If one or more fields failed; the others are set.
        Exception: Anything raised by a top-level ``decode_query``.
    """
    if values is None:
        return
    if not isinstance(values, QueryValues):
        values = QueryValues(values)

    if not isinstance(target, type) and isinstance(target, QueryDecoder):
        logger.debug("Delegating decode to %s.decode_query", type(target).__name__)
        target.decode_query(values)
        return

    if not dataclasses.is_dataclass(target) or isinstance(target, type):
        raise UnsupportedTypeError(type(target), "expected a dataclass instance")
    if type(target).__dataclass_params__.frozen:  # type: ignore[attr-defined]
        raise UnsupportedTypeError(type(target), "frozen dataclass cannot be populated")

    field_errors: dict[str, Exception] = {}
    for spec in record_fields(type(target), options):
        if spec.excluded:
            continue
        current = getattr(target, spec.attr, None)
        custom = _custom_decoder_shape(spec.shape)
        if custom is not None or _is_decoder(current):
            try:
                _decode_custom(values, target, spec, current, custom)
            except Exception as exc:
                # errors raised by a field's own decode_query are collected as-is
                field_errors[spec.attr] = exc
            continue
        try:
            _decode_field(values, target, spec)
        except CoercionError as exc:
            field_errors[spec.attr] = exc.with_field(spec.attr)

    if field_errors:
        logger.debug("Decode of %s failed on %s", type(target).__name__, list(field_errors))
        raise DecodeError(field_errors)


def decode_query_string(
    query_string: bytes | str, target: Any, *, options: CodecOptions | None = None
) -> None:
    """Parse a raw query string (``a=1&b=2``) and decode it into ``target``."""
    decode(QueryValues(query_string), target, options=options)


def decode_scope(scope: Mapping[str, Any] | None, target: Any, *, options: CodecOptions | None = None) -> None:
    """
    Decode the query string of an ASGI scope into ``target``.

    Raises:
        UnsupportedTypeError: If scope is None.
    """
    if scope is None:
        raise UnsupportedTypeError(type(None), "missing ASGI scope")
    decode(query_values_from_scope(scope), target, options=options)


def _decode_custom(
    values: QueryValues, target: Any, spec: FieldSpec, current: Any, custom: CustomShape | None
) -> None:
    instance = current if current is not None or custom is None else custom.cls()
    logger.debug("Delegating field %r to %s.decode_query", spec.attr, type(instance).__name__)
    instance.decode_query(values)
    setattr(target, spec.attr, instance)


def _decode_field(values: QueryValues, target: Any, spec: FieldSpec) -> None:
    raw = values.get(spec.key) or list(spec.defaults)
    if not raw:
        return

    value = _coerce(spec.shape, raw)
    if value is not _SKIP:
        setattr(target, spec.attr, value)


def _is_decoder(value: Any) -> bool:
    return value is not None and not isinstance(value, type) and isinstance(value, QueryDecoder)


def _custom_decoder_shape(shape: Shape) -> CustomShape | None:
    if isinstance(shape, OptionalShape):
        shape = shape.inner
    if isinstance(shape, CustomShape) and shape.decodes:
        return shape
    return None


def _coerce(shape: Shape, raw: list[str]) -> Any:
    if isinstance(shape, ScalarShape):
        return parse_scalar(shape.kind, raw[0])
    if isinstance(shape, SequenceShape):
        return [parse_scalar(shape.element, text) for text in raw]
    if isinstance(shape, OptionalShape):
        # the referent exists only once it parsed
        return _coerce(shape.inner, raw)
    # nested records without decode_query and unsupported types
    return _SKIP
