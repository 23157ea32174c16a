# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""
Type shapes and scalar coercion.

Purpose
=======
A field annotation is classified once into a ``Shape`` and stored in the
field table; the engines dispatch on the shape instead of re-inspecting
annotations on every call.

Shape Table::

    Annotation                      Shape
    ──────────                      ─────
    str, bool, float, int, Int8...  ScalarShape(kind)
    list[T]  (T scalar)             SequenceShape(element)
    T | None, Optional[T]           OptionalShape(inner)
    class with decode_query or      CustomShape(cls)
      encode_query
    dataclass                       RecordShape(cls)
    anything else                   IgnoredShape()

Decode Rules::

    text      verbatim
    bool      1 t T TRUE true True / 0 f F FALSE false False
    float     [+-]digits[.digits][e[+-]digits], inf, infinity, nan
    int       [+-]?[0-9]+, bit-width range
    uint      [0-9]+, bit-width range

Encode Rules::

    text      verbatim
    bool      "true" / "false"
    float     shortest round-trip decimal at the bit width, no exponent
              (4.4, 100, 0.00015, +Inf, -Inf, NaN)
    int/uint  base 10
"""

from __future__ import annotations

import dataclasses
import math
import re
import struct
import types
import typing
from dataclasses import dataclass
from decimal import Decimal
from fractions import Fraction
from typing import Any, Union

from .exceptions import CoercionError
from .types import (
    BOOL,
    FLOAT64,
    INT64,
    TEXT,
    ScalarKind,
)

__all__ = [
    "Shape",
    "ScalarShape",
    "SequenceShape",
    "OptionalShape",
    "RecordShape",
    "CustomShape",
    "IgnoredShape",
    "shape_of",
    "parse_scalar",
    "format_scalar",
]

_INT_RE = re.compile(r"[+-]?[0-9]+")
_UINT_RE = re.compile(r"[0-9]+")
_FLOAT_RE = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_SPECIAL_FLOAT_RE = re.compile(r"[+-]?(?:inf|infinity|nan)", re.IGNORECASE)

# Largest finite float32 bit pattern; magnitudes at or past the halfway point
# to 2**128 round to infinity.
_FLOAT32_MAX_BITS = 0x7F7FFFFF
_FLOAT32_MAX = float(2**128 - 2**104)
_FLOAT32_LIMIT = Fraction(2**128 - 2**103)

_TRUE = frozenset(("1", "t", "T", "TRUE", "true", "True"))
_FALSE = frozenset(("0", "f", "F", "FALSE", "false", "False"))

_BUILTIN_KINDS: dict[type, ScalarKind] = {
    str: TEXT,
    bool: BOOL,
    float: FLOAT64,
    int: INT64,
}


@dataclass(frozen=True)
class ScalarShape:
    kind: ScalarKind


@dataclass(frozen=True)
class SequenceShape:
    element: ScalarKind


@dataclass(frozen=True)
class OptionalShape:
    inner: Shape


@dataclass(frozen=True)
class RecordShape:
    cls: type


@dataclass(frozen=True)
class CustomShape:
    """Class implementing at least one of the custom capabilities."""

    cls: type

    @property
    def decodes(self) -> bool:
        return callable(getattr(self.cls, "decode_query", None))

    @property
    def encodes(self) -> bool:
        return callable(getattr(self.cls, "encode_query", None))


@dataclass(frozen=True)
class IgnoredShape:
    pass


Shape = Union[ScalarShape, SequenceShape, OptionalShape, RecordShape, CustomShape, IgnoredShape]


def shape_of(annotation: Any) -> Shape:
    """Classify a resolved annotation (``include_extras=True``)."""
    origin = typing.get_origin(annotation)

    if origin is typing.Annotated:
        base, *extras = typing.get_args(annotation)
        for extra in extras:
            if isinstance(extra, ScalarKind):
                return ScalarShape(extra)
        return shape_of(base)

    if origin is Union or origin is types.UnionType:
        members = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
        if len(members) == 1 and len(typing.get_args(annotation)) == 2:
            return OptionalShape(shape_of(members[0]))
        return IgnoredShape()

    if origin is list:
        args = typing.get_args(annotation)
        if len(args) == 1:
            element = shape_of(args[0])
            if isinstance(element, ScalarShape):
                return SequenceShape(element.kind)
        return IgnoredShape()

    if origin is not None or not isinstance(annotation, type):
        return IgnoredShape()

    if callable(getattr(annotation, "decode_query", None)) or callable(
        getattr(annotation, "encode_query", None)
    ):
        return CustomShape(annotation)

    kind = _BUILTIN_KINDS.get(annotation)
    if kind is not None:
        return ScalarShape(kind)

    if dataclasses.is_dataclass(annotation):
        return RecordShape(annotation)

    return IgnoredShape()


# --- decode -------------------------------------------------------------


def parse_scalar(kind: ScalarKind, text: str) -> Any:
    """Convert ``text`` to the native value of ``kind``.

    Raises:
        CoercionError: If the text is malformed or out of range.
    """
    if kind.python_type is str:
        return text
    if kind.python_type is bool:
        return _parse_bool(kind, text)
    if kind.python_type is float:
        return _parse_float(kind, text)
    return _parse_int(kind, text)


def _parse_bool(kind: ScalarKind, text: str) -> bool:
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise CoercionError(text, kind.name, "invalid syntax")


def _parse_float(kind: ScalarKind, text: str) -> float:
    special = _SPECIAL_FLOAT_RE.fullmatch(text) is not None
    if not special and _FLOAT_RE.fullmatch(text) is None:
        raise CoercionError(text, kind.name, "invalid syntax")
    value = float(text)
    if math.isinf(value) and not special:
        raise CoercionError(text, kind.name, "out of range")
    if kind.bits == 32 and math.isfinite(value):
        try:
            value = _round_float32(value, text)
        except OverflowError:
            raise CoercionError(text, kind.name, "out of range") from None
    return value


def _parse_int(kind: ScalarKind, text: str) -> int:
    pattern = _INT_RE if kind.signed else _UINT_RE
    if pattern.fullmatch(text) is None:
        raise CoercionError(text, kind.name, "invalid syntax")
    value = int(text)
    low, high = _int_bounds(kind)
    if not low <= value <= high:
        raise CoercionError(text, kind.name, "out of range")
    return value


def _int_bounds(kind: ScalarKind) -> tuple[int, int]:
    if kind.signed:
        return -(1 << (kind.bits - 1)), (1 << (kind.bits - 1)) - 1
    return 0, (1 << kind.bits) - 1


def _round_float32(value: float, text: str | None = None) -> float:
    """Round to the nearest float32, ties to even.

    ``text`` is the decimal literal ``value`` was parsed from. When given,
    rounding is decided on its exact value rather than on the double.

    Raises:
        OverflowError: If the magnitude does not fit in a float32.
    """
    if not math.isfinite(value) or value == 0:
        return value
    exact = abs(Fraction(value) if text is None else Fraction(Decimal(text)))
    if exact >= _FLOAT32_LIMIT:
        raise OverflowError("float32 overflow")
    if abs(value) >= _FLOAT32_MAX:
        bits = _FLOAT32_MAX_BITS
    else:
        bits = _float32_bits(abs(value))
    nearest = min(
        (b for b in (bits - 1, bits, bits + 1) if 0 <= b <= _FLOAT32_MAX_BITS),
        key=lambda b: (abs(Fraction(_float32_from_bits(b)) - exact), b & 1),
    )
    return math.copysign(_float32_from_bits(nearest), value)


def _float32_bits(value: float) -> int:
    bits: int = struct.unpack("<I", struct.pack("<f", value))[0]
    return bits


def _float32_from_bits(bits: int) -> float:
    value: float = struct.unpack("<f", struct.pack("<I", bits))[0]
    return value


# --- encode -------------------------------------------------------------


def format_scalar(kind: ScalarKind, value: Any) -> str:
    """Convert a native value of ``kind`` to its string form.

    Raises:
        CoercionError: If the value has the wrong type or does not fit.
    """
    if kind.python_type is str:
        if not isinstance(value, str):
            raise CoercionError(value, kind.name, "expected str")
        return value
    if kind.python_type is bool:
        if not isinstance(value, bool):
            raise CoercionError(value, kind.name, "expected bool")
        return "true" if value else "false"
    if kind.python_type is float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise CoercionError(value, kind.name, "expected float")
        return _format_float(kind, float(value))
    if isinstance(value, bool) or not isinstance(value, int):
        raise CoercionError(value, kind.name, "expected int")
    low, high = _int_bounds(kind)
    if not low <= value <= high:
        raise CoercionError(value, kind.name, "out of range")
    return str(value)


def _format_float(kind: ScalarKind, value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if kind.bits == 32:
        text = _shortest_float32(kind, value)
    else:
        text = repr(value)
    return format(Decimal(text).normalize(), "f")


def _shortest_float32(kind: ScalarKind, value: float) -> str:
    try:
        target = _round_float32(value)
    except OverflowError:
        raise CoercionError(value, kind.name, "out of range") from None
    for digits in range(1, 10):
        text = f"{target:.{digits}g}"
        try:
            if _round_float32(float(text), text) == target:
                return text
        except OverflowError:
            continue
    return repr(target)
