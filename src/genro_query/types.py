# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Type definitions for genro-query.

Purpose
=======
Records are plain dataclasses. Python has a single ``int`` and a single
``float``, so bit widths are declared with ``typing.Annotated`` aliases that
carry a ``ScalarKind`` marker. Type checkers still see ``int``/``float``;
the codec reads the marker to pick the range check and the float precision.

Width Mapping::

    Annotation          Kind        Range / precision
    ──────────          ────        ─────────────────
    str                 text        verbatim
    bool                bool        true/false
    float, Float64      float64     IEEE double
    Float32             float32     IEEE single
    int, Int64          int64       -2**63 .. 2**63-1
    Int32/Int16/Int8    int32/16/8  signed, bit-width range
    UInt64..UInt8       uint64..8   0 .. 2**bits-1

Capabilities
============
``QueryDecoder`` and ``QueryEncoder`` are the escape hatches: a type that
implements one of them owns its whole conversion and the field walk is
skipped for it.

Example::

    from dataclasses import dataclass, field
    from genro_query.types import UInt32

    @dataclass
    class Page:
        PageSize: UInt32 = field(default=0, metadata={"default": "25"})
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Annotated, Protocol, runtime_checkable

__all__ = [
    "ScalarKind",
    "TEXT",
    "BOOL",
    "FLOAT32",
    "FLOAT64",
    "INT8",
    "INT16",
    "INT32",
    "INT64",
    "UINT8",
    "UINT16",
    "UINT32",
    "UINT64",
    "Float32",
    "Float64",
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "UInt8",
    "UInt16",
    "UInt32",
    "UInt64",
    "ValueMap",
    "QueryDecoder",
    "QueryEncoder",
]


@dataclass(frozen=True)
class ScalarKind:
    """Native scalar kind a field converts to and from.

    Attributes:
        name: Short name used in error messages (``"uint8"``, ``"text"``).
        python_type: The Python type holding the value.
        bits: Bit width for numeric kinds, 0 otherwise.
        signed: Whether an integer kind accepts negative values.
    """

    name: str
    python_type: type
    bits: int = 0
    signed: bool = True

    def __repr__(self) -> str:
        return f"ScalarKind({self.name})"


TEXT = ScalarKind("text", str)
BOOL = ScalarKind("bool", bool)
FLOAT32 = ScalarKind("float32", float, 32)
FLOAT64 = ScalarKind("float64", float, 64)
INT8 = ScalarKind("int8", int, 8)
INT16 = ScalarKind("int16", int, 16)
INT32 = ScalarKind("int32", int, 32)
INT64 = ScalarKind("int64", int, 64)
UINT8 = ScalarKind("uint8", int, 8, signed=False)
UINT16 = ScalarKind("uint16", int, 16, signed=False)
UINT32 = ScalarKind("uint32", int, 32, signed=False)
UINT64 = ScalarKind("uint64", int, 64, signed=False)

Float32 = Annotated[float, FLOAT32]
Float64 = Annotated[float, FLOAT64]
Int8 = Annotated[int, INT8]
Int16 = Annotated[int, INT16]
Int32 = Annotated[int, INT32]
Int64 = Annotated[int, INT64]
UInt8 = Annotated[int, UINT8]
UInt16 = Annotated[int, UINT16]
UInt32 = Annotated[int, UINT32]
UInt64 = Annotated[int, UINT64]

# Multi-valued input map: key -> ordered values
ValueMap = Mapping[str, Sequence[str]]


@runtime_checkable
class QueryDecoder(Protocol):
    """Custom decoding logic for a type.

    Implementations receive the whole value map and populate themselves.
    Failures are signalled by raising; the exception reaches the caller
    unchanged.
    """

    def decode_query(self, values: ValueMap) -> None:
        """Populate ``self`` from the multi-valued map."""
        ...


@runtime_checkable
class QueryEncoder(Protocol):
    """Custom encoding logic for a type.

    The returned map is merged into the output: values are appended to
    existing keys, never replacing them.
    """

    def encode_query(self) -> ValueMap:
        """Return the multi-valued map representing ``self``."""
        ...
