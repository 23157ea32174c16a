# Copyright 2025 Softwell S.r.l.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Exception classes for genro-query decoding and encoding.

Module Structure
----------------
All exceptions share the ``QueryError`` base so callers can catch the whole
family with one clause:

1. UnsupportedTypeError - target/source is neither a record nor a custom
   decoder/encoder. Fatal, raised before any field is touched.
2. CoercionError - a single string could not be converted to the field's
   native type (decode) or a value cannot be represented (encode).
3. DecodeError - composite raised by ``decode`` after every field has been
   processed. Holds each per-field error.

Design Decisions
----------------
- UnsupportedTypeError also inherits TypeError and CoercionError also
  inherits ValueError, so generic handlers keep working.
- Decode collects, encode does not: ``decode`` raises one DecodeError with
  every failure, ``encode`` lets the first error propagate.
- Errors raised by user-supplied ``decode_query``/``encode_query`` are never
  wrapped at top level. Inside a record they are collected verbatim in
  ``DecodeError.field_errors``.

Example:
    >>> try:
    ...     decode({"limit": ["300"]}, page)
    ... except DecodeError as exc:
    ...     for name, error in exc.field_errors.items():
    ...         print(name, error)
    limit field 'limit': cannot convert '300' to uint8: out of range
"""

from __future__ import annotations

from typing import Any

__all__ = ["QueryError", "UnsupportedTypeError", "CoercionError", "DecodeError"]


class QueryError(Exception):
    """Base class for genro-query errors."""


class UnsupportedTypeError(QueryError, TypeError):
    """
    Raised when the object passed to decode/encode has an unsupported shape.

    Attributes:
        obj_type: The offending type.
    """

    def __init__(self, obj_type: type, reason: str = "") -> None:
        self.obj_type = obj_type
        message = f"unsupported type: {obj_type.__name__}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)

    def __repr__(self) -> str:
        return f"UnsupportedTypeError(obj_type={self.obj_type.__name__})"


class CoercionError(QueryError, ValueError):
    """
    A value could not be converted between its string form and its native type.

    Attributes:
        value: The offending text (decode) or native value (encode).
        kind: Name of the target kind (``"int8"``, ``"bool"``, ...).
        reason: Short description of the failure.
        field: Name of the record field, when known.
    """

    def __init__(self, value: Any, kind: str, reason: str, field: str | None = None) -> None:
        self.value = value
        self.kind = kind
        self.reason = reason
        self.field = field
        super().__init__(self._message())

    def _message(self) -> str:
        message = f"cannot convert {self.value!r} to {self.kind}: {self.reason}"
        if self.field:
            message = f"field {self.field!r}: {message}"
        return message

    def with_field(self, field: str) -> CoercionError:
        """Return a copy tagged with the record field name."""
        return CoercionError(self.value, self.kind, self.reason, field=field)

    def __repr__(self) -> str:
        return f"CoercionError(field={self.field!r}, value={self.value!r}, kind={self.kind!r})"


class DecodeError(QueryError):
    """
    Composite error for a decode call with one or more failing fields.

    Attributes:
        field_errors: Mapping of field name to the exception it produced,
            in field declaration order.
    """

    def __init__(self, field_errors: dict[str, Exception]) -> None:
        self.field_errors = dict(field_errors)
        super().__init__("\n".join(_describe(name, error) for name, error in self.field_errors.items()))

    @property
    def errors(self) -> list[Exception]:
        """Collected exceptions in field declaration order."""
        return list(self.field_errors.values())

    def __repr__(self) -> str:
        return f"DecodeError(fields={list(self.field_errors)!r})"


def _describe(name: str, error: Exception) -> str:
    if isinstance(error, CoercionError) and error.field:
        return str(error)
    return f"{name}: {error}"
