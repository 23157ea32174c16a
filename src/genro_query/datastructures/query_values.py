# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""
Multi-valued query map used as input and output of the codec.

Purpose
=======
``QueryValues`` is a ``dict[str, list[str]]`` with query-string helpers, so
plain dict comparisons and ``Mapping`` consumers keep working. Keys are
case-sensitive. Parsing uses ``urllib.parse.parse_qs`` which handles URL
decoding; serialization uses ``urllib.parse.urlencode(doseq=True)``.

This module provides:
- ``QueryValues``: the multi-valued map
- ``query_values_from_scope()``: Factory to create QueryValues from ASGI scope

ASGI Mapping::

    scope["query_string"] = b"a=1&b=2"  →  QueryValues (parsed)

Parsing Schema::

    Query string: "name=john&tags=python&tags=web&empty="
                        ↓
                urllib.parse.parse_qs
                        ↓
    QueryValues({
        "name": ["john"],
        "tags": ["python", "web"],
        "empty": [""]
    })
                        ↓
    values.get_first("name") → "john"
    values.getlist("tags") → ["python", "web"]
    values.get_first("missing") → None

Example::

    from genro_query.datastructures import QueryValues

    values = QueryValues(b"page=1&tag=a")
    values.add("tag", "b")
    values.to_query_string()   # "page=1&tag=a&tag=b"

Design Notes
============
- Empty values are preserved (``?key=`` → ``[""]``)
- ``extend`` concatenates per key, it never replaces
- Constructing from a mapping copies the value lists
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any
from urllib.parse import parse_qs, urlencode

__all__ = ["QueryValues", "query_values_from_scope"]


class QueryValues(dict[str, list[str]]):
    """
    Multi-valued string map (key → ordered list of values).

    Example:
        >>> values = QueryValues("name=john&tags=python&tags=web")
        >>> values.get_first("name")
        'john'
        >>> values.getlist("tags")
        ['python', 'web']
        >>> values == {"name": ["john"], "tags": ["python", "web"]}
        True
    """

    def __init__(self, source: bytes | str | Mapping[str, Any] | None = None) -> None:
        """
        Initialize QueryValues.

        Args:
            source: A query string (bytes are decoded as Latin-1), a mapping
                    of key to a string or an iterable of strings, or None.
        """
        super().__init__()
        if source is None:
            return
        if isinstance(source, bytes):
            source = source.decode("latin-1")
        if isinstance(source, str):
            self.update(parse_qs(source, keep_blank_values=True))
            return
        for key, value in source.items():
            self[key] = [value] if isinstance(value, str) else list(value)

    def get_first(self, key: str, default: str | None = None) -> str | None:
        """Return the first value for ``key``, or ``default``."""
        values = self.get(key)
        if values:
            return values[0]
        return default

    def getlist(self, key: str) -> list[str]:
        """Return all values for ``key`` (empty list if missing)."""
        return list(self.get(key, []))

    def add(self, key: str, value: str) -> None:
        """Append a value under ``key``."""
        self.setdefault(key, []).append(value)

    def extend(self, other: Mapping[str, Iterable[str]]) -> None:
        """Merge ``other`` key-wise, appending to existing lists."""
        for key, values in other.items():
            self.setdefault(key, []).extend(values)

    def multi_items(self) -> list[tuple[str, str]]:
        """
        Return all (key, value) pairs including duplicates.

        Example:
            >>> QueryValues("a=1&a=2&b=3").multi_items()
            [('a', '1'), ('a', '2'), ('b', '3')]
        """
        return [(key, value) for key, values in self.items() for value in values]

    def to_query_string(self) -> str:
        """Serialize to an URL-encoded query string."""
        return urlencode(self.multi_items())

    def __repr__(self) -> str:
        return f"QueryValues({dict(self)!r})"


def query_values_from_scope(scope: Mapping[str, Any]) -> QueryValues:
    """
    Create QueryValues from an ASGI scope.

    Returns empty QueryValues if "query_string" is not in scope.

    Example:
        >>> scope = {"type": "http", "query_string": b"page=1&limit=10"}
        >>> query_values_from_scope(scope).get_first("page")
        '1'
    """
    return QueryValues(scope.get("query_string", b""))
