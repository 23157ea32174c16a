# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""
Data structures for genro-query.

Mapping from raw query data to genro-query classes::

    Raw Data                               genro-query Classes
    ─────────────────                      ───────────────────
    scope["query_string"] = b"a=1&b=2"  →  QueryValues (parsed)
    {"a": ["1"], "b": ["2"]}            →  QueryValues (copied)

Public Exports
==============
::

    from genro_query.datastructures import QueryValues, query_values_from_scope
"""

from .query_values import QueryValues, query_values_from_scope

__all__ = ["QueryValues", "query_values_from_scope"]
