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

"""genro-query - Bind URL query parameters to dataclasses and back.

Main components:
    decode: Populate a dataclass from a multi-valued map
    encode: Build a multi-valued map from a dataclass
    QueryValues: Multi-valued map with query-string helpers

Escape hatches:
    QueryDecoder: Types implementing ``decode_query(values)``
    QueryEncoder: Types implementing ``encode_query()``

Usage:
    from dataclasses import dataclass, field
    from genro_query import decode, encode
    from genro_query.types import UInt32

    @dataclass
    class Search:
        Query: str = field(default="", metadata={"query": "q"})
        PageSize: UInt32 = field(default=0, metadata={"default": "25"})

    search = Search()
    decode({"q": ["shoes"]}, search)
    encode(search)  # {"q": ["shoes"], "pageSize": ["25"]}
"""

__version__ = "0.1.0"

from .config import CodecOptions
from .datastructures import QueryValues, query_values_from_scope
from .decode import decode, decode_query_string, decode_scope
from .encode import encode, encode_query_string
from .exceptions import (
    CoercionError,
    DecodeError,
    QueryError,
    UnsupportedTypeError,
)
from .tags import FieldSpec, record_fields, resolve_defaults, resolve_name
from .types import QueryDecoder, QueryEncoder

__all__ = [
    "CodecOptions",
    "CoercionError",
    "DecodeError",
    "FieldSpec",
    "QueryDecoder",
    "QueryEncoder",
    "QueryError",
    "QueryValues",
    "UnsupportedTypeError",
    "decode",
    "decode_query_string",
    "decode_scope",
    "encode",
    "encode_query_string",
    "query_values_from_scope",
    "record_fields",
    "resolve_defaults",
    "resolve_name",
]
