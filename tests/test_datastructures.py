# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Tests for data structures.

These tests verify the datastructure classes defined in genro_query.datastructures.
Tests cover:
- QueryValues: multi-valued query map
- Helper functions: query_values_from_scope
"""

from genro_query.datastructures import QueryValues, query_values_from_scope


class TestQueryValues:
    """Test QueryValues class."""

    def test_parse_bytes(self):
        """QueryValues should parse bytes query string."""
        values = QueryValues(b"name=john&age=30")
        assert values.get_first("name") == "john"
        assert values.get_first("age") == "30"

    def test_parse_string(self):
        """QueryValues should parse string query string."""
        values = QueryValues("foo=bar")
        assert values == {"foo": ["bar"]}

    def test_url_decoding(self):
        """Percent escapes and plus signs are decoded."""
        values = QueryValues("q=hello+world&x=%C3%A8")
        assert values.get_first("q") == "hello world"
        assert values.get_first("x") == "è"

    def test_from_mapping(self):
        """Mapping values may be strings or iterables of strings."""
        values = QueryValues({"a": "1", "b": ("2", "3")})
        assert values == {"a": ["1"], "b": ["2", "3"]}

    def test_mapping_is_copied(self):
        """The source lists are not shared."""
        source = {"a": ["1"]}
        values = QueryValues(source)
        values.add("a", "2")
        assert source == {"a": ["1"]}

    def test_empty(self):
        """None and empty strings give an empty map."""
        assert QueryValues() == {}
        assert QueryValues(b"") == {}
        assert not QueryValues(None)

    def test_get_first_default(self):
        """get_first should return default for missing key."""
        values = QueryValues(b"")
        assert values.get_first("missing") is None
        assert values.get_first("missing", "default") == "default"

    def test_multi_values(self):
        """QueryValues should handle multiple values per key."""
        values = QueryValues(b"tag=a&tag=b&tag=c")
        assert values.get_first("tag") == "a"
        assert values.getlist("tag") == ["a", "b", "c"]

    def test_getlist_empty(self):
        """getlist should return empty list for missing key."""
        assert QueryValues(b"").getlist("missing") == []

    def test_getlist_is_copy(self):
        values = QueryValues("a=1")
        values.getlist("a").append("2")
        assert values["a"] == ["1"]

    def test_blank_values_kept(self):
        """Empty values are preserved (?key= → [''])."""
        values = QueryValues("key=&other=value")
        assert values["key"] == [""]

    def test_case_sensitive(self):
        """QueryValues should be case-sensitive."""
        values = QueryValues(b"Key=value")
        assert values.get_first("Key") == "value"
        assert values.get_first("key") is None

    def test_add(self):
        values = QueryValues()
        values.add("a", "1")
        values.add("a", "2")
        assert values == {"a": ["1", "2"]}

    def test_extend_appends(self):
        """extend concatenates per key."""
        values = QueryValues("a=1")
        values.extend({"a": ["2"], "b": ["3"]})
        assert values == {"a": ["1", "2"], "b": ["3"]}

    def test_multi_items(self):
        values = QueryValues("a=1&a=2&b=3")
        assert values.multi_items() == [("a", "1"), ("a", "2"), ("b", "3")]

    def test_to_query_string(self):
        values = QueryValues({"q": ["a b"], "tag": ["x", "y&z"]})
        assert values.to_query_string() == "q=a+b&tag=x&tag=y%26z"

    def test_repr(self):
        assert repr(QueryValues("a=1")) == "QueryValues({'a': ['1']})"


class TestQueryValuesFromScope:
    def test_from_scope(self):
        scope = {"type": "http", "query_string": b"page=1&limit=10"}
        values = query_values_from_scope(scope)
        assert values.get_first("page") == "1"
        assert values.get_first("limit") == "10"

    def test_missing_query_string(self):
        assert query_values_from_scope({"type": "http"}) == {}
