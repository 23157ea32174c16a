# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Codec options - directive keys and separators used by the naming resolver.

Options are layered with genro-toolbox SmartOptions (later overrides earlier):

1. Built-in DEFAULTS
2. Explicit constructor parameters (``None`` means "not given")

Example::

    from dataclasses import dataclass, field
    from genro_query import CodecOptions, decode

    opts = CodecOptions(name_key="param", default_key="fallback")

    @dataclass
    class Search:
        text: str = field(default="", metadata={"param": "q", "fallback": "*"})

    search = Search()
    decode({}, search, options=opts)
    search.text  # "*"
"""

from __future__ import annotations

from typing import Any

from genro_toolbox import SmartOptions  # type: ignore[import-untyped]

__all__ = ["CodecOptions", "DEFAULTS", "default_options"]

DEFAULTS = {
    "name_key": "query",
    "default_key": "default",
    "separator": ",",
    "exclude_marker": "-",
    "omitempty": "omitempty",
}


class CodecOptions:
    """Immutable, hashable view over the merged codec options.

    Instances are used as cache keys for the per-record field tables, so two
    instances with the same values share one table.
    """

    __slots__ = ("name_key", "default_key", "separator", "exclude_marker", "omitempty")

    def __init__(
        self,
        name_key: str | None = None,
        default_key: str | None = None,
        separator: str | None = None,
        exclude_marker: str | None = None,
        omitempty: str | None = None,
    ) -> None:
        opts = SmartOptions(DEFAULTS) + SmartOptions(
            dict(
                name_key=name_key,
                default_key=default_key,
                separator=separator,
                exclude_marker=exclude_marker,
                omitempty=omitempty,
            ),
            ignore_none=True,
        )
        for name in self.__slots__:
            object.__setattr__(self, name, opts[name])

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def as_dict(self) -> dict[str, str]:
        """Return options as a plain dict."""
        return {name: getattr(self, name) for name in self.__slots__}

    def _key(self) -> tuple[str, ...]:
        return tuple(getattr(self, name) for name in self.__slots__)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, CodecOptions):
            return self._key() == other._key()
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._key())

    def __repr__(self) -> str:
        return f"CodecOptions({self.as_dict()!r})"


_DEFAULT_OPTIONS: CodecOptions | None = None


def default_options() -> CodecOptions:
    """Shared options instance built from DEFAULTS."""
    global _DEFAULT_OPTIONS
    if _DEFAULT_OPTIONS is None:
        _DEFAULT_OPTIONS = CodecOptions()
    return _DEFAULT_OPTIONS
