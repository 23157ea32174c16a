# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""
Field directives and the per-record field table.

Directives live in the dataclass field metadata::

    @dataclass
    class Listing:
        Page: UInt32 = field(default=0, metadata={"default": "1"})
        Tags: list[str] = field(default_factory=list, metadata={"query": "tag"})
        Secret: str = field(default="", metadata={"query": "-"})
        Sort: str = field(default="", metadata={"query": "sort,omitempty"})

- ``query``: comma separated. First token is the external key (``-`` alone
  excludes the field), the remaining tokens are modifiers (``omitempty``).
- ``default``: comma separated fallback values used when the key is absent
  or empty in the input map.
- No ``query`` directive: the key is the field name with its first
  character lower-cased (``PageSize`` -> ``pageSize``).

Fields whose name starts with ``_`` are private and never take part.

The table is built once per (record class, options) and cached.
"""

from __future__ import annotations

import dataclasses
import functools
import logging
import sys
import typing
from dataclasses import dataclass
from typing import Any

from .coercion import Shape, shape_of
from .config import CodecOptions, default_options

__all__ = ["FieldSpec", "resolve_name", "resolve_defaults", "record_fields"]

logger = logging.getLogger("genro_query")


@dataclass(frozen=True)
class FieldSpec:
    """Immutable descriptor of one visible record field.

    Attributes:
        attr: Attribute name on the record.
        key: External key in the value map.
        modifiers: Directive tokens following the key.
        defaults: Fallback values for decode.
        shape: Classified field type.
        excluded: True when the key is the exclude marker.
        omitempty: True when zero values are skipped on encode.
    """

    attr: str
    key: str
    modifiers: tuple[str, ...]
    defaults: tuple[str, ...]
    shape: Shape
    excluded: bool = False
    omitempty: bool = False


def _lower_first(name: str) -> str:
    return name[:1].lower() + name[1:]


def resolve_name(field: dataclasses.Field[Any], options: CodecOptions | None = None) -> tuple[str, list[str]]:
    """Return ``(key, modifiers)`` for a dataclass field."""
    options = options or default_options()
    value = field.metadata.get(options.name_key)
    if value is None:
        return _lower_first(field.name), []
    name, *modifiers = value.split(options.separator)
    return name, modifiers


def resolve_defaults(field: dataclasses.Field[Any], options: CodecOptions | None = None) -> list[str]:
    """Return the declared default values, or an empty list."""
    options = options or default_options()
    value = field.metadata.get(options.default_key)
    if value is None:
        return []
    return value.split(options.separator)


def record_fields(cls: type, options: CodecOptions | None = None) -> tuple[FieldSpec, ...]:
    """Return the cached field table of a record class."""
    return _field_table(cls, options or default_options())


@functools.cache
def _field_table(cls: type, options: CodecOptions) -> tuple[FieldSpec, ...]:
    hints = _type_hints(cls)
    specs = []
    for field in dataclasses.fields(cls):
        if field.name.startswith("_"):
            continue
        key, modifiers = resolve_name(field, options)
        specs.append(
            FieldSpec(
                attr=field.name,
                key=key,
                modifiers=tuple(modifiers),
                defaults=tuple(resolve_defaults(field, options)),
                shape=shape_of(hints.get(field.name, field.type)),
                excluded=key == options.exclude_marker,
                omitempty=options.omitempty in modifiers,
            )
        )
    return tuple(specs)


def _type_hints(cls: type) -> dict[str, Any]:
    """Resolve field annotations, leaving unresolvable ones as ``None``.

    A record declared inside a function may name classes that are not
    reachable from its module globals. Such fields resolve to ``None`` and
    are classified as ignored.
    """
    try:
        return typing.get_type_hints(cls, include_extras=True)
    except NameError as exc:
        logger.debug("Resolving %s field by field: %s", cls.__name__, exc)
    module = sys.modules.get(cls.__module__)
    globalns = vars(module) if module is not None else {}
    hints: dict[str, Any] = {}
    for field in dataclasses.fields(cls):
        annotation = field.type
        if isinstance(annotation, str):
            try:
                annotation = eval(annotation, globalns, dict(vars(cls)))
            except NameError:
                annotation = None
        hints[field.name] = annotation
    return hints
