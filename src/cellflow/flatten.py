"""Helpers that strip cells out of plain data."""

from __future__ import annotations

from typing import Any, Mapping, Sequence

from cellflow._proxy import unwrap
from cellflow.cell import Cell

_SCALAR_TYPES = {int, float, complex, str, bytes, bool, type(None)}


def is_cell(value: object) -> bool:
    return isinstance(value, Cell)


def flatten(value: Any) -> Any:
    """Recursively replace cells with their values.

    Cells are read through get(), so flattening inside a derived computation
    tracks every cell it meets. Lists, tuples, sets and dicts are rebuilt;
    proxied values come back as plain copies. Anything else is returned as-is.

    Usage:
        flatten({"a": source(1), "b": [source(2), 3]})
        # {'a': 1, 'b': [2, 3]}
    """
    if type(value) in _SCALAR_TYPES:
        return value

    if isinstance(value, Cell):
        return flatten(value.get())

    value = unwrap(value)
    if isinstance(value, dict):
        return {key: flatten(item) for key, item in value.items()}
    if isinstance(value, list):
        return [flatten(item) for item in value]
    if isinstance(value, tuple):
        items = [flatten(item) for item in value]
        if hasattr(value, "_fields"):
            return type(value)(*items)
        return tuple(items)
    if isinstance(value, (set, frozenset)):
        return type(value)(flatten(item) for item in value)
    return value


def flatten_list(values: Sequence[Any]) -> list[Any]:
    """flatten() applied to each element of a sequence."""
    return [flatten(item) for item in values]


def flatten_dict(mapping: Mapping[Any, Any]) -> dict[Any, Any]:
    """flatten() applied to each value of a mapping."""
    return {key: flatten(item) for key, item in unwrap(mapping).items()}
