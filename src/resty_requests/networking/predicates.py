"""Value-shape predicates shared by the builder and the key/value coercer.

Options arrive as loosely typed Python values. These helpers answer the few
questions the rest of the package needs: is it text, a number, a container,
a callable, or some opaque handle, and is a container list-like or map-like.

List-like detection is delegated to a shape strategy chosen once, when this
module is imported, from ``RESTY_REQUESTS_SHAPE_STRATEGY``. Callers that need
a specific behavior pass a strategy explicitly.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from numbers import Number
from typing import Any

from .settings import BuilderSettings, ShapeStrategy

_TEXT_TYPES = (str, bytes, bytearray)


def is_str(obj: Any) -> bool:
    return isinstance(obj, str)


def is_num(obj: Any) -> bool:
    return isinstance(obj, Number) and not isinstance(obj, bool)


def is_tab(obj: Any) -> bool:
    """Return True for mappings and non-text sequences."""
    if isinstance(obj, Mapping):
        return True
    return isinstance(obj, Sequence) and not isinstance(obj, _TEXT_TYPES)


def is_func(obj: Any) -> bool:
    return callable(obj)


def is_userdata(obj: Any) -> bool:
    """Return True for opaque handles: anything that is not plain data."""
    if obj is None or isinstance(obj, (bool,) + _TEXT_TYPES):
        return False
    return not (is_num(obj) or is_tab(obj) or is_func(obj))


def _sequential_prefix(obj: Mapping[Any, Any]) -> int:
    """Length of the run of keys 1, 2, 3, ... present in a mapping."""
    n = 0
    while (n + 1) in obj:
        n += 1
    return n


def _is_int_key(key: Any) -> bool:
    return isinstance(key, int) and not isinstance(key, bool)


class IntrospectingShapes:
    """Classify containers by inspecting their keys."""

    strategy = ShapeStrategy.INTROSPECTING

    def is_array(self, obj: Any) -> bool:
        if not is_tab(obj):
            return False
        if not isinstance(obj, Mapping):
            return True
        if not all(_is_int_key(key) for key in obj):
            return False
        return _sequential_prefix(obj) == len(obj)

    def count(self, obj: Any) -> int:
        return len(obj)


class ConservativeShapes:
    """Every mapping is map-like; only real sequences are list-like.

    Counting a mapping only sees its contiguous ``1..n`` prefix.
    """

    strategy = ShapeStrategy.CONSERVATIVE

    def is_array(self, obj: Any) -> bool:
        return is_tab(obj) and not isinstance(obj, Mapping)

    def count(self, obj: Any) -> int:
        if isinstance(obj, Mapping):
            return _sequential_prefix(obj)
        return len(obj)


Shapes = IntrospectingShapes | ConservativeShapes


def shapes_for(strategy: ShapeStrategy) -> Shapes:
    if strategy is ShapeStrategy.CONSERVATIVE:
        return ConservativeShapes()
    return IntrospectingShapes()


ACTIVE_SHAPES: Shapes = shapes_for(BuilderSettings.from_env().shape_strategy)


def is_array(obj: Any, shapes: Shapes | None = None) -> bool:
    """Return True when ``obj`` is a list-like container."""
    return (shapes or ACTIVE_SHAPES).is_array(obj)


def count_entries(obj: Any, shapes: Shapes | None = None) -> int:
    """Count the entries of a container; non-containers count as zero."""
    if not is_tab(obj):
        return 0
    return (shapes or ACTIVE_SHAPES).count(obj)


def array_items(obj: Any, shapes: Shapes | None = None) -> list[Any]:
    """Return the first ``count_entries(obj)`` items of a list-like value.

    Mappings are read at keys ``1..n``; sequences by position.
    """
    n = count_entries(obj, shapes)
    if isinstance(obj, Mapping):
        return [obj.get(i) for i in range(1, n + 1)]
    return list(obj[:n]) if n else []


def is_in_array(value: Any, array: Any, shapes: Shapes | None = None) -> bool:
    """Linear membership test over the list-like part of ``array``."""
    for item in array_items(array, shapes):
        if item == value:
            return True
    return False


__all__ = [
    "ACTIVE_SHAPES",
    "ConservativeShapes",
    "IntrospectingShapes",
    "Shapes",
    "array_items",
    "count_entries",
    "is_array",
    "is_func",
    "is_in_array",
    "is_num",
    "is_str",
    "is_tab",
    "is_userdata",
    "shapes_for",
]
