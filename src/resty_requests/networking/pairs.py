"""Coerce form and query containers into ordered key/value pair lists."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Hashable, Iterable, Sequence

from .errors import KeyValueShapeError
from .predicates import Shapes, array_items, is_array, is_tab

Pair = tuple[Hashable, Any]


class OrderedList(tuple):
    """A sequence of ``(key, value)`` pairs the caller declares as ordered.

    Wrapping a value in OrderedList states intent at the call site, so the
    coercer never has to guess whether the container is list-like.
    """

    __slots__ = ()

    def __new__(cls, pairs: Iterable[Pair] = ()) -> "OrderedList":
        return super().__new__(cls, pairs)

    def __repr__(self) -> str:
        return f"OrderedList({list(self)!r})"


def to_pairs(value: Any, shapes: Shapes | None = None) -> Sequence[Pair]:
    """Return ``value`` as an ordered sequence of ``(key, value)`` pairs.

    ``None`` gives an empty list. List-like input is assumed to already hold
    pairs and is returned unchanged (a mapping keyed ``1..n`` is returned as
    the list of its values in key order). Map-like input is converted in the
    mapping's iteration order, which is insertion order for ``dict``.

    Raises:
        KeyValueShapeError: ``value`` is not a container.
    """
    if value is None:
        return []

    if not is_tab(value):
        raise KeyValueShapeError(
            "cannot encode objects that are not key/value containers"
        )

    if isinstance(value, OrderedList):
        return value

    if is_array(value, shapes):
        if isinstance(value, Mapping):
            return array_items(value, shapes)
        return value

    return [(key, item) for key, item in value.items()]


__all__ = ["OrderedList", "Pair", "to_pairs"]
