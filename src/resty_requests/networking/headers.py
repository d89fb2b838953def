"""Header container with case-insensitive, normalize-on-read lookups.

HTTP header field names are case-insensitive (RFC 9110), and option records
often spell them with underscores (``user_agent``). HeaderDict stores keys
exactly as written and indexes them by their canonical form (lower-case,
``_`` -> ``-``), so any spelling of a name reaches the same entry. Writing a
name that is already present under another spelling replaces that entry.

Iterating shows raw keys, which may be non-canonical if a caller wrote one
directly. Callers that need canonical names use canonical_items().
"""

from __future__ import annotations

from collections.abc import (
    Callable,
    Hashable,
    Iterator,
    Mapping,
    MutableMapping,
)
from types import MappingProxyType
from typing import Any

from .errors import HeaderNormalizationError

BUILTIN_HEADERS: Mapping[str, str] = MappingProxyType(
    {
        "accept": "*/*",
        "user-agent": "resty-requests",
    }
)

Normalizer = Callable[[Hashable], str]


def normalize_header_name(name: Hashable) -> str:
    """Return the canonical form of a header name.

    Raises:
        HeaderNormalizationError: ``name`` is neither text nor ASCII bytes.
    """
    if isinstance(name, (bytes, bytearray)):
        try:
            name = bytes(name).decode("ascii")
        except UnicodeDecodeError as exc:
            raise HeaderNormalizationError(
                f"header name {name!r} is not ASCII"
            ) from exc
    if not isinstance(name, str):
        raise HeaderNormalizationError(
            f"header name must be text, got {type(name).__name__}"
        )
    return name.lower().replace("_", "-")


class HeaderDict(MutableMapping[Hashable, Any]):
    """Mapping of header names to values with case-insensitive lookups.

    Args:
        initial: Entries to copy in, stored under their raw keys.
        size_hint: Expected number of headers. Recorded for diagnostics;
            Python dicts grow on demand and are not pre-sized.
        normalizer: Function producing the canonical form of a key.
    """

    __slots__ = ("_store", "_index", "_normalizer", "size_hint")

    def __init__(
        self,
        initial: Mapping[Hashable, Any] | None = None,
        *,
        size_hint: int = 0,
        normalizer: Normalizer = normalize_header_name,
    ) -> None:
        self._store: dict[Hashable, Any] = {}
        # canonical name -> raw key it is stored under
        self._index: dict[str, Hashable] = {}
        self._normalizer = normalizer
        self.size_hint = size_hint
        if initial:
            self.update(initial)

    def _resolve(self, key: Hashable) -> Hashable:
        if key in self._store:
            return key
        return self._index[self._normalizer(key)]

    def __getitem__(self, key: Hashable) -> Any:
        return self._store[self._resolve(key)]

    def __setitem__(self, key: Hashable, value: Any) -> None:
        name = self._normalizer(key)
        previous = self._index.get(name, key)
        if previous != key:
            del self._store[previous]
        self._index[name] = key
        self._store[key] = value

    def __delitem__(self, key: Hashable) -> None:
        raw = self._resolve(key)
        del self._index[self._normalizer(raw)]
        del self._store[raw]

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self._store)

    def __len__(self) -> int:
        return len(self._store)

    def canonical_items(self) -> Iterator[tuple[str, Any]]:
        """Yield ``(canonical_name, value)`` for every stored entry."""
        for key, value in self._store.items():
            yield self._normalizer(key), value

    def copy(self) -> "HeaderDict":
        return HeaderDict(
            self._store, size_hint=self.size_hint, normalizer=self._normalizer
        )

    def __repr__(self) -> str:
        return f"HeaderDict({self._store!r})"


__all__ = [
    "BUILTIN_HEADERS",
    "HeaderDict",
    "Normalizer",
    "normalize_header_name",
]
