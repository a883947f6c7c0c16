"""Capacity bounded caches for resolved attributes."""

import logging
import threading
from collections.abc import Hashable
from typing import Any, Generic, TypeVar

from metaresolver.attributes import Attribute

__all__ = [
    "BoundedCache",
    "AttributeCache",
    "DEFAULT_CAPACITY",
]

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")
A = TypeVar("A", bound=Attribute)

DEFAULT_CAPACITY = 128


def _ensure_capacity(capacity: int) -> int:
    if capacity < 1:
        raise ValueError(f"Cache capacity must be positive, got {capacity}")
    return capacity


class BoundedCache(Generic[K, V]):
    """Mapping evicting the least recently inserted entry when full.

    Reads never promote an entry and updating an existing key keeps its
    insertion position.
    """

    __slots__ = ("_entries", "_capacity")

    _entries: dict[K, V]

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        self._entries = {}
        self._capacity = _ensure_capacity(capacity)

    @property
    def capacity(self) -> int:
        return self._capacity

    def set_capacity(self, capacity: int) -> None:
        """Change the capacity. Only applies to subsequent insertions.

        Raises:
            ValueError: If capacity is not positive.
        """
        self._capacity = _ensure_capacity(capacity)

    def get(self, key: K, default: V | None = None) -> V | None:
        return self._entries.get(key, default)

    def put(self, key: K, value: V) -> None:
        # One eviction per insertion, a lowered capacity is reached gradually.
        if key not in self._entries and len(self._entries) >= self._capacity:
            evicted = next(iter(self._entries))
            del self._entries[evicted]
            logger.debug("Evicted %r from cache", evicted)
        self._entries[key] = value

    def remove(self, key: K) -> V | None:
        return self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"BoundedCache(capacity={self._capacity}, size={len(self)})"


class AttributeCache:
    """Positive and negative caches of attribute resolution.

    The positive cache maps a declaration to its resolved attributes by kind,
    the negative cache maps a declaration to the kinds known to be absent.
    """

    __slots__ = ("_attributes", "_absent", "_attributes_lock", "_absent_lock")

    _attributes: BoundedCache[Any, dict[type[Attribute], Attribute]]
    _absent: BoundedCache[Any, set[type[Attribute]]]

    def __init__(
        self,
        attribute_capacity: int = DEFAULT_CAPACITY,
        absent_capacity: int = DEFAULT_CAPACITY,
    ) -> None:
        self._attributes = BoundedCache(attribute_capacity)
        self._absent = BoundedCache(absent_capacity)
        self._attributes_lock = threading.Lock()
        self._absent_lock = threading.Lock()

    @property
    def attribute_capacity(self) -> int:
        return self._attributes.capacity

    @property
    def absent_capacity(self) -> int:
        return self._absent.capacity

    def get(self, declaration: Any, kind: type[A]) -> A | None:
        """Get a cached attribute."""
        attributes = self._attributes.get(declaration)
        if attributes is None:
            return None
        return attributes.get(kind, None)  # type: ignore[return-value]

    def put(self, declaration: Any, attribute: Attribute) -> None:
        """Cache an attribute under its kind."""
        with self._attributes_lock:
            attributes = self._attributes.get(declaration)
            if attributes is None:
                attributes = {}
                self._attributes.put(declaration, attributes)
            attributes[type(attribute)] = attribute

    def is_absent(self, declaration: Any, kind: type[Attribute]) -> bool:
        """Check if a kind is known to be absent from a declaration."""
        kinds = self._absent.get(declaration)
        if not kinds:
            return False
        return kind in kinds

    def mark_absent(self, declaration: Any, kind: type[Attribute]) -> None:
        """Record a kind as absent from a declaration."""
        with self._absent_lock:
            kinds = self._absent.get(declaration)
            if kinds is None:
                kinds = set()
                self._absent.put(declaration, kinds)
            kinds.add(kind)

    def clear(self) -> None:
        with self._attributes_lock:
            self._attributes.clear()
        with self._absent_lock:
            self._absent.clear()

    def set_attribute_capacity(self, capacity: int) -> None:
        with self._attributes_lock:
            self._attributes.set_capacity(capacity)

    def set_absent_capacity(self, capacity: int) -> None:
        with self._absent_lock:
            self._absent.set_capacity(capacity)
