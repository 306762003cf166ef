from __future__ import annotations

import abc
import typing as t

from statica.models import CacheEntry

__all__ = ("BaseStore", "MappingStore", "ExternalStore", "make_store")


class BaseStore(abc.ABC):
    """Uniform get/set access to cache entries, whatever holds them."""

    @abc.abstractmethod
    def get(self, key: str) -> t.Optional[CacheEntry]:
        pass

    @abc.abstractmethod
    def set(self, key: str, entry: CacheEntry) -> None:
        pass


class MappingStore(BaseStore):
    """
    Store backed by a plain mapping. Unbounded, nothing is ever evicted.

    Args:
        mapping: The mapping to write entries into. A new dict when omitted, so
            callers can keep a reference to inspect or pre-seed entries.
    """

    def __init__(self, mapping: t.Optional[t.MutableMapping[str, CacheEntry]] = None) -> None:
        self.mapping: t.MutableMapping[str, CacheEntry] = mapping if mapping is not None else {}

    def get(self, key: str) -> t.Optional[CacheEntry]:
        return self.mapping.get(key)

    def set(self, key: str, entry: CacheEntry) -> None:
        self.mapping[key] = entry

    def __contains__(self, key: object) -> bool:
        return key in self.mapping

    def __iter__(self) -> t.Iterator[str]:
        return iter(self.mapping)

    def __len__(self) -> int:
        return len(self.mapping)


class ExternalStore(BaseStore):
    """
    Pass-through to a user supplied object with ``get`` and ``set`` methods.

    Capacity and eviction are entirely up to that object; an evicted entry
    simply shows up as a miss.
    """

    def __init__(self, store: t.Any) -> None:
        self.store = store

    def get(self, key: str) -> t.Optional[CacheEntry]:
        return t.cast(t.Optional[CacheEntry], self.store.get(key))

    def set(self, key: str, entry: CacheEntry) -> None:
        self.store.set(key, entry)


def make_store(files: t.Any = None) -> BaseStore:
    """
    Pick the store adapter for ``files``. The choice is made once, here.

    Examples:
        >>> make_store(None)  # doctest: +ELLIPSIS
        <statica._store.MappingStore object at ...>
        >>> from statica import LRUCache
        >>> make_store(LRUCache(10))  # doctest: +ELLIPSIS
        <statica._store.ExternalStore object at ...>
    """
    if isinstance(files, BaseStore):
        return files
    if callable(getattr(files, "get", None)) and callable(getattr(files, "set", None)):
        return ExternalStore(files)
    return MappingStore(files)
