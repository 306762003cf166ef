from collections import OrderedDict
from typing import Generic, Iterator, Optional, TypeVar

K = TypeVar("K")
V = TypeVar("V")

__all__ = ["LRUCache"]


class LRUCache(Generic[K, V]):
    """
    Bounded store that evicts the least recently used key.

    Satisfies the ``get``/``set`` contract expected for external stores, so it can
    be handed to the middleware through the ``files`` option.
    """

    def __init__(self, capacity: int):
        if capacity <= 0:
            raise ValueError("Capacity must be positive")

        self.capacity = capacity
        self.cache: "OrderedDict[K, V]" = OrderedDict()  # Oldest key first

    def get(self, key: K) -> Optional[V]:
        if key not in self.cache:
            return None
        # Accessing a key makes it the most recently used one
        self.cache.move_to_end(key)
        return self.cache[key]

    def set(self, key: K, value: V) -> None:
        if key in self.cache:
            self.cache.move_to_end(key)
        elif len(self.cache) == self.capacity:
            self.cache.popitem(last=False)
        self.cache[key] = value

    def __contains__(self, key: object) -> bool:
        return key in self.cache

    def __len__(self) -> int:
        return len(self.cache)

    def __iter__(self) -> Iterator[K]:
        yield from self.cache
