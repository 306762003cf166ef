from __future__ import annotations

from dataclasses import dataclass, field
from typing import AsyncIterator, Optional, Union

from statica._headers import Headers
from statica._utils import make_async_iterator

Body = Union[bytes, AsyncIterator[bytes], None]


@dataclass
class CacheEntry:
    """
    Cached metadata, and optionally content, for one served file.

    Entries are keyed by their public request path and mutated in place by the
    engine. Legal combinations of the optional fields:

    - ``content_hash`` is only meaningful while ``last_modified`` matches the file;
      the engine clears it as soon as it sees a different mtime.
    - ``buffer`` is set only for entries loaded with ``buffer=True``; such entries
      are never re-checked against the filesystem.
    - ``compressed`` is computed on the first compressible request, or taken from
      a precompiled ``.gz`` sibling, and then kept for the life of the entry.

    Every field has a default so an entry can be pre-seeded with per-file settings
    (e.g. ``CacheEntry(max_age=3600)``) before the file is loaded.
    """

    path: Optional[str] = None
    content_type: Optional[str] = None
    last_modified: Optional[float] = None
    size: Optional[int] = None
    content_hash: Optional[str] = None
    cache_control: Optional[str] = None
    max_age: int = 0
    buffer: Optional[bytes] = None
    compressed: Optional[bytes] = None

    @property
    def loaded(self) -> bool:
        """Whether the file metadata needed to answer a request is present."""
        return self.path is not None and self.last_modified is not None and self.size is not None


@dataclass
class Request:
    method: str
    path: str
    headers: Headers = field(default_factory=Headers)


@dataclass
class Response:
    status_code: int
    headers: Headers = field(default_factory=Headers)
    stream: Body = None

    async def _aiter_stream(self) -> AsyncIterator[bytes]:
        if self.stream is None:
            return
        if isinstance(self.stream, bytes):
            yield self.stream
            return
        async for chunk in self.stream:
            yield chunk

    async def aread(self) -> bytes:
        """
        Asynchronously reads the entire response body.

        A streamed body is consumed once and replaced by the collected bytes.
        """
        collected = b"".join([chunk async for chunk in self._aiter_stream()])
        self.stream = make_async_iterator([collected]) if collected else None
        return collected


@dataclass
class Handled:
    """The request was served; ``response`` must be sent to the client."""

    response: Response


@dataclass
class NotHandled:
    """The request is not for a cached file and belongs to the next handler."""


HandleResult = Union[Handled, NotHandled]
