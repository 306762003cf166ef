from __future__ import annotations

import gzip
import hashlib
import logging
import os
import typing as t
import zlib
from dataclasses import replace
from typing import AsyncIterator

import anyio
import anyio.to_thread

from statica._headers import Headers, accepts_encoding, is_fresh
from statica._loader import load_entry
from statica._mime import is_compressible
from statica._options import StaticCacheOptions
from statica._preload import preload
from statica._resolver import normalize_prefix, resolve_path
from statica._store import BaseStore, make_store
from statica._utils import encode_digest, http_date
from statica.models import CacheEntry, Handled, HandleResult, NotHandled, Request, Response

logger = logging.getLogger("statica.engine")

# Files at or below this size are never compressed.
COMPRESSION_THRESHOLD = 1024
CHUNK_SIZE = 64 * 1024


async def gzip_stream(stream: AsyncIterator[bytes]) -> AsyncIterator[bytes]:
    """Compress a byte stream on the fly into a single gzip member."""
    compressor = zlib.compressobj(wbits=zlib.MAX_WBITS | 16)
    async for chunk in stream:
        data = compressor.compress(chunk)
        if data:
            yield data
    yield compressor.flush()


async def _iter_file(path: str, entry: CacheEntry, key: str) -> AsyncIterator[bytes]:
    # Only hash when the identity is unknown; record it once the whole file was read.
    digest = hashlib.md5(usedforsecurity=False) if entry.content_hash is None else None
    # Opened on first iteration, so a body that is never sent never holds a handle
    async with await anyio.open_file(path, "rb") as file:
        while True:
            chunk = await file.read(CHUNK_SIZE)
            if not chunk:
                break
            if digest is not None:
                digest.update(chunk)
            yield chunk
    if digest is not None:
        entry.content_hash = encode_digest(digest.digest())
        logger.debug("Recorded content hash from stream: key=%s", key)


class StaticCache:
    """
    Serves files of a directory from an in-memory cache of entries.

    This class is independent of any web framework and works only with internal
    models; ``statica.asgi.StaticCacheMiddleware`` adapts it to ASGI.

    Args:
        directory: Root directory to serve. Takes priority over ``options.directory``;
            defaults to the current working directory when neither is given.
        options: Serving options. Defaults to ``StaticCacheOptions()``.
        files: Mapping or get/set store for cache entries. Takes priority over
            ``options.files``.

    Example:
        ```python
        from statica import StaticCache, StaticCacheOptions
        from statica.models import Request

        cache = StaticCache("public", StaticCacheOptions(buffer=True, gzip=True))
        result = await cache.handle_request(Request(method="GET", path="/index.html"))
        ```
    """

    def __init__(
        self,
        directory: t.Optional[str] = None,
        options: t.Optional[StaticCacheOptions] = None,
        files: t.Any = None,
    ) -> None:
        options = options if options is not None else StaticCacheOptions()
        if not directory:
            directory = options.directory or os.getcwd()
        self.directory = os.path.abspath(directory)
        self.options = replace(options, directory=self.directory, prefix=normalize_prefix(options.prefix))
        self.files: BaseStore = make_store(files if files is not None else options.files)

        if self.options.preload:
            preload(self.directory, self.options, self.files)

    async def handle_request(self, request: Request) -> HandleResult:
        resolved = await resolve_path(request, self.options, self.directory, self.files)
        if resolved is None:
            return NotHandled()

        entry = resolved.entry
        if entry is None:
            assert resolved.name is not None
            logger.debug("Cache miss, loading file: key=%s", resolved.key)
            entry = await anyio.to_thread.run_sync(load_entry, resolved.name, self.directory, self.options, self.files)
        else:
            logger.debug("Cache hit: key=%s", resolved.key)

        return Handled(await self._build_response(request, resolved.key, entry))

    async def _build_response(self, request: Request, key: str, entry: CacheEntry) -> Response:
        assert entry.path is not None
        headers = Headers()
        if self.options.gzip:
            headers["Vary"] = "Accept-Encoding"

        if entry.buffer is None:
            stats = await anyio.Path(entry.path).stat()
            if stats.st_mtime != entry.last_modified:
                logger.debug("File changed on disk: key=%s", key)
                entry.last_modified = stats.st_mtime
                entry.content_hash = None
                entry.size = stats.st_size

        assert entry.last_modified is not None and entry.size is not None
        headers["Last-Modified"] = http_date(entry.last_modified)
        if entry.content_hash:
            headers["ETag"] = f'"{entry.content_hash}"'

        if is_fresh(request.headers, headers):
            logger.debug("Not modified: key=%s", key)
            return Response(status_code=304, headers=headers)

        accept_gzip = accepts_encoding(request.headers.get("accept-encoding"), "gzip")
        send_compressed_copy = entry.compressed is not None and accept_gzip

        headers["Content-Type"] = entry.content_type or "application/octet-stream"
        content_length = len(entry.compressed) if entry.compressed is not None and send_compressed_copy else entry.size
        headers["Content-Length"] = str(content_length)
        headers["Cache-Control"] = (
            entry.cache_control if entry.cache_control is not None else f"public, max-age={entry.max_age}"
        )
        if entry.content_hash:
            headers["Content-MD5"] = entry.content_hash

        if request.method == "HEAD":
            return Response(status_code=200, headers=headers)

        should_gzip = (
            self.options.gzip
            and entry.size > COMPRESSION_THRESHOLD
            and accept_gzip
            and is_compressible(headers["Content-Type"])
        )

        if entry.compressed is not None:
            if send_compressed_copy:
                headers["Content-Encoding"] = "gzip"
                return Response(status_code=200, headers=headers, stream=entry.compressed)
            if entry.buffer is not None:
                return Response(status_code=200, headers=headers, stream=entry.buffer)

        if entry.buffer is not None:
            if not should_gzip:
                return Response(status_code=200, headers=headers, stream=entry.buffer)
            precompiled = self.files.get(key + ".gz")
            if self.options.use_precompiled_gzip and precompiled is not None and precompiled.buffer is not None:
                logger.debug("Using precompiled gzip file: key=%s", key)
                entry.compressed = precompiled.buffer
            else:
                logger.debug("Compressing buffered content: key=%s", key)
                entry.compressed = await anyio.to_thread.run_sync(gzip.compress, entry.buffer)
            headers["Content-Encoding"] = "gzip"
            headers["Content-Length"] = str(len(entry.compressed))
            return Response(status_code=200, headers=headers, stream=entry.compressed)

        stream = _iter_file(entry.path, entry, key)
        if should_gzip:
            # The compressed length is unknown until the whole stream was read
            del headers["Content-Length"]
            headers["Content-Encoding"] = "gzip"
            stream = gzip_stream(stream)
        return Response(status_code=200, headers=headers, stream=stream)
