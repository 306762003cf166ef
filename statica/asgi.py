from __future__ import annotations

import logging
import typing as t
from collections.abc import AsyncIterator
from dataclasses import replace
from urllib.parse import quote

from typing_extensions import assert_never

from statica._engine import StaticCache
from statica._headers import Headers
from statica._options import StaticCacheOptions
from statica._store import BaseStore
from statica.models import Handled, NotHandled, Request, Response

# Configure logger for this module
logger = logging.getLogger(__name__)


class _ASGIScope(t.TypedDict, total=False):
    """ASGI HTTP scope type."""

    type: str
    asgi: dict[str, str]
    http_version: str
    method: str
    scheme: str
    path: str
    raw_path: bytes
    query_string: bytes
    root_path: str
    headers: list[tuple[bytes, bytes]]
    server: tuple[str, int | None] | None
    client: tuple[str, int] | None
    state: dict[str, t.Any]
    extensions: dict[str, t.Any]


_Scope = _ASGIScope
_Receive = t.Callable[[], t.Awaitable[dict[str, t.Any]]]
_Send = t.Callable[[dict[str, t.Any]], t.Awaitable[None]]
_ASGIApp = t.Callable[[_Scope, _Receive, _Send], t.Awaitable[None]]


class StaticCacheMiddleware:
    """
    ASGI middleware that serves static files from an in-memory cache.

    GET and HEAD requests for cached files (or, with ``dynamic=True``, files found
    under ``directory``) are answered directly. Everything else is passed on to
    the wrapped application untouched, so a missing file ends up as whatever
    the application answers, usually a 404.

    Args:
        app: The ASGI application to wrap.
        directory: Root directory to serve. Takes priority over ``options.directory``.
        options: Serving options. Defaults to ``StaticCacheOptions()``.
        files: Mapping or get/set store for cache entries.
        **option_overrides: Fields of ``StaticCacheOptions`` overriding ``options``.

    Example:
        ```python
        from statica import LRUCache
        from statica.asgi import StaticCacheMiddleware

        app = StaticCacheMiddleware(
            app=my_asgi_app,
            directory="public",
            prefix="/static",
            buffer=True,
            gzip=True,
        )

        # Bounded cache, files loaded on first request
        app = StaticCacheMiddleware(
            app=my_asgi_app,
            directory="public",
            files=LRUCache(1000),
            preload=False,
            dynamic=True,
        )
        ```
    """

    def __init__(
        self,
        app: _ASGIApp,
        directory: str | None = None,
        options: StaticCacheOptions | None = None,
        files: t.Any = None,
        **option_overrides: t.Any,
    ) -> None:
        if option_overrides:
            options = replace(options if options is not None else StaticCacheOptions(), **option_overrides)
        self.app = app
        self.cache = StaticCache(directory, options, files)

        logger.info(
            "Initialized StaticCacheMiddleware with directory=%s, prefix=%s, store=%s",
            self.cache.directory,
            self.cache.options.prefix,
            type(self.files).__name__,
        )

    @property
    def files(self) -> BaseStore:
        return self.cache.files

    async def __call__(self, scope: _Scope, receive: _Receive, send: _Send) -> None:
        """
        Handle an ASGI request.

        Args:
            scope: The ASGI scope dictionary.
            receive: The ASGI receive callable.
            send: The ASGI send callable.
        """
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = self._asgi_to_internal_request(scope)

        try:
            result = await self.cache.handle_request(request)
        except Exception as e:
            logger.error(
                "Error serving static file: method=%s path=%s error=%s",
                request.method,
                request.path,
                str(e),
                exc_info=True,
            )
            raise

        if isinstance(result, NotHandled):
            await self.app(scope, receive, send)
        elif isinstance(result, Handled):
            await self._send_internal_response(result.response, send)
        else:
            assert_never(result)

    def _asgi_to_internal_request(self, scope: _Scope) -> Request:
        """
        Convert an ASGI HTTP scope to an internal Request object.

        The path is taken from ``raw_path`` so percent-encoding is preserved;
        servers that do not provide it get the decoded path re-encoded.
        """
        raw_path = scope.get("raw_path")
        if raw_path:
            # Some servers include the query string in raw_path
            path = raw_path.split(b"?", 1)[0].decode("latin1")
        else:
            path = quote(scope.get("path", "/"))

        return Request(
            method=scope.get("method", "GET"),
            path=path,
            headers=Headers.from_raw(scope.get("headers", [])),
        )

    async def _send_internal_response(self, response: Response, send: _Send) -> None:
        """
        Send an internal Response to the ASGI send callable.

        Args:
            response: The internal Response object.
            send: The ASGI send callable.
        """
        await send(
            {
                "type": "http.response.start",
                "status": response.status_code,
                "headers": response.headers.raw(),
            }
        )

        body = response.stream
        if body is None or isinstance(body, bytes):
            await send({"type": "http.response.body", "body": body or b"", "more_body": False})
        elif isinstance(body, AsyncIterator):
            bytes_sent = 0
            async for chunk in body:
                await send({"type": "http.response.body", "body": chunk, "more_body": True})
                bytes_sent += len(chunk)
            await send({"type": "http.response.body", "body": b"", "more_body": False})
            logger.debug("Streamed response body: total_bytes=%d", bytes_sent)
        else:
            assert_never(body)
