from __future__ import annotations

import os
import posixpath
import stat
import typing as t
from dataclasses import dataclass

import anyio

from statica._options import StaticCacheOptions
from statica._store import BaseStore
from statica._utils import normalize_url_path, safe_unquote
from statica.models import CacheEntry, Request

SUPPORTED_METHODS = ("GET", "HEAD")


@dataclass
class Resolved:
    """
    A request path that maps to a file under the served directory.

    Exactly one of ``entry`` (cache hit) and ``name`` (file to load, relative to
    the directory) is set.
    """

    key: str
    entry: t.Optional[CacheEntry] = None
    name: t.Optional[str] = None


def normalize_prefix(prefix: t.Optional[str]) -> str:
    """
    Examples:
        >>> normalize_prefix("")
        '/'
        >>> normalize_prefix("/static")
        '/static/'
        >>> normalize_prefix("/static///")
        '/static/'
    """
    return (prefix or "").rstrip("/") + "/"


def is_within(directory: str, path: str) -> bool:
    return path == directory or path.startswith(directory.rstrip(os.sep) + os.sep)


async def resolve_path(
    request: Request,
    options: StaticCacheOptions,
    directory: str,
    store: BaseStore,
) -> t.Optional[Resolved]:
    """
    Map an incoming request onto a cache key, or decline it.

    Returns None for anything that is not a request for a servable file: other
    methods, paths outside the prefix, undecodable paths, unknown paths when
    dynamic loading is off, hidden files, paths escaping ``directory`` and
    paths that are not regular files.

    Args:
        request: The incoming request; ``request.path`` is still percent-encoded.
        options: Options with an already normalized ``prefix``.
        directory: Absolute, normalized root directory.
        store: Store holding the cache entries.
    """
    if request.method not in SUPPORTED_METHODS:
        return None
    # Cheap check before decoding anything
    if not request.path.startswith(options.prefix):
        return None

    decoded = safe_unquote(request.path)
    if decoded is None:
        return None
    key = normalize_url_path(decoded)
    key = options.alias.get(key, key)

    entry = store.get(key)
    if entry is not None and entry.loaded:
        return Resolved(key=key, entry=entry)

    if not options.dynamic:
        return None
    if posixpath.basename(key).startswith("."):
        return None

    name = key.lstrip("/")
    if options.prefix != "/":
        file_prefix = posixpath.normpath(options.prefix.strip("/"))
        if name != file_prefix and not name.startswith(file_prefix + "/"):
            return None
        name = name[len(file_prefix) :].lstrip("/")

    full_path = os.path.normpath(os.path.join(directory, *name.split("/")))
    if not is_within(directory, full_path):
        return None

    try:
        stats = await anyio.Path(full_path).stat()
    except (FileNotFoundError, NotADirectoryError, ValueError):
        return None
    if not stat.S_ISREG(stats.st_mode):
        return None

    return Resolved(key=key, name=name)
