from __future__ import annotations

import logging
import os
import posixpath

from statica._mime import guess_content_type
from statica._options import StaticCacheOptions
from statica._store import BaseStore
from statica._utils import content_digest
from statica.models import CacheEntry

logger = logging.getLogger("statica.loader")


def public_key(prefix: str, name: str) -> str:
    """
    Request path under which the file ``name`` is served.

    Examples:
        >>> public_key("/", "css/site.css")
        '/css/site.css'
        >>> public_key("/static/", "app.js")
        '/static/app.js'
    """
    return posixpath.normpath(posixpath.join(prefix, name))


def load_entry(name: str, directory: str, options: StaticCacheOptions, store: BaseStore) -> CacheEntry:
    """
    Read a file from disk and record it in ``store``.

    The caller has already checked that the file exists, so stat and read
    errors are not handled here and propagate.

    Args:
        name: Path of the file relative to ``directory``, with ``/`` separators.
        directory: Root directory being served.
        options: Options with an already normalized ``prefix``.
        store: Store the entry is written to.

    Returns:
        The loaded entry. A pre-seeded entry under the same key is reused, so its
        ``max_age`` survives loading.
    """
    key = public_key(options.prefix, name)
    entry = store.get(key)
    if entry is None:
        entry = CacheEntry()

    entry.path = os.path.join(directory, *name.split("/"))
    stats = os.stat(entry.path)
    with open(entry.path, "rb") as f:
        content = f.read()

    entry.cache_control = options.cache_control
    entry.max_age = entry.max_age if entry.max_age else options.max_age or 0
    entry.content_type = guess_content_type(key)
    entry.last_modified = stats.st_mtime
    entry.size = stats.st_size
    entry.content_hash = content_digest(content)
    if options.buffer:
        entry.buffer = content

    store.set(key, entry)
    logger.debug(
        "Loaded file: key=%s size=%d content_type=%s buffered=%s",
        key,
        entry.size,
        entry.content_type,
        options.buffer,
    )
    return entry
