from __future__ import annotations

import typing as t
from dataclasses import dataclass, field

from statica._exceptions import ConfigurationError

if t.TYPE_CHECKING:
    from statica._store import BaseStore
    from statica.models import CacheEntry

FileFilter = t.Callable[[str], bool]


@dataclass
class StaticCacheOptions:
    """
    Configuration options for serving a directory of static files.

    Every option is optional. The defaults stream files from the current working
    directory, preload all of them at startup and never compress.

    Attributes:
    ----------
    directory : str | None
        Root directory from which files are served.

        Default: None (the current working directory)

    max_age : int
        Seconds used to build ``Cache-Control: public, max-age=<n>`` when
        ``cache_control`` is not set. A non-zero ``max_age`` already present on a
        pre-seeded entry wins over this value.

        Default: 0

    cache_control : str | None
        Literal Cache-Control header value. Overrides ``max_age``.

        Default: None

    buffer : bool
        Keep file contents in memory instead of streaming from disk on every
        request. Buffered entries are never re-checked against the filesystem.

        Default: False

    gzip : bool
        Compress responses with gzip when the client accepts it, the file is
        larger than 1024 bytes and its type is compressible.

        Default: False

        Examples:
        --------
        >>> options = StaticCacheOptions(buffer=True, gzip=True)

    use_precompiled_gzip : bool
        With ``buffer`` and ``gzip``, use the buffered content of a ``<path>.gz``
        sibling entry as the compressed representation, like nginx ``gzip_static``.

        Default: False

    alias : dict[str, str]
        Whole-path aliases applied after normalization, e.g. ``{"/": "/index.html"}``.

        Default: {}

    prefix : str
        URL prefix under which files are exposed.

        Default: "" (files are served from "/")

        Examples:
        --------
        >>> # GET /static/app.js serves <directory>/app.js
        >>> options = StaticCacheOptions(prefix="/static")

    filter : Callable[[str], bool] | Sequence[str] | None
        Restricts which files are preloaded. A callable receives the relative path
        of each file; a sequence is an allow-list of relative paths.

        Default: None (preload every non-hidden file)

    dynamic : bool
        Load files that were not cached at startup on their first request.

        Default: False

    preload : bool
        Cache every file of ``directory`` when the middleware is created.
        Usually disabled together with ``dynamic=True``.

        Default: True

    files : MutableMapping[str, CacheEntry] | object with get/set | None
        Store used for cache entries. A plain mapping is used as is; an object
        exposing callable ``get`` and ``set`` (for example ``LRUCache``) owns
        eviction.

        Default: None (a new dict)
    """

    directory: t.Optional[str] = None
    max_age: int = 0
    cache_control: t.Optional[str] = None
    buffer: bool = False
    gzip: bool = False
    use_precompiled_gzip: bool = False
    alias: t.Dict[str, str] = field(default_factory=dict)
    prefix: str = ""
    filter: t.Union[FileFilter, t.Sequence[str], None] = None
    dynamic: bool = False
    preload: bool = True
    files: t.Union[t.MutableMapping[str, "CacheEntry"], "BaseStore", t.Any, None] = None

    def __post_init__(self) -> None:
        if self.filter is None or callable(self.filter):
            return
        if not isinstance(self.filter, (list, tuple, set, frozenset)):
            raise ConfigurationError(
                f"filter must be a callable or a sequence of relative paths, not {type(self.filter).__name__}"
            )
