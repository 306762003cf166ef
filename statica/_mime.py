from __future__ import annotations

import mimetypes

DEFAULT_CONTENT_TYPE = "application/octet-stream"

# Non-text media types that are served with an explicit UTF-8 charset.
_UTF8_MEDIA_TYPES = frozenset(
    {
        "application/javascript",
        "application/json",
        "application/x-javascript",
        "application/xml",
    }
)

_ENCODING_MEDIA_TYPES = {
    "gzip": "application/gzip",
    "bzip2": "application/x-bzip2",
    "xz": "application/x-xz",
    "br": "application/x-brotli",
}

_COMPRESSIBLE_MEDIA_TYPES = frozenset(
    {
        "application/javascript",
        "application/json",
        "application/manifest+json",
        "application/rss+xml",
        "application/atom+xml",
        "application/wasm",
        "application/x-javascript",
        "application/xhtml+xml",
        "application/xml",
        "application/x-yaml",
        "application/yaml",
        "font/otf",
        "font/ttf",
        "image/bmp",
        "image/svg+xml",
        "image/vnd.microsoft.icon",
        "image/x-icon",
    }
)


def guess_content_type(path: str) -> str:
    """
    Resolve the Content-Type for ``path`` from its extension.

    Text types and JSON/JavaScript get a ``charset=utf-8`` parameter;
    unknown extensions fall back to ``application/octet-stream``. Files with a
    compression suffix get the archive type, since that is what is sent.

    Examples:
        >>> guess_content_type("/package.json")
        'application/json; charset=utf-8'
        >>> guess_content_type("/app.js.gz")
        'application/gzip'
        >>> guess_content_type("/blob.unknownext")
        'application/octet-stream'
    """
    guessed, encoding = mimetypes.guess_type(path, strict=False)
    if encoding is not None:
        # The bytes on disk are the archive, not the wrapped type
        return _ENCODING_MEDIA_TYPES.get(encoding, DEFAULT_CONTENT_TYPE)
    if guessed is None:
        return DEFAULT_CONTENT_TYPE
    if guessed.startswith("text/") or guessed in _UTF8_MEDIA_TYPES:
        return f"{guessed}; charset=utf-8"
    return guessed


def is_compressible(content_type: str) -> bool:
    media_type = content_type.split(";", 1)[0].strip().lower()
    if media_type.startswith("text/"):
        return True
    if media_type.endswith("+json") or media_type.endswith("+xml"):
        return True
    return media_type in _COMPRESSIBLE_MEDIA_TYPES
