from __future__ import annotations

import base64
import calendar
import hashlib
import posixpath
import typing as tp
from email.utils import formatdate, parsedate_tz
from typing import AsyncIterator, Iterable
from urllib.parse import unquote


def parse_date(date: str) -> tp.Optional[int]:
    expires = parsedate_tz(date)
    if expires is None:
        return None
    timestamp = calendar.timegm(expires[:6])
    return timestamp


def http_date(timestamp: float) -> str:
    """
    Format a POSIX timestamp as an HTTP date.

    Example output: 'Mon, 01 Jan 2024 00:00:00 GMT'
    """
    return formatdate(timeval=timestamp, localtime=False, usegmt=True)


def content_digest(data: bytes) -> str:
    """Base64 encoded MD5 digest of ``data``, as used for ETag and Content-MD5."""
    return encode_digest(hashlib.md5(data, usedforsecurity=False).digest())


def encode_digest(digest: bytes) -> str:
    return base64.b64encode(digest).decode("ascii")


def safe_unquote(path: str) -> tp.Optional[str]:
    """
    Percent-decode a request path.

    Returns None when the decoded bytes are not valid UTF-8.

    Examples:
        >>> safe_unquote("/%E4%B8%AD%E6%96%87")
        '/中文'
        >>> safe_unquote("/%E4%B8") is None
        True
    """
    try:
        return unquote(path, errors="strict")
    except UnicodeDecodeError:
        return None


def normalize_url_path(path: str) -> str:
    """
    Collapse repeated slashes and resolve ``.``/``..`` segments.

    The result always starts with a single slash and never climbs above it.

    Examples:
        >>> normalize_url_path("//index.js")
        '/index.js'
        >>> normalize_url_path("/a/./b/../c.js")
        '/a/c.js'
        >>> normalize_url_path("/../package.json")
        '/package.json'
    """
    return posixpath.normpath("/" + path.lstrip("/"))


async def make_async_iterator(
    iterable: Iterable[bytes],
) -> AsyncIterator[bytes]:
    for item in iterable:
        yield item
