from __future__ import annotations

import re
from typing import (
    Any,
    Dict,
    Iterator,
    List,
    Mapping,
    MutableMapping,
    Optional,
    Tuple,
    Union,
)

from statica._utils import parse_date

HEADERS_ENCODING = "iso-8859-1"

_NO_CACHE_RE = re.compile(r"(?:^|,)\s*?no-cache\s*?(?:,|$)", re.IGNORECASE)


class Headers(MutableMapping[str, str]):
    """
    Case-insensitive header mapping.

    Assigning a key replaces every previous value; use ``add`` to append one.
    The original casing of the first assignment is kept for output.
    """

    def __init__(self, headers: Optional[Mapping[str, Union[str, List[str]]]] = None) -> None:
        self._headers: Dict[str, Tuple[str, List[str]]] = {}
        for key, value in (headers or {}).items():
            self._headers[key.lower()] = (key, [value] if isinstance(value, str) else value[:])

    @classmethod
    def from_raw(cls, raw_headers: List[Tuple[bytes, bytes]]) -> "Headers":
        headers = cls()
        for key, value in raw_headers:
            headers.add(key.decode(HEADERS_ENCODING), value.decode(HEADERS_ENCODING))
        return headers

    def get_list(self, key: str) -> Optional[List[str]]:
        item = self._headers.get(key.lower())
        return None if item is None else item[1]

    def add(self, key: str, value: str) -> None:
        name, values = self._headers.setdefault(key.lower(), (key, []))
        values.append(value)

    def raw(self) -> List[Tuple[bytes, bytes]]:
        return [
            (name.lower().encode(HEADERS_ENCODING), value.encode(HEADERS_ENCODING))
            for name, values in self._headers.values()
            for value in values
        ]

    def __getitem__(self, key: str) -> str:
        return ", ".join(self._headers[key.lower()][1])

    def __setitem__(self, key: str, value: str) -> None:
        self._headers[key.lower()] = (key, [value])

    def __delitem__(self, key: str) -> None:
        del self._headers[key.lower()]

    def __iter__(self) -> Iterator[str]:
        return (name for name, _ in self._headers.values())

    def __len__(self) -> int:
        return len(self._headers)

    def __repr__(self) -> str:
        return repr({name: values for name, values in self._headers.values()})

    def __eq__(self, other_headers: Any) -> bool:
        return isinstance(other_headers, Headers) and self._headers == other_headers._headers


def parse_accept_encoding(header: str) -> Dict[str, float]:
    """
    Parse an Accept-Encoding header into a mapping of coding to quality.

    Examples:
        >>> parse_accept_encoding("gzip;q=0.5, br")
        {'gzip': 0.5, 'br': 1.0}
        >>> parse_accept_encoding("")
        {}
    """
    q_values: Dict[str, float] = {}
    for raw_part in header.split(","):
        token = raw_part.strip()
        if not token:
            continue
        parts = [segment.strip() for segment in token.split(";") if segment.strip()]
        if not parts:
            continue
        encoding = parts[0].lower()
        quality = 1.0
        for param in parts[1:]:
            name, _, value = param.partition("=")
            if name.strip() != "q":
                continue
            try:
                quality = float(value)
            except ValueError:
                quality = 0.0
        existing = q_values.get(encoding)
        if existing is None or quality > existing:
            q_values[encoding] = quality
    return q_values


def accepts_encoding(header: Optional[str], encoding: str) -> bool:
    """
    Whether a client sending ``header`` as Accept-Encoding accepts ``encoding``.

    A missing header only allows the identity coding.
    """
    if not header:
        return encoding == "identity"
    q_values = parse_accept_encoding(header)
    quality = q_values.get(encoding.lower())
    if quality is None:
        quality = q_values.get("*")
    return quality is not None and quality > 0


def parse_etag_list(value: str) -> List[str]:
    return [tag.strip() for tag in value.split(",") if tag.strip()]


def is_fresh(request_headers: Mapping[str, str], response_headers: Mapping[str, str]) -> bool:
    """
    Check whether the client's cached copy is still fresh.

    Compares the request's conditional headers (If-None-Match, If-Modified-Since)
    against the validators (ETag, Last-Modified) of the response about to be sent.
    A request with ``Cache-Control: no-cache`` is never fresh.

    Args:
        request_headers: Headers of the incoming request.
        response_headers: Headers prepared for the response.

    Returns:
        True when a 304 Not Modified can be sent instead of the body.
    """
    modified_since = request_headers.get("if-modified-since")
    none_match = request_headers.get("if-none-match")

    if not modified_since and not none_match:
        return False

    cache_control = request_headers.get("cache-control")
    if cache_control and _NO_CACHE_RE.search(cache_control):
        return False

    if none_match and none_match.strip() != "*":
        etag = response_headers.get("etag")
        if not etag:
            return False
        matched = any(
            match == etag or match == "W/" + etag or "W/" + match == etag for match in parse_etag_list(none_match)
        )
        if not matched:
            return False

    if modified_since:
        last_modified = response_headers.get("last-modified")
        last_modified_ts = parse_date(last_modified) if last_modified else None
        modified_since_ts = parse_date(modified_since)
        if last_modified_ts is None or modified_since_ts is None or last_modified_ts > modified_since_ts:
            return False

    return True
