import gzip
import os
import typing as t
from pathlib import Path
from typing import Any

import httpx
import pytest

# Fixed mtime for files whose headers are asserted literally: 2024-01-01 00:00:00 UTC
FIXED_MTIME = 1704067200

PACKAGE_JSON = b'{\n  "name": "fixture",\n  "version": "1.0.0"\n}\n'
BIG_TEXT = b"Lorem ipsum dolor sit amet, consectetur adipiscing elit.\n" * 35


def set_mtime(path: Path, mtime: float) -> None:
    os.utime(path, (mtime, mtime))


@pytest.fixture()
def static_dir(tmp_path: Path) -> Path:
    """
    A directory laid out like a small site:

        index.js            "a"
        package.json        small JSON document
        big.txt             2000+ bytes of compressible text
        logo.png            2000 bytes of binary data
        css/site.css        nested file
        .gitignore          hidden file
        .git/config         file in a hidden directory
    """
    root = tmp_path / "public"
    root.mkdir()
    (root / "index.js").write_bytes(b"a")
    (root / "package.json").write_bytes(PACKAGE_JSON)
    (root / "big.txt").write_bytes(BIG_TEXT)
    (root / "logo.png").write_bytes(b"\x89PNG\r\n" + b"\x00" * 1994)
    (root / "css").mkdir()
    (root / "css" / "site.css").write_bytes(b"body { color: red; }\n")
    (root / ".gitignore").write_bytes(b"*.pyc\n")
    (root / ".git").mkdir()
    (root / ".git" / "config").write_bytes(b"[core]\n")
    for path in root.rglob("*"):
        if path.is_file():
            set_mtime(path, FIXED_MTIME)
    return root


@pytest.fixture()
def precompiled_dir(static_dir: Path) -> Path:
    """``static_dir`` plus a ``big.txt.gz`` whose content differs from ``big.txt``."""
    (static_dir / "big.txt.gz").write_bytes(gzip.compress(b"precompiled"))
    return static_dir


async def not_found_app(scope: Any, receive: Any, send: Any) -> None:
    """Downstream ASGI app answering every request with 404."""
    if scope["type"] != "http":
        return

    body = b"Not Found"
    await send(
        {
            "type": "http.response.start",
            "status": 404,
            "headers": [
                (b"content-type", b"text/plain"),
                (b"content-length", str(len(body)).encode()),
            ],
        }
    )
    await send({"type": "http.response.body", "body": body, "more_body": False})


@pytest.fixture()
def make_client() -> t.Callable[[Any], httpx.AsyncClient]:
    def factory(app: Any) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://testserver")

    return factory
