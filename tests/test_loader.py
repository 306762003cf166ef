import os

import pytest

from statica import CacheEntry, MappingStore, StaticCacheOptions
from statica._loader import load_entry, public_key

from conftest import FIXED_MTIME, PACKAGE_JSON


def test_public_key():
    assert public_key("/", "index.js") == "/index.js"
    assert public_key("/", "css/site.css") == "/css/site.css"
    assert public_key("/static/", "index.js") == "/static/index.js"


def test_load_entry_streamed(static_dir):
    store = MappingStore()

    entry = load_entry("package.json", str(static_dir), StaticCacheOptions(prefix="/"), store)

    assert store.get("/package.json") is entry
    assert entry.path == os.path.join(str(static_dir), "package.json")
    assert entry.content_type == "application/json; charset=utf-8"
    assert entry.last_modified == FIXED_MTIME
    assert entry.size == len(PACKAGE_JSON)
    assert entry.content_hash is not None
    assert entry.max_age == 0
    assert entry.cache_control is None
    assert entry.buffer is None
    assert entry.compressed is None


def test_load_entry_buffered(static_dir):
    entry = load_entry("package.json", str(static_dir), StaticCacheOptions(prefix="/", buffer=True), MappingStore())

    assert entry.buffer == PACKAGE_JSON


def test_load_entry_hash(static_dir):
    entry = load_entry("index.js", str(static_dir), StaticCacheOptions(prefix="/"), MappingStore())

    assert entry.content_hash == "DMF1ucDxtqgxw5niaXcmYQ=="


def test_load_entry_nested_file(static_dir):
    entry = load_entry("css/site.css", str(static_dir), StaticCacheOptions(prefix="/"), MappingStore())

    assert entry.path == os.path.join(str(static_dir), "css", "site.css")
    assert entry.content_type.startswith("text/css")


def test_load_entry_unknown_type(static_dir):
    (static_dir / "data.unknownext").write_bytes(b"\x00\x01")

    entry = load_entry("data.unknownext", str(static_dir), StaticCacheOptions(prefix="/"), MappingStore())

    assert entry.content_type == "application/octet-stream"


def test_load_entry_takes_options(static_dir):
    options = StaticCacheOptions(prefix="/", max_age=60, cache_control="no-store")

    entry = load_entry("index.js", str(static_dir), options, MappingStore())

    assert entry.max_age == 60
    assert entry.cache_control == "no-store"


def test_load_entry_keeps_preseeded_max_age(static_dir):
    seeded = CacheEntry(max_age=3600)
    store = MappingStore({"/index.js": seeded})

    entry = load_entry("index.js", str(static_dir), StaticCacheOptions(prefix="/", max_age=60), store)

    assert entry is seeded
    assert entry.max_age == 3600
    assert entry.path is not None


def test_load_entry_missing_file_propagates(static_dir):
    with pytest.raises(FileNotFoundError):
        load_entry("missing.js", str(static_dir), StaticCacheOptions(prefix="/"), MappingStore())
