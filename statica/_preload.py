from __future__ import annotations

import logging
import os
import typing as t

from statica._exceptions import ConfigurationError
from statica._loader import load_entry
from statica._options import FileFilter, StaticCacheOptions
from statica._store import BaseStore

logger = logging.getLogger("statica.preload")


def walk_files(directory: str) -> t.List[str]:
    """
    List every regular file below ``directory``, recursively.

    Names are relative to ``directory``, use ``/`` as separator and come out
    sorted. Hidden files and directories (names starting with ``.``) are skipped.
    """
    names: t.List[str] = []
    for root, dirs, files in os.walk(directory):
        dirs[:] = sorted(name for name in dirs if not name.startswith("."))
        for name in sorted(files):
            if name.startswith("."):
                continue
            full_path = os.path.join(root, name)
            if not os.path.isfile(full_path):
                continue
            names.append(os.path.relpath(full_path, directory).replace(os.sep, "/"))
    return names


def make_file_filter(file_filter: t.Union[FileFilter, t.Collection[str], None]) -> FileFilter:
    if file_filter is None:
        return lambda name: True
    if callable(file_filter):
        return file_filter
    if isinstance(file_filter, (list, tuple, set, frozenset)):
        allowed = frozenset(file_filter)
        return lambda name: name in allowed
    raise ConfigurationError(
        f"filter must be a callable or a sequence of relative paths, not {type(file_filter).__name__}"
    )


def preload(directory: str, options: StaticCacheOptions, store: BaseStore) -> None:
    """
    Load every file of ``directory`` accepted by ``options.filter`` into ``store``.

    Filtering happens before anything is read, so rejected files are never
    touched. Files are loaded one after another.
    """
    file_filter = make_file_filter(options.filter)
    names = [name for name in walk_files(directory) if file_filter(name)]
    for name in names:
        load_entry(name, directory, options, store)
    logger.info("Preloaded %d files from %s", len(names), directory)
