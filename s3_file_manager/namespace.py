from __future__ import annotations
"""Folder/file projection of a flat, delimiter-partitioned key listing."""
import logging
from typing import Iterable

from .models import NamespaceView

DELIMITER = "/"

LOGGER = logging.getLogger(__name__)


def project(keys: Iterable[str], query_prefix: str = "") -> NamespaceView:
    """Split ``keys`` into the immediate child folders and files of ``query_prefix``.

    A key equal to ``query_prefix`` is the marker of the queried folder itself
    and is dropped. Keys that do not start with ``query_prefix`` are excluded
    rather than raising, since the store is expected to have filtered them.
    """

    folders: set[str] = set()
    files: list[str] = []
    for key in keys:
        if key == query_prefix:
            continue
        if not key.startswith(query_prefix):
            LOGGER.debug("Skipping key '%s' outside prefix '%s'", key, query_prefix)
            continue
        relative = key[len(query_prefix):]
        if DELIMITER in relative:
            first_component = relative.split(DELIMITER, 1)[0]
            folders.add(f"{query_prefix}{first_component}{DELIMITER}")
        elif not key.endswith(DELIMITER):
            files.append(key)
    return NamespaceView(folders=frozenset(folders), files=tuple(files))


def merge_common_prefixes(view: NamespaceView, common_prefixes: Iterable[str]) -> NamespaceView:
    """Fold store-reported common prefixes into ``view``.

    The store's prefixes win: they are added to the folders and any file that
    falls below one of them is removed.
    """

    reported = frozenset(common_prefixes)
    if not reported:
        return view
    folders = view.folders | reported
    files = tuple(
        key for key in view.files if not any(key.startswith(folder) for folder in reported)
    )
    return NamespaceView(folders=folders, files=files)


def parent_prefix(prefix: str) -> str:
    parts = [part for part in prefix.split(DELIMITER) if part]
    if len(parts) <= 1:
        return ""
    return DELIMITER.join(parts[:-1]) + DELIMITER


def breadcrumbs(prefix: str) -> list[tuple[str, str]]:
    """Return ``(name, prefix)`` pairs for each level of ``prefix``."""

    crumbs: list[tuple[str, str]] = []
    parts = [part for part in prefix.split(DELIMITER) if part]
    for index, part in enumerate(parts):
        crumbs.append((part, DELIMITER.join(parts[: index + 1]) + DELIMITER))
    return crumbs


def entry_name(key: str) -> str:
    cleaned = key.rstrip(DELIMITER)
    if not cleaned:
        return key
    return cleaned.rsplit(DELIMITER, 1)[-1]
