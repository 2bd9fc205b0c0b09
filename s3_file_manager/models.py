from __future__ import annotations
"""Data models representing buckets, objects and namespace views."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterator, Optional


@dataclass(frozen=True)
class BucketSummary:
    """A bucket as reported by the store."""

    name: str
    creation_date: Optional[datetime] = None


@dataclass(frozen=True)
class ObjectSummary:
    """Snapshot of a single object returned by a listing."""

    key: str
    size: int = 0
    last_modified: Optional[datetime] = None
    etag: Optional[str] = None
    storage_class: Optional[str] = None


@dataclass(frozen=True)
class NamespaceView:
    """Immediate child folders and files below a prefix."""

    folders: frozenset[str] = frozenset()
    files: tuple[str, ...] = ()

    def sorted_folders(self) -> list[str]:
        return sorted(self.folders)


@dataclass(frozen=True)
class ObjectListing:
    """The listing result for a bucket prefix."""

    bucket: str
    prefix: str = ""
    objects: tuple[ObjectSummary, ...] = ()
    common_prefixes: tuple[str, ...] = ()
    view: NamespaceView = field(default_factory=NamespaceView)
    truncated: bool = False


@dataclass(frozen=True)
class UploadResult:
    name: str
    key: str
    size: int
    content_type: str


@dataclass(frozen=True)
class DeleteResult:
    success: bool
    message: str
    deleted: tuple[str, ...] = ()
    errors: tuple[str, ...] = ()


@dataclass(frozen=True)
class ObjectStream:
    """Streamed object content plus the headers needed to relay it."""

    body: Iterator[bytes]
    content_type: str = "application/octet-stream"
    content_length: Optional[int] = None
    filename: str = ""
