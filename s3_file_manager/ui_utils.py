from __future__ import annotations
"""Framework-agnostic helpers for package metadata and response headers."""
from dataclasses import dataclass
from importlib.metadata import PackageNotFoundError, metadata, version
from urllib.parse import quote

DIST_NAME = "s3-file-manager"
DEFAULT_FILENAME = "unnamed-file"


@dataclass(frozen=True)
class PackageInfo:
    name: str
    version: str
    summary: str


def load_package_info(dist_name: str = DIST_NAME) -> PackageInfo:
    try:
        distribution_metadata = metadata(dist_name)
        package_version = version(dist_name)
    except PackageNotFoundError:
        return PackageInfo(
            name="S3 File Manager",
            version="",
            summary="Browse, upload and download objects in an S3-compatible store.",
        )
    return PackageInfo(
        name=distribution_metadata.get("Name"),
        version=package_version,
        summary=distribution_metadata.get("Summary") or "",
    )


def _printable(filename: str) -> str:
    return "".join("_" if ord(char) < 32 or 127 <= ord(char) < 160 else char for char in filename)


def content_disposition(filename: str) -> str:
    """Build an ``attachment`` header value, adding RFC 5987 form for non-ASCII names.

    Control characters (CR and LF included) never reach the header.
    """

    printable = _printable(filename)
    fallback = printable.replace("\\", "_").replace('"', "_")
    try:
        fallback.encode("latin-1")
    except UnicodeEncodeError:
        ascii_name = fallback.encode("ascii", "replace").decode("ascii").replace("?", "_")
        return f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(printable)}"
    return f'attachment; filename="{fallback}"'
