from __future__ import annotations
"""Application settings loaded from the environment."""

from dataclasses import dataclass
import os
import tempfile
from typing import Mapping

ENV_PREFIX = "S3FM_"


@dataclass(frozen=True)
class AppSettings:
    """Simple container for process-wide app settings."""

    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "INFO"
    temp_dir: str = ""
    download_chunk_size: int = 64 * 1024
    upload_chunk_size: int = 1024 * 1024
    max_list_keys: int = 10000
    multipart_threshold: int = 8 * 1024 * 1024

    def resolved_temp_dir(self) -> str:
        return self.temp_dir or tempfile.gettempdir()


def _positive_int(value: str | None, default: int) -> int:
    if value is None:
        return default
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return default
    if parsed <= 0:
        return default
    return parsed


def load_settings(environ: Mapping[str, str] | None = None) -> AppSettings:
    env = os.environ if environ is None else environ

    def get(name: str) -> str | None:
        value = env.get(ENV_PREFIX + name)
        return value.strip() if isinstance(value, str) and value.strip() else None

    log_level = (get("LOG_LEVEL") or AppSettings.log_level).upper()
    if log_level not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
        log_level = AppSettings.log_level
    return AppSettings(
        host=get("HOST") or AppSettings.host,
        port=_positive_int(get("PORT"), AppSettings.port),
        log_level=log_level,
        temp_dir=get("TEMP_DIR") or "",
        download_chunk_size=_positive_int(get("DOWNLOAD_CHUNK_SIZE"), AppSettings.download_chunk_size),
        upload_chunk_size=_positive_int(get("UPLOAD_CHUNK_SIZE"), AppSettings.upload_chunk_size),
        max_list_keys=_positive_int(get("MAX_LIST_KEYS"), AppSettings.max_list_keys),
        multipart_threshold=_positive_int(get("MULTIPART_THRESHOLD"), AppSettings.multipart_threshold),
    )
