from __future__ import annotations
"""Store connection profile loading."""
from dataclasses import dataclass
import json
import logging
import os
from pathlib import Path

import keyring
from keyring.errors import KeyringError

CREDENTIALS_ENV = "S3FM_CREDENTIALS"
DEFAULT_REGION = "us-east-1"

LOGGER = logging.getLogger(__name__)


class ConfigurationError(RuntimeError):
    """Raised when the store credentials cannot be loaded."""


@dataclass(frozen=True)
class ConnectionProfile:
    """Validated connection parameters for the object store."""

    endpoint_url: str
    access_key: str
    secret_key: str
    region: str = DEFAULT_REGION
    verify_ssl: bool = True
    force_path_style: bool = True

    @property
    def masked_access_key(self) -> str:
        key = self.access_key
        if len(key) <= 8:
            return "***"
        return f"{key[:4]}***{key[-4:]}"


class KeychainStore:
    """Encapsulates OS keychain access for secrets."""

    def __init__(self, service_name: str = "s3-file-manager"):
        self._service_name = service_name

    def get_secret(self, access_key: str) -> str:
        if not access_key:
            return ""
        try:
            return keyring.get_password(self._service_name, access_key) or ""
        except KeyringError:
            LOGGER.debug("Keychain lookup failed for '%s'", self._service_name)
            return ""


def _first(data: dict, *names: str):
    for name in names:
        value = data.get(name)
        if value not in (None, ""):
            return value
    return None


def normalize_endpoint(hostname: str) -> str:
    endpoint = hostname.strip().rstrip("/")
    if endpoint.startswith(("http://", "https://")):
        return endpoint
    return f"https://{endpoint}"


def _as_bool(value, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() not in {"0", "false", "no", "off"}
    return bool(value)


class ProfileStorage:
    """Reads the JSON credentials file the service connects with."""

    def __init__(self, storage_path: str | Path | None = None, keychain: KeychainStore | None = None):
        if storage_path is None:
            storage_path = os.environ.get(CREDENTIALS_ENV) or Path.cwd() / "credentials.json"
        self._path = Path(storage_path)
        self._keychain = keychain or KeychainStore()

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> ConnectionProfile:
        """Return the connection profile.

        Raises:
            ConfigurationError: when the file is missing, malformed or incomplete.
        """
        if not self._path.exists():
            raise ConfigurationError(f"Credentials file not found: {self._path}")
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise ConfigurationError(f"Unable to read credentials file {self._path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigurationError(f"Credentials file {self._path} must contain a JSON object")

        hostname = _first(data, "url", "hostname", "endpoint_url")
        access_key = _first(data, "accessKey", "access_key")
        if not isinstance(hostname, str) or not hostname.strip():
            raise ConfigurationError("Credentials file is missing 'hostname'")
        if not isinstance(access_key, str) or not access_key.strip():
            raise ConfigurationError("Credentials file is missing 'accessKey'")

        secret_key = _first(data, "secretKey", "secret_key")
        if not secret_key:
            secret_key = self._keychain.get_secret(access_key)
        if not isinstance(secret_key, str) or not secret_key:
            raise ConfigurationError("Credentials file is missing 'secretKey' and none is stored in the keychain")

        return ConnectionProfile(
            endpoint_url=normalize_endpoint(hostname),
            access_key=access_key.strip(),
            secret_key=secret_key,
            region=_first(data, "region") or DEFAULT_REGION,
            verify_ssl=_as_bool(_first(data, "verifySsl", "verify_ssl"), True),
            force_path_style=_as_bool(_first(data, "forcePathStyle", "force_path_style"), True),
        )
