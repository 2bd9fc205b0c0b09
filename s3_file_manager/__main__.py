"""Module entry point for the S3 file manager service."""
import logging
import sys

from boto3.s3.transfer import TransferConfig
import uvicorn

from .controller import FileManagerController
from .profiles import ConfigurationError, ProfileStorage
from .services import ObjectStoreGateway, create_client
from .settings import AppSettings, load_settings
from .web import create_app

LOGGER = logging.getLogger(__name__)


def build_app(settings: AppSettings | None = None, storage: ProfileStorage | None = None):
    """Load credentials, build the shared store client and wire the app.

    Raises:
        ConfigurationError: when the credentials file is missing or malformed.
    """
    settings = settings or load_settings()
    profile = (storage or ProfileStorage()).load()
    client = create_client(profile)
    gateway = ObjectStoreGateway(
        client,
        transfer_config=TransferConfig(multipart_threshold=settings.multipart_threshold),
    )
    return create_app(FileManagerController(gateway, settings))


def main() -> None:
    settings = load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    storage = ProfileStorage()
    LOGGER.info("Loading S3 credentials from %s", storage.path)
    try:
        app = build_app(settings, storage)
    except ConfigurationError as exc:
        LOGGER.error("Failed to load S3 credentials from %s: %s", storage.path, exc)
        sys.exit(1)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
