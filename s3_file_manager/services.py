from __future__ import annotations
"""Business logic for interacting with the object store."""
import logging
import os
from typing import Callable, Iterable, Iterator

import boto3
from boto3.s3.transfer import TransferConfig
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError

from .models import (
    BucketSummary,
    DeleteResult,
    ObjectListing,
    ObjectStream,
    ObjectSummary,
    UploadResult,
)
from .namespace import DELIMITER, entry_name, merge_common_prefixes, project
from .profiles import ConnectionProfile

LOGGER = logging.getLogger(__name__)

PAGE_SIZE = 1000
DELETE_BATCH_SIZE = 1000
NOT_FOUND_CODES = {"404", "NoSuchBucket", "NoSuchKey", "NotFound"}


class StoreError(RuntimeError):
    """Raised when the object store rejects or fails a request."""


class ObjectNotFoundError(StoreError):
    """Raised when the requested bucket or key does not exist."""


def _translate_error(exc: Exception) -> StoreError:
    if isinstance(exc, ClientError):
        code = str(exc.response.get("Error", {}).get("Code", ""))
        if code in NOT_FOUND_CODES:
            return ObjectNotFoundError(str(exc))
    return StoreError(str(exc))


def create_client(profile: ConnectionProfile, client_factory: Callable[..., object] | None = None):
    """Build the single store client shared by every request."""

    factory = client_factory or boto3.client
    config = Config(
        signature_version="s3v4",
        s3={"addressing_style": "path" if profile.force_path_style else "auto"},
        retries={"mode": "standard", "total_max_attempts": 1},
    )
    LOGGER.info(
        "Configuring S3 client with endpoint: %s, access key: %s",
        profile.endpoint_url,
        profile.masked_access_key,
    )
    return factory(
        "s3",
        endpoint_url=profile.endpoint_url,
        aws_access_key_id=profile.access_key,
        aws_secret_access_key=profile.secret_key,
        region_name=profile.region,
        verify=profile.verify_ssl,
        config=config,
    )


class ObjectStoreGateway:
    """Encapsulates store calls independent of any HTTP framework."""

    def __init__(self, client, *, transfer_config: TransferConfig | None = None):
        self._client = client
        self._transfer_config = transfer_config

    def list_buckets(self) -> list[BucketSummary]:
        """Return the available buckets.

        Raises:
            StoreError: when unable to connect or list buckets.
        """
        try:
            response = self._client.list_buckets()
        except (BotoCoreError, ClientError) as exc:
            LOGGER.exception("Failed to list buckets")
            raise _translate_error(exc) from exc
        return [
            BucketSummary(name=bucket["Name"], creation_date=bucket.get("CreationDate"))
            for bucket in response.get("Buckets", [])
        ]

    def list_objects(self, bucket_name: str, prefix: str = "", *, max_keys: int | None = None) -> ObjectListing:
        """Return the direct children of ``prefix`` in ``bucket_name``.

        Continuation tokens are followed until the listing is exhausted or
        ``max_keys`` entries have been collected.
        """

        objects: list[ObjectSummary] = []
        common_prefixes: list[str] = []
        request_token: str | None = None
        truncated = False

        while True:
            list_params = {"Bucket": bucket_name, "Delimiter": DELIMITER, "MaxKeys": PAGE_SIZE}
            if prefix:
                list_params["Prefix"] = prefix
            if max_keys is not None:
                remaining = max_keys - len(objects) - len(common_prefixes)
                list_params["MaxKeys"] = min(remaining, PAGE_SIZE)
            if request_token:
                list_params["ContinuationToken"] = request_token

            try:
                response = self._client.list_objects_v2(**list_params)
            except (BotoCoreError, ClientError) as exc:
                LOGGER.exception("Failed to list objects in bucket '%s' with prefix '%s'", bucket_name, prefix)
                raise _translate_error(exc) from exc

            objects.extend(
                ObjectSummary(
                    key=item["Key"],
                    size=item.get("Size", 0),
                    last_modified=item.get("LastModified"),
                    etag=item.get("ETag"),
                    storage_class=item.get("StorageClass"),
                )
                for item in response.get("Contents", [])
            )
            common_prefixes.extend(common["Prefix"] for common in response.get("CommonPrefixes", []))

            request_token = response.get("NextContinuationToken")
            if not response.get("IsTruncated", False) or not request_token:
                break
            if max_keys is not None and len(objects) + len(common_prefixes) >= max_keys:
                truncated = True
                break

        view = merge_common_prefixes(project((obj.key for obj in objects), prefix), common_prefixes)
        LOGGER.debug(
            "Listed %d object(s) and %d folder(s) in bucket '%s' under '%s'",
            len(objects),
            len(view.folders),
            bucket_name,
            prefix,
        )
        return ObjectListing(
            bucket=bucket_name,
            prefix=prefix,
            objects=tuple(objects),
            common_prefixes=tuple(common_prefixes),
            view=view,
            truncated=truncated,
        )

    def put_object(
        self,
        bucket_name: str,
        key: str,
        source_path: str,
        *,
        content_type: str = "application/octet-stream",
    ) -> UploadResult:
        """Upload a local file to the target bucket/key."""

        size = os.path.getsize(source_path)
        try:
            self._client.upload_file(
                source_path,
                bucket_name,
                key,
                ExtraArgs={"ContentType": content_type},
                Config=self._transfer_config,
            )
        except (BotoCoreError, ClientError) as exc:
            LOGGER.exception("Failed to upload '%s' to bucket '%s'", key, bucket_name)
            raise _translate_error(exc) from exc
        LOGGER.debug("Uploaded '%s' (%d bytes) to bucket '%s'", key, size, bucket_name)
        return UploadResult(name=entry_name(key), key=key, size=size, content_type=content_type)

    def get_object(self, bucket_name: str, key: str, *, chunk_size: int = 64 * 1024) -> ObjectStream:
        """Open an object for streaming.

        The store call happens here so that failures surface before any
        response headers are sent; the returned body yields chunks lazily.
        """

        try:
            response = self._client.get_object(Bucket=bucket_name, Key=key)
        except (BotoCoreError, ClientError) as exc:
            LOGGER.exception("Failed to open '%s' in bucket '%s'", key, bucket_name)
            raise _translate_error(exc) from exc
        return ObjectStream(
            body=self._iter_body(response["Body"], chunk_size, bucket_name, key),
            content_type=response.get("ContentType") or "application/octet-stream",
            content_length=response.get("ContentLength"),
            filename=entry_name(key),
        )

    def delete_object(self, bucket_name: str, key: str) -> DeleteResult:
        try:
            self._client.delete_object(Bucket=bucket_name, Key=key)
        except (BotoCoreError, ClientError) as exc:
            LOGGER.exception("Error deleting object: %s from bucket: %s", key, bucket_name)
            raise _translate_error(exc) from exc
        LOGGER.info("Successfully deleted object: %s from bucket: %s", key, bucket_name)
        return DeleteResult(
            success=True,
            message=f"File {key} deleted successfully from bucket {bucket_name}",
            deleted=(key,),
        )

    def delete_objects(self, bucket_name: str, keys: Iterable[str]) -> DeleteResult:
        """Delete several objects, batching requests at the store's limit."""

        pending = list(keys)
        deleted: list[str] = []
        errors: list[str] = []
        for start in range(0, len(pending), DELETE_BATCH_SIZE):
            batch = pending[start:start + DELETE_BATCH_SIZE]
            try:
                response = self._client.delete_objects(
                    Bucket=bucket_name,
                    Delete={"Objects": [{"Key": key} for key in batch], "Quiet": False},
                )
            except (BotoCoreError, ClientError) as exc:
                LOGGER.exception("Error deleting objects from bucket: %s", bucket_name)
                raise _translate_error(exc) from exc
            deleted.extend(item["Key"] for item in response.get("Deleted", []))
            errors.extend(
                f"{item.get('Key')}: {item.get('Message') or item.get('Code')}"
                for item in response.get("Errors", [])
            )
        LOGGER.info("Deleted %d of %d object(s) from bucket: %s", len(deleted), len(pending), bucket_name)
        if errors:
            message = f"Deleted {len(deleted)} objects, {len(errors)} failed"
        else:
            message = f"Successfully deleted {len(deleted)} objects from bucket {bucket_name}"
        return DeleteResult(success=not errors, message=message, deleted=tuple(deleted), errors=tuple(errors))

    def generate_presigned_url(self, bucket_name: str, key: str, *, expires_in: int = 3600) -> str:
        """Create a presigned GET URL for the object."""

        if expires_in <= 0:
            raise ValueError("expires_in must be greater than zero")
        try:
            return self._client.generate_presigned_url(
                "get_object",
                Params={"Bucket": bucket_name, "Key": key},
                ExpiresIn=expires_in,
            )
        except (BotoCoreError, ClientError) as exc:
            LOGGER.exception("Failed to presign '%s' in bucket '%s'", key, bucket_name)
            raise _translate_error(exc) from exc

    @staticmethod
    def _iter_body(body, chunk_size: int, bucket_name: str, key: str) -> Iterator[bytes]:
        try:
            for chunk in body.iter_chunks(chunk_size):
                if chunk:
                    yield chunk
        except (BotoCoreError, ClientError, OSError) as exc:
            LOGGER.exception("Download of '%s' from bucket '%s' aborted mid-stream", key, bucket_name)
            raise _translate_error(exc) from exc
        finally:
            body.close()
