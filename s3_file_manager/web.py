from __future__ import annotations
"""HTTP endpoints exposing the file manager over FastAPI."""
import logging
from typing import Optional

from fastapi import Depends, FastAPI, File, Query, Request, UploadFile, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .controller import FileManagerController, ValidationError
from .models import ObjectListing
from .namespace import breadcrumbs, parent_prefix
from .schemas import (
    BatchDeleteRequest,
    BatchDeleteResponse,
    BreadcrumbResponse,
    BucketListResponse,
    BucketResponse,
    ErrorResponse,
    FailureResponse,
    HealthResponse,
    ObjectDeleteResponse,
    ObjectListResponse,
    ObjectResponse,
    ObjectUploadResponse,
    PresignedUrlResponse,
    UploadedFileResponse,
)
from .services import ObjectNotFoundError, StoreError
from .ui_utils import content_disposition, load_package_info

LOGGER = logging.getLogger(__name__)

ERROR_RESPONSES = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
}
FAILURE_RESPONSES = {
    status.HTTP_400_BAD_REQUEST: {"model": FailureResponse},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": FailureResponse},
}


def _error(status_code: int, error: str, details: str | None = None) -> JSONResponse:
    body = ErrorResponse(error=error, details=details)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def _failure(status_code: int, message: str, error: str | None = None) -> JSONResponse:
    body = FailureResponse(message=message, error=error)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def _listing_response(listing: ObjectListing) -> ObjectListResponse:
    return ObjectListResponse(
        objects=[
            ObjectResponse(
                key=obj.key,
                size=obj.size,
                last_modified=obj.last_modified,
                etag=obj.etag,
                storage_class=obj.storage_class,
            )
            for obj in listing.objects
        ],
        prefix=listing.prefix,
        bucket=listing.bucket,
        folders=listing.view.sorted_folders(),
        files=list(listing.view.files),
        parent=parent_prefix(listing.prefix),
        breadcrumbs=[BreadcrumbResponse(name=name, prefix=prefix) for name, prefix in breadcrumbs(listing.prefix)],
        truncated=listing.truncated,
    )


def _describe_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        parts.append(f"{location}: {error.get('msg', 'invalid value')}")
    return "; ".join(parts)


def get_controller(request: Request) -> FileManagerController:
    return request.app.state.controller


def create_app(controller: FileManagerController) -> FastAPI:
    """Build the application around an already configured controller."""

    package_info = load_package_info()
    app = FastAPI(
        title=package_info.name,
        description=package_info.summary,
        version=package_info.version or "0.0.0",
    )
    app.state.controller = controller

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
            response = _failure(exc.status_code, "Method not allowed")
        else:
            response = _error(exc.status_code, str(exc.detail))
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        # The body carries an "error" key, so readers of either error shape find it.
        details = _describe_validation_errors(exc)
        LOGGER.debug("Rejected request to %s: %s", request.url.path, details)
        return _failure(status.HTTP_400_BAD_REQUEST, "Invalid request parameters", details)

    @app.get("/health", response_model=HealthResponse)
    def health():
        return HealthResponse(status="ok", version=package_info.version)

    @app.get("/buckets", response_model=BucketListResponse, responses=ERROR_RESPONSES)
    def list_buckets(controller: FileManagerController = Depends(get_controller)):
        try:
            buckets = controller.list_buckets()
        except StoreError as exc:
            return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))
        return BucketListResponse(
            buckets=[BucketResponse(name=bucket.name, creation_date=bucket.creation_date) for bucket in buckets]
        )

    @app.get("/objects", response_model=ObjectListResponse, responses=ERROR_RESPONSES)
    def list_objects(
        bucket: Optional[str] = Query(None),
        prefix: str = Query(""),
        controller: FileManagerController = Depends(get_controller),
    ):
        try:
            listing = controller.list_objects(bucket_name=bucket, prefix=prefix)
        except ValidationError as exc:
            return _error(status.HTTP_400_BAD_REQUEST, str(exc))
        except StoreError as exc:
            return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))
        return _listing_response(listing)

    @app.post("/objects", response_model=ObjectUploadResponse, responses=ERROR_RESPONSES)
    def upload_object(
        bucket: Optional[str] = Query(None),
        prefix: str = Query(""),
        file: Optional[UploadFile] = File(None),
        controller: FileManagerController = Depends(get_controller),
    ):
        try:
            result = controller.upload_object(
                bucket_name=bucket,
                prefix=prefix,
                stream=file.file if file is not None else None,
                filename=file.filename if file is not None else None,
                content_type=file.content_type if file is not None else None,
            )
        except ValidationError as exc:
            return _error(status.HTTP_400_BAD_REQUEST, str(exc))
        except (StoreError, OSError) as exc:
            LOGGER.error("Upload error: %s", exc)
            return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to upload file", str(exc))
        return ObjectUploadResponse(
            file=UploadedFileResponse(
                name=result.name,
                key=result.key,
                size=result.size,
                type=result.content_type,
            )
        )

    @app.delete("/objects", response_model=ObjectDeleteResponse, responses=FAILURE_RESPONSES)
    def delete_object(
        bucket: Optional[str] = Query(None),
        key: Optional[str] = Query(None),
        controller: FileManagerController = Depends(get_controller),
    ):
        try:
            result = controller.delete_object(bucket_name=bucket, key=key)
        except ValidationError as exc:
            return _failure(status.HTTP_400_BAD_REQUEST, str(exc))
        except StoreError as exc:
            return _failure(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to delete file", str(exc))
        return ObjectDeleteResponse(success=result.success, message=result.message)

    @app.post("/objects/delete", response_model=BatchDeleteResponse, responses=FAILURE_RESPONSES)
    def delete_objects(
        payload: Optional[BatchDeleteRequest] = None,
        bucket: Optional[str] = Query(None),
        controller: FileManagerController = Depends(get_controller),
    ):
        try:
            result = controller.delete_objects(
                bucket_name=bucket,
                keys=payload.keys if payload is not None else None,
            )
        except ValidationError as exc:
            return _failure(status.HTTP_400_BAD_REQUEST, str(exc))
        except StoreError as exc:
            return _failure(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to delete files", str(exc))
        return BatchDeleteResponse(
            success=result.success,
            message=result.message,
            deleted=list(result.deleted),
            errors=list(result.errors),
        )

    @app.get(
        "/objects/content",
        response_class=StreamingResponse,
        responses={**FAILURE_RESPONSES, status.HTTP_404_NOT_FOUND: {"model": FailureResponse}},
    )
    def download_object(
        bucket: Optional[str] = Query(None),
        key: Optional[str] = Query(None),
        controller: FileManagerController = Depends(get_controller),
    ):
        # Errors are only reportable as JSON before the stream is handed over.
        try:
            stream = controller.download_object(bucket_name=bucket, key=key)
        except ValidationError as exc:
            return _failure(status.HTTP_400_BAD_REQUEST, str(exc))
        except ObjectNotFoundError as exc:
            return _failure(status.HTTP_404_NOT_FOUND, "File not found", str(exc))
        except StoreError as exc:
            return _failure(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to download file", str(exc))

        headers = {"Content-Disposition": content_disposition(stream.filename)}
        if stream.content_length is not None:
            headers["Content-Length"] = str(stream.content_length)
        return StreamingResponse(stream.body, media_type=stream.content_type, headers=headers)

    @app.get("/objects/url", response_model=PresignedUrlResponse, responses=ERROR_RESPONSES)
    def presigned_url(
        bucket: Optional[str] = Query(None),
        key: Optional[str] = Query(None),
        expires_in: int = Query(3600),
        controller: FileManagerController = Depends(get_controller),
    ):
        try:
            url = controller.generate_presigned_url(bucket_name=bucket, key=key, expires_in=expires_in)
        except ValidationError as exc:
            return _error(status.HTTP_400_BAD_REQUEST, str(exc))
        except StoreError as exc:
            return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))
        return PresignedUrlResponse(url=url, expires_in=expires_in)

    return app
