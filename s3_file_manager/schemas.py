from __future__ import annotations
"""Pydantic schemas for the file manager HTTP API."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

# ============================================================================
# Bucket Schemas
# ============================================================================


class BucketResponse(BaseModel):
    """A bucket visible to the configured credentials."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., description="Bucket name")
    creation_date: datetime | None = Field(None, alias="creationDate", description="When the bucket was created")


class BucketListResponse(BaseModel):
    buckets: list[BucketResponse] = Field(default_factory=list)


# ============================================================================
# Object Schemas
# ============================================================================


class ObjectResponse(BaseModel):
    """One object returned by a prefix listing."""

    model_config = ConfigDict(populate_by_name=True)

    key: str = Field(..., description="Full object key")
    size: int = Field(0, description="Size in bytes")
    last_modified: datetime | None = Field(None, alias="lastModified")
    etag: str | None = Field(None)
    storage_class: str | None = Field(None, alias="storageClass")


class BreadcrumbResponse(BaseModel):
    name: str = Field(..., description="Folder name at this level")
    prefix: str = Field(..., description="Prefix that opens this level")


class ObjectListResponse(BaseModel):
    """Direct children of a prefix, split into folders and files."""

    objects: list[ObjectResponse] = Field(default_factory=list)
    prefix: str = Field("", description="Queried prefix")
    bucket: str = Field(..., description="Bucket name")
    folders: list[str] = Field(default_factory=list, description="Child folder prefixes, sorted")
    files: list[str] = Field(default_factory=list, description="Child file keys in listing order")
    parent: str = Field("", description="Prefix one level up")
    breadcrumbs: list[BreadcrumbResponse] = Field(default_factory=list)
    truncated: bool = Field(False, description="Whether the listing stopped at the key limit")


class UploadedFileResponse(BaseModel):
    name: str = Field(..., description="Original filename")
    key: str = Field(..., description="Key the file was stored under")
    size: int = Field(..., description="File size in bytes")
    type: str = Field(..., description="Content type sent to the store")


class ObjectUploadResponse(BaseModel):
    success: bool = Field(default=True)
    message: str = Field(default="File uploaded successfully")
    file: UploadedFileResponse


class ObjectDeleteResponse(BaseModel):
    success: bool
    message: str


class BatchDeleteRequest(BaseModel):
    keys: list[str] = Field(default_factory=list, description="Keys to delete")


class BatchDeleteResponse(BaseModel):
    success: bool
    message: str
    deleted: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)


class PresignedUrlResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    url: str
    expires_in: int = Field(..., alias="expiresIn", description="Validity in seconds")


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = ""


# ============================================================================
# Error Schemas
# ============================================================================


class ErrorResponse(BaseModel):
    """Error body used by listing, upload and presign routes."""

    error: str
    details: str | None = None


class FailureResponse(BaseModel):
    """Error body used by download and delete routes."""

    success: bool = False
    message: str
    error: str | None = None
