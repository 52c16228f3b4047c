from datetime import datetime

from pydantic import BaseModel, Field


class FileEntry(BaseModel):
    key: str
    size: int
    lastModified: datetime | None
    files: str
    expiresAt: datetime


class FileListResponse(BaseModel):
    success: bool = True
    signedUrl: list[FileEntry]
    truncated: bool = False
    nextContinuationToken: str | None = None


class FileUrlResponse(BaseModel):
    success: bool = True
    objects: str
    expiresAt: datetime


class UploadResponse(BaseModel):
    success: bool = True
    message: str
    filename: str


class DeleteResponse(BaseModel):
    success: bool = True
    message: str


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    errorKind: str = Field(default="Unknown")
