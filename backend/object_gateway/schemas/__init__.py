from object_gateway.schemas.storage import (
    DeleteResponse,
    ErrorResponse,
    FileEntry,
    FileListResponse,
    FileUrlResponse,
    UploadResponse,
)

__all__ = [
    "FileEntry",
    "FileListResponse",
    "FileUrlResponse",
    "UploadResponse",
    "DeleteResponse",
    "ErrorResponse",
]
