from fastapi import APIRouter, Depends, File, Form, Query, Request, Response, UploadFile

from object_gateway.api.deps import get_object_accessor, get_object_lister
from object_gateway.api.disconnect import (
    CLIENT_CLOSED_REQUEST,
    ClientDisconnected,
    cancel_on_disconnect,
)
from object_gateway.api.errors import error_response
from object_gateway.core.errors import InvalidInputError, PayloadTooLargeError, StorageError
from object_gateway.models import UploadRequest
from object_gateway.schemas import (
    DeleteResponse,
    FileEntry,
    FileListResponse,
    FileUrlResponse,
    UploadResponse,
)
from object_gateway.services.listing import ObjectLister
from object_gateway.services.objects import ObjectAccessor

router = APIRouter(prefix="/api/v1/s3", tags=["s3"])


@router.get("/fileList", response_model=FileListResponse)
async def list_files(
    request: Request,
    prefix: str = Query(default=""),
    max_keys: int | None = Query(default=None, alias="maxKeys"),
    continuation_token: str | None = Query(default=None, alias="continuationToken"),
    lister: ObjectLister = Depends(get_object_lister),
):
    try:
        page = await cancel_on_disconnect(
            request,
            lister.list(prefix, max_keys=max_keys, continuation_token=continuation_token),
        )
    except ClientDisconnected:
        return Response(status_code=CLIENT_CLOSED_REQUEST)
    except StorageError as exc:
        return error_response(exc, "Failed to list files")

    return FileListResponse(
        signedUrl=[
            FileEntry(
                key=entry.metadata.key,
                size=entry.metadata.size,
                lastModified=entry.metadata.last_modified,
                files=entry.signed_url.url,
                expiresAt=entry.signed_url.expires_at,
            )
            for entry in page.entries
        ],
        truncated=page.truncated,
        nextContinuationToken=page.next_continuation_token,
    )


@router.get("/file", response_model=FileUrlResponse)
async def get_file(
    filename: str | None = Query(default=None),
    expires_in: int | None = Query(default=None, alias="expiresIn"),
    accessor: ObjectAccessor = Depends(get_object_accessor),
):
    try:
        if not filename:
            raise InvalidInputError("filename query parameter is required", operation="get")
        signed = await accessor.get(filename, ttl=expires_in)
    except StorageError as exc:
        return error_response(exc, "Failed to get file")
    return FileUrlResponse(objects=signed.url, expiresAt=signed.expires_at)


@router.post("/upload", response_model=UploadResponse)
async def upload_file(
    file: UploadFile | None = File(default=None),
    content_type: str | None = Form(default=None, alias="contentType"),
    accessor: ObjectAccessor = Depends(get_object_accessor),
):
    if file is None or not file.filename:
        return error_response(
            InvalidInputError("No file in multipart field 'file'", operation="put"),
            "No file uploaded",
        )

    try:
        limit = accessor.max_upload_bytes
        data = await file.read(limit + 1)
        if len(data) > limit:
            raise PayloadTooLargeError(
                f"Upload exceeds limit of {limit} bytes", operation="put", key=file.filename
            )
        key = await accessor.put(
            UploadRequest(key=file.filename, content=data, content_type=content_type or None)
        )
    except StorageError as exc:
        return error_response(exc, "File upload failed")
    finally:
        await file.close()

    return UploadResponse(message="File uploaded successfully", filename=key)


@router.delete("/del", response_model=DeleteResponse)
async def delete_file(
    filename: str | None = Query(default=None),
    accessor: ObjectAccessor = Depends(get_object_accessor),
):
    try:
        if not filename:
            raise InvalidInputError("filename query parameter is required", operation="delete")
        await accessor.delete(filename)
    except StorageError as exc:
        return error_response(exc, "File deletion failed")
    return DeleteResponse(message="File deleted successfully")
