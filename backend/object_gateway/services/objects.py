from __future__ import annotations

import logging
from typing import Any

from object_gateway.core.errors import NotFoundError, PayloadTooLargeError
from object_gateway.models.storage import SignedUrl, UploadRequest, validate_key
from object_gateway.services.backend import BackendCaller
from object_gateway.services.content_types import resolve_content_type
from object_gateway.services.signing import SignedUrlIssuer

logger = logging.getLogger(__name__)


class ObjectAccessor:
    """Fetch (as a signed URL), store and delete single objects."""

    def __init__(
        self,
        client: Any,
        bucket: str,
        backend: BackendCaller,
        issuer: SignedUrlIssuer,
        *,
        max_upload_bytes: int = 50 * 1024 * 1024,
    ) -> None:
        self.client = client
        self.bucket = bucket
        self.backend = backend
        self.issuer = issuer
        self.max_upload_bytes = max_upload_bytes

    async def get(self, key: str, ttl: int | None = None) -> SignedUrl:
        """Return a GET signed URL for ``key``.

        The object is not probed: a URL is issued for missing keys too, and
        the backend answers 404 only when the URL is dereferenced.
        """
        validate_key(key, operation="get")
        if ttl is None:
            ttl = self.issuer.default_ttl
        return await self.issuer.issue(key, "get", ttl=ttl)

    async def put(self, request: UploadRequest) -> str:
        key = validate_key(request.key, operation="put")
        size = len(request.content)
        if size > self.max_upload_bytes:
            raise PayloadTooLargeError(
                f"Upload of {size} bytes exceeds limit of {self.max_upload_bytes}",
                operation="put",
                key=key,
            )
        content_type = request.content_type or resolve_content_type(key)

        await self.backend.call(
            "put",
            key,
            self.client.put_object,
            Bucket=self.bucket,
            Key=key,
            Body=request.content,
            ContentType=content_type,
        )
        logger.info("Stored %r (%d bytes, %s)", key, size, content_type)
        return key

    async def delete(self, key: str) -> None:
        validate_key(key, operation="delete")
        try:
            await self.backend.call(
                "delete",
                key,
                self.client.delete_object,
                Bucket=self.bucket,
                Key=key,
            )
        except NotFoundError as exc:
            if exc.code == "NoSuchBucket":
                raise
            logger.info("Delete of missing object %r treated as success", key)
            return
        logger.info("Deleted %r", key)
