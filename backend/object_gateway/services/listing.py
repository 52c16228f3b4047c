from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any

from object_gateway.core.errors import InvalidInputError, StorageError, TransientError
from object_gateway.models.storage import (
    ListingEntry,
    ListingPage,
    ObjectMetadata,
    SignedUrl,
    validate_prefix,
)
from object_gateway.services.backend import BackendCaller
from object_gateway.services.signing import SignedUrlIssuer

logger = logging.getLogger(__name__)


def _to_metadata(obj: dict[str, Any]) -> ObjectMetadata:
    last_modified = obj.get("LastModified")
    if isinstance(last_modified, datetime) and last_modified.tzinfo is None:
        last_modified = last_modified.replace(tzinfo=timezone.utc)
    return ObjectMetadata(
        key=obj["Key"],
        size=int(obj.get("Size") or 0),
        last_modified=last_modified,
    )


class ObjectLister:
    """Lists one page of objects under a prefix, each with a GET signed URL."""

    def __init__(
        self,
        client: Any,
        bucket: str,
        backend: BackendCaller,
        issuer: SignedUrlIssuer,
        *,
        default_max_keys: int = 100,
        max_keys_limit: int = 1000,
        concurrency: int = 8,
    ) -> None:
        self.client = client
        self.bucket = bucket
        self.backend = backend
        self.issuer = issuer
        self.default_max_keys = default_max_keys
        self.max_keys_limit = max_keys_limit
        self.concurrency = max(1, concurrency)

    def _validate_max_keys(self, max_keys: int | None, prefix: str) -> int:
        if max_keys is None:
            return self.default_max_keys
        if isinstance(max_keys, bool) or not isinstance(max_keys, int):
            raise InvalidInputError("maxKeys must be an integer", operation="list", key=prefix)
        if not 1 <= max_keys <= self.max_keys_limit:
            raise InvalidInputError(
                f"maxKeys must be between 1 and {self.max_keys_limit}",
                operation="list",
                key=prefix,
            )
        return max_keys

    async def list(
        self,
        prefix: str = "",
        max_keys: int | None = None,
        continuation_token: str | None = None,
    ) -> ListingPage:
        prefix = validate_prefix(prefix)
        limit = self._validate_max_keys(max_keys, prefix)

        params: dict[str, Any] = {"Bucket": self.bucket, "Prefix": prefix, "MaxKeys": limit}
        if continuation_token:
            params["ContinuationToken"] = continuation_token

        response = await self.backend.call(
            "list", prefix, self.client.list_objects_v2, **params
        )
        objects = [_to_metadata(obj) for obj in (response.get("Contents") or [])[:limit]]
        urls = await self._sign_all(objects)

        truncated = bool(response.get("IsTruncated"))
        next_token = response.get("NextContinuationToken") if truncated else None
        logger.info(
            "Listed %d objects under %r (truncated=%s)", len(objects), prefix, truncated
        )
        return ListingPage(
            prefix=prefix,
            entries=tuple(
                ListingEntry(metadata=meta, signed_url=url) for meta, url in zip(objects, urls)
            ),
            truncated=truncated,
            next_continuation_token=next_token,
        )

    async def _sign_all(self, objects: list[ObjectMetadata]) -> list[SignedUrl]:
        if not objects:
            return []
        semaphore = asyncio.Semaphore(self.concurrency)

        async def _sign(meta: ObjectMetadata) -> SignedUrl:
            async with semaphore:
                return await self.issuer.issue(meta.key, "get", check_key=False)

        tasks = [asyncio.create_task(_sign(meta)) for meta in objects]
        try:
            # gather keeps input order regardless of completion order
            return list(await asyncio.gather(*tasks))
        except StorageError as exc:
            raise TransientError(
                "Signing failed for a listed object; page discarded",
                operation="list",
                key=exc.key,
                code=exc.code or exc.kind,
                cause=exc,
            ) from exc
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
