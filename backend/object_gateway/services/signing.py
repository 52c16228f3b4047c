from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

from object_gateway.core.errors import InvalidInputError
from object_gateway.models.storage import SignedUrl, validate_key
from object_gateway.services.backend import BackendCaller

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

CLIENT_METHODS = {
    "get": "get_object",
    "put": "put_object",
    "head": "head_object",
    "delete": "delete_object",
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SignedUrlIssuer:
    """Issues presigned URLs for single objects with an explicit expiry.

    The reported ``expires_at`` is pulled in by a clock-skew margin (capped
    at half the TTL) so callers refresh before the backend starts rejecting
    the signature.
    """

    def __init__(
        self,
        client: Any,
        bucket: str,
        backend: BackendCaller,
        *,
        default_ttl: int = 3600,
        max_ttl: int = 604800,
        clock_skew: int = 30,
        clock: Clock | None = None,
    ) -> None:
        self.client = client
        self.bucket = bucket
        self.backend = backend
        self.default_ttl = default_ttl
        self.max_ttl = max_ttl
        self.clock_skew = clock_skew
        self.clock = clock or _utcnow

    def _validate_ttl(self, ttl: int | None, key: str) -> int:
        if ttl is None:
            return self.default_ttl
        if isinstance(ttl, bool) or not isinstance(ttl, int):
            raise InvalidInputError("TTL must be whole seconds", operation="sign", key=key)
        if ttl <= 0:
            raise InvalidInputError("TTL must be positive", operation="sign", key=key)
        if ttl > self.max_ttl:
            raise InvalidInputError(
                f"TTL exceeds {self.max_ttl} seconds", operation="sign", key=key
            )
        return ttl

    def expiry_for(self, issued_at: datetime, ttl: int) -> datetime:
        margin = min(self.clock_skew, ttl // 2)
        return issued_at + timedelta(seconds=ttl - margin)

    async def issue(
        self,
        key: str,
        operation: str = "get",
        ttl: int | None = None,
        *,
        check_key: bool = True,
    ) -> SignedUrl:
        # Keys read back from the backend are signed as stored.
        if check_key:
            validate_key(key, operation="sign")
        client_method = CLIENT_METHODS.get(operation)
        if client_method is None:
            raise InvalidInputError(
                f"Unsupported signing operation {operation!r}", operation="sign", key=key
            )
        expires_in = self._validate_ttl(ttl, key)

        # SigV4 timestamps have one-second resolution.
        issued_at = self.clock().replace(microsecond=0)
        url = await self.backend.call(
            "sign",
            key,
            self.client.generate_presigned_url,
            client_method,
            Params={"Bucket": self.bucket, "Key": key},
            ExpiresIn=expires_in,
        )
        logger.debug("Signed %s URL for %r (ttl=%ss)", operation, key, expires_in)
        return SignedUrl(url=url, expires_at=self.expiry_for(issued_at, expires_in))
