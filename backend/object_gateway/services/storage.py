from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import boto3
from botocore.client import Config

from object_gateway.core.config import Settings
from object_gateway.core.retry import RetryPolicy
from object_gateway.services.backend import BackendCaller
from object_gateway.services.listing import ObjectLister
from object_gateway.services.objects import ObjectAccessor
from object_gateway.services.signing import Clock, SignedUrlIssuer


def build_s3_client(settings: Settings) -> Any:
    """Create the process-wide S3 client.

    botocore's own retries are switched off; ``RetryPolicy`` is the only
    retry layer.
    """
    session = boto3.session.Session()
    return session.client(
        "s3",
        endpoint_url=str(settings.s3_endpoint) if settings.s3_endpoint else None,
        aws_access_key_id=settings.s3_access_key,
        aws_secret_access_key=settings.s3_secret_key,
        region_name=settings.s3_region,
        config=Config(
            signature_version="s3v4",
            connect_timeout=settings.backend_timeout,
            read_timeout=settings.backend_timeout,
            retries={"max_attempts": 1, "mode": "standard"},
        ),
    )


@dataclass(frozen=True)
class StorageServices:
    issuer: SignedUrlIssuer
    lister: ObjectLister
    accessor: ObjectAccessor

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        client: Any | None = None,
        clock: Clock | None = None,
    ) -> "StorageServices":
        client = client if client is not None else build_s3_client(settings)
        bucket = settings.s3_bucket
        backend = BackendCaller(
            timeout=settings.backend_timeout,
            retry=RetryPolicy.from_settings(settings),
        )
        issuer = SignedUrlIssuer(
            client,
            bucket,
            backend,
            default_ttl=settings.presign_ttl,
            max_ttl=settings.presign_max_ttl,
            clock_skew=settings.presign_clock_skew,
            clock=clock,
        )
        lister = ObjectLister(
            client,
            bucket,
            backend,
            issuer,
            default_max_keys=settings.list_default_max_keys,
            max_keys_limit=settings.list_max_keys_limit,
            concurrency=settings.signing_concurrency,
        )
        accessor = ObjectAccessor(
            client,
            bucket,
            backend,
            issuer,
            max_upload_bytes=settings.max_upload_bytes,
        )
        return cls(issuer=issuer, lister=lister, accessor=accessor)
