from datetime import datetime, timedelta, timezone

import boto3
import pytest
from botocore.client import Config
from botocore.exceptions import NoCredentialsError

from object_gateway.core.errors import InvalidInputError, PermissionDeniedError
from object_gateway.services.backend import BackendCaller
from object_gateway.services.signing import SignedUrlIssuer

from conftest import BUCKET, FIXED_NOW

ISSUED_AT = FIXED_NOW.replace(microsecond=0)


@pytest.mark.asyncio
async def test_default_ttl_is_explicit(services, fake_s3):
    signed = await services.issuer.issue("docs/a.txt")

    assert "X-Amz-Expires=3600" in signed.url
    assert signed.expires_at == ISSUED_AT + timedelta(seconds=3600 - 30)
    method, params = fake_s3.calls[-1]
    assert method == "generate_presigned_url"
    assert params["ClientMethod"] == "get_object"
    assert params["Params"] == {"Bucket": BUCKET, "Key": "docs/a.txt"}


@pytest.mark.asyncio
async def test_skew_margin_never_exceeds_half_ttl(services):
    signed = await services.issuer.issue("a.txt", ttl=20)
    assert "X-Amz-Expires=20" in signed.url
    assert signed.expires_at == ISSUED_AT + timedelta(seconds=10)


@pytest.mark.asyncio
async def test_put_operation_maps_to_put_object(services, fake_s3):
    await services.issuer.issue("a.txt", "put", ttl=60)
    assert fake_s3.calls[-1][1]["ClientMethod"] == "put_object"


@pytest.mark.asyncio
@pytest.mark.parametrize("ttl", [-5, 0, 604801, True, 1.5])
async def test_invalid_ttl_rejected(services, fake_s3, ttl):
    with pytest.raises(InvalidInputError):
        await services.issuer.issue("a.txt", "get", ttl=ttl)
    assert fake_s3.calls == []


@pytest.mark.asyncio
async def test_unsupported_operation_rejected(services):
    with pytest.raises(InvalidInputError):
        await services.issuer.issue("a.txt", "copy")


@pytest.mark.asyncio
@pytest.mark.parametrize("key", ["", "bad\nkey", "tab\tkey", "x" * 1025])
async def test_invalid_keys_rejected(services, key):
    with pytest.raises(InvalidInputError):
        await services.issuer.issue(key)


@pytest.mark.asyncio
async def test_stored_keys_can_skip_validation(services, fake_s3):
    with pytest.raises(InvalidInputError):
        await services.issuer.issue("bad\x7fkey")

    signed = await services.issuer.issue("bad\x7fkey", check_key=False)

    assert signed.url
    assert fake_s3.calls[-1][1]["Params"]["Key"] == "bad\x7fkey"


@pytest.mark.asyncio
async def test_missing_credentials_is_permission_denied(services, fake_s3):
    fake_s3.sign_failures["a.txt"] = NoCredentialsError()
    with pytest.raises(PermissionDeniedError):
        await services.issuer.issue("a.txt")


@pytest.mark.asyncio
async def test_signs_with_real_boto3_client_offline():
    client = boto3.session.Session().client(
        "s3",
        region_name="us-east-1",
        aws_access_key_id="AKIDEXAMPLE",
        aws_secret_access_key="wJalrXUtnFEMI/K7MDENG+bPxRfiCYEXAMPLEKEY",
        config=Config(signature_version="s3v4"),
    )
    issuer = SignedUrlIssuer(
        client,
        "example-bucket",
        BackendCaller(timeout=5),
        clock=lambda: datetime(2026, 3, 1, tzinfo=timezone.utc),
    )

    signed = await issuer.issue("reports/report.pdf", ttl=900)

    assert "reports/report.pdf" in signed.url
    assert "X-Amz-Expires=900" in signed.url
    assert "X-Amz-Signature=" in signed.url
    assert signed.expires_at == datetime(2026, 3, 1, 0, 14, 30, tzinfo=timezone.utc)
