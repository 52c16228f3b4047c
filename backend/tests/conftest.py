import os
import sys
import threading
import time
from datetime import datetime, timedelta, timezone
from pathlib import Path
from urllib.parse import parse_qs, quote, unquote, urlsplit
from uuid import uuid4

import pytest
import pytest_asyncio
from botocore.exceptions import ClientError
from httpx import ASGITransport, AsyncClient

# Ensure project root is on sys.path
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from object_gateway.core.config import get_settings
from object_gateway.services.storage import StorageServices

BUCKET = "test-bucket"
FIXED_NOW = datetime(2026, 1, 1, 12, 0, 0, 750000, tzinfo=timezone.utc)


def client_error(code: str, status: int, operation: str = "Operation") -> ClientError:
    return ClientError(
        {
            "Error": {"Code": code, "Message": f"backend says {code} (secret-detail)"},
            "ResponseMetadata": {"HTTPStatusCode": status},
        },
        operation,
    )


class FakeS3Client:
    """In-memory stand-in for the boto3 S3 client methods the services use."""

    def __init__(self, bucket: str = BUCKET, strict_delete: bool = False) -> None:
        self.bucket = bucket
        self.strict_delete = strict_delete
        self.objects: dict[str, dict] = {}
        self.failures: dict[str, list[BaseException]] = {}
        self.sign_failures: dict[str, BaseException] = {}
        self.sign_delays: dict[str, float] = {}
        self.delays: dict[str, float] = {}
        self.calls: list[tuple[str, dict]] = []
        self.extra_listing: list[dict] = []
        self.active_signs = 0
        self.peak_signs = 0
        self._sign_lock = threading.Lock()
        self._tokens: dict[str, str] = {}
        self._clock = datetime(2025, 6, 1, tzinfo=timezone.utc)

    # failure injection -------------------------------------------------

    def fail_next(self, method: str, *errors: BaseException) -> None:
        self.failures.setdefault(method, []).extend(errors)

    def _enter(self, method: str, params: dict) -> None:
        self.calls.append((method, params))
        delay = self.delays.get(method)
        if delay:
            time.sleep(delay)
        pending = self.failures.get(method)
        if pending:
            raise pending.pop(0)
        bucket = params.get("Bucket", params.get("Params", {}).get("Bucket"))
        if bucket != self.bucket:
            raise client_error("NoSuchBucket", 404, method)

    # boto3 surface ------------------------------------------------------

    def put_object(self, **params):
        self._enter("put_object", params)
        self._clock += timedelta(seconds=1)
        self.objects[params["Key"]] = {
            "Body": bytes(params["Body"]),
            "ContentType": params.get("ContentType", "binary/octet-stream"),
            "LastModified": self._clock,
        }
        return {"ETag": f'"{uuid4().hex}"'}

    def delete_object(self, **params):
        self._enter("delete_object", params)
        key = params["Key"]
        if key not in self.objects and self.strict_delete:
            raise client_error("NoSuchKey", 404, "DeleteObject")
        self.objects.pop(key, None)
        return {"ResponseMetadata": {"HTTPStatusCode": 204}}

    def list_objects_v2(self, **params):
        self._enter("list_objects_v2", params)
        prefix = params.get("Prefix", "")
        max_keys = params.get("MaxKeys", 1000)
        keys = sorted(k for k in self.objects if k.startswith(prefix))

        token = params.get("ContinuationToken")
        if token is not None:
            if token not in self._tokens:
                raise client_error("InvalidArgument", 400, "ListObjectsV2")
            start_after = self._tokens[token]
            keys = [k for k in keys if k > start_after]

        page, rest = keys[:max_keys], keys[max_keys:]
        response = {
            "Contents": [
                {
                    "Key": key,
                    "Size": len(self.objects[key]["Body"]),
                    "LastModified": self.objects[key]["LastModified"],
                }
                for key in page
            ]
            + self.extra_listing,
            "KeyCount": len(page),
            "IsTruncated": bool(rest),
        }
        if rest:
            next_token = uuid4().hex
            self._tokens[next_token] = page[-1]
            response["NextContinuationToken"] = next_token
        return response

    def generate_presigned_url(self, ClientMethod, Params=None, ExpiresIn=3600, HttpMethod=None):
        params = Params or {}
        self._enter("generate_presigned_url", {"ClientMethod": ClientMethod, "Params": params})
        key = params["Key"]
        with self._sign_lock:
            self.active_signs += 1
            self.peak_signs = max(self.peak_signs, self.active_signs)
        try:
            delay = self.sign_delays.get(key)
            if delay:
                time.sleep(delay)
            if key in self.sign_failures:
                raise self.sign_failures[key]
        finally:
            with self._sign_lock:
                self.active_signs -= 1
        return (
            f"https://{params['Bucket']}.fake-s3.test/{quote(key)}"
            f"?X-Amz-Expires={ExpiresIn}&X-Amz-Signature={uuid4().hex}&op={ClientMethod}"
        )

    # test helpers -------------------------------------------------------

    def fetch(self, url: str) -> tuple[bytes, str]:
        """Dereference a presigned URL like an end client would."""
        parts = urlsplit(url)
        query = parse_qs(parts.query)
        assert query["op"] == ["get_object"]
        key = unquote(parts.path.lstrip("/"))
        stored = self.objects.get(key)
        if stored is None:
            raise client_error("NoSuchKey", 404, "GetObject")
        return stored["Body"], stored["ContentType"]


@pytest.fixture(scope="session", autouse=True)
def configure_environment():
    os.environ["AWS_ACCESS_KEY_ID"] = "test"
    os.environ["AWS_SECRET_ACCESS_KEY"] = "test"
    os.environ["AWS_REGION"] = "us-east-1"
    os.environ["AWS_BUCKET_NAME"] = BUCKET
    os.environ["BACKEND_TIMEOUT_SECONDS"] = "2"
    os.environ["STORAGE_RETRY_BASE_DELAY"] = "0"
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings(configure_environment):
    return get_settings()


@pytest.fixture
def fake_s3():
    return FakeS3Client()


@pytest.fixture
def services(settings, fake_s3):
    return StorageServices.from_settings(settings, client=fake_s3, clock=lambda: FIXED_NOW)


@pytest.fixture
def app_instance(configure_environment, services):
    from object_gateway.main import create_app

    app = create_app()
    # Mimic the lifespan with the fake backend injected.
    app.state.storage = services
    return app


@pytest_asyncio.fixture
async def client(app_instance):
    transport = ASGITransport(app=app_instance)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
