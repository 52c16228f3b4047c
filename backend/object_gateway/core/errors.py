"""Typed failures for object-store operations.

Every backend failure is translated into one of the ``StorageError``
subclasses at the backend-call boundary. Only the API layer turns them into
HTTP responses.
"""

from __future__ import annotations

import asyncio
import logging
from typing import ClassVar

from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectTimeoutError,
    ConnectionError as BotoConnectionError,
    HTTPClientError,
    NoCredentialsError,
    PartialCredentialsError,
    ReadTimeoutError,
)

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Base class for object-store failures.

    Attributes:
        message: Human-readable, server-side description.
        operation: Logical operation that failed (``list``, ``put`` ...).
        key: Object key or prefix involved, if any.
        code: Backend error code, if the backend supplied one.
        cause: Original exception.
    """

    kind: ClassVar[str] = "Unknown"
    retryable: ClassVar[bool] = False

    def __init__(
        self,
        message: str,
        *,
        operation: str | None = None,
        key: str | None = None,
        code: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.operation = operation
        self.key = key
        self.code = code
        self.cause = cause

    def __str__(self) -> str:
        parts = [self.message]
        if self.operation:
            parts.append(f"operation={self.operation}")
        if self.key is not None:
            parts.append(f"key={self.key!r}")
        if self.code:
            parts.append(f"code={self.code}")
        return " ".join(parts)


class InvalidInputError(StorageError):
    kind = "InvalidInput"


class NotFoundError(StorageError):
    kind = "NotFound"


class PermissionDeniedError(StorageError):
    kind = "PermissionDenied"


class PayloadTooLargeError(StorageError):
    kind = "PayloadTooLarge"


class TransientError(StorageError):
    """Network faults, throttling and backend 5xx; safe to retry."""

    kind = "TransientError"
    retryable = True


class ThrottledError(TransientError):
    pass


class BackendTimeoutError(TransientError):
    pass


class UnknownStorageError(StorageError):
    kind = "Unknown"


_NOT_FOUND_CODES = frozenset({"NoSuchKey", "NoSuchBucket", "NotFound", "404"})
_PERMISSION_CODES = frozenset(
    {
        "AccessDenied",
        "Forbidden",
        "403",
        "InvalidAccessKeyId",
        "SignatureDoesNotMatch",
        "ExpiredToken",
        "AccountProblem",
        "AllAccessDisabled",
    }
)
_TOO_LARGE_CODES = frozenset({"EntityTooLarge", "413"})
_THROTTLE_CODES = frozenset(
    {
        "SlowDown",
        "Throttling",
        "ThrottlingException",
        "RequestLimitExceeded",
        "TooManyRequestsException",
        "503",
    }
)
_TRANSIENT_CODES = frozenset(
    {"RequestTimeout", "InternalError", "ServiceUnavailable", "500", "502", "504"}
)


def client_error_code(exc: ClientError) -> str:
    return str(exc.response.get("Error", {}).get("Code", "") or "")


def _client_error_status(exc: ClientError) -> int | None:
    return exc.response.get("ResponseMetadata", {}).get("HTTPStatusCode")


def translate_backend_error(
    exc: BaseException,
    *,
    operation: str,
    key: str | None = None,
) -> StorageError:
    """Map a boto3/botocore (or asyncio) failure onto the taxonomy."""
    if isinstance(exc, StorageError):
        return exc

    if isinstance(exc, ClientError):
        code = client_error_code(exc)
        status = _client_error_status(exc)
        if code in _NOT_FOUND_CODES:
            cls: type[StorageError] = NotFoundError
        elif code in _PERMISSION_CODES:
            cls = PermissionDeniedError
        elif code in _TOO_LARGE_CODES:
            cls = PayloadTooLargeError
        elif code in _THROTTLE_CODES or status == 429:
            cls = ThrottledError
        elif code in _TRANSIENT_CODES or (status is not None and status >= 500):
            cls = TransientError
        else:
            cls = UnknownStorageError
        return cls(
            f"Object store rejected {operation}",
            operation=operation,
            key=key,
            code=code or None,
            cause=exc,
        )

    if isinstance(exc, (NoCredentialsError, PartialCredentialsError)):
        return PermissionDeniedError(
            "Object store credentials unavailable",
            operation=operation,
            key=key,
            code=type(exc).__name__,
            cause=exc,
        )

    if isinstance(exc, (ConnectTimeoutError, ReadTimeoutError, asyncio.TimeoutError)):
        return BackendTimeoutError(
            f"Object store timed out during {operation}",
            operation=operation,
            key=key,
            code=type(exc).__name__,
            cause=exc,
        )

    if isinstance(exc, (HTTPClientError, BotoConnectionError)):
        return TransientError(
            f"Object store unreachable during {operation}",
            operation=operation,
            key=key,
            code=type(exc).__name__,
            cause=exc,
        )

    if isinstance(exc, BotoCoreError):
        return UnknownStorageError(
            f"Object store client failed during {operation}",
            operation=operation,
            key=key,
            code=type(exc).__name__,
            cause=exc,
        )

    return UnknownStorageError(
        f"Unexpected failure during {operation}",
        operation=operation,
        key=key,
        code=type(exc).__name__,
        cause=exc,
    )


def log_storage_error(error: StorageError) -> None:
    if isinstance(error, UnknownStorageError):
        logger.error(
            "Storage %s failed for key %r: %s",
            error.operation,
            error.key,
            error,
            exc_info=error.cause or error,
        )
    else:
        logger.warning(
            "Storage %s failed for key %r (%s): %s",
            error.operation,
            error.key,
            error.kind,
            error,
        )
