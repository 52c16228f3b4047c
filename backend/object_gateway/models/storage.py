from __future__ import annotations

import unicodedata
from dataclasses import dataclass, field
from datetime import datetime

from object_gateway.core.errors import InvalidInputError

MAX_KEY_BYTES = 1024


def _has_control_chars(value: str) -> bool:
    return any(unicodedata.category(ch) == "Cc" for ch in value)


def validate_key(key: str | None, *, operation: str = "validate") -> str:
    """Return ``key`` if it is a usable object key, else raise InvalidInputError."""
    if not isinstance(key, str) or not key:
        raise InvalidInputError("Object key is required", operation=operation, key=key)
    if _has_control_chars(key):
        raise InvalidInputError(
            "Object key contains control characters", operation=operation, key=key
        )
    if len(key.encode("utf-8")) > MAX_KEY_BYTES:
        raise InvalidInputError(
            f"Object key exceeds {MAX_KEY_BYTES} bytes", operation=operation, key=key
        )
    return key


def validate_prefix(prefix: str | None, *, operation: str = "list") -> str:
    if prefix is None:
        return ""
    if not isinstance(prefix, str) or _has_control_chars(prefix):
        raise InvalidInputError(
            "Prefix contains control characters", operation=operation, key=prefix
        )
    return prefix


@dataclass(frozen=True)
class ObjectMetadata:
    key: str
    size: int
    last_modified: datetime


@dataclass(frozen=True)
class SignedUrl:
    url: str
    expires_at: datetime


@dataclass(frozen=True)
class UploadRequest:
    key: str
    content: bytes = field(repr=False)
    content_type: str | None = None


@dataclass(frozen=True)
class ListingEntry:
    metadata: ObjectMetadata
    signed_url: SignedUrl


@dataclass(frozen=True)
class ListingPage:
    prefix: str
    entries: tuple[ListingEntry, ...]
    truncated: bool
    next_continuation_token: str | None = None
