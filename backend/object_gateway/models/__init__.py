from object_gateway.models.storage import (
    ListingEntry,
    ListingPage,
    ObjectMetadata,
    SignedUrl,
    UploadRequest,
    validate_key,
    validate_prefix,
)

__all__ = [
    "ObjectMetadata",
    "SignedUrl",
    "UploadRequest",
    "ListingEntry",
    "ListingPage",
    "validate_key",
    "validate_prefix",
]
