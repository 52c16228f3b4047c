import mimetypes
from pathlib import PurePosixPath

DEFAULT_CONTENT_TYPE = "application/octet-stream"

# mimetypes reports these suffixes as encodings, not types.
_ENCODING_TYPES = {
    "gzip": "application/gzip",
    "bzip2": "application/x-bzip2",
    "xz": "application/x-xz",
    "br": "application/x-brotli",
    "compress": "application/x-compress",
}


def resolve_content_type(file_name: str | None) -> str:
    """Guess a MIME type from a file name, falling back to octet-stream."""
    if not file_name:
        return DEFAULT_CONTENT_TYPE
    name = PurePosixPath(str(file_name).replace("\\", "/")).name
    if "." not in name.strip("."):
        return DEFAULT_CONTENT_TYPE

    content_type, encoding = mimetypes.guess_type(name, strict=True)
    if encoding:
        return _ENCODING_TYPES.get(encoding, DEFAULT_CONTENT_TYPE)
    return content_type or DEFAULT_CONTENT_TYPE
