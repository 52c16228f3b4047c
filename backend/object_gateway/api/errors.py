from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from object_gateway.core.errors import (
    BackendTimeoutError,
    InvalidInputError,
    NotFoundError,
    PayloadTooLargeError,
    PermissionDeniedError,
    StorageError,
    TransientError,
    log_storage_error,
)
from object_gateway.schemas import ErrorResponse

_STATUS_BY_TYPE: tuple[tuple[type[StorageError], int], ...] = (
    (InvalidInputError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (PermissionDeniedError, status.HTTP_403_FORBIDDEN),
    (PayloadTooLargeError, status.HTTP_413_CONTENT_TOO_LARGE),
    (BackendTimeoutError, status.HTTP_504_GATEWAY_TIMEOUT),
    (TransientError, status.HTTP_502_BAD_GATEWAY),
)


def status_for(error: StorageError) -> int:
    for error_type, code in _STATUS_BY_TYPE:
        if isinstance(error, error_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def error_response(error: StorageError, message: str) -> JSONResponse:
    """Log ``error`` and render it with a stable, client-safe message."""
    log_storage_error(error)
    body = ErrorResponse(message=message, errorKind=error.kind)
    return JSONResponse(status_code=status_for(error), content=body.model_dump())


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    fields = ", ".join(".".join(str(part) for part in err["loc"]) for err in exc.errors())
    error = InvalidInputError(f"Invalid request ({fields})", operation=request.url.path)
    return error_response(error, "Invalid request parameters")
