"""Global exception handlers that map domain exceptions to HTTP responses."""

from fastapi import Request, status
from fastapi.responses import JSONResponse

from escrow_rental.errors import (
    AlreadyVerifiedError,
    DomainError,
    DomainValidationError,
    DuplicateItemError,
    InvalidStateError,
    NoDisputeError,
    NotFoundError,
    PaymentMismatchError,
    TransferFailedError,
    UnauthorizedError,
)
from escrow_rental.schemas.common import ErrorResponse

STATUS_BY_ERROR: dict[type[DomainError], int] = {
    UnauthorizedError: status.HTTP_403_FORBIDDEN,
    AlreadyVerifiedError: status.HTTP_409_CONFLICT,
    DuplicateItemError: status.HTTP_409_CONFLICT,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    InvalidStateError: status.HTTP_409_CONFLICT,
    PaymentMismatchError: status.HTTP_400_BAD_REQUEST,
    NoDisputeError: status.HTTP_409_CONFLICT,
    DomainValidationError: status.HTTP_400_BAD_REQUEST,
    TransferFailedError: status.HTTP_402_PAYMENT_REQUIRED,
}


def _error_response(status_code: int, detail: str, code: str) -> JSONResponse:
    """Return a standardized error response with detail and machine-readable code."""
    body = ErrorResponse(detail=detail, code=code)
    return JSONResponse(status_code=status_code, content=body.model_dump())


def domain_error_handler(_request: Request, exc: DomainError) -> JSONResponse:
    status_code = STATUS_BY_ERROR.get(type(exc), status.HTTP_400_BAD_REQUEST)
    return _error_response(status_code, str(exc), exc.code)


def register_exception_handlers(app):
    """Register domain exception handlers on the FastAPI app."""
    for error_class in STATUS_BY_ERROR:
        app.add_exception_handler(error_class, domain_error_handler)
    app.add_exception_handler(DomainError, domain_error_handler)
