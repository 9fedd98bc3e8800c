"""Custom domain exceptions for the application."""

# Stable, machine-readable error codes for API consumers.
UNAUTHORIZED = "UNAUTHORIZED"
ALREADY_VERIFIED = "ALREADY_VERIFIED"
DUPLICATE_ITEM = "DUPLICATE_ITEM"
NOT_FOUND = "NOT_FOUND"
INVALID_STATE = "INVALID_STATE"
PAYMENT_MISMATCH = "PAYMENT_MISMATCH"
NO_DISPUTE = "NO_DISPUTE"
VALIDATION_ERROR = "VALIDATION_ERROR"
TRANSFER_FAILED = "TRANSFER_FAILED"


class DomainError(Exception):
    """Base exception for domain/business logic errors."""

    code: str = VALIDATION_ERROR


class UnauthorizedError(DomainError):
    """Raised when the caller lacks the role or relationship an operation requires."""

    code = UNAUTHORIZED


class AlreadyVerifiedError(DomainError):
    """Raised when verifying a participant that is already verified."""

    code = ALREADY_VERIFIED


class DuplicateItemError(DomainError):
    """Raised when a rental already exists for the given item id."""

    code = DUPLICATE_ITEM


class NotFoundError(DomainError):
    """Raised when a requested resource does not exist."""

    code = NOT_FOUND


class InvalidStateError(DomainError):
    """Raised when the rental's status flags do not allow the operation."""

    code = INVALID_STATE


class PaymentMismatchError(DomainError):
    """Raised when the amount sent differs from the rental price."""

    code = PAYMENT_MISMATCH


class NoDisputeError(DomainError):
    """Raised when resolving a rental that has no open dispute."""

    code = NO_DISPUTE


class DomainValidationError(DomainError):
    """Raised when business rules or domain validation fail (e.g. non-positive price)."""

    code = VALIDATION_ERROR


class TransferFailedError(DomainError):
    """Raised by the ledger or the asset issuer when value or a token cannot be moved."""

    code = TRANSFER_FAILED
