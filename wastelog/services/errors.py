"""Typed failures raised by the review workflow services."""


class ReviewWorkflowError(Exception):
    """Base class for failures surfaced to callers of the workflow services."""

    status_code: int = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(ReviewWorkflowError):
    """Raised when a payload, justification or decision note is malformed."""

    status_code = 422


class AuthorizationError(ReviewWorkflowError):
    """Raised on role or branch mismatch."""

    status_code = 403


class NotFoundError(ReviewWorkflowError):
    """Raised when a referenced record, request or branch does not exist."""

    status_code = 404


class ConflictError(ReviewWorkflowError):
    """Raised on a duplicate pending request or a stale snapshot at approval."""

    status_code = 409


class InvalidStateError(ReviewWorkflowError):
    """Raised when deciding a request that is no longer pending."""

    status_code = 409


class StorageError(ReviewWorkflowError):
    """Raised when the underlying transaction fails and has been rolled back."""

    status_code = 500
