"""Shared API helpers."""

from fastapi import HTTPException

from wastelog.services.errors import ReviewWorkflowError


def to_http_error(exc: ReviewWorkflowError) -> HTTPException:
    """Translate a workflow failure into an HTTP error with the same message."""
    return HTTPException(status_code=exc.status_code, detail=exc.message)
