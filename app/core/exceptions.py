# app/core/exceptions.py
"""
Error taxonomy shared by the repositories and the API layer.

Repositories raise these; the exception handlers in app.main are the only
place they are turned into HTTP responses.
"""


class HelpdeskError(Exception):
    """Base exception for all application errors."""

    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(HelpdeskError):
    """A required field was missing or empty."""

    status_code = 400


class NotFoundError(HelpdeskError):
    """The referenced ticket does not exist."""

    status_code = 404

    def __init__(self, message: str = "Ticket not found"):
        super().__init__(message)


class StoreError(HelpdeskError):
    """The underlying database failed."""

    status_code = 500


__all__ = ["HelpdeskError", "ValidationError", "NotFoundError", "StoreError"]
