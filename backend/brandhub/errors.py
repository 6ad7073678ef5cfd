# Overview: Error taxonomy shared by services and routes.

"""
Every failure the core reports to its caller is one of the classes below.

Callers decide retry-ability from ``retryable``: only StoreError may be
retried unmodified, every other class is deterministic.
"""


class BrandHubError(Exception):
    """Base class for all classified core errors."""

    status_code = 500
    retryable = False

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.message, "type": type(self).__name__}


class ValidationError(BrandHubError, ValueError):
    """400-level input problem (missing required field, out-of-range value)."""

    status_code = 400


class PasswordValidationError(ValidationError):
    """Raised when password doesn't meet strength requirements."""


class ConflictError(BrandHubError, ValueError):
    """409-level uniqueness or business rule conflict."""

    status_code = 409


class DuplicateEmail(ConflictError):
    pass


class SlugConflict(ConflictError):
    pass


class ProfileAlreadyExists(ConflictError):
    pass


class BrandAlreadyExists(ConflictError):
    pass


class NotFoundError(BrandHubError, LookupError):
    """Operation targets an id that does not exist."""

    status_code = 404


class ReferentialError(BrandHubError):
    """A child row names an owner that does not exist."""

    status_code = 422


class StoreError(BrandHubError):
    """Underlying store unavailable or rejected the operation."""

    status_code = 503
    retryable = True


class PermissionDeniedError(BrandHubError):
    status_code = 403
