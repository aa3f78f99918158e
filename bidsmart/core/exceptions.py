"""Custom exception hierarchy.

Every error carries the HTTP status the API layer answers with, so endpoint
code can simply let them propagate.
"""

from typing import Optional


class AppError(Exception):
    """Base exception for application errors."""

    status_code: int = 500

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class ConfigurationError(AppError):
    """Raised when configuration is invalid or missing."""

    status_code = 500


class ValidationError(AppError):
    """Raised when input validation fails."""

    status_code = 400


class MissingCallbackFieldsError(ValidationError):
    """Raised when a callback lacks request_id, signature or timestamp."""


class SignatureError(AppError):
    """Base class for webhook authentication failures."""

    status_code = 401


class InvalidSignatureError(SignatureError):
    """Raised when the HMAC signature does not match."""


class ExpiredRequestError(SignatureError):
    """Raised when the signed timestamp is outside the replay window."""


class AuthenticationError(AppError):
    """Raised when login credentials or a verification code are rejected."""

    status_code = 401


class AuthorizationError(AppError):
    """Raised when the caller may not act on a resource."""

    status_code = 403


class NotFoundError(AppError):
    """Base class for missing resources."""

    status_code = 404


class PdfUploadNotFoundError(NotFoundError):
    """Raised when a pdf upload is not found."""


class ProjectNotFoundError(NotFoundError):
    """Raised when a project is not found."""


class BidNotFoundError(NotFoundError):
    """Raised when a contractor bid is not found."""


class RateLimitError(AppError):
    """Raised when a caller asks for more than the allowed number of codes."""

    status_code = 429


class DatabaseError(AppError):
    """Raised when a database operation fails."""


class BidCreationError(DatabaseError):
    """Raised when the bid row of a callback cannot be inserted."""


class APIClientError(AppError):
    """Raised when an external API call fails."""

    status_code = 502


class EmailDeliveryError(APIClientError):
    """Raised when the email provider rejects a message."""

    status_code = 500
