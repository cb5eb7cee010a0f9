from abc import ABC


class UserError(ABC, Exception):
    """Base class for user-related errors.

    All errors that inherit from UserError will have their messages
    displayed to the user. These errors should not contain any
    sensitive information.
    """


class NotFoundError(UserError):
    """Raised when a requested resource is not found."""

    def __init__(self, message: str = "Not found") -> None:
        super().__init__(message)


class AuthenticationError(UserError):
    """Raised when the request is unauthenticated or not authorized for a resource."""

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)


class ValidationError(UserError):
    """Raised when user input fails validation."""


class PathEscapeError(ValidationError):
    """Raised when a file name would resolve outside the storage root."""

    def __init__(self, message: str = "File path escapes the storage root") -> None:
        super().__init__(message)


class MissingFileError(ValidationError):
    """Raised when an upload carries no file."""

    def __init__(self, message: str = "No file in upload") -> None:
        super().__init__(message)


class UnsupportedMediaTypeError(UserError):
    """Raised when an upload is not multipart/form-data."""


class MethodNotAllowedError(UserError):
    """Raised when an endpoint is called with the wrong HTTP method."""


class FileTooLargeError(UserError):
    """Raised when an upload exceeds the configured size limit."""


class TokenError(Exception):
    """Base class for token verification failures. Never shown to the user."""


class InvalidTokenSignatureError(TokenError):
    """Raised when a token is malformed, not HMAC-signed, or signed with another secret."""


class TokenExpiredError(TokenError):
    """Raised when a token is past its expiry."""


class SessionStoreError(Exception):
    """Raised when the session store cannot be read or written."""
