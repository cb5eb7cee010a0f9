from typing import cast

from fastapi import Request
from fastapi.responses import JSONResponse, Response

from webfiles.app import App
from webfiles.errors import (
    AuthenticationError,
    FileTooLargeError,
    MethodNotAllowedError,
    NotFoundError,
    PathEscapeError,
    UnsupportedMediaTypeError,
    ValidationError,
)


def create_json_error_response(status_code: int, message: str, error_type: str | None = None) -> JSONResponse:
    """Create JSON error response with optional type for machine parsing."""
    content = {"message": message}
    if error_type:
        content["type"] = error_type
    return JSONResponse(status_code=status_code, content=content)


async def user_error_handler(_: Request, exc: Exception) -> Response:
    """Handle all UserError subclasses with appropriate status codes."""
    if isinstance(exc, AuthenticationError):
        status_code = 401
        error_type = "authentication_error"
    elif isinstance(exc, NotFoundError):
        status_code = 404
        error_type = "not_found"
    elif isinstance(exc, PathEscapeError):
        status_code = 400
        error_type = "path_escape"
    elif isinstance(exc, ValidationError):
        status_code = 400
        error_type = "validation_error"
    elif isinstance(exc, UnsupportedMediaTypeError):
        status_code = 415
        error_type = "unsupported_media_type"
    elif isinstance(exc, MethodNotAllowedError):
        status_code = 405
        error_type = "method_not_allowed"
    elif isinstance(exc, FileTooLargeError):
        status_code = 413
        error_type = "file_too_large"
    else:
        status_code = 400
        error_type = "bad_request"

    return create_json_error_response(status_code=status_code, message=str(exc), error_type=error_type)


async def general_exception_handler(request: Request, exc: Exception) -> Response:
    """Handle unexpected errors (500)."""
    app = cast(App, request.app.state.app)
    app.logger.exception("unexpected_error", path=request.url.path, error=str(exc))
    return create_json_error_response(
        status_code=500, message="An unexpected error occurred.", error_type="internal_server_error"
    )
