"""Ordered token sources; the first one yielding a verifiable token wins."""

from collections.abc import Callable

from webfiles.core.modules.auth.models import TokenRequest, TokenState

JWT_PARAM = "jwt"
JWT_COOKIE = "jwt"

TokenSource = Callable[[TokenRequest], str | None]


def token_from_query(request: TokenRequest) -> str | None:
    return request.query.get(JWT_PARAM) or None


def token_from_header(request: TokenRequest) -> str | None:
    """Token from an `Authorization: Bearer <token>` header."""
    authorization = request.headers.get("authorization", "")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() != "bearer":
        return None
    return credentials.strip() or None


def token_from_cookie(request: TokenRequest) -> str | None:
    return request.cookies.get(JWT_COOKIE) or None


REQUEST_TOKEN_SOURCES: list[tuple[TokenState, TokenSource]] = [
    (TokenState.FROM_REQUEST, token_from_query),
    (TokenState.FROM_REQUEST, token_from_header),
    (TokenState.FROM_COOKIE, token_from_cookie),
]
