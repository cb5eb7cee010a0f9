"""Per-request authentication models."""

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from enum import StrEnum
from typing import Self

from webfiles.core.modules.session.models import Session


class TokenState(StrEnum):
    """Where the authoritative token of a request came from."""

    NO_TOKEN = "no_token"
    FROM_REQUEST = "from_request"  # URL query or Authorization header
    FROM_COOKIE = "from_cookie"  # jwt cookie or the session's cached token
    MINTED = "minted"


@dataclass(frozen=True)
class TokenRequest:
    """The parts of an HTTP request that can carry a token."""

    query: Mapping[str, str] = field(default_factory=dict)
    headers: Mapping[str, str] = field(default_factory=dict)
    cookies: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class AuthContext:
    """Resolved identity of a request, read-only to handlers.

    identity is meaningful only when authenticated is True. authorized is set
    only after ownership of the requested resource has been checked.
    """

    authenticated: bool = False
    identity: str = ""
    authorized: bool = False
    raw_token: str = ""
    session: Session | None = None
    source: TokenState = TokenState.NO_TOKEN

    @classmethod
    def anonymous(cls) -> Self:
        return cls()

    def with_authorized(self) -> Self:
        return replace(self, authorized=True)


@dataclass(frozen=True)
class TokenResolution:
    """Outcome of token resolution: the context plus the cookies to send back."""

    state: TokenState
    context: AuthContext
    session_cookie: str
    jwt_cookie: str | None = None  # None when the request already carries the token
