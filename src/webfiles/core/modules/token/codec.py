"""Signing and verification of HS256 JSON Web Tokens."""

from datetime import UTC, datetime, timedelta

import jwt

from webfiles.core.modules.token.models import SignedToken, TokenClaims
from webfiles.errors import InvalidTokenSignatureError, TokenExpiredError
from webfiles.utils import now

SIGNING_ALGORITHM = "HS256"
HMAC_ALGORITHMS = ["HS256", "HS384", "HS512"]
DEFAULT_LIFETIME = timedelta(hours=24)


def issue_token(secret: str, subject: str, lifetime: timedelta = DEFAULT_LIFETIME) -> tuple[SignedToken, TokenClaims]:
    """Sign a new token for subject, valid from now for lifetime.

    Timestamps are truncated to whole seconds, as they are encoded.
    """
    issued_at = now().replace(microsecond=0)
    claims = TokenClaims(subject=subject, issued_at=issued_at, expires_at=issued_at + lifetime)
    payload = {
        "sub": claims.subject,
        "iat": int(claims.issued_at.timestamp()),
        "exp": int(claims.expires_at.timestamp()),
    }
    signed = jwt.encode(payload, secret, algorithm=SIGNING_ALGORITHM)
    return SignedToken(signed), claims


def verify_token(signed_token: str, secret: str) -> TokenClaims:
    """Verify signature and expiry of a token and return its claims.

    Raises:
        TokenExpiredError: If the token is at or past its expiry
        InvalidTokenSignatureError: If the token is malformed, not HMAC-signed,
            or its signature does not verify under secret
    """
    try:
        payload = jwt.decode(
            signed_token,
            secret,
            algorithms=HMAC_ALGORITHMS,
            options={"require": ["sub", "iat", "exp"]},
        )
    except jwt.ExpiredSignatureError as e:
        raise TokenExpiredError(str(e)) from e
    except jwt.InvalidTokenError as e:
        raise InvalidTokenSignatureError(str(e)) from e

    return TokenClaims(
        subject=payload["sub"],
        issued_at=datetime.fromtimestamp(payload["iat"], UTC),
        expires_at=datetime.fromtimestamp(payload["exp"], UTC),
    )
