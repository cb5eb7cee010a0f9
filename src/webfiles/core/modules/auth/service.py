from datetime import timedelta

from webfiles.core.core import Service
from webfiles.core.modules.auth.models import AuthContext, TokenRequest, TokenResolution, TokenState
from webfiles.core.modules.auth.sources import JWT_COOKIE, REQUEST_TOKEN_SOURCES
from webfiles.core.modules.session.models import Session
from webfiles.core.modules.token.codec import issue_token, verify_token
from webfiles.core.modules.token.models import TokenClaims
from webfiles.errors import TokenError


class AuthService(Service):
    """Resolves the single authoritative token and identity of each request.

    Sources are tried in order: the request itself (query parameter,
    Authorization header, jwt cookie), then the token cached in the session
    cookie, and finally a newly minted token whose subject is the session id.
    The session is saved once, after the token is final.
    """

    @property
    def _secret(self) -> str:
        return self.core.config.signing_key

    def verify(self, token: str | None) -> TokenClaims | None:
        """Verify a token, returning None instead of raising on any token failure."""
        if not token:
            return None
        try:
            return verify_token(token, self._secret)
        except TokenError as e:
            self.logger.debug("token_rejected", error=str(e))
            return None

    def token_from_request(self, request: TokenRequest) -> tuple[TokenState, str, TokenClaims] | None:
        """First verifiable token carried by the request itself."""
        for state, source in REQUEST_TOKEN_SOURCES:
            token = source(request)
            claims = self.verify(token)
            if token and claims is not None:
                return state, token, claims
        return None

    def mint(self, session: Session) -> tuple[str, TokenClaims]:
        """Issue a new token for the session and cache it there."""
        lifetime = timedelta(hours=self.core.config.token_lifetime_hours)
        token, claims = issue_token(self._secret, str(session.id), lifetime)
        session.cache_token(token)
        self.logger.info("token_minted", subject=claims.subject, expires_at=claims.expires_at.isoformat())
        return token, claims

    async def resolve(self, request: TokenRequest) -> TokenResolution:
        """Run token resolution for one request.

        Raises:
            SessionStoreError: If the session cannot be loaded or saved
        """
        sessions = self.core.services.session
        session = await sessions.get_session(request.cookies.get(self.core.config.session_cookie_name))
        cached_claims = self.verify(session.cached_token)

        found = self.token_from_request(request)
        if found is not None:
            state, token, claims = found
            # Remember a request token so later cookie-only calls keep the same identity
            if cached_claims is None:
                session.cache_token(token)
        elif cached_claims is not None and session.cached_token is not None:
            state, token, claims = TokenState.FROM_COOKIE, session.cached_token, cached_claims
        else:
            state = TokenState.MINTED
            token, claims = self.mint(session)

        session_cookie = await sessions.save_session(session)

        self.logger.debug("token_resolved", state=state.value, subject=claims.subject, new_session=session.is_new)
        context = AuthContext(
            authenticated=True,
            identity=claims.subject,
            raw_token=token,
            session=session,
            source=state,
        )
        jwt_cookie = None if request.cookies.get(JWT_COOKIE) == token else token
        return TokenResolution(state=state, context=context, session_cookie=session_cookie, jwt_cookie=jwt_cookie)
