from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from webfiles.app import App
from webfiles.core.modules.auth.models import TokenRequest
from webfiles.core.modules.auth.sources import JWT_COOKIE
from webfiles.errors import SessionStoreError
from webfiles.web.error_handlers import create_json_error_response


class TokenResolutionMiddleware(BaseHTTPMiddleware):
    """Resolves the request's token and identity before any handler runs.

    The resulting AuthContext is stored on request.state.auth; the session
    cookie and the canonical jwt cookie are written onto the response.
    """

    def __init__(self, app: ASGIApp, app_instance: App) -> None:
        super().__init__(app)
        self._app = app_instance

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        token_request = TokenRequest(query=request.query_params, headers=request.headers, cookies=request.cookies)
        try:
            resolution = await self._app.resolve_token(token_request)
        except SessionStoreError:
            self._app.logger.exception("session_store_failed", path=request.url.path)
            return create_json_error_response(500, "Session error", "session_error")

        request.state.auth = resolution.context
        response = await call_next(request)

        config = self._app.config
        response.set_cookie(
            key=config.session_cookie_name,
            value=resolution.session_cookie,
            max_age=config.session_max_age,
            path="/",
            httponly=True,
            samesite="lax",
            secure=config.cookie_secure,
        )
        if resolution.jwt_cookie is not None:
            response.set_cookie(
                key=JWT_COOKIE,
                value=resolution.jwt_cookie,
                max_age=config.token_lifetime_hours * 60 * 60,
                path="/",
                httponly=True,
                samesite="lax",
                secure=config.cookie_secure,
            )
        return response
