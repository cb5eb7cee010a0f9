from typing import Annotated, cast

from fastapi import Depends, Request

from webfiles.app import App
from webfiles.core.modules.auth.models import AuthContext


async def get_app(request: Request) -> App:
    return cast(App, request.app.state.app)


async def get_auth_context(request: Request) -> AuthContext:
    """Get the context resolved by TokenResolutionMiddleware, anonymous if it did not run."""
    context = getattr(request.state, "auth", None)
    if isinstance(context, AuthContext):
        return context
    return AuthContext.anonymous()


# Type aliases for dependencies
AppDep = Annotated[App, Depends(get_app)]
AuthContextDep = Annotated[AuthContext, Depends(get_auth_context)]
