from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from webfiles.app import App
from webfiles.config import Config
from webfiles.errors import UserError
from webfiles.web.error_handlers import general_exception_handler, user_error_handler
from webfiles.web.middleware import TokenResolutionMiddleware
from webfiles.web.openapi import set_custom_openapi
from webfiles.web.routers import files_router, token_router


def create_fastapi_app(app_instance: App, config: Config) -> FastAPI:
    """Create and configure FastAPI application."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
        """FastAPI application lifespan management."""
        async with app_instance.lifespan():
            yield

    app = FastAPI(
        title="webfiles API",
        lifespan=lifespan,
        openapi_tags=[],  # Tags will be added by custom OpenAPI function
    )
    # Store app instance and config in app state
    app.state.app = app_instance
    app.state.config = config

    # Every request gets a session and a resolved token before reaching a handler
    app.add_middleware(TokenResolutionMiddleware, app_instance=app_instance)

    if config.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        return {"status": "healthy"}

    app.include_router(token_router)
    app.include_router(files_router)

    # Register error handlers
    app.add_exception_handler(UserError, user_error_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    set_custom_openapi(app)

    return app
