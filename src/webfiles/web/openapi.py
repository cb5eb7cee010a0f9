from typing import Any

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi
from pydantic import BaseModel, Field


def set_custom_openapi(app: FastAPI) -> None:
    def custom_openapi() -> dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema

        openapi_schema = get_openapi(
            title="webfiles API",
            version="0.1.0",
            summary="Content-addressed file store with token and cookie-session authentication",
            routes=app.routes,
        )

        # Token transports, in the order they are tried
        openapi_schema.setdefault("components", {})["securitySchemes"] = {
            "JWTQuery": {
                "type": "apiKey",
                "in": "query",
                "name": "jwt",
                "description": "Token in the jwt query parameter (highest priority)",
            },
            "BearerAuth": {
                "type": "http",
                "scheme": "bearer",
                "bearerFormat": "JWT",
                "description": "Token in the Authorization header",
            },
            "JWTCookie": {
                "type": "apiKey",
                "in": "cookie",
                "name": "jwt",
                "description": "Token stored in cookie; a token is minted when none is supplied",
            },
        }

        # Every endpoint also works without credentials: a session and token are created on demand
        openapi_schema["security"] = [
            {"JWTQuery": []},
            {"BearerAuth": []},
            {"JWTCookie": []},
            {},
        ]

        public_endpoints = {
            ("GET", "/health"),
        }

        for path, path_item in openapi_schema["paths"].items():
            for method, operation in path_item.items():
                if (method.upper(), path) in public_endpoints:
                    operation["security"] = []

        app.openapi_schema = openapi_schema
        return app.openapi_schema

    app.openapi = custom_openapi  # type: ignore[method-assign]


class ErrorResponse(BaseModel):
    """Standard error response format."""

    message: str = Field(..., description="Human-readable error message")
    type: str = Field(..., description="Machine-readable error type")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"message": "Unauthorized for file 0123456789abcdef", "type": "authentication_error"},
                {"message": "File not found: 0123456789abcdef", "type": "not_found"},
                {"message": "File name may not contain '..' components: '../x'", "type": "path_escape"},
            ]
        }
    }
