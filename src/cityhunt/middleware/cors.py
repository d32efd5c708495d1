"""CORS middleware configuration."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cityhunt.config import Settings


def setup_cors(app: FastAPI, settings: Settings) -> None:
    """Open the API to the configured origins.

    Browsers refuse credentialed responses to a wildcard origin, so
    credentials are only allowed when origins are listed explicitly.
    """
    wildcard = "*" in settings.cors_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=not wildcard,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "X-Request-Id"] if not wildcard else ["*"],
        expose_headers=["X-Request-Id"],
    )
