"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from cityhunt.appointments.router import router as appointments_router
from cityhunt.auth.router import router as auth_router
from cityhunt.checkpoints.router import router as checkpoints_router
from cityhunt.config import get_settings
from cityhunt.database import DocumentStore
from cityhunt.health.router import router as health_router
from cityhunt.middleware import setup_middleware
from cityhunt.patterns.router import router as patterns_router
from cityhunt.streets.router import router as streets_router
from cityhunt.users.router import router as users_router

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Connect the document store before serving and close it on shutdown."""
    owned = getattr(app.state, "store", None) is None
    if owned:
        settings = get_settings()
        app.state.store = await DocumentStore.connect(
            settings.mongodb_uri,
            settings.db_name,
            server_selection_timeout_ms=settings.mongodb_server_selection_timeout_ms,
        )

    yield

    if owned:
        app.state.store.close()
        app.state.store = None


def create_app(store: DocumentStore | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Passing ``store`` skips the connection step of the lifespan; the caller
    keeps ownership of it.
    """
    settings = get_settings()

    app = FastAPI(
        title="City Hunt Help Desk API",
        description="Users, appointments, checkpoints and street verification for city-walk scavenger hunts",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )
    app.state.store = store

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(appointments_router)
    app.include_router(checkpoints_router)
    app.include_router(streets_router)
    app.include_router(patterns_router)

    return app


def run() -> None:
    """Serve the API with uvicorn; SIGINT/SIGTERM trigger lifespan shutdown."""
    import uvicorn

    settings = get_settings()
    logger.info("server_starting", host=settings.host, port=settings.port, environment=settings.environment)
    uvicorn.run("cityhunt.main:create_app", factory=True, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
