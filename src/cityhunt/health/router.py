"""Health, readiness, and version endpoints."""

from fastapi import APIRouter, Depends

from cityhunt.config import get_settings
from cityhunt.database import DocumentStore
from cityhunt.dependencies import get_store
from cityhunt.errors import StoreUnavailableError

router = APIRouter()


@router.get("/health")
async def health() -> dict[str, str]:
    """Liveness check: returns 200 if the process is alive."""
    return {"status": "healthy"}


@router.get("/ready")
async def readiness(
    store: DocumentStore = Depends(get_store),  # noqa: B008
) -> dict[str, object]:
    """Readiness check: pings MongoDB connectivity."""
    checks: dict[str, object] = {}

    try:
        await store.ping()
        checks["database"] = "ok"
    except StoreUnavailableError as exc:
        checks["database"] = f"error: {exc}"

    all_ok = all(v == "ok" for v in checks.values())
    return {"status": "ready" if all_ok else "degraded", "checks": checks}


@router.get("/version")
async def version() -> dict[str, str]:
    """Return API version and environment."""
    settings = get_settings()
    return {
        "version": settings.app_version,
        "environment": settings.environment,
    }
