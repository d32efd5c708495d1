"""Shared FastAPI dependencies.

The ``DocumentStore`` lives on ``app.state``; repositories are built per
request around it.
"""

from fastapi import Depends, Query, Request

from cityhunt.appointments.repository import AppointmentRepository
from cityhunt.auth.service import AuthService
from cityhunt.checkpoints.repository import CheckpointRepository
from cityhunt.config import get_settings
from cityhunt.database import DocumentStore
from cityhunt.errors import StoreUnavailableError
from cityhunt.patterns.repository import PatternRepository
from cityhunt.scoring import ScoringWorkflow
from cityhunt.streets.repository import StreetRepository
from cityhunt.users.repository import UserRepository


def get_store(request: Request) -> DocumentStore:
    """Return the store attached to the running application."""
    store: DocumentStore | None = getattr(request.app.state, "store", None)
    if store is None:
        msg = "Document store not initialized"
        raise StoreUnavailableError(msg)
    return store


def get_user_repository(store: DocumentStore = Depends(get_store)) -> UserRepository:  # noqa: B008
    return UserRepository(store)


def get_auth_service(store: DocumentStore = Depends(get_store)) -> AuthService:  # noqa: B008
    return AuthService(store)


def get_appointment_repository(store: DocumentStore = Depends(get_store)) -> AppointmentRepository:  # noqa: B008
    return AppointmentRepository(store)


def get_checkpoint_repository(store: DocumentStore = Depends(get_store)) -> CheckpointRepository:  # noqa: B008
    return CheckpointRepository(store)


def get_scoring_workflow(store: DocumentStore = Depends(get_store)) -> ScoringWorkflow:  # noqa: B008
    return ScoringWorkflow(store)


def get_street_repository(store: DocumentStore = Depends(get_store)) -> StreetRepository:  # noqa: B008
    return StreetRepository(store)


def get_pattern_repository(store: DocumentStore = Depends(get_store)) -> PatternRepository:  # noqa: B008
    return PatternRepository(store)


class PageParams:
    """``page``/``limit`` query parameters, bounded by settings."""

    def __init__(
        self,
        page: int = Query(1, ge=1),
        limit: int | None = Query(None, ge=1),
    ) -> None:
        settings = get_settings()
        self.page = page
        self.limit = min(limit or settings.default_page_size, settings.max_page_size)
