"""
app.py: FastAPI application factory and startup lifecycle.

This is the ASGI application object imported by uvicorn.
It wires the repository and services, registers routers, and runs startup
initialization (schema + default rooms).

Usage (via launcher):
    python main.py

Usage (direct uvicorn):
    uvicorn app:app --reload
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timedelta
from typing import Optional

from fastapi import FastAPI

from backend.controllers.admin_controller import router as admin_router
from backend.controllers.booking_controller import router as booking_router
from backend.controllers.room_controller import router as room_router
from backend.domain.constraints import OperatingCalendar
from backend.domain.quota import build_quota_policy
from backend.repository.base import Repository
from backend.repository.data_repository import build_repository
from backend.services.allocation_service import AllocationService, Clock
from backend.services.auth_service import AuthService
from backend.services.catalog_service import CatalogService
from backend.services.moderation_service import ModerationService
from backend.utils.config import Settings, get_settings
from backend.utils.logger import get_logger


logger = get_logger(__name__)


def build_allocation_service(
    settings: Settings,
    repository: Repository,
    clock: Optional[Clock] = None,
) -> AllocationService:
    calendar = OperatingCalendar(
        open_hour=settings.open_hour,
        close_hour=settings.close_hour,
        allowed_durations_hours=settings.allowed_durations_hours,
        min_advance_days=settings.min_advance_days,
    )
    return AllocationService(
        repository,
        calendar=calendar,
        quota_policy=build_quota_policy(
            settings.quota_policy,
            max_active_reservations=settings.max_active_reservations,
        ),
        moderation_enabled=settings.moderation_enabled,
        occupancy_window=timedelta(hours=settings.occupancy_window_hours),
        clock=clock or datetime.now,
    )


def create_app(
    settings: Optional[Settings] = None,
    repository: Optional[Repository] = None,
    clock: Optional[Clock] = None,
) -> FastAPI:
    """
    Build and wire the FastAPI application.

    Every collaborator is constructed here and handed down explicitly;
    controllers resolve them from app.state.
    """
    settings = settings or get_settings()

    # --- Repository (SQLite or in-memory, per STORAGE_BACKEND) ---
    repository = repository or build_repository(settings)

    # --- Services (business logic, no direct DB access) ---
    allocation_service = build_allocation_service(settings, repository, clock)
    moderation_service = ModerationService(allocation_service)
    catalog_service = CatalogService(allocation_service)
    auth_service = AuthService(settings=settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Run startup initialization before accepting requests."""
        _startup(app, seed_rooms=settings.seed_rooms)
        yield

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=lifespan,
    )

    # --- Routers ---
    app.include_router(room_router)
    app.include_router(booking_router)
    app.include_router(admin_router)

    @app.get("/health", tags=["health"])
    async def health() -> dict[str, str]:
        return {"status": "ok", "message": f"{settings.app_name} API is running"}

    # --- Inject services into app.state for dependency resolution ---
    app.state.repository = repository
    app.state.allocation_service = allocation_service
    app.state.moderation_service = moderation_service
    app.state.catalog_service = catalog_service
    app.state.auth_service = auth_service

    return app


def _startup(app: FastAPI, seed_rooms: bool = True) -> None:
    """
    Idempotent startup sequence. Safe to re-run on server restarts.

    Order matters:
      1. Schema must exist before seeding.
      2. Default rooms are only provisioned into an empty catalog.
    """
    repository: Repository = app.state.repository

    logger.info("Startup: initializing storage")
    repository.initialize_database()

    if seed_rooms:
        logger.info("Startup: seeding default rooms (skipped if catalog not empty)")
        repository.seed_default_rooms()

    logger.info("Startup complete, system ready")


# Module-level app object for uvicorn
app = create_app()
