"""Shared FastAPI dependency providers for controller layer."""

from __future__ import annotations

from typing import Any

from fastapi import Depends, Header, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from backend.domain.errors import (
    InvalidReservationError,
    InvalidTransitionError,
    NotFoundError,
    ReservationAccessError,
    ReservationConflictError,
    ReservationError,
)
from backend.services.allocation_service import AllocationService
from backend.services.auth_service import (
    AdminTokenNotConfiguredError,
    AuthService,
    InvalidAdminTokenError,
    MissingRequesterIdentityError,
    RequesterIdentity,
)
from backend.services.catalog_service import CatalogService
from backend.services.moderation_service import ModerationService


bearer_scheme = HTTPBearer(auto_error=False)


def _service_from_state(request: Request, name: str, label: str) -> Any:
    service = getattr(request.app.state, name, None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"{label} is not initialized",
        )
    return service


def get_auth_service(request: Request) -> AuthService:
    return _service_from_state(request, "auth_service", "Auth service")


def get_allocation_service(request: Request) -> AllocationService:
    return _service_from_state(request, "allocation_service", "Allocation service")


def get_moderation_service(request: Request) -> ModerationService:
    return _service_from_state(request, "moderation_service", "Moderation service")


def get_catalog_service(request: Request) -> CatalogService:
    return _service_from_state(request, "catalog_service", "Catalog service")


async def require_admin(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    auth_service: AuthService = Depends(get_auth_service),
) -> None:
    if not auth_service.auth_enabled:
        return
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header with Bearer token is required",
        )
    try:
        auth_service.validate_bearer_token(credentials.credentials)
    except (AdminTokenNotConfiguredError, InvalidAdminTokenError) as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        ) from exc


async def require_requester(
    x_user_id: str | None = Header(default=None),
    x_user_name: str | None = Header(default=None),
    auth_service: AuthService = Depends(get_auth_service),
) -> RequesterIdentity:
    try:
        return auth_service.resolve_requester(x_user_id, x_user_name)
    except MissingRequesterIdentityError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        ) from exc


_STATUS_BY_ERROR: tuple[tuple[type[ReservationError], int], ...] = (
    (InvalidReservationError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ReservationAccessError, status.HTTP_403_FORBIDDEN),
    (ReservationConflictError, status.HTTP_409_CONFLICT),
    (InvalidTransitionError, status.HTTP_409_CONFLICT),
)


def to_http_exception(exc: ReservationError) -> HTTPException:
    status_code = status.HTTP_400_BAD_REQUEST
    for error_type, mapped_status in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            status_code = mapped_status
            break
    return HTTPException(
        status_code=status_code,
        detail={
            "error": str(exc),
            "reason": exc.reason.value if exc.reason else None,
        },
    )
