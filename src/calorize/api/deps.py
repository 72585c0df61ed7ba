"""Request dependencies for the HTTP adapter."""

from uuid import UUID

from fastapi import Header, HTTPException, Request, status

from calorize.containers import AppContainer
from calorize.domain.models import UserRecord
from calorize.errors import NotAuthorizedError


def get_container(request: Request) -> AppContainer:
    return request.app.state.container


def require_user(
    request: Request, x_user_id: str | None = Header(default=None)
) -> UserRecord:
    """Resolve the caller identified by the upstream authentication layer."""
    if not x_user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    try:
        user_id = UUID(x_user_id)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED) from exc
    try:
        return get_container(request).user_service.require_active(user_id)
    except NotAuthorizedError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED) from exc
