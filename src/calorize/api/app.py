"""FastAPI application factory."""

import logging
from typing import Annotated
from uuid import UUID

from fastapi import Depends, FastAPI, Request, status
from fastapi.responses import JSONResponse

from calorize.api.deps import get_container, require_user
from calorize.api.schemas import (
    FoodPayload,
    IngredientsPayload,
    LogPayload,
    ProfilePayload,
)
from calorize.app_logging import configure_logging
from calorize.containers import AppContainer
from calorize.domain.models import UserRecord
from calorize.errors import (
    CalorizeError,
    ConflictError,
    NotAuthorizedError,
    NotFoundError,
    StorageError,
    ValidationError,
)

CurrentUser = Annotated[UserRecord, Depends(require_user)]
Container = Annotated[AppContainer, Depends(get_container)]

_STATUS_BY_ERROR: tuple[tuple[type[CalorizeError], int], ...] = (
    (ValidationError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (NotAuthorizedError, status.HTTP_403_FORBIDDEN),
    (ConflictError, status.HTTP_409_CONFLICT),
)


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    app = FastAPI(title="calorize")
    app.state.container = container

    @app.exception_handler(CalorizeError)
    async def handle_calorize_error(
        request: Request, exc: CalorizeError
    ) -> JSONResponse:
        for error_type, status_code in _STATUS_BY_ERROR:
            if isinstance(exc, error_type):
                return JSONResponse({"detail": str(exc)}, status_code=status_code)
        if isinstance(exc, StorageError):
            logger.error(
                "Storage failure",
                exc_info=exc,
                extra={"path": request.url.path},
            )
        return JSONResponse(
            {"detail": "internal error"},
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    @app.get("/health")
    def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/me")
    def get_me(user: CurrentUser) -> dict[str, object]:
        """Return the caller's profile."""
        return {"user": user}

    @app.patch("/me")
    def update_me(
        payload: ProfilePayload, user: CurrentUser, state: Container
    ) -> dict[str, object]:
        """Change the caller's name or email."""
        updated = state.user_service.update_profile(
            user.id, name=payload.name, email=payload.email
        )
        return {"user": updated}

    @app.post("/foods", status_code=status.HTTP_201_CREATED)
    def create_food(
        payload: FoodPayload, user: CurrentUser, state: Container
    ) -> dict[str, object]:
        """Create the first version of a food or recipe."""
        record = state.catalog_service.create_record(user.id, payload.to_draft())
        return {"food": record}

    @app.get("/foods")
    def list_foods(
        user: CurrentUser, state: Container, kind: str | None = None
    ) -> dict[str, object]:
        """List current foods and recipes visible to the caller."""
        return {"foods": state.catalog_service.list_records(user.id, kind)}

    @app.get("/foods/{food_id}")
    def get_food(
        food_id: UUID, user: CurrentUser, state: Container
    ) -> dict[str, object]:
        """Return one exact version."""
        return {"food": state.catalog_service.get_record(food_id)}

    @app.get("/foods/{food_id}/current")
    def get_current_food(
        food_id: UUID, user: CurrentUser, state: Container
    ) -> dict[str, object]:
        """Return the current version of the family ``food_id`` belongs to."""
        return {"food": state.catalog_service.get_current(food_id)}

    @app.put("/foods/{food_id}")
    def update_food(
        food_id: UUID, payload: FoodPayload, user: CurrentUser, state: Container
    ) -> dict[str, object]:
        """Supersede a family with a new version."""
        record = state.catalog_service.update_record(food_id, payload.to_draft())
        return {"food": record}

    @app.delete("/foods/{food_id}")
    def delete_food(
        food_id: UUID, user: CurrentUser, state: Container
    ) -> dict[str, str]:
        """Soft-delete the whole family."""
        state.catalog_service.delete_record(food_id)
        return {"status": "ok"}

    @app.get("/foods/{food_id}/versions")
    def list_food_versions(
        food_id: UUID, user: CurrentUser, state: Container
    ) -> dict[str, object]:
        """Return the version history of a family, newest first."""
        return {"versions": state.catalog_service.list_versions(food_id)}

    @app.get("/foods/{food_id}/ingredients")
    def get_ingredients(
        food_id: UUID, user: CurrentUser, state: Container
    ) -> dict[str, object]:
        """Return a recipe's ingredients."""
        return {"ingredients": state.recipe_service.get_ingredients(food_id)}

    @app.put("/foods/{food_id}/ingredients")
    def set_ingredients(
        food_id: UUID,
        payload: IngredientsPayload,
        user: CurrentUser,
        state: Container,
    ) -> dict[str, object]:
        """Attach ingredients to a recipe version."""
        ingredients = state.recipe_service.set_ingredients(
            food_id, payload.ingredients
        )
        return {"ingredients": ingredients}

    @app.get("/foods/{food_id}/totals")
    def get_recipe_totals(
        food_id: UUID, user: CurrentUser, state: Container
    ) -> dict[str, object]:
        """Return macros summed over a recipe's ingredients."""
        return {"totals": state.recipe_service.compute_totals(food_id)}

    @app.post("/logs", status_code=status.HTTP_201_CREATED)
    def create_log(
        payload: LogPayload, user: CurrentUser, state: Container
    ) -> dict[str, object]:
        """Log consumption of an exact food version."""
        entry = state.ledger_service.append(
            user.id,
            payload.food_id,
            payload.amount,
            payload.meal_tag,
            payload.logged_at,
        )
        return {"log": entry}

    @app.get("/logs")
    def list_logs(
        user: CurrentUser, state: Container, date: str | None = None
    ) -> dict[str, object]:
        """Return the caller's log entries for one day (default today)."""
        return {"logs": state.ledger_service.list_for_day(user.id, date)}

    @app.delete("/logs/{log_id}")
    def delete_log(
        log_id: UUID, user: CurrentUser, state: Container
    ) -> dict[str, str]:
        """Soft-delete one of the caller's log entries."""
        state.ledger_service.soft_delete(log_id, user.id)
        return {"status": "ok"}

    @app.get("/stats")
    def get_stats(
        user: CurrentUser,
        state: Container,
        period: str = "day",
        date: str | None = None,
    ) -> dict[str, object]:
        """Return totals for the day, week or month containing ``date``."""
        return {"stats": state.stats_service.get_stats(user.id, period, date)}

    return app
