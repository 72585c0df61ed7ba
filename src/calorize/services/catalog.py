"""Versioned food and recipe catalog."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Protocol
from uuid import UUID, uuid4

from calorize.domain.foods import (
    FOOD_KINDS,
    KIND_FOOD,
    KIND_RECIPE,
    FoodDraft,
    FoodVersion,
    NewFoodVersion,
    RecipeItem,
)
from calorize.errors import ConflictError, NotFoundError, ValidationError
from calorize.services.users import require_user_id

if TYPE_CHECKING:
    from calorize.services.recipes import RecipeService

logger = logging.getLogger(__name__)


class FoodRepository(Protocol):
    """Persistence interface for food and recipe versions."""

    def create_version(self, new_version: NewFoodVersion) -> FoodVersion:
        """Atomically insert a version with its nutrients and ingredients.

        The store assigns the version number (max in family + 1, or 1 for a
        new family) and demotes the previous current version while holding a
        per-family lock. Raises ``ConflictError`` when it loses a race.
        """

    def get_version(self, food_id: UUID) -> FoodVersion | None:
        """Return a version by exact id, ignoring current and deleted flags."""

    def get_versions(self, food_ids: list[UUID]) -> list[FoodVersion]:
        """Return versions by exact id, ignoring current and deleted flags."""

    def get_current_in_family(self, family_id: UUID) -> FoodVersion | None:
        """Return the current, non-deleted version of a family."""

    def list_visible(self, user_id: UUID, kind: str | None) -> list[FoodVersion]:
        """Return current, non-deleted versions owned by the user or public."""

    def list_family(self, family_id: UUID) -> list[FoodVersion]:
        """Return non-deleted versions of a family, newest first."""

    def soft_delete_family(self, family_id: UUID, deleted_at: datetime) -> int:
        """Mark every live version of a family deleted; return rows touched."""


@dataclass
class CatalogService:
    """Maintains version lineage and the current pointer of each family."""

    repository: FoodRepository
    recipe_service: RecipeService
    version_conflict_retries: int = 3

    def create_record(self, user_id: UUID | None, draft: FoodDraft) -> FoodVersion:
        """Create version 1 of a new family owned by the caller."""
        creator_id = require_user_id(user_id)
        kind = draft.kind or KIND_FOOD
        _validate_draft(draft, kind)
        record_id = uuid4()
        items = self._ingredient_items(record_id, kind, draft)
        created = self.repository.create_version(
            _new_version(
                record_id=record_id,
                family_id=None,
                creator_id=creator_id,
                public=bool(draft.public),
                kind=kind,
                draft=draft,
                items=items,
            )
        )
        logger.info(
            "Created food family",
            extra={"food_id": str(created.id), "kind": created.kind},
        )
        return self._with_ingredients(created)

    def update_record(self, version_id: UUID, draft: FoodDraft) -> FoodVersion:
        """Supersede the family of ``version_id`` with a new current version.

        Family id and creator come from the existing version. Lost races on
        the version number are retried with a fresh row id.
        """
        existing = self.repository.get_version(version_id)
        if existing is None or existing.is_deleted:
            raise NotFoundError(f"food {version_id} not found")
        kind = draft.kind or existing.kind
        if kind != existing.kind:
            raise ValidationError(
                f"cannot change kind from {existing.kind!r} to {kind!r}"
            )
        _validate_draft(draft, kind)
        public = existing.public if draft.public is None else draft.public

        attempts = max(self.version_conflict_retries, 0) + 1
        for attempt in range(1, attempts + 1):
            record_id = uuid4()
            items = self._ingredient_items(record_id, kind, draft)
            new_version = _new_version(
                record_id=record_id,
                family_id=existing.family_id,
                creator_id=existing.creator_id,
                public=public,
                kind=kind,
                draft=draft,
                items=items,
            )
            try:
                created = self.repository.create_version(new_version)
            except ConflictError:
                if attempt == attempts:
                    raise
                logger.warning(
                    "Version conflict, retrying",
                    extra={"family_id": str(existing.family_id), "attempt": attempt},
                )
                continue
            logger.info(
                "Created food version",
                extra={
                    "family_id": str(created.family_id),
                    "version": created.version,
                },
            )
            return self._with_ingredients(created)
        raise ConflictError(f"could not create a new version of {version_id}")

    def get_record(self, version_id: UUID) -> FoodVersion:
        """Return a version by exact id, whatever its current/deleted state."""
        record = self.repository.get_version(version_id)
        if record is None:
            raise NotFoundError(f"food {version_id} not found")
        return self._with_ingredients(record)

    def get_current(self, version_id: UUID) -> FoodVersion:
        """Return the live current version of the family ``version_id`` is in."""
        record = self.repository.get_version(version_id)
        if record is None:
            raise NotFoundError(f"food {version_id} not found")
        current = self.repository.get_current_in_family(record.family_id)
        if current is None:
            raise NotFoundError(f"food family {record.family_id} not found")
        return self._with_ingredients(current)

    def list_records(
        self, user_id: UUID | None, kind: str | None = None
    ) -> list[FoodVersion]:
        """List current foods and recipes visible to the caller."""
        viewer_id = require_user_id(user_id)
        if kind is not None and kind not in FOOD_KINDS:
            raise ValidationError(f"invalid kind {kind!r}")
        records = self.repository.list_visible(viewer_id, kind)
        return sorted(records, key=lambda item: (item.kind, item.name.casefold()))

    def list_versions(self, version_id: UUID) -> list[FoodVersion]:
        """Return the live version history of a family, newest first."""
        record = self.repository.get_version(version_id)
        if record is None:
            return []
        versions = self.repository.list_family(record.family_id)
        return sorted(versions, key=lambda item: item.version, reverse=True)

    def delete_record(self, version_id: UUID) -> None:
        """Soft-delete the whole family; unknown ids are a no-op."""
        record = self.repository.get_version(version_id)
        if record is None:
            return
        touched = self.repository.soft_delete_family(
            record.family_id, datetime.now(tz=UTC)
        )
        if touched:
            logger.info(
                "Deleted food family",
                extra={"family_id": str(record.family_id), "rows": touched},
            )

    def _ingredient_items(
        self, record_id: UUID, kind: str, draft: FoodDraft
    ) -> list[RecipeItem]:
        if kind != KIND_RECIPE:
            return []
        return self.recipe_service.resolve_ingredients(record_id, draft.ingredients)

    def _with_ingredients(self, record: FoodVersion) -> FoodVersion:
        if record.kind != KIND_RECIPE:
            return record
        return replace(
            record, ingredients=self.recipe_service.get_ingredients(record.id)
        )


def _new_version(
    *,
    record_id: UUID,
    family_id: UUID | None,
    creator_id: UUID,
    public: bool,
    kind: str,
    draft: FoodDraft,
    items: list[RecipeItem],
) -> NewFoodVersion:
    return NewFoodVersion(
        id=record_id,
        family_id=family_id,
        creator_id=creator_id,
        public=public,
        name=draft.name.strip(),
        calories=float(draft.calories),
        protein=float(draft.protein),
        carbs=float(draft.carbs),
        fat=float(draft.fat),
        kind=kind,
        measurement_unit=draft.measurement_unit.strip(),
        measurement_amount=float(draft.measurement_amount),
        created_at=datetime.now(tz=UTC),
        nutrients=list(draft.nutrients),
        ingredients=items,
    )


def _validate_draft(draft: FoodDraft, kind: str) -> None:
    if kind not in FOOD_KINDS:
        raise ValidationError(f"invalid kind {kind!r}")
    if not draft.name or not draft.name.strip():
        raise ValidationError("name is required")
    if not draft.measurement_unit or not draft.measurement_unit.strip():
        raise ValidationError("measurement_unit is required")
    for label in ("calories", "protein", "carbs", "fat", "measurement_amount"):
        value = getattr(draft, label)
        if not _is_non_negative(value):
            raise ValidationError(f"{label} must be a non-negative number")
    for nutrient in draft.nutrients:
        if not nutrient.name or not nutrient.name.strip():
            raise ValidationError("nutrient name is required")
        if not _is_non_negative(nutrient.amount):
            raise ValidationError(
                f"nutrient {nutrient.name!r} amount must be a non-negative number"
            )
    if draft.ingredients and kind != KIND_RECIPE:
        raise ValidationError("only recipes can have ingredients")


def _is_non_negative(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return False
    return math.isfinite(value) and value >= 0
