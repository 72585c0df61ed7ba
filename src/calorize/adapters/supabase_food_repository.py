"""Supabase repository for versioned foods and recipes."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from calorize.adapters.supabase_errors import translate_errors
from calorize.adapters.supabase_rows import as_rows, parse_timestamp
from calorize.domain.foods import FoodVersion, NewFoodVersion, Nutrient
from calorize.errors import StorageError
from calorize.services.catalog import FoodRepository

FOOD_COLUMNS = (
    "id, family_id, version, is_current, creator_id, public, name, calories, "
    "protein, carbs, fat, kind, measurement_unit, measurement_amount, "
    "created_at, deleted_at"
)


@dataclass
class SupabaseFoodRepository(FoodRepository):
    """Supabase-backed store of food and recipe versions."""

    client: Client

    def create_version(self, new_version: NewFoodVersion) -> FoodVersion:
        """Insert a version through the ``create_food_version`` function.

        The function runs in one transaction under a per-family advisory
        lock, so the version number, current flag, nutrients and ingredients
        are written together or not at all.
        """
        params = {
            "p_id": str(new_version.id),
            "p_family_id": (
                str(new_version.family_id) if new_version.family_id else None
            ),
            "p_creator_id": str(new_version.creator_id),
            "p_public": new_version.public,
            "p_name": new_version.name,
            "p_calories": new_version.calories,
            "p_protein": new_version.protein,
            "p_carbs": new_version.carbs,
            "p_fat": new_version.fat,
            "p_kind": new_version.kind,
            "p_measurement_unit": new_version.measurement_unit,
            "p_measurement_amount": new_version.measurement_amount,
            "p_created_at": new_version.created_at.isoformat(),
            "p_nutrients": [
                {"name": item.name, "amount": item.amount, "unit": item.unit}
                for item in new_version.nutrients
            ],
            "p_ingredients": [
                {"ingredient_id": str(item.ingredient_id), "amount": item.amount}
                for item in new_version.ingredients
            ],
        }
        with translate_errors("create food version"):
            response = self.client.rpc("create_food_version", params).execute()
        rows = as_rows(response.data)
        if not rows:
            raise StorageError("Failed to create food version")
        return _parse_food(rows[0], list(new_version.nutrients))

    def get_version(self, food_id: UUID) -> FoodVersion | None:
        """Return a version by exact id."""
        with translate_errors("get food version"):
            response = (
                self.client.table("foods")
                .select(FOOD_COLUMNS)
                .eq("id", str(food_id))
                .limit(1)
                .execute()
            )
        if not response.data:
            return None
        return self._with_nutrients(response.data)[0]

    def get_versions(self, food_ids: list[UUID]) -> list[FoodVersion]:
        """Return versions by exact ids."""
        if not food_ids:
            return []
        with translate_errors("get food versions"):
            response = (
                self.client.table("foods")
                .select(FOOD_COLUMNS)
                .in_("id", [str(food_id) for food_id in food_ids])
                .execute()
            )
        return self._with_nutrients(response.data or [])

    def get_current_in_family(self, family_id: UUID) -> FoodVersion | None:
        """Return the live current version of a family."""
        with translate_errors("get current food version"):
            response = (
                self.client.table("foods")
                .select(FOOD_COLUMNS)
                .eq("family_id", str(family_id))
                .eq("is_current", True)
                .is_("deleted_at", "null")
                .limit(1)
                .execute()
            )
        if not response.data:
            return None
        return self._with_nutrients(response.data)[0]

    def list_visible(self, user_id: UUID, kind: str | None) -> list[FoodVersion]:
        """Return current, live versions owned by the user or public."""
        with translate_errors("list foods"):
            query = (
                self.client.table("foods")
                .select(FOOD_COLUMNS)
                .eq("is_current", True)
                .is_("deleted_at", "null")
                .or_(f"creator_id.eq.{user_id},public.eq.true")
            )
            if kind is not None:
                query = query.eq("kind", kind)
            response = query.order("name", desc=False).execute()
        return self._with_nutrients(response.data or [])

    def list_family(self, family_id: UUID) -> list[FoodVersion]:
        """Return live versions of a family, newest first."""
        with translate_errors("list food versions"):
            response = (
                self.client.table("foods")
                .select(FOOD_COLUMNS)
                .eq("family_id", str(family_id))
                .is_("deleted_at", "null")
                .order("version", desc=True)
                .execute()
            )
        return self._with_nutrients(response.data or [])

    def soft_delete_family(self, family_id: UUID, deleted_at: datetime) -> int:
        """Mark every live version of the family deleted."""
        with translate_errors("delete food family"):
            response = (
                self.client.table("foods")
                .update({"deleted_at": deleted_at.isoformat()})
                .eq("family_id", str(family_id))
                .is_("deleted_at", "null")
                .execute()
            )
        return len(response.data or [])

    def _with_nutrients(self, rows: list[dict[str, object]]) -> list[FoodVersion]:
        ids = [str(row["id"]) for row in rows]
        nutrients: dict[str, list[Nutrient]] = {food_id: [] for food_id in ids}
        if ids:
            with translate_errors("list food nutrients"):
                response = (
                    self.client.table("food_nutrients")
                    .select("food_id, name, amount, unit")
                    .in_("food_id", ids)
                    .execute()
                )
            for row in response.data or []:
                nutrients.setdefault(str(row["food_id"]), []).append(
                    Nutrient(
                        name=str(row.get("name", "")),
                        amount=float(row.get("amount") or 0.0),
                        unit=str(row.get("unit", "")),
                    )
                )
        return [_parse_food(row, nutrients.get(str(row["id"]), [])) for row in rows]


def _parse_food(row: dict[str, object], nutrients: list[Nutrient]) -> FoodVersion:
    """Parse a foods row into a domain model."""
    return FoodVersion(
        id=UUID(str(row["id"])),
        family_id=UUID(str(row["family_id"])),
        version=int(row.get("version", 1)),
        is_current=bool(row.get("is_current", False)),
        creator_id=UUID(str(row["creator_id"])),
        public=bool(row.get("public", False)),
        name=str(row.get("name", "")),
        calories=float(row.get("calories") or 0.0),
        protein=float(row.get("protein") or 0.0),
        carbs=float(row.get("carbs") or 0.0),
        fat=float(row.get("fat") or 0.0),
        kind=str(row.get("kind", "food")),
        measurement_unit=str(row.get("measurement_unit", "")),
        measurement_amount=float(row.get("measurement_amount") or 0.0),
        created_at=parse_timestamp(row.get("created_at")) or datetime.min,
        deleted_at=parse_timestamp(row.get("deleted_at")),
        nutrients=nutrients,
    )
