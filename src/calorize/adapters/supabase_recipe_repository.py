"""Supabase repository for recipe ingredient rows."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from calorize.adapters.supabase_errors import translate_errors
from calorize.domain.foods import RecipeItem
from calorize.services.recipes import RecipeRepository


@dataclass
class SupabaseRecipeRepository(RecipeRepository):
    """Supabase implementation for recipe items."""

    client: Client

    def add_items(self, items: list[RecipeItem]) -> None:
        """Insert recipe item rows."""
        payload = [
            {
                "recipe_id": str(item.recipe_id),
                "ingredient_id": str(item.ingredient_id),
                "amount": item.amount,
            }
            for item in items
        ]
        if payload:
            with translate_errors("add recipe items"):
                self.client.table("recipe_items").insert(payload).execute()

    def list_items(self, recipe_id: UUID) -> list[RecipeItem]:
        """Return the ingredient rows of a recipe version."""
        with translate_errors("list recipe items"):
            response = (
                self.client.table("recipe_items")
                .select("recipe_id, ingredient_id, amount")
                .eq("recipe_id", str(recipe_id))
                .execute()
            )
        return [
            RecipeItem(
                recipe_id=UUID(str(row["recipe_id"])),
                ingredient_id=UUID(str(row["ingredient_id"])),
                amount=float(row.get("amount") or 0.0),
            )
            for row in response.data or []
        ]
