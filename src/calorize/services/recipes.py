"""Recipe ingredient resolution."""

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from calorize.domain.foods import (
    KIND_FOOD,
    KIND_RECIPE,
    FoodVersion,
    RecipeItem,
    ResolvedIngredient,
)
from calorize.domain.stats import MacroTotals
from calorize.errors import NotFoundError, ValidationError
from calorize.services.catalog import FoodRepository
from calorize.services.stats import NutritionAccumulator

logger = logging.getLogger(__name__)


class RecipeRepository(Protocol):
    """Persistence interface for recipe ingredient rows."""

    def add_items(self, items: list[RecipeItem]) -> None:
        """Insert recipe item rows."""

    def list_items(self, recipe_id: UUID) -> list[RecipeItem]:
        """Return the ingredient rows of a recipe version."""


@dataclass
class RecipeService:
    """Expands recipe versions into the food versions they reference."""

    repository: RecipeRepository
    food_repository: FoodRepository

    def resolve_ingredients(
        self, recipe_id: UUID, ingredients: Mapping[str | UUID, object]
    ) -> list[RecipeItem]:
        """Validate an ``{ingredient_version_id: amount}`` mapping.

        Any unparseable id, unknown ingredient, non-food ingredient or bad
        amount rejects the whole mapping.
        """
        items = [
            RecipeItem(
                recipe_id=recipe_id,
                ingredient_id=_parse_ingredient_id(raw_id),
                amount=_parse_amount(raw_id, raw_amount),
            )
            for raw_id, raw_amount in ingredients.items()
        ]
        if not items:
            return []
        found = {
            food.id: food
            for food in self.food_repository.get_versions(
                [item.ingredient_id for item in items]
            )
        }
        for item in items:
            food = found.get(item.ingredient_id)
            if food is None:
                raise NotFoundError(f"ingredient {item.ingredient_id} not found")
            if food.kind != KIND_FOOD:
                raise ValidationError(
                    f"ingredient {item.ingredient_id} is a {food.kind}, "
                    "recipes can only reference foods"
                )
        return items

    def set_ingredients(
        self, recipe_id: UUID, ingredients: Mapping[str | UUID, object]
    ) -> list[ResolvedIngredient]:
        """Attach ingredients to an existing recipe version."""
        self._require_recipe(recipe_id)
        items = self.resolve_ingredients(recipe_id, ingredients)
        if items:
            self.repository.add_items(items)
            logger.info(
                "Added recipe ingredients",
                extra={"recipe_id": str(recipe_id), "count": len(items)},
            )
        return self.get_ingredients(recipe_id)

    def get_ingredients(self, recipe_id: UUID) -> list[ResolvedIngredient]:
        """Return ingredient rows joined with their food versions."""
        items = self.repository.list_items(recipe_id)
        if not items:
            return []
        foods = {
            food.id: food
            for food in self.food_repository.get_versions(
                list({item.ingredient_id for item in items})
            )
        }
        resolved: list[ResolvedIngredient] = []
        for item in items:
            food = foods.get(item.ingredient_id)
            resolved.append(
                ResolvedIngredient(
                    ingredient_id=item.ingredient_id,
                    name=food.name if food else "",
                    amount=item.amount,
                    measurement_unit=food.measurement_unit if food else "",
                    food=food,
                )
            )
        return resolved

    def compute_totals(self, recipe_id: UUID) -> MacroTotals:
        """Sum ingredient macros scaled by the amount used in the recipe."""
        self._require_recipe(recipe_id)
        accumulator = NutritionAccumulator()
        for ingredient in self.get_ingredients(recipe_id):
            if ingredient.food is not None:
                accumulator.add(ingredient.food, ingredient.amount)
        return accumulator.macros()

    def _require_recipe(self, recipe_id: UUID) -> FoodVersion:
        recipe = self.food_repository.get_version(recipe_id)
        if recipe is None:
            raise NotFoundError(f"recipe {recipe_id} not found")
        if recipe.kind != KIND_RECIPE:
            raise ValidationError(f"food {recipe_id} is not a recipe")
        return recipe


def _parse_ingredient_id(value: object) -> UUID:
    if isinstance(value, UUID):
        return value
    if isinstance(value, str):
        try:
            return UUID(value)
        except ValueError:
            pass
    raise ValidationError(f"invalid ingredient id {value!r}")


def _parse_amount(ingredient_id: object, value: object) -> float:
    if isinstance(value, int | float) and not isinstance(value, bool):
        amount = float(value)
        if math.isfinite(amount) and amount >= 0:
            return amount
    raise ValidationError(f"invalid amount {value!r} for ingredient {ingredient_id}")
