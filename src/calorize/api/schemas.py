"""Request models for the HTTP adapter."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field

from calorize.domain.foods import FoodDraft, Nutrient


class NutrientPayload(BaseModel):
    """Flexible nutrient of a food definition."""

    name: str = Field(min_length=1)
    amount: float = Field(ge=0)
    unit: str


class FoodPayload(BaseModel):
    """Food or recipe definition for create and update calls."""

    name: str = Field(min_length=1)
    calories: float = Field(default=0.0, ge=0)
    protein: float = Field(default=0.0, ge=0)
    carbs: float = Field(default=0.0, ge=0)
    fat: float = Field(default=0.0, ge=0)
    kind: Literal["food", "recipe"] | None = None
    measurement_unit: str = Field(min_length=1)
    measurement_amount: float = Field(ge=0)
    public: bool | None = None
    nutrients: list[NutrientPayload] = Field(default_factory=list)
    ingredients: dict[str, float] = Field(default_factory=dict)

    def to_draft(self) -> FoodDraft:
        return FoodDraft(
            name=self.name,
            calories=self.calories,
            protein=self.protein,
            carbs=self.carbs,
            fat=self.fat,
            kind=self.kind,
            measurement_unit=self.measurement_unit,
            measurement_amount=self.measurement_amount,
            public=self.public,
            nutrients=[
                Nutrient(name=item.name, amount=item.amount, unit=item.unit)
                for item in self.nutrients
            ],
            ingredients=dict(self.ingredients),
        )


class IngredientsPayload(BaseModel):
    """Ingredient version ids mapped to amounts in the ingredient's unit."""

    ingredients: dict[str, float]


class LogPayload(BaseModel):
    """Consumption event."""

    food_id: UUID
    amount: float = Field(ge=0)
    meal_tag: str = ""
    logged_at: datetime | None = None


class ProfilePayload(BaseModel):
    """Profile fields the caller may change."""

    name: str | None = None
    email: str | None = None
