"""Domain models for versioned foods and recipes."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

KIND_FOOD = "food"
KIND_RECIPE = "recipe"
FOOD_KINDS = frozenset({KIND_FOOD, KIND_RECIPE})


@dataclass(frozen=True)
class Nutrient:
    """Flexible micro-nutrient attached to one food version."""

    name: str
    amount: float
    unit: str


@dataclass(frozen=True)
class RecipeItem:
    """Ingredient row of a recipe version."""

    recipe_id: UUID
    ingredient_id: UUID
    amount: float


@dataclass(frozen=True)
class FoodDraft:
    """User-supplied definition used to create or supersede a version.

    ``kind`` and ``public`` may be left as ``None`` on updates to inherit the
    values of the version being superseded.
    """

    name: str
    calories: float
    protein: float
    carbs: float
    fat: float
    measurement_unit: str
    measurement_amount: float
    kind: str | None = None
    public: bool | None = None
    nutrients: list[Nutrient] = field(default_factory=list)
    ingredients: dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class NewFoodVersion:
    """Fully resolved row set handed to the store for one atomic insert.

    ``family_id`` is ``None`` for the first version of a new family.
    """

    id: UUID
    family_id: UUID | None
    creator_id: UUID
    public: bool
    name: str
    calories: float
    protein: float
    carbs: float
    fat: float
    kind: str
    measurement_unit: str
    measurement_amount: float
    created_at: datetime
    nutrients: list[Nutrient]
    ingredients: list[RecipeItem]


@dataclass(frozen=True)
class FoodVersion:
    """One immutable snapshot of a food or recipe family."""

    id: UUID
    family_id: UUID
    version: int
    is_current: bool
    creator_id: UUID
    public: bool
    name: str
    calories: float
    protein: float
    carbs: float
    fat: float
    kind: str
    measurement_unit: str
    measurement_amount: float
    created_at: datetime
    deleted_at: datetime | None = None
    nutrients: list[Nutrient] = field(default_factory=list)
    ingredients: list["ResolvedIngredient"] = field(default_factory=list)

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None


@dataclass(frozen=True)
class ResolvedIngredient:
    """Recipe item joined with the ingredient version it references."""

    ingredient_id: UUID
    name: str
    amount: float
    measurement_unit: str
    food: FoodVersion | None = None
