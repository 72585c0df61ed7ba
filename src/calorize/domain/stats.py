"""Domain models for statistics."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class StatsWindow:
    """Resolved half-open time window ``[start, end)`` for a period."""

    period: str
    start: datetime
    end: datetime


@dataclass(frozen=True)
class MacroTotals:
    """Scaled calorie and macronutrient totals."""

    calories: float
    protein: float
    carbs: float
    fat: float


@dataclass(frozen=True)
class NutrientTotal:
    """Flexible nutrient total keyed by name and unit."""

    name: str
    amount: float
    unit: str


@dataclass(frozen=True)
class MacroPercentages:
    """Integer share of each macro in protein + carbs + fat."""

    protein: int
    carbs: int
    fat: int


@dataclass(frozen=True)
class StatsResult:
    """Aggregated intake for one user over one window."""

    period: str
    start: datetime
    end: datetime
    total_calories: float
    total_protein: float
    total_carbs: float
    total_fat: float
    nutrients: list[NutrientTotal]
    macro_percentages: MacroPercentages | None = None
