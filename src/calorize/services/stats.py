"""Statistics service for the consumption ledger."""

import logging
import math
from dataclasses import dataclass, field
from datetime import date, datetime
from uuid import UUID

from calorize.domain.foods import FoodVersion
from calorize.domain.logs import LogEntry
from calorize.domain.stats import (
    MacroPercentages,
    MacroTotals,
    NutrientTotal,
    StatsResult,
    StatsWindow,
)
from calorize.services.catalog import FoodRepository
from calorize.services.ledger import LogRepository
from calorize.services.periods import PERIOD_DAY, resolve_window
from calorize.services.users import require_user_id

logger = logging.getLogger(__name__)


def portion_ratio(amount: float, measurement_amount: float) -> float | None:
    """Return ``amount / measurement_amount``, or None when undefined."""
    if measurement_amount == 0:
        return None
    return amount / measurement_amount


def macro_percentages(protein: float, carbs: float, fat: float) -> MacroPercentages:
    """Floor each macro's share of protein + carbs + fat to a whole percent.

    The three values need not add up to 100.
    """
    total = protein + carbs + fat
    if total <= 0:
        return MacroPercentages(protein=0, carbs=0, fat=0)
    return MacroPercentages(
        protein=math.floor(100 * protein / total),
        carbs=math.floor(100 * carbs / total),
        fat=math.floor(100 * fat / total),
    )


@dataclass
class NutritionAccumulator:
    """Running ratio-scaled totals of macros and flexible nutrients."""

    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0
    nutrients: dict[tuple[str, str], float] = field(default_factory=dict)

    def add(self, food: FoodVersion, amount: float) -> bool:
        """Add ``amount`` of ``food``; return False if it couldn't be scaled."""
        ratio = portion_ratio(amount, food.measurement_amount)
        if ratio is None:
            return False
        self.calories += ratio * food.calories
        self.protein += ratio * food.protein
        self.carbs += ratio * food.carbs
        self.fat += ratio * food.fat
        for nutrient in food.nutrients:
            key = (nutrient.name, nutrient.unit)
            self.nutrients[key] = self.nutrients.get(key, 0.0) + (
                ratio * nutrient.amount
            )
        return True

    def macros(self) -> MacroTotals:
        return MacroTotals(
            calories=self.calories,
            protein=self.protein,
            carbs=self.carbs,
            fat=self.fat,
        )

    def nutrient_totals(self) -> list[NutrientTotal]:
        return [
            NutrientTotal(name=name, amount=amount, unit=unit)
            for (name, unit), amount in sorted(self.nutrients.items())
        ]


@dataclass
class StatsService:
    """Computes macro and nutrient totals for a user over a period."""

    log_repository: LogRepository
    food_repository: FoodRepository
    timezone_name: str = "UTC"

    def get_stats(
        self,
        user_id: UUID | None,
        period: str = PERIOD_DAY,
        anchor: date | datetime | str | None = None,
        include_percentages: bool = True,
    ) -> StatsResult:
        """Aggregate the caller's ledger over the window of ``period``."""
        owner_id = require_user_id(user_id)
        window = resolve_window(period, anchor, self.timezone_name)
        entries = self.log_repository.list_entries(owner_id, window.start, window.end)
        food_ids = list({entry.food_id for entry in entries})
        foods = (
            {food.id: food for food in self.food_repository.get_versions(food_ids)}
            if food_ids
            else {}
        )
        return aggregate_entries(window, entries, foods, include_percentages)


def aggregate_entries(
    window: StatsWindow,
    entries: list[LogEntry],
    foods: dict[UUID, FoodVersion],
    include_percentages: bool = True,
) -> StatsResult:
    """Join entries to their pinned versions and sum scaled contributions."""
    accumulator = NutritionAccumulator()
    for entry in entries:
        food = foods.get(entry.food_id)
        if food is None:
            logger.warning(
                "Log entry references a missing food version",
                extra={"log_id": str(entry.id), "food_id": str(entry.food_id)},
            )
            continue
        if not accumulator.add(food, entry.amount):
            logger.debug(
                "Skipping log entry with zero measurement amount",
                extra={"log_id": str(entry.id), "food_id": str(food.id)},
            )

    percentages = (
        macro_percentages(accumulator.protein, accumulator.carbs, accumulator.fat)
        if include_percentages
        else None
    )
    return StatsResult(
        period=window.period,
        start=window.start,
        end=window.end,
        total_calories=accumulator.calories,
        total_protein=accumulator.protein,
        total_carbs=accumulator.carbs,
        total_fat=accumulator.fat,
        nutrients=accumulator.nutrient_totals(),
        macro_percentages=percentages,
    )
