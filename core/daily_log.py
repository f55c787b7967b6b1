"""
core/daily_log.py
────────────────────────────────────────────────────────────────────────
Arithmetic behind a day's food log. Foods carry nutrients per 100 g;
a logged item stores the food already scaled to the eaten quantity, and
the day's totals are re-summed from the items after every change.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Iterable, Mapping

from core.errors import ValidationError
from core.macro_calc import round_half_up

MEAL_TYPES: tuple[str, ...] = ("breakfast", "lunch", "dinner", "snack")

NUTRIENTS = ("kcal", "protein_g", "carbs_g", "fat_g")


@dataclass(frozen=True)
class Food:
    description: str
    category: str
    kcal: float        # per 100 g
    protein_g: float
    carbs_g: float
    fat_g: float

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


def validate_food(food: Mapping[str, Any]) -> None:
    """Raise `ValidationError` on the first field a food row can't have."""
    for field in ("description", "category"):
        val = food.get(field)
        if not isinstance(val, str) or not val.strip():
            raise ValidationError(f"{field} is required", field=field)
    for field in NUTRIENTS:
        val = food.get(field)
        if isinstance(val, bool) or not isinstance(val, (int, float)) or val < 0:
            raise ValidationError(f"{field} must be a non-negative number", field=field)


def portion_nutrients(food: Mapping[str, Any], quantity_g: float) -> dict[str, Any]:
    """Copy of `food` with nutrients scaled from 100 g to `quantity_g`."""
    factor = quantity_g / 100
    scaled = dict(food)
    scaled["kcal"] = int(round_half_up(float(food.get("kcal") or 0) * factor))
    for key in ("protein_g", "carbs_g", "fat_g"):
        scaled[key] = round_half_up(float(food.get(key) or 0) * factor, 1)
    return scaled


def make_log_item(food: Mapping[str, Any], quantity_g: float, meal_type: str, day: str) -> dict[str, Any]:
    if quantity_g <= 0:
        raise ValidationError("quantity must be greater than 0", field="quantity")
    if meal_type not in MEAL_TYPES:
        raise ValidationError(f"meal_type must be one of {MEAL_TYPES}", field="meal_type")
    return {
        "food": portion_nutrients(food, quantity_g),
        "quantity": quantity_g,
        "meal_type": meal_type,
        "date": day,
    }


@dataclass(frozen=True)
class LogTotals:
    total_calories: int
    total_protein: float
    total_carbs: float
    total_fat: float

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


def compute_totals(items: Iterable[Mapping[str, Any]]) -> LogTotals:
    kcal = protein = carbs = fat = 0.0
    for item in items:
        food = item.get("food") or {}
        kcal += float(food.get("kcal") or 0)
        protein += float(food.get("protein_g") or 0)
        carbs += float(food.get("carbs_g") or 0)
        fat += float(food.get("fat_g") or 0)
    return LogTotals(
        total_calories=int(round_half_up(kcal)),
        total_protein=round_half_up(protein, 1),
        total_carbs=round_half_up(carbs, 1),
        total_fat=round_half_up(fat, 1),
    )
