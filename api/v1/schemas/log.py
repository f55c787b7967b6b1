from __future__ import annotations
import datetime as dt
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .food import FoodIn

MealType = Literal["breakfast", "lunch", "dinner", "snack"]


class LogItemIn(BaseModel):
    """Either a catalogue `food_id` or an inline food (barcode / voice result)."""
    food_id: int | None = None
    food: FoodIn | None = None
    quantity: float = Field(..., gt=0, description="grams")
    meal_type: MealType

    @model_validator(mode="after")
    def _one_source(self) -> "LogItemIn":
        if (self.food_id is None) == (self.food is None):
            raise ValueError("give exactly one of food_id or food")
        return self


class DailyLogOut(BaseModel):
    id: int
    user_id: str
    date: dt.date
    items: list[dict[str, Any]]
    total_calories: int
    total_protein: float
    total_carbs: float
    total_fat: float

    model_config = ConfigDict(from_attributes=True)


class ProgressOut(BaseModel):
    calories_consumed: float
    calories_target: float
    calories_remaining: float
    calories_over: bool
    calorie_ring_pct: float
    protein_remaining_g: float
    protein_pct: float
    carbs_pct: float
    fat_pct: float
