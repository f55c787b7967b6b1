from __future__ import annotations
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

ActivityLevel = Literal["sedentary", "light", "moderate", "active", "extreme"]
Goal = Literal["lose", "maintain", "gain"]
ProteinPolicy = Literal["goal", "flat"]


class Gender(str, Enum):
    male = "male"
    female = "female"


class BiometricsIn(BaseModel):
    gender: Gender
    age: int = Field(..., gt=0, le=120, examples=[30])
    weight: float = Field(..., gt=0, le=500, examples=[70], description="kg")
    height: float = Field(..., gt=0, le=300, examples=[175], description="cm")
    activity_level: ActivityLevel = "sedentary"
    goal: Goal = "maintain"


class MacroCalcIn(BiometricsIn):
    protein_policy: ProteinPolicy | None = Field(
        None, description="goal: 2.4/2.2/2.0 g/kg by goal · flat: 2.2 g/kg"
    )


class MacroResultOut(BaseModel):
    calories: int
    protein: int
    carbs: int
    fat: int

    model_config = ConfigDict(from_attributes=True)


class FullMacrosOut(BaseModel):
    bmr: float
    tdee: float
    macros: MacroResultOut
    activity_multiplier: float
    goal_adjustment: float
    percentages: dict[str, int]

    model_config = ConfigDict(from_attributes=True)


class CustomMacrosIn(BaseModel):
    """Raw form values; parsed and cross-checked by the core validator."""
    calories: int | float | str
    protein: int | float | str
    carbs: int | float | str
    fat: int | float | str
    goal: Goal = "maintain"
    activity_level: ActivityLevel = "sedentary"
