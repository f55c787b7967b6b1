from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class FoodIn(BaseModel):
    description: str = Field(..., min_length=1, examples=["Frango grelhado (peito)"])
    category: str = Field(..., min_length=1, examples=["Carnes"])
    kcal: float = Field(..., ge=0, description="per 100 g")
    protein_g: float = Field(..., ge=0)
    carbs_g: float = Field(..., ge=0)
    fat_g: float = Field(..., ge=0)


class FoodOut(FoodIn):
    id: int

    model_config = ConfigDict(from_attributes=True)


class FoodUpdate(BaseModel):
    """Any subset of the food fields."""
    description: str | None = Field(None, min_length=1)
    category: str | None = Field(None, min_length=1)
    kcal: float | None = Field(None, ge=0)
    protein_g: float | None = Field(None, ge=0)
    carbs_g: float | None = Field(None, ge=0)
    fat_g: float | None = Field(None, ge=0)
