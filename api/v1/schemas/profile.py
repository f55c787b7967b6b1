from __future__ import annotations
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ProfileCreate(BaseModel):
    email: str = Field(..., min_length=3, examples=["jane@example.com"])
    full_name: str | None = None


class ProfileUpdate(BaseModel):
    """Partial update; only the fields sent are written."""
    full_name: str | None = Field(None, max_length=120)
    avatar_url: str | None = Field(None, max_length=2048)


class MacroData(BaseModel):
    calories: int
    protein: int
    carbs: int
    fat: int
    goal: str
    activity_level: str
    updated_at: str | None = None
    is_custom: bool = False


class ProfileOut(BaseModel):
    id: str
    email: str
    full_name: str | None = None
    avatar_url: str | None = None
    plan: str
    macros: MacroData | None = None
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class CustomMacrosOut(ProfileOut):
    """Profile after saving custom targets, with each macro's share of the calories."""
    percentages: dict[str, int]
    balanced: bool
