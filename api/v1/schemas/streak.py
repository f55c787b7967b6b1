from __future__ import annotations
from datetime import date

from pydantic import BaseModel, ConfigDict


class StreakOut(BaseModel):
    current_streak: int
    longest_streak: int
    last_streak_date: date
    today_completed: bool

    model_config = ConfigDict(from_attributes=True)
