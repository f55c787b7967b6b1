"""
core/progress.py
────────────────────────────────────────────────────────────────────────
Consumed-vs-target numbers for the tracking screen: calorie ring,
macro bars and the "X g protein left" line.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Mapping

from core.macro_calc import round_half_up

MACRO_BAR_CAP = 100.0
CALORIE_RING_CAP = 120.0


def progress_percentage(current: float, goal: float, cap: float = MACRO_BAR_CAP) -> float:
    if goal <= 0:
        return 0.0
    return min(cap, max(0.0, current / goal * 100))


@dataclass(frozen=True)
class DailyProgress:
    calories_consumed: float
    calories_target: float
    calories_remaining: float   # absolute distance to target
    calories_over: bool
    calorie_ring_pct: float
    protein_remaining_g: float
    protein_pct: float
    carbs_pct: float
    fat_pct: float

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


def daily_progress(totals: Mapping[str, float], targets: Mapping[str, float] | None) -> DailyProgress:
    """
    totals  – {"total_calories", "total_protein", "total_carbs", "total_fat"}
    targets – {"calories", "protein", "carbs", "fat"}; missing → 0
    """
    targets = targets or {}
    eaten_kcal = float(totals.get("total_calories") or 0)
    eaten_p = float(totals.get("total_protein") or 0)
    eaten_c = float(totals.get("total_carbs") or 0)
    eaten_f = float(totals.get("total_fat") or 0)

    goal_kcal = float(targets.get("calories") or 0)
    goal_p = float(targets.get("protein") or 0)
    goal_c = float(targets.get("carbs") or 0)
    goal_f = float(targets.get("fat") or 0)

    diff = goal_kcal - eaten_kcal
    return DailyProgress(
        calories_consumed=eaten_kcal,
        calories_target=goal_kcal,
        calories_remaining=abs(diff),
        calories_over=diff < 0,
        calorie_ring_pct=round_half_up(progress_percentage(eaten_kcal, goal_kcal, CALORIE_RING_CAP), 1),
        protein_remaining_g=round_half_up(max(0.0, goal_p - eaten_p)),
        protein_pct=round_half_up(progress_percentage(eaten_p, goal_p), 1),
        carbs_pct=round_half_up(progress_percentage(eaten_c, goal_c), 1),
        fat_pct=round_half_up(progress_percentage(eaten_f, goal_f), 1),
    )
