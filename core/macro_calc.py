"""
core/macro_calc.py
────────────────────────────────────────────────────────────────────────
Daily calorie + macro targets from a user's biometrics:

1. BMR  (Mifflin–St Jeor)
2. TDEE (activity multiplier)
3. Goal adjustment (20 % deficit / maintenance / 15 % surplus)
4. Protein by body weight, fat by share of kcal, carbs take the rest

Form input arrives as strings, so every numeric argument may be a number
or a numeric string. By default bad input degrades to zeros / table
defaults; `MacroCalculator(strict=True)` raises instead.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import asdict, dataclass
from typing import Any

from core.errors import UnknownCategoryError, ValidationError

_LOG = logging.getLogger(__name__)

# ──────────────────────────────────────────────────────────────────────
#  Tables
# ──────────────────────────────────────────────────────────────────────
GENDERS = ("male", "female")

ACTIVITY_MULTIPLIERS: dict[str, float] = {
    "sedentary": 1.2,    # little or no exercise
    "light": 1.375,      # 1-3 days/week
    "moderate": 1.55,    # 3-5 days/week
    "active": 1.725,     # 6-7 days/week
    "extreme": 1.9,      # physical job or 2x training
}
DEFAULT_ACTIVITY_MULTIPLIER = 1.2

GOAL_ADJUSTMENTS: dict[str, float] = {
    "lose": 0.8,
    "maintain": 1.0,
    "gain": 1.15,
}
DEFAULT_GOAL_ADJUSTMENT = 1.0

# g protein per kg body weight
PROTEIN_PER_KG: dict[str, float] = {"lose": 2.4, "maintain": 2.2, "gain": 2.0}
FLAT_PROTEIN_PER_KG = 2.2
PROTEIN_POLICIES = ("goal", "flat")

# share of total kcal coming from fat
FAT_SHARE: dict[str, float] = {"lose": 0.30, "maintain": 0.25, "gain": 0.20}
DEFAULT_FAT_SHARE = 0.25

KCAL_PER_G: dict[str, int] = {"protein": 4, "carbs": 4, "fat": 9}

# custom targets may disagree with their macro energy by this much
CUSTOM_KCAL_TOLERANCE = 50
# percentages of the calorie target may add up to 100 ± this
PERCENT_SUM_TOLERANCE = 5

# plain decimal with optional exponent: no "1_000", "inf", "nan" or hex
_NUMERIC_RE = re.compile(r"[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)([eE][+-]?[0-9]+)?")


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round .5 away from zero for positives (JS `Math.round`), not to even."""
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor


def _to_number(value: Any) -> float | None:
    # Whole-string match: "70kg" is rejected rather than read as 70.
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        num = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not _NUMERIC_RE.fullmatch(text):
            return None
        num = float(text)
    else:
        return None
    return num if math.isfinite(num) else None


# ──────────────────────────────────────────────────────────────────────
#  Data classes
# ──────────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class BiometricProfile:
    gender: str            # "male" | "female"
    age: float | str       # years
    weight: float | str    # kg
    height: float | str    # cm
    activity_level: str = "sedentary"
    goal: str = "maintain"


@dataclass(frozen=True)
class MacroResult:
    calories: int
    protein: int
    carbs: int
    fat: int

    @classmethod
    def zero(cls) -> "MacroResult":
        return cls(calories=0, protein=0, carbs=0, fat=0)

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


@dataclass(frozen=True)
class FullMacros:
    bmr: float
    tdee: float
    macros: MacroResult
    activity_multiplier: float
    goal_adjustment: float

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


# ──────────────────────────────────────────────────────────────────────
#  Calculator
# ──────────────────────────────────────────────────────────────────────
class MacroCalculator:
    """Source-of-truth for kcal + macro targets.

    protein_policy
        ``"goal"`` – 2.4 / 2.2 / 2.0 g/kg for lose / maintain / gain.
        ``"flat"`` – 2.2 g/kg whatever the goal.
    clamp_negative_carbs
        When protein + fat already exceed the calorie target the carb
        remainder goes negative; clamp it to 0.
    strict
        Raise `ValidationError` / `UnknownCategoryError` instead of
        degrading to zeros and table defaults.
    """

    def __init__(
        self,
        protein_policy: str = "goal",
        clamp_negative_carbs: bool = True,
        strict: bool = False,
    ) -> None:
        if protein_policy not in PROTEIN_POLICIES:
            raise ValueError(
                f"protein_policy must be one of {PROTEIN_POLICIES}, got {protein_policy!r}"
            )
        self.protein_policy = protein_policy
        self.clamp_negative_carbs = clamp_negative_carbs
        self.strict = strict

    # --------------- input handling ---------------------------------
    def _number(self, value: Any, field: str) -> float | None:
        num = _to_number(value)
        if not self.strict:
            if num is None:
                _LOG.warning("unparseable %s=%r, degrading to zero result", field, value)
            return num
        if num is None:
            raise ValidationError(f"{field} must be a finite number", field=field)
        if num < 0:
            raise ValidationError(f"{field} must not be negative", field=field)
        return num

    def _category(self, table: dict[str, float] | tuple[str, ...], value: Any, field: str) -> None:
        if self.strict and value not in table:
            raise UnknownCategoryError(field, value)

    # --------------- BMR / multipliers ------------------------------
    def bmr(self, gender: str, weight: Any, height: Any, age: Any) -> float:
        w = self._number(weight, "weight")
        h = self._number(height, "height")
        a = self._number(age, "age")
        if w is None or h is None or a is None:
            return 0
        self._category(GENDERS, gender, "gender")

        base = 10 * w + 6.25 * h - 5 * a
        return base + (5 if gender == "male" else -161)

    def activity_multiplier(self, activity_level: str | None) -> float:
        self._category(ACTIVITY_MULTIPLIERS, activity_level, "activity_level")
        return ACTIVITY_MULTIPLIERS.get(activity_level, DEFAULT_ACTIVITY_MULTIPLIER)

    def goal_adjustment(self, goal: str | None) -> float:
        self._category(GOAL_ADJUSTMENTS, goal, "goal")
        return GOAL_ADJUSTMENTS.get(goal, DEFAULT_GOAL_ADJUSTMENT)

    def protein_per_kg(self, goal: str | None) -> float:
        if self.protein_policy == "flat":
            return FLAT_PROTEIN_PER_KG
        return PROTEIN_PER_KG.get(goal, FLAT_PROTEIN_PER_KG)

    # --------------- Macros -----------------------------------------
    def macros(self, tdee: Any, weight: Any, goal: str | None) -> MacroResult:
        kcal = self._number(tdee, "tdee")
        w = self._number(weight, "weight")
        if w is None or kcal is None or kcal <= 0:
            return MacroResult.zero()
        self._category(GOAL_ADJUSTMENTS, goal, "goal")

        protein_g = int(round_half_up(w * self.protein_per_kg(goal)))
        protein_kcal = protein_g * KCAL_PER_G["protein"]

        fat_kcal = kcal * FAT_SHARE.get(goal, DEFAULT_FAT_SHARE)
        fat_g = int(round_half_up(fat_kcal / KCAL_PER_G["fat"]))

        remaining = kcal - protein_kcal - fat_kcal
        carbs_g = int(round_half_up(remaining / KCAL_PER_G["carbs"]))
        if carbs_g < 0 and self.clamp_negative_carbs:
            _LOG.debug("carb remainder %s g clamped to 0", carbs_g)
            carbs_g = 0

        result = MacroResult(
            calories=int(round_half_up(kcal)),
            protein=protein_g,
            carbs=carbs_g,
            fat=fat_g,
        )
        _LOG.debug("macros for goal=%s: %s", goal, result)
        return result

    def full(self, profile: BiometricProfile) -> FullMacros:
        bmr = self.bmr(profile.gender, profile.weight, profile.height, profile.age)
        activity = self.activity_multiplier(profile.activity_level)
        tdee = bmr * activity
        adjustment = self.goal_adjustment(profile.goal)
        macros = self.macros(tdee * adjustment, profile.weight, profile.goal)
        return FullMacros(
            bmr=bmr,
            tdee=tdee,
            macros=macros,
            activity_multiplier=activity,
            goal_adjustment=adjustment,
        )


_default = MacroCalculator()


# ──────────────────────────────────────────────────────────────────────
#  Functional API
# ──────────────────────────────────────────────────────────────────────
def calculate_bmr(gender: str, weight: Any, height: Any, age: Any) -> float:
    return _default.bmr(gender, weight, height, age)


def get_activity_multiplier(activity_level: str | None) -> float:
    return _default.activity_multiplier(activity_level)


def get_goal_adjustment(goal: str | None) -> float:
    return _default.goal_adjustment(goal)


def calculate_macros(tdee: Any, weight: Any, goal: str | None) -> MacroResult:
    return _default.macros(tdee, weight, goal)


def calculate_full_macros(profile: BiometricProfile) -> FullMacros:
    return _default.full(profile)


# ──────────────────────────────────────────────────────────────────────
#  Custom targets
# ──────────────────────────────────────────────────────────────────────
def macro_percentages(protein: float, carbs: float, fat: float, calories: float) -> dict[str, int]:
    """Whole-percent share of the calorie target coming from each macro.

    The shares only add up to 100 when the macros' energy matches
    `calories`; see `percentages_balanced`.
    """
    kcal = {
        "protein": protein * KCAL_PER_G["protein"],
        "carbs": carbs * KCAL_PER_G["carbs"],
        "fat": fat * KCAL_PER_G["fat"],
    }
    if calories <= 0:
        return {k: 0 for k in kcal}
    return {k: int(round_half_up(v / calories * 100)) for k, v in kcal.items()}


def percentages_balanced(percentages: dict[str, int]) -> bool:
    return abs(100 - sum(percentages.values())) <= PERCENT_SUM_TOLERANCE


def validate_custom_macros(calories: Any, protein: Any, carbs: Any, fat: Any) -> MacroResult:
    """Check user-entered targets and return them as whole numbers.

    Fractions are truncated. Raises `ValidationError` naming the first bad
    field, or ``calories`` when the macros' energy is more than
    `CUSTOM_KCAL_TOLERANCE` kcal away from the calorie target.
    """
    values: dict[str, int] = {}
    for field, raw in (("calories", calories), ("protein", protein), ("carbs", carbs), ("fat", fat)):
        num = _to_number(raw)
        if num is None:
            raise ValidationError(f"{field} must be a number", field=field)
        if num < 0:
            raise ValidationError(f"{field} must not be negative", field=field)
        values[field] = int(num)

    from_macros = (
        values["protein"] * KCAL_PER_G["protein"]
        + values["carbs"] * KCAL_PER_G["carbs"]
        + values["fat"] * KCAL_PER_G["fat"]
    )
    if abs(from_macros - values["calories"]) > CUSTOM_KCAL_TOLERANCE:
        raise ValidationError(
            f"macros add up to {from_macros} kcal but the target is {values['calories']} kcal",
            field="calories",
        )
    return MacroResult(**values)
