# api/v1/macros.py
from __future__ import annotations

from fastapi import APIRouter, status

from config import settings
from core.macro_calc import BiometricProfile, MacroCalculator, macro_percentages
from api.v1.schemas import FullMacrosOut, MacroCalcIn
from api.v1.schemas.macros import BiometricsIn

router = APIRouter()


def calculator(protein_policy: str | None = None) -> MacroCalculator:
    """Calculator configured from settings, optionally overriding the protein policy."""
    return MacroCalculator(
        protein_policy=protein_policy or settings.protein_policy,
        clamp_negative_carbs=settings.clamp_negative_carbs,
    )


def to_profile(body: BiometricsIn) -> BiometricProfile:
    return BiometricProfile(
        gender=body.gender.value,
        age=body.age,
        weight=body.weight,
        height=body.height,
        activity_level=body.activity_level,
        goal=body.goal,
    )


@router.post(
    "/calculate",
    response_model=FullMacrosOut,
    status_code=status.HTTP_200_OK,
    summary="BMR, TDEE and daily macro targets for a set of biometrics",
)
async def calculate(body: MacroCalcIn) -> FullMacrosOut:
    full = calculator(body.protein_policy).full(to_profile(body))
    m = full.macros
    return FullMacrosOut(
        bmr=full.bmr,
        tdee=full.tdee,
        macros=m.as_dict(),
        activity_multiplier=full.activity_multiplier,
        goal_adjustment=full.goal_adjustment,
        percentages=macro_percentages(m.protein, m.carbs, m.fat, m.calories),
    )
