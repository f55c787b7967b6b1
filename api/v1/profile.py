# api/v1/profile.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from core.macro_calc import macro_percentages, percentages_balanced, validate_custom_macros
from services.auth import current_user_id
from services.db import (
    create_profile,
    get_profile,
    get_session,
    reset_user_macros,
    save_user_macros,
    update_profile,
)
from api.v1.macros import calculator, to_profile
from api.v1.schemas import (
    BiometricsIn,
    CustomMacrosIn,
    CustomMacrosOut,
    ProfileCreate,
    ProfileOut,
    ProfileUpdate,
)

router = APIRouter()


def _or_404(profile):
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    return ProfileOut.model_validate(profile, from_attributes=True)


# ───────────────────────── create / read ────────────────────
@router.post("", response_model=ProfileOut, status_code=status.HTTP_201_CREATED)
async def create_my_profile(
    body: ProfileCreate,
    user_id: str = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> ProfileOut:
    if await get_profile(db, user_id):
        raise HTTPException(status_code=409, detail="Profile already exists")
    profile = await create_profile(db, user_id, body.email, body.full_name)
    return ProfileOut.model_validate(profile, from_attributes=True)


@router.get("", response_model=ProfileOut)
async def read_my_profile(
    user_id: str = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> ProfileOut:
    return _or_404(await get_profile(db, user_id))


@router.patch("", response_model=ProfileOut, summary="Edit name / avatar")
async def update_my_profile(
    body: ProfileUpdate,
    user_id: str = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> ProfileOut:
    return _or_404(await update_profile(db, user_id, body.model_dump(exclude_unset=True)))


# ───────────────────────── macro targets ────────────────────
@router.put(
    "/macros",
    response_model=ProfileOut,
    summary="Calculate targets from biometrics and store them (onboarding)",
)
async def save_calculated_macros(
    body: BiometricsIn,
    user_id: str = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> ProfileOut:
    macros = calculator().full(to_profile(body)).macros
    payload = {
        **macros.as_dict(),
        "goal": body.goal,
        "activity_level": body.activity_level,
        "is_custom": False,
    }
    return _or_404(await save_user_macros(db, user_id, payload))


@router.put(
    "/macros/custom",
    response_model=CustomMacrosOut,
    summary="Store hand-entered targets",
)
async def save_custom_macros(
    body: CustomMacrosIn,
    user_id: str = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> CustomMacrosOut:
    # MacroError → 422 via the app-level handler
    macros = validate_custom_macros(body.calories, body.protein, body.carbs, body.fat)
    payload = {
        **macros.as_dict(),
        "goal": body.goal,
        "activity_level": body.activity_level,
        "is_custom": True,
    }
    profile = _or_404(await save_user_macros(db, user_id, payload))
    pcts = macro_percentages(macros.protein, macros.carbs, macros.fat, macros.calories)
    return CustomMacrosOut(
        **profile.model_dump(),
        percentages=pcts,
        balanced=percentages_balanced(pcts),
    )


@router.delete("/macros", response_model=ProfileOut)
async def reset_macros(
    user_id: str = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> ProfileOut:
    return _or_404(await reset_user_macros(db, user_id))
