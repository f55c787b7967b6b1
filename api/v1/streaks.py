# api/v1/streaks.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from services.auth import current_user_id
from services.db import get_or_create_streak, get_session, utc_today
from api.v1.schemas import StreakOut

router = APIRouter()


@router.get("", response_model=StreakOut)
async def read_streak(
    user_id: str = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> StreakOut:
    row = await get_or_create_streak(db, user_id, utc_today())
    return StreakOut.model_validate(row, from_attributes=True)
