# api/v1/logs.py
from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from core.progress import daily_progress
from services.auth import current_user_id
from services.db import (
    add_food_to_log,
    get_daily_logs,
    get_food,
    get_or_create_daily_log,
    get_profile,
    get_session,
    remove_food_from_log,
)
from api.v1.schemas import DailyLogOut, LogItemIn, ProgressOut

router = APIRouter()


def _out(log) -> DailyLogOut:
    return DailyLogOut.model_validate(log, from_attributes=True)


@router.get("", response_model=list[DailyLogOut], summary="Logs between two dates")
async def list_logs(
    start: date,
    end: date,
    user_id: str = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> list[DailyLogOut]:
    if end < start:
        raise HTTPException(status_code=400, detail="end is before start")
    return [_out(log) for log in await get_daily_logs(db, user_id, start, end)]


@router.get("/{day}", response_model=DailyLogOut)
async def read_log(
    day: date,
    user_id: str = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> DailyLogOut:
    return _out(await get_or_create_daily_log(db, user_id, day))


@router.post("/{day}/items", response_model=DailyLogOut, status_code=status.HTTP_201_CREATED)
async def add_item(
    day: date,
    body: LogItemIn,
    user_id: str = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> DailyLogOut:
    if body.food_id is not None:
        row = await get_food(db, body.food_id)
        if row is None:
            raise HTTPException(status_code=404, detail="Food not found")
        food = row.as_dict()
    else:
        food = body.food.model_dump()

    log = await add_food_to_log(db, user_id, day, food, body.quantity, body.meal_type)
    return _out(log)


@router.delete("/{day}/items/{index}", response_model=DailyLogOut)
async def remove_item(
    day: date,
    index: int,
    user_id: str = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> DailyLogOut:
    try:
        log = await remove_food_from_log(db, user_id, day, index)
    except IndexError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return _out(log)


@router.get("/{day}/progress", response_model=ProgressOut, summary="Consumed vs. targets")
async def read_progress(
    day: date,
    user_id: str = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> ProgressOut:
    log = await get_or_create_daily_log(db, user_id, day)
    profile = await get_profile(db, user_id)
    targets = profile.macros if profile else None
    return ProgressOut(**daily_progress(log.totals(), targets).as_dict())
