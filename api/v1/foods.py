# api/v1/foods.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from services.auth import current_user_id
from services.db import (
    create_food,
    delete_food,
    foods_by_category,
    get_food,
    get_session,
    recent_foods,
    search_foods,
    update_food,
)
from api.v1.schemas import FoodIn, FoodOut, FoodUpdate

router = APIRouter(dependencies=[Depends(current_user_id)])


def _or_404(food) -> FoodOut:
    if food is None:
        raise HTTPException(status_code=404, detail="Food not found")
    return FoodOut.model_validate(food, from_attributes=True)


@router.get("", response_model=list[FoodOut], summary="Search the food catalogue")
async def list_foods(
    q: str | None = Query(None, description="substring of the description, ≥ 2 chars"),
    category: str | None = None,
    db: AsyncSession = Depends(get_session),
) -> list[FoodOut]:
    if q is not None:
        rows = await search_foods(db, q)
    elif category:
        rows = await foods_by_category(db, category)
    else:
        rows = await recent_foods(db)
    return [FoodOut.model_validate(f, from_attributes=True) for f in rows]


@router.post("", response_model=FoodOut, status_code=status.HTTP_201_CREATED)
async def add_food(
    body: FoodIn,
    db: AsyncSession = Depends(get_session),
) -> FoodOut:
    food = await create_food(db, body.model_dump())
    return FoodOut.model_validate(food, from_attributes=True)


@router.get("/{food_id}", response_model=FoodOut)
async def read_food(food_id: int, db: AsyncSession = Depends(get_session)) -> FoodOut:
    return _or_404(await get_food(db, food_id))


@router.put("/{food_id}", response_model=FoodOut, summary="Edit a catalogue entry")
async def edit_food(
    food_id: int,
    body: FoodUpdate,
    db: AsyncSession = Depends(get_session),
) -> FoodOut:
    # MacroError from re-validation → 422 via the app-level handler
    return _or_404(await update_food(db, food_id, body.model_dump(exclude_unset=True)))


@router.delete("/{food_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_food(food_id: int, db: AsyncSession = Depends(get_session)) -> Response:
    if not await delete_food(db, food_id):
        raise HTTPException(status_code=404, detail="Food not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
