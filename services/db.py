"""
services/db.py
────────────────────────────────────────────────────────────────────────
* Async SQLAlchemy v2 setup
* Models for profiles, foods, daily logs and streaks
* Small DAO helpers used by routers / scripts
"""
from __future__ import annotations

import datetime as dt
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, AsyncIterator, List

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    DateTime,
    Float,
    Integer,
    String,
    UniqueConstraint,
    func,
    select,
)
from sqlalchemy.ext.asyncio import (
    AsyncAttrs,
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import Mapped, declarative_base, mapped_column

from config import settings
from core.daily_log import compute_totals, make_log_item, validate_food
from core.streak import StreakState, advance_streak, refresh_for_day

_LOG = logging.getLogger(__name__)


def utc_today() -> dt.date:
    """Calendar day used for "today" (streaks, today's log)."""
    return dt.datetime.now(dt.timezone.utc).date()


# ───────── connection helper ────────────────────────────────────────
_ENGINE: AsyncEngine | None = None


async def _create_engine() -> AsyncEngine:
    if not settings.database_url:
        raise RuntimeError("Set the DATABASE_URL env var")
    return create_async_engine(
        settings.database_url, pool_pre_ping=True, echo=settings.db_echo
    )


async def engine() -> AsyncEngine:
    global _ENGINE
    if _ENGINE is None:
        _ENGINE = await _create_engine()
    return _ENGINE


# ───────── declarative base ──────────────────────────────────────────
Base = declarative_base(cls=AsyncAttrs)


class Profile(Base):
    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(String, primary_key=True)  # auth user id
    email: Mapped[str] = mapped_column(String)
    full_name: Mapped[str | None] = mapped_column(String)
    avatar_url: Mapped[str | None] = mapped_column(String)
    plan: Mapped[str] = mapped_column(String, default="free")
    macros: Mapped[dict | None] = mapped_column(JSON)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, server_default=func.now())


class Food(Base):
    __tablename__ = "foods"

    id: Mapped[int] = mapped_column(primary_key=True)
    description: Mapped[str] = mapped_column(String, index=True)
    category: Mapped[str] = mapped_column(String, index=True)
    # per 100 g
    kcal: Mapped[float] = mapped_column(Float)
    protein_g: Mapped[float] = mapped_column(Float)
    carbs_g: Mapped[float] = mapped_column(Float)
    fat_g: Mapped[float] = mapped_column(Float)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, server_default=func.now())

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "description": self.description,
            "category": self.category,
            "kcal": self.kcal,
            "protein_g": self.protein_g,
            "carbs_g": self.carbs_g,
            "fat_g": self.fat_g,
        }


class DailyLog(Base):
    __tablename__ = "daily_logs"
    __table_args__ = (UniqueConstraint("user_id", "date"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[str] = mapped_column(String, index=True)
    date: Mapped[dt.date] = mapped_column(Date)
    items: Mapped[list] = mapped_column(JSON, default=list)
    total_calories: Mapped[int] = mapped_column(Integer, default=0)
    total_protein: Mapped[float] = mapped_column(Float, default=0.0)
    total_carbs: Mapped[float] = mapped_column(Float, default=0.0)
    total_fat: Mapped[float] = mapped_column(Float, default=0.0)

    def totals(self) -> dict[str, float]:
        return {
            "total_calories": self.total_calories,
            "total_protein": self.total_protein,
            "total_carbs": self.total_carbs,
            "total_fat": self.total_fat,
        }


class Streak(Base):
    __tablename__ = "streaks"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[str] = mapped_column(String, unique=True)
    current_streak: Mapped[int] = mapped_column(Integer, default=0)
    longest_streak: Mapped[int] = mapped_column(Integer, default=0)
    last_streak_date: Mapped[dt.date] = mapped_column(Date)
    today_completed: Mapped[bool] = mapped_column(Boolean, default=False)

    def state(self) -> StreakState:
        return StreakState(
            current_streak=self.current_streak,
            longest_streak=self.longest_streak,
            last_streak_date=self.last_streak_date,
            today_completed=self.today_completed,
        )

    def apply(self, state: StreakState) -> None:
        self.current_streak = state.current_streak
        self.longest_streak = state.longest_streak
        self.last_streak_date = state.last_streak_date
        self.today_completed = state.today_completed


# ───────── session helpers ───────────────────────────────────────────

async def init_models(eng: AsyncEngine | None = None) -> None:
    eng = eng or await engine()
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@asynccontextmanager
async def session_scope() -> AsyncIterator[AsyncSession]:
    eng = await engine()
    async_session = async_sessionmaker(eng, expire_on_commit=False)
    async with async_session() as session:
        yield session


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async with session_scope() as session:
        yield session


# ───────── profiles ──────────────────────────────────────────────────

async def create_profile(
    db: AsyncSession, user_id: str, email: str, full_name: str | None = None
) -> Profile:
    profile = Profile(id=user_id, email=email, full_name=full_name, plan="free")
    db.add(profile)
    await db.commit()
    await db.refresh(profile)
    return profile


async def get_profile(db: AsyncSession, user_id: str) -> Profile | None:
    return await db.get(Profile, user_id)


PROFILE_FIELDS = ("full_name", "avatar_url")


async def update_profile(
    db: AsyncSession, user_id: str, updates: dict[str, Any]
) -> Profile | None:
    """Write the editable profile fields present in `updates`; None when missing."""
    profile = await db.get(Profile, user_id)
    if profile is None:
        return None
    for field in PROFILE_FIELDS:
        if field in updates:
            setattr(profile, field, updates[field])
    await db.commit()
    await db.refresh(profile)
    return profile


async def save_user_macros(
    db: AsyncSession, user_id: str, macro_data: dict[str, Any]
) -> Profile | None:
    """Store targets + goal/activity metadata; None when the profile is missing."""
    profile = await db.get(Profile, user_id)
    if profile is None:
        return None
    profile.macros = {
        **macro_data,
        "updated_at": dt.datetime.now(dt.timezone.utc).isoformat(),
    }
    await db.commit()
    await db.refresh(profile)
    _LOG.info("saved macros for user %s (custom=%s)", user_id, macro_data.get("is_custom", False))
    return profile


async def reset_user_macros(db: AsyncSession, user_id: str) -> Profile | None:
    profile = await db.get(Profile, user_id)
    if profile is None:
        return None
    profile.macros = None
    await db.commit()
    await db.refresh(profile)
    return profile


# ───────── foods ─────────────────────────────────────────────────────
MIN_SEARCH_LEN = 2
SEARCH_LIMIT = 50


async def search_foods(db: AsyncSession, query: str) -> List[Food]:
    if not query or len(query) < MIN_SEARCH_LEN:
        return []
    res = await db.execute(
        select(Food)
        .where(Food.description.ilike(f"%{query}%"))
        .order_by(Food.description)
        .limit(SEARCH_LIMIT)
    )
    return list(res.scalars().all())


async def create_food(db: AsyncSession, data: dict[str, Any]) -> Food:
    validate_food(data)
    food = Food(
        description=data["description"],
        category=data["category"],
        kcal=data["kcal"],
        protein_g=data["protein_g"],
        carbs_g=data["carbs_g"],
        fat_g=data["fat_g"],
    )
    db.add(food)
    await db.commit()
    await db.refresh(food)
    return food


async def get_food(db: AsyncSession, food_id: int) -> Food | None:
    return await db.get(Food, food_id)


async def update_food(db: AsyncSession, food_id: int, updates: dict[str, Any]) -> Food | None:
    """Merge `updates` into the stored food, re-validate, save. None when missing."""
    food = await db.get(Food, food_id)
    if food is None:
        return None
    merged = {**food.as_dict(), **updates}
    validate_food(merged)
    for field in ("description", "category", "kcal", "protein_g", "carbs_g", "fat_g"):
        setattr(food, field, merged[field])
    await db.commit()
    await db.refresh(food)
    return food


async def delete_food(db: AsyncSession, food_id: int) -> bool:
    """Remove a food from the catalogue. Items already logged keep their copy."""
    food = await db.get(Food, food_id)
    if food is None:
        return False
    await db.delete(food)
    await db.commit()
    return True


async def foods_by_category(db: AsyncSession, category: str, limit: int = 20) -> List[Food]:
    res = await db.execute(
        select(Food).where(Food.category == category).order_by(Food.description).limit(limit)
    )
    return list(res.scalars().all())


async def recent_foods(db: AsyncSession, limit: int = 10) -> List[Food]:
    res = await db.execute(select(Food).order_by(Food.id.desc()).limit(limit))
    return list(res.scalars().all())


# ───────── daily logs ────────────────────────────────────────────────

def _set_items(log: DailyLog, items: list[dict[str, Any]]) -> None:
    # reassign (not mutate) so the JSON column is flagged dirty
    log.items = items
    totals = compute_totals(items)
    log.total_calories = totals.total_calories
    log.total_protein = totals.total_protein
    log.total_carbs = totals.total_carbs
    log.total_fat = totals.total_fat


async def get_or_create_daily_log(db: AsyncSession, user_id: str, day: dt.date) -> DailyLog:
    log = (
        await db.execute(
            select(DailyLog).where(DailyLog.user_id == user_id, DailyLog.date == day)
        )
    ).scalar_one_or_none()
    if log is not None:
        return log

    log = DailyLog(user_id=user_id, date=day)
    _set_items(log, [])
    db.add(log)
    await db.commit()
    await db.refresh(log)
    return log


async def add_food_to_log(
    db: AsyncSession,
    user_id: str,
    day: dt.date,
    food: dict[str, Any],
    quantity_g: float,
    meal_type: str,
    today: dt.date | None = None,
) -> DailyLog:
    log = await get_or_create_daily_log(db, user_id, day)
    item = make_log_item(food, quantity_g, meal_type, day.isoformat())
    _set_items(log, [*(log.items or []), item])
    await db.commit()
    await db.refresh(log)

    # only today's log counts towards the streak
    today = today or utc_today()
    if day == today and log.items:
        try:
            await advance_user_streak(db, user_id, today)
        except Exception:  # noqa: BLE001
            _LOG.exception("streak update failed for user %s", user_id)
            await db.rollback()
            await db.refresh(log)
    return log


async def remove_food_from_log(
    db: AsyncSession, user_id: str, day: dt.date, index: int
) -> DailyLog:
    log = await get_or_create_daily_log(db, user_id, day)
    items = list(log.items or [])
    if not 0 <= index < len(items):
        raise IndexError(f"no item {index} in log for {day}")
    del items[index]
    _set_items(log, items)
    await db.commit()
    await db.refresh(log)
    return log


async def get_daily_logs(
    db: AsyncSession, user_id: str, start: dt.date, end: dt.date
) -> List[DailyLog]:
    res = await db.execute(
        select(DailyLog)
        .where(DailyLog.user_id == user_id, DailyLog.date >= start, DailyLog.date <= end)
        .order_by(DailyLog.date)
    )
    return list(res.scalars().all())


# ───────── streaks ───────────────────────────────────────────────────

async def get_or_create_streak(db: AsyncSession, user_id: str, today: dt.date) -> Streak:
    row = (
        await db.execute(select(Streak).where(Streak.user_id == user_id))
    ).scalar_one_or_none()
    if row is None:
        row = Streak(
            user_id=user_id,
            current_streak=0,
            longest_streak=0,
            last_streak_date=today,
            today_completed=False,
        )
        db.add(row)
        await db.commit()
        await db.refresh(row)
        return row

    state = row.state()
    fresh = refresh_for_day(state, today)
    if fresh != state:
        row.apply(fresh)
        await db.commit()
        await db.refresh(row)
    return row


async def advance_user_streak(
    db: AsyncSession, user_id: str, today: dt.date, force: bool = False
) -> Streak:
    row = await get_or_create_streak(db, user_id, today)
    state = row.state()
    new = advance_streak(state, today, force=force)
    if new != state:
        row.apply(new)
        await db.commit()
        await db.refresh(row)
        _LOG.info("streak for user %s now %d", user_id, row.current_streak)
    return row
