"""
Target refresh script against a throw-away SQLite file.
"""
from __future__ import annotations

import asyncio

from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from scripts.init_targets import refresh_targets
from services.db import create_profile, get_profile, init_models, save_user_macros

BIO = {"gender": "male", "age": 30, "weight": 70, "height": 175,
       "activity_level": "moderate", "goal": "maintain"}
CUSTOM = {"calories": 2000, "protein": 150, "carbs": 200, "fat": 67,
          "goal": "maintain", "activity_level": "sedentary", "is_custom": True}


def _run(tmp_path, setup, rows, overwrite_custom=False):
    """Create the schema, run `setup`, refresh `rows`; return (failed, {user: macros})."""
    async def go():
        eng = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'targets.db'}")
        try:
            await init_models(eng)
            maker = async_sessionmaker(eng, expire_on_commit=False)
            async with maker() as db:
                await setup(db)
                failed = await refresh_targets(db, rows, overwrite_custom)
                macros = {}
                for row in rows:
                    uid = str(row.get("user_id"))
                    profile = await get_profile(db, uid)
                    macros[uid] = profile.macros if profile else None
            return failed, macros
        finally:
            await eng.dispose()

    return asyncio.run(go())


async def _two_users(db):
    await create_profile(db, "plain", "plain@example.com")
    await create_profile(db, "custom", "custom@example.com")
    await save_user_macros(db, "custom", CUSTOM)


def test_refresh_writes_calculated_targets_and_skips_custom(tmp_path, capsys):
    rows = [{"user_id": "plain", **BIO}, {"user_id": "custom", **BIO}]
    failed, macros = _run(tmp_path, _two_users, rows)

    assert failed == 0
    assert macros["plain"]["calories"] == 2556
    assert macros["plain"]["is_custom"] is False
    assert macros["custom"]["calories"] == 2000
    assert "skip custom – custom targets" in capsys.readouterr().out


def test_overwrite_custom_replaces_hand_entered_targets(tmp_path):
    rows = [{"user_id": "custom", **BIO}]
    failed, macros = _run(tmp_path, _two_users, rows, overwrite_custom=True)

    assert failed == 0
    assert macros["custom"]["calories"] == 2556
    assert macros["custom"]["is_custom"] is False


def test_bad_rows_are_skipped_and_the_rest_still_run(tmp_path, capsys):
    async def setup(db):
        for uid in ("typo", "nogender", "ok"):
            await create_profile(db, uid, f"{uid}@example.com")

    rows = [
        {"user_id": "typo", **BIO, "weight": "seventy"},
        {"user_id": "nogender", **{k: v for k, v in BIO.items() if k != "gender"}},
        {"user_id": "ok", **BIO},
    ]
    failed, macros = _run(tmp_path, setup, rows)

    assert failed == 2
    assert macros["typo"] is None
    assert macros["nogender"] is None
    assert macros["ok"]["calories"] == 2556
    out = capsys.readouterr().out
    assert "skip typo – weight must be a finite number" in out
    assert "skip nogender" in out


def test_missing_profile_is_reported_not_failed(tmp_path, capsys):
    async def setup(db):
        return None

    failed, macros = _run(tmp_path, setup, [{"user_id": "ghost", **BIO}])
    assert failed == 0
    assert macros["ghost"] is None
    assert "skip ghost – profile not found" in capsys.readouterr().out
