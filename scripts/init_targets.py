"""
scripts/init_targets.py
────────────────────────────────────────────────────────────────────────
Populate – or refresh – the calculated macro targets stored on
`profiles.macros` from a JSON file of biometrics:

    [{"user_id": "abc", "gender": "male", "age": 30, "weight": 70,
      "height": 175, "activity_level": "moderate", "goal": "maintain"}]

    python -m scripts.init_targets biometrics.json
    python -m scripts.init_targets biometrics.json --user abc

Profiles holding custom (hand-entered) targets are left alone unless
`--overwrite-custom` is given.
"""
from __future__ import annotations

import asyncio
import json
from argparse import ArgumentParser
from pathlib import Path
from typing import Any, Dict, List

from dotenv import load_dotenv
load_dotenv()

from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from core.errors import MacroError
from core.macro_calc import BiometricProfile, MacroCalculator
from services.db import get_profile, save_user_macros, session_scope

calc = MacroCalculator(
    protein_policy=settings.protein_policy,
    clamp_negative_carbs=settings.clamp_negative_carbs,
    strict=True,
)


def _profile(row: Dict[str, Any]) -> BiometricProfile:
    return BiometricProfile(
        gender=row["gender"],
        age=row["age"],
        weight=row["weight"],
        height=row["height"],
        activity_level=row.get("activity_level", "sedentary"),
        goal=row.get("goal", "maintain"),
    )


async def _refresh_user(db: AsyncSession, row: Dict[str, Any], overwrite_custom: bool) -> None:
    user_id = str(row["user_id"])
    profile = await get_profile(db, user_id)
    if profile is None:
        print(f"· skip {user_id} – profile not found")
        return
    if (profile.macros or {}).get("is_custom") and not overwrite_custom:
        print(f"· skip {user_id} – custom targets")
        return

    bio = _profile(row)
    macros = calc.full(bio).macros
    await save_user_macros(
        db,
        user_id,
        {
            **macros.as_dict(),
            "goal": bio.goal,
            "activity_level": bio.activity_level,
            "is_custom": False,
        },
    )
    print(f"✓ targets updated for user {user_id}: {macros.calories} kcal")


async def refresh_targets(
    db: AsyncSession, rows: List[Dict[str, Any]], overwrite_custom: bool = False
) -> int:
    """Refresh every row; a bad row is reported and skipped. Returns rows failed."""
    failed = 0
    for row in rows:
        try:
            await _refresh_user(db, row, overwrite_custom)
        except (MacroError, KeyError) as exc:
            failed += 1
            print(f"· skip {row.get('user_id', '?')} – {exc}")
    return failed


# ───────────────────────────────
# CLI entrypoint
# ───────────────────────────────
async def _async_main() -> None:
    ap = ArgumentParser()
    ap.add_argument("file", type=Path, help="JSON list of user biometrics")
    ap.add_argument("--user", help="update only this user-id")
    ap.add_argument("--overwrite-custom", action="store_true")
    args = ap.parse_args()

    rows: List[Dict[str, Any]] = json.loads(args.file.read_text())
    if args.user:
        rows = [r for r in rows if str(r.get("user_id")) == args.user]

    async with session_scope() as db:
        failed = await refresh_targets(db, rows, args.overwrite_custom)
    print(f"done: {len(rows) - failed} of {len(rows)} rows processed")


if __name__ == "__main__":  # pragma: no cover
    asyncio.run(_async_main())
