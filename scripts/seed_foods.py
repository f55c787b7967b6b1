"""
Seed common foods into the `foods` table (creates tables if missing).

Usage
-----

    # default hard-coded list
    python -m scripts.seed_foods

    # custom list (same schema) in a JSON file
    python -m scripts.seed_foods --file path/to/foods.json
"""
from __future__ import annotations

import argparse
import asyncio
import json
from pathlib import Path
from typing import Any, List

from dotenv import load_dotenv
load_dotenv()

from core.daily_log import validate_food
from services.db import Food, init_models, session_scope

# ────────────────────────────────────────────────────────────────────
# per 100 g
_DEFAULT_FOODS: List[dict[str, Any]] = [
    {"description": "Arroz branco cozido", "category": "Cereais",
     "kcal": 130, "protein_g": 2.7, "carbs_g": 28.2, "fat_g": 0.3},
    {"description": "Feijão carioca cozido", "category": "Leguminosas",
     "kcal": 77, "protein_g": 5.1, "carbs_g": 13.6, "fat_g": 0.5},
    {"description": "Frango grelhado (peito)", "category": "Carnes",
     "kcal": 165, "protein_g": 31, "carbs_g": 0, "fat_g": 3.6},
    {"description": "Omelete com queijo", "category": "Ovos",
     "kcal": 210, "protein_g": 14, "carbs_g": 1.5, "fat_g": 16},
    {"description": "Ovo frito", "category": "Ovos",
     "kcal": 90, "protein_g": 6.3, "carbs_g": 0.4, "fat_g": 7},
    {"description": "Pão francês", "category": "Pães",
     "kcal": 300, "protein_g": 8, "carbs_g": 58, "fat_g": 3},
    {"description": "Queijo mussarela", "category": "Laticínios",
     "kcal": 280, "protein_g": 21, "carbs_g": 2, "fat_g": 22},
    {"description": "Banana prata", "category": "Frutas",
     "kcal": 98, "protein_g": 1.3, "carbs_g": 26, "fat_g": 0.1},
]


async def _seed(foods: list[dict[str, Any]]) -> None:
    await init_models()
    async with session_scope() as db:
        for f in foods:
            validate_food(f)
            db.add(Food(**f))
        await db.commit()
    print(f"✓ inserted {len(foods)} foods")


def _load_json(path: Path) -> list[dict[str, Any]]:
    data = json.loads(path.read_text())
    if not isinstance(data, list):
        raise ValueError("JSON file must contain a list of food dictionaries")
    return data


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--file",
        type=Path,
        help="optional JSON file with foods to seed (overrides defaults)",
    )
    args = parser.parse_args()

    foods = _load_json(args.file) if args.file else _DEFAULT_FOODS
    asyncio.run(_seed(foods))


if __name__ == "__main__":
    main()
