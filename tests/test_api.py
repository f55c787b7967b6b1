"""
End-to-end through FastAPI against a throw-away SQLite file.
"""
from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from main import app
from services.auth import create_token
import services.db
from services.db import Base, get_session, utc_today

PROFILE_BODY = {
    "gender": "male",
    "age": 30,
    "weight": 70,
    "height": 175,
    "activity_level": "moderate",
    "goal": "maintain",
}
CHICKEN = {"description": "Frango grelhado (peito)", "category": "Carnes",
           "kcal": 165, "protein_g": 31, "carbs_g": 0, "fat_g": 3.6}


@pytest.fixture
def client(tmp_path):
    url = f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"
    state: dict = {}

    # engine is built lazily so it lives on the TestClient's event loop
    async def _session():
        if "maker" not in state:
            eng = create_async_engine(url)
            async with eng.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            state["engine"] = eng
            state["maker"] = async_sessionmaker(eng, expire_on_commit=False)
        async with state["maker"]() as session:
            yield session

    app.dependency_overrides[get_session] = _session
    with TestClient(app) as c:
        yield c
        if "engine" in state:
            c.portal.call(state["engine"].dispose)
    app.dependency_overrides.clear()


def _auth(user_id: str = "user-1") -> dict[str, str]:
    return {"Authorization": f"Bearer {create_token(user_id)}"}


def _with_profile(client, user_id="user-1"):
    r = client.post("/api/v1/profile", json={"email": f"{user_id}@example.com"}, headers=_auth(user_id))
    assert r.status_code == 201
    return r.json()


# ── meta / auth ──────────────────────────────────────────────────────
def test_health(client):
    assert client.get("/health").json()["status"] == "ok"


def test_missing_token_is_401(client):
    assert client.get("/api/v1/profile").status_code == 401
    assert client.get("/api/v1/profile", headers={"Authorization": "Bearer nope"}).status_code == 401


# ── calculator ───────────────────────────────────────────────────────
def test_calculate_reference_profile(client):
    r = client.post("/api/v1/macros/calculate", json=PROFILE_BODY)
    assert r.status_code == 200
    body = r.json()
    assert body["bmr"] == 1648.75
    assert body["macros"] == {"calories": 2556, "protein": 154, "carbs": 325, "fat": 71}
    assert body["percentages"] == {"protein": 24, "carbs": 51, "fat": 25}


def test_calculate_flat_policy(client):
    r = client.post("/api/v1/macros/calculate",
                    json={**PROFILE_BODY, "goal": "lose", "protein_policy": "flat"})
    assert r.json()["macros"]["protein"] == 154


def test_calculate_rejects_bad_enum(client):
    r = client.post("/api/v1/macros/calculate", json={**PROFILE_BODY, "activity_level": "couch"})
    assert r.status_code == 422


# ── profile & targets ────────────────────────────────────────────────
def test_profile_lifecycle(client):
    _with_profile(client)
    assert client.post("/api/v1/profile", json={"email": "x@example.com"},
                       headers=_auth()).status_code == 409

    r = client.put("/api/v1/profile/macros", json=PROFILE_BODY, headers=_auth())
    macros = r.json()["macros"]
    assert macros["calories"] == 2556
    assert macros["goal"] == "maintain"
    assert macros["is_custom"] is False
    assert macros["updated_at"]

    r = client.delete("/api/v1/profile/macros", headers=_auth())
    assert r.json()["macros"] is None


def test_macros_without_profile_is_404(client):
    r = client.put("/api/v1/profile/macros", json=PROFILE_BODY, headers=_auth("ghost"))
    assert r.status_code == 404


def test_custom_macros(client):
    _with_profile(client)
    ok = {"calories": "2000", "protein": "150", "carbs": "200", "fat": "67"}
    r = client.put("/api/v1/profile/macros/custom", json=ok, headers=_auth())
    assert r.status_code == 200
    body = r.json()
    assert body["macros"]["is_custom"] is True
    assert body["percentages"] == {"protein": 30, "carbs": 40, "fat": 30}
    assert body["balanced"] is True

    bad = {**ok, "fat": "20"}
    r = client.put("/api/v1/profile/macros/custom", json=bad, headers=_auth())
    assert r.status_code == 422
    assert r.json()["field"] == "calories"


def test_custom_percentages_are_shares_of_the_calorie_target(client):
    _with_profile(client)
    # 4·150 + 4·200 + 9·63 = 1967 kcal, inside the 50 kcal tolerance of 2000
    body = {"calories": 2000, "protein": 150, "carbs": 200, "fat": 63}
    r = client.put("/api/v1/profile/macros/custom", json=body, headers=_auth())
    assert r.status_code == 200
    assert r.json()["percentages"] == {"protein": 30, "carbs": 40, "fat": 28}


def test_profile_patch_updates_only_sent_fields(client):
    _with_profile(client)
    r = client.patch("/api/v1/profile", json={"full_name": "Jane Doe"}, headers=_auth())
    assert r.status_code == 200
    assert r.json()["full_name"] == "Jane Doe"
    assert r.json()["avatar_url"] is None

    r = client.patch("/api/v1/profile", json={"avatar_url": "https://cdn.example.com/a.png"},
                     headers=_auth())
    assert r.json()["full_name"] == "Jane Doe"
    assert r.json()["avatar_url"] == "https://cdn.example.com/a.png"
    assert client.get("/api/v1/profile", headers=_auth()).json()["avatar_url"].endswith("a.png")

    assert client.patch("/api/v1/profile", json={"full_name": "x"},
                        headers=_auth("ghost")).status_code == 404


# ── foods ────────────────────────────────────────────────────────────
def test_food_search(client):
    client.post("/api/v1/foods", json=CHICKEN, headers=_auth())
    client.post("/api/v1/foods", json={**CHICKEN, "description": "Frango assado"}, headers=_auth())

    names = [f["description"] for f in client.get("/api/v1/foods", params={"q": "frango"},
                                                  headers=_auth()).json()]
    assert names == ["Frango assado", "Frango grelhado (peito)"]
    assert client.get("/api/v1/foods", params={"q": "f"}, headers=_auth()).json() == []
    assert len(client.get("/api/v1/foods", params={"category": "Carnes"}, headers=_auth()).json()) == 2


def test_food_rejects_negative_nutrients(client):
    r = client.post("/api/v1/foods", json={**CHICKEN, "kcal": -5}, headers=_auth())
    assert r.status_code == 422


def test_food_read_edit_delete(client):
    food_id = client.post("/api/v1/foods", json=CHICKEN, headers=_auth()).json()["id"]
    assert client.get(f"/api/v1/foods/{food_id}", headers=_auth()).json()["kcal"] == 165

    r = client.put(f"/api/v1/foods/{food_id}", json={"kcal": 170, "category": "Aves"},
                   headers=_auth())
    assert r.status_code == 200
    assert r.json() == {**CHICKEN, "id": food_id, "kcal": 170, "category": "Aves"}

    r = client.put(f"/api/v1/foods/{food_id}", json={"description": None}, headers=_auth())
    assert r.status_code == 422
    assert r.json()["field"] == "description"

    assert client.delete(f"/api/v1/foods/{food_id}", headers=_auth()).status_code == 204
    assert client.get(f"/api/v1/foods/{food_id}", headers=_auth()).status_code == 404
    assert client.put(f"/api/v1/foods/{food_id}", json={"kcal": 1},
                      headers=_auth()).status_code == 404
    assert client.delete(f"/api/v1/foods/{food_id}", headers=_auth()).status_code == 404


def test_deleting_food_keeps_logged_copy(client):
    food_id = client.post("/api/v1/foods", json=CHICKEN, headers=_auth()).json()["id"]
    day = date(2026, 3, 10).isoformat()
    client.post(f"/api/v1/logs/{day}/items",
                json={"food_id": food_id, "quantity": 100, "meal_type": "lunch"},
                headers=_auth())
    client.delete(f"/api/v1/foods/{food_id}", headers=_auth())

    log = client.get(f"/api/v1/logs/{day}", headers=_auth()).json()
    assert log["items"][0]["food"]["description"] == CHICKEN["description"]
    assert log["total_calories"] == 165


# ── daily log, progress, streak ──────────────────────────────────────
def test_log_add_remove_and_progress(client):
    _with_profile(client)
    client.put("/api/v1/profile/macros", json=PROFILE_BODY, headers=_auth())
    food_id = client.post("/api/v1/foods", json=CHICKEN, headers=_auth()).json()["id"]
    day = date(2026, 3, 10).isoformat()

    r = client.post(f"/api/v1/logs/{day}/items",
                    json={"food_id": food_id, "quantity": 150, "meal_type": "lunch"},
                    headers=_auth())
    assert r.status_code == 201
    log = r.json()
    assert log["total_calories"] == 248
    assert log["total_protein"] == 46.5
    assert log["items"][0]["food"]["kcal"] == 248

    prog = client.get(f"/api/v1/logs/{day}/progress", headers=_auth()).json()
    assert prog["calories_target"] == 2556
    assert prog["calories_remaining"] == 2308
    assert prog["protein_remaining_g"] == 108

    assert client.delete(f"/api/v1/logs/{day}/items/3", headers=_auth()).status_code == 404
    log = client.delete(f"/api/v1/logs/{day}/items/0", headers=_auth()).json()
    assert log["items"] == []
    assert log["total_calories"] == 0


def test_inline_food_and_source_check(client):
    day = date(2026, 3, 10).isoformat()
    r = client.post(f"/api/v1/logs/{day}/items",
                    json={"food": CHICKEN, "quantity": 100, "meal_type": "dinner"},
                    headers=_auth())
    assert r.json()["total_calories"] == 165

    r = client.post(f"/api/v1/logs/{day}/items",
                    json={"quantity": 100, "meal_type": "dinner"}, headers=_auth())
    assert r.status_code == 422
    r = client.post(f"/api/v1/logs/{day}/items",
                    json={"food_id": 999, "quantity": 100, "meal_type": "dinner"}, headers=_auth())
    assert r.status_code == 404


def test_log_range(client):
    start = date(2026, 3, 1)
    for offset in (2, 0, 1):
        client.get(f"/api/v1/logs/{(start + timedelta(days=offset)).isoformat()}", headers=_auth())

    r = client.get("/api/v1/logs", params={"start": "2026-03-01", "end": "2026-03-02"},
                   headers=_auth())
    assert [log["date"] for log in r.json()] == ["2026-03-01", "2026-03-02"]
    r = client.get("/api/v1/logs", params={"start": "2026-03-02", "end": "2026-03-01"},
                   headers=_auth())
    assert r.status_code == 400


def test_logging_today_starts_streak(client):
    today = utc_today().isoformat()
    before = client.get("/api/v1/streak", headers=_auth()).json()
    assert before["current_streak"] == 0
    assert before["today_completed"] is False

    for _ in range(2):
        client.post(f"/api/v1/logs/{today}/items",
                    json={"food": CHICKEN, "quantity": 100, "meal_type": "lunch"},
                    headers=_auth())

    after = client.get("/api/v1/streak", headers=_auth()).json()
    assert after["current_streak"] == 1
    assert after["longest_streak"] == 1
    assert after["today_completed"] is True


def test_logging_past_day_leaves_streak_alone(client):
    past = (utc_today() - timedelta(days=5)).isoformat()
    client.post(f"/api/v1/logs/{past}/items",
                json={"food": CHICKEN, "quantity": 100, "meal_type": "lunch"},
                headers=_auth())
    assert client.get("/api/v1/streak", headers=_auth()).json()["current_streak"] == 0


def test_streak_failure_does_not_undo_log_write(client, monkeypatch):
    async def broken_streak(*args, **kwargs):
        raise RuntimeError("streak table unavailable")

    monkeypatch.setattr(services.db, "advance_user_streak", broken_streak)
    today = utc_today().isoformat()
    r = client.post(f"/api/v1/logs/{today}/items",
                    json={"food": CHICKEN, "quantity": 100, "meal_type": "lunch"},
                    headers=_auth())
    assert r.status_code == 201
    assert r.json()["total_calories"] == 165

    log = client.get(f"/api/v1/logs/{today}", headers=_auth()).json()
    assert len(log["items"]) == 1
    assert log["total_calories"] == 165
    assert client.get("/api/v1/streak", headers=_auth()).json()["current_streak"] == 0


def test_today_is_the_utc_calendar_day(client):
    assert utc_today() == datetime.now(timezone.utc).date()
    today = utc_today().isoformat()
    client.post(f"/api/v1/logs/{today}/items",
                json={"food": CHICKEN, "quantity": 100, "meal_type": "lunch"},
                headers=_auth())
    assert client.get("/api/v1/streak", headers=_auth()).json()["last_streak_date"] == today
