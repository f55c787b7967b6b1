# api/v1/router.py
from fastapi import APIRouter

from . import foods, logs, macros, profile, streaks

api_router = APIRouter()

api_router.include_router(macros.router, prefix="/macros", tags=["Macros"])
api_router.include_router(profile.router, prefix="/profile", tags=["Profile"])
api_router.include_router(foods.router, prefix="/foods", tags=["Foods"])
api_router.include_router(logs.router, prefix="/logs", tags=["Daily logs"])
api_router.include_router(streaks.router, prefix="/streak", tags=["Streak"])
