"""Re-export individual schema modules for easy imports."""

from .macros import BiometricsIn, CustomMacrosIn, FullMacrosOut, MacroCalcIn, MacroResultOut
from .profile import CustomMacrosOut, MacroData, ProfileCreate, ProfileOut, ProfileUpdate
from .food import FoodIn, FoodOut, FoodUpdate
from .log import DailyLogOut, LogItemIn, ProgressOut
from .streak import StreakOut

__all__ = [
    "BiometricsIn",
    "CustomMacrosIn",
    "FullMacrosOut",
    "MacroCalcIn",
    "MacroResultOut",
    "MacroData",
    "ProfileCreate",
    "ProfileOut",
    "ProfileUpdate",
    "CustomMacrosOut",
    "FoodIn",
    "FoodOut",
    "FoodUpdate",
    "DailyLogOut",
    "LogItemIn",
    "ProgressOut",
    "StreakOut",
]
