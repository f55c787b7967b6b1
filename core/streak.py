"""
core/streak.py
────────────────────────────────────────────────────────────────────────
Daily logging streak as a pure state transition. The caller passes
`today`, so nothing here reads the clock.

    gap 0 (fresh record) or 1 day   → streak + 1
    gap 2 days (one missed day)     → recovery day, streak + 1
    gap > 2 days                    → streak restarts at 1
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, replace
from datetime import date
from typing import Any

_LOG = logging.getLogger(__name__)

RECOVERY_GAP_DAYS = 2


@dataclass(frozen=True)
class StreakState:
    current_streak: int = 0
    longest_streak: int = 0
    last_streak_date: date | None = None
    today_completed: bool = False

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


def gap_days(last: date | None, today: date) -> int:
    if last is None:
        return 0
    return abs((today - last).days)


def refresh_for_day(state: StreakState, today: date) -> StreakState:
    """Clear `today_completed` once the calendar day has moved on."""
    if state.last_streak_date == today or not state.today_completed:
        return state
    return replace(state, today_completed=False)


def advance_streak(state: StreakState, today: date, force: bool = False) -> StreakState:
    """Record that the user logged food on `today`."""
    state = refresh_for_day(state, today)
    if state.today_completed and not force:
        return state

    gap = gap_days(state.last_streak_date, today)
    if gap <= RECOVERY_GAP_DAYS:
        current = state.current_streak + 1
    else:
        _LOG.debug("missed %d days, restarting streak", gap - 1)
        current = 1

    return StreakState(
        current_streak=current,
        longest_streak=max(state.longest_streak, current),
        last_streak_date=today,
        today_completed=True,
    )
