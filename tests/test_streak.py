"""
Streak transitions – pure, every call gets an explicit `today`.
"""
from datetime import date, timedelta

from core.streak import StreakState, advance_streak, gap_days, refresh_for_day

DAY = date(2026, 3, 10)


def _state(current, longest, last, done):
    return StreakState(current_streak=current, longest_streak=longest,
                       last_streak_date=last, today_completed=done)


def test_fresh_record_starts_at_one():
    s = advance_streak(_state(0, 0, DAY, False), DAY)
    assert s == _state(1, 1, DAY, True)


def test_second_log_same_day_is_noop():
    done = _state(3, 5, DAY, True)
    assert advance_streak(done, DAY) == done


def test_force_increments_even_when_completed():
    assert advance_streak(_state(3, 3, DAY, True), DAY, force=True).current_streak == 4


def test_consecutive_day_increments_and_tracks_longest():
    s = advance_streak(_state(4, 4, DAY, True), DAY + timedelta(days=1))
    assert s.current_streak == 5
    assert s.longest_streak == 5
    assert s.last_streak_date == DAY + timedelta(days=1)
    assert s.today_completed


def test_one_missed_day_is_a_recovery_day():
    s = advance_streak(_state(4, 9, DAY, True), DAY + timedelta(days=2))
    assert s.current_streak == 5
    assert s.longest_streak == 9


def test_longer_gap_restarts_streak():
    s = advance_streak(_state(7, 7, DAY, True), DAY + timedelta(days=3))
    assert s.current_streak == 1
    assert s.longest_streak == 7


def test_refresh_clears_completion_on_new_day():
    s = refresh_for_day(_state(2, 2, DAY, True), DAY + timedelta(days=1))
    assert not s.today_completed
    assert s.current_streak == 2


def test_refresh_same_day_keeps_state():
    s = _state(2, 2, DAY, True)
    assert refresh_for_day(s, DAY) is s


def test_gap_days():
    assert gap_days(None, DAY) == 0
    assert gap_days(DAY, DAY + timedelta(days=4)) == 4
