"""Unit tests for the streak / buddy decay / unlock rules."""

from datetime import date, datetime, timedelta, timezone

import pytest

from config import BuddySettings
from schemas.models.user import UserDoc
from services.stat_engine import (
    apply_buddy_decay,
    check_unlocks,
    decay_buddy_stats,
    invalidate_stale_streak,
    update_streak,
)

NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def _user(**overrides) -> UserDoc:
    base = {"email": "a@b.co", "last_buddy_interaction": NOW}
    base.update(overrides)
    return UserDoc(**base)


# ── update_streak ─────────────────────────────────────────────────────────────


class TestUpdateStreak:
    def test_first_session_starts_streak(self):
        user = update_streak(_user(), "2024-01-01")
        assert user.current_streak == 1
        assert user.longest_streak == 1
        assert user.last_session_date == "2024-01-01"

    def test_next_day_increments_then_gap_resets(self):
        user = _user(current_streak=3, longest_streak=3, last_session_date="2024-01-01")

        update_streak(user, "2024-01-02")
        assert user.current_streak == 4

        update_streak(user, "2024-01-04")
        assert user.current_streak == 1
        assert user.longest_streak == 4
        assert user.last_session_date == "2024-01-04"

    def test_same_day_is_idempotent(self):
        user = _user(current_streak=2, longest_streak=5, last_session_date="2024-01-01")
        update_streak(user, "2024-01-01")
        update_streak(user, "2024-01-01")
        assert user.current_streak == 2
        assert user.longest_streak == 5

    def test_earlier_date_restarts(self):
        user = _user(current_streak=4, longest_streak=4, last_session_date="2024-01-10")
        update_streak(user, "2024-01-08")
        assert user.current_streak == 1
        assert user.last_session_date == "2024-01-08"

    def test_accepts_date_objects(self):
        user = _user(current_streak=1, longest_streak=1, last_session_date="2024-02-28")
        update_streak(user, date(2024, 2, 29))
        assert user.current_streak == 2
        assert user.last_session_date == "2024-02-29"

    def test_month_boundary(self):
        user = _user(current_streak=1, longest_streak=1, last_session_date="2024-01-31")
        update_streak(user, "2024-02-01")
        assert user.current_streak == 2

    def test_defaults_to_today(self):
        user = update_streak(_user())
        assert user.last_session_date == datetime.now(timezone.utc).date().isoformat()

    @pytest.mark.parametrize(
        "days",
        [
            ["2024-01-01", "2024-01-02", "2024-01-03", "2024-01-07", "2024-01-08"],
            ["2024-01-05", "2024-01-01", "2024-01-02", "2024-01-02", "2024-01-03"],
            ["2024-01-01", "2024-01-10", "2024-01-11", "2024-01-12", "2024-01-13"],
        ],
        ids=["gap_in_middle", "backwards_then_forward", "late_long_run"],
    )
    def test_longest_never_below_current(self, days):
        user = _user()
        for day in days:
            update_streak(user, day)
            assert user.longest_streak >= user.current_streak

    def test_longest_tracks_best_run(self):
        user = _user()
        for day in ["2024-01-01", "2024-01-02", "2024-01-03", "2024-01-07", "2024-01-08"]:
            update_streak(user, day)
        assert user.current_streak == 2
        assert user.longest_streak == 3


# ── invalidate_stale_streak ───────────────────────────────────────────────────


class TestInvalidateStaleStreak:
    def test_no_sessions_yet(self):
        assert invalidate_stale_streak(_user(), "2024-01-05") is False

    @pytest.mark.parametrize("today", ["2024-01-01", "2024-01-02"], ids=["same_day", "next_day"])
    def test_recent_session_keeps_streak(self, today):
        user = _user(current_streak=3, longest_streak=3, last_session_date="2024-01-01")
        assert invalidate_stale_streak(user, today) is False
        assert user.current_streak == 3

    def test_two_day_gap_zeroes_streak(self):
        user = _user(current_streak=3, longest_streak=6, last_session_date="2024-01-01")
        assert invalidate_stale_streak(user, "2024-01-03") is True
        assert user.current_streak == 0
        assert user.longest_streak == 6

    def test_already_zero_needs_no_write(self):
        user = _user(current_streak=0, longest_streak=6, last_session_date="2024-01-01")
        assert invalidate_stale_streak(user, "2024-01-09") is False


# ── decay_buddy_stats ─────────────────────────────────────────────────────────


class TestDecayBuddyStats:
    def test_example_three_point_four_hours(self):
        user = _user(
            buddy_happiness=100,
            buddy_fullness=100,
            last_buddy_interaction=NOW - timedelta(hours=3.4),
        )
        result = decay_buddy_stats(user, NOW)
        assert result.decay == 6
        assert result.happiness == 94
        assert result.fullness == 94
        assert result.hours_since_interaction == pytest.approx(3.4)

    def test_under_half_an_hour_no_decay(self):
        user = _user(buddy_happiness=80, last_buddy_interaction=NOW - timedelta(minutes=29))
        result = decay_buddy_stats(user, NOW)
        assert result.decay == 0
        assert result.happiness == 80

    def test_floors(self):
        user = _user(
            buddy_happiness=60,
            buddy_fullness=60,
            last_buddy_interaction=NOW - timedelta(days=3),
        )
        result = decay_buddy_stats(user, NOW)
        assert result.happiness == 20
        assert result.fullness == 10

    def test_value_below_floor_is_lifted_once_decay_applies(self):
        user = _user(
            buddy_happiness=15,
            buddy_fullness=7,
            last_buddy_interaction=NOW - timedelta(hours=2),
        )
        result = decay_buddy_stats(user, NOW)
        assert (result.happiness, result.fullness) == (20, 10)

    def test_value_below_floor_untouched_without_decay(self):
        user = _user(buddy_fullness=7, last_buddy_interaction=NOW - timedelta(minutes=10))
        assert decay_buddy_stats(user, NOW).fullness == 7

    def test_does_not_mutate_and_is_repeatable(self):
        user = _user(
            buddy_happiness=90,
            buddy_fullness=70,
            last_buddy_interaction=NOW - timedelta(hours=5),
        )
        first = decay_buddy_stats(user, NOW)
        second = decay_buddy_stats(user, NOW)
        assert first == second
        assert user.buddy_happiness == 90
        assert user.last_buddy_interaction == NOW - timedelta(hours=5)

    def test_monotonic_while_idle(self):
        user = _user(last_buddy_interaction=NOW)
        previous = decay_buddy_stats(user, NOW)
        for hours in range(1, 60, 7):
            current = decay_buddy_stats(user, NOW + timedelta(hours=hours))
            assert current.happiness <= previous.happiness
            assert current.fullness <= previous.fullness
            previous = current

    def test_custom_rate(self):
        user = _user(last_buddy_interaction=NOW - timedelta(hours=2))
        result = decay_buddy_stats(user, NOW, BuddySettings(buddy_decay_per_hour=5))
        assert result.happiness == 90

    def test_apply_writes_values(self):
        user = _user(last_buddy_interaction=NOW - timedelta(hours=10))
        apply_buddy_decay(user, NOW)
        assert user.buddy_happiness == 80
        assert user.buddy_fullness == 80


# ── check_unlocks ─────────────────────────────────────────────────────────────


class TestCheckUnlocks:
    def test_example(self):
        user = _user(total_kibble=150, unlocked_breeds=["a"])
        newly = check_unlocks(user, {"a": 0, "b": 100, "c": 250})
        assert newly == ["b"]
        assert set(user.unlocked_breeds) == {"a", "b"}

    def test_reported_in_threshold_order(self):
        user = _user(total_kibble=1000, unlocked_breeds=[])
        newly = check_unlocks(user, {"big": 900, "small": 10, "mid": 300})
        assert newly == ["small", "mid", "big"]

    def test_nothing_new(self):
        user = _user(total_kibble=50, unlocked_breeds=["a"])
        assert check_unlocks(user, {"a": 0, "b": 100}) == []
        assert user.unlocked_breeds == ["a"]

    def test_exact_threshold_unlocks(self):
        user = _user(total_kibble=100, unlocked_breeds=["a"])
        assert check_unlocks(user, {"a": 0, "b": 100}) == ["b"]

    def test_repeat_scan_is_empty(self):
        user = _user(total_kibble=300, unlocked_breeds=["a"])
        thresholds = {"a": 0, "b": 100, "c": 250}
        check_unlocks(user, thresholds)
        assert check_unlocks(user, thresholds) == []
